"""
Unit Tests for the Command-Line Interface

Tests for the parse, visible, draft and export subcommands run through
main() against temporary catalog, viewer and data files.
"""

import json

import fitz
import pytest

from studybrick_toolkit import cli
from studybrick_toolkit.catalog import QUESTIONS


@pytest.fixture(autouse=True)
def quiet_logging(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda verbose=False: None)


@pytest.fixture
def catalog_file(tmp_path, question_record):
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps({
        QUESTIONS: [
            question_record("p1", "physics"),
            question_record("m1", "maths", "Algebra"),
            question_record("c1", "chemistry", "Bonding"),
            question_record("a1", "physics", "Forces", assignedTo="user-1"),
        ],
        "studyBricks": [
            {"id": "r1", "title": "Kinematics notes", "subject": "physics", "downloadUrl": "https://x/r1.pdf"},
        ],
        "users": [{"id": "user-1", "name": "Sam"}],
    }), encoding="utf-8")
    return path


@pytest.fixture
def student_file(tmp_path):
    path = tmp_path / "student.json"
    path.write_text(json.dumps({
        "id": "user-1",
        "uid": "uid-1",
        "email": "s@example.com",
        "role": "student",
        "allowedSubjects": ["physics", "maths"],
    }), encoding="utf-8")
    return path


@pytest.fixture
def admin_file(tmp_path):
    path = tmp_path / "admin.json"
    path.write_text(json.dumps({"id": "admin-1", "uid": "uid-a", "role": "admin"}), encoding="utf-8")
    return path


@pytest.fixture
def run(data_dir):
    """Run main() with an isolated data directory."""

    def _run(*argv):
        return cli.main(["--data-dir", str(data_dir), *[str(a) for a in argv]])

    return _run


class TestParse:
    """Tests for `studybrick parse`."""

    def test_when_questions_pasted_then_appended_to_catalog(self, run, tmp_path, capsys):
        raw = tmp_path / "raw.txt"
        raw.write_text("1. 2+2?\n(A) 3\n(B) 4\n2. Define force.", encoding="utf-8")
        output = tmp_path / "out.json"

        code = run("parse", raw, "--subject", "Physics", "--chapter", "Forces", "-o", output)

        assert code == 0
        assert "Successfully added 2 questions!" in capsys.readouterr().out
        records = json.loads(output.read_text(encoding="utf-8"))[QUESTIONS]
        assert [r["content"] for r in records] == ["2+2?", "Define force."]
        assert all(r["subject"] == "physics" and r["id"] for r in records)

    def test_when_catalog_exists_then_other_collections_kept(self, run, tmp_path, catalog_file):
        raw = tmp_path / "raw.txt"
        raw.write_text("1. New question", encoding="utf-8")

        run("parse", raw, "--subject", "maths", "--chapter", "Algebra", "-o", catalog_file)

        document = json.loads(catalog_file.read_text(encoding="utf-8"))
        assert len(document[QUESTIONS]) == 5
        assert document["studyBricks"][0]["id"] == "r1"
        assert document["users"][0]["name"] == "Sam"

    def test_when_nothing_parsed_then_exit_1(self, run, tmp_path, capsys):
        raw = tmp_path / "raw.txt"
        raw.write_text("no numbered lines here", encoding="utf-8")

        code = run("parse", raw, "--subject", "maths", "--chapter", "Algebra", "-o", tmp_path / "o.json")

        assert code == 1
        assert "No questions found. Check the format." in capsys.readouterr().out


class TestVisible:
    """Tests for `studybrick visible`."""

    def test_when_student_then_only_entitled_questions_listed(self, run, catalog_file, student_file, capsys):
        code = run("visible", catalog_file, student_file)

        out = capsys.readouterr().out
        assert code == 0
        assert " p1 " in out and " m1 " in out and " a1 " in out
        assert " c1 " not in out
        assert "3 question(s)" in out

    def test_when_subject_and_chapter_given_then_narrowed(self, run, catalog_file, student_file, capsys):
        run("visible", catalog_file, student_file, "--subject", "physics", "--chapter", "Forces")

        out = capsys.readouterr().out
        assert " a1 " in out
        assert " p1 " not in out
        assert "1 question(s)" in out

    def test_when_resources_requested_then_listed(self, run, catalog_file, student_file, capsys):
        run("visible", catalog_file, student_file, "--resources")

        assert "Kinematics notes [physics] https://x/r1.pdf" in capsys.readouterr().out

    def test_when_admin_listing_then_assignee_names_shown(self, run, catalog_file, admin_file, capsys):
        code = run("visible", catalog_file, admin_file, "--admin", "--assigned", "user-1")

        out = capsys.readouterr().out
        assert code == 0
        assert " a1 " in out
        assert "-> Sam" in out
        assert "1 question(s)" in out

    def test_when_viewer_file_missing_then_exit_2(self, run, catalog_file, tmp_path, capsys):
        code = run("visible", catalog_file, tmp_path / "nobody.json")

        assert code == 2
        assert "Viewer file not found" in capsys.readouterr().err


class TestDraft:
    """Tests for `studybrick draft`."""

    def test_when_added_then_shown_in_order(self, run, catalog_file, student_file, capsys):
        run("draft", "add", catalog_file, student_file, "m1", "p1")
        capsys.readouterr()

        code = run("draft", "show")

        out = capsys.readouterr().out
        assert code == 0
        assert out.index(" m1 ") < out.index(" p1 ")
        assert "2 of 100 question(s)" in out

    def test_when_hidden_question_added_then_exit_1(self, run, catalog_file, student_file, capsys):
        code = run("draft", "add", catalog_file, student_file, "c1")

        assert code == 1
        assert "Question is not available" in capsys.readouterr().out

    def test_when_moved_then_positions_are_one_based(self, run, catalog_file, student_file, capsys):
        run("draft", "add", catalog_file, student_file, "p1", "m1", "a1")
        capsys.readouterr()

        run("draft", "move", "3", "1")

        lines = [line for line in capsys.readouterr().out.splitlines() if ". " in line]
        assert [line.split()[1] for line in lines] == ["a1", "p1", "m1"]

    def test_when_removed_then_gone(self, run, catalog_file, student_file, capsys):
        run("draft", "add", catalog_file, student_file, "p1", "m1")
        capsys.readouterr()

        run("draft", "remove", "p1")

        out = capsys.readouterr().out
        assert "Question removed" in out
        assert "1 of 100 question(s)" in out

    def test_when_named_draft_then_listed_and_discarded(self, run, catalog_file, student_file, capsys):
        run("draft", "--name", "mock-2", "add", catalog_file, student_file, "p1")
        capsys.readouterr()

        run("draft", "list")
        assert "mock-2" in capsys.readouterr().out

        run("draft", "--name", "mock-2", "discard")
        assert "Discarded draft 'mock-2'" in capsys.readouterr().out


class TestExport:
    """Tests for `studybrick export`."""

    def test_when_draft_empty_then_exit_1(self, run, catalog_file, student_file, tmp_path, capsys):
        code = run("export", catalog_file, student_file, "-o", tmp_path / "out")

        assert code == 1
        assert "Add questions before exporting" in capsys.readouterr().out

    def test_when_exported_then_pdf_written(self, run, catalog_file, student_file, tmp_path, capsys):
        run("draft", "add", catalog_file, student_file, "p1", "m1")
        out_dir = tmp_path / "out"

        code = run(
            "export", catalog_file, student_file,
            "--institute", "Acme Academy", "--title", "Unit 3", "-o", out_dir,
        )

        assert code == 0
        assert "PDF saved successfully!" in capsys.readouterr().out
        with fitz.open(str(out_dir / "studybrick-paper.pdf")) as doc:
            assert doc.page_count == 1
