"""
Unit Tests for the Paper Builder Session

Tests for adding visible questions, persistence across sessions, the
derived summary and the export hand-off.
"""

import logging
from queue import Queue
from unittest.mock import MagicMock

import pytest
from PIL import Image

from studybrick_toolkit.catalog import QUESTIONS, InMemoryCatalogStore, StaticIdentityProvider
from studybrick_toolkit.config import EngineConfig
from studybrick_toolkit.core.models import PaperMetadata
from studybrick_toolkit.drafts import NoticeLevel
from studybrick_toolkit.export import ExportPipeline
from studybrick_toolkit.session import PaperBuilderSession
from studybrick_toolkit.visibility import DisplayFilter


@pytest.fixture
def catalog(question_record):
    return InMemoryCatalogStore({
        QUESTIONS: [
            question_record("p1", "physics"),
            question_record("m1", "maths", "Algebra"),
            question_record("c1", "chemistry", "Bonding"),
            question_record("x1", "physics", assignedTo="someone-else"),
        ]
    })


@pytest.fixture
def config(data_dir):
    return EngineConfig(data_dir=data_dir, max_questions_per_paper=3)


@pytest.fixture
def session(catalog, student, config, notifier):
    with PaperBuilderSession(catalog, StaticIdentityProvider(student), config, notifier) as session:
        yield session


class TestSelection:
    """Tests for building the selection from the visible set."""

    def test_when_visible_then_added(self, session):
        assert session.add("p1")
        assert session.add("m1")

        assert [e.question.id for e in session.selection.entries] == ["p1", "m1"]

    def test_when_hidden_then_refused_with_notice(self, session, notifier):
        """Unentitled and foreign-assigned questions cannot be added."""
        notifier.drain()

        assert not session.add("c1")
        assert not session.add("x1")
        assert not session.add("missing")

        notices = notifier.drain()
        assert {n.message for n in notices} == {"Question is not available"}
        assert all(n.level is NoticeLevel.ERROR for n in notices)
        assert len(session.selection) == 0

    def test_when_display_narrowed_then_other_subjects_refused(self, session):
        session.set_display_filter(DisplayFilter(subjects=("maths",)))

        assert not session.add("p1")
        assert session.add("m1")

    def test_when_question_deleted_after_adding_then_kept_as_captured(self, session, catalog):
        session.add("p1")

        catalog.delete(QUESTIONS, "p1")

        assert session.visible.question("p1") is None
        assert [e.question.id for e in session.selection.entries] == ["p1"]

    def test_when_reordered_then_paper_order_changes(self, session):
        for qid in ("p1", "m1"):
            session.add(qid)

        assert session.reorder(0, 1)

        assert [row.question_id for row in session.interactive_rows()] == ["m1", "p1"]

    def test_when_reopened_then_selection_restored(self, catalog, student, config):
        with PaperBuilderSession(catalog, StaticIdentityProvider(student), config) as first:
            first.add("p1")
            first.set_metadata(exam_title="Unit 3")

        with PaperBuilderSession(catalog, StaticIdentityProvider(student), config) as second:
            assert [e.question.id for e in second.selection.entries] == ["p1"]
            assert second.selection.metadata.exam_title == "Unit 3"


class TestPaper:
    """Tests for header fields and export."""

    def test_when_new_draft_then_metadata_from_config(self, catalog, student, data_dir):
        config = EngineConfig(data_dir=data_dir, default_institute_name="Acme", default_exam_title="Quiz")

        with PaperBuilderSession(catalog, StaticIdentityProvider(student), config) as session:
            assert session.selection.metadata == PaperMetadata("Acme", "Quiz")

    def test_when_metadata_partly_set_then_other_field_kept(self, session):
        before = session.selection.metadata

        metadata = session.set_metadata(institute_name="Acme")

        assert metadata == PaperMetadata("Acme", before.exam_title)

    def test_when_two_selected_then_summary_derived(self, session):
        for qid in ("p1", "m1"):
            session.add(qid)

        summary = session.summary()

        assert summary.question_count == 2
        assert summary.minutes == 6
        assert summary.marks == 8
        assert summary.subjects == "PHYSICS, MATHS"

    def test_when_only_search_set_then_subject_line_unchanged(self, session):
        """A search-only display filter still heads the paper with every allowed subject."""
        session.add("p1")
        before = session.summary().subjects

        session.set_display_filter(DisplayFilter(search="Question"))

        assert before == "PHYSICS, MATHS"
        assert session.summary().subjects == before

    def test_when_exported_then_selection_handed_to_pipeline(self, catalog, student, config, notifier, tmp_path):
        writer = MagicMock(return_value=1)
        rasterizer = MagicMock(return_value=Image.new("RGB", (10, 10)))
        pipeline = ExportPipeline(notifier, rasterizer=rasterizer, writer=writer, confirm=MagicMock())

        with PaperBuilderSession(
            catalog, StaticIdentityProvider(student), config, notifier, pipeline=pipeline,
        ) as session:
            session.add("p1")
            result = session.export(tmp_path)

        assert result.success
        assert result.question_count == 1
        layout = rasterizer.call_args.args[0]
        assert layout.question_ids == ("p1",)
        assert writer.call_args.args[1] == tmp_path / "studybrick-paper.pdf"

    def test_when_closed_then_view_closed(self, catalog, student, config):
        session = PaperBuilderSession(catalog, StaticIdentityProvider(student), config)

        session.close()

        assert session.view.closed


class TestLogForwarding:
    """Tests for forwarding engine log lines to a front-end queue."""

    def test_when_log_queue_given_then_lines_forwarded_until_close(self, catalog, student, config):
        log_queue = Queue()

        with PaperBuilderSession(
            catalog, StaticIdentityProvider(student), config, log_queue=log_queue,
        ):
            pass
        forwarded = []
        while not log_queue.empty():
            forwarded.append(log_queue.get_nowait())

        assert ("Session opened on draft 'default' (0 question(s) selected)", "INFO") in forwarded

        logging.getLogger("studybrick_toolkit.session").warning("after close")
        assert log_queue.empty()
