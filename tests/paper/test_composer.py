"""
Unit Tests for the Print Layout Composer

Tests for block composition, numbering and layout height.
"""

import pytest

from studybrick_toolkit.core.models import PaperMetadata, QuestionType, SelectionEntry
from studybrick_toolkit.paper import BlockKind, PaperConfig, PaperSummary, compose_paper
from studybrick_toolkit.paper.composer import compose_footer, compose_header, compose_question


@pytest.fixture
def config():
    return PaperConfig()


@pytest.fixture
def metadata():
    return PaperMetadata("Acme Academy", "Unit 3")


def _texts(block):
    return [run.text for run in block.runs]


class TestHeader:
    """Tests for the header block."""

    def test_when_composed_then_template_fields_present(self, metadata, config):
        summary = PaperSummary.from_selection(2, ["physics", "maths"])

        header = compose_header(metadata, summary, config)

        texts = _texts(header)
        assert texts[0] == "ACME ACADEMY"
        assert header.runs[0].bold
        assert ["Exam:", " Unit 3", "Subject:", " PHYSICS, MATHS"] == texts[1:5]
        assert ["Time:", " 6 Mins", "Max Marks:", " 8"] == texts[5:9]
        assert header.rules[0].width == 2

    def test_when_metadata_blank_then_fields_blank(self, config):
        """Blank metadata renders blank, not placeholder text."""
        header = compose_header(PaperMetadata(), PaperSummary.from_selection(0, []), config)

        texts = _texts(header)
        assert texts[0] == ""
        assert " " in texts

    def test_when_right_aligned_then_ends_at_content_edge(self, metadata, config):
        header = compose_header(metadata, PaperSummary.from_selection(1, ["maths"]), config)

        subject_label = next(r for r in header.runs if r.text == "Subject:")
        assert config.padding < subject_label.x < config.padding + config.content_width


class TestQuestionBlock:
    """Tests for question blocks."""

    def test_when_mcq_then_number_text_and_lettered_options(self, make_question, config):
        question = make_question("q1", content="Speed is $v^2$?", options=("one", "two", "three"))

        block = compose_question(question, 4, config)

        texts = _texts(block)
        assert texts[0] == "4."
        assert "Speed is v²?" in texts
        assert [t for t in texts if t.startswith("(")] == ["(a)", "(b)", "(c)"]
        assert block.question_id == "q1"
        assert block.number == 4

    def test_when_options_in_grid_then_two_columns(self, make_question, config):
        block = compose_question(make_question("q1"), 1, config)

        labels = {r.text: r for r in block.runs if r.text in ("(a)", "(b)", "(c)", "(d)")}
        assert labels["(a)"].y == labels["(b)"].y
        assert labels["(a)"].x == labels["(c)"].x
        assert labels["(c)"].y > labels["(a)"].y

    def test_when_long_content_then_wrapped_and_taller(self, make_question, config):
        short = compose_question(make_question("q1", content="Short"), 1, config)
        long = compose_question(make_question("q2", content="word " * 200), 1, config)

        assert long.height > short.height
        assert len(long.runs) > len(short.runs)

    def test_when_integer_question_then_no_option_runs(self, make_question, config):
        question = make_question("q1", type=QuestionType.INTEGER, correct_answer="4")

        block = compose_question(question, 1, config)

        assert _texts(block)[0] == "1."
        assert not any(t.startswith("(a)") for t in _texts(block))


class TestComposePaper:
    """Tests for the whole layout."""

    def test_when_composed_then_blocks_in_order_and_numbered(self, make_question, metadata, config):
        entries = [SelectionEntry(make_question(qid)) for qid in ("c", "a", "b")]

        layout = compose_paper(entries, metadata, PaperSummary.from_selection(3, ["physics"]), config)

        kinds = [b.kind for b in layout.blocks]
        assert kinds[0] is BlockKind.HEADER
        assert kinds[1] is BlockKind.INSTRUCTIONS
        assert kinds[-1] is BlockKind.FOOTER
        assert layout.question_ids == ("c", "a", "b")
        assert [b.number for b in layout.blocks if b.kind is BlockKind.QUESTION] == [1, 2, 3]
        assert layout.width == config.page_width

    def test_when_few_questions_then_minimum_height(self, make_question, metadata, config):
        layout = compose_paper([make_question("a")], metadata, PaperSummary.from_selection(1, []), config)

        assert layout.height == config.min_height

    def test_when_many_questions_then_height_grows(self, make_question, metadata, config):
        questions = [make_question(f"q{i}") for i in range(30)]

        layout = compose_paper(questions, metadata, PaperSummary.from_selection(30, []), config)

        assert layout.height > config.min_height
        assert layout.height == layout.placements[-1].bottom + config.padding

    def test_when_composed_twice_then_identical(self, make_question, metadata, config):
        """Same inputs, same layout."""
        questions = [make_question("a"), make_question("b")]
        summary = PaperSummary.from_selection(2, ["physics"])

        assert compose_paper(questions, metadata, summary, config) == compose_paper(
            questions, metadata, summary, config
        )

    def test_when_footer_composed_then_generated_by_line(self, config):
        footer = compose_footer(config)

        assert _texts(footer) == ["Generated by StudyBrick Exam Engine"]
        assert footer.runs[0].fill == "#666666"
