"""Unit tests for derived paper fields."""

import pytest

from studybrick_toolkit.paper import PaperSummary, estimated_minutes, subject_line, total_marks


class TestDerivedFields:
    @pytest.mark.parametrize("count", [0, 1, 7, 100])
    def test_when_count_given_then_three_minutes_and_four_marks_each(self, count):
        """Time is 3n minutes and marks are 4n."""
        assert estimated_minutes(count) == 3 * count
        assert total_marks(count) == 4 * count

    def test_when_count_negative_then_raises(self):
        with pytest.raises(ValueError):
            total_marks(-1)

    def test_when_subjects_repeated_then_distinct_upper_cased(self):
        assert subject_line(["physics", "Maths", "physics"]) == "PHYSICS, MATHS"

    def test_when_summary_built_then_subjects_from_display_not_selection(self):
        """The subject line reflects the display filter."""
        summary = PaperSummary.from_selection(5, ["chemistry"])

        assert summary == PaperSummary(question_count=5, minutes=15, marks=20, subjects="CHEMISTRY")
