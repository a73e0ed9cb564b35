"""
Derived paper fields.

Pure functions of the selection length (and the display filter's
subjects); nothing here is stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from studybrick_toolkit.core.models import normalize_subject

MINUTES_PER_QUESTION = 3
MARKS_PER_QUESTION = 4


def _check_count(count: int) -> int:
    if count < 0:
        raise ValueError(f"Question count must be non-negative: {count}")
    return count


def estimated_minutes(count: int) -> int:
    return MINUTES_PER_QUESTION * _check_count(count)


def total_marks(count: int) -> int:
    return MARKS_PER_QUESTION * _check_count(count)


def subject_line(subjects: Iterable[str]) -> str:
    """
    Distinct subjects in first-seen order, joined and upper-cased.

    Example:
        >>> subject_line(["physics", "Maths", "physics"])
        'PHYSICS, MATHS'
    """
    distinct = dict.fromkeys(normalize_subject(s) for s in subjects if normalize_subject(s))
    return ", ".join(distinct).upper()


@dataclass(frozen=True)
class PaperSummary:
    """Header figures for a paper of ``question_count`` questions."""

    question_count: int
    minutes: int
    marks: int
    subjects: str

    @classmethod
    def from_selection(cls, count: int, display_subjects: Iterable[str]) -> PaperSummary:
        """
        Build the summary for a selection.

        The subject line comes from the current display filter, not from
        the subjects of the selected questions.
        """
        return cls(
            question_count=count,
            minutes=estimated_minutes(count),
            marks=total_marks(count),
            subjects=subject_line(display_subjects),
        )
