"""
Module: questions

Purpose:
    Provides the Question dataclass - the catalog record that viewers
    filter, select and export. Immutable; MCQ invariants are checked on
    construction so a Question in memory is always renderable.

Key Functions:
    - normalize_subject(): Case-insensitive subject key
    - option_label(): Presentational option letter (a/b/c/d or A/B/C/D)
    - Question.to_dict() / Question.from_dict(): Serialization

Dependencies:
    - dataclasses (std)
    - enum (std)

Used By:
    - core.models.selection.SelectionEntry
    - core.utils.serialization
    - visibility.filter
    - paper.composer
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


KNOWN_SUBJECTS: tuple[str, ...] = ("maths", "physics", "chemistry")


def normalize_subject(value: Optional[str]) -> str:
    """Lower-cased, stripped subject key. ``None`` becomes ``""``."""
    return (value or "").strip().lower()


def option_label(index: int, *, upper: bool = False) -> str:
    """
    Letter for the option at ``index`` (zero-based).

    Example:
        >>> option_label(0)
        'a'
        >>> option_label(3, upper=True)
        'D'
    """
    if index < 0:
        raise ValueError(f"option index must be non-negative: {index}")
    base = ord("A") if upper else ord("a")
    return chr(base + index)


class Difficulty(Enum):
    """Question difficulty as chosen by the administrator."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"

    @classmethod
    def parse(cls, value: Union[str, Difficulty, None]) -> Difficulty:
        """Case-insensitive lookup, defaulting to MEDIUM when absent."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.MEDIUM
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValueError(f"Unknown difficulty: {value!r}")


class QuestionType(Enum):
    """Answer format of a question."""

    MCQ = "MCQ"
    INTEGER = "Integer"

    @classmethod
    def parse(cls, value: Union[str, QuestionType, None]) -> QuestionType:
        """Case-insensitive lookup, defaulting to MCQ when absent."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.MCQ
        for member in cls:
            if member.value.lower() == str(value).strip().lower():
                return member
        raise ValueError(f"Unknown question type: {value!r}")


@dataclass(frozen=True)
class Question:
    """
    Exam question record (immutable).

    Attributes:
        id: Catalog document id
        subject: Normalized subject key like "physics"
        chapter: Free-text chapter label
        difficulty: Easy/Medium/Hard
        type: MCQ or Integer
        content: Question text, may embed $...$ math markup
        options: Option texts (MCQ only)
        correct_answer: Index into options (MCQ) or raw answer text (Integer)
        assigned_to: Viewer reference, None = globally visible
        created_by: Optional author reference

    Invariants:
        - MCQ questions have at least one option
        - MCQ correct_answer is a valid index into options

    Example:
        >>> q = Question(
        ...     id="q1", subject="maths", chapter="Calculus",
        ...     difficulty=Difficulty.EASY, type=QuestionType.MCQ,
        ...     content="d/dx of $x^2$?", options=("2x", "x", "2", "0"),
        ...     correct_answer=0,
        ... )
        >>> q.correct_option
        '2x'
    """

    id: str
    subject: str
    chapter: str
    difficulty: Difficulty
    type: QuestionType
    content: str
    options: tuple[str, ...] = ()
    correct_answer: Union[int, str, None] = None
    assigned_to: Optional[str] = None
    created_by: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate question on construction."""
        if not self.id:
            raise ValueError("Question id must be non-empty")
        # Normalize in place; frozen dataclasses need object.__setattr__
        object.__setattr__(self, "subject", normalize_subject(self.subject))
        object.__setattr__(self, "options", tuple(self.options or ()))

        if self.type is QuestionType.MCQ:
            if not self.options:
                raise ValueError(f"MCQ question {self.id} has no options")
            answer = self.correct_answer
            if isinstance(answer, bool) or not isinstance(answer, int):
                raise ValueError(
                    f"MCQ question {self.id} needs an integer correct_answer: {answer!r}"
                )
            if not 0 <= answer < len(self.options):
                raise ValueError(
                    f"correct_answer {answer} out of range for {len(self.options)} options "
                    f"in question {self.id}"
                )

    @property
    def is_mcq(self) -> bool:
        return self.type is QuestionType.MCQ

    @property
    def correct_option(self) -> Optional[str]:
        """Text of the correct option for MCQ, raw answer for Integer."""
        if self.is_mcq:
            return self.options[self.correct_answer]  # type: ignore[index]
        return None if self.correct_answer is None else str(self.correct_answer)

    # ─────────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize to the catalog payload shape.

        Returns:
            Dict with camelCase keys as stored by the catalog
        """
        return {
            "id": self.id,
            "subject": self.subject,
            "chapter": self.chapter,
            "difficulty": self.difficulty.value,
            "type": self.type.value,
            "content": self.content,
            "options": list(self.options) if self.options else None,
            "correct": self.correct_answer,
            "assignedTo": self.assigned_to,
            "createdBy": self.created_by,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Question:
        """
        Deserialize from a catalog payload.

        Accepts both ``correct`` and ``correctAnswer`` keys. An empty
        ``assignedTo`` string is treated as unassigned.

        Raises:
            KeyError: If id or content is missing
            ValueError: If enums or MCQ invariants are invalid
        """
        qtype = QuestionType.parse(data.get("type"))
        answer = data.get("correct", data.get("correctAnswer"))
        if qtype is QuestionType.MCQ:
            if answer is None:
                answer = 0
            elif isinstance(answer, str) and answer.strip().isdigit():
                answer = int(answer.strip())
        return cls(
            id=str(data["id"]),
            subject=data.get("subject") or "",
            chapter=data.get("chapter") or "",
            difficulty=Difficulty.parse(data.get("difficulty")),
            type=qtype,
            content=data["content"],
            options=tuple(str(opt) for opt in (data.get("options") or ())),
            correct_answer=answer,
            assigned_to=data.get("assignedTo") or None,
            created_by=data.get("createdBy") or None,
        )

    def __repr__(self) -> str:
        """Concise representation for debugging."""
        return (
            f"Question({self.id!r}, subject={self.subject!r}, "
            f"chapter={self.chapter!r}, type={self.type.value})"
        )
