"""
Module: visibility.filter

Purpose:
    Decide, for one viewer, which catalog records are visible.
    Visibility is the conjunction of independent predicates:

    - subject: record subject is one of the viewer's allowed subjects
      (and, for questions, one of the subjects picked in the display filter)
    - chapter (questions): allowed by the viewer's chapter entitlement
      and by the display chapter filter
    - assignment: unassigned, or assigned to any alias of the viewer
    - search (questions, display only): query found in content, subject
      or chapter

    Every predicate is a pure function of (record, viewer, display).
    A record that cannot be evaluated is hidden.

Key Classes:
    - DisplayFilter: Subject/chapter multi-select and search text

Key Functions:
    - question_visible(), resource_visible(): Single-record checks
    - filter_questions(), filter_resources(): Snapshot -> visible list
    - available_chapters(): Chapter facet values

Used By:
    - visibility.view.CatalogView
    - session.PaperBuilderSession
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Iterable, List, Mapping, Optional, Union

from studybrick_toolkit.core.models import Question, Resource, Viewer, normalize_subject
from studybrick_toolkit.core.models.questions import KNOWN_SUBJECTS
from studybrick_toolkit.core.schemas import (
    ValidationError,
    validate_question_payload,
    validate_resource_payload,
)

logger = logging.getLogger(__name__)

QuestionLike = Union[Question, Mapping[str, Any]]
ResourceLike = Union[Resource, Mapping[str, Any]]


@dataclass(frozen=True)
class DisplayFilter:
    """
    Display-layer narrowing chosen by the viewer (immutable).

    This is not authorization: it is always intersected with the
    entitlement checks, never used instead of them.

    Attributes:
        subjects: Subjects picked in the multi-select; None = every
            allowed subject, () = nothing picked
        chapters: Chapters picked; () = no chapter narrowing
        search: Free-text query; "" = inactive

    Example:
        >>> display = DisplayFilter.default_for(viewer)
        >>> display = display.with_subjects(["physics"])
        >>> display.chapters
        ()
    """

    subjects: Optional[tuple[str, ...]] = None
    chapters: tuple[str, ...] = ()
    search: str = ""

    def __post_init__(self) -> None:
        if self.subjects is not None:
            object.__setattr__(
                self,
                "subjects",
                tuple(dict.fromkeys(normalize_subject(s) for s in self.subjects if s)),
            )
        object.__setattr__(self, "chapters", tuple(dict.fromkeys(c for c in self.chapters if c)))
        object.__setattr__(self, "search", (self.search or "").strip())

    @classmethod
    def default_for(cls, viewer: Optional[Viewer]) -> DisplayFilter:
        """All of the viewer's allowed subjects, no chapter narrowing, no search."""
        if viewer is None:
            return cls(subjects=())
        if viewer.is_admin:
            return cls(subjects=KNOWN_SUBJECTS)
        return cls(subjects=viewer.entitlement.allowed_subjects)

    def with_subjects(self, subjects: Iterable[str]) -> DisplayFilter:
        """
        Change the subject multi-select.

        The chapter selection is reset because the chapter facet is
        computed from the currently selected subjects.
        """
        return replace(self, subjects=tuple(subjects), chapters=())

    def with_chapters(self, chapters: Iterable[str]) -> DisplayFilter:
        return replace(self, chapters=tuple(chapters))

    def with_search(self, search: str) -> DisplayFilter:
        return replace(self, search=search)

    def allows_subject(self, subject: str) -> bool:
        return self.subjects is None or normalize_subject(subject) in self.subjects

    def allows_chapter(self, chapter: str) -> bool:
        return not self.chapters or chapter in self.chapters

    def matches_search(self, question: Question) -> bool:
        if not self.search:
            return True
        query = self.search.lower()
        return (
            query in question.content.lower()
            or query in question.subject.lower()
            or query in question.chapter.lower()
        )

    @property
    def subject_list(self) -> tuple[str, ...]:
        """Picked subjects in order (empty when unset)."""
        return self.subjects or ()


# ─────────────────────────────────────────────────────────────────────────────
# Record coercion
# ─────────────────────────────────────────────────────────────────────────────

def _as_question(record: QuestionLike) -> Question:
    if isinstance(record, Question):
        return record
    validate_question_payload(record)
    return Question.from_dict(dict(record))


def _as_resource(record: ResourceLike) -> Resource:
    if isinstance(record, Resource):
        return record
    validate_resource_payload(record)
    return Resource.from_dict(dict(record))


# ─────────────────────────────────────────────────────────────────────────────
# Predicates
# ─────────────────────────────────────────────────────────────────────────────

def _entitled(subject: str, assigned_to: Optional[str], viewer: Viewer) -> bool:
    """Subject and assignment checks shared by questions and resources."""
    if not viewer.entitlement.allows_subject(subject):
        return False
    return assigned_to is None or viewer.identity.matches(assigned_to)


def _question_visible(question: Question, viewer: Viewer, display: Optional[DisplayFilter]) -> bool:
    if not viewer.is_admin:
        if not _entitled(question.subject, question.assigned_to, viewer):
            return False
        if not viewer.entitlement.allows_chapter(question.chapter):
            return False
    if display is None:
        return True
    return (
        display.allows_subject(question.subject)
        and display.allows_chapter(question.chapter)
        and display.matches_search(question)
    )


def question_visible(
    record: QuestionLike,
    viewer: Optional[Viewer],
    display: Optional[DisplayFilter] = None,
) -> bool:
    """
    Whether ``viewer`` may see the question.

    Admins bypass the entitlement checks; the display filter, when given,
    still narrows what they see. A missing viewer sees nothing. Malformed
    records are hidden.

    Args:
        record: Question or raw catalog payload
        viewer: Current viewer, or None while signed out
        display: Optional display-layer narrowing
    """
    if viewer is None:
        return False
    try:
        return _question_visible(_as_question(record), viewer, display)
    except (ValidationError, KeyError, ValueError, TypeError, AttributeError) as e:
        logger.debug(f"Hiding unreadable question {_record_id(record)}: {e}")
        return False


def resource_visible(record: ResourceLike, viewer: Optional[Viewer]) -> bool:
    """Whether ``viewer`` may see the study material (no chapter rule)."""
    if viewer is None:
        return False
    try:
        resource = _as_resource(record)
        return viewer.is_admin or _entitled(resource.subject, resource.assigned_to, viewer)
    except (ValidationError, KeyError, ValueError, TypeError, AttributeError) as e:
        logger.debug(f"Hiding unreadable resource {_record_id(record)}: {e}")
        return False


# ─────────────────────────────────────────────────────────────────────────────
# Snapshot filtering
# ─────────────────────────────────────────────────────────────────────────────

def filter_questions(
    records: Iterable[QuestionLike],
    viewer: Optional[Viewer],
    display: Optional[DisplayFilter] = None,
) -> List[Question]:
    """
    Visible questions from a catalog snapshot, in snapshot order.

    Each record is parsed once; unreadable records are skipped.
    """
    if viewer is None:
        return []
    visible: List[Question] = []
    hidden = 0
    for record in records:
        try:
            question = _as_question(record)
        except (ValidationError, KeyError, ValueError, TypeError, AttributeError) as e:
            logger.debug(f"Hiding unreadable question {_record_id(record)}: {e}")
            hidden += 1
            continue
        if _question_visible(question, viewer, display):
            visible.append(question)
        else:
            hidden += 1
    logger.debug(f"Visible questions for {viewer.identity.primary!r}: {len(visible)} shown, {hidden} hidden")
    return visible


def filter_resources(
    records: Iterable[ResourceLike],
    viewer: Optional[Viewer],
) -> List[Resource]:
    """Visible study materials from a catalog snapshot, in snapshot order."""
    if viewer is None:
        return []
    visible: List[Resource] = []
    for record in records:
        try:
            resource = _as_resource(record)
        except (ValidationError, KeyError, ValueError, TypeError, AttributeError) as e:
            logger.debug(f"Hiding unreadable resource {_record_id(record)}: {e}")
            continue
        if viewer.is_admin or _entitled(resource.subject, resource.assigned_to, viewer):
            visible.append(resource)
    return visible


def available_chapters(
    records: Iterable[QuestionLike],
    viewer: Optional[Viewer],
    display: Optional[DisplayFilter] = None,
) -> List[str]:
    """
    Chapter facet values, sorted.

    Drawn only from questions the viewer can see in the currently
    selected subjects (ignoring the chapter selection and search, which
    the facet itself drives) and limited to the allowed chapters.
    """
    if viewer is None:
        return []
    subjects_only = DisplayFilter(subjects=display.subjects) if display is not None else None
    chapters = {
        question.chapter
        for question in filter_questions(records, viewer, subjects_only)
        if question.chapter
    }
    return sorted(chapters)


def _record_id(record: Any) -> str:
    if isinstance(record, (Question, Resource)):
        return record.id
    if isinstance(record, Mapping):
        return repr(record.get("id"))
    return repr(record)
