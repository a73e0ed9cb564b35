"""
Module: selection

Purpose:
    Provides SelectionEntry, PaperMetadata and PaperDraft - the data the
    viewer builds up while assembling a paper. Entries are point-in-time
    snapshots of a question: what gets exported is the content as it was
    when the viewer picked it, even if the catalog record changes later.
    ``captured_at`` makes that snapshot explicit.

Key Classes:
    - SelectionEntry: Question snapshot + capture time
    - PaperMetadata: Institute name and exam title
    - PaperDraft: Named, ordered, deduplicated list of entries

Dependencies:
    - dataclasses (std)
    - .questions.Question

Used By:
    - drafts.store.SelectionStore
    - paper.composer: Print layout
    - export.pipeline: Export
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional

from .questions import Question


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SelectionEntry:
    """
    A question as captured at selection time.

    Attributes:
        question: Snapshot of the catalog record
        captured_at: When the snapshot was taken (UTC)
    """

    question: Question
    captured_at: datetime = field(default_factory=utc_now)

    @property
    def question_id(self) -> str:
        return self.question.id


@dataclass(frozen=True)
class PaperMetadata:
    """
    Free-text paper header fields.

    Blank values are allowed and simply render blank.
    """

    institute_name: str = ""
    exam_title: str = ""


@dataclass(frozen=True)
class PaperDraft:
    """
    Named working paper (immutable).

    Attributes:
        name: Draft name, unique per device
        entries: Ordered selection entries
        metadata: Paper header fields
        created_at: Draft creation time (UTC)
        updated_at: Last mutation time (UTC)

    Invariants:
        - No two entries share a question id
        - Order of entries is the paper order

    Example:
        >>> draft = PaperDraft(name="default")
        >>> draft.question_ids
        ()
    """

    name: str
    entries: tuple[SelectionEntry, ...] = ()
    metadata: PaperMetadata = field(default_factory=PaperMetadata)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Validate draft on construction."""
        if not self.name or not self.name.strip():
            raise ValueError("Draft name must be non-empty")
        ids = [entry.question_id for entry in self.entries]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate questions in draft {self.name!r}")

    @property
    def question_ids(self) -> tuple[str, ...]:
        return tuple(entry.question_id for entry in self.entries)

    @property
    def is_empty(self) -> bool:
        return not self.entries

    def with_entries(self, entries: tuple[SelectionEntry, ...]) -> PaperDraft:
        """Copy with new entries and a bumped ``updated_at``."""
        return replace(self, entries=tuple(entries), updated_at=utc_now())

    def with_metadata(self, metadata: PaperMetadata) -> PaperDraft:
        return replace(self, metadata=metadata, updated_at=utc_now())

    def __repr__(self) -> str:
        return f"PaperDraft({self.name!r}, entries={len(self.entries)})"
