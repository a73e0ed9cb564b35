"""
Module: drafts.store

Purpose:
    The Selection Store: ordered, deduplicated list of questions chosen
    for the paper being built. Backed by one named draft; every mutation
    is persisted synchronously before it becomes visible, so a reload
    always reconstructs the same order and membership.

    Entries are snapshots. A question that later becomes invisible (or
    is edited or deleted in the catalog) stays in the selection, as it
    was captured, until the viewer removes it.

Key Classes:
    - SelectionStore: add/remove/reorder/move/clear

Dependencies:
    - drafts.repository: Persistence
    - drafts.notifications: Transient acknowledgments

Used By:
    - session.PaperBuilderSession
    - cli: ``studybrick draft``
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterator, List, Optional, Tuple

from studybrick_toolkit.core.models import PaperDraft, PaperMetadata, Question, SelectionEntry
from studybrick_toolkit.core.models.selection import utc_now

from .notifications import Notifier
from .repository import DraftError, DraftRepository

logger = logging.getLogger(__name__)

DEFAULT_MAX_QUESTIONS = 100


class SelectionStore:
    """
    Ordered selection for one named draft.

    Duplicate adds and removals of absent ids are silent no-ops. Adds and
    removals that change the selection emit a notice; reorders do not.

    Example:
        >>> store = SelectionStore(DraftRepository(tmp), "default")
        >>> store.add(q_a); store.add(q_b); store.add(q_c)
        >>> store.reorder(0, 2)
        >>> store.question_ids
        ('b', 'c', 'a')
    """

    def __init__(
        self,
        repository: DraftRepository,
        draft_name: str = "default",
        notifier: Optional[Notifier] = None,
        max_questions: int = DEFAULT_MAX_QUESTIONS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        if max_questions <= 0:
            raise ValueError(f"max_questions must be positive: {max_questions}")
        self._repository = repository
        self._notifier = notifier or Notifier()
        self._max_questions = max_questions
        self._clock = clock
        self._listeners: List[Callable[[PaperDraft], None]] = []
        self._draft = repository.load(draft_name)
        if len(self._draft.entries) > max_questions:
            logger.warning(
                f"Draft {draft_name!r} holds {len(self._draft.entries)} questions, "
                f"keeping first {max_questions}"
            )
            self._draft = self._draft.with_entries(self._draft.entries[:max_questions])

    # ─────────────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def draft(self) -> PaperDraft:
        return self._draft

    @property
    def name(self) -> str:
        return self._draft.name

    @property
    def entries(self) -> Tuple[SelectionEntry, ...]:
        return self._draft.entries

    @property
    def questions(self) -> Tuple[Question, ...]:
        return tuple(entry.question for entry in self._draft.entries)

    @property
    def question_ids(self) -> Tuple[str, ...]:
        return self._draft.question_ids

    @property
    def metadata(self) -> PaperMetadata:
        return self._draft.metadata

    @property
    def max_questions(self) -> int:
        return self._max_questions

    def __len__(self) -> int:
        return len(self._draft.entries)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._draft.question_ids

    def __iter__(self) -> Iterator[SelectionEntry]:
        return iter(self._draft.entries)

    def index_of(self, question_id: str) -> int:
        """Position of ``question_id``, or -1."""
        try:
            return self._draft.question_ids.index(question_id)
        except ValueError:
            return -1

    def add_listener(self, listener: Callable[[PaperDraft], None]) -> None:
        """Call ``listener`` with the new draft after every persisted mutation."""
        self._listeners.append(listener)

    # ─────────────────────────────────────────────────────────────────────────
    # Mutations
    # ─────────────────────────────────────────────────────────────────────────

    def add(self, question: Question) -> bool:
        """
        Append ``question`` as a snapshot.

        Returns:
            True if added; False for a duplicate (silent) or when the
            paper is full (error notice)
        """
        if question.id in self:
            logger.debug(f"Question {question.id} already selected")
            return False
        if len(self) >= self._max_questions:
            self._notifier.error(f"Maximum {self._max_questions} questions allowed per paper")
            return False

        entry = SelectionEntry(question=question, captured_at=self._clock())
        self._commit(self._draft.entries + (entry,))
        self._notifier.success("Question added to paper")
        return True

    def remove(self, question_id: str) -> bool:
        """Drop the entry for ``question_id``; False (silent) if absent."""
        if question_id not in self:
            logger.debug(f"Question {question_id} not in selection")
            return False
        self._commit(tuple(e for e in self._draft.entries if e.question_id != question_id))
        self._notifier.info("Question removed")
        return True

    def reorder(self, from_index: int, to_index: int) -> bool:
        """
        Move the entry at ``from_index`` to ``to_index``, shifting the rest.

        No-op (False) when the indices are equal or out of range.
        """
        count = len(self)
        if from_index == to_index:
            return False
        if not (0 <= from_index < count and 0 <= to_index < count):
            logger.debug(f"Ignoring reorder {from_index}->{to_index} on {count} entries")
            return False

        entries = list(self._draft.entries)
        entry = entries.pop(from_index)
        entries.insert(to_index, entry)
        self._commit(tuple(entries))
        return True

    def move(self, active_id: str, over_id: Optional[str]) -> bool:
        """
        Drag-and-drop: move ``active_id`` to where ``over_id`` currently is.

        Dropping on nothing, or on itself, is a no-op.
        """
        if over_id is None or active_id == over_id:
            return False
        return self.reorder(self.index_of(active_id), self.index_of(over_id))

    def clear(self) -> None:
        """Remove every entry (metadata is kept)."""
        if not self._draft.entries:
            return
        self._commit(())
        self._notifier.info("Paper cleared")

    def set_metadata(self, metadata: PaperMetadata) -> None:
        """Replace institute name and exam title, persisted with the draft."""
        if metadata == self._draft.metadata:
            return
        self._persist(self._draft.with_metadata(metadata))

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _commit(self, entries: Tuple[SelectionEntry, ...]) -> None:
        self._persist(self._draft.with_entries(entries))

    def _persist(self, draft: PaperDraft) -> None:
        """Save, then swap in; a failed save leaves the selection unchanged."""
        try:
            self._repository.save(draft)
        except DraftError as e:
            self._notifier.error("Could not save paper", str(e))
            raise
        self._draft = draft
        for listener in list(self._listeners):
            listener(draft)
