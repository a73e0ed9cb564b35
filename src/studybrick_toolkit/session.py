"""
Module: session

Purpose:
    One paper-building session for one viewer: the live catalog view,
    the persisted selection, and the export pipeline, wired together the
    way an interactive front end uses them.

Key Classes:
    - PaperBuilderSession: add/remove/reorder/export facade

Dependencies:
    - visibility.CatalogView
    - drafts.SelectionStore
    - export.ExportPipeline

Used By:
    - cli: ``studybrick export``
"""

from __future__ import annotations

import logging
from pathlib import Path
from queue import Queue
from typing import Any, List, Mapping, Optional, Sequence

from .catalog import CatalogStore, IdentityProvider
from .config import EngineConfig
from .core.models import PaperMetadata, Question
from .drafts import DraftRepository, Notifier, SelectionStore
from .export import ExportPipeline, ExportRateLimiter, ExportResult
from .paper import InteractiveRow, PaperSummary, interactive_rows
from .utils.logging_utils import QueueLogHandler, attach_queue_handler, detach_queue_handler
from .utils.paths import get_export_history_path
from .visibility import CatalogView, DisplayFilter, VisibleSet

logger = logging.getLogger(__name__)


class PaperBuilderSession:
    """
    Build and export a paper from what the current viewer can see.

    Only questions in the current visible set can be added. Once added, a
    question stays in the selection as captured, even if it later
    disappears from the catalog.

    With a ``log_queue`` the engine's log lines are forwarded to it as
    ``(message, level)`` tuples until the session is closed.

    Example:
        >>> with PaperBuilderSession(store, identity, EngineConfig(data_dir=tmp)) as session:
        ...     session.add("q1")
        ...     result = session.export(Path("out"))
    """

    def __init__(
        self,
        catalog: CatalogStore,
        identity: IdentityProvider,
        config: Optional[EngineConfig] = None,
        notifier: Optional[Notifier] = None,
        *,
        pipeline: Optional[ExportPipeline] = None,
        log_queue: Optional[Queue] = None,
    ) -> None:
        self._log_handler: Optional[QueueLogHandler] = (
            attach_queue_handler(log_queue) if log_queue is not None else None
        )
        self.config = config or EngineConfig()
        self.notifier = notifier or Notifier()

        repository = DraftRepository(
            self.config.data_dir,
            default_metadata=PaperMetadata(
                institute_name=self.config.default_institute_name,
                exam_title=self.config.default_exam_title,
            ),
        )
        self.selection = SelectionStore(
            repository,
            self.config.draft_name,
            notifier=self.notifier,
            max_questions=self.config.max_questions_per_paper,
        )
        self.pipeline = pipeline or ExportPipeline(
            self.notifier,
            paper_config=self.config.paper,
            pagination=self.config.pagination,
            filename=self.config.export_filename,
            rate_limiter=ExportRateLimiter(
                get_export_history_path(self.config.data_dir),
                max_per_hour=self.config.max_exports_per_hour,
            ),
        )
        self.view = CatalogView(catalog, identity).open()
        logger.info(
            f"Session opened on draft {self.config.draft_name!r} "
            f"({len(self.selection)} question(s) selected)"
        )

    def __enter__(self) -> PaperBuilderSession:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self.view.close()
        if self._log_handler is not None:
            detach_queue_handler(self._log_handler)
            self._log_handler = None

    # ─────────────────────────────────────────────────────────────────────────
    # Catalog
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def visible(self) -> VisibleSet:
        return self.view.current

    def set_display_filter(self, display: DisplayFilter) -> VisibleSet:
        return self.view.set_display(display)

    # ─────────────────────────────────────────────────────────────────────────
    # Selection
    # ─────────────────────────────────────────────────────────────────────────

    def add(self, question_id: str) -> bool:
        """
        Add a currently visible question.

        Returns:
            False if the question is not visible, already selected, or
            the paper is full
        """
        question: Optional[Question] = self.visible.question(question_id)
        if question is None:
            logger.debug(f"Question {question_id} is not visible to this viewer")
            self.notifier.error("Question is not available")
            return False
        return self.selection.add(question)

    def remove(self, question_id: str) -> bool:
        return self.selection.remove(question_id)

    def reorder(self, from_index: int, to_index: int) -> bool:
        return self.selection.reorder(from_index, to_index)

    def move(self, active_id: str, over_id: Optional[str]) -> bool:
        return self.selection.move(active_id, over_id)

    def clear(self) -> None:
        self.selection.clear()

    def set_metadata(
        self,
        institute_name: Optional[str] = None,
        exam_title: Optional[str] = None,
    ) -> PaperMetadata:
        """Update either header field; None keeps the current value."""
        current = self.selection.metadata
        metadata = PaperMetadata(
            institute_name=current.institute_name if institute_name is None else institute_name,
            exam_title=current.exam_title if exam_title is None else exam_title,
        )
        self.selection.set_metadata(metadata)
        return metadata

    # ─────────────────────────────────────────────────────────────────────────
    # Paper
    # ─────────────────────────────────────────────────────────────────────────

    def summary(self) -> PaperSummary:
        return PaperSummary.from_selection(len(self.selection), self.visible.display.subject_list)

    def interactive_rows(
        self,
        users: Optional[Sequence[Mapping[str, Any]]] = None,
    ) -> List[InteractiveRow]:
        """Rows for the selected questions, in paper order."""
        return interactive_rows(self.selection.entries, users=users)

    def export(self, output_dir: Path) -> ExportResult:
        return self.pipeline.export(
            self.selection.entries,
            self.selection.metadata,
            self.visible.display.subject_list,
            output_dir,
        )
