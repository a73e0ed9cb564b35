"""
Module: export.pipeline

Purpose:
    Export the selection as a PDF. Orchestrates the whole run:
        1. refuse while another export is in flight
        2. refuse an empty selection (rasterization is never reached)
        3. refuse when the hourly export limit is used up
        4. compose the print layout and rasterize it
        5. write the PDF and confirm the saved file
        6. record the export and acknowledge it

    State: IDLE -> EXPORTING -> SUCCEEDED | FAILED -> IDLE. Every path,
    including unexpected errors, returns to IDLE.

Key Classes:
    - ExportState: Pipeline state
    - ExportResult: Outcome of one export
    - ExportPipeline: Orchestrator

Dependencies:
    - paper: Composition, pagination, rasterization
    - export.pdf_writer: ReportLab writer + PyMuPDF confirmation
    - export.rate_limit: Export history

Used By:
    - session.PaperBuilderSession
    - cli: ``studybrick export``
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from PIL import Image

from studybrick_toolkit.core.models import PaperMetadata, SelectionEntry
from studybrick_toolkit.drafts.notifications import Notifier
from studybrick_toolkit.paper import (
    PaginationMode,
    PaperConfig,
    PageSegment,
    PaperLayout,
    PaperSummary,
    RasterizeError,
    compose_paper,
    paginate,
    rasterize,
    rasterize_segments,
)

from .errors import (
    EmptySelectionError,
    ExportError,
    ExportInProgressError,
    RateLimitError,
    RenderError,
)
from .pdf_writer import confirm_saved, write_pdf
from .rate_limit import ExportRateLimiter

logger = logging.getLogger(__name__)

DEFAULT_FILENAME = "studybrick-paper.pdf"


class ExportState(Enum):
    IDLE = "idle"
    EXPORTING = "exporting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ExportResult:
    """
    Outcome of one export (immutable).

    Attributes:
        success: True only once the saved file was confirmed
        output_path: Written PDF (success only)
        page_count: Pages in the PDF
        question_count: Questions on the paper
        error: Human-readable failure message
    """

    success: bool
    output_path: Optional[Path] = None
    page_count: int = 0
    question_count: int = 0
    error: Optional[str] = None


class ExportPipeline:
    """
    Single-flight PDF export.

    The drawing and writing steps are injectable so callers can swap
    them (tests use this to observe that rasterization is skipped).

    Example:
        >>> pipeline = ExportPipeline(Notifier())
        >>> result = pipeline.export(store.entries, store.metadata, ["physics"], Path("out"))
        >>> result.output_path
        PosixPath('out/studybrick-paper.pdf')
    """

    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        *,
        paper_config: Optional[PaperConfig] = None,
        pagination: PaginationMode = PaginationMode.SINGLE,
        filename: str = DEFAULT_FILENAME,
        rate_limiter: Optional[ExportRateLimiter] = None,
        rasterizer: Callable[[PaperLayout, int], Image.Image] = rasterize,
        segment_rasterizer: Callable[
            [PaperLayout, Sequence[PageSegment], int], List[Image.Image]
        ] = rasterize_segments,
        writer: Callable[[Sequence[Image.Image], Path], int] = write_pdf,
        confirm: Callable[[Path, int], None] = confirm_saved,
    ) -> None:
        self._notifier = notifier or Notifier()
        self._config = paper_config or PaperConfig()
        self._pagination = pagination
        self._filename = filename
        self._rate_limiter = rate_limiter
        self._rasterizer = rasterizer
        self._segment_rasterizer = segment_rasterizer
        self._writer = writer
        self._confirm = confirm
        self._state = ExportState.IDLE
        self._lock = threading.RLock()
        self._state_listeners: List[Callable[[ExportState], None]] = []

    # ─────────────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def state(self) -> ExportState:
        return self._state

    @property
    def can_export(self) -> bool:
        """False while an export is running (the trigger is disabled)."""
        return self._state is not ExportState.EXPORTING

    def add_state_listener(self, listener: Callable[[ExportState], None]) -> None:
        self._state_listeners.append(listener)

    def _set_state(self, state: ExportState) -> None:
        self._state = state
        logger.debug(f"Export state -> {state.value}")
        for listener in list(self._state_listeners):
            listener(state)

    # ─────────────────────────────────────────────────────────────────────────
    # Export
    # ─────────────────────────────────────────────────────────────────────────

    def export(
        self,
        entries: Sequence[SelectionEntry],
        metadata: PaperMetadata,
        display_subjects: Iterable[str],
        output_dir: Path,
    ) -> ExportResult:
        """
        Export the selection to ``output_dir``.

        Never raises for export failures: the failure is surfaced as an
        error notice and returned in the result.

        Args:
            entries: Selection in paper order
            metadata: Institute name and exam title
            display_subjects: Subjects of the current display filter
            output_dir: Directory to write the PDF into

        Returns:
            ExportResult
        """
        with self._lock:
            if self._state is ExportState.EXPORTING:
                error = ExportInProgressError("An export is already in progress")
                self._notifier.error(str(error))
                return ExportResult(success=False, error=str(error))
            self._set_state(ExportState.EXPORTING)

        try:
            result = self._run(list(entries), metadata, list(display_subjects), Path(output_dir))
        except (EmptySelectionError, RateLimitError) as e:
            self._set_state(ExportState.FAILED)
            self._notifier.error(str(e), e.description)
            return ExportResult(success=False, question_count=len(entries), error=str(e))
        except ExportError as e:
            logger.error(f"Export failed: {e}")
            self._set_state(ExportState.FAILED)
            self._notifier.error("Failed to export PDF. Please try again.", str(e))
            return ExportResult(success=False, question_count=len(entries), error=str(e))
        except Exception as e:
            logger.exception("Unexpected export failure")
            self._set_state(ExportState.FAILED)
            self._notifier.error("Failed to export PDF. Please try again.", str(e))
            return ExportResult(success=False, question_count=len(entries), error=str(e))
        finally:
            with self._lock:
                if self._state is not ExportState.IDLE:
                    self._set_state(ExportState.IDLE)

        self._notifier.success("PDF saved successfully!", str(result.output_path))
        return result

    def _run(
        self,
        entries: List[SelectionEntry],
        metadata: PaperMetadata,
        display_subjects: List[str],
        output_dir: Path,
    ) -> ExportResult:
        if not entries:
            raise EmptySelectionError("Add questions before exporting")

        if self._rate_limiter is not None and not self._rate_limiter.can_export():
            raise RateLimitError(
                "Export limit reached. Please try again later.",
                f"Maximum {self._rate_limiter.max_per_hour} exports per hour allowed.",
            )

        self._notifier.info("Generating PDF...")
        summary = PaperSummary.from_selection(len(entries), display_subjects)
        images = self._render(entries, metadata, summary)

        output_path = output_dir / self._filename
        pages = self._writer(images, output_path)
        self._confirm(output_path, pages)

        if self._rate_limiter is not None:
            try:
                self._rate_limiter.record()
            except OSError as e:
                # The PDF is already saved and confirmed
                logger.warning(f"Could not record export in history: {e}")
        self._set_state(ExportState.SUCCEEDED)
        logger.info(f"Exported {len(entries)} question(s), {pages} page(s) to {output_path}")
        return ExportResult(
            success=True,
            output_path=output_path,
            page_count=pages,
            question_count=len(entries),
        )

    def _render(
        self,
        entries: List[SelectionEntry],
        metadata: PaperMetadata,
        summary: PaperSummary,
    ) -> List[Image.Image]:
        """Compose and rasterize; drawing failures become RenderError."""
        scale = self._config.scale
        try:
            layout = compose_paper(entries, metadata, summary, self._config)
            if self._pagination is PaginationMode.PAGED:
                segments = paginate(layout, self._config)
                return list(self._segment_rasterizer(layout, segments, scale))
            return [self._rasterizer(layout, scale)]
        except RasterizeError as e:
            raise RenderError(str(e)) from e
        except (OSError, ValueError) as e:
            raise RenderError(f"Failed to lay out paper: {e}") from e


__all__ = [
    "DEFAULT_FILENAME",
    "ExportPipeline",
    "ExportResult",
    "ExportState",
]
