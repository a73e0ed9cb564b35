"""Exceptions raised by the export pipeline."""

from __future__ import annotations

from typing import Optional


class ExportError(Exception):
    """
    Export could not be completed.

    ``description`` is an optional second line for the user-facing notice.
    """

    def __init__(self, message: str, description: Optional[str] = None) -> None:
        super().__init__(message)
        self.description = description


class ExportInProgressError(ExportError):
    """Another export is already running."""
    pass


class EmptySelectionError(ExportError):
    """Nothing selected to export."""
    pass


class RateLimitError(ExportError):
    """Too many exports in the current window."""
    pass


class RenderError(ExportError):
    """Composing or rasterizing the paper failed."""
    pass


class SaveError(ExportError):
    """The PDF could not be written, or the written file did not check out."""
    pass
