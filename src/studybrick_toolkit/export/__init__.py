"""
Export Package

Turns the print layout into a PDF: rasterization is handed to the paper
package, this package owns the guard rails (single flight, empty
selection, rate limit), the ReportLab writer and the save confirmation.
"""

from .errors import (
    EmptySelectionError,
    ExportError,
    ExportInProgressError,
    RateLimitError,
    RenderError,
    SaveError,
)
from .rate_limit import ExportRateLimiter
from .pdf_writer import A4_HEIGHT_PT, A4_WIDTH_PT, confirm_saved, page_size_for, write_pdf
from .pipeline import DEFAULT_FILENAME, ExportPipeline, ExportResult, ExportState

__all__ = [
    "EmptySelectionError",
    "ExportError",
    "ExportInProgressError",
    "RateLimitError",
    "RenderError",
    "SaveError",
    "ExportRateLimiter",
    "A4_HEIGHT_PT",
    "A4_WIDTH_PT",
    "confirm_saved",
    "page_size_for",
    "write_pdf",
    "DEFAULT_FILENAME",
    "ExportPipeline",
    "ExportResult",
    "ExportState",
]
