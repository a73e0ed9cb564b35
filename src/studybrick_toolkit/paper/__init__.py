"""
Paper Package

Two render trees over the same selection: compact interactive rows and
the fixed-width print layout, plus the derived summary fields, the math
markup pass, pagination and rasterization.
"""

from .config import PaginationMode, PaperConfig
from .summary import PaperSummary, estimated_minutes, subject_line, total_marks
from .markup import Segment, latex_to_unicode, parse_markup, render_markup
from .models import BlockKind, BlockPlacement, PageSegment, PaperBlock, PaperLayout, TextRun
from .interactive import InteractiveRow, interactive_rows
from .composer import compose_paper
from .paginator import paginate
from .rasterizer import RasterizeError, rasterize, rasterize_segments

__all__ = [
    "PaginationMode",
    "PaperConfig",
    "PaperSummary",
    "estimated_minutes",
    "subject_line",
    "total_marks",
    "Segment",
    "latex_to_unicode",
    "parse_markup",
    "render_markup",
    "BlockKind",
    "BlockPlacement",
    "PageSegment",
    "PaperBlock",
    "PaperLayout",
    "TextRun",
    "InteractiveRow",
    "interactive_rows",
    "compose_paper",
    "paginate",
    "RasterizeError",
    "rasterize",
    "rasterize_segments",
]
