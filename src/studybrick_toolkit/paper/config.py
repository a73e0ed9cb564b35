"""
Module: paper.config

Purpose:
    Configuration for the print layout engine.
    Defines page width, padding, typography and rasterization settings.

Key Classes:
    - PaperConfig: Immutable print layout configuration
    - PaginationMode: Single tall page vs. page-height segments

Dependencies:
    - dataclasses (std)

Used By:
    - paper.composer: Block composition
    - paper.rasterizer: Bitmap rendering
    - export.pipeline: Page sizing
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


# A4 width at 96 DPI (CSS pixels)
DEFAULT_PAGE_WIDTH_PX = 794
# A4 height at 96 DPI, used as the segment height in paged mode
DEFAULT_PAGE_HEIGHT_PX = 1123
# Bitmap oversampling for print quality
DEFAULT_SCALE = 2

DEFAULT_INSTRUCTIONS: tuple[str, ...] = (
    "All questions are compulsory.",
    "Each question carries 4 marks.",
    "There is no negative marking for this mock test.",
)
DEFAULT_FOOTER = "Generated by StudyBrick Exam Engine"


class PaginationMode(Enum):
    """
    How the print layout is cut into PDF pages.

    Attributes:
        SINGLE: One full-bleed image; the page grows as tall as the content.
        PAGED: Split between blocks into A4-height segments, one per page.
    """

    SINGLE = "single"
    PAGED = "paged"


@dataclass(frozen=True)
class PaperConfig:
    """
    Configuration for the print layout (immutable).

    Attributes:
        page_width: Layout width in pixels (fixed)
        page_height: Segment height in pixels (paged mode only)
        min_height: Minimum layout height in pixels
        padding: Inner page padding in pixels
        scale: Rasterization oversampling factor
        title_font_size: Institute name size
        meta_font_size: Exam/subject/time/marks line size
        body_font_size: Question and option text size
        small_font_size: Instructions and footer size
        line_spacing: Line height as a multiple of font size
        question_spacing: Vertical gap between questions
        option_columns: Columns in the option grid
        instructions: Instruction bullet lines
        footer_text: Footer line

    Example:
        >>> config = PaperConfig()
        >>> config.content_width
        714
    """

    # Page
    page_width: int = DEFAULT_PAGE_WIDTH_PX
    page_height: int = DEFAULT_PAGE_HEIGHT_PX
    min_height: int = DEFAULT_PAGE_HEIGHT_PX
    padding: int = 40
    scale: int = DEFAULT_SCALE

    # Typography
    title_font_size: int = 24
    meta_font_size: int = 14
    body_font_size: int = 16
    small_font_size: int = 12
    line_spacing: float = 1.6

    # Spacing
    header_gap: int = 30
    question_spacing: int = 30
    option_gap: int = 10
    number_width: int = 40
    option_columns: int = 2

    # Text
    instructions: tuple[str, ...] = DEFAULT_INSTRUCTIONS
    footer_text: str = DEFAULT_FOOTER

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.page_width <= 0:
            raise ValueError(f"page_width must be positive: {self.page_width}")
        if self.page_height <= 0:
            raise ValueError(f"page_height must be positive: {self.page_height}")
        if self.scale < 1:
            raise ValueError(f"scale must be >= 1: {self.scale}")
        if self.content_width <= self.number_width:
            raise ValueError("Padding leaves no room for content")
        if self.option_columns < 1:
            raise ValueError(f"option_columns must be >= 1: {self.option_columns}")

    @property
    def content_width(self) -> int:
        """Width available for content (excluding padding)."""
        return self.page_width - 2 * self.padding

    @property
    def question_text_width(self) -> int:
        """Width of question text to the right of the number column."""
        return self.content_width - self.number_width
