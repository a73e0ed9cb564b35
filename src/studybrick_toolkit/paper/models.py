"""
Module: paper.models

Purpose:
    Data models for the print layout.
    Immutable dataclasses describing what to draw, where, at 1x scale.

Key Classes:
    - TextRun: Positioned line of text
    - Rule: Horizontal line
    - Frame: Rectangle outline
    - PaperBlock: Unit of layout (header, instructions, question, footer)
    - BlockPlacement: Block positioned on the paper
    - PaperLayout: Complete composed paper
    - PageSegment: Slice of the layout that becomes one PDF page

Dependencies:
    - dataclasses (std)

Used By:
    - paper.composer: Creates blocks and the layout
    - paper.paginator: Groups placements into segments
    - paper.rasterizer: Draws them
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class BlockKind(Enum):
    HEADER = "header"
    INSTRUCTIONS = "instructions"
    QUESTION = "question"
    FOOTER = "footer"


@dataclass(frozen=True)
class TextRun:
    """
    One line of text; y is relative to the top of its block.

    Attributes:
        text: Rendered text (math already converted)
        x: Left offset from the page edge in pixels
        y: Top offset in pixels
        font_size: Size in pixels at 1x
        bold: Bold face
        italic: Italic face
        fill: Text colour
    """

    text: str
    x: int
    y: int
    font_size: int
    bold: bool = False
    italic: bool = False
    fill: str = "#000000"


@dataclass(frozen=True)
class Rule:
    """Horizontal line from x0 to x1 at y (block-relative)."""

    x0: int
    x1: int
    y: int
    width: int = 1
    fill: str = "#000000"


@dataclass(frozen=True)
class Frame:
    """Rectangle outline (block-relative)."""

    x0: int
    y0: int
    x1: int
    y1: int
    outline: str = "#cccccc"
    width: int = 1


@dataclass(frozen=True)
class PaperBlock:
    """
    Unit of layout (immutable).

    Blocks are never split across pages.

    Attributes:
        kind: What the block holds
        height: Height in pixels, including its own bottom gap
        runs: Text lines
        rules: Horizontal lines
        frames: Outlines
        question_id: Source question (question blocks only)
        number: 1-based question number (question blocks only)
    """

    kind: BlockKind
    height: int
    runs: tuple[TextRun, ...] = ()
    rules: tuple[Rule, ...] = ()
    frames: tuple[Frame, ...] = ()
    question_id: Optional[str] = None
    number: Optional[int] = None


@dataclass(frozen=True)
class BlockPlacement:
    """
    A block positioned on the paper.

    Example:
        >>> placement = BlockPlacement(block, top=100)
        >>> placement.bottom
        300  # top + block.height
    """

    block: PaperBlock
    top: int

    @property
    def bottom(self) -> int:
        return self.top + self.block.height


@dataclass(frozen=True)
class PaperLayout:
    """
    Composed print layout: fixed width, height grows with content.

    Attributes:
        width: Page width in pixels (1x)
        height: Total height in pixels (1x)
        placements: Blocks in drawing order
        question_count: Number of question blocks
    """

    width: int
    height: int
    placements: tuple[BlockPlacement, ...]
    question_count: int

    @property
    def blocks(self) -> tuple[PaperBlock, ...]:
        return tuple(p.block for p in self.placements)

    @property
    def question_ids(self) -> tuple[str, ...]:
        return tuple(
            p.block.question_id for p in self.placements
            if p.block.kind is BlockKind.QUESTION and p.block.question_id
        )


@dataclass(frozen=True)
class PageSegment:
    """
    Vertical slice of a layout that becomes one PDF page.

    Attributes:
        index: Page number (0-indexed)
        top: Offset of the slice within the layout
        height: Slice height in pixels (1x)
        placements: Blocks inside the slice, with tops relative to ``top``
    """

    index: int
    top: int
    height: int
    placements: tuple[BlockPlacement, ...]

    @property
    def is_empty(self) -> bool:
        return not self.placements
