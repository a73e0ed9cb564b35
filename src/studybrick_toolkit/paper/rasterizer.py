"""
Module: paper.rasterizer

Purpose:
    Draw a composed layout (or one page segment of it) onto a white
    bitmap at the layout's fixed width times an oversampling factor.

Key Functions:
    - rasterize(): Whole layout -> one image
    - rasterize_segments(): Page segments -> one image per page

Dependencies:
    - PIL: Image, ImageDraw

Used By:
    - export.pipeline
"""

from __future__ import annotations

import logging
from typing import Iterable, List

from PIL import Image, ImageDraw

from .fonts import load_font
from .models import BlockPlacement, PageSegment, PaperLayout

logger = logging.getLogger(__name__)

BACKGROUND = "#ffffff"


class RasterizeError(Exception):
    """The layout could not be drawn to a bitmap."""
    pass


def _draw_placements(
    draw: ImageDraw.ImageDraw,
    placements: Iterable[BlockPlacement],
    scale: int,
) -> None:
    for placement in placements:
        top = placement.top
        block = placement.block
        for frame in block.frames:
            draw.rectangle(
                [
                    (frame.x0 * scale, (top + frame.y0) * scale),
                    (frame.x1 * scale, (top + frame.y1) * scale),
                ],
                outline=frame.outline,
                width=frame.width * scale,
            )
        for rule in block.rules:
            y = (top + rule.y) * scale
            draw.line(
                [(rule.x0 * scale, y), (rule.x1 * scale, y)],
                fill=rule.fill,
                width=rule.width * scale,
            )
        for run in block.runs:
            if not run.text:
                continue
            font = load_font(run.font_size * scale, run.bold, run.italic)
            draw.text(
                (run.x * scale, (top + run.y) * scale),
                run.text,
                fill=run.fill,
                font=font,
            )


def _render(width: int, height: int, placements: Iterable[BlockPlacement], scale: int) -> Image.Image:
    if scale < 1:
        raise RasterizeError(f"scale must be >= 1: {scale}")
    try:
        image = Image.new("RGB", (width * scale, height * scale), BACKGROUND)
        _draw_placements(ImageDraw.Draw(image), placements, scale)
    except (OSError, ValueError, MemoryError) as e:
        raise RasterizeError(f"Failed to draw paper: {e}") from e
    return image


def rasterize(layout: PaperLayout, scale: int = 2) -> Image.Image:
    """
    Draw the whole layout as one bitmap.

    Args:
        layout: Composed paper
        scale: Oversampling factor

    Returns:
        RGB image of (layout.width * scale) x (layout.height * scale)

    Raises:
        RasterizeError: If drawing fails
    """
    image = _render(layout.width, layout.height, layout.placements, scale)
    logger.debug(f"Rasterized layout at {image.width}x{image.height}px")
    return image


def rasterize_segments(
    layout: PaperLayout,
    segments: Iterable[PageSegment],
    scale: int = 2,
) -> List[Image.Image]:
    """One bitmap per page segment, each the full layout width."""
    images = [
        _render(layout.width, segment.height, segment.placements, scale)
        for segment in segments
    ]
    logger.debug(f"Rasterized {len(images)} page segment(s)")
    return images
