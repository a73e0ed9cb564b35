"""
Module: paper.paginator

Purpose:
    Cut a composed layout into page-height segments, one per PDF page.
    Cuts only fall between blocks, so a question is never split.

Algorithm:
    1. Group blocks that must stay together: the header and the
       instructions box form one group, every other block is its own.
    2. Place each group on the current page if it fits below the top
       padding; otherwise start a new page.
    3. A group taller than a page gets a page of its own, as tall as it
       needs, with a warning.

Key Functions:
    - paginate(): PaperLayout -> PageSegment tuple

Used By:
    - export.pipeline: PAGED mode
"""

from __future__ import annotations

import logging
from typing import List

from .config import PaperConfig
from .models import BlockKind, BlockPlacement, PageSegment, PaperLayout

logger = logging.getLogger(__name__)


def paginate(layout: PaperLayout, config: PaperConfig) -> tuple[PageSegment, ...]:
    """
    Arrange the layout's blocks onto pages of ``config.page_height``.

    Args:
        layout: Composed paper
        config: Layout configuration (page height and padding)

    Returns:
        Segments in page order; block tops are relative to each page
    """
    if not layout.placements:
        return ()

    page_bottom = config.page_height - config.padding
    segments: List[PageSegment] = []
    current: List[BlockPlacement] = []
    cursor = config.padding
    layout_top = layout.placements[0].top - config.padding

    def close_page(height: int) -> None:
        segments.append(PageSegment(
            index=len(segments),
            top=layout_top,
            height=height,
            placements=tuple(current),
        ))

    for group in _atomic_groups(layout.placements):
        group_height = sum(p.block.height for p in group)

        if cursor + group_height > page_bottom and current:
            close_page(max(config.page_height, cursor + config.padding))
            current = []
            cursor = config.padding
            layout_top = group[0].top - config.padding

        for placement in group:
            current.append(BlockPlacement(block=placement.block, top=cursor))
            cursor += placement.block.height

        if cursor > page_bottom:
            logger.warning(
                f"Block group of {group_height}px overflows page {len(segments)} "
                f"({config.page_height}px), giving it an oversized page"
            )

    close_page(max(config.page_height, cursor + config.padding))
    logger.info(f"Paginated {len(layout.placements)} blocks onto {len(segments)} pages")
    return tuple(segments)


def _atomic_groups(placements: tuple[BlockPlacement, ...]) -> List[List[BlockPlacement]]:
    """Group placements that must share a page (header with instructions)."""
    groups: List[List[BlockPlacement]] = []
    for placement in placements:
        if (
            placement.block.kind is BlockKind.INSTRUCTIONS
            and groups
            and groups[-1][-1].block.kind is BlockKind.HEADER
        ):
            groups[-1].append(placement)
        else:
            groups.append([placement])
    return groups
