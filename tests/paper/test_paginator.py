"""
Unit Tests for the Paginator

Tests for cutting a layout into page segments between blocks.
"""

import logging

import pytest

from studybrick_toolkit.core.models import PaperMetadata
from studybrick_toolkit.paper import (
    BlockKind,
    BlockPlacement,
    PaperBlock,
    PaperConfig,
    PaperLayout,
    PaperSummary,
    compose_paper,
    paginate,
)


def _layout(config, *blocks):
    """Place (kind, height, id) blocks top to bottom like the composer does."""
    placements = []
    top = config.padding
    for kind, height, qid in blocks:
        placements.append(BlockPlacement(PaperBlock(kind=kind, height=height, question_id=qid), top))
        top += height
    questions = sum(1 for kind, _, _ in blocks if kind is BlockKind.QUESTION)
    return PaperLayout(config.page_width, top + config.padding, tuple(placements), questions)


@pytest.fixture
def config():
    return PaperConfig(page_height=300, padding=20)


class TestPaginate:
    """Tests for page assignment."""

    def test_when_blocks_fit_then_grouped_onto_pages(self, config):
        layout = _layout(
            config,
            (BlockKind.HEADER, 100, None),
            (BlockKind.INSTRUCTIONS, 50, None),
            (BlockKind.QUESTION, 100, "q1"),
            (BlockKind.QUESTION, 100, "q2"),
            (BlockKind.FOOTER, 30, None),
        )

        segments = paginate(layout, config)

        assert [[p.block.question_id for p in s.placements] for s in segments] == [
            [None, None, "q1"],
            ["q2", None],
        ]
        assert [s.index for s in segments] == [0, 1]
        assert all(s.height == config.page_height for s in segments)

    def test_when_paged_then_tops_relative_to_page(self, config):
        layout = _layout(
            config,
            (BlockKind.HEADER, 200, None),
            (BlockKind.QUESTION, 200, "q1"),
        )

        segments = paginate(layout, config)

        assert [p.top for p in segments[1].placements] == [config.padding]
        assert segments[1].top == layout.placements[1].top - config.padding

    def test_when_header_and_instructions_then_never_separated(self, config):
        """The header and the instructions box share a page."""
        layout = _layout(
            config,
            (BlockKind.HEADER, 150, None),
            (BlockKind.INSTRUCTIONS, 100, None),
        )

        segments = paginate(layout, config)

        assert len(segments) == 1
        assert [p.block.kind for p in segments[0].placements] == [BlockKind.HEADER, BlockKind.INSTRUCTIONS]

    def test_when_block_taller_than_page_then_oversized_page_and_warning(self, config, caplog):
        layout = _layout(
            config,
            (BlockKind.HEADER, 100, None),
            (BlockKind.QUESTION, 400, "big"),
            (BlockKind.FOOTER, 30, None),
        )

        with caplog.at_level(logging.WARNING):
            segments = paginate(layout, config)

        big = next(s for s in segments if any(p.block.question_id == "big" for p in s.placements))
        assert big.height == 400 + 2 * config.padding
        assert "overflows" in caplog.text

    def test_when_real_paper_paginated_then_every_question_once(self, make_question):
        """A question is never split or duplicated across pages."""
        config = PaperConfig()
        questions = [make_question(f"q{i}") for i in range(25)]
        layout = compose_paper(questions, PaperMetadata("Acme", "Unit 1"), PaperSummary.from_selection(25, []), config)

        segments = paginate(layout, config)

        ids = [p.block.question_id for s in segments for p in s.placements if p.block.question_id]
        assert ids == [f"q{i}" for i in range(25)]
        assert len(segments) > 1

    def test_when_empty_layout_then_no_pages(self, config):
        assert paginate(PaperLayout(config.page_width, 0, (), 0), config) == ()
