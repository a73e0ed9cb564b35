"""
Module: paper.composer

Purpose:
    Compose the print layout of a paper from the ordered selection and
    paper metadata. Produces a deterministic list of blocks on a fixed
    page width; height grows with content. The same (selection order,
    metadata, summary) always yields the same layout on a given machine.

Layout (top to bottom):
    - Header: institute name (upper-cased), Exam/Subject and
      Time/Max Marks rows, heavy rule
    - Instructions box
    - One block per question: "N." then wrapped text, then options
      "(a)" "(b)" ... in a grid
    - Footer line

Key Functions:
    - compose_paper(): Selection + metadata -> PaperLayout

Dependencies:
    - PIL.ImageFont (via paper.fonts): Text measurement for wrapping

Used By:
    - export.pipeline
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence, Tuple, Union

from studybrick_toolkit.core.models import PaperMetadata, Question, SelectionEntry, option_label

from .config import PaperConfig
from .fonts import load_font, text_width, wrap_text
from .markup import render_markup
from .models import BlockKind, BlockPlacement, Frame, PaperBlock, PaperLayout, Rule, TextRun
from .summary import PaperSummary

logger = logging.getLogger(__name__)

# Fixed offsets of the printed template
TITLE_GAP = 10
META_ROW_GAP = 5
HEADER_BOTTOM_PADDING = 20
HEADER_RULE_WIDTH = 2
BOX_PADDING = 10
BULLET_INDENT = 20
CONTENT_OPTIONS_GAP = 15
LABEL_GAP = 8
FOOTER_MARGIN = 20
FOOTER_PADDING = 10

HEADING_LINE_SPACING = 1.25
META_LINE_SPACING = 1.4


def _line_height(font_size: int, spacing: float) -> int:
    return int(round(font_size * spacing))


def _centered(text: str, y: int, size: int, config: PaperConfig, **style) -> TextRun:
    font = load_font(size, style.get("bold", False), style.get("italic", False))
    x = config.padding + int((config.content_width - text_width(text, font)) // 2)
    return TextRun(text=text, x=max(config.padding, x), y=y, font_size=size, **style)


def _label_value(
    label: str,
    value: str,
    y: int,
    config: PaperConfig,
    *,
    align_right: bool = False,
) -> List[TextRun]:
    """Bold "Label:" followed by a regular value, left- or right-aligned."""
    size = config.meta_font_size
    label_text = f"{label}:"
    value_text = f" {value}"
    label_w = int(round(text_width(label_text, load_font(size, bold=True))))
    value_w = int(round(text_width(value_text, load_font(size))))
    if align_right:
        x = config.padding + config.content_width - (label_w + value_w)
    else:
        x = config.padding
    return [
        TextRun(text=label_text, x=x, y=y, font_size=size, bold=True),
        TextRun(text=value_text, x=x + label_w, y=y, font_size=size),
    ]


# ─────────────────────────────────────────────────────────────────────────────
# Blocks
# ─────────────────────────────────────────────────────────────────────────────

def compose_header(metadata: PaperMetadata, summary: PaperSummary, config: PaperConfig) -> PaperBlock:
    """Institute name, Exam/Subject and Time/Max Marks rows, heavy rule."""
    runs: List[TextRun] = []
    y = 0

    title_font = load_font(config.title_font_size, bold=True)
    title_height = _line_height(config.title_font_size, HEADING_LINE_SPACING)
    for line in wrap_text(metadata.institute_name.upper(), title_font, config.content_width):
        runs.append(_centered(line, y, config.title_font_size, config, bold=True))
        y += title_height
    y += TITLE_GAP

    meta_height = _line_height(config.meta_font_size, META_LINE_SPACING)
    runs += _label_value("Exam", metadata.exam_title, y, config)
    runs += _label_value("Subject", summary.subjects, y, config, align_right=True)
    y += meta_height + META_ROW_GAP
    runs += _label_value("Time", f"{summary.minutes} Mins", y, config)
    runs += _label_value("Max Marks", str(summary.marks), y, config, align_right=True)
    y += meta_height + HEADER_BOTTOM_PADDING

    rule = Rule(
        x0=config.padding,
        x1=config.padding + config.content_width,
        y=y,
        width=HEADER_RULE_WIDTH,
    )
    y += HEADER_RULE_WIDTH
    return PaperBlock(
        kind=BlockKind.HEADER,
        height=y + config.header_gap,
        runs=tuple(runs),
        rules=(rule,),
    )


def compose_instructions(config: PaperConfig) -> PaperBlock:
    """Boxed, italic instruction bullets."""
    size = config.small_font_size
    line_height = _line_height(size, META_LINE_SPACING)
    left = config.padding + BOX_PADDING
    bullet_x = left + BULLET_INDENT
    bullet_width = config.content_width - 2 * BOX_PADDING - BULLET_INDENT
    font = load_font(size, italic=True)

    runs: List[TextRun] = [TextRun("Instructions:", left, BOX_PADDING, size, bold=True, italic=True)]
    y = BOX_PADDING + line_height + META_ROW_GAP
    for instruction in config.instructions:
        for index, line in enumerate(wrap_text(instruction, font, bullet_width)):
            if index == 0:
                runs.append(TextRun("•", bullet_x - 12, y, size, italic=True))
            runs.append(TextRun(line, bullet_x, y, size, italic=True))
            y += line_height
    y += BOX_PADDING

    frame = Frame(x0=config.padding, y0=0, x1=config.padding + config.content_width, y1=y)
    return PaperBlock(
        kind=BlockKind.INSTRUCTIONS,
        height=y + config.header_gap,
        runs=tuple(runs),
        frames=(frame,),
    )


def _option_cell(
    index: int,
    option: str,
    x: int,
    width: int,
    config: PaperConfig,
) -> Tuple[List[TextRun], int]:
    """Runs for one option cell and the number of lines it takes."""
    size = config.body_font_size
    line_height = _line_height(size, config.line_spacing)
    label = f"({option_label(index)})"
    label_w = int(round(text_width(label, load_font(size, bold=True)))) + LABEL_GAP
    lines = wrap_text(render_markup(option), load_font(size), max(1, width - label_w))

    runs = [TextRun(label, x, 0, size, bold=True)]
    for line_index, line in enumerate(lines):
        runs.append(TextRun(line, x + label_w, line_index * line_height, size))
    return runs, len(lines)


def compose_question(question: Question, number: int, config: PaperConfig) -> PaperBlock:
    """
    Numbered question block.

    Args:
        question: Question snapshot
        number: 1-based position in the paper
        config: Layout configuration

    Returns:
        PaperBlock whose height includes the gap to the next question
    """
    size = config.body_font_size
    line_height = _line_height(size, config.line_spacing)
    text_x = config.padding + config.number_width

    runs: List[TextRun] = [TextRun(f"{number}.", config.padding, 0, size, bold=True)]
    y = 0
    for line in wrap_text(render_markup(question.content), load_font(size), config.question_text_width):
        runs.append(TextRun(line, text_x, y, size))
        y += line_height

    if question.options:
        y += CONTENT_OPTIONS_GAP
        columns = config.option_columns
        gap = config.option_gap
        column_width = (config.question_text_width - gap * (columns - 1)) // columns

        for row_start in range(0, len(question.options), columns):
            row_lines = 1
            for column in range(columns):
                index = row_start + column
                if index >= len(question.options):
                    break
                x = text_x + column * (column_width + gap)
                cell_runs, lines = _option_cell(index, question.options[index], x, column_width, config)
                runs += [replace(r, y=r.y + y) for r in cell_runs]
                row_lines = max(row_lines, lines)
            y += row_lines * line_height + gap
        y -= gap

    return PaperBlock(
        kind=BlockKind.QUESTION,
        height=y + config.question_spacing,
        runs=tuple(runs),
        question_id=question.id,
        number=number,
    )


def compose_footer(config: PaperConfig) -> PaperBlock:
    y = FOOTER_MARGIN
    rule = Rule(
        x0=config.padding,
        x1=config.padding + config.content_width,
        y=y,
        fill="#eeeeee",
    )
    y += 1 + FOOTER_PADDING
    run = _centered(config.footer_text, y, config.small_font_size, config, fill="#666666")
    y += _line_height(config.small_font_size, META_LINE_SPACING)
    return PaperBlock(kind=BlockKind.FOOTER, height=y, runs=(run,), rules=(rule,))


# ─────────────────────────────────────────────────────────────────────────────
# Paper
# ─────────────────────────────────────────────────────────────────────────────

def compose_paper(
    items: Sequence[Union[SelectionEntry, Question]],
    metadata: PaperMetadata,
    summary: PaperSummary,
    config: Optional[PaperConfig] = None,
) -> PaperLayout:
    """
    Compose the full print layout.

    Questions are numbered 1..n in the order given. Blank metadata
    renders as blank fields.

    Args:
        items: Selection entries (or questions) in paper order
        metadata: Institute name and exam title
        summary: Derived header figures
        config: Layout configuration (defaults to PaperConfig())

    Returns:
        PaperLayout with blocks placed top to bottom
    """
    config = config or PaperConfig()
    questions = [item.question if isinstance(item, SelectionEntry) else item for item in items]

    blocks: List[PaperBlock] = [
        compose_header(metadata, summary, config),
        compose_instructions(config),
    ]
    blocks += [compose_question(q, number, config) for number, q in enumerate(questions, start=1)]
    blocks.append(compose_footer(config))

    placements: List[BlockPlacement] = []
    top = config.padding
    for block in blocks:
        placements.append(BlockPlacement(block=block, top=top))
        top += block.height

    height = max(config.min_height, top + config.padding)
    logger.info(f"Composed paper: {len(questions)} questions, {config.page_width}x{height}px")
    return PaperLayout(
        width=config.page_width,
        height=height,
        placements=tuple(placements),
        question_count=len(questions),
    )
