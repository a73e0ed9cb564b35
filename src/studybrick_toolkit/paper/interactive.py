"""
Rows for the interactive (compact, draggable) question list and the
admin listing. Same selection data as the print layout, a separate
render tree: one-line summaries, badges and uppercase option letters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from studybrick_toolkit.core.models import Question, SelectionEntry, option_label
from studybrick_toolkit.visibility.admin import assignee_label

from .markup import render_markup

DEFAULT_SUMMARY_LENGTH = 90


@dataclass(frozen=True)
class InteractiveRow:
    position: int
    question_id: str
    subject: str
    chapter: str
    difficulty: str
    type: str
    summary: str
    options: tuple[tuple[str, str], ...] = ()
    assignee: Optional[str] = None

    def as_line(self) -> str:
        """Single text line, as printed by the CLI."""
        badges = f"[{self.subject.upper()} | {self.chapter} | {self.difficulty} | {self.type}]"
        line = f"{self.position:>3}. {self.question_id} {badges} {self.summary}"
        if self.assignee:
            line += f" -> {self.assignee}"
        return line


def summarize(text: str, limit: int = DEFAULT_SUMMARY_LENGTH) -> str:
    """Rendered text collapsed to one line and cut at ``limit`` characters."""
    line = " ".join(render_markup(text).split())
    if len(line) <= limit:
        return line
    return line[: limit - 1].rstrip() + "…"


def interactive_rows(
    items: Iterable[Union[Question, SelectionEntry]],
    *,
    users: Optional[Sequence[Mapping[str, Any]]] = None,
    summary_length: int = DEFAULT_SUMMARY_LENGTH,
) -> List[InteractiveRow]:
    """
    Build 1-based rows for questions or selection entries.

    When ``users`` is given (admin view) each row carries the assignee label.
    """
    rows: List[InteractiveRow] = []
    for position, item in enumerate(items, start=1):
        question = item.question if isinstance(item, SelectionEntry) else item
        rows.append(
            InteractiveRow(
                position=position,
                question_id=question.id,
                subject=question.subject,
                chapter=question.chapter,
                difficulty=question.difficulty.value,
                type=question.type.value,
                summary=summarize(question.content, summary_length),
                options=tuple(
                    (option_label(index, upper=True), render_markup(option))
                    for index, option in enumerate(question.options)
                ),
                assignee=assignee_label(question.assigned_to, users) if users is not None else None,
            )
        )
    return rows
