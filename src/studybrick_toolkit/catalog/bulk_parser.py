"""
Module: catalog.bulk_parser

Purpose:
    Parse questions pasted as plain text by an administrator into catalog
    records. Accepted layout:

        1. What is the SI unit of force?
        (A) Newton
        (B) Joule
        Q2) Continuation lines are joined
            onto the question text.

Key Functions:
    - parse_questions(): Raw text -> ParsedQuestion list
    - build_records(): ParsedQuestion list -> catalog payloads

Used By:
    - cli: ``studybrick parse``
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from studybrick_toolkit.core.models import Difficulty, QuestionType, normalize_subject

logger = logging.getLogger(__name__)

# "1.", "1)", "1]", "Q1.", "Q.1)" ...
QUESTION_PATTERN = re.compile(r"^(?:Q?\.?\s*)?(\d+)[.)\]]\s*(.+)", re.IGNORECASE)
# "(A) x", "[b] x", "C. x", "d x"
OPTION_PATTERN = re.compile(r"^[\(\[]?([A-Da-d])[\)\].]?\s*(.+)")


@dataclass
class ParsedQuestion:
    """A question recovered from pasted text (mutable while parsing)."""

    content: str
    options: List[str] = field(default_factory=list)
    correct: int = 0


def parse_questions(raw_text: str) -> List[ParsedQuestion]:
    """
    Split pasted text into questions and options.

    A numbered line starts a new question. While a question is open, a
    line that looks like an option letter is taken as the next option and
    anything else is appended to the question text with a single space.
    Blank lines and text before the first numbered line are ignored.

    Example:
        >>> parsed = parse_questions("1. 2+2?\\n(A) 3\\n(B) 4")
        >>> parsed[0].options
        ['3', '4']
    """
    questions: List[ParsedQuestion] = []
    current: Optional[ParsedQuestion] = None

    for line in raw_text.strip().splitlines():
        stripped = line.strip()
        if not stripped:
            continue

        question_match = QUESTION_PATTERN.match(stripped)
        if question_match:
            if current is not None and current.content:
                questions.append(current)
            current = ParsedQuestion(content=question_match.group(2).strip())
            continue

        if current is None:
            logger.debug(f"Skipping text before first question: {stripped[:40]!r}")
            continue

        option_match = OPTION_PATTERN.match(stripped)
        if option_match:
            current.options.append(option_match.group(2).strip())
        else:
            current.content += " " + stripped

    if current is not None and current.content:
        questions.append(current)

    logger.info(f"Parsed {len(questions)} question(s) from pasted text")
    return questions


def build_records(
    parsed: List[ParsedQuestion],
    *,
    subject: str,
    chapter: str,
    difficulty: str = Difficulty.MEDIUM.value,
    question_type: str = QuestionType.MCQ.value,
    assigned_to: Optional[str] = None,
    created_by: str = "admin",
) -> List[Dict[str, Any]]:
    """
    Turn parsed questions into catalog payloads sharing one set of settings.

    Raises:
        ValueError: If chapter is blank or the enums are unknown
    """
    if not chapter or not chapter.strip():
        raise ValueError("Please enter a chapter name")

    difficulty_value = Difficulty.parse(difficulty).value
    type_value = QuestionType.parse(question_type).value

    return [
        {
            "content": item.content,
            "options": list(item.options) if item.options else None,
            "correct": item.correct,
            "subject": normalize_subject(subject),
            "chapter": chapter.strip(),
            "difficulty": difficulty_value,
            "type": type_value,
            "assignedTo": assigned_to or None,
            "createdBy": created_by,
        }
        for item in parsed
    ]
