"""
Payload Validation Utilities

Validates raw catalog and draft payloads before they are turned into
models. The catalog is written by administrators through forms and bulk
uploads, so records can be missing fields or carry the wrong types;
callers decide whether a ValidationError hides the record (visibility)
or aborts (draft loading).
"""

from __future__ import annotations

from typing import Any


# Bumped whenever the draft file layout changes
DRAFT_SCHEMA_VERSION = 2

_QUESTION_TYPES = {"mcq", "integer"}
_DIFFICULTIES = {"easy", "medium", "hard"}


class ValidationError(Exception):
    """Raised when a payload fails validation."""

    def __init__(self, message: str, path: str = "", errors: list[str] | None = None):
        super().__init__(message)
        self.path = path
        self.errors = errors or []


def validate_question_payload(data: Any) -> None:
    """
    Validate a raw question record from the catalog.

    Args:
        data: Record dictionary (catalog document merged with its id)

    Raises:
        ValidationError: If the record cannot form a Question
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Question record must be an object, got {type(data).__name__}")

    required = ["id", "subject", "content"]
    missing = [f for f in required if not data.get(f)]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            path="",
            errors=[f"Missing field: {f}" for f in missing],
        )

    for key in ("subject", "chapter", "content"):
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            raise ValidationError(f"{key} must be a string: {value!r}", path=key)

    qtype = str(data.get("type") or "MCQ").lower()
    if qtype not in _QUESTION_TYPES:
        raise ValidationError(f"Invalid question type: {data.get('type')!r}", path="type")

    difficulty = data.get("difficulty")
    if difficulty and str(difficulty).lower() not in _DIFFICULTIES:
        raise ValidationError(f"Invalid difficulty: {difficulty!r}", path="difficulty")

    options = data.get("options")
    if options is not None and not isinstance(options, list):
        raise ValidationError(f"options must be a list: {options!r}", path="options")

    if qtype == "mcq":
        if not options:
            raise ValidationError("MCQ question has no options", path="options")
        correct = data.get("correct", data.get("correctAnswer", 0))
        if isinstance(correct, str) and correct.strip().isdigit():
            correct = int(correct.strip())
        if isinstance(correct, bool) or not isinstance(correct, int):
            raise ValidationError(f"MCQ correct answer must be an index: {correct!r}", path="correct")
        if not 0 <= correct < len(options):
            raise ValidationError(
                f"MCQ correct answer {correct} out of range ({len(options)} options)",
                path="correct",
            )

    assigned = data.get("assignedTo")
    if assigned is not None and not isinstance(assigned, str):
        raise ValidationError(f"assignedTo must be a string reference: {assigned!r}", path="assignedTo")


def validate_resource_payload(data: Any) -> None:
    """
    Validate a raw study-material record from the catalog.

    Raises:
        ValidationError: If the record cannot form a Resource
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Resource record must be an object, got {type(data).__name__}")

    missing = [f for f in ("id", "title", "subject") if not data.get(f)]
    if missing:
        raise ValidationError(
            f"Missing required fields: {missing}",
            errors=[f"Missing field: {f}" for f in missing],
        )

    assigned = data.get("assignedTo")
    if assigned is not None and not isinstance(assigned, str):
        raise ValidationError(f"assignedTo must be a string reference: {assigned!r}", path="assignedTo")


def validate_draft_payload(data: Any) -> None:
    """
    Validate a persisted draft document.

    Raises:
        ValidationError: If the document is not a supported draft
    """
    if not isinstance(data, dict):
        raise ValidationError("Draft document must be an object")

    version = data.get("schema_version")
    if version != DRAFT_SCHEMA_VERSION:
        raise ValidationError(
            f"Unsupported draft schema version: {version} (expected {DRAFT_SCHEMA_VERSION})",
            path="schema_version",
        )

    if not isinstance(data.get("name"), str) or not data["name"].strip():
        raise ValidationError("Draft has no name", path="name")

    entries = data.get("entries")
    if not isinstance(entries, list):
        raise ValidationError("Draft entries must be a list", path="entries")

    errors = []
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict) or not isinstance(entry.get("question"), dict):
            errors.append(f"entries[{i}]: missing question snapshot")
    if errors:
        raise ValidationError(
            f"Draft has {len(errors)} malformed entries",
            path="entries",
            errors=errors,
        )
