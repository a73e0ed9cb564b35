"""
Serialization Utilities

Provides to/from JSON utilities for selection entries and drafts.

Drafts are stored as full question snapshots (not just ids), so a
persisted paper reloads exactly as it was selected, options included,
even if the catalog record has since been edited or deleted.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from ..models.questions import Question
from ..models.resources import parse_timestamp
from ..models.selection import PaperDraft, PaperMetadata, SelectionEntry
from ..schemas.validator import (
    DRAFT_SCHEMA_VERSION,
    ValidationError,
    validate_draft_payload,
    validate_question_payload,
)

logger = logging.getLogger(__name__)

# Entries beyond this are dropped on load
MAX_LOADED_ENTRIES = 100


# ─────────────────────────────────────────────────────────────────────────────
# Entry Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_entry(entry: SelectionEntry) -> dict[str, Any]:
    """Serialize a SelectionEntry (full question snapshot + capture time)."""
    return {
        "question": entry.question.to_dict(),
        "captured_at": entry.captured_at.isoformat(),
    }


def deserialize_entry(data: dict[str, Any]) -> SelectionEntry:
    """
    Deserialize a SelectionEntry.

    Raises:
        ValidationError: If the question snapshot is invalid
    """
    payload = data.get("question")
    validate_question_payload(payload)
    try:
        question = Question.from_dict(payload)
    except (KeyError, ValueError) as e:
        raise ValidationError(f"Invalid question snapshot: {e}", path="question") from e

    captured = parse_timestamp(data.get("captured_at"))
    if captured is None:
        return SelectionEntry(question=question)
    return SelectionEntry(question=question, captured_at=captured)


# ─────────────────────────────────────────────────────────────────────────────
# Draft Serialization
# ─────────────────────────────────────────────────────────────────────────────

def serialize_draft(draft: PaperDraft) -> dict[str, Any]:
    """
    Serialize a PaperDraft to a dictionary.

    Returns:
        Dictionary suitable for JSON serialization
    """
    return {
        "schema_version": DRAFT_SCHEMA_VERSION,
        "name": draft.name,
        "metadata": {
            "institute_name": draft.metadata.institute_name,
            "exam_title": draft.metadata.exam_title,
        },
        "created_at": draft.created_at.isoformat(),
        "updated_at": draft.updated_at.isoformat() if draft.updated_at else None,
        "entries": [serialize_entry(entry) for entry in draft.entries],
    }


def deserialize_draft(data: dict[str, Any]) -> PaperDraft:
    """
    Deserialize a PaperDraft from a dictionary.

    Duplicate question ids keep their first occurrence and entries past
    MAX_LOADED_ENTRIES are dropped.

    Raises:
        ValidationError: If the document or any entry is invalid
    """
    validate_draft_payload(data)

    entries: list[SelectionEntry] = []
    seen: set[str] = set()
    for raw in data["entries"]:
        entry = deserialize_entry(raw)
        if entry.question_id in seen:
            logger.debug(f"Dropping duplicate entry {entry.question_id} in draft {data['name']!r}")
            continue
        seen.add(entry.question_id)
        entries.append(entry)

    if len(entries) > MAX_LOADED_ENTRIES:
        logger.warning(
            f"Draft {data['name']!r} has {len(entries)} entries, keeping first {MAX_LOADED_ENTRIES}"
        )
        entries = entries[:MAX_LOADED_ENTRIES]

    meta = data.get("metadata") or {}
    created = parse_timestamp(data.get("created_at"))
    kwargs: dict[str, Any] = {}
    if isinstance(created, datetime):
        kwargs["created_at"] = created

    return PaperDraft(
        name=data["name"],
        entries=tuple(entries),
        metadata=PaperMetadata(
            institute_name=str(meta.get("institute_name") or ""),
            exam_title=str(meta.get("exam_title") or ""),
        ),
        updated_at=parse_timestamp(data.get("updated_at")),
        **kwargs,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Catalog Files
# ─────────────────────────────────────────────────────────────────────────────

def load_catalog_json(path: Path) -> dict[str, list[dict[str, Any]]]:
    """
    Load a catalog export: ``{"questions": [...], "studyBricks": [...]}``.

    Records are returned raw; validation happens when they are viewed.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValidationError: If the file is not a catalog document
    """
    if not path.exists():
        raise FileNotFoundError(f"Catalog file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Catalog is not valid JSON: {e}", path=str(path)) from e

    if not isinstance(data, dict):
        raise ValidationError("Catalog must be a JSON object", path=str(path))

    catalog: dict[str, list[dict[str, Any]]] = {}
    for collection, records in data.items():
        if not isinstance(records, list):
            raise ValidationError(f"Collection {collection!r} must be a list", path=str(path))
        catalog[collection] = [r for r in records if isinstance(r, dict)]
    return catalog


def save_catalog_json(catalog: dict[str, list[dict[str, Any]]], path: Path) -> None:
    """Write a catalog document (used by the bulk parser CLI)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(catalog, f, indent=2, ensure_ascii=False)
