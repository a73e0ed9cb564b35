"""Serialization helpers for drafts and catalog files."""

from .serialization import (
    deserialize_draft,
    deserialize_entry,
    load_catalog_json,
    save_catalog_json,
    serialize_draft,
    serialize_entry,
)

__all__ = [
    "deserialize_draft",
    "deserialize_entry",
    "load_catalog_json",
    "save_catalog_json",
    "serialize_draft",
    "serialize_entry",
]
