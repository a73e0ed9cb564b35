"""Payload validation for catalog records and persisted drafts."""

from .validator import (
    DRAFT_SCHEMA_VERSION,
    ValidationError,
    validate_draft_payload,
    validate_question_payload,
    validate_resource_payload,
)

__all__ = [
    "DRAFT_SCHEMA_VERSION",
    "ValidationError",
    "validate_draft_payload",
    "validate_question_payload",
    "validate_resource_payload",
]
