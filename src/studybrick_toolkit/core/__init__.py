"""
StudyBrick Core Package

Shared data models, payload validation and serialization used by every
other subpackage.
"""

from .models import (
    Difficulty,
    Entitlement,
    PaperDraft,
    PaperMetadata,
    Question,
    QuestionType,
    Resource,
    Role,
    SelectionEntry,
    Viewer,
    ViewerIdentity,
)

__all__ = [
    "Difficulty",
    "Entitlement",
    "PaperDraft",
    "PaperMetadata",
    "Question",
    "QuestionType",
    "Resource",
    "Role",
    "SelectionEntry",
    "Viewer",
    "ViewerIdentity",
]
