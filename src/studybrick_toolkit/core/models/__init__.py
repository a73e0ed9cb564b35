"""
Core Models Package

Immutable, validated data models shared by the catalog, visibility,
draft, paper and export layers. All models are frozen dataclasses so
that catalog snapshots and selection snapshots can be passed around
without copying.
"""

from .questions import Difficulty, Question, QuestionType, normalize_subject, option_label
from .resources import Resource
from .viewer import Entitlement, Role, Viewer, ViewerIdentity
from .selection import PaperDraft, PaperMetadata, SelectionEntry

__all__ = [
    "Difficulty",
    "Question",
    "QuestionType",
    "normalize_subject",
    "option_label",
    "Resource",
    "Entitlement",
    "Role",
    "Viewer",
    "ViewerIdentity",
    "PaperDraft",
    "PaperMetadata",
    "SelectionEntry",
]
