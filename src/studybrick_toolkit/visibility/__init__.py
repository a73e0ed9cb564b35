"""
Visibility Package

Per-viewer filtering of catalog snapshots, the administrative listing,
and the live CatalogView that keeps a viewer's visible set current.
"""

from .filter import (
    DisplayFilter,
    available_chapters,
    filter_questions,
    filter_resources,
    question_visible,
    resource_visible,
)
from .admin import AdminFilter, admin_listing, assignee_label
from .view import CatalogView, VisibleSet

__all__ = [
    "DisplayFilter",
    "available_chapters",
    "filter_questions",
    "filter_resources",
    "question_visible",
    "resource_visible",
    "AdminFilter",
    "admin_listing",
    "assignee_label",
    "CatalogView",
    "VisibleSet",
]
