"""
Drafts Package

Selection state for the paper being built: named, persisted drafts,
the ordered SelectionStore, and user notices.
"""

from .notifications import Notice, NoticeLevel, Notifier
from .repository import DraftError, DraftRepository, draft_slug
from .store import DEFAULT_MAX_QUESTIONS, SelectionStore

__all__ = [
    "Notice",
    "NoticeLevel",
    "Notifier",
    "DraftError",
    "DraftRepository",
    "draft_slug",
    "DEFAULT_MAX_QUESTIONS",
    "SelectionStore",
]
