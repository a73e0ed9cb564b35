"""
Administrative listing.

Administrators are not subject to the visibility filter; they browse the
full catalog with their own facets: subject, assignee and a content search.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from studybrick_toolkit.core.models import Question, normalize_subject
from studybrick_toolkit.core.schemas import ValidationError, validate_question_payload

logger = logging.getLogger(__name__)

ALL = "all"
UNASSIGNED = "none"


@dataclass(frozen=True)
class AdminFilter:
    """
    Facets of the administrative question list.

    Attributes:
        subject: Subject key or "all"
        assigned: "all", "none" (unassigned only) or a viewer reference
        search: Case-insensitive substring of the question content
    """

    subject: str = ALL
    assigned: str = ALL
    search: str = ""

    def matches(self, question: Question) -> bool:
        if self.subject != ALL and question.subject != normalize_subject(self.subject):
            return False
        if self.assigned == UNASSIGNED:
            if question.assigned_to is not None:
                return False
        elif self.assigned != ALL and question.assigned_to != self.assigned:
            return False
        return self.search.strip().lower() in question.content.lower()


def admin_listing(
    records: Iterable[Union[Question, Mapping[str, Any]]],
    admin_filter: Optional[AdminFilter] = None,
) -> List[Question]:
    """Every catalog question matching the admin facets, in catalog order."""
    admin_filter = admin_filter or AdminFilter()
    listing: List[Question] = []
    for record in records:
        if isinstance(record, Question):
            question = record
        else:
            try:
                validate_question_payload(record)
                question = Question.from_dict(dict(record))
            except (ValidationError, KeyError, ValueError) as e:
                logger.warning(f"Catalog record {record.get('id')!r} is malformed: {e}")
                continue
        if admin_filter.matches(question):
            listing.append(question)
    return listing


def assignee_label(reference: Optional[str], users: Sequence[Mapping[str, Any]]) -> str:
    """
    Display name for an ``assignedTo`` reference.

    Example:
        >>> assignee_label(None, [])
        'All Users'
        >>> assignee_label("u1", [{"id": "u1", "name": "Asha"}])
        'Asha'
    """
    if not reference:
        return "All Users"
    for user in users:
        if user.get("id") == reference:
            return str(user.get("name") or "Unknown")
    return "Unknown"
