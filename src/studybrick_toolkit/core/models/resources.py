"""
Module: resources

Purpose:
    Resource ("study brick") dataclass: downloadable study material
    published by administrators. Shares the subject and assignment
    visibility rules of questions, without chapter or difficulty.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from .questions import normalize_subject


@dataclass(frozen=True)
class Resource:
    """
    Study material record (immutable).

    Attributes:
        id: Catalog document id
        title: Display title
        description: Optional blurb
        subject: Normalized subject key
        download_url: External download locator
        assigned_to: Viewer reference, None = globally visible
        uploaded_at: Upload timestamp (UTC), if known
    """

    id: str
    title: str
    subject: str
    download_url: str
    description: str = ""
    assigned_to: Optional[str] = None
    uploaded_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Resource id must be non-empty")
        if not self.title.strip():
            raise ValueError(f"Resource {self.id} has no title")
        object.__setattr__(self, "subject", normalize_subject(self.subject))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "subject": self.subject,
            "downloadUrl": self.download_url,
            "assignedTo": self.assigned_to,
            "uploadedAt": self.uploaded_at.isoformat() if self.uploaded_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Resource:
        uploaded = data.get("uploadedAt")
        return cls(
            id=str(data["id"]),
            title=data["title"],
            subject=data.get("subject") or "",
            download_url=data.get("downloadUrl") or "",
            description=data.get("description") or "",
            assigned_to=data.get("assignedTo") or None,
            uploaded_at=parse_timestamp(uploaded),
        )


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Accept ISO strings, epoch seconds or ``{"seconds": ...}`` documents."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, dict) and "seconds" in value:
        value = value["seconds"]
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    return datetime.fromisoformat(str(value))
