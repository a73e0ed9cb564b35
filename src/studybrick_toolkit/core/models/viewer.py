"""
Module: viewer

Purpose:
    Viewer identity and entitlement models. The identity is resolved once,
    at ingestion, into a canonical ViewerIdentity holding every alias an
    administrator may have used when assigning a record (auth uid, profile
    document id, email). Visibility checks then ask the identity whether a
    reference matches rather than comparing three fields at each call site.

Key Classes:
    - Role: Viewer role enum
    - ViewerIdentity: Canonical alias set with matches()
    - Entitlement: Subject/chapter/plan restrictions
    - Viewer: Identity + role + entitlement

Dependencies:
    - dataclasses (std)
    - datetime (std)

Used By:
    - catalog.identity: IdentityProvider implementations
    - visibility.filter: Assignment and subject/chapter predicates
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping, Optional

from .questions import KNOWN_SUBJECTS, normalize_subject
from .resources import parse_timestamp

# allowedChapters may contain this literal to mean "every chapter"
ALL_CHAPTERS = "all"


class Role(Enum):
    ADMIN = "admin"
    PROFESSOR = "professor"
    STUDENT = "student"
    INSTITUTE = "institute"

    @classmethod
    def parse(cls, value: Optional[str]) -> Role:
        """Unknown or missing roles fall back to STUDENT."""
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return cls.STUDENT


@dataclass(frozen=True)
class ViewerIdentity:
    """
    Canonical viewer identity (immutable).

    Attributes:
        internal_id: Authentication account id (uid)
        profile_id: Persisted profile document id
        email: Account email

    Example:
        >>> ident = ViewerIdentity("uid-1", "user-42", "a@b.com")
        >>> ident.matches("user-42")
        True
        >>> ident.matches(None)
        False
    """

    internal_id: Optional[str] = None
    profile_id: Optional[str] = None
    email: Optional[str] = None
    aliases: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        resolved = frozenset(
            alias for alias in (self.internal_id, self.profile_id, self.email) if alias
        )
        object.__setattr__(self, "aliases", resolved)

    def matches(self, reference: Any) -> bool:
        """True if ``reference`` equals any known alias of this viewer."""
        if not reference or not isinstance(reference, str):
            return False
        return reference in self.aliases

    @property
    def primary(self) -> Optional[str]:
        """Most stable alias, used for logging and draft ownership."""
        return self.profile_id or self.internal_id or self.email


@dataclass(frozen=True)
class Entitlement:
    """
    Subject/chapter/plan restrictions attached to a viewer (immutable).

    Attributes:
        allowed_subjects: Normalized subject keys the viewer may see
        allowed_chapters: Permitted chapters; empty (or containing "all")
            means unrestricted, NOT "nothing allowed"
        subscription_plan: Plan name like "free" or "pro"
        subscription_status: "active" or "disabled"
        subscription_expiry: Plan expiry (UTC) or None for open-ended
    """

    allowed_subjects: tuple[str, ...] = KNOWN_SUBJECTS
    allowed_chapters: tuple[str, ...] = ()
    subscription_plan: str = "free"
    subscription_status: str = "active"
    subscription_expiry: Optional[datetime] = None

    def __post_init__(self) -> None:
        subjects = tuple(dict.fromkeys(
            normalize_subject(s) for s in self.allowed_subjects if normalize_subject(s)
        ))
        object.__setattr__(self, "allowed_subjects", subjects)
        object.__setattr__(
            self, "allowed_chapters", tuple(c for c in self.allowed_chapters if c)
        )

    @property
    def chapters_unrestricted(self) -> bool:
        return not self.allowed_chapters or ALL_CHAPTERS in self.allowed_chapters

    def allows_subject(self, subject: Optional[str]) -> bool:
        return normalize_subject(subject) in self.allowed_subjects

    def allows_chapter(self, chapter: Optional[str]) -> bool:
        if self.chapters_unrestricted:
            return True
        return chapter in self.allowed_chapters

    def is_subscription_active(self, now: Optional[datetime] = None) -> bool:
        """Active status and not past expiry."""
        if self.subscription_status.lower() != "active":
            return False
        if self.subscription_expiry is None:
            return True
        now = now or datetime.now(timezone.utc)
        expiry = self.subscription_expiry
        if expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)
        return now < expiry


@dataclass(frozen=True)
class Viewer:
    """
    The authenticated actor consuming the catalog.

    Invariant:
        Non-admin viewers always have at least one allowed subject.
    """

    identity: ViewerIdentity
    role: Role = Role.STUDENT
    entitlement: Entitlement = field(default_factory=Entitlement)
    name: str = ""

    def __post_init__(self) -> None:
        if not self.is_admin and not self.entitlement.allowed_subjects:
            raise ValueError(
                f"Viewer {self.identity.primary!r} has no allowed subjects"
            )

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @classmethod
    def from_profile(
        cls,
        profile: Optional[Mapping[str, Any]],
        *,
        auth_uid: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Viewer:
        """
        Build a viewer from an auth account and its persisted profile.

        The profile is looked up by email by the identity layer, so the
        profile document id and the auth uid usually differ. A missing
        profile yields a student with the default subjects.

        Args:
            profile: Profile document (with "id") or None
            auth_uid: Authentication account id
            email: Account email (falls back to the profile's email)

        Example:
            >>> v = Viewer.from_profile({"id": "p1", "role": "institute",
            ...                          "allowedSubjects": ["Physics"]},
            ...                         auth_uid="u1", email="x@y.z")
            >>> v.entitlement.allowed_subjects
            ('physics',)
        """
        profile = dict(profile or {})
        identity = ViewerIdentity(
            internal_id=auth_uid or profile.get("uid"),
            profile_id=profile.get("id") or profile.get("firestoreId"),
            email=email or profile.get("email"),
        )

        subjects = _string_list(profile.get("allowedSubjects")) or list(KNOWN_SUBJECTS)
        chapters = _string_list(profile.get("allowedChapters"))
        entitlement = Entitlement(
            allowed_subjects=tuple(subjects),
            allowed_chapters=tuple(chapters),
            subscription_plan=str(profile.get("plan") or "free"),
            subscription_status=str(
                profile.get("subscriptionStatus") or profile.get("status") or "active"
            ),
            subscription_expiry=parse_timestamp(
                profile.get("subscriptionExpiry") or profile.get("planExpiry")
            ),
        )
        return cls(
            identity=identity,
            role=Role.parse(profile.get("role")),
            entitlement=entitlement,
            name=str(profile.get("name") or ""),
        )


def _string_list(value: Any) -> list[str]:
    """Coerce a profile list field; non-lists are treated as absent."""
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value if item not in (None, "")]

