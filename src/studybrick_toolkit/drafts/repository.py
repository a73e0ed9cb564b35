"""
Module: drafts.repository

Purpose:
    Persist named paper drafts on this device. Each draft is one JSON file
    under ``<data_dir>/drafts/`` holding the ordered question snapshots and
    the paper metadata. Writes are made under an exclusive portalocker
    lock so two front ends on the same device cannot interleave.

Key Classes:
    - DraftRepository: create/load/save/discard/list_names
    - DraftError: Persistence failure

Dependencies:
    - utils.file_locking (portalocker)
    - core.utils.serialization

Used By:
    - drafts.store.SelectionStore
    - cli: ``studybrick draft``
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import List, Optional

from studybrick_toolkit.core.models import PaperDraft, PaperMetadata
from studybrick_toolkit.core.schemas import ValidationError
from studybrick_toolkit.core.utils.serialization import deserialize_draft, serialize_draft
from studybrick_toolkit.utils.file_locking import locked_read_json, locked_write_json
from studybrick_toolkit.utils.paths import get_drafts_dir

logger = logging.getLogger(__name__)

_SLUG_PATTERN = re.compile(r"[^a-z0-9]+")


class DraftError(Exception):
    """Draft could not be read or written."""
    pass


def draft_slug(name: str) -> str:
    """
    File-safe stem for a draft name.

    Example:
        >>> draft_slug("Mock Test #1")
        'mock-test-1'
    """
    slug = _SLUG_PATTERN.sub("-", name.strip().lower()).strip("-")
    if not slug:
        raise DraftError(f"Draft name {name!r} has no usable characters")
    return slug


class DraftRepository:
    """
    Named drafts stored as JSON files.

    Example:
        >>> repo = DraftRepository(Path("/tmp/sb"))
        >>> draft = repo.load("default")   # new, empty
        >>> repo.save(draft.with_metadata(PaperMetadata("Acme", "Unit 3")))
        >>> repo.list_names()
        ['default']
    """

    def __init__(self, data_dir: Path, default_metadata: Optional[PaperMetadata] = None) -> None:
        self.root = get_drafts_dir(Path(data_dir))
        self.default_metadata = default_metadata or PaperMetadata()

    def path_for(self, name: str) -> Path:
        return self.root / f"{draft_slug(name)}.json"

    def exists(self, name: str) -> bool:
        return self.path_for(name).exists()

    def create(self, name: str) -> PaperDraft:
        """
        Create and persist a new empty draft.

        Raises:
            DraftError: If a draft with that name already exists
        """
        if self.exists(name):
            raise DraftError(f"Draft {name!r} already exists")
        draft = PaperDraft(name=name, metadata=self.default_metadata)
        self.save(draft)
        logger.info(f"Created draft {name!r}")
        return draft

    def load(self, name: str) -> PaperDraft:
        """
        Load a draft by name.

        A missing draft yields a new, empty (unsaved) draft. An unreadable
        draft is logged and replaced by an empty one, matching how a lost
        local cache behaves: the user starts over rather than being blocked.
        """
        path = self.path_for(name)
        if not path.exists():
            logger.debug(f"No saved draft {name!r}, starting empty")
            return PaperDraft(name=name, metadata=self.default_metadata)

        try:
            data = locked_read_json(path)
            draft = deserialize_draft(data)
        except (json.JSONDecodeError, ValidationError, ValueError, OSError) as e:
            logger.warning(f"Draft {name!r} is unreadable ({e}), starting empty")
            return PaperDraft(name=name, metadata=self.default_metadata)

        if draft.name != name:
            logger.debug(f"Draft file {path.name} stores name {draft.name!r}")
        logger.debug(f"Loaded draft {name!r} with {len(draft.entries)} entries")
        return draft

    def save(self, draft: PaperDraft) -> None:
        """
        Persist the full draft, replacing any previous version.

        Raises:
            DraftError: If the file cannot be written
        """
        try:
            locked_write_json(self.path_for(draft.name), serialize_draft(draft))
        except OSError as e:
            raise DraftError(f"Failed to save draft {draft.name!r}: {e}") from e

    def discard(self, name: str) -> bool:
        """Delete a draft; returns False if there was nothing to delete."""
        path = self.path_for(name)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise DraftError(f"Failed to discard draft {name!r}: {e}") from e
        logger.info(f"Discarded draft {name!r}")
        return True

    def list_names(self) -> List[str]:
        """Names of saved drafts, sorted; unreadable files are skipped."""
        if not self.root.exists():
            return []
        names: List[str] = []
        for path in sorted(self.root.glob("*.json")):
            try:
                data = locked_read_json(path)
            except (json.JSONDecodeError, OSError) as e:
                logger.debug(f"Skipping unreadable draft file {path.name}: {e}")
                continue
            if isinstance(data, dict) and isinstance(data.get("name"), str):
                names.append(data["name"])
        return sorted(names)
