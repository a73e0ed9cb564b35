"""
Module: utils.file_locking

Purpose:
    Cross-platform file locking for per-device JSON state (drafts,
    export history). Two front ends on the same device (e.g. the CLI and
    an interactive session) must never interleave a write.
    Uses portalocker for Mac, Windows, and Linux compatibility.

Key Functions:
    - locked_write_json: Replace a JSON document under an exclusive lock
    - locked_read_json: Read a JSON document under a shared lock
    - locked_read_modify_write_json: Read-modify-write JSON with lock

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - drafts.repository: Draft persistence
    - export.rate_limit: Export history
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict

import portalocker

logger = logging.getLogger(__name__)


def locked_write_json(path: Path, data: Any) -> None:
    """
    Replace the JSON document at ``path`` with an exclusive lock held.

    Example:
        >>> locked_write_json(draft_path, {"name": "default", "entries": []})
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not path.exists():
        path.touch()

    with open(path, "r+", encoding="utf-8") as f:
        portalocker.lock(f, portalocker.LOCK_EX)
        try:
            f.seek(0)
            f.truncate()
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.flush()
        finally:
            portalocker.unlock(f)

    logger.debug(f"Wrote {path.name}")


def locked_read_json(path: Path) -> Any:
    """
    Read the JSON document at ``path`` with a shared lock held.

    Raises:
        FileNotFoundError: If the file doesn't exist
        json.JSONDecodeError: If the content is not JSON
    """
    with open(path, "r", encoding="utf-8") as f:
        portalocker.lock(f, portalocker.LOCK_SH)
        try:
            return json.loads(f.read())
        finally:
            portalocker.unlock(f)


def locked_read_modify_write_json(
    path: Path,
    modifier: Callable[[Dict[str, Any]], Dict[str, Any]],
    default: Callable[[], Dict[str, Any]] = dict,
) -> Dict[str, Any]:
    """
    Read JSON, apply modifier, write back - all with exclusive lock.

    Unreadable content is replaced by ``default()`` before the modifier runs.

    Args:
        path: Path to JSON file.
        modifier: Function that takes existing data, returns modified data.
        default: Factory for default data if file doesn't exist.

    Returns:
        The modified data that was written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    if not path.exists():
        path.write_text(json.dumps(default(), indent=2))

    with open(path, "r+", encoding="utf-8") as f:
        portalocker.lock(f, portalocker.LOCK_EX)
        try:
            f.seek(0)
            content = f.read()
            try:
                existing = json.loads(content) if content.strip() else default()
            except json.JSONDecodeError:
                logger.warning(f"Discarding unreadable {path.name}")
                existing = default()

            modified = modifier(existing)

            f.seek(0)
            f.truncate()
            json.dump(modified, f, indent=2, ensure_ascii=False)

            return modified
        finally:
            portalocker.unlock(f)
