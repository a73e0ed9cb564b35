"""
Module: export.rate_limit

Purpose:
    Per-device export rate limit: at most N successful exports in any
    rolling hour. The history of export timestamps is kept in a small
    JSON file guarded by portalocker so it survives restarts and is
    shared by every front end on the device.

Key Classes:
    - ExportRateLimiter: can_export() / record()

Dependencies:
    - utils.file_locking (portalocker)

Used By:
    - export.pipeline
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from studybrick_toolkit.utils.file_locking import locked_read_json, locked_read_modify_write_json

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = timedelta(hours=1)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _to_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


class ExportRateLimiter:
    """
    Rolling-window export counter.

    A limit of 0 disables rate limiting.

    Example:
        >>> limiter = ExportRateLimiter(tmp / "export_history.json", max_per_hour=5)
        >>> limiter.can_export()
        True
        >>> limiter.record()
        >>> limiter.remaining()
        4
    """

    def __init__(
        self,
        path: Path,
        max_per_hour: int = 5,
        window: timedelta = DEFAULT_WINDOW,
    ) -> None:
        if max_per_hour < 0:
            raise ValueError(f"max_per_hour must be non-negative: {max_per_hour}")
        self.path = Path(path)
        self.max_per_hour = max_per_hour
        self.window = window

    def _cutoff(self, now: datetime) -> int:
        return _to_millis(now - self.window)

    def _recent(self, history: List[Any], now: datetime) -> List[int]:
        cutoff = self._cutoff(now)
        return [int(stamp) for stamp in history if isinstance(stamp, (int, float)) and stamp > cutoff]

    def recent_exports(self, now: Optional[datetime] = None) -> List[int]:
        """Export timestamps (epoch ms) inside the current window."""
        now = now or _now()
        if not self.path.exists():
            return []
        try:
            data = locked_read_json(self.path)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Export history unreadable ({e}), treating as empty")
            return []
        history = data.get("exports", []) if isinstance(data, dict) else []
        return self._recent(history, now)

    def remaining(self, now: Optional[datetime] = None) -> Optional[int]:
        """Exports left in the window, or None when unlimited."""
        if self.max_per_hour == 0:
            return None
        return max(0, self.max_per_hour - len(self.recent_exports(now)))

    def can_export(self, now: Optional[datetime] = None) -> bool:
        if self.max_per_hour == 0:
            return True
        return len(self.recent_exports(now)) < self.max_per_hour

    def record(self, now: Optional[datetime] = None) -> None:
        """Add one export to the history, dropping entries outside the window."""
        now = now or _now()

        def modifier(data: Dict[str, Any]) -> Dict[str, Any]:
            history = data.get("exports", []) if isinstance(data, dict) else []
            recent = self._recent(history, now)
            recent.append(_to_millis(now))
            return {"exports": recent}

        locked_read_modify_write_json(self.path, modifier, default=lambda: {"exports": []})
        logger.debug(f"Recorded export at {now.isoformat()}")
