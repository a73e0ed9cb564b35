"""
Transient user acknowledgments ("notices").

Every user-triggered action (add, remove, export) produces a Notice. The
Notifier queues them for whichever front end is attached (the CLI prints
them, an interactive shell would show a toast) and mirrors them to the
log, so nothing user-initiated ever fails silently.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from queue import Empty, Queue
from typing import Callable, List, Optional

from studybrick_toolkit.core.models.selection import utc_now

logger = logging.getLogger(__name__)


class NoticeLevel(Enum):
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


_LOG_LEVELS = {
    NoticeLevel.SUCCESS: logging.INFO,
    NoticeLevel.INFO: logging.INFO,
    NoticeLevel.ERROR: logging.WARNING,
}


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    message: str
    description: Optional[str] = None
    created_at: datetime = field(default_factory=utc_now)

    def __str__(self) -> str:
        text = f"[{self.level.value}] {self.message}"
        return f"{text} - {self.description}" if self.description else text


class Notifier:
    """
    Queue of notices plus optional synchronous listeners.

    Example:
        >>> notifier = Notifier()
        >>> notifier.success("Question added to paper")
        >>> [n.message for n in notifier.drain()]
        ['Question added to paper']
    """

    def __init__(self) -> None:
        self._queue: Queue[Notice] = Queue()
        self._listeners: List[Callable[[Notice], None]] = []

    def add_listener(self, listener: Callable[[Notice], None]) -> None:
        self._listeners.append(listener)

    def notify(self, level: NoticeLevel, message: str, description: Optional[str] = None) -> Notice:
        notice = Notice(level=level, message=message, description=description)
        logger.log(_LOG_LEVELS[level], str(notice))
        self._queue.put(notice)
        for listener in list(self._listeners):
            listener(notice)
        return notice

    def success(self, message: str, description: Optional[str] = None) -> Notice:
        return self.notify(NoticeLevel.SUCCESS, message, description)

    def info(self, message: str, description: Optional[str] = None) -> Notice:
        return self.notify(NoticeLevel.INFO, message, description)

    def error(self, message: str, description: Optional[str] = None) -> Notice:
        return self.notify(NoticeLevel.ERROR, message, description)

    def drain(self) -> List[Notice]:
        """Remove and return every pending notice, oldest first."""
        notices: List[Notice] = []
        while True:
            try:
                notices.append(self._queue.get_nowait())
            except Empty:
                return notices
