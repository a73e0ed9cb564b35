"""
Module: catalog.identity

Purpose:
    Identity Provider interface. Supplies the current Viewer (or None
    while signed out) and pushes a fresh Viewer whenever the account or
    its profile changes.

Key Classes:
    - IdentityProvider: Abstract provider
    - StaticIdentityProvider: Fixed viewer with manual update()

Used By:
    - visibility.view.CatalogView
    - session.PaperBuilderSession
"""

from __future__ import annotations

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

from studybrick_toolkit.core.models import Viewer

from .store import Subscription

logger = logging.getLogger(__name__)

ViewerCallback = Callable[[Optional[Viewer]], None]


class IdentityProvider(ABC):
    """Source of the authenticated viewer."""

    @abstractmethod
    def current(self) -> Optional[Viewer]:
        """Viewer signed in right now, or None."""

    @abstractmethod
    def subscribe(self, callback: ViewerCallback) -> Subscription:
        """Deliver the current viewer immediately, then on every change."""


class StaticIdentityProvider(IdentityProvider):
    """
    Identity provider backed by a viewer held in memory.

    Used by the CLI (viewer loaded from a profile JSON) and by tests,
    which call ``update()`` to simulate a profile change mid-session.
    """

    def __init__(self, viewer: Optional[Viewer] = None) -> None:
        self._viewer = viewer
        self._callbacks: Dict[int, ViewerCallback] = {}
        self._ids = itertools.count(1)
        self._lock = threading.RLock()

    def current(self) -> Optional[Viewer]:
        return self._viewer

    def subscribe(self, callback: ViewerCallback) -> Subscription:
        with self._lock:
            token = next(self._ids)
            self._callbacks[token] = callback
            viewer = self._viewer

        def cancel() -> None:
            with self._lock:
                self._callbacks.pop(token, None)

        subscription = Subscription(cancel)
        callback(viewer)
        return subscription

    def update(self, viewer: Optional[Viewer]) -> None:
        """Replace the viewer and notify subscribers in order."""
        with self._lock:
            self._viewer = viewer
            callbacks = list(self._callbacks.values())
            who = viewer.identity.primary if viewer else None
            logger.debug(f"Identity changed to {who!r}, notifying {len(callbacks)} subscriber(s)")
            for callback in callbacks:
                callback(viewer)
