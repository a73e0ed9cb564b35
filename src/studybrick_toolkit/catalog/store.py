"""
Module: catalog.store

Purpose:
    Catalog Store interface and an in-memory implementation.
    The catalog is the source of truth for every Question and Resource
    record regardless of visibility. Consumers subscribe to a collection
    and receive the full, unfiltered, insertion-ordered snapshot again on
    every change; all visibility logic runs after the snapshot arrives.

Key Classes:
    - CatalogStore: Abstract live-query interface
    - InMemoryCatalogStore: Reference store with administrative writes
    - Subscription: Handle returned by subscribe()

Key Functions:
    - load_catalog(): Build an InMemoryCatalogStore from a JSON export

Dependencies:
    - threading (std): Serializes writes and pushes

Used By:
    - visibility.view.CatalogView
    - cli
"""

from __future__ import annotations

import copy
import itertools
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from studybrick_toolkit.core.schemas import ValidationError
from studybrick_toolkit.core.utils.serialization import load_catalog_json

logger = logging.getLogger(__name__)

QUESTIONS = "questions"
RESOURCES = "studyBricks"

Record = Dict[str, Any]
SnapshotCallback = Callable[[List[Record]], None]
ErrorCallback = Callable[[Exception], None]


class CatalogError(Exception):
    """Error setting up or reading a catalog subscription."""
    pass


class Subscription:
    """
    Handle for a live subscription.

    ``unsubscribe()`` is idempotent; once it returns no further callbacks
    are delivered through this handle.
    """

    def __init__(self, cancel: Callable[[], None]) -> None:
        self._cancel = cancel
        self._active = True
        self._lock = threading.Lock()

    @property
    def active(self) -> bool:
        return self._active

    def unsubscribe(self) -> None:
        with self._lock:
            if not self._active:
                return
            self._active = False
        self._cancel()


class CatalogStore(ABC):
    """Live-query interface consumed by the core (read-only)."""

    @abstractmethod
    def subscribe(
        self,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        """
        Subscribe to a collection.

        The current snapshot is delivered immediately, then again after
        every change.

        Raises:
            CatalogError: If the subscription cannot be established
        """


class InMemoryCatalogStore(CatalogStore):
    """
    In-memory catalog with administrative writes.

    Records are plain dictionaries (the catalog is untyped at the source)
    stored per collection in insertion order. Every write pushes a fresh
    snapshot to active subscribers of that collection, synchronously and
    in write order.

    Example:
        >>> store = InMemoryCatalogStore()
        >>> qid = store.add(QUESTIONS, {"subject": "maths", "content": "1+1?",
        ...                             "type": "Integer", "correct": "2"})
        >>> store.assign(QUESTIONS, qid, "user-42")
    """

    def __init__(self, collections: Optional[Dict[str, List[Record]]] = None) -> None:
        self._collections: Dict[str, Dict[str, Record]] = {}
        self._subscribers: Dict[str, Dict[int, tuple[SnapshotCallback, Optional[ErrorCallback]]]] = {}
        self._ids = itertools.count(1)
        self._lock = threading.RLock()
        for name, records in (collections or {}).items():
            for record in records:
                self.add(name, record)

    # ─────────────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────────────

    def snapshot(self, collection: str) -> List[Record]:
        """Copy of every record in ``collection``, insertion order, ids merged in."""
        with self._lock:
            return [copy.deepcopy(r) for r in self._collections.get(collection, {}).values()]

    def get(self, collection: str, record_id: str) -> Optional[Record]:
        with self._lock:
            record = self._collections.get(collection, {}).get(record_id)
            return copy.deepcopy(record) if record is not None else None

    def subscribe(
        self,
        collection: str,
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> Subscription:
        with self._lock:
            token = next(self._ids)
            self._subscribers.setdefault(collection, {})[token] = (on_snapshot, on_error)
            snapshot = self.snapshot(collection)

        def cancel() -> None:
            with self._lock:
                self._subscribers.get(collection, {}).pop(token, None)
            logger.debug(f"Unsubscribed from {collection} (token {token})")

        subscription = Subscription(cancel)
        logger.debug(f"Subscribed to {collection} (token {token}, {len(snapshot)} records)")
        self._deliver(on_snapshot, on_error, snapshot)
        return subscription

    # ─────────────────────────────────────────────────────────────────────────
    # Administrative writes
    # ─────────────────────────────────────────────────────────────────────────

    def add(self, collection: str, record: Record) -> str:
        """Insert a record; returns its id (generated when absent)."""
        with self._lock:
            data = copy.deepcopy(record)
            records = self._collections.setdefault(collection, {})
            if data.get("id"):
                record_id = str(data["id"])
            else:
                record_id = f"{collection}-{next(self._ids)}"
                while record_id in records:
                    record_id = f"{collection}-{next(self._ids)}"
            data["id"] = record_id
            if record_id in records:
                raise CatalogError(f"Duplicate id {record_id!r} in {collection}")
            records[record_id] = data
            self._publish(collection)
        return record_id

    def update(self, collection: str, record_id: str, changes: Record) -> None:
        """Merge ``changes`` into an existing record."""
        with self._lock:
            records = self._collections.get(collection, {})
            if record_id not in records:
                raise CatalogError(f"No record {record_id!r} in {collection}")
            records[record_id].update(copy.deepcopy(changes))
            records[record_id]["id"] = record_id
            self._publish(collection)

    def assign(self, collection: str, record_id: str, viewer_ref: Optional[str]) -> None:
        """Set or clear a record's ``assignedTo`` reference."""
        self.update(collection, record_id, {"assignedTo": viewer_ref or None})

    def delete(self, collection: str, record_id: str) -> bool:
        """Remove a record; returns False if it did not exist."""
        with self._lock:
            removed = self._collections.get(collection, {}).pop(record_id, None)
            if removed is None:
                return False
            self._publish(collection)
        return True

    # ─────────────────────────────────────────────────────────────────────────
    # Internals
    # ─────────────────────────────────────────────────────────────────────────

    def _publish(self, collection: str) -> None:
        """Push the current snapshot to every subscriber (lock held)."""
        subscribers = list(self._subscribers.get(collection, {}).values())
        if not subscribers:
            return
        for on_snapshot, on_error in subscribers:
            self._deliver(on_snapshot, on_error, self.snapshot(collection))

    @staticmethod
    def _deliver(
        on_snapshot: SnapshotCallback,
        on_error: Optional[ErrorCallback],
        snapshot: List[Record],
    ) -> None:
        try:
            on_snapshot(snapshot)
        except Exception as e:
            logger.warning(f"Snapshot listener failed: {e}")
            if on_error is not None:
                on_error(e)


def load_catalog(path: Path) -> InMemoryCatalogStore:
    """
    Build a store from a JSON catalog export.

    Raises:
        CatalogError: If the file is missing or not a catalog document
    """
    try:
        collections = load_catalog_json(path)
    except (FileNotFoundError, ValidationError) as e:
        raise CatalogError(f"Failed to load catalog: {e}") from e
    store = InMemoryCatalogStore(collections)
    logger.info(
        f"Loaded catalog from {path}: "
        + ", ".join(f"{name}={len(records)}" for name, records in collections.items())
    )
    return store
