"""
Module: visibility.view

Purpose:
    Live visible-set for one viewing context. Subscribes to both catalog
    collections and to the identity provider, and recomputes the visible
    questions, resources and chapter facet on every push.

    Each recomputation reads one consistent (snapshot, viewer, display)
    triple and publishes the result with a single reference swap under
    the lock, so readers never see an old snapshot filtered with a new
    entitlement or the reverse.

Key Classes:
    - VisibleSet: Immutable result of one recomputation
    - CatalogView: Subscription owner and recompute loop

Dependencies:
    - threading (std): Lock around state swaps

Used By:
    - session.PaperBuilderSession
    - cli: ``studybrick visible``
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from threading import RLock
from typing import Any, Callable, Dict, List, Optional

from studybrick_toolkit.catalog import (
    QUESTIONS,
    RESOURCES,
    CatalogError,
    CatalogStore,
    IdentityProvider,
    Subscription,
)
from studybrick_toolkit.core.models import Question, Resource, Viewer

from .filter import DisplayFilter, available_chapters, filter_questions, filter_resources

logger = logging.getLogger(__name__)

Listener = Callable[["VisibleSet"], None]


@dataclass(frozen=True)
class VisibleSet:
    """
    What the viewer can see right now (immutable).

    Attributes:
        viewer: Viewer the set was computed for
        display: Display filter the set was computed with
        questions: Visible questions in catalog order
        resources: Visible study materials in catalog order
        chapters: Chapter facet values
        error: Last subscription failure, if any
    """

    viewer: Optional[Viewer] = None
    display: DisplayFilter = DisplayFilter(subjects=())
    questions: tuple[Question, ...] = ()
    resources: tuple[Resource, ...] = ()
    chapters: tuple[str, ...] = ()
    error: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        """True when there is nothing to show (including degraded state)."""
        return not self.questions

    def question(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None


class CatalogView:
    """
    Visible catalog for one viewer, kept current by live subscriptions.

    Call ``close()`` when the viewing context goes away; pushes that
    arrive afterwards are ignored.

    Example:
        >>> view = CatalogView(store, identity)
        >>> view.open()
        >>> [q.id for q in view.current.questions]
        ['q1', 'q3']
        >>> view.close()
    """

    def __init__(
        self,
        catalog: CatalogStore,
        identity: IdentityProvider,
        display: Optional[DisplayFilter] = None,
    ) -> None:
        self._catalog = catalog
        self._identity = identity
        self._lock = RLock()
        self._listeners: List[Listener] = []
        self._subscriptions: List[Subscription] = []
        self._snapshots: Dict[str, List[Dict[str, Any]]] = {QUESTIONS: [], RESOURCES: []}
        self._viewer: Optional[Viewer] = None
        self._display = display
        self._errors: Dict[str, str] = {}
        self._current = VisibleSet()
        self._opened = False
        self._closed = False

    # ─────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ─────────────────────────────────────────────────────────────────────────

    def open(self) -> CatalogView:
        """
        Start the live subscriptions.

        A failure to subscribe leaves the view in a degraded, empty state
        with ``current.error`` set; it does not raise.
        """
        with self._lock:
            if self._opened:
                return self
            self._opened = True
        self._subscriptions.append(self._identity.subscribe(self._on_viewer))
        for collection in (QUESTIONS, RESOURCES):
            try:
                self._subscriptions.append(
                    self._catalog.subscribe(
                        collection,
                        lambda records, c=collection: self._on_snapshot(c, records),
                        lambda error, c=collection: self._on_error(c, error),
                    )
                )
            except CatalogError as e:
                logger.warning(f"Could not subscribe to {collection}: {e}")
                self._on_error(collection, e)
        return self

    def close(self) -> None:
        """Tear down every subscription (idempotent)."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            subscriptions, self._subscriptions = self._subscriptions, []
            self._listeners.clear()
        for subscription in subscriptions:
            subscription.unsubscribe()
        logger.debug(f"Catalog view closed ({len(subscriptions)} subscription(s) removed)")

    def __enter__(self) -> CatalogView:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    # ─────────────────────────────────────────────────────────────────────────
    # State
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def current(self) -> VisibleSet:
        with self._lock:
            return self._current

    @property
    def viewer(self) -> Optional[Viewer]:
        return self.current.viewer

    @property
    def display(self) -> DisplayFilter:
        return self.current.display

    @property
    def question_records(self) -> List[Dict[str, Any]]:
        """Latest raw question snapshot (unfiltered)."""
        with self._lock:
            return list(self._snapshots[QUESTIONS])

    def add_listener(self, listener: Listener) -> None:
        """Call ``listener`` with every new VisibleSet, after it is swapped in."""
        with self._lock:
            self._listeners.append(listener)

    def set_display(self, display: DisplayFilter) -> VisibleSet:
        """
        Replace the display filter and recompute.

        A change of subject selection clears the chapter selection unless
        new chapters are picked in the same call.
        """
        with self._lock:
            previous = self._display
            if (
                previous is not None
                and previous.subjects != display.subjects
                and display.chapters == previous.chapters
            ):
                display = display.with_chapters(())
            self._display = display
        return self._recompute()

    # ─────────────────────────────────────────────────────────────────────────
    # Push handlers
    # ─────────────────────────────────────────────────────────────────────────

    def _on_snapshot(self, collection: str, records: List[Dict[str, Any]]) -> None:
        with self._lock:
            if self._closed:
                logger.debug(f"Ignoring {collection} push after close")
                return
            self._snapshots[collection] = list(records)
            self._errors.pop(collection, None)
        self._recompute()

    def _on_viewer(self, viewer: Optional[Viewer]) -> None:
        with self._lock:
            if self._closed:
                return
            previous = self._viewer
            self._viewer = viewer
            if previous is not None and _subjects_changed(previous, viewer):
                search = self._display.search if self._display is not None else ""
                self._display = DisplayFilter.default_for(viewer).with_search(search)
        self._recompute()

    def _on_error(self, collection: str, error: Exception) -> None:
        with self._lock:
            if self._closed:
                return
            self._errors[collection] = str(error)
        logger.warning(f"Catalog subscription error on {collection}: {error}")
        self._recompute()

    def _recompute(self) -> VisibleSet:
        with self._lock:
            if self._closed:
                return self._current
            viewer = self._viewer
            display = _resolve_display(self._display, viewer)
            question_records = self._snapshots[QUESTIONS]
            resource_records = self._snapshots[RESOURCES]

            visible = VisibleSet(
                viewer=viewer,
                display=display,
                questions=tuple(filter_questions(question_records, viewer, display)),
                resources=tuple(filter_resources(resource_records, viewer)),
                chapters=tuple(available_chapters(question_records, viewer, display)),
                error="; ".join(self._errors.values()) or None,
            )
            self._current = visible
            listeners = list(self._listeners)

        for listener in listeners:
            listener(visible)
        return visible


def _subjects_changed(previous: Optional[Viewer], viewer: Optional[Viewer]) -> bool:
    if previous is None or viewer is None:
        return previous is not viewer
    return previous.entitlement.allowed_subjects != viewer.entitlement.allowed_subjects


def _resolve_display(display: Optional[DisplayFilter], viewer: Optional[Viewer]) -> DisplayFilter:
    """
    Bind a display filter to the viewer's entitlement.

    No filter, or no subject selection, means every allowed subject; a
    picked subject the viewer is not entitled to is dropped.
    """
    defaults = DisplayFilter.default_for(viewer)
    if display is None:
        return defaults
    if display.subjects is None:
        return replace(display, subjects=defaults.subjects)
    if viewer is not None and not viewer.is_admin:
        allowed = set(defaults.subject_list)
        return replace(display, subjects=tuple(s for s in display.subjects if s in allowed))
    return display
