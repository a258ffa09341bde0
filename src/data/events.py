"""
src/data/events.py
──────────────────
Change notification bus.

Listeners are zero-argument callables. The bus carries no payload: a
notification only says "the document changed", listeners re-read what they
need. Delivery is synchronous, in registration order, one notification per
completed mutation.
"""
from __future__ import annotations

import threading
from collections.abc import Callable

import structlog

logger = structlog.get_logger(__name__)

Listener = Callable[[], None]


class ChangeBus:
    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self.notifications = 0

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def notify(self) -> None:
        self.notifications += 1
        # Copy so listeners may unsubscribe themselves while being notified
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("change_listener_failed", listener=repr(listener))

    def __len__(self) -> int:
        return len(self._listeners)


class RevisionCounter:
    """
    Bus listener that turns notifications into a monotonically increasing
    revision number. Polling views compare revisions to decide whether to
    re-read the store.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._revision = 0

    def __call__(self) -> None:
        with self._lock:
            self._revision += 1

    @property
    def revision(self) -> int:
        return self._revision
