from __future__ import annotations

import logging
import threading
from collections import defaultdict
from collections.abc import Callable, Hashable
from typing import Any

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class Subscription:
    """Cancel handle returned by every subscribe call.

    Usable as a context manager so a consumer releases its standing query
    when the enclosing scope ends.
    """

    def __init__(self, cancel: Callable[[], None]):
        self._cancel = cancel
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._cancel()

    def __enter__(self) -> Subscription:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cancel()


class ListenerSet:
    def __init__(self, name: str = "listeners") -> None:
        self.name = name
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()

    def add(self, listener: Listener) -> Subscription:
        with self._lock:
            self._listeners.append(listener)

        def _remove() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return Subscription(_remove)

    def notify(self, payload: Any) -> int:
        with self._lock:
            listeners = list(self._listeners)

        delivered = 0
        for listener in listeners:
            try:
                listener(payload)
                delivered += 1
            except Exception:
                logger.exception("Listener failed on %s", self.name)
        return delivered

    def __len__(self) -> int:
        with self._lock:
            return len(self._listeners)


class SnapshotBus:
    """Keyed fan-out of full snapshots to live listeners.

    Publishers hold ``ordering_lock(key)`` across reading a snapshot and
    publishing it, so listeners of one key never see an older snapshot after
    a newer one.
    """

    def __init__(self) -> None:
        self._sets: dict[Hashable, ListenerSet] = defaultdict(ListenerSet)
        self._ordering: dict[Hashable, threading.RLock] = defaultdict(threading.RLock)
        self._lock = threading.Lock()

    def ordering_lock(self, key: Hashable) -> threading.RLock:
        with self._lock:
            return self._ordering[key]

    def subscribe(self, key: Hashable, listener: Listener) -> Subscription:
        with self._lock:
            listeners = self._sets[key]
            listeners.name = f"snapshot:{key}"
        return listeners.add(listener)

    def has_listeners(self, key: Hashable) -> bool:
        with self._lock:
            listeners = self._sets.get(key)
        return listeners is not None and len(listeners) > 0

    def publish(self, key: Hashable, snapshot: Any) -> int:
        with self._lock:
            listeners = self._sets.get(key)
        if listeners is None:
            return 0
        return listeners.notify(snapshot)
