"""EventBus — pub/sub for game events leaving the simulation core.

The engine publishes spawns, kills, phase changes and game-over outcomes
here; the service layer (WebSocket router, logging hooks) subscribes.
Each subscriber gets its own bounded queue.  A subscriber may pass a set
of event types to receive only those.
"""

from __future__ import annotations

import queue
import threading
from collections.abc import Iterable


class EventBus:
    """Thread-safe pub/sub with one bounded queue per subscriber."""

    def __init__(self, maxsize: int = 256) -> None:
        self._lock = threading.Lock()
        self._maxsize = maxsize
        self._subscribers: list[tuple[queue.Queue, frozenset[str] | None]] = []

    def subscribe(self, types: Iterable[str] | None = None) -> queue.Queue:
        """Subscribe to events.  ``types`` restricts delivery to those event types."""
        q: queue.Queue = queue.Queue(maxsize=self._maxsize)
        wanted = frozenset(types) if types is not None else None
        with self._lock:
            self._subscribers.append((q, wanted))
        return q

    def unsubscribe(self, q: queue.Queue) -> None:
        with self._lock:
            self._subscribers = [(s, w) for s, w in self._subscribers if s is not q]

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    def publish(self, event_type: str, data: dict | None = None) -> None:
        msg = {"type": event_type}
        if data is not None:
            msg["data"] = data
        with self._lock:
            for q, wanted in self._subscribers:
                if wanted is not None and event_type not in wanted:
                    continue
                try:
                    q.put_nowait(msg)
                except queue.Full:
                    # Full: drop oldest
                    try:
                        q.get_nowait()
                    except queue.Empty:
                        pass
                    try:
                        q.put_nowait(msg)
                    except queue.Full:
                        pass
