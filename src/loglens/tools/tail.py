"""Tail tool implementations and the event buffer they read from."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Collection
from pathlib import Path
from typing import Any

from loglens.core.reports import TailEventReport
from loglens.core.scanning import is_log_file
from loglens.core.tailing import TailEvent, TailRegistry

DEFAULT_MAX_EVENTS = 100


class TailBuffer:
    """Event sink keeping the most recent events per path until they are read."""

    DEFAULT_MAXLEN = 1000

    def __init__(self, maxlen: int = DEFAULT_MAXLEN) -> None:
        if maxlen < 1:
            raise ValueError("maxlen must be >= 1")
        self._maxlen = maxlen
        self._events: dict[str, deque[TailEvent]] = {}
        self._lock = threading.Lock()

    def __call__(self, event: TailEvent) -> None:
        with self._lock:
            q = self._events.get(event.path)
            if q is None:
                q = self._events[event.path] = deque(maxlen=self._maxlen)
            q.append(event)

    def drain(self, path: str, max_events: int | None = None) -> list[TailEvent]:
        """Pop up to `max_events` buffered events for `path`, oldest first."""
        with self._lock:
            q = self._events.get(path)
            if not q:
                return []
            n = len(q) if max_events is None else min(max_events, len(q))
            return [q.popleft() for _ in range(n)]

    def pending(self, path: str) -> int:
        with self._lock:
            return len(self._events.get(path, ()))

    def prune(self, active: Collection[str]) -> None:
        """Forget paths that are no longer tailed and have nothing left to read."""
        with self._lock:
            for path in [p for p, q in self._events.items() if not q and p not in active]:
                del self._events[path]

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)


def toggle_tail_impl(*, log_path: str, tails: TailRegistry, buffer: TailBuffer | None = None) -> dict[str, Any]:
    """Start or stop tailing a log file."""
    path = Path(TailRegistry.normalize(log_path))
    if not tails.is_active(path):
        if not path.is_file():
            raise FileNotFoundError(f"Log file not found: {path}")
        if not is_log_file(path):
            raise ValueError(f"Not a log file: {path}. Expected a .log or .logs file.")

    active = tails.toggle(path)
    if not active and buffer is not None:
        buffer.prune(tails.paths())
    return {"path": str(path), "active": active}


def read_tail_impl(
    *,
    log_path: str,
    tails: TailRegistry,
    buffer: TailBuffer,
    max_events: int | None = None,
) -> dict[str, Any]:
    """Return buffered tail events for a path (events are consumed)."""
    if max_events is None:
        max_events = DEFAULT_MAX_EVENTS
    if max_events <= 0:
        raise ValueError("max_events must be > 0")

    key = TailRegistry.normalize(log_path)
    events = buffer.drain(key, max_events)
    active = tails.is_active(key)
    if not active:
        buffer.prune(tails.paths())
    return {
        "path": key,
        "active": active,
        "events": [TailEventReport.from_event(e).model_dump() for e in events],
        "pending": buffer.pending(key),
    }
