"""Incremental file tailing.

A TailSession tracks one file's byte offset and turns filesystem change
notifications into `Appended` / `Truncated` events. The TailRegistry owns all
sessions (at most one per path) and their watch handles.
"""

from __future__ import annotations

import logging
import os
import stat
import threading
from collections.abc import Callable, Collection
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

logger = logging.getLogger(__name__)


class TailIOError(OSError):
    """The tailed file could not be read (deleted, permissions, not a file)."""

    def __init__(self, path: str, message: str) -> None:
        super().__init__(message)
        self.path = path


@dataclass(frozen=True, slots=True)
class Appended:
    path: str
    data: bytes
    offset: int  # file position of data[0]


@dataclass(frozen=True, slots=True)
class Truncated:
    path: str
    size: int  # new size; the offset was reset to it


@dataclass(frozen=True, slots=True)
class TailFailed:
    path: str
    error: TailIOError


TailEvent = Appended | Truncated | TailFailed
EventSink = Callable[[TailEvent], None]


class WatchHandle(Protocol):
    def close(self) -> None:
        """Stop delivering notifications."""
        ...


WatchFactory = Callable[[str, Callable[[], None]], WatchHandle]


class _FileEventHandler(FileSystemEventHandler):
    """Forward events that concern a single file."""

    def __init__(self, paths: Collection[str], callback: Callable[[], None]) -> None:
        super().__init__()
        self._paths = frozenset(paths)
        self._callback = callback

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        paths = [event.src_path, getattr(event, "dest_path", "")]
        if any(p and os.path.abspath(os.fsdecode(p)) in self._paths for p in paths):
            self._callback()


class FileWatch:
    """watchdog observer on the file's parent directory, filtered to the file.

    Symlinks are resolved: the target's directory is watched, and events for
    either the target or the link name are forwarded.
    """

    def __init__(self, path: str, callback: Callable[[], None]) -> None:
        target = os.path.realpath(path)
        self._observer = Observer()
        self._observer.schedule(
            _FileEventHandler((path, target), callback),
            os.path.dirname(target),
            recursive=False,
        )
        self._observer.start()

    def close(self) -> None:
        self._observer.stop()
        # Events are dispatched on the observer thread; it cannot join itself.
        if threading.current_thread() is not self._observer:
            self._observer.join()


class TailSession:
    """Offset tracking for one file.

    `notify()` is serialised by a per-session lock and emits while holding it,
    so events for a path reach the sink in notification order.
    """

    def __init__(
        self,
        path: str,
        sink: EventSink,
        *,
        watch_factory: WatchFactory = FileWatch,
        on_error: Callable[[TailSession, TailIOError], None] | None = None,
    ) -> None:
        self.path = path
        self._sink = sink
        self._watch_factory = watch_factory
        self._on_error = on_error
        self._lock = threading.Lock()
        self._watch: WatchHandle | None = None
        self._offset = 0
        self._active = False

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def active(self) -> bool:
        return self._active

    def start(self) -> None:
        """Begin tailing from the current end of file (existing content is not replayed)."""
        with self._lock:
            if self._active:
                raise RuntimeError(f"Already tailing {self.path}")
            self._offset = self._size()
            self._active = True

        try:
            self._watch = self._watch_factory(self.path, self._on_change)
        except OSError as e:
            self._active = False
            raise TailIOError(self.path, f"Cannot watch {self.path}: {e}") from e

        logger.info("Tailing %s from offset %d", self.path, self._offset)

    def notify(self) -> TailEvent | None:
        """Handle one change notification and return the emitted event, if any."""
        with self._lock:
            if not self._active:
                return None

            size = self._size()
            if size > self._offset:
                data = self._read_range(self._offset, size - self._offset)
                if not data:
                    # Shrunk since the stat; the next notification reports it.
                    return None
                event: TailEvent = Appended(path=self.path, data=data, offset=self._offset)
                self._offset += len(data)
            elif size < self._offset:
                logger.info("%s truncated from %d to %d bytes", self.path, self._offset, size)
                event = Truncated(path=self.path, size=size)
                self._offset = size
            else:
                return None

            self._sink(event)
            return event

    def close(self) -> None:
        """Stop tailing; safe to call more than once."""
        with self._lock:
            self._active = False
            watch, self._watch = self._watch, None
        if watch is not None:
            watch.close()

    def _on_change(self) -> None:
        try:
            self.notify()
        except TailIOError as e:
            if self._on_error is not None:
                self._on_error(self, e)
            else:
                logger.warning("Stopped tailing %s: %s", self.path, e)
                self.close()
        except Exception:
            # Keep the watch thread alive for other notifications.
            logger.exception("Tail event handling failed for %s", self.path)

    def _size(self) -> int:
        try:
            st = os.stat(self.path)
        except OSError as e:
            raise TailIOError(self.path, f"Cannot stat {self.path}: {e}") from e
        if not stat.S_ISREG(st.st_mode):
            raise TailIOError(self.path, f"Not a regular file: {self.path}")
        return st.st_size

    def _read_range(self, offset: int, length: int) -> bytes:
        try:
            with open(self.path, "rb") as f:
                f.seek(offset)
                return f.read(length)
        except OSError as e:
            raise TailIOError(self.path, f"Cannot read {self.path}: {e}") from e


class TailRegistry:
    """Process-wide path -> TailSession mapping.

    Start/stop/toggle are serialised per path; different paths proceed
    independently. Call `stop_all()` once at teardown.
    """

    def __init__(self, sink: EventSink, *, watch_factory: WatchFactory = FileWatch) -> None:
        self._sink = sink
        self._watch_factory = watch_factory
        self._sessions: dict[str, TailSession] = {}
        self._path_locks: dict[str, threading.RLock] = {}
        self._lock = threading.Lock()

    @staticmethod
    def normalize(path: str | Path) -> str:
        return os.path.abspath(os.path.expanduser(os.fspath(path)))

    def __enter__(self) -> TailRegistry:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop_all()

    def __contains__(self, path: object) -> bool:
        return isinstance(path, (str, Path)) and self.is_active(path)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get(self, path: str | Path) -> TailSession | None:
        with self._lock:
            return self._sessions.get(self.normalize(path))

    def is_active(self, path: str | Path) -> bool:
        return self.get(path) is not None

    def paths(self) -> list[str]:
        with self._lock:
            return sorted(self._sessions)

    def start(self, path: str | Path) -> TailSession:
        """Start tailing `path`; raises ValueError if it is already tailed."""
        key = self.normalize(path)
        with self._path_lock(key):
            session = TailSession(
                key,
                self._sink,
                watch_factory=self._watch_factory,
                on_error=self._on_session_error,
            )
            with self._lock:
                if key in self._sessions:
                    raise ValueError(f"Already tailing {key}")
                self._sessions[key] = session
            try:
                session.start()
            except BaseException:
                with self._lock:
                    self._sessions.pop(key, None)
                raise
            return session

    def stop(self, path: str | Path) -> bool:
        """Stop tailing `path`. Returns False if it was not tailed."""
        key = self.normalize(path)
        with self._path_lock(key):
            with self._lock:
                session = self._sessions.pop(key, None)
            if session is None:
                return False
            session.close()
            logger.info("Stopped tailing %s", key)
            return True

    def toggle(self, path: str | Path) -> bool:
        """Stop if tailed, else start. Returns whether `path` is now tailed."""
        key = self.normalize(path)
        with self._path_lock(key):
            if self.is_active(key):
                self.stop(key)
                return False
            self.start(key)
            return True

    def stop_all(self) -> None:
        """Close every session, continuing past individual close failures."""
        with self._lock:
            sessions = list(self._sessions.values())

        for session in sessions:
            try:
                session.close()
            except Exception as e:
                logger.warning("Failed to close watch for %s: %s", session.path, e)

        with self._lock:
            self._sessions.clear()
            self._path_locks.clear()

    def _path_lock(self, key: str) -> threading.RLock:
        with self._lock:
            return self._path_locks.setdefault(key, threading.RLock())

    def _on_session_error(self, session: TailSession, error: TailIOError) -> None:
        # Runs on the watch thread; must not take the path lock (stop() may be
        # holding it while joining this thread).
        with self._lock:
            if self._sessions.get(session.path) is session:
                del self._sessions[session.path]
        session.close()
        logger.warning("Stopped tailing %s: %s", session.path, error)
        self._sink(TailFailed(path=session.path, error=error))
