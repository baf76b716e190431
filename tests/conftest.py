from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from loglens.core.tailing import TailEvent


class FakeWatch:
    """Watch handle whose notifications are fired by the test."""

    def __init__(self, path: str, callback: Callable[[], None]) -> None:
        self.path = path
        self.callback = callback
        self.closed = False

    def fire(self) -> None:
        self.callback()

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def watches() -> list[FakeWatch]:
    return []


@pytest.fixture
def watch_factory(watches: list[FakeWatch]) -> Callable[[str, Callable[[], None]], FakeWatch]:
    def _factory(path: str, callback: Callable[[], None]) -> FakeWatch:
        w = FakeWatch(path, callback)
        watches.append(w)
        return w

    return _factory


@pytest.fixture
def events() -> list[TailEvent]:
    return []


@pytest.fixture
def write_log() -> Callable[[Path], None]:
    def _write(path: Path) -> None:
        path.write_text(
            "\n".join(
                [
                    "2025-12-30T08:12:01Z [INFO] service started",
                    "2025-12-30T08:12:03Z [WARNING] retrying request id=abc123",
                    "2025-12-30T08:12:04Z [ERROR] upstream timeout route=/api/v1/items",
                    "2025-12-30T08:12:05Z FATAL database unavailable",
                    "2025-12-30T08:12:06Z level=debug msg=\"cache miss\"",
                    "plain line without a level",
                ]
            )
            + "\n",
            encoding="utf-8",
        )

    return _write


@pytest.fixture
def append_bytes() -> Callable[[Path, bytes], None]:
    def _append(path: Path, data: bytes) -> None:
        with path.open("ab") as f:
            f.write(data)

    return _append
