from __future__ import annotations

import threading
from pathlib import Path

import pytest

from loglens import cli
from loglens.core.classifier import LineClassifier
from loglens.core.tailing import Appended, TailFailed, TailIOError, Truncated


def test_scan_prints_counts(tmp_path: Path, write_log, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "app.log"
    write_log(path)

    cli.main(["scan", str(path)])

    out = capsys.readouterr().out
    assert "E:2 W:1 I:1" in out
    assert "LogLens: 2 errors, 1 warnings, 1 info" in out


def test_filter_prints_numbered_lines(tmp_path: Path, write_log, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "app.log"
    write_log(path)

    cli.main(["filter", str(path), "--level", "warning"])

    out = capsys.readouterr().out
    assert "=== Filtered: WARN (1 lines) ===" in out
    assert "[2] 2025-12-30T08:12:03Z [WARNING] retrying request id=abc123" in out


def test_find_lists_logs(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "a.log").write_text("")
    cli.main(["find", str(tmp_path)])
    assert capsys.readouterr().out.strip() == "a.log"


def test_missing_file_exits_2(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["scan", str(tmp_path / "missing.log")])
    assert exc_info.value.code == 2
    assert "not found" in capsys.readouterr().err


def test_bad_level_exits_2(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as exc_info:
        cli.main(["filter", str(tmp_path / "a.log"), "--level", "notice"])
    assert exc_info.value.code == 2


def test_tail_printer_classifies_complete_lines(capsys: pytest.CaptureFixture[str]) -> None:
    stop = threading.Event()
    printer = cli._TailPrinter(LineClassifier(), stop)

    printer(Appended(path="/a.log", data=b"ERROR one\nhalf ", offset=0))
    printer(Appended(path="/a.log", data=b"INFO line\n", offset=15))
    printer(Truncated(path="/a.log", size=0))
    printer(TailFailed(path="/a.log", error=TailIOError("/a.log", "gone")))

    captured = capsys.readouterr()
    assert "[ERROR] ERROR one\n[INFO ] half INFO line\n" in captured.out
    assert "--- Log file was truncated ---" in captured.out
    assert "Stopped tailing /a.log: gone" in captured.err
    assert stop.is_set()
