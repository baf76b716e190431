"""Whole-document scanning: decoration ranges, counts and filtering."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Sequence
from pathlib import Path

from .classifier import LineClassifier
from .models import LogLevel, LineRange, ScanResult

LOG_SUFFIXES = (".log", ".logs")
LOG_LANGUAGE_ID = "log"
DEFAULT_FIND_LIMIT = 20
_SKIP_DIRS = {"node_modules"}
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> list[str]:
    """Split on \\n, \\r\\n and \\r only, like an editor does.

    `str.splitlines` also breaks on form feeds and unicode separators, which
    would shift line numbers. A trailing newline does not start a new line.
    """
    lines = _LINE_BREAK_RE.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


class DocumentScanner:
    """Scan a document once and collect per-level ranges and primary counts."""

    def __init__(self, classifier: LineClassifier | None = None) -> None:
        self.classifier = classifier or LineClassifier()

    def scan(self, lines: Iterable[str]) -> ScanResult:
        """Classify every line.

        A line lands in the range batch of every level it matches, but only its
        primary level is counted; lines matching nothing are left uncounted.
        """
        names = self.classifier.rules.names
        ranges: dict[LogLevel, list[LineRange]] = {name: [] for name in names}
        counts: dict[LogLevel, int] = {name: 0 for name in names}

        for line_idx, text in enumerate(lines):
            result = self.classifier.classify(text)
            if result.primary is None:
                continue
            span = LineRange(line=line_idx, start=0, end=len(text))
            for level in result.levels:
                ranges[level].append(span)
            counts[result.primary] += 1

        return ScanResult(ranges=ranges, counts=counts)

    def scan_text(self, text: str) -> ScanResult:
        return self.scan(split_lines(text))

    def filter_lines(self, lines: Iterable[str], level: LogLevel | None) -> list[str]:
        """Lines belonging to `level`, prefixed with `[n] ` (1-based).

        `level=None` means all levels: every line is returned unprefixed.
        """
        if level is None:
            return list(lines)

        rule = self.classifier.rules.get(level)
        return [f"[{line_no}] {text}" for line_no, text in enumerate(lines, start=1) if rule.matches(text)]


def format_status(counts: dict[LogLevel, int]) -> tuple[str, str]:
    """Return (status text, tooltip) for a counts mapping."""
    e = counts.get(LogLevel.ERROR, 0)
    w = counts.get(LogLevel.WARN, 0)
    i = counts.get(LogLevel.INFO, 0)
    return f"E:{e} W:{w} I:{i}", f"LogLens: {e} errors, {w} warnings, {i} info"


def is_log_file(path: str | Path, language_id: str | None = None) -> bool:
    """True for *.log / *.logs files or documents tagged with the log language."""
    if language_id == LOG_LANGUAGE_ID:
        return True
    return str(path).lower().endswith(LOG_SUFFIXES)


def find_log_files(root: str | Path, *, limit: int = DEFAULT_FIND_LIMIT) -> list[Path]:
    """Return up to `limit` *.log files under root, skipping node_modules."""
    if limit <= 0:
        raise ValueError("limit must be > 0")
    base = Path(root)
    if not base.is_dir():
        raise FileNotFoundError(f"Directory not found: {base}")

    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(base):
        dirnames[:] = sorted(d for d in dirnames if d not in _SKIP_DIRS)
        for name in sorted(filenames):
            if name.lower().endswith(".log"):
                found.append(Path(dirpath) / name)
                if len(found) >= limit:
                    return found
    return found


def count_summary(counts: dict[LogLevel, int], levels: Sequence[LogLevel] | None = None) -> dict[str, int]:
    """JSON-friendly counts keyed by level name."""
    levels = levels or tuple(LogLevel)
    return {level.value: counts.get(level, 0) for level in levels}
