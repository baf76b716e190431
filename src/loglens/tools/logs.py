"""Classification and scanning tool implementations.

Keep this layer thin: validate inputs, translate them into core calls, and
return JSON-serializable data structures.
"""

from __future__ import annotations

from typing import Any

from loglens.core.documents import read_lines
from loglens.core.models import LogLevel
from loglens.core.reports import ClassificationReport, ScanReport
from loglens.core.rules import parse_level
from loglens.core.scanning import DEFAULT_FIND_LIMIT, DocumentScanner, find_log_files, is_log_file
from loglens.core.tailing import TailRegistry

DEFAULT_LIMIT = 500
HARD_LIMIT = 5000
ALL_LEVELS = "ALL"


def parse_filter_level(level: str | None) -> LogLevel | None:
    """Parse a filter level; None, "all" and "All Levels" select everything."""
    if level is None:
        return None
    name = level.strip().upper()
    if name in (ALL_LEVELS, "ALL LEVELS", ""):
        return None
    return parse_level(name)


def classify_line_impl(*, line: str, scanner: DocumentScanner) -> dict[str, Any]:
    return ClassificationReport.from_result(scanner.classifier.classify(line)).model_dump()


def scan_document_impl(*, text: str, scanner: DocumentScanner) -> dict[str, Any]:
    return ScanReport.from_result(scanner.scan_text(text)).model_dump()


async def scan_file_impl(
    *,
    log_path: str,
    scanner: DocumentScanner,
    tails: TailRegistry | None = None,
    auto_tail: bool = False,
) -> dict[str, Any]:
    """Scan a log file; optionally start tailing it (autoTail)."""
    lines = await read_lines(log_path)
    out = ScanReport.from_result(scanner.scan(lines)).model_dump()

    if tails is not None:
        if auto_tail and is_log_file(log_path) and not tails.is_active(log_path):
            tails.start(log_path)
        out["tailing"] = tails.is_active(log_path)
    return out


async def filter_by_level_impl(
    *,
    log_path: str,
    level: str | None,
    scanner: DocumentScanner,
    limit: int | None = None,
) -> dict[str, Any]:
    """Return lines of a log file that belong to `level` ("all" for every line)."""
    if limit is None:
        limit = DEFAULT_LIMIT
    if limit <= 0:
        raise ValueError("limit must be > 0")
    limit = min(limit, HARD_LIMIT)

    selected = parse_filter_level(level)
    lines = scanner.filter_lines(await read_lines(log_path), selected)
    label = selected.value if selected is not None else "All Levels"
    return {
        "level": label,
        "count": len(lines),
        "lines": lines[:limit],
        "truncated": len(lines) > limit,
    }


def find_logs_impl(*, root: str, limit: int | None = None) -> list[str]:
    return [str(p) for p in find_log_files(root, limit=limit or DEFAULT_FIND_LIMIT)]
