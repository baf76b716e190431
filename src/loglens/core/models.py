"""Core data models for log classification and tailing."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class LogLevel(str, Enum):
    """Severity levels, declared from most to least severe."""

    ERROR = "ERROR"
    WARN = "WARN"
    INFO = "INFO"
    DEBUG = "DEBUG"

    @property
    def rank(self) -> int:
        """Priority rank (0 = highest severity)."""
        return _RANKS[self]


_RANKS = {level: i for i, level in enumerate(LogLevel)}


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """Levels matched by one line.

    `levels` is non-exclusive set membership (priority order) used for annotation;
    `primary` is the first match in priority order, used only for counting.
    """

    levels: tuple[LogLevel, ...] = ()
    primary: LogLevel | None = None

    def __contains__(self, level: object) -> bool:
        return level in self.levels

    @property
    def matched(self) -> bool:
        return self.primary is not None


@dataclass(frozen=True, slots=True)
class LineRange:
    """Whole-line decoration span (0-based line, character columns)."""

    line: int
    start: int
    end: int


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Per-level ranges for annotation plus primary-level counts."""

    ranges: dict[LogLevel, list[LineRange]]
    counts: dict[LogLevel, int]
