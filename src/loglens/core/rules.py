"""Severity levels and the matchers that recognise them."""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Literal

from .config import LogLensConfig
from .models import LogLevel

MatcherKind = Literal["keyword", "bracket", "key_value"]


@dataclass(frozen=True, slots=True)
class Matcher:
    """Case-insensitive single-line predicate for one surface form of a level."""

    kind: MatcherKind
    pattern: re.Pattern[str]

    def matches(self, line: str) -> bool:
        """Return True if the pattern occurs anywhere in the line."""
        return self.pattern.search(line) is not None


def keyword_matcher(*words: str) -> Matcher:
    """Whole-word alternation, e.g. `\\b(ERROR|FATAL)\\b`."""
    alt = "|".join(re.escape(w) for w in words)
    return Matcher("keyword", re.compile(rf"\b(?:{alt})\b", re.IGNORECASE))


def bracket_matcher(*tags: str) -> Matcher:
    """Bracketed tag, e.g. `[WARN]` or `[WARNING]`."""
    alt = "|".join(re.escape(t) for t in tags)
    return Matcher("bracket", re.compile(rf"\[(?:{alt})\]", re.IGNORECASE))


def key_value_matcher(*values: str) -> Matcher:
    """`level=value` / `level:value`, value optionally double-quoted."""
    alt = "|".join(re.escape(v) for v in values)
    return Matcher("key_value", re.compile(rf'level[=:]"?(?:{alt})"?', re.IGNORECASE))


@dataclass(frozen=True, slots=True)
class LevelStyle:
    """Rendering hints; never used for matching."""

    color: str
    background_alpha: str
    overview_ruler: bool

    @property
    def background(self) -> str:
        return self.color + self.background_alpha


@dataclass(frozen=True, slots=True)
class Level:
    name: LogLevel
    matchers: tuple[Matcher, ...]
    style: LevelStyle

    @property
    def rank(self) -> int:
        return self.name.rank

    def matches(self, line: str) -> bool:
        """True if any matcher matches (first hit short-circuits)."""
        return any(m.matches(line) for m in self.matchers)


_MATCHERS: dict[LogLevel, tuple[Matcher, ...]] = {
    LogLevel.ERROR: (
        keyword_matcher("ERROR", "FATAL", "CRITICAL", "SEVERE"),
        bracket_matcher("ERROR"),
        key_value_matcher("error"),
    ),
    LogLevel.WARN: (
        keyword_matcher("WARN", "WARNING"),
        bracket_matcher("WARN", "WARNING"),
        key_value_matcher("warn", "warning"),
    ),
    LogLevel.INFO: (
        keyword_matcher("INFO"),
        bracket_matcher("INFO"),
        key_value_matcher("info"),
    ),
    LogLevel.DEBUG: (
        keyword_matcher("DEBUG", "TRACE", "VERBOSE"),
        bracket_matcher("DEBUG"),
        key_value_matcher("debug"),
    ),
}


@dataclass(frozen=True, slots=True)
class LevelRuleSet:
    """Ordered levels, highest severity first."""

    levels: tuple[Level, ...]

    @classmethod
    def from_config(cls, cfg: LogLensConfig | None = None) -> LevelRuleSet:
        cfg = cfg or LogLensConfig()
        styles = {
            LogLevel.ERROR: LevelStyle(cfg.error_color, "33", overview_ruler=True),
            LogLevel.WARN: LevelStyle(cfg.warn_color, "33", overview_ruler=True),
            LogLevel.INFO: LevelStyle(cfg.info_color, "22", overview_ruler=False),
            LogLevel.DEBUG: LevelStyle(cfg.debug_color, "22", overview_ruler=False),
        }
        return cls(
            levels=tuple(
                Level(name=level, matchers=_MATCHERS[level], style=styles[level])
                for level in LogLevel
            )
        )

    def __iter__(self) -> Iterator[Level]:
        return iter(self.levels)

    def __len__(self) -> int:
        return len(self.levels)

    def get(self, name: LogLevel | str) -> Level:
        """Look up a level by enum or (case-insensitive) name."""
        key = name if isinstance(name, LogLevel) else parse_level(name)
        for level in self.levels:
            if level.name is key:
                return level
        raise KeyError(name)

    @property
    def names(self) -> Sequence[LogLevel]:
        return tuple(level.name for level in self.levels)


def parse_level(value: str) -> LogLevel:
    """Parse a level name; `WARNING` is accepted for WARN."""
    name = value.strip().upper()
    if name == "WARNING":
        name = "WARN"
    try:
        return LogLevel(name)
    except ValueError as e:
        valid = ", ".join(level.value for level in LogLevel)
        raise ValueError(f"Unknown log level '{value}'. Valid values: {valid}.") from e


def default_rule_set() -> LevelRuleSet:
    """Rule set with default colors."""
    return LevelRuleSet.from_config(LogLensConfig())
