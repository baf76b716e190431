"""Log level classification and incremental file tailing."""

from __future__ import annotations

from loglens.core.classifier import LineClassifier
from loglens.core.config import ConfigDefaulted, LogLensConfig, load_config
from loglens.core.models import ClassificationResult, LineRange, LogLevel, ScanResult
from loglens.core.rules import Level, LevelRuleSet, Matcher, default_rule_set
from loglens.core.scanning import DocumentScanner
from loglens.core.tailing import (
    Appended,
    TailEvent,
    TailFailed,
    TailIOError,
    TailRegistry,
    TailSession,
    Truncated,
)

__all__ = [
    "Appended",
    "ClassificationResult",
    "ConfigDefaulted",
    "DocumentScanner",
    "Level",
    "LevelRuleSet",
    "LineClassifier",
    "LineRange",
    "LogLensConfig",
    "LogLevel",
    "Matcher",
    "ScanResult",
    "TailEvent",
    "TailFailed",
    "TailIOError",
    "TailRegistry",
    "TailSession",
    "Truncated",
    "default_rule_set",
    "load_config",
]
