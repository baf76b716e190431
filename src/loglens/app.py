"""Adapter-owned wiring of config, classifier, scanner and tail registry."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from loglens.core.classifier import LineClassifier
from loglens.core.config import LogLensConfig, load_config
from loglens.core.rules import LevelRuleSet
from loglens.core.scanning import DocumentScanner
from loglens.core.tailing import FileWatch, TailRegistry, WatchFactory
from loglens.tools.tail import TailBuffer

logger = logging.getLogger(__name__)


@dataclass
class LogLens:
    """One instance per process: created at startup, closed once at teardown."""

    config: LogLensConfig
    rules: LevelRuleSet
    scanner: DocumentScanner
    tail_buffer: TailBuffer
    tails: TailRegistry
    closed: bool = field(default=False, init=False)

    @classmethod
    def create(
        cls,
        config: LogLensConfig | None = None,
        *,
        watch_factory: WatchFactory = FileWatch,
        buffer_size: int = TailBuffer.DEFAULT_MAXLEN,
    ) -> LogLens:
        config = config or load_config()
        rules = LevelRuleSet.from_config(config)
        buffer = TailBuffer(maxlen=buffer_size)
        return cls(
            config=config,
            rules=rules,
            scanner=DocumentScanner(LineClassifier(rules)),
            tail_buffer=buffer,
            tails=TailRegistry(buffer, watch_factory=watch_factory),
        )

    @property
    def classifier(self) -> LineClassifier:
        return self.scanner.classifier

    def reload(self, raw: Mapping[str, Any] | None = None) -> LogLensConfig:
        """Re-read configuration and rebuild the rule set. Active tails are kept."""
        self.config = load_config(raw)
        self.rules = LevelRuleSet.from_config(self.config)
        self.scanner = DocumentScanner(LineClassifier(self.rules))
        logger.info("Configuration reloaded")
        return self.config

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.tails.stop_all()
        self.tail_buffer.prune(())
