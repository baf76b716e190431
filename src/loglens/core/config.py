"""Startup configuration for level styling and tailing."""

from __future__ import annotations

import json
import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "LOGLENS_CONFIG"
AUTO_TAIL_ENV = "LOGLENS_AUTO_TAIL"

_COLOR_RE = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}

# mapping key -> dataclass field
_KEYS = {
    "errorColor": "error_color",
    "warnColor": "warn_color",
    "infoColor": "info_color",
    "debugColor": "debug_color",
    "autoTail": "auto_tail",
}


@dataclass(frozen=True, slots=True)
class ConfigDefaulted:
    """An invalid configuration value that was replaced by its default."""

    key: str
    value: Any
    default: Any


@dataclass(frozen=True, slots=True)
class LogLensConfig:
    error_color: str = "#ff6b6b"
    warn_color: str = "#ffd93d"
    info_color: str = "#6bcb77"
    debug_color: str = "#4d96ff"
    auto_tail: bool = False

    # Values substituted while loading (empty when everything was valid).
    defaulted: tuple[ConfigDefaulted, ...] = ()

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any] | None) -> LogLensConfig:
        """Build a config from user settings, substituting defaults for bad values.

        Accepts both the camelCase setting names (`errorColor`) and the field
        names (`error_color`). Unknown keys are ignored. Missing keys take their
        default silently; only invalid values are recorded in `defaulted`.
        """
        defaults = cls()
        values: dict[str, Any] = {}
        defaulted: list[ConfigDefaulted] = []

        for key, value in (raw or {}).items():
            name = _KEYS.get(key, key)
            if name not in _KEYS.values():
                continue
            default = getattr(defaults, name)
            ok = _valid_bool(value) if name == "auto_tail" else _valid_color(value)
            if ok is None:
                defaulted.append(ConfigDefaulted(key=key, value=value, default=default))
                logger.warning("Invalid config value %s=%r; using default %r", key, value, default)
                continue
            values[name] = ok

        return cls(**values, defaulted=tuple(defaulted))

    def as_settings(self) -> dict[str, Any]:
        """Return the config using the camelCase setting names."""
        return {key: getattr(self, name) for key, name in _KEYS.items()}


def _valid_color(value: Any) -> str | None:
    if isinstance(value, str) and _COLOR_RE.match(value.strip()):
        return value.strip()
    return None


def _valid_bool(value: Any) -> bool | None:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        v = value.strip().lower()
        if v in _TRUE:
            return True
        if v in _FALSE:
            return False
    return None


def load_config(
    raw: Mapping[str, Any] | None = None,
    *,
    path: str | Path | None = None,
) -> LogLensConfig:
    """Load configuration.

    Precedence: `raw` mapping, else the JSON file at `path` (or $LOGLENS_CONFIG),
    else defaults. $LOGLENS_AUTO_TAIL overrides `autoTail` when set.
    """
    if raw is None:
        path = path or os.getenv(CONFIG_PATH_ENV)
        if path:
            raw = _read_json(Path(path))

    cfg = LogLensConfig.from_mapping(raw)

    env = os.getenv(AUTO_TAIL_ENV)
    if env is None or env == "":
        return cfg

    auto_tail = _valid_bool(env)
    if auto_tail is None:
        logger.warning("Ignoring %s=%r (expected a boolean)", AUTO_TAIL_ENV, env)
        return cfg
    return replace(cfg, auto_tail=auto_tail)


def _read_json(path: Path) -> Mapping[str, Any] | None:
    """Read a JSON settings object; unreadable files fall back to defaults."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Could not read config file %s (%s); using defaults", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a JSON object; using defaults", path)
        return None
    # settings may be nested under the "loglens" section
    section = data.get("loglens", data)
    return section if isinstance(section, dict) else None
