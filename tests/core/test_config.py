from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from loglens.core.config import ConfigDefaulted, LogLensConfig, load_config


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LOGLENS_CONFIG", raising=False)
    monkeypatch.delenv("LOGLENS_AUTO_TAIL", raising=False)


def test_defaults() -> None:
    cfg = load_config()
    assert cfg == LogLensConfig()
    assert cfg.as_settings() == {
        "errorColor": "#ff6b6b",
        "warnColor": "#ffd93d",
        "infoColor": "#6bcb77",
        "debugColor": "#4d96ff",
        "autoTail": False,
    }


def test_from_mapping_accepts_setting_and_field_names() -> None:
    cfg = LogLensConfig.from_mapping({"errorColor": "#abc", "warn_color": "#00FF00", "autoTail": "yes"})
    assert cfg.error_color == "#abc"
    assert cfg.warn_color == "#00FF00"
    assert cfg.auto_tail is True
    assert cfg.defaulted == ()


def test_invalid_values_fall_back_to_defaults(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="loglens.core.config"):
        cfg = LogLensConfig.from_mapping({"errorColor": "red", "autoTail": 3, "unknown": 1})

    assert cfg.error_color == "#ff6b6b"
    assert cfg.auto_tail is False
    assert cfg.defaulted == (
        ConfigDefaulted(key="errorColor", value="red", default="#ff6b6b"),
        ConfigDefaulted(key="autoTail", value=3, default=False),
    )
    assert "errorColor" in caplog.text


def test_load_from_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"loglens": {"infoColor": "#010203", "autoTail": True}}), encoding="utf-8")
    monkeypatch.setenv("LOGLENS_CONFIG", str(path))

    cfg = load_config()
    assert cfg.info_color == "#010203"
    assert cfg.auto_tail is True


def test_unreadable_file_uses_defaults(tmp_path: Path) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    assert load_config(path=path) == LogLensConfig()
    assert load_config(path=tmp_path / "missing.json") == LogLensConfig()


def test_env_overrides_auto_tail(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOGLENS_AUTO_TAIL", "1")
    assert load_config({"autoTail": False}).auto_tail is True

    monkeypatch.setenv("LOGLENS_AUTO_TAIL", "maybe")
    assert load_config({"autoTail": False}).auto_tail is False


def test_missing_keys_are_not_recorded() -> None:
    cfg = LogLensConfig.from_mapping({"warnColor": "#fff"})
    assert cfg.error_color == "#ff6b6b"
    assert cfg.warn_color == "#fff"
    assert cfg.defaulted == ()
