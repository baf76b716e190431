from __future__ import annotations

import pytest

from loglens.core.classifier import LineClassifier
from loglens.core.models import LogLevel
from loglens.core.rules import (
    LevelRuleSet,
    bracket_matcher,
    default_rule_set,
    key_value_matcher,
    keyword_matcher,
    parse_level,
)


@pytest.fixture
def classifier() -> LineClassifier:
    return LineClassifier(default_rule_set())


@pytest.mark.parametrize("token", ["ERROR", "fatal", "Critical", "SEVERE"])
def test_error_keywords_match_as_whole_words(classifier: LineClassifier, token: str) -> None:
    result = classifier.classify(f"2024-01-01 {token} something broke")
    assert LogLevel.ERROR in result
    assert result.primary == LogLevel.ERROR


@pytest.mark.parametrize("line", ["terrorist attack", "ERRORS: 0", "infos", "debugger attached"])
def test_keywords_inside_words_do_not_match(classifier: LineClassifier, line: str) -> None:
    result = classifier.classify(line)
    assert result.levels == ()
    assert result.primary is None
    assert not result.matched


@pytest.mark.parametrize(
    ("line", "level"),
    [
        ("[WARNING]disk almost full", LogLevel.WARN),
        ("x[warn]y", LogLevel.WARN),
        ("svc level=warning msg=slow", LogLevel.WARN),
        ('{"level":"error"}', LogLevel.ERROR),
        ('level:"info" started', LogLevel.INFO),
        ("Level=Debug", LogLevel.DEBUG),
        ("TRACE enter handler", LogLevel.DEBUG),
        ("verbose output enabled", LogLevel.DEBUG),
    ],
)
def test_bracket_and_key_value_forms(classifier: LineClassifier, line: str, level: LogLevel) -> None:
    assert classifier.classify(line).primary == level


def test_line_can_match_several_levels(classifier: LineClassifier) -> None:
    result = classifier.classify("INFO: retrying after ERROR")
    assert result.levels == (LogLevel.ERROR, LogLevel.INFO)
    assert result.primary == LogLevel.ERROR


def test_primary_follows_priority_not_position(classifier: LineClassifier) -> None:
    result = classifier.classify("DEBUG then WARN then INFO")
    assert result.levels == (LogLevel.WARN, LogLevel.INFO, LogLevel.DEBUG)
    assert result.primary == LogLevel.WARN


def test_classification_is_repeatable(classifier: LineClassifier) -> None:
    # Matchers carry no cursor state between calls.
    lines = ["ERROR a", "ERROR b", "nothing", "ERROR c"]
    first = [classifier.classify(line) for line in lines]
    second = [classifier.classify(line) for line in lines]
    assert first == second
    assert [r.primary for r in first] == [LogLevel.ERROR, LogLevel.ERROR, None, LogLevel.ERROR]


@pytest.mark.parametrize("line", ["", "   ", "\x00\xff", "[", "level=", "é" * 1000])
def test_classify_is_total(classifier: LineClassifier, line: str) -> None:
    assert classifier.classify(line).primary is None


def test_matches_single_level(classifier: LineClassifier) -> None:
    assert classifier.matches("[INFO] ok", LogLevel.INFO)
    assert not classifier.matches("[INFO] ok", LogLevel.ERROR)


def test_matcher_kinds() -> None:
    assert keyword_matcher("WARN").kind == "keyword"
    assert bracket_matcher("WARN").matches("[warn]")
    assert not bracket_matcher("WARN").matches("warn")
    assert key_value_matcher("warn").matches('level="WARN"')


def test_rule_set_order_and_lookup() -> None:
    rules = default_rule_set()
    assert rules.names == (LogLevel.ERROR, LogLevel.WARN, LogLevel.INFO, LogLevel.DEBUG)
    assert [level.rank for level in rules] == [0, 1, 2, 3]
    assert rules.get("warning").name is LogLevel.WARN
    assert rules.get(LogLevel.DEBUG).style.background == "#4d96ff22"
    assert rules.get(LogLevel.ERROR).style.overview_ruler
    assert len(rules) == 4


def test_rule_set_styles_follow_config() -> None:
    from loglens.core.config import LogLensConfig

    rules = LevelRuleSet.from_config(LogLensConfig(error_color="#123456"))
    assert rules.get(LogLevel.ERROR).style.background == "#12345633"


def test_parse_level() -> None:
    assert parse_level(" warn ") is LogLevel.WARN
    assert parse_level("Warning") is LogLevel.WARN
    with pytest.raises(ValueError, match="Unknown log level"):
        parse_level("notice")
