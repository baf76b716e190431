"""Line classification against a LevelRuleSet."""

from __future__ import annotations

from dataclasses import dataclass, field

from .models import ClassificationResult, LogLevel
from .rules import LevelRuleSet, default_rule_set


@dataclass(frozen=True, slots=True)
class LineClassifier:
    """Assign severity levels to single lines.

    Every level is tested independently, so a line such as
    ``"INFO: retrying after ERROR"`` belongs to both INFO and ERROR; its primary
    level is ERROR because ERROR ranks first.
    """

    rules: LevelRuleSet = field(default_factory=default_rule_set)

    def classify(self, line: str) -> ClassificationResult:
        matched: list[LogLevel] = []
        for level in self.rules:
            for m in level.matchers:
                if m.matches(line):
                    matched.append(level.name)
                    break

        primary = matched[0] if matched else None
        return ClassificationResult(levels=tuple(matched), primary=primary)

    def matches(self, line: str, level: LogLevel) -> bool:
        """Test a single level without classifying the whole line."""
        return self.rules.get(level).matches(line)
