from __future__ import annotations

from gherkin_analyzer.checks.base import (
    BaseCheck,
    PropertyKind,
    PropertyValue,
    RuleDescriptor,
    RuleProperty,
)
from gherkin_analyzer.severity import RuleSeverity


class SpellingAccuracyCheck(BaseCheck):
    """Registered so the key and its property are known; never activated."""

    descriptor = RuleDescriptor(
        key="spelling-accuracy",
        severity=RuleSeverity.INFO,
        properties=(
            RuleProperty(
                "wordsToIgnore",
                PropertyKind.STRING,
                "",
                "Comma-separated list of words to exclude from spell checking",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.words_to_ignore: tuple[str, ...] = ()

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "wordsToIgnore":
            super().set_property(name, value)
        self.words_to_ignore = tuple(
            word.strip() for word in str(value).split(",") if word.strip()
        )
