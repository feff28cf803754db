"""Rules over step wording and step keyword types."""

from __future__ import annotations

import re
from typing import ClassVar

from gherkin_analyzer.checks.base import (
    BaseCheck,
    PropertyKind,
    PropertyValue,
    RuleDescriptor,
    RuleProperty,
)
from gherkin_analyzer.model import (
    FeatureDefinition,
    RuleDefinition,
    ScenarioDefinition,
    StepDefinition,
    StepKeywordType,
    TextPosition,
)
from gherkin_analyzer.severity import RuleSeverity

# Ordinary user-facing words such as "page" and "button" are allowed.
TECHNICAL_TERMS = frozenset(
    {
        "click", "checkbox", "dropdown", "field", "link",
        "screen", "select", "submit", "textbox", "url",
        "radio", "input", "textarea", "element", "div", "span",
        "modal", "popup", "tab", "menu", "toolbar", "icon",
        "hover", "scroll", "drag", "css", "html", "xpath",
    }
)
_WORD_RE = re.compile(r"\w+")


def _compile(value: PropertyValue) -> re.Pattern[str]:
    try:
        return re.compile(str(value))
    except re.error as exc:
        raise ValueError(str(exc)) from exc


class BusinessLanguageOnlyCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="business-language-only",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
    )

    def visit_step(self, step: StepDefinition) -> None:
        for word in _WORD_RE.findall(step.text.lower()):
            if word in TECHNICAL_TERMS:
                self.add_issue(
                    step.position,
                    f'Replace the technical term "{word}" with business-level language.',
                )
                return


class StepSentenceMaxLengthCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="step-sentence-max-length",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
        properties=(
            RuleProperty(
                "maxLength",
                PropertyKind.INT,
                100,
                "Maximum allowed length for step sentence text",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.max_length = 100

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "maxLength":
            super().set_property(name, value)
        self.max_length = int(value)

    def visit_step(self, step: StepDefinition) -> None:
        length = len(step.text)
        if length > self.max_length:
            self.add_issue(
                step.position,
                f"Step sentence is {length} characters long, which exceeds the maximum "
                f"of {self.max_length} characters. Consider splitting it into shorter steps.",
            )


class _StepPatternCheck(BaseCheck):
    """Require the text of one step type to match a regular expression.

    Conjunction steps (And, But) are not checked.
    """

    step_type: ClassVar[StepKeywordType]
    label: ClassVar[str]

    def __init__(self) -> None:
        super().__init__()
        self.pattern = re.compile(".*")

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "pattern":
            super().set_property(name, value)
        self.pattern = _compile(value)

    def visit_step(self, step: StepDefinition) -> None:
        if step.keyword_type is not self.step_type:
            return
        if not self.pattern.fullmatch(step.text):
            self.add_issue(
                step.position,
                f"{self.label} step does not match the required pattern: "
                f"{self.pattern.pattern}",
            )


def _pattern_property(label: str) -> RuleProperty:
    return RuleProperty(
        "pattern",
        PropertyKind.STRING,
        ".*",
        f"Regular expression that {label} step text must match",
    )


class GivenStepPatternCheck(_StepPatternCheck):
    descriptor = RuleDescriptor(
        key="given-step-pattern",
        severity=RuleSeverity.MINOR,
        properties=(_pattern_property("Given"),),
    )
    step_type = StepKeywordType.CONTEXT
    label = "Given"


class WhenStepPatternCheck(_StepPatternCheck):
    descriptor = RuleDescriptor(
        key="when-step-pattern",
        severity=RuleSeverity.MINOR,
        properties=(_pattern_property("When"),),
    )
    step_type = StepKeywordType.ACTION
    label = "When"


class ThenStepPatternCheck(_StepPatternCheck):
    descriptor = RuleDescriptor(
        key="then-step-pattern",
        severity=RuleSeverity.MINOR,
        properties=(_pattern_property("Then"),),
    )
    step_type = StepKeywordType.OUTCOME
    label = "Then"


class NoUnknownStepTypeCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="no-unknown-step-type",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
    )

    def visit_step(self, step: StepDefinition) -> None:
        if step.keyword_type is StepKeywordType.UNKNOWN:
            self.add_issue(
                step.position,
                f'The type of this "{step.keyword.strip()}" step cannot be determined. '
                "Use a Given, When or Then keyword instead.",
            )


class NoRestrictedPatternsCheck(BaseCheck):
    """Search names, descriptions and step text for a forbidden expression.

    The default empty pattern leaves the rule silent.
    """

    descriptor = RuleDescriptor(
        key="no-restricted-patterns",
        severity=RuleSeverity.MAJOR,
        properties=(
            RuleProperty(
                "pattern",
                PropertyKind.STRING,
                "",
                "Regular expression to match against step text, names, and "
                "descriptions. Leave empty to disable the rule.",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.pattern: re.Pattern[str] | None = None

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "pattern":
            super().set_property(name, value)
        self.pattern = _compile(value) if str(value) else None

    def visit_feature(self, feature: FeatureDefinition) -> None:
        self._check(feature.name, feature.position, "Feature name")
        self._check(feature.description, feature.position, "Feature description")

    def visit_rule(self, rule: RuleDefinition) -> None:
        self._check(rule.name, rule.position, "Rule name")
        self._check(rule.description, rule.position, "Rule description")

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        self._check(scenario.name, scenario.position, "Scenario name")
        self._check(scenario.description, scenario.position, "Scenario description")

    def visit_step(self, step: StepDefinition) -> None:
        self._check(step.text, step.position, "Step text")

    def _check(self, text: str, position: TextPosition, element: str) -> None:
        if not text or self.pattern is None:
            return
        if self.pattern.search(text):
            self.add_issue(
                position,
                f'{element} matches the restricted pattern "{self.pattern.pattern}". '
                "Remove or rephrase it.",
            )
