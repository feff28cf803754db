"""Rules for ``Rule:`` sections and the remaining block-level limits."""

from __future__ import annotations

from gherkin_analyzer.checks.base import (
    BaseCheck,
    PropertyKind,
    PropertyValue,
    RuleDescriptor,
    RuleProperty,
)
from gherkin_analyzer.model import (
    BackgroundDefinition,
    ExamplesDefinition,
    FeatureDefinition,
    RuleDefinition,
    StepDefinition,
    TextPosition,
)
from gherkin_analyzer.severity import RuleSeverity


class RuleNameRequiredCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="rule-name-required",
        severity=RuleSeverity.CRITICAL,
        default_enabled=True,
    )

    def visit_rule(self, rule: RuleDefinition) -> None:
        if not rule.name.strip():
            self.add_issue(rule.position, "Add a name to this Rule.")


class RuleScenarioRequiredCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="rule-scenario-required",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
    )

    def leave_rule(self, rule: RuleDefinition) -> None:
        if not rule.scenarios:
            self.add_issue(rule.position, "Add at least one Scenario to this Rule.")


class UniqueRuleNameCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="unique-rule-name",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
    )

    def __init__(self) -> None:
        super().__init__()
        self._occurrences: dict[str, list[TextPosition]] = {}

    def visit_feature(self, feature: FeatureDefinition) -> None:
        self._occurrences = {}

    def visit_rule(self, rule: RuleDefinition) -> None:
        if rule.name.strip():
            self._occurrences.setdefault(rule.name, []).append(rule.position)

    def leave_feature(self, feature: FeatureDefinition) -> None:
        for name, positions in self._occurrences.items():
            for position in positions[1:]:
                self.add_issue(
                    position,
                    f'Rename this Rule. The name "{name}" is already used in this Feature.',
                )


class RuleDescriptionRecommendedCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="rule-description-recommended",
        severity=RuleSeverity.INFO,
    )

    def visit_rule(self, rule: RuleDefinition) -> None:
        if not rule.description.strip():
            self.add_issue(rule.position, "Add a description to this Rule.")


class FeatureRuleCountLimitCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="feature-rule-count-limit",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
        properties=(
            RuleProperty(
                "maxRules",
                PropertyKind.INT,
                8,
                "Maximum number of Rule blocks allowed per Feature",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.max_rules = 8

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "maxRules":
            super().set_property(name, value)
        self.max_rules = int(value)

    def leave_feature(self, feature: FeatureDefinition) -> None:
        count = len(feature.rules)
        if count > self.max_rules:
            self.add_issue(
                feature.position,
                f"This Feature has {count} Rule blocks, which exceeds the limit of "
                f"{self.max_rules}. Split it into smaller features.",
            )


class RuleScenarioCountLimitCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="rule-scenario-count-limit",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
        properties=(
            RuleProperty(
                "maxScenarios",
                PropertyKind.INT,
                10,
                "Maximum number of scenarios allowed per Rule block",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.max_scenarios = 10

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "maxScenarios":
            super().set_property(name, value)
        self.max_scenarios = int(value)

    def leave_rule(self, rule: RuleDefinition) -> None:
        count = len(rule.scenarios)
        if count > self.max_scenarios:
            self.add_issue(
                rule.position,
                f"This Rule has {count} scenarios, which exceeds the limit of "
                f"{self.max_scenarios}. Decompose it into smaller rules.",
            )


class BackgroundStepCountLimitCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="background-step-count-limit",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
        properties=(
            RuleProperty(
                "maxSteps",
                PropertyKind.INT,
                5,
                "Maximum number of steps allowed per Background",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.max_steps = 5

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "maxSteps":
            super().set_property(name, value)
        self.max_steps = int(value)

    def visit_background(self, background: BackgroundDefinition) -> None:
        count = len(background.steps)
        if count > self.max_steps:
            self.add_issue(
                background.position,
                f"This Background has {count} steps (maximum allowed: {self.max_steps}). "
                "Consider moving some steps into individual scenarios.",
            )


class NoEmptyDocStringsCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="no-empty-doc-strings",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
    )

    def visit_step(self, step: StepDefinition) -> None:
        if step.doc_string is not None and not step.doc_string.content.strip():
            self.add_issue(step.position, "Remove or fill in this empty doc string.")


class UniqueExamplesHeadersCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="unique-examples-headers",
        severity=RuleSeverity.CRITICAL,
        default_enabled=True,
    )

    def visit_examples(self, examples: ExamplesDefinition) -> None:
        if examples.table is None or not examples.table.rows:
            return
        seen: set[str] = set()
        for header in examples.table.rows[0]:
            name = header.strip()
            if name in seen:
                self.add_issue(
                    examples.position, f'Remove duplicate Examples header "{name}".'
                )
            seen.add(name)
