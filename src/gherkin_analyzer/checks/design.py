"""Scenario design rules: step ordering, keyword usage, outline hygiene."""

from __future__ import annotations

from collections import Counter
from typing import Sequence

from gherkin.dialect import Dialect

from gherkin_analyzer.checks.base import BaseCheck, RuleDescriptor
from gherkin_analyzer.checks.structure import PLACEHOLDER_RE
from gherkin_analyzer.model import (
    BackgroundDefinition,
    FeatureDefinition,
    FeatureFile,
    RuleDefinition,
    ScenarioDefinition,
    StepDefinition,
    StepKeywordType,
    TextPosition,
)
from gherkin_analyzer.severity import RuleSeverity

_PHASES = {
    StepKeywordType.CONTEXT: 0,
    StepKeywordType.ACTION: 1,
    StepKeywordType.OUTCOME: 2,
}


def outline_keywords(language: str) -> frozenset[str]:
    """Scenario Outline keywords of ``language``, falling back to English."""
    dialect = Dialect.for_name(language) or Dialect.for_name("en")
    return frozenset(keyword.strip() for keyword in dialect.scenario_outline_keywords)


class BackgroundGivenOnlyCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="background-given-only",
        severity=RuleSeverity.CRITICAL,
        default_enabled=True,
    )

    def visit_background(self, background: BackgroundDefinition) -> None:
        for step in background.steps:
            if step.keyword_type in (StepKeywordType.ACTION, StepKeywordType.OUTCOME):
                self.add_issue(
                    step.position,
                    f"Move this {step.keyword.strip()} step out of the Background. "
                    "Only Given steps are allowed here.",
                )


class SharedGivenToBackgroundCheck(BaseCheck):
    """Suggest a Background when every scenario of a block opens with the same Given."""

    descriptor = RuleDescriptor(
        key="shared-given-to-background",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
    )

    def __init__(self) -> None:
        super().__init__()
        self._feature_givens: list[list[str]] = []
        self._rule_givens: list[list[str]] = []
        self._inside_rule = False

    def visit_feature_file(self, file: FeatureFile) -> None:
        self._feature_givens = []
        self._rule_givens = []
        self._inside_rule = False

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        givens: list[str] = []
        for step in scenario.steps:
            if step.keyword_type not in (StepKeywordType.CONTEXT, StepKeywordType.CONJUNCTION):
                break
            givens.append(step.text)
        if self._inside_rule:
            self._rule_givens.append(givens)
        else:
            self._feature_givens.append(givens)

    def visit_rule(self, rule: RuleDefinition) -> None:
        self._inside_rule = True
        self._rule_givens = []

    def leave_rule(self, rule: RuleDefinition) -> None:
        if rule.background is None and _shares_givens(self._rule_givens):
            self.add_issue(
                rule.position,
                "Move the common Given step(s) to a Background section within this Rule.",
            )
        self._inside_rule = False

    def leave_feature(self, feature: FeatureDefinition) -> None:
        if feature.background is None and _shares_givens(self._feature_givens):
            self.add_issue(
                feature.position, "Move the common Given step(s) to a Background section."
            )


def _shares_givens(all_givens: Sequence[Sequence[str]]) -> bool:
    if len(all_givens) < 2 or any(not givens for givens in all_givens):
        return False
    common = set(all_givens[0])
    for givens in all_givens[1:]:
        common &= set(givens)
    return bool(common)


class StepOrderGivenWhenThenCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="step-order-given-when-then",
        severity=RuleSeverity.CRITICAL,
        default_enabled=True,
    )

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        current = 0
        for step in scenario.steps:
            # Conjunctions and unknown keywords inherit the current phase.
            phase = _PHASES.get(step.keyword_type)
            if phase is None:
                continue
            if phase < current:
                self.add_issue(
                    step.position,
                    f"Unexpected {step.keyword.strip()} step. Reorder the steps of this "
                    "scenario to follow Given/When/Then order.",
                )
            else:
                current = phase


class SingleWhenPerScenarioCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="single-when-per-scenario",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
    )

    def leave_scenario(self, scenario: ScenarioDefinition) -> None:
        count = sum(
            1 for step in scenario.steps if step.keyword_type is StepKeywordType.ACTION
        )
        if count > 1:
            self.add_issue(
                scenario.position,
                f"This Scenario has {count} When steps. "
                "Reduce to a single When step per Scenario.",
            )


class WhenThenRequiredCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="when-then-required",
        severity=RuleSeverity.CRITICAL,
        default_enabled=True,
    )

    def leave_scenario(self, scenario: ScenarioDefinition) -> None:
        types = {step.keyword_type for step in scenario.steps}
        has_when = StepKeywordType.ACTION in types
        has_then = StepKeywordType.OUTCOME in types
        if not has_when and not has_then:
            self.add_issue(scenario.position, "Add When and Then steps to this Scenario.")
        elif not has_when:
            self.add_issue(scenario.position, "Add a When step to this Scenario.")
        elif not has_then:
            self.add_issue(scenario.position, "Add a Then step to this Scenario.")


class NoDuplicateStepsCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="no-duplicate-steps",
        severity=RuleSeverity.CRITICAL,
        default_enabled=True,
    )

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        self._check(scenario.steps)

    def visit_background(self, background: BackgroundDefinition) -> None:
        self._check(background.steps)

    def _check(self, steps: Sequence[StepDefinition]) -> None:
        seen: set[str] = set()
        for step in steps:
            text = step.text.strip()
            if text in seen:
                self.add_issue(
                    step.position,
                    "Remove this duplicate step. "
                    "The same step text appears earlier in this block.",
                )
            seen.add(text)


class PreferAndButKeywordsCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="prefer-and-but-keywords",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
    )

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        previous: StepKeywordType | None = None
        for step in scenario.steps:
            if step.keyword_type in (StepKeywordType.UNKNOWN, StepKeywordType.CONJUNCTION):
                continue
            if step.keyword_type is previous:
                keyword = step.keyword.strip()
                self.add_issue(
                    step.position,
                    f"This {keyword} step has the same type as the previous step. "
                    f"Use 'And' or 'But' instead of repeating '{keyword}'.",
                )
            previous = step.keyword_type


class ScenarioOutlineRequiresExamplesCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="scenario-outline-requires-examples",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
    )

    def leave_scenario(self, scenario: ScenarioDefinition) -> None:
        if scenario.examples:
            return
        if scenario.keyword.strip() in outline_keywords(self.context.feature_file.language):
            self.add_issue(
                scenario.position,
                "Add an Examples section to this Scenario Outline. "
                "A Scenario Outline without Examples produces zero test iterations.",
            )


class NoStarStepPrefixCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="no-star-step-prefix",
        severity=RuleSeverity.MINOR,
    )

    def visit_step(self, step: StepDefinition) -> None:
        if step.keyword.strip() == "*":
            self.add_issue(
                step.position,
                'Replace the "*" prefix with an explicit keyword '
                "(Given, When, Then, And, or But).",
            )


class OutlinePlaceholderRequiredCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="outline-placeholder-required",
        severity=RuleSeverity.MAJOR,
    )

    def leave_scenario(self, scenario: ScenarioDefinition) -> None:
        if not scenario.is_outline:
            return
        texts = [scenario.name, scenario.description]
        texts.extend(step.text for step in scenario.steps)
        if any(PLACEHOLDER_RE.search(text) for text in texts):
            return
        self.add_issue(
            scenario.position,
            "This Scenario Outline does not reference any <placeholder> variables. "
            "Add placeholders to parameterize the steps, or use a plain Scenario instead.",
        )


class UseScenarioOutlineForExamplesCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="use-scenario-outline-for-examples",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
    )

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        if not scenario.examples:
            return
        if scenario.keyword.strip() not in outline_keywords(self.context.feature_file.language):
            self.add_issue(
                scenario.position,
                'Use "Scenario Outline" instead of "Scenario" when an Examples table '
                "is present.",
            )


class BackgroundNeedsMultipleScenariosCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="background-needs-multiple-scenarios",
        severity=RuleSeverity.MINOR,
    )

    def leave_feature(self, feature: FeatureDefinition) -> None:
        # With Rules present the Background may also serve their scenarios.
        if feature.background is None or feature.rules or len(feature.scenarios) != 1:
            return
        self.add_issue(
            feature.background.position,
            "This Background serves only one scenario. "
            "Inline the Background steps into the scenario for clarity.",
        )

    def leave_rule(self, rule: RuleDefinition) -> None:
        if rule.background is None or len(rule.scenarios) != 1:
            return
        self.add_issue(
            rule.background.position,
            "This Background serves only one scenario within this Rule. "
            "Inline the Background steps into the scenario for clarity.",
        )


class ConsistentScenarioKeywordCheck(BaseCheck):
    """Flag scenarios using a synonym (Scenario / Example) other than the file's majority.

    Outline keywords are not counted. Ties go to the keyword seen first.
    """

    descriptor = RuleDescriptor(
        key="consistent-scenario-keyword",
        severity=RuleSeverity.MINOR,
    )

    def __init__(self) -> None:
        super().__init__()
        self._usages: list[tuple[str, TextPosition]] = []
        self._outline_keywords: frozenset[str] = frozenset()

    def visit_feature_file(self, file: FeatureFile) -> None:
        self._usages = []
        self._outline_keywords = frozenset()

    def visit_feature(self, feature: FeatureDefinition) -> None:
        self._outline_keywords = outline_keywords(feature.language)

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        keyword = scenario.keyword.strip()
        if keyword and keyword not in self._outline_keywords:
            self._usages.append((keyword, scenario.position))

    def leave_feature_file(self, file: FeatureFile) -> None:
        counts = Counter(keyword for keyword, _ in self._usages)
        if len(counts) <= 1:
            return
        majority = counts.most_common(1)[0][0]
        for keyword, position in self._usages:
            if keyword != majority:
                self.add_issue(
                    position,
                    f'Use "{majority}" consistently instead of "{keyword}"; '
                    f'the majority of scenarios in this file use "{majority}".',
                )


class NoDuplicateScenarioBodiesCheck(BaseCheck):
    """Flag scenarios whose step sequence repeats an earlier one in the same block.

    Top-level scenarios and the scenarios of each Rule are separate blocks.
    """

    descriptor = RuleDescriptor(
        key="no-duplicate-scenario-bodies",
        severity=RuleSeverity.MAJOR,
    )

    def __init__(self) -> None:
        super().__init__()
        self._feature_bodies: list[tuple[tuple[str, ...], TextPosition]] = []
        self._rule_bodies: list[tuple[tuple[str, ...], TextPosition]] = []
        self._inside_rule = False

    def visit_feature_file(self, file: FeatureFile) -> None:
        self._feature_bodies = []
        self._rule_bodies = []
        self._inside_rule = False

    def visit_rule(self, rule: RuleDefinition) -> None:
        self._inside_rule = True

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        if not scenario.steps:
            return
        body = tuple(f"{step.keyword.strip()} {step.text.strip()}" for step in scenario.steps)
        target = self._rule_bodies if self._inside_rule else self._feature_bodies
        target.append((body, scenario.position))

    def leave_rule(self, rule: RuleDefinition) -> None:
        self._report(self._rule_bodies)
        self._rule_bodies = []
        self._inside_rule = False

    def leave_feature(self, feature: FeatureDefinition) -> None:
        self._report(self._feature_bodies)
        self._feature_bodies = []

    def _report(self, bodies: Sequence[tuple[tuple[str, ...], TextPosition]]) -> None:
        first_seen: dict[tuple[str, ...], TextPosition] = {}
        for body, position in bodies:
            first = first_seen.setdefault(body, position)
            if first is not position:
                self.add_issue(
                    position,
                    "This scenario has an identical step sequence to the scenario at line "
                    f"{first.line}. Consider consolidating.",
                )
