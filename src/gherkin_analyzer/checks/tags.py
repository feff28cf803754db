"""Tag and naming rules."""

from __future__ import annotations

import re
from typing import Sequence

from gherkin_analyzer.checks.base import (
    BaseCheck,
    PropertyKind,
    PropertyValue,
    RuleDescriptor,
    RuleProperty,
)
from gherkin_analyzer.model import (
    ExamplesDefinition,
    FeatureDefinition,
    FeatureFile,
    RuleDefinition,
    ScenarioDefinition,
    TagDefinition,
    TextPosition,
)
from gherkin_analyzer.severity import RuleSeverity

DEFAULT_TAG_PATTERN = r"^[a-z0-9][a-z0-9_.:\-]*$"


class NoDuplicateTagsCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="no-duplicate-tags",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
    )

    def visit_feature(self, feature: FeatureDefinition) -> None:
        self._check(feature.tags)

    def visit_rule(self, rule: RuleDefinition) -> None:
        self._check(rule.tags)

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        self._check(scenario.tags)

    def visit_examples(self, examples: ExamplesDefinition) -> None:
        self._check(examples.tags)

    def _check(self, tags: Sequence[TagDefinition]) -> None:
        seen: set[str] = set()
        for tag in tags:
            if tag.name in seen:
                self.add_issue(
                    tag.position,
                    f'Remove this duplicate tag "@{tag.name}"; '
                    "it already appears on this element.",
                )
            seen.add(tag.name)


class NoExamplesTagsCheck(BaseCheck):
    """Flag tags on Examples blocks.

    Relies on the walker visiting an Examples block before that block's tags.
    """

    descriptor = RuleDescriptor(
        key="no-examples-tags",
        severity=RuleSeverity.MINOR,
    )

    def __init__(self) -> None:
        super().__init__()
        self._in_examples = False

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        self._in_examples = False

    def visit_examples(self, examples: ExamplesDefinition) -> None:
        self._in_examples = True

    def visit_tag(self, tag: TagDefinition) -> None:
        if self._in_examples:
            self.add_issue(
                tag.position,
                "Move this tag up to the Scenario Outline level. "
                "Tags should not be placed on Examples sections.",
            )

    def leave_scenario(self, scenario: ScenarioDefinition) -> None:
        self._in_examples = False


class TagNamePatternCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="tag-name-pattern",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
        properties=(
            RuleProperty(
                "pattern",
                PropertyKind.STRING,
                DEFAULT_TAG_PATTERN,
                "Regular expression tag names (without '@') must match",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.pattern = re.compile(DEFAULT_TAG_PATTERN)

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "pattern":
            super().set_property(name, value)
        try:
            self.pattern = re.compile(str(value))
        except re.error as exc:
            raise ValueError(str(exc)) from exc

    def visit_tag(self, tag: TagDefinition) -> None:
        if not self.pattern.search(tag.name):
            self.add_issue(
                tag.position,
                f'Rename tag "@{tag.name}" to match the regular expression '
                f'"{self.pattern.pattern}".',
            )


class MaxTagsPerElementCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="max-tags-per-element",
        severity=RuleSeverity.MINOR,
        properties=(
            RuleProperty(
                "maxTags",
                PropertyKind.INT,
                8,
                "Maximum number of tags allowed per element",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.max_tags = 8

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "maxTags":
            super().set_property(name, value)
        self.max_tags = int(value)

    def visit_feature(self, feature: FeatureDefinition) -> None:
        self._check(feature.tags, feature.position, "Feature")

    def visit_rule(self, rule: RuleDefinition) -> None:
        self._check(rule.tags, rule.position, "Rule")

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        self._check(scenario.tags, scenario.position, "Scenario")

    def visit_examples(self, examples: ExamplesDefinition) -> None:
        self._check(examples.tags, examples.position, "Examples")

    def _check(
        self, tags: Sequence[TagDefinition], position: TextPosition, element: str
    ) -> None:
        if len(tags) > self.max_tags:
            self.add_issue(
                position,
                f"{element} has {len(tags)} tags, which exceeds the limit of "
                f"{self.max_tags}. Reduce the number of tags.",
            )


class NameMaxLengthCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="name-max-length",
        severity=RuleSeverity.MINOR,
        properties=(
            RuleProperty(
                "maxLength",
                PropertyKind.INT,
                120,
                "Maximum allowed length for Feature, Scenario, and Rule names",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.max_length = 120

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "maxLength":
            super().set_property(name, value)
        self.max_length = int(value)

    def visit_feature(self, feature: FeatureDefinition) -> None:
        self._check(feature.name, feature.position, "Feature")

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        self._check(scenario.name, scenario.position, "Scenario")

    def visit_rule(self, rule: RuleDefinition) -> None:
        self._check(rule.name, rule.position, "Rule")

    def _check(self, name: str, position: TextPosition, element: str) -> None:
        if len(name) > self.max_length:
            self.add_issue(
                position,
                f"{element} name is {len(name)} characters long, which exceeds the limit "
                f"of {self.max_length}. Shorten the name.",
            )


def _names(tags: Sequence[TagDefinition]) -> set[str]:
    return {tag.name for tag in tags}


def _common_tags(scenarios: Sequence[ScenarioDefinition]) -> set[str]:
    """Tag names carried by every scenario in ``scenarios``."""
    if not scenarios:
        return set()
    common = _names(scenarios[0].tags)
    for scenario in scenarios[1:]:
        common &= _names(scenario.tags)
    return common


def _tag_list(names: set[str]) -> str:
    return ", ".join(sorted(f"@{name}" for name in names))


def _compile(value: PropertyValue) -> re.Pattern[str]:
    try:
        return re.compile(str(value))
    except re.error as exc:
        raise ValueError(str(exc)) from exc


class TagPermittedValuesCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="tag-permitted-values",
        severity=RuleSeverity.MINOR,
        properties=(
            RuleProperty(
                "pattern",
                PropertyKind.STRING,
                ".*",
                "Regular expression pattern that tag names must match",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.pattern = re.compile(".*")

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "pattern":
            super().set_property(name, value)
        self.pattern = _compile(value)

    def visit_tag(self, tag: TagDefinition) -> None:
        if not self.pattern.fullmatch(tag.name):
            self.add_issue(
                tag.position,
                f"Tag name '{tag.name}' does not match the permitted pattern: "
                f"{self.pattern.pattern}",
            )


class TagPlacementCheck(BaseCheck):
    """Suggest promoting tags shared by every scenario to the Feature.

    A Feature whose scenarios all live in a single Rule is left to
    ``rule-tag-placement``.
    """

    descriptor = RuleDescriptor(
        key="tag-placement",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
    )

    def leave_feature(self, feature: FeatureDefinition) -> None:
        scenarios = feature.all_scenarios()
        if not scenarios:
            return
        if not feature.scenarios and len(feature.rules) <= 1:
            return
        common = _common_tags(scenarios) - _names(feature.tags)
        if common:
            self.add_line_issue(
                feature.position.line,
                "Move these tags to the Feature level since they appear on all "
                f"scenarios: {_tag_list(common)}",
            )


class NoRedundantTagsCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="no-redundant-tags",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
    )

    def __init__(self) -> None:
        super().__init__()
        self._feature_tags: set[str] = set()

    def visit_feature_file(self, file: FeatureFile) -> None:
        self._feature_tags = set()

    def visit_feature(self, feature: FeatureDefinition) -> None:
        self._feature_tags = _names(feature.tags)

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        for tag in scenario.tags:
            if tag.name in self._feature_tags:
                self.add_issue(
                    tag.position,
                    f"Remove this redundant tag '{tag.name}' that is already set "
                    "at the Feature level.",
                )


class NoRedundantRuleTagsCheck(BaseCheck):
    """Flag scenario tags repeating a tag of the enclosing Rule.

    Tags also present on the Feature are reported by ``no-redundant-tags``.
    """

    descriptor = RuleDescriptor(
        key="no-redundant-rule-tags",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
    )

    def __init__(self) -> None:
        super().__init__()
        self._feature_tags: set[str] = set()
        self._rule_tags: set[str] | None = None

    def visit_feature_file(self, file: FeatureFile) -> None:
        self._feature_tags = set()
        self._rule_tags = None

    def visit_feature(self, feature: FeatureDefinition) -> None:
        self._feature_tags = _names(feature.tags)

    def visit_rule(self, rule: RuleDefinition) -> None:
        self._rule_tags = _names(rule.tags)

    def leave_rule(self, rule: RuleDefinition) -> None:
        self._rule_tags = None

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        if self._rule_tags is None:
            return
        for tag in scenario.tags:
            if tag.name in self._rule_tags and tag.name not in self._feature_tags:
                self.add_issue(
                    tag.position,
                    f"Remove this redundant tag '{tag.name}' that is already set "
                    "at the Rule level.",
                )


class RuleTagPlacementCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="rule-tag-placement",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
    )

    def leave_rule(self, rule: RuleDefinition) -> None:
        if not rule.scenarios:
            return
        feature = self.context.feature_file.feature
        feature_tags = _names(feature.tags) if feature is not None else set()
        common = _common_tags(rule.scenarios) - _names(rule.tags) - feature_tags
        if common:
            self.add_issue(
                rule.position,
                "Move these tags to the Rule level since they appear on all scenarios "
                f"within this Rule: {_tag_list(common)}",
            )


class RequiredTagsCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="required-tags",
        severity=RuleSeverity.MAJOR,
        properties=(
            RuleProperty(
                "pattern",
                PropertyKind.STRING,
                ".*",
                "Regular expression that at least one tag must match (without the leading @)",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.pattern = re.compile(".*")

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "pattern":
            super().set_property(name, value)
        self.pattern = _compile(value)

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        if not any(self.pattern.fullmatch(tag.name) for tag in scenario.tags):
            self.add_issue(
                scenario.position,
                "Add at least one tag matching the required pattern "
                f'"{self.pattern.pattern}" to this scenario.',
            )


class NoRestrictedTagsCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="no-restricted-tags",
        severity=RuleSeverity.MAJOR,
        properties=(
            RuleProperty(
                "restrictedTags",
                PropertyKind.STRING,
                "wip,debug,ignore,manual",
                "Comma-separated list of restricted tag names (without leading @)",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.restricted = {"wip", "debug", "ignore", "manual"}

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "restrictedTags":
            super().set_property(name, value)
        self.restricted = {part.strip() for part in str(value).split(",") if part.strip()}

    def visit_tag(self, tag: TagDefinition) -> None:
        if tag.name in self.restricted:
            self.add_issue(
                tag.position,
                f'Remove the restricted tag "@{tag.name}"; it should not be committed.',
            )


class NoConflictingTagsCheck(BaseCheck):
    """Flag elements carrying both tags of a configured pair.

    ``conflictPairs`` reads like ``wip+release-ready,manual+automated``;
    malformed pairs are ignored.
    """

    descriptor = RuleDescriptor(
        key="no-conflicting-tags",
        severity=RuleSeverity.MAJOR,
        properties=(
            RuleProperty(
                "conflictPairs",
                PropertyKind.STRING,
                "",
                "Comma-separated conflict pairs using + as separator. "
                "Example: wip+release-ready,manual+automated,slow+fast",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.pairs: list[tuple[str, str]] = []

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "conflictPairs":
            super().set_property(name, value)
        pairs: list[tuple[str, str]] = []
        for chunk in str(value).split(","):
            parts = [part.strip() for part in chunk.strip().split("+")]
            if len(parts) == 2 and all(parts):
                pairs.append((parts[0], parts[1]))
        self.pairs = pairs

    def visit_feature(self, feature: FeatureDefinition) -> None:
        self._check(feature.tags, feature.position)

    def visit_rule(self, rule: RuleDefinition) -> None:
        self._check(rule.tags, rule.position)

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        self._check(scenario.tags, scenario.position)

    def visit_examples(self, examples: ExamplesDefinition) -> None:
        self._check(examples.tags, examples.position)

    def _check(self, tags: Sequence[TagDefinition], position: TextPosition) -> None:
        names = _names(tags)
        for first, second in self.pairs:
            if first in names and second in names:
                self.add_issue(
                    position,
                    f'Tags "@{first}" and "@{second}" conflict and should not '
                    "appear together.",
                )
