"""Structural rules: required elements, Examples tables, size limits."""

from __future__ import annotations

import re

from gherkin_analyzer.checks.base import (
    BaseCheck,
    PropertyKind,
    PropertyValue,
    RuleDescriptor,
    RuleProperty,
)
from gherkin_analyzer.checks.style import file_name_from_uri
from gherkin_analyzer.model import (
    BackgroundDefinition,
    DataTableDefinition,
    ExamplesDefinition,
    FeatureDefinition,
    FeatureFile,
    ScenarioDefinition,
    StepDefinition,
    TextPosition,
)
from gherkin_analyzer.severity import RuleSeverity

PLACEHOLDER_RE = re.compile(r"<([^>]+)>")
_NON_SLUG_RE = re.compile(r"[^a-z0-9]+")


class FeatureFileRequiredCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="feature-file-required",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
    )

    def visit_feature_file(self, file: FeatureFile) -> None:
        if file.feature is None:
            self.add_file_issue(
                "Add a Feature definition to this file, or fix the syntax errors "
                "that prevent it from being parsed."
            )


class FeatureNameRequiredCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="feature-name-required",
        severity=RuleSeverity.CRITICAL,
        default_enabled=True,
    )

    def visit_feature(self, feature: FeatureDefinition) -> None:
        if not feature.name.strip():
            self.add_issue(feature.position, "Add a name to this Feature.")


class FeatureDescriptionRecommendedCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="feature-description-recommended",
        severity=RuleSeverity.INFO,
    )

    def visit_feature(self, feature: FeatureDefinition) -> None:
        if not feature.description.strip():
            self.add_issue(feature.position, "Add a description to this Feature.")


class ScenarioRequiredCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="scenario-required",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
    )

    def leave_feature(self, feature: FeatureDefinition) -> None:
        if not feature.all_scenarios():
            self.add_issue(feature.position, "Add at least one Scenario to this Feature.")


class ScenarioNameRequiredCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="scenario-name-required",
        severity=RuleSeverity.CRITICAL,
        default_enabled=True,
    )

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        if not scenario.name.strip():
            self.add_issue(scenario.position, "Add a name to this Scenario.")


class StepRequiredCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="step-required",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
    )

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        if not scenario.steps:
            self.add_issue(scenario.position, "Add at least one step to this Scenario.")

    def visit_background(self, background: BackgroundDefinition) -> None:
        if not background.steps:
            self.add_issue(background.position, "Add at least one step to this Background.")


class ExamplesMinimumRowsCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="examples-minimum-rows",
        severity=RuleSeverity.CRITICAL,
        default_enabled=True,
    )

    def visit_examples(self, examples: ExamplesDefinition) -> None:
        if examples.table is None or len(examples.table.rows) < 2:
            self.add_issue(
                examples.position, "Add at least one data row to this Examples table."
            )


class ExamplesColumnCoverageCheck(BaseCheck):
    """Every ``<placeholder>`` used by an outline's steps needs an Examples column."""

    descriptor = RuleDescriptor(
        key="examples-column-coverage",
        severity=RuleSeverity.CRITICAL,
        default_enabled=True,
    )

    def __init__(self) -> None:
        super().__init__()
        self._scenario: ScenarioDefinition | None = None

    def visit_feature_file(self, file: FeatureFile) -> None:
        self._scenario = None

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        self._scenario = scenario

    def visit_examples(self, examples: ExamplesDefinition) -> None:
        scenario = self._scenario
        if scenario is None or not scenario.is_outline:
            return
        if examples.table is None or not examples.table.rows:
            return
        header = set(examples.table.rows[0])
        referenced: dict[str, None] = {}
        for step in scenario.steps:
            for name in PLACEHOLDER_RE.findall(step.text):
                referenced.setdefault(name, None)
        for name in referenced:
            if name not in header:
                self.add_issue(
                    examples.position, f'Add a "{name}" column to this Examples table.'
                )


class ScenarioCountLimitCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="scenario-count-limit",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
        properties=(
            RuleProperty(
                "maxScenarios",
                PropertyKind.INT,
                12,
                "Maximum number of scenarios allowed per Feature",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.max_scenarios = 12
        self._count = 0

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "maxScenarios":
            super().set_property(name, value)
        self.max_scenarios = int(value)

    def visit_feature_file(self, file: FeatureFile) -> None:
        self._count = 0

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        self._count += 1

    def leave_feature(self, feature: FeatureDefinition) -> None:
        if self._count > self.max_scenarios:
            self.add_issue(
                feature.position,
                f"This Feature has {self._count} scenarios, which exceeds the limit of "
                f"{self.max_scenarios}. Split it into smaller features.",
            )


class StepCountLimitCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="step-count-limit",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
        properties=(
            RuleProperty(
                "maxSteps",
                PropertyKind.INT,
                12,
                "Maximum number of steps allowed per Scenario",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.max_steps = 12

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "maxSteps":
            super().set_property(name, value)
        self.max_steps = int(value)

    def leave_scenario(self, scenario: ScenarioDefinition) -> None:
        count = len(scenario.steps)
        if count > self.max_steps:
            self.add_issue(
                scenario.position,
                f"This Scenario has {count} steps, which exceeds the limit of "
                f"{self.max_steps}. Split it into smaller scenarios.",
            )


class ParseErrorCheck(BaseCheck):
    # Parse failures are reported by the engine; the rule exists so the key
    # can be configured like any other.
    descriptor = RuleDescriptor(
        key="parse-error",
        severity=RuleSeverity.CRITICAL,
        default_enabled=True,
    )


class ScenarioDescriptionRecommendedCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="scenario-description-recommended",
        severity=RuleSeverity.INFO,
    )

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        if not scenario.description.strip():
            self.add_issue(
                scenario.position, "Add a description to this scenario to explain its purpose."
            )


class FeatureNameMatchesFilenameCheck(BaseCheck):
    """At least one word (3+ characters) of the Feature name must appear in the file name."""

    descriptor = RuleDescriptor(
        key="feature-name-matches-filename",
        severity=RuleSeverity.MINOR,
    )

    def visit_feature(self, feature: FeatureDefinition) -> None:
        if not feature.name.strip():
            return
        file_name = file_name_from_uri(self.context.feature_file.uri)
        stem, dot, _ = file_name.rpartition(".")
        file_slug = _slugify(stem if dot and stem else file_name)
        words = [word for word in _slugify(feature.name).split("-") if len(word) >= 3]
        if words and not any(word in file_slug for word in words):
            self.add_issue(
                feature.position,
                f'Feature name "{feature.name}" does not correspond to file name '
                f'"{file_name}".',
            )


def _slugify(text: str) -> str:
    return _NON_SLUG_RE.sub("-", text.lower()).strip("-")


class NoUnusedVariablesCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="no-unused-variables",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
    )

    def __init__(self) -> None:
        super().__init__()
        self._scenario: ScenarioDefinition | None = None

    def visit_feature_file(self, file: FeatureFile) -> None:
        self._scenario = None

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        self._scenario = scenario

    def visit_examples(self, examples: ExamplesDefinition) -> None:
        scenario = self._scenario
        if scenario is None or not scenario.is_outline:
            return
        if examples.table is None or not examples.table.rows:
            return
        referenced = {
            name for step in scenario.steps for name in PLACEHOLDER_RE.findall(step.text)
        }
        for column in examples.table.rows[0]:
            if column not in referenced:
                self.add_issue(
                    examples.position,
                    f'Remove the unused "{column}" column from this Examples table.',
                )


class ExamplesNameWhenMultipleCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="examples-name-when-multiple",
        severity=RuleSeverity.MINOR,
    )

    def leave_scenario(self, scenario: ScenarioDefinition) -> None:
        if len(scenario.examples) <= 1:
            return
        for examples in scenario.examples:
            if not examples.name.strip():
                self.add_issue(
                    examples.position,
                    "Add a descriptive name to this Examples section; when multiple "
                    "Examples sections exist, each should be named to distinguish them "
                    "in test reports.",
                )


class OutlineSingleExampleRowCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="outline-single-example-row",
        severity=RuleSeverity.MINOR,
        properties=(
            RuleProperty(
                "maxDataRows",
                PropertyKind.INT,
                1,
                "Maximum data rows per Examples section that triggers the issue "
                "(all must be at or below this threshold)",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.max_data_rows = 1

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "maxDataRows":
            super().set_property(name, value)
        self.max_data_rows = int(value)

    def leave_scenario(self, scenario: ScenarioDefinition) -> None:
        if not scenario.is_outline:
            return
        for examples in scenario.examples:
            # Row 0 is the header.
            if examples.table is not None and len(examples.table.rows) - 1 > self.max_data_rows:
                return
        self.add_issue(
            scenario.position,
            f"This Scenario Outline has {len(scenario.examples)} Examples section(s), "
            f"each with at most {self.max_data_rows} data row(s). "
            "Consider using a plain Scenario instead.",
        )


class NoEmptyExamplesCellsCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="no-empty-examples-cells",
        severity=RuleSeverity.MAJOR,
    )

    def visit_examples(self, examples: ExamplesDefinition) -> None:
        if examples.table is None or len(examples.table.rows) < 2:
            return
        header, *rows = examples.table.rows
        for row_number, row in enumerate(rows, start=1):
            for index, cell in enumerate(row):
                if cell.strip():
                    continue
                column = header[index] if index < len(header) else f"column {index + 1}"
                self.add_issue(
                    examples.position,
                    f"Examples table has an empty cell in data row {row_number}, "
                    f'column "{column}".',
                )


class DataTableMaxColumnsCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="data-table-max-columns",
        severity=RuleSeverity.MINOR,
        properties=(
            RuleProperty(
                "maxColumns",
                PropertyKind.INT,
                10,
                "Maximum number of columns allowed in a data table",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.max_columns = 10

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "maxColumns":
            super().set_property(name, value)
        self.max_columns = int(value)

    def visit_step(self, step: StepDefinition) -> None:
        if step.data_table is not None:
            self._check(step.data_table, step.position, "Step")

    def visit_examples(self, examples: ExamplesDefinition) -> None:
        if examples.table is not None:
            self._check(examples.table, examples.position, "Examples")

    def _check(self, table: DataTableDefinition, position: TextPosition, element: str) -> None:
        if not table.rows:
            return
        columns = len(table.rows[0])
        if columns > self.max_columns:
            self.add_issue(
                position,
                f"{element} data table has {columns} columns, which exceeds the limit of "
                f"{self.max_columns}. Consider reducing the number of columns.",
            )
