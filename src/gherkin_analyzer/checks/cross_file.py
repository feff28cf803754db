"""Rules that compare documents with each other."""

from __future__ import annotations

from dataclasses import dataclass

from gherkin_analyzer.checks.base import CrossFileCheck, CrossFileIssue, RuleDescriptor
from gherkin_analyzer.model import FeatureDefinition, ScenarioDefinition
from gherkin_analyzer.parser import DEFAULT_LANGUAGE
from gherkin_analyzer.severity import RuleSeverity


@dataclass(frozen=True)
class _Occurrence:
    uri: str
    line: int


class _UniqueNameCheck(CrossFileCheck):
    """Report every use of a name that appears more than once across all documents."""

    element = ""

    def __init__(self) -> None:
        super().__init__()
        self._occurrences: dict[str, list[_Occurrence]] = {}

    def _record(self, name: str, line: int) -> None:
        if not name.strip():
            return
        uri = self.context.feature_file.uri
        self._occurrences.setdefault(name, []).append(_Occurrence(uri, line))

    def finalize(self) -> list[CrossFileIssue]:
        issues: list[CrossFileIssue] = []
        for name, occurrences in self._occurrences.items():
            if len(occurrences) < 2:
                continue
            for index, occurrence in enumerate(occurrences):
                others = ", ".join(
                    f"{other.uri} (line {other.line})"
                    for other_index, other in enumerate(occurrences)
                    if other_index != index
                )
                issues.append(
                    self.cross_file_issue(
                        occurrence.uri,
                        occurrence.line,
                        f'Rename this {self.element}. The name "{name}" is also used in '
                        f"{others}.",
                    )
                )
        return issues


class UniqueFeatureNameCheck(_UniqueNameCheck):
    descriptor = RuleDescriptor(
        key="unique-feature-name",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
    )
    element = "Feature"

    def visit_feature(self, feature: FeatureDefinition) -> None:
        self._record(feature.name, feature.position.line)


class UniqueScenarioNameCheck(_UniqueNameCheck):
    descriptor = RuleDescriptor(
        key="unique-scenario-name",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
    )
    element = "Scenario"

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        self._record(scenario.name, scenario.position.line)


class ConsistentFeatureLanguageCheck(CrossFileCheck):
    """The first Feature seen fixes the expected language for all others."""

    descriptor = RuleDescriptor(
        key="consistent-feature-language",
        severity=RuleSeverity.MAJOR,
    )

    def __init__(self) -> None:
        super().__init__()
        self._expected: str | None = None
        self._occurrences: list[tuple[str, _Occurrence]] = []

    def visit_feature(self, feature: FeatureDefinition) -> None:
        language = feature.language or DEFAULT_LANGUAGE
        uri = self.context.feature_file.uri
        self._occurrences.append((language, _Occurrence(uri, feature.position.line)))
        if self._expected is None:
            self._expected = language

    def finalize(self) -> list[CrossFileIssue]:
        expected = self._expected
        if expected is None:
            return []
        return [
            self.cross_file_issue(
                occurrence.uri,
                occurrence.line,
                f'Use the language "{expected}" for consistency. '
                f'This Feature uses "{language}".',
            )
            for language, occurrence in self._occurrences
            if language != expected
        ]
