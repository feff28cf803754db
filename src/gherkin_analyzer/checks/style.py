"""Rules that inspect the raw document text rather than the tree."""

from __future__ import annotations

import re

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
    FeatureFile,
    RuleDefinition,
    ScenarioDefinition,
    StepDefinition,
    TextPosition,
)
from gherkin_analyzer.severity import RuleSeverity

_BOM = "\ufeff"
_LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
_LINE_ENDINGS = {"LF": "\n", "CRLF": "\r\n", "CR": "\r"}
_ENDING_NAMES = {value: key for key, value in _LINE_ENDINGS.items()}
DEFAULT_FILE_NAME_PATTERN = r"^[a-z][-A-Za-z0-9]*\.feature$"
_TAG_LINE_RE = re.compile(r"^\s*@")
_EXTRA_TAG_SPACING_RE = re.compile(r"@\S+\s{2,}@")
_MISSING_TAG_SPACING_RE = re.compile(r"@[^@\s]+@")
_TAG_LINE_WITH_COMMENT_RE = re.compile(r"^\s*@.*#")


def split_lines(raw: str) -> list[str]:
    return re.split(r"\r?\n", raw)


def file_name_from_uri(uri: str) -> str:
    return uri.replace("\\", "/").rsplit("/", 1)[-1]


class NoTabCharactersCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="no-tab-characters",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
    )

    def visit_feature_file(self, file: FeatureFile) -> None:
        raw = self.context.raw_content
        if raw is None:
            return
        for number, line in enumerate(raw.split("\n"), start=1):
            index = line.find("\t")
            if index >= 0:
                self.add_line_issue(
                    number, f"Replace tab character at column {index + 1} with spaces."
                )


class NoTrailingWhitespaceCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="no-trailing-whitespace",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
    )

    def visit_feature_file(self, file: FeatureFile) -> None:
        raw = self.context.raw_content
        if raw is None:
            return
        for number, line in enumerate(raw.split("\n"), start=1):
            line = line.removesuffix("\r")
            if line.endswith((" ", "\t")):
                self.add_line_issue(number, "Remove trailing whitespace.")


class NewlineAtEndOfFileCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="newline-at-end-of-file",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
    )

    def visit_feature_file(self, file: FeatureFile) -> None:
        raw = self.context.raw_content
        if raw and not raw.endswith("\n"):
            self.add_file_issue("Add a newline at the end of this file.")


class NoByteOrderMarkCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="no-byte-order-mark",
        severity=RuleSeverity.MAJOR,
        default_enabled=True,
    )

    def visit_feature_file(self, file: FeatureFile) -> None:
        raw = self.context.raw_content
        if raw and raw.startswith(_BOM):
            self.add_line_issue(
                1, "Remove the UTF-8 Byte Order Mark (BOM) from the beginning of this file."
            )


class NoMultipleEmptyLinesCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="no-multiple-empty-lines",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
    )

    def visit_feature_file(self, file: FeatureFile) -> None:
        raw = self.context.raw_content
        if raw is None:
            return
        previous_blank = False
        for index, line in enumerate(re.split(r"\r?\n", raw)):
            blank = not line.strip()
            if blank and previous_blank:
                # ``index`` is the 1-based number of the first blank line of the pair.
                self.add_line_issue(
                    index,
                    "Remove this unnecessary blank line; "
                    "only one consecutive blank line is allowed.",
                )
            previous_blank = blank


class FeatureFileMaxLinesCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="feature-file-max-lines",
        severity=RuleSeverity.MINOR,
        properties=(
            RuleProperty(
                "maxLines",
                PropertyKind.INT,
                300,
                "Maximum number of lines allowed in a feature file",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.max_lines = 300

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "maxLines":
            super().set_property(name, value)
        self.max_lines = int(value)

    def visit_feature_file(self, file: FeatureFile) -> None:
        raw = self.context.raw_content
        if raw is None:
            return
        count = count_lines(raw)
        if count > self.max_lines:
            self.add_file_issue(
                f"This file has {count} lines, which exceeds the limit of "
                f"{self.max_lines}. Split it into smaller feature files."
            )


def count_lines(content: str) -> int:
    """Number of lines in ``content``; a trailing newline does not open a new line."""
    if not content:
        return 0
    count = content.count("\n") + 1
    if content.endswith("\n"):
        count -= 1
    return count


class ConsistentLineEndingsCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="consistent-line-endings",
        severity=RuleSeverity.MINOR,
        properties=(
            RuleProperty(
                "lineEnding",
                PropertyKind.STRING,
                "LF",
                "Expected line ending type: LF, CRLF, or CR",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.line_ending = "LF"

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "lineEnding":
            super().set_property(name, value)
        self.line_ending = str(value)

    def visit_feature_file(self, file: FeatureFile) -> None:
        raw = self.context.raw_content
        if not raw:
            return
        # Unrecognized names fall back to LF.
        expected = _LINE_ENDINGS.get(self.line_ending.strip().upper(), "\n")
        for number, match in enumerate(_LINE_BREAK_RE.finditer(raw), start=1):
            found = match.group(0)
            if found != expected:
                self.add_line_issue(
                    number,
                    f"Expected {self.line_ending} line ending, "
                    f"but found {_ENDING_NAMES[found]}.",
                )


class ConsistentIndentationCheck(BaseCheck):
    """Expect one indentation level per nesting depth.

    Feature lines sit at level 0, Rule lines at 1, Background and Scenario
    lines at 1 (2 inside a Rule), Step and Examples lines at 2 (3 inside a
    Rule). Tags share the level of the element they decorate.
    """

    descriptor = RuleDescriptor(
        key="consistent-indentation",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
        properties=(
            RuleProperty(
                "indentation",
                PropertyKind.INT,
                2,
                "Number of spaces per indentation level",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.indentation = 2
        self._lines: list[str] | None = None
        self._inside_rule = False

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "indentation":
            super().set_property(name, value)
        self.indentation = int(value)

    def visit_feature_file(self, file: FeatureFile) -> None:
        raw = self.context.raw_content
        self._lines = None if raw is None else raw.split("\n")
        self._inside_rule = False

    def visit_feature(self, feature: FeatureDefinition) -> None:
        self._check(feature.position, 0)
        for tag in feature.tags:
            self._check(tag.position, 0)

    def visit_rule(self, rule: RuleDefinition) -> None:
        self._check(rule.position, 1)
        for tag in rule.tags:
            self._check(tag.position, 1)
        self._inside_rule = True

    def leave_rule(self, rule: RuleDefinition) -> None:
        self._inside_rule = False

    def visit_background(self, background: BackgroundDefinition) -> None:
        self._check(background.position, self._depth(1))

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        level = self._depth(1)
        self._check(scenario.position, level)
        for tag in scenario.tags:
            self._check(tag.position, level)

    def visit_step(self, step: StepDefinition) -> None:
        self._check(step.position, self._depth(2))

    def visit_examples(self, examples: ExamplesDefinition) -> None:
        level = self._depth(2)
        self._check(examples.position, level)
        for tag in examples.tags:
            self._check(tag.position, level)

    def _depth(self, level: int) -> int:
        return level + 1 if self._inside_rule else level

    def _check(self, position: TextPosition, level: int) -> None:
        if self._lines is None or not 1 <= position.line <= len(self._lines):
            return
        line = self._lines[position.line - 1]
        actual = len(line) - len(line.lstrip(" "))
        expected = level * self.indentation
        if actual != expected:
            self.add_line_issue(
                position.line,
                f"Expected indentation of {expected} spaces (level {level}), "
                f"but found {actual} spaces.",
            )


class FileNameConventionCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="file-name-convention",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
        properties=(
            RuleProperty(
                "pattern",
                PropertyKind.STRING,
                DEFAULT_FILE_NAME_PATTERN,
                "Regular expression pattern that feature filenames must match",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.pattern = re.compile(DEFAULT_FILE_NAME_PATTERN)

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "pattern":
            super().set_property(name, value)
        try:
            self.pattern = re.compile(str(value))
        except re.error as exc:
            raise ValueError(str(exc)) from exc

    def visit_feature_file(self, file: FeatureFile) -> None:
        name = file_name_from_uri(file.uri)
        if not self.pattern.fullmatch(name):
            self.add_line_issue(
                1,
                f"Filename '{name}' does not match the required pattern: "
                f"{self.pattern.pattern}",
            )


class _PreviousLineCheck(BaseCheck):
    """Shared access to the line above a tree element."""

    def __init__(self) -> None:
        super().__init__()
        self._lines: list[str] | None = None

    def visit_feature_file(self, file: FeatureFile) -> None:
        raw = self.context.raw_content
        self._lines = None if raw is None else split_lines(raw)

    def _follows_text(self, line: int) -> bool:
        """True when 1-based ``line`` is preceded by a non-blank line."""
        if self._lines is None or line <= 1 or line - 2 >= len(self._lines):
            return False
        return bool(self._lines[line - 2].strip())


class ExamplesSeparatorLineCheck(_PreviousLineCheck):
    descriptor = RuleDescriptor(
        key="examples-separator-line",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
    )

    def visit_examples(self, examples: ExamplesDefinition) -> None:
        if self._follows_text(examples.position.line):
            self.add_issue(examples.position, "Add a blank line before this Examples section.")


class BlankLineBeforeScenarioCheck(_PreviousLineCheck):
    descriptor = RuleDescriptor(
        key="blank-line-before-scenario",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
    )

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        # Tags belong to the scenario, so look above the first one.
        line = scenario.position.line
        if scenario.tags:
            line = min(line, scenario.tags[0].position.line)
        if self._follows_text(line):
            self.add_issue(scenario.position, "Add a blank line before this Scenario.")


class OneSpaceBetweenTagsCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="one-space-between-tags",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
    )

    def visit_feature_file(self, file: FeatureFile) -> None:
        raw = self.context.raw_content
        if raw is None:
            return
        for number, line in enumerate(split_lines(raw), start=1):
            if not _TAG_LINE_RE.search(line):
                continue
            if _EXTRA_TAG_SPACING_RE.search(line) or _MISSING_TAG_SPACING_RE.search(line):
                self.add_line_issue(number, "Use exactly one space between tags on this line.")


class NoPartiallyCommentedTagLinesCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="no-partially-commented-tag-lines",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
    )

    def visit_feature_file(self, file: FeatureFile) -> None:
        raw = self.context.raw_content
        if raw is None:
            return
        for number, line in enumerate(split_lines(raw), start=1):
            if _TAG_LINE_WITH_COMMENT_RE.search(line):
                self.add_line_issue(
                    number,
                    "Do not mix tags and comments on the same line; "
                    "move the comment to a separate line.",
                )
