"""Translate analyzer issues into LSP diagnostics.

Issue coordinates are 1-based; LSP positions are 0-based. An issue with a
precise position starts at ``(line - 1, column - 1)``. An issue with only a
line starts at ``(line - 1, 0)``, and a file-level issue at ``(0, 0)``. A
range starting at column 0 covers the whole line and ends at the start of the
next one; any other range covers a single character.
"""

from __future__ import annotations

from typing import Callable

from lsprotocol.types import Diagnostic, DiagnosticSeverity, Position, Range

from gherkin_analyzer.checks import CrossFileIssue, Issue
from gherkin_analyzer.severity import default_diagnostic_severity

SOURCE = "gherkin-analyzer"

SeverityLookup = Callable[[str], DiagnosticSeverity]


def issue_range(issue: Issue) -> Range:
    if issue.position is not None:
        start = Position(
            line=max(issue.position.line - 1, 0),
            character=max(issue.position.column - 1, 0),
        )
    elif issue.line is not None:
        start = Position(line=max(issue.line - 1, 0), character=0)
    else:
        start = Position(line=0, character=0)
    return Range(start=start, end=_default_end(start))


def line_range(line: int) -> Range:
    start = Position(line=max(line - 1, 0), character=0)
    return Range(start=start, end=_default_end(start))


def _default_end(start: Position) -> Position:
    if start.character == 0:
        return Position(line=start.line + 1, character=0)
    return Position(line=start.line, character=start.character + 1)


def to_diagnostic(
    issue: Issue, severity_of: SeverityLookup = default_diagnostic_severity
) -> Diagnostic:
    return Diagnostic(
        range=issue_range(issue),
        message=issue.message,
        severity=severity_of(issue.rule_key),
        source=SOURCE,
        code=issue.rule_key,
    )


def cross_file_to_diagnostic(
    issue: CrossFileIssue, severity_of: SeverityLookup = default_diagnostic_severity
) -> Diagnostic:
    return Diagnostic(
        range=line_range(issue.line),
        message=issue.message,
        severity=severity_of(issue.rule_key),
        source=SOURCE,
        code=issue.rule_key,
    )
