"""Rule severities and their mapping onto LSP diagnostic severities."""

from __future__ import annotations

from enum import Enum

from lsprotocol.types import DiagnosticSeverity


class RuleSeverity(str, Enum):
    BLOCKER = "blocker"
    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"
    INFO = "info"


UNKNOWN_RULE_SEVERITY = RuleSeverity.MAJOR

_DIAGNOSTIC_SEVERITIES: dict[RuleSeverity, DiagnosticSeverity] = {
    RuleSeverity.BLOCKER: DiagnosticSeverity.Error,
    RuleSeverity.CRITICAL: DiagnosticSeverity.Error,
    RuleSeverity.MAJOR: DiagnosticSeverity.Warning,
    RuleSeverity.MINOR: DiagnosticSeverity.Information,
    RuleSeverity.INFO: DiagnosticSeverity.Hint,
}


def parse_rule_severity(value: object) -> RuleSeverity | None:
    if not isinstance(value, str):
        return None
    text = value.strip().lower()
    if not text:
        return None
    try:
        return RuleSeverity(text)
    except ValueError:
        return None


def to_diagnostic_severity(severity: RuleSeverity) -> DiagnosticSeverity:
    return _DIAGNOSTIC_SEVERITIES[severity]


def default_rule_severity(rule_key: str) -> RuleSeverity:
    from gherkin_analyzer.checks import DESCRIPTORS_BY_KEY

    descriptor = DESCRIPTORS_BY_KEY.get(rule_key)
    if descriptor is None:
        return UNKNOWN_RULE_SEVERITY
    return descriptor.severity


def default_diagnostic_severity(rule_key: str) -> DiagnosticSeverity:
    """Severity of ``rule_key`` before user overrides; Warning when unknown."""
    return to_diagnostic_severity(default_rule_severity(rule_key))
