"""Resolve the active, configured checks from an editor settings object."""

from __future__ import annotations

import logging
from typing import Mapping

from lsprotocol.types import DiagnosticSeverity

from gherkin_analyzer.checks import (
    ALL_CHECKS,
    DEFAULT_RULE_KEYS,
    EXCLUDED_RULE_KEY,
    BaseCheck,
    CrossFileCheck,
    is_cross_file,
)
from gherkin_analyzer.checks.base import PropertyValue, parse_bool
from gherkin_analyzer.severity import (
    RuleSeverity,
    default_diagnostic_severity,
    parse_rule_severity,
    to_diagnostic_severity,
)

logger = logging.getLogger(__name__)

SETTINGS_SECTION = "gherkinAnalyzer"

RuleSettings = Mapping[str, object]


def unwrap_settings(settings: Mapping[str, object] | None) -> Mapping[str, object]:
    """Strip the ``gherkinAnalyzer`` wrapper editors put around the settings."""
    if not isinstance(settings, Mapping):
        return {}
    inner = settings.get(SETTINGS_SECTION)
    if isinstance(inner, Mapping):
        return inner
    return settings


class RuleConfiguration:
    """Immutable result of resolving settings: active checks and severity overrides."""

    def __init__(
        self,
        checks: list[BaseCheck],
        property_values: Mapping[str, Mapping[str, PropertyValue]],
        severities: Mapping[str, RuleSeverity],
    ):
        self._checks = tuple(checks)
        self._rule_keys = tuple(check.rule_key() for check in checks)
        self._property_values = {key: dict(values) for key, values in property_values.items()}
        self._severities = dict(severities)

    @classmethod
    def defaults(cls) -> RuleConfiguration:
        return cls.from_settings(None)

    @classmethod
    def from_settings(cls, settings: Mapping[str, object] | None) -> RuleConfiguration:
        """Build a configuration; never raises.

        A rule is active when its settings entry says ``enabled``, else when
        it is a default rule. With ``rulesReplaceDefaults`` only rules listed
        under ``rules`` are active. The excluded rule is never active.
        """
        resolved = unwrap_settings(settings)
        rules_value = resolved.get("rules")
        rules: Mapping[str, object] = rules_value if isinstance(rules_value, Mapping) else {}
        replace_defaults = parse_bool(resolved.get("rulesReplaceDefaults")) is True
        defaults = set(DEFAULT_RULE_KEYS)

        checks: list[BaseCheck] = []
        property_values: dict[str, dict[str, PropertyValue]] = {}
        severities: dict[str, RuleSeverity] = {}
        for check_class in ALL_CHECKS:
            key = check_class.descriptor.key
            if key == EXCLUDED_RULE_KEY:
                continue
            raw_entry = rules.get(key)
            entry: RuleSettings = raw_entry if isinstance(raw_entry, Mapping) else {}
            override = parse_rule_severity(entry.get("severity"))
            if override is not None:
                severities[key] = override
            elif "severity" in entry:
                logger.warning("ignoring invalid severity %r for rule %s", entry["severity"], key)
            if not _is_enabled(key, rules, entry, defaults, replace_defaults):
                continue
            built = _build_check(check_class, entry)
            if built is None:
                continue
            check, values = built
            checks.append(check)
            property_values[key] = values
        return cls(checks, property_values, severities)

    @property
    def active_checks(self) -> tuple[BaseCheck, ...]:
        return self._checks

    @property
    def active_rule_keys(self) -> tuple[str, ...]:
        return self._rule_keys

    def is_active(self, rule_key: str) -> bool:
        return rule_key in self._rule_keys

    def new_per_file_checks(self) -> list[BaseCheck]:
        """Fresh, configured instances of every active single-document check.

        Each analysis gets its own instances so concurrent analyses never
        share per-walk state.
        """
        return [
            check
            for check in self._rebuild(cross_file=False)
            if not isinstance(check, CrossFileCheck)
        ]

    def new_cross_file_checks(self) -> list[CrossFileCheck]:
        """Fresh, configured instances of every active cross-file check."""
        return [
            check
            for check in self._rebuild(cross_file=True)
            if isinstance(check, CrossFileCheck)
        ]

    def _rebuild(self, cross_file: bool) -> list[BaseCheck]:
        fresh: list[BaseCheck] = []
        for check in self._checks:
            check_class = type(check)
            if is_cross_file(check_class) != cross_file:
                continue
            # Values were validated when the configuration was built.
            built = check_class()
            built.configure(self._property_values.get(check.rule_key(), {}))
            fresh.append(built)
        return fresh

    def rule_severity(self, rule_key: str) -> RuleSeverity | None:
        return self._severities.get(rule_key)

    def severity(self, rule_key: str) -> DiagnosticSeverity:
        override = self._severities.get(rule_key)
        if override is not None:
            return to_diagnostic_severity(override)
        return default_diagnostic_severity(rule_key)


def _is_enabled(
    key: str,
    rules: Mapping[str, object],
    entry: RuleSettings,
    defaults: set[str],
    replace_defaults: bool,
) -> bool:
    explicit = parse_bool(entry.get("enabled"))
    if explicit is not None:
        return explicit
    if replace_defaults:
        return key in rules
    return key in defaults


def _build_check(
    check_class: type[BaseCheck], entry: RuleSettings
) -> tuple[BaseCheck, dict[str, PropertyValue]] | None:
    """Build and configure one check, returning it with its accepted property values."""
    key = check_class.descriptor.key
    try:
        check = check_class()
        rejected = check.configure(entry)
    except Exception:
        logger.warning("skipping rule %s: failed to build check", key, exc_info=True)
        return None
    for name in rejected:
        logger.warning("ignoring invalid value %r for %s.%s", entry.get(name), key, name)
    values = {
        prop.name: prop.coerce(entry[prop.name])
        for prop in check_class.descriptor.properties
        if prop.name not in rejected and entry.get(prop.name) is not None
    }
    return check, values
