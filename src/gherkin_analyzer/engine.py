"""Per-document and cross-document analysis over a URI -> tree store."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from lsprotocol.types import Diagnostic, DiagnosticSeverity

from gherkin_analyzer.checks import CrossFileIssue, FeatureContext, Issue
from gherkin_analyzer.diagnostics import cross_file_to_diagnostic, to_diagnostic
from gherkin_analyzer.exceptions import ParseIOError
from gherkin_analyzer.model import FeatureFile, TextPosition
from gherkin_analyzer.parser import parse
from gherkin_analyzer.rule_config import RuleConfiguration
from gherkin_analyzer.visitors import walk

logger = logging.getLogger(__name__)

PARSE_ERROR_RULE_KEY = "parse-error"

ParseFunction = Callable[[str, str | bytes], FeatureFile]


def issue_severity(configuration: RuleConfiguration) -> Callable[[str], DiagnosticSeverity]:
    """Severity lookup for engine results. An unreadable document is always an Error."""

    def lookup(rule_key: str) -> DiagnosticSeverity:
        if rule_key == PARSE_ERROR_RULE_KEY:
            return DiagnosticSeverity.Error
        return configuration.severity(rule_key)

    return lookup


class AnalysisEngine:
    """Runs the active checks and remembers the last good tree of each URI.

    The store and the configuration may be used from several threads. Each
    analysis builds its own check instances from the configuration it read
    at the start, so a concurrent :meth:`update_configuration` never mixes
    two configurations within one result.
    """

    def __init__(
        self,
        configuration: RuleConfiguration | None = None,
        parse_document: ParseFunction = parse,
    ):
        self._configuration = configuration if configuration is not None else RuleConfiguration.defaults()
        self._parse = parse_document
        self._trees: dict[str, FeatureFile] = {}
        self._lock = threading.Lock()

    @property
    def configuration(self) -> RuleConfiguration:
        return self._configuration

    def update_configuration(self, configuration: RuleConfiguration) -> None:
        self._configuration = configuration

    def severity(self, rule_key: str) -> DiagnosticSeverity:
        return issue_severity(self._configuration)(rule_key)

    def analyze_issues(self, uri: str, text: str | bytes) -> list[Issue]:
        return self._analyze(uri, text, self._configuration)

    def analyze_file(self, uri: str, text: str | bytes) -> list[Diagnostic]:
        configuration = self._configuration
        severity = issue_severity(configuration)
        return [
            to_diagnostic(issue, severity)
            for issue in self._analyze(uri, text, configuration)
        ]

    def _analyze(
        self, uri: str, text: str | bytes, configuration: RuleConfiguration
    ) -> list[Issue]:
        try:
            tree = self._parse(uri, text)
        except ParseIOError as exc:
            logger.warning("unable to parse %s: %s", uri, exc)
            return [
                Issue(
                    PARSE_ERROR_RULE_KEY,
                    str(exc),
                    position=TextPosition(line=1, column=1),
                    line=1,
                )
            ]
        with self._lock:
            self._trees[uri] = tree
        raw = text if isinstance(text, str) else text.decode("utf-8", errors="replace")
        issues: list[Issue] = []
        for check in configuration.new_per_file_checks():
            context = FeatureContext(tree, raw_content=raw)
            check.bind(context)
            try:
                walk(tree, check)
            except Exception:
                logger.exception("check %s failed on %s", check.rule_key(), uri)
                continue
            finally:
                check.unbind()
            issues.extend(context.issues)
        return issues

    def cross_file_issues(self) -> dict[str, list[CrossFileIssue]]:
        """Run every active cross-file check over a snapshot of the store.

        Issues are grouped by the URI they are addressed to.
        """
        checks = self._configuration.new_cross_file_checks()
        if not checks:
            return {}
        with self._lock:
            trees = list(self._trees.values())
        grouped: dict[str, list[CrossFileIssue]] = {}
        for check in checks:
            try:
                for tree in trees:
                    check.accumulate(tree)
                found = check.finalize()
            except Exception:
                logger.exception("cross-file check %s failed", check.rule_key())
                continue
            for issue in found:
                grouped.setdefault(issue.uri, []).append(issue)
        return grouped

    def cross_file_diagnostics(self) -> dict[str, list[Diagnostic]]:
        severity = issue_severity(self._configuration)
        return {
            uri: [cross_file_to_diagnostic(issue, severity) for issue in issues]
            for uri, issues in self.cross_file_issues().items()
        }

    def remove_file(self, uri: str) -> None:
        with self._lock:
            self._trees.pop(uri, None)

    def has_file(self, uri: str) -> bool:
        with self._lock:
            return uri in self._trees

    def stored_file_count(self) -> int:
        with self._lock:
            return len(self._trees)

    def stored_uris(self) -> list[str]:
        with self._lock:
            return list(self._trees)
