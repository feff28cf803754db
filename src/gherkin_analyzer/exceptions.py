"""Exception types raised by the Gherkin analyzer."""

from __future__ import annotations


class GherkinAnalyzerError(RuntimeError):
    """Base class for analyzer failures."""


class ParseIOError(GherkinAnalyzerError):
    """The document could not be read.

    Syntax errors are not reported this way; they produce a tree whose
    ``feature`` is None.
    """

    def __init__(self, uri: str, message: str):
        super().__init__(message)
        self.uri = uri


class CheckContextError(GherkinAnalyzerError):
    """A check reported an issue while no context was bound to it."""

    def __init__(self, rule_key: str):
        super().__init__(f"check {rule_key!r} has no bound context")
        self.rule_key = rule_key


class RuleConfigurationError(GherkinAnalyzerError):
    """A rule property value could not be applied."""

    def __init__(self, rule_key: str, property_name: str, value: object):
        super().__init__(
            f"invalid value {value!r} for property {property_name!r} of rule {rule_key!r}"
        )
        self.rule_key = rule_key
        self.property_name = property_name
        self.value = value
