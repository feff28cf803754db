"""Gherkin analyzer package root."""

from gherkin_analyzer.exceptions import (
    CheckContextError,
    GherkinAnalyzerError,
    ParseIOError,
    RuleConfigurationError,
)

__all__ = [
    "__version__",
    "CheckContextError",
    "GherkinAnalyzerError",
    "ParseIOError",
    "RuleConfigurationError",
]

__version__ = "0.1.0"
