"""Immutable tree model for parsed Gherkin documents."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass(frozen=True)
class TextPosition:
    # Both coordinates are 1-based.
    line: int
    column: int = 1


class StepKeywordType(str, Enum):
    CONTEXT = "CONTEXT"
    ACTION = "ACTION"
    OUTCOME = "OUTCOME"
    CONJUNCTION = "CONJUNCTION"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_parser(cls, value: object) -> StepKeywordType:
        """Normalize a parser keyword type ("Context", "Action", ...) to a member.

        Anything unrecognized, including a missing value, maps to UNKNOWN.
        """
        if not isinstance(value, str):
            return cls.UNKNOWN
        try:
            return cls(value.strip().upper())
        except ValueError:
            return cls.UNKNOWN


@dataclass(frozen=True)
class TagDefinition:
    position: TextPosition
    name: str

    def __post_init__(self) -> None:
        if self.name.startswith("@"):
            object.__setattr__(self, "name", self.name[1:])


@dataclass(frozen=True)
class Comment:
    position: TextPosition
    text: str


@dataclass(frozen=True)
class DataTableDefinition:
    position: TextPosition
    rows: tuple[tuple[str, ...], ...] = ()


@dataclass(frozen=True)
class DocStringDefinition:
    position: TextPosition
    content_type: str
    content: str
    delimiter: str


@dataclass(frozen=True)
class StepDefinition:
    position: TextPosition
    keyword: str
    keyword_type: StepKeywordType
    text: str
    data_table: DataTableDefinition | None = None
    doc_string: DocStringDefinition | None = None


@dataclass(frozen=True)
class ExamplesDefinition:
    position: TextPosition
    keyword: str
    name: str = ""
    description: str = ""
    tags: tuple[TagDefinition, ...] = ()
    table: DataTableDefinition | None = None


@dataclass(frozen=True)
class BackgroundDefinition:
    position: TextPosition
    keyword: str
    name: str = ""
    description: str = ""
    steps: tuple[StepDefinition, ...] = ()


@dataclass(frozen=True)
class ScenarioDefinition:
    position: TextPosition
    keyword: str
    name: str = ""
    description: str = ""
    tags: tuple[TagDefinition, ...] = ()
    steps: tuple[StepDefinition, ...] = ()
    examples: tuple[ExamplesDefinition, ...] = ()

    @property
    def is_outline(self) -> bool:
        return bool(self.examples)


@dataclass(frozen=True)
class RuleDefinition:
    position: TextPosition
    keyword: str
    name: str = ""
    description: str = ""
    tags: tuple[TagDefinition, ...] = ()
    background: BackgroundDefinition | None = None
    scenarios: tuple[ScenarioDefinition, ...] = ()


@dataclass(frozen=True)
class FeatureDefinition:
    position: TextPosition
    keyword: str
    language: str = "en"
    name: str = ""
    description: str = ""
    tags: tuple[TagDefinition, ...] = ()
    background: BackgroundDefinition | None = None
    scenarios: tuple[ScenarioDefinition, ...] = ()
    rules: tuple[RuleDefinition, ...] = ()

    def all_scenarios(self) -> tuple[ScenarioDefinition, ...]:
        """Top-level scenarios followed by the scenarios of each Rule, in order."""
        nested = tuple(
            scenario for rule in self.rules for scenario in rule.scenarios
        )
        return self.scenarios + nested


@dataclass(frozen=True)
class FeatureFile:
    """Root of a parsed document.

    ``feature`` is None when the document has no valid top-level Feature,
    either because it is empty or because the parser hit a syntax error.
    """

    feature: FeatureDefinition | None
    comments: tuple[Comment, ...] = ()
    language: str = "en"
    uri: str = ""
