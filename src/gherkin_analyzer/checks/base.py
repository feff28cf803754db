"""Check contract: rule descriptors, issues, contexts and the check base classes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Mapping, TypeAlias

from gherkin_analyzer.exceptions import CheckContextError, RuleConfigurationError
from gherkin_analyzer.model import FeatureFile, TextPosition
from gherkin_analyzer.severity import RuleSeverity
from gherkin_analyzer.visitors import FeatureVisitor, walk

PropertyValue: TypeAlias = int | str | bool

_TRUE_WORDS = {"1", "true", "yes", "on"}
_FALSE_WORDS = {"0", "false", "no", "off"}


def parse_bool(value: object) -> bool | None:
    """Read a settings flag. Returns None when ``value`` is not a recognizable boolean."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in _TRUE_WORDS:
            return True
        if text in _FALSE_WORDS:
            return False
    return None


class PropertyKind(str, Enum):
    INT = "int"
    STRING = "string"
    BOOL = "bool"


@dataclass(frozen=True)
class RuleProperty:
    name: str
    kind: PropertyKind
    default: PropertyValue
    description: str = ""

    def coerce(self, value: object) -> PropertyValue:
        """Convert a settings value to this property's kind.

        Raises ValueError when the value has the wrong shape.
        """
        if self.kind is PropertyKind.INT:
            if isinstance(value, bool):
                raise ValueError(f"{self.name} expects an integer")
            if isinstance(value, int):
                return value
            if isinstance(value, str):
                return int(value.strip())
            raise ValueError(f"{self.name} expects an integer")
        if self.kind is PropertyKind.BOOL:
            flag = parse_bool(value)
            if flag is not None:
                return flag
            raise ValueError(f"{self.name} expects a boolean")
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ValueError(f"{self.name} expects a string")
        return str(value)


@dataclass(frozen=True)
class RuleDescriptor:
    key: str
    severity: RuleSeverity
    default_enabled: bool = False
    properties: tuple[RuleProperty, ...] = ()

    def property_named(self, name: str) -> RuleProperty | None:
        for prop in self.properties:
            if prop.name == name:
                return prop
        return None

    def property_defaults(self) -> dict[str, PropertyValue]:
        return {prop.name: prop.default for prop in self.properties}


@dataclass(frozen=True)
class Issue:
    rule_key: str
    message: str
    position: TextPosition | None = None
    line: int | None = None
    cost: float | None = None
    # Inclusive 1-based end column on ``position.line``.
    end_column: int | None = None


@dataclass(frozen=True)
class CrossFileIssue:
    rule_key: str
    uri: str
    line: int
    message: str


@dataclass
class FeatureContext:
    """Per-walk binding handed to a check: the tree, raw text and an issue sink."""

    feature_file: FeatureFile
    raw_content: str | None = None
    _issues: list[Issue] = field(default_factory=list)

    def add_issue(self, issue: Issue) -> None:
        self._issues.append(issue)

    @property
    def issues(self) -> tuple[Issue, ...]:
        return tuple(self._issues)


class BaseCheck(FeatureVisitor):
    """A visitor that reports issues for exactly one rule.

    The engine binds a fresh :class:`FeatureContext` before each walk and
    unbinds it afterwards. The rule key of every reported issue comes from
    the class ``descriptor``.
    """

    descriptor: ClassVar[RuleDescriptor]

    def __init__(self) -> None:
        self._context: FeatureContext | None = None

    @classmethod
    def rule_key(cls) -> str:
        return cls.descriptor.key

    def bind(self, context: FeatureContext) -> None:
        self._context = context

    def unbind(self) -> None:
        self._context = None

    @property
    def context(self) -> FeatureContext:
        if self._context is None:
            raise CheckContextError(self.rule_key())
        return self._context

    def configure(self, values: Mapping[str, object]) -> list[str]:
        """Apply settings values to declared properties.

        Unknown names are skipped. Values that fail to convert leave the
        property at its current value. Returns the names that were rejected.
        """
        rejected: list[str] = []
        for prop in self.descriptor.properties:
            if prop.name not in values or values[prop.name] is None:
                continue
            try:
                self.set_property(prop.name, prop.coerce(values[prop.name]))
            except (ValueError, TypeError, RuleConfigurationError):
                rejected.append(prop.name)
        return rejected

    def set_property(self, name: str, value: PropertyValue) -> None:
        raise RuleConfigurationError(self.rule_key(), name, value)

    def add_issue(self, position: TextPosition, message: str, cost: float | None = None) -> None:
        self.context.add_issue(
            Issue(self.rule_key(), message, position=position, line=position.line, cost=cost)
        )

    def add_range_issue(self, start_column: int, end_column: int, line: int, message: str) -> None:
        self.context.add_issue(
            Issue(
                self.rule_key(),
                message,
                position=TextPosition(line=line, column=start_column),
                line=line,
                end_column=end_column,
            )
        )

    def add_line_issue(self, line: int, message: str, cost: float | None = None) -> None:
        self.context.add_issue(Issue(self.rule_key(), message, line=line, cost=cost))

    def add_file_issue(self, message: str) -> None:
        self.context.add_issue(Issue(self.rule_key(), message))


class CrossFileCheck(BaseCheck, ABC):
    """A check whose findings span documents.

    The engine calls :meth:`accumulate` once per stored tree and then
    :meth:`finalize` once.
    """

    def accumulate(self, tree: FeatureFile) -> None:
        self.bind(FeatureContext(tree))
        try:
            walk(tree, self)
        finally:
            self.unbind()

    @abstractmethod
    def finalize(self) -> list[CrossFileIssue]:
        ...

    def cross_file_issue(self, uri: str, line: int, message: str) -> CrossFileIssue:
        return CrossFileIssue(self.rule_key(), uri, line, message)
