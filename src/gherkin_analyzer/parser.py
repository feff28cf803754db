"""Adapter from the official Cucumber Gherkin parser to the tree model.

The grammar itself is owned by ``gherkin-official``; this module only converts
its AST dictionaries into :mod:`gherkin_analyzer.model` values. Syntax errors
never raise: they produce a :class:`FeatureFile` whose ``feature`` is None,
with whatever comments could be recovered from the raw text.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Mapping, Sequence

from gherkin.dialect import Dialect
from gherkin.errors import ParserError
from gherkin.parser import Parser

from gherkin_analyzer.exceptions import ParseIOError
from gherkin_analyzer.model import (
    BackgroundDefinition,
    Comment,
    DataTableDefinition,
    DocStringDefinition,
    ExamplesDefinition,
    FeatureDefinition,
    FeatureFile,
    RuleDefinition,
    ScenarioDefinition,
    StepDefinition,
    StepKeywordType,
    TagDefinition,
    TextPosition,
)

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "en"
_BOM = "\ufeff"
_LANGUAGE_DIRECTIVE_RE = re.compile(r"^\s*#\s*language\s*:\s*([a-zA-Z\-_]+)\s*$")

AstNode = Mapping[str, object]


def parse(uri: str, text: str | bytes) -> FeatureFile:
    """Parse ``text`` into a :class:`FeatureFile` identified by ``uri``.

    Raises :class:`ParseIOError` only when the content cannot be decoded.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseIOError(uri, f"Unable to decode {uri} as UTF-8: {exc}") from exc
    if text.startswith(_BOM):
        text = text[len(_BOM):]
    if not text.strip():
        return FeatureFile(feature=None, comments=(), language=DEFAULT_LANGUAGE, uri=uri)
    try:
        document = Parser().parse(text)
    except ParserError as exc:
        logger.debug("syntax error in %s: %s", uri, exc)
        return FeatureFile(
            feature=None,
            comments=_scan_comments(text),
            language=_directive_language(text),
            uri=uri,
        )
    feature_node = document.get("feature")
    feature = _convert_feature(feature_node) if feature_node else None
    comments = tuple(
        _convert_comment(node) for node in _nodes(document.get("comments"))
    )
    language = feature.language if feature is not None else _directive_language(text)
    return FeatureFile(feature=feature, comments=comments, language=language, uri=uri)


def parse_path(path: Path) -> FeatureFile:
    uri = path.resolve().as_uri()
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ParseIOError(uri, f"Unable to read {path}: {exc}") from exc
    return parse(uri, raw)


def _nodes(value: object) -> Sequence[AstNode]:
    if isinstance(value, list):
        return [item for item in value if isinstance(item, Mapping)]
    return []


def _text(node: AstNode, key: str) -> str:
    value = node.get(key)
    return value if isinstance(value, str) else ""


def _position(node: AstNode) -> TextPosition:
    location = node.get("location")
    if not isinstance(location, Mapping):
        return TextPosition(line=1, column=1)
    line = location.get("line")
    column = location.get("column")
    return TextPosition(
        line=int(line) if isinstance(line, int) else 1,
        column=int(column) if isinstance(column, int) else 1,
    )


def _convert_tags(node: AstNode) -> tuple[TagDefinition, ...]:
    return tuple(
        TagDefinition(position=_position(tag), name=_text(tag, "name").removeprefix("@"))
        for tag in _nodes(node.get("tags"))
    )


def _convert_feature(node: AstNode) -> FeatureDefinition:
    language = _text(node, "language") or DEFAULT_LANGUAGE
    dialect = Dialect.for_name(language) or Dialect.for_name(DEFAULT_LANGUAGE)
    background: BackgroundDefinition | None = None
    scenarios: list[ScenarioDefinition] = []
    rules: list[RuleDefinition] = []
    for child in _nodes(node.get("children")):
        if isinstance(child.get("background"), Mapping):
            background = _convert_background(child["background"], dialect)
        elif isinstance(child.get("scenario"), Mapping):
            scenarios.append(_convert_scenario(child["scenario"], dialect))
        elif isinstance(child.get("rule"), Mapping):
            rules.append(_convert_rule(child["rule"], dialect))
    return FeatureDefinition(
        position=_position(node),
        keyword=_text(node, "keyword"),
        language=language,
        name=_text(node, "name"),
        description=_text(node, "description"),
        tags=_convert_tags(node),
        background=background,
        scenarios=tuple(scenarios),
        rules=tuple(rules),
    )


def _convert_rule(node: AstNode, dialect: Dialect) -> RuleDefinition:
    background: BackgroundDefinition | None = None
    scenarios: list[ScenarioDefinition] = []
    for child in _nodes(node.get("children")):
        if isinstance(child.get("background"), Mapping):
            background = _convert_background(child["background"], dialect)
        elif isinstance(child.get("scenario"), Mapping):
            scenarios.append(_convert_scenario(child["scenario"], dialect))
    return RuleDefinition(
        position=_position(node),
        keyword=_text(node, "keyword"),
        name=_text(node, "name"),
        description=_text(node, "description"),
        tags=_convert_tags(node),
        background=background,
        scenarios=tuple(scenarios),
    )


def _convert_background(node: AstNode, dialect: Dialect) -> BackgroundDefinition:
    return BackgroundDefinition(
        position=_position(node),
        keyword=_text(node, "keyword"),
        name=_text(node, "name"),
        description=_text(node, "description"),
        steps=tuple(_convert_step(step, dialect) for step in _nodes(node.get("steps"))),
    )


def _convert_scenario(node: AstNode, dialect: Dialect) -> ScenarioDefinition:
    return ScenarioDefinition(
        position=_position(node),
        keyword=_text(node, "keyword"),
        name=_text(node, "name"),
        description=_text(node, "description"),
        tags=_convert_tags(node),
        steps=tuple(_convert_step(step, dialect) for step in _nodes(node.get("steps"))),
        examples=tuple(
            _convert_examples(examples) for examples in _nodes(node.get("examples"))
        ),
    )


def _convert_step(node: AstNode, dialect: Dialect) -> StepDefinition:
    data_table = node.get("dataTable")
    doc_string = node.get("docString")
    return StepDefinition(
        position=_position(node),
        keyword=_text(node, "keyword"),
        keyword_type=_keyword_type(node, dialect),
        text=_text(node, "text"),
        data_table=_convert_data_table(data_table) if isinstance(data_table, Mapping) else None,
        doc_string=_convert_doc_string(doc_string) if isinstance(doc_string, Mapping) else None,
    )


def _keyword_type(node: AstNode, dialect: Dialect) -> StepKeywordType:
    raw = node.get("keywordType")
    if raw is not None:
        return StepKeywordType.from_parser(raw)
    # Parser releases without keywordType: classify from the dialect keywords.
    keyword = _text(node, "keyword")
    if keyword.strip() == "*":
        return StepKeywordType.UNKNOWN
    if keyword in dialect.and_keywords or keyword in dialect.but_keywords:
        return StepKeywordType.CONJUNCTION
    if keyword in dialect.given_keywords:
        return StepKeywordType.CONTEXT
    if keyword in dialect.when_keywords:
        return StepKeywordType.ACTION
    if keyword in dialect.then_keywords:
        return StepKeywordType.OUTCOME
    return StepKeywordType.UNKNOWN


def _row_values(row: AstNode) -> tuple[str, ...]:
    return tuple(_text(cell, "value") for cell in _nodes(row.get("cells")))


def _convert_data_table(node: AstNode) -> DataTableDefinition:
    rows = _nodes(node.get("rows"))
    position = _position(rows[0]) if rows else _position(node)
    return DataTableDefinition(
        position=position,
        rows=tuple(_row_values(row) for row in rows),
    )


def _convert_doc_string(node: AstNode) -> DocStringDefinition:
    # Older parser releases call the media type "contentType".
    content_type = _text(node, "mediaType") or _text(node, "contentType")
    return DocStringDefinition(
        position=_position(node),
        content_type=content_type,
        content=_text(node, "content"),
        delimiter=_text(node, "delimiter") or '"""',
    )


def _convert_examples(node: AstNode) -> ExamplesDefinition:
    table: DataTableDefinition | None = None
    header = node.get("tableHeader")
    if isinstance(header, Mapping):
        body = _nodes(node.get("tableBody"))
        table = DataTableDefinition(
            position=_position(header),
            rows=(_row_values(header),) + tuple(_row_values(row) for row in body),
        )
    return ExamplesDefinition(
        position=_position(node),
        keyword=_text(node, "keyword"),
        name=_text(node, "name"),
        description=_text(node, "description"),
        tags=_convert_tags(node),
        table=table,
    )


def _convert_comment(node: AstNode) -> Comment:
    text = _text(node, "text")
    line = _position(node).line
    return Comment(position=TextPosition(line=line, column=_marker_column(text)), text=text)


def _marker_column(text: str) -> int:
    return len(text) - len(text.lstrip()) + 1


def _scan_comments(text: str) -> tuple[Comment, ...]:
    comments: list[Comment] = []
    for index, line in enumerate(text.splitlines(), start=1):
        if not line.lstrip().startswith("#"):
            continue
        if _LANGUAGE_DIRECTIVE_RE.match(line):
            continue
        comments.append(
            Comment(position=TextPosition(line=index, column=_marker_column(line)), text=line)
        )
    return tuple(comments)


def _directive_language(text: str) -> str:
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue
        match = _LANGUAGE_DIRECTIVE_RE.match(line)
        if match:
            return match.group(1)
        if not stripped.startswith("#"):
            break
    return DEFAULT_LANGUAGE
