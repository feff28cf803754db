from __future__ import annotations

from pathlib import Path

import pytest

from gherkin_analyzer.exceptions import ParseIOError
from gherkin_analyzer.model import StepKeywordType, TagDefinition, TextPosition
from gherkin_analyzer.parser import DEFAULT_LANGUAGE, parse, parse_path


def test_parse_builds_feature_tree(parse_text) -> None:
    tree = parse_text(
        "@billing @slow\n"
        "Feature: Invoices\n"
        "  Invoices are sent monthly.\n"
        "\n"
        "  Background:\n"
        "    Given a customer\n"
        "\n"
        "  Scenario: Send invoice\n"
        "    Given an open invoice\n"
        "    And a valid address\n"
        "    When the month ends\n"
        "    Then the invoice is sent\n"
        "    But no reminder is sent\n",
        uri="file:///work/invoices.feature",
    )
    feature = tree.feature
    assert feature is not None
    assert tree.uri == "file:///work/invoices.feature"
    assert tree.language == DEFAULT_LANGUAGE
    assert feature.name == "Invoices"
    assert feature.position == TextPosition(line=2, column=1)
    assert feature.description.strip() == "Invoices are sent monthly."
    assert [tag.name for tag in feature.tags] == ["billing", "slow"]
    assert feature.background is not None
    assert [step.text for step in feature.background.steps] == ["a customer"]
    scenario = feature.scenarios[0]
    assert scenario.position == TextPosition(line=8, column=3)
    assert not scenario.is_outline
    assert [step.keyword_type for step in scenario.steps] == [
        StepKeywordType.CONTEXT,
        StepKeywordType.CONJUNCTION,
        StepKeywordType.ACTION,
        StepKeywordType.OUTCOME,
        StepKeywordType.CONJUNCTION,
    ]
    assert scenario.steps[0].keyword == "Given "
    assert scenario.steps[0].position == TextPosition(line=9, column=5)


def test_parse_outline_examples_table_and_doc_string(parse_text) -> None:
    tree = parse_text(
        "Feature: Outlines\n"
        "\n"
        "  Scenario Outline: Eat <count>\n"
        "    Given there are <start> cucumbers\n"
        "      | colour | size |\n"
        "      | green  | big  |\n"
        "    When I eat <count> cucumbers\n"
        "    Then I see\n"
        '      """json\n'
        "      {}\n"
        '      """\n'
        "\n"
        "    @fast\n"
        "    Examples: small\n"
        "      | start | count |\n"
        "      | 12    | 5     |\n"
        "      | 20    | 5     |\n"
    )
    scenario = tree.feature.scenarios[0]
    assert scenario.is_outline
    assert scenario.name == "Eat <count>"
    table = scenario.steps[0].data_table
    assert table is not None
    assert table.rows == (("colour", "size"), ("green", "big"))
    assert table.position.line == 5
    doc_string = scenario.steps[2].doc_string
    assert doc_string is not None
    assert doc_string.content_type == "json"
    assert doc_string.content == "{}"
    assert doc_string.delimiter == '"""'
    examples = scenario.examples[0]
    assert examples.name == "small"
    assert examples.tags == (TagDefinition(TextPosition(line=13, column=5), "fast"),)
    assert examples.table is not None
    assert examples.table.rows == (("start", "count"), ("12", "5"), ("20", "5"))


def test_parse_rule_blocks_and_all_scenarios(parse_text) -> None:
    tree = parse_text(
        "Feature: Rules\n"
        "\n"
        "  Scenario: top\n"
        "    Given a\n"
        "\n"
        "  Rule: first rule\n"
        "    Background:\n"
        "      Given shared\n"
        "\n"
        "    Scenario: inner\n"
        "      Given b\n"
    )
    feature = tree.feature
    assert [rule.name for rule in feature.rules] == ["first rule"]
    rule = feature.rules[0]
    assert rule.background is not None
    assert [scenario.name for scenario in feature.all_scenarios()] == ["top", "inner"]


def test_parse_star_step_is_unknown_keyword_type(parse_text) -> None:
    tree = parse_text("Feature: Stars\n  Scenario: s\n    * something\n")
    step = tree.feature.scenarios[0].steps[0]
    assert step.keyword.strip() == "*"
    assert step.keyword_type is StepKeywordType.UNKNOWN


def test_parse_comments_point_at_hash(parse_text) -> None:
    tree = parse_text(
        "Feature: Comments\n"
        "  Scenario: s\n"
        "    # TODO tidy this up\n"
        "    Given a\n"
    )
    assert len(tree.comments) == 1
    comment = tree.comments[0]
    assert comment.position == TextPosition(line=3, column=5)
    assert comment.text.strip() == "# TODO tidy this up"


def test_parse_language_directive(parse_text) -> None:
    tree = parse_text(
        "# language: fr\n"
        "Fonctionnalité: Paiement\n"
        "  Scénario: payer\n"
        "    Soit un panier\n"
    )
    assert tree.language == "fr"
    assert tree.feature is not None
    assert tree.feature.language == "fr"
    assert tree.feature.scenarios[0].steps[0].keyword_type is StepKeywordType.CONTEXT


@pytest.mark.parametrize("text", ["", "   \n\n", b""])
def test_parse_empty_input_has_no_feature(parse_text, text) -> None:
    tree = parse_text(text)
    assert tree.feature is None
    assert tree.comments == ()
    assert tree.language == DEFAULT_LANGUAGE


def test_parse_syntax_error_keeps_comments_and_language(parse_text) -> None:
    tree = parse_text(
        "# language: de\n"
        "# leading note\n"
        "this is not gherkin\n"
    )
    assert tree.feature is None
    assert tree.language == "de"
    assert [comment.position.line for comment in tree.comments] == [2]


def test_parse_strips_byte_order_mark(parse_text) -> None:
    tree = parse_text("\ufeffFeature: Marked\n")
    assert tree.feature is not None
    assert tree.feature.name == "Marked"
    assert tree.feature.position.column == 1


def test_parse_decodes_bytes(parse_text) -> None:
    tree = parse_text("Feature: Bytes ü\n".encode("utf-8"))
    assert tree.feature.name == "Bytes ü"


def test_parse_undecodable_bytes_raise_parse_io_error() -> None:
    with pytest.raises(ParseIOError) as excinfo:
        parse("file:///work/bad.feature", b"Feature: \xff\xfe\xfa\n")
    assert excinfo.value.uri == "file:///work/bad.feature"


def test_parse_path_reads_file(tmp_path: Path) -> None:
    path = tmp_path / "a.feature"
    path.write_text("Feature: From disk\n", encoding="utf-8")
    tree = parse_path(path)
    assert tree.uri == path.resolve().as_uri()
    assert tree.feature.name == "From disk"


def test_parse_path_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ParseIOError):
        parse_path(tmp_path / "missing.feature")


def test_tag_definition_strips_at_sign() -> None:
    assert TagDefinition(TextPosition(1, 1), "@smoke").name == "smoke"
    assert TagDefinition(TextPosition(1, 1), "smoke").name == "smoke"


def test_step_keyword_type_from_parser() -> None:
    assert StepKeywordType.from_parser("Context") is StepKeywordType.CONTEXT
    assert StepKeywordType.from_parser("Conjunction") is StepKeywordType.CONJUNCTION
    assert StepKeywordType.from_parser("whatever") is StepKeywordType.UNKNOWN
    assert StepKeywordType.from_parser(None) is StepKeywordType.UNKNOWN
