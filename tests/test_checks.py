from __future__ import annotations

import pytest

from gherkin_analyzer.checks import comments, design, rule_blocks, steps, structure, style, tags
from gherkin_analyzer.model import TextPosition


def _keys(issues) -> list[str]:
    return [issue.rule_key for issue in issues]


def _lines(issues) -> list[int | None]:
    return [issue.line for issue in issues]


def test_clean_feature_passes_structure_and_design(run_check, clean_feature) -> None:
    for check in (
        structure.FeatureFileRequiredCheck(),
        structure.FeatureNameRequiredCheck(),
        structure.ScenarioRequiredCheck(),
        structure.ScenarioNameRequiredCheck(),
        structure.StepRequiredCheck(),
        design.StepOrderGivenWhenThenCheck(),
        design.SingleWhenPerScenarioCheck(),
        design.WhenThenRequiredCheck(),
        design.NoDuplicateStepsCheck(),
        design.PreferAndButKeywordsCheck(),
        style.NoTabCharactersCheck(),
        style.NoTrailingWhitespaceCheck(),
        style.NewlineAtEndOfFileCheck(),
        style.NoMultipleEmptyLinesCheck(),
        style.ConsistentIndentationCheck(),
        style.FileNameConventionCheck(),
        style.BlankLineBeforeScenarioCheck(),
        steps.BusinessLanguageOnlyCheck(),
        steps.NoUnknownStepTypeCheck(),
        tags.TagPlacementCheck(),
    ):
        assert run_check(check, clean_feature) == [], check.rule_key()


def test_feature_file_required_flags_missing_feature(run_check) -> None:
    issues = run_check(structure.FeatureFileRequiredCheck(), "# only a comment\n")
    assert _keys(issues) == ["feature-file-required"]
    assert issues[0].position is None and issues[0].line is None


def test_unnamed_feature_and_scenario(run_check) -> None:
    text = "Feature:\n  Scenario:\n    Given a\n"
    feature_issues = run_check(structure.FeatureNameRequiredCheck(), text)
    assert [issue.position for issue in feature_issues] == [TextPosition(1, 1)]
    scenario_issues = run_check(structure.ScenarioNameRequiredCheck(), text)
    assert [issue.position for issue in scenario_issues] == [TextPosition(2, 3)]


def test_feature_description_recommended(run_check, clean_feature) -> None:
    check = structure.FeatureDescriptionRecommendedCheck
    assert run_check(check(), clean_feature) == []
    assert len(run_check(check(), "Feature: Bare\n  Scenario: s\n    Given a\n")) == 1


def test_scenario_required_counts_rule_scenarios(run_check) -> None:
    check = structure.ScenarioRequiredCheck
    assert len(run_check(check(), "Feature: Empty\n")) == 1
    nested = "Feature: Nested\n  Rule: r\n    Scenario: s\n      Given a\n"
    assert run_check(check(), nested) == []


def test_step_required_for_scenario_and_background(run_check) -> None:
    text = "Feature: Steps\n  Background:\n\n  Scenario: empty\n"
    issues = run_check(structure.StepRequiredCheck(), text)
    assert _lines(issues) == [2, 4]


def test_examples_rows_and_columns(run_check) -> None:
    text = (
        "Feature: Outline\n"
        "  Scenario Outline: o\n"
        "    Given <a> and <b>\n"
        "    Examples: header only\n"
        "      | a |\n"
        "    Examples: full\n"
        "      | a | b |\n"
        "      | 1 | 2 |\n"
    )
    rows = run_check(structure.ExamplesMinimumRowsCheck(), text)
    assert _lines(rows) == [4]
    columns = run_check(structure.ExamplesColumnCoverageCheck(), text)
    assert [issue.message for issue in columns] == ['Add a "b" column to this Examples table.']
    assert _lines(columns) == [4]


def test_scenario_count_limit_property(run_check) -> None:
    text = "Feature: Many\n" + "".join(
        f"  Scenario: s{index}\n    Given a\n" for index in range(3)
    )
    check = structure.ScenarioCountLimitCheck()
    assert check.configure({"maxScenarios": 2}) == []
    issues = run_check(check, text)
    assert _lines(issues) == [1]
    assert "3 scenarios" in issues[0].message
    assert run_check(structure.ScenarioCountLimitCheck(), text) == []


def test_step_count_limit_property(run_check) -> None:
    text = "Feature: Long\n  Scenario: s\n" + "".join(
        f"    And step {index}\n" for index in range(4)
    )
    check = structure.StepCountLimitCheck()
    check.configure({"maxSteps": "3"})
    assert _lines(run_check(check, text)) == [2]


def test_background_given_only(run_check) -> None:
    text = (
        "Feature: Bg\n"
        "  Background:\n"
        "    Given a\n"
        "    When b\n"
        "  Scenario: s\n"
        "    Given c\n"
    )
    assert _lines(run_check(design.BackgroundGivenOnlyCheck(), text)) == [4]


def test_shared_given_to_background(run_check) -> None:
    shared = (
        "Feature: Shared\n"
        "  Scenario: one\n"
        "    Given a logged in user\n"
        "    When x\n"
        "  Scenario: two\n"
        "    Given a logged in user\n"
        "    When y\n"
        "  Rule: r\n"
        "    Scenario: three\n"
        "      Given a cart\n"
        "    Scenario: four\n"
        "      Given a cart\n"
    )
    issues = run_check(design.SharedGivenToBackgroundCheck(), shared)
    assert sorted(_lines(issues)) == [1, 8]
    single = "Feature: One\n  Scenario: one\n    Given a\n"
    assert run_check(design.SharedGivenToBackgroundCheck(), single) == []


def test_step_order_when_and_then(run_check) -> None:
    text = (
        "Feature: Order\n"
        "  Scenario: s\n"
        "    When act\n"
        "    Given late context\n"
        "    Then result\n"
        "    When another act\n"
    )
    order = run_check(design.StepOrderGivenWhenThenCheck(), text)
    assert _lines(order) == [4, 6]
    single = run_check(design.SingleWhenPerScenarioCheck(), text)
    assert "2 When steps" in single[0].message


@pytest.mark.parametrize(
    ("steps", "message"),
    [
        ("    Given a\n", "Add When and Then steps to this Scenario."),
        ("    Given a\n    Then b\n", "Add a When step to this Scenario."),
        ("    Given a\n    When b\n", "Add a Then step to this Scenario."),
    ],
)
def test_when_then_required(run_check, steps: str, message: str) -> None:
    issues = run_check(design.WhenThenRequiredCheck(), "Feature: W\n  Scenario: s\n" + steps)
    assert [issue.message for issue in issues] == [message]


def test_no_duplicate_steps(run_check) -> None:
    text = "Feature: D\n  Scenario: s\n    Given a\n    And a\n    When b\n"
    assert _lines(run_check(design.NoDuplicateStepsCheck(), text)) == [4]


def test_prefer_and_but_keywords(run_check) -> None:
    text = (
        "Feature: K\n"
        "  Scenario: s\n"
        "    Given a\n"
        "    Given b\n"
        "    And c\n"
        "    When d\n"
        "    Then e\n"
    )
    issues = run_check(design.PreferAndButKeywordsCheck(), text)
    assert _lines(issues) == [4]
    assert "'Given'" in issues[0].message


def test_outline_requires_examples(run_check) -> None:
    text = "Feature: O\n  Scenario Outline: missing\n    Given <x>\n"
    assert _lines(run_check(design.ScenarioOutlineRequiresExamplesCheck(), text)) == [2]
    plain = "Feature: P\n  Scenario: plain\n    Given x\n"
    assert run_check(design.ScenarioOutlineRequiresExamplesCheck(), plain) == []


def test_star_prefix_and_placeholders(run_check) -> None:
    text = (
        "Feature: S\n"
        "  Scenario Outline: fixed\n"
        "    * a step\n"
        "    Examples:\n"
        "      | x |\n"
        "      | 1 |\n"
    )
    assert _lines(run_check(design.NoStarStepPrefixCheck(), text)) == [3]
    assert _lines(run_check(design.OutlinePlaceholderRequiredCheck(), text)) == [2]


def test_rule_block_checks(run_check) -> None:
    text = (
        "Feature: R\n"
        "  Rule:\n"
        "    Scenario: s\n"
        "      Given a\n"
        "  Rule: twin\n"
        "  Rule: twin\n"
    )
    assert _lines(run_check(rule_blocks.RuleNameRequiredCheck(), text)) == [2]
    assert _lines(run_check(rule_blocks.RuleScenarioRequiredCheck(), text)) == [5, 6]
    assert _lines(run_check(rule_blocks.UniqueRuleNameCheck(), text)) == [6]
    assert len(run_check(rule_blocks.RuleDescriptionRecommendedCheck(), text)) == 3
    limit = rule_blocks.FeatureRuleCountLimitCheck()
    limit.configure({"maxRules": 2})
    assert _lines(run_check(limit, text)) == [1]


def test_rule_scenario_and_background_limits(run_check) -> None:
    text = (
        "Feature: Limits\n"
        "  Background:\n"
        "    Given a\n"
        "    And b\n"
        "  Rule: busy\n"
        "    Scenario: one\n"
        "      Given x\n"
        "    Scenario: two\n"
        "      Given y\n"
    )
    scenarios = rule_blocks.RuleScenarioCountLimitCheck()
    scenarios.configure({"maxScenarios": 1})
    assert _lines(run_check(scenarios, text)) == [5]
    background = rule_blocks.BackgroundStepCountLimitCheck()
    background.configure({"maxSteps": 1})
    assert _lines(run_check(background, text)) == [2]


def test_empty_doc_strings_and_duplicate_headers(run_check) -> None:
    text = (
        "Feature: Docs\n"
        "  Scenario Outline: o <a>\n"
        "    Given a payload\n"
        '      """\n'
        '      """\n'
        "    Examples:\n"
        "      | a | a |\n"
        "      | 1 | 2 |\n"
    )
    assert _lines(run_check(rule_blocks.NoEmptyDocStringsCheck(), text)) == [3]
    headers = run_check(rule_blocks.UniqueExamplesHeadersCheck(), text)
    assert [issue.message for issue in headers] == ['Remove duplicate Examples header "a".']


def test_raw_text_style_checks(run_check) -> None:
    text = "Feature: Style \n\tScenario: s\n\n\n    Given a"
    assert _lines(run_check(style.NoTrailingWhitespaceCheck(), text)) == [1]
    tabs = run_check(style.NoTabCharactersCheck(), text)
    assert _lines(tabs) == [2]
    assert "column 1" in tabs[0].message
    assert _lines(run_check(style.NoMultipleEmptyLinesCheck(), text)) == [3]
    eof = run_check(style.NewlineAtEndOfFileCheck(), text)
    assert eof[0].line is None and eof[0].position is None


def test_byte_order_mark_reported_on_first_line(run_check) -> None:
    issues = run_check(style.NoByteOrderMarkCheck(), "\ufeffFeature: Marked\n")
    assert _lines(issues) == [1]


def test_feature_file_max_lines(run_check) -> None:
    check = style.FeatureFileMaxLinesCheck()
    check.configure({"maxLines": 2})
    assert len(run_check(check, "Feature: a\n\n  Scenario: s\n")) == 1
    assert style.count_lines("a\nb\n") == 2
    assert style.count_lines("a\nb") == 2
    assert style.count_lines("") == 0


def test_consistent_line_endings(run_check) -> None:
    text = "Feature: Endings\r\n  Scenario: s\n    Given a\r\n"
    lf = run_check(style.ConsistentLineEndingsCheck(), text)
    assert _lines(lf) == [1, 3]
    assert lf[0].message == "Expected LF line ending, but found CRLF."
    crlf = style.ConsistentLineEndingsCheck()
    crlf.configure({"lineEnding": "CRLF"})
    assert _lines(run_check(crlf, text)) == [2]


def test_tag_checks(run_check) -> None:
    text = (
        "@Smoke @smoke @smoke\n"
        "Feature: Tags\n"
        "  Scenario Outline: o <x>\n"
        "    Given <x>\n"
        "    @examples-tag\n"
        "    Examples:\n"
        "      | x |\n"
        "      | 1 |\n"
    )
    duplicates = run_check(tags.NoDuplicateTagsCheck(), text)
    assert [issue.position for issue in duplicates] == [TextPosition(1, 15)]
    pattern = run_check(tags.TagNamePatternCheck(), text)
    assert [issue.position for issue in pattern] == [TextPosition(1, 1)]
    examples = run_check(tags.NoExamplesTagsCheck(), text)
    assert _lines(examples) == [5]
    limit = tags.MaxTagsPerElementCheck()
    limit.configure({"maxTags": 2})
    assert _lines(run_check(limit, text)) == [2]


def test_tag_pattern_property_rejects_invalid_regex() -> None:
    check = tags.TagNamePatternCheck()
    assert check.configure({"pattern": "("}) == ["pattern"]
    assert check.configure({"pattern": "^[A-Z]"}) == []
    assert check.pattern.pattern == "^[A-Z]"


def test_name_max_length(run_check) -> None:
    check = tags.NameMaxLengthCheck()
    check.configure({"maxLength": 5})
    text = "Feature: Lengthy name\n  Scenario: ok\n    Given a\n"
    issues = run_check(check, text)
    assert _lines(issues) == [1]
    assert "Feature name is 12 characters long" in issues[0].message


def test_comment_checks(run_check) -> None:
    text = (
        "#no space\n"
        "# TODO: split this feature\n"
        "# fixme later\n"
        "#\n"
        "Feature: Comments\n"
    )
    assert _lines(run_check(comments.CommentFormatCheck(), text)) == [1]
    todo = run_check(comments.TodoCommentCheck(), text)
    assert [issue.position for issue in todo] == [TextPosition(2, 1)]
    assert _lines(run_check(comments.FixmeCommentCheck(), text)) == [3]


def _positions(issues) -> list[TextPosition | None]:
    return [issue.position for issue in issues]


def test_consistent_indentation(run_check) -> None:
    text = (
        "@top\n"
        "Feature: Indent\n"
        "\n"
        "   Scenario: three\n"
        "    Given a\n"
        "    When b\n"
        "     Then c\n"
        "\n"
        "  Rule: r\n"
        "\n"
        "    Scenario: nested\n"
        "      Given a\n"
        "    When b\n"
    )
    issues = run_check(style.ConsistentIndentationCheck(), text)
    assert _lines(issues) == [4, 7, 13]
    assert issues[0].message == "Expected indentation of 2 spaces (level 1), but found 3 spaces."
    assert issues[2].message == "Expected indentation of 6 spaces (level 3), but found 4 spaces."
    wide = style.ConsistentIndentationCheck()
    wide.configure({"indentation": 4})
    assert run_check(wide, "Feature: F\n\n    Scenario: s\n        Given a\n") == []


def test_file_name_convention(run_check, clean_feature) -> None:
    check = style.FileNameConventionCheck()
    (issue,) = run_check(check, clean_feature, uri="file:///work/Bad_Name.feature")
    assert issue.line == 1
    assert issue.message == (
        "Filename 'Bad_Name.feature' does not match the required pattern: "
        r"^[a-z][-A-Za-z0-9]*\.feature$"
    )
    assert run_check(check, clean_feature, uri="C:\\work\\good-name.feature") == []
    check.configure({"pattern": r".*\.feature"})
    assert run_check(check, clean_feature, uri="file:///work/Bad_Name.feature") == []


def test_blank_lines_before_scenarios_and_examples(run_check) -> None:
    text = (
        "Feature: Spacing\n"
        "  Scenario: tight\n"
        "    Given a\n"
        "\n"
        "  @tagged\n"
        "  Scenario Outline: spaced <x>\n"
        "    Given <x>\n"
        "    Examples:\n"
        "      | x |\n"
        "      | 1 |\n"
        "\n"
        "    Examples:\n"
        "      | x |\n"
        "      | 2 |\n"
    )
    scenarios = run_check(style.BlankLineBeforeScenarioCheck(), text)
    assert _positions(scenarios) == [TextPosition(2, 3)]
    assert scenarios[0].message == "Add a blank line before this Scenario."
    examples = run_check(style.ExamplesSeparatorLineCheck(), text)
    assert _positions(examples) == [TextPosition(8, 5)]


def test_tag_line_spacing_and_comments(run_check) -> None:
    text = "@a  @b\n@c@d\n@e @f # note\nFeature: Tags\n"
    assert _lines(run_check(style.OneSpaceBetweenTagsCheck(), text)) == [1, 2]
    mixed = run_check(style.NoPartiallyCommentedTagLinesCheck(), text)
    assert _lines(mixed) == [3]
    assert mixed[0].position is None


def test_commented_out_steps(run_check) -> None:
    text = (
        "# Given a forgotten step\n"
        "#When\n"
        "# Whenever possible\n"
        "Feature: Comments\n"
        "  # language: en\n"
        "  # * star step\n"
    )
    issues = run_check(comments.NoCommentedOutStepsCheck(), text)
    assert _lines(issues) == [1, 2, 6]
    assert issues[0].message == "Remove or restore this commented-out step."


def test_comment_pattern_match(run_check) -> None:
    text = "# hack around the bug\n# fine\nFeature: Hacks\n"
    check = comments.CommentPatternMatchCheck()
    assert run_check(check, text) == []
    assert check.configure({"pattern": r"(?i)\bhack\b"}) == []
    assert _positions(run_check(check, text)) == [TextPosition(1, 1)]
    assert check.configure({"pattern": "("}) == ["pattern"]


TAGGED = (
    "@api\n"
    "Feature: Tagging\n"
    "\n"
    "  @api @smoke @wip\n"
    "  Scenario: first\n"
    "    Given a\n"
    "\n"
    "  @smoke\n"
    "  Scenario: second\n"
    "    Given b\n"
    "\n"
    "  Rule: grouped\n"
    "\n"
    "    @slow @smoke\n"
    "    Scenario: third\n"
    "      Given c\n"
)


def test_tag_placement_and_redundant_feature_tags(run_check) -> None:
    (placement,) = run_check(tags.TagPlacementCheck(), TAGGED)
    assert placement.line == 2
    assert placement.position is None
    assert placement.message.endswith("appear on all scenarios: @smoke")
    redundant = run_check(tags.NoRedundantTagsCheck(), TAGGED)
    assert _positions(redundant) == [TextPosition(4, 3)]
    assert "'api'" in redundant[0].message


def test_restricted_permitted_and_required_tags(run_check) -> None:
    restricted = run_check(tags.NoRestrictedTagsCheck(), TAGGED)
    assert _positions(restricted) == [TextPosition(4, 15)]
    assert restricted[0].message == (
        'Remove the restricted tag "@wip"; it should not be committed.'
    )
    permitted = tags.TagPermittedValuesCheck()
    assert run_check(permitted, TAGGED) == []
    permitted.configure({"pattern": "api|smoke|slow"})
    assert _positions(run_check(permitted, TAGGED)) == [TextPosition(4, 15)]
    required = tags.RequiredTagsCheck()
    assert run_check(required, TAGGED) == []
    required.configure({"pattern": "slow"})
    assert _positions(run_check(required, TAGGED)) == [TextPosition(5, 3), TextPosition(9, 3)]


def test_conflicting_tags(run_check) -> None:
    check = tags.NoConflictingTagsCheck()
    assert run_check(check, TAGGED) == []
    check.configure({"conflictPairs": "wip+smoke, malformed, +api"})
    assert check.pairs == [("wip", "smoke")]
    (issue,) = run_check(check, TAGGED)
    assert issue.position == TextPosition(5, 3)
    assert issue.message == 'Tags "@wip" and "@smoke" conflict and should not appear together.'


def test_rule_level_tag_checks(run_check) -> None:
    text = (
        "@shared\n"
        "Feature: Rules\n"
        "\n"
        "  @billing\n"
        "  Rule: invoices\n"
        "\n"
        "    @billing @shared @fast\n"
        "    Scenario: one\n"
        "      Given a\n"
        "\n"
        "    @fast\n"
        "    Scenario: two\n"
        "      Given b\n"
    )
    assert _positions(run_check(tags.NoRedundantRuleTagsCheck(), text)) == [TextPosition(7, 5)]
    (placement,) = run_check(tags.RuleTagPlacementCheck(), text)
    assert placement.position == TextPosition(5, 3)
    assert placement.message.endswith("within this Rule: @fast")
    # A single Rule holding every scenario is left to the Rule-level check.
    assert run_check(tags.TagPlacementCheck(), text) == []
    assert _positions(run_check(tags.NoRedundantTagsCheck(), text)) == [TextPosition(7, 14)]


STEPS = (
    "Feature: Steps\n"
    "\n"
    "  Scenario: s\n"
    "    Given the user opens the login screen and clicks the link\n"
    "    When the user submits the form\n"
    "    Then the Input field is shown\n"
    "    And it stays visible\n"
    "    * an untyped step\n"
)


def test_business_language_reports_first_term_per_step(run_check) -> None:
    issues = run_check(steps.BusinessLanguageOnlyCheck(), STEPS)
    assert _positions(issues) == [TextPosition(4, 5), TextPosition(6, 5)]
    assert issues[0].message == 'Replace the technical term "screen" with business-level language.'
    assert '"input"' in issues[1].message


def test_step_sentence_length_and_unknown_type(run_check) -> None:
    assert run_check(steps.StepSentenceMaxLengthCheck(), STEPS) == []
    check = steps.StepSentenceMaxLengthCheck()
    check.configure({"maxLength": 30})
    (issue,) = run_check(check, STEPS)
    assert issue.line == 4
    assert issue.message.startswith("Step sentence is 51 characters long")
    unknown = run_check(steps.NoUnknownStepTypeCheck(), STEPS)
    assert _positions(unknown) == [TextPosition(8, 5)]
    assert '"*"' in unknown[0].message


def test_step_patterns_check_only_their_own_type(run_check) -> None:
    given = steps.GivenStepPatternCheck()
    given.configure({"pattern": "the user .*"})
    assert run_check(given, STEPS) == []
    given.configure({"pattern": "a .*"})
    (issue,) = run_check(given, STEPS)
    assert issue.position == TextPosition(4, 5)
    assert issue.message == "Given step does not match the required pattern: a .*"
    when = steps.WhenStepPatternCheck()
    when.configure({"pattern": "the user .*"})
    assert run_check(when, STEPS) == []
    then = steps.ThenStepPatternCheck()
    then.configure({"pattern": "the .*"})
    assert run_check(then, STEPS) == []
    then.configure({"pattern": "nothing"})
    assert _lines(run_check(then, STEPS)) == [6]


def test_restricted_patterns(run_check) -> None:
    check = steps.NoRestrictedPatternsCheck()
    assert run_check(check, STEPS) == []
    check.configure({"pattern": "(?i)login"})
    (issue,) = run_check(check, STEPS)
    assert issue.position == TextPosition(4, 5)
    assert issue.message == 'Step text matches the restricted pattern "(?i)login". Remove or rephrase it.'


def test_use_scenario_outline_for_examples(run_check) -> None:
    text = (
        "Feature: Outlines\n"
        "\n"
        "  Scenario: plain with examples <x>\n"
        "    Given <x>\n"
        "\n"
        "    Examples:\n"
        "      | x |\n"
        "      | 1 |\n"
        "\n"
        "  Scenario Outline: proper <x>\n"
        "    Given <x>\n"
        "\n"
        "    Examples:\n"
        "      | x |\n"
        "      | 2 |\n"
    )
    assert _positions(run_check(design.UseScenarioOutlineForExamplesCheck(), text)) == [
        TextPosition(3, 3)
    ]


def test_background_needs_multiple_scenarios(run_check) -> None:
    check = design.BackgroundNeedsMultipleScenariosCheck()
    single = "Feature: Bg\n\n  Background:\n    Given a\n\n  Scenario: only\n    When b\n"
    assert _positions(run_check(check, single)) == [TextPosition(3, 3)]
    double = single + "\n  Scenario: another\n    When c\n"
    assert run_check(check, double) == []
    in_rule = (
        "Feature: Bg\n"
        "\n"
        "  Rule: r\n"
        "\n"
        "    Background:\n"
        "      Given a\n"
        "\n"
        "    Scenario: only\n"
        "      When b\n"
    )
    (issue,) = run_check(check, in_rule)
    assert issue.position == TextPosition(5, 5)
    assert "within this Rule" in issue.message


def test_consistent_scenario_keyword(run_check) -> None:
    text = (
        "Feature: Keywords\n"
        "\n"
        "  Scenario: one\n"
        "    Given a\n"
        "\n"
        "  Example: two\n"
        "    Given b\n"
        "\n"
        "  Scenario: three\n"
        "    Given c\n"
        "\n"
        "  Scenario Outline: four <x>\n"
        "    Given <x>\n"
        "\n"
        "    Examples:\n"
        "      | x |\n"
        "      | 1 |\n"
    )
    (issue,) = run_check(design.ConsistentScenarioKeywordCheck(), text)
    assert issue.position == TextPosition(6, 3)
    assert issue.message == (
        'Use "Scenario" consistently instead of "Example"; '
        'the majority of scenarios in this file use "Scenario".'
    )


def test_duplicate_scenario_bodies_per_block(run_check) -> None:
    text = (
        "Feature: Bodies\n"
        "\n"
        "  Scenario: one\n"
        "    Given a\n"
        "    When b\n"
        "\n"
        "  Scenario: two\n"
        "    Given a\n"
        "    When b\n"
        "\n"
        "  Rule: r\n"
        "\n"
        "    Scenario: three\n"
        "      Given a\n"
        "      When b\n"
    )
    (issue,) = run_check(design.NoDuplicateScenarioBodiesCheck(), text)
    assert issue.position == TextPosition(7, 3)
    assert "scenario at line 3" in issue.message


def test_unused_examples_columns(run_check) -> None:
    text = (
        "Feature: Vars\n"
        "\n"
        "  Scenario Outline: o\n"
        "    Given <used>\n"
        "\n"
        "    Examples:\n"
        "      | used | spare |\n"
        "      | 1    | 2     |\n"
    )
    (issue,) = run_check(structure.NoUnusedVariablesCheck(), text)
    assert issue.position == TextPosition(6, 5)
    assert issue.message == 'Remove the unused "spare" column from this Examples table.'


MULTI_EXAMPLES = (
    "Feature: Many examples\n"
    "\n"
    "  Scenario Outline: o <x>\n"
    "    Given <x>\n"
    "\n"
    "    Examples: small\n"
    "      | x |\n"
    "      | 1 |\n"
    "\n"
    "    Examples:\n"
    "      | x |\n"
    "      |   |\n"
)


def test_examples_naming_and_empty_cells(run_check) -> None:
    names = run_check(structure.ExamplesNameWhenMultipleCheck(), MULTI_EXAMPLES)
    assert _positions(names) == [TextPosition(10, 5)]
    (empty,) = run_check(structure.NoEmptyExamplesCellsCheck(), MULTI_EXAMPLES)
    assert empty.position == TextPosition(10, 5)
    assert empty.message == 'Examples table has an empty cell in data row 1, column "x".'


def test_outline_single_example_row(run_check) -> None:
    check = structure.OutlineSingleExampleRowCheck()
    (issue,) = run_check(check, MULTI_EXAMPLES)
    assert issue.position == TextPosition(3, 3)
    assert issue.message.startswith(
        "This Scenario Outline has 2 Examples section(s), each with at most 1 data row(s)."
    )
    check.configure({"maxDataRows": 0})
    assert run_check(check, MULTI_EXAMPLES) == []


def test_data_table_max_columns(run_check) -> None:
    text = (
        "Feature: Wide\n"
        "\n"
        "  Scenario: s\n"
        "    Given a table:\n"
        "      | a | b | c |\n"
        "      | 1 | 2 | 3 |\n"
    )
    check = structure.DataTableMaxColumnsCheck()
    assert run_check(check, text) == []
    check.configure({"maxColumns": "2"})
    (issue,) = run_check(check, text)
    assert issue.position == TextPosition(4, 5)
    assert issue.message == (
        "Step data table has 3 columns, which exceeds the limit of 2. "
        "Consider reducing the number of columns."
    )


def test_feature_name_matches_filename(run_check, clean_feature) -> None:
    check = structure.FeatureNameMatchesFilenameCheck()
    assert run_check(check, clean_feature, uri="file:///work/account-transfers.feature") == []
    (issue,) = run_check(check, clean_feature)
    assert issue.position == TextPosition(1, 1)
    assert issue.message == (
        'Feature name "Account transfers" does not correspond to file name "example.feature".'
    )
    assert run_check(check, "Feature: Go\n") == []


def test_scenario_description_recommended(run_check, clean_feature) -> None:
    check = structure.ScenarioDescriptionRecommendedCheck()
    assert _positions(run_check(check, clean_feature)) == [TextPosition(4, 3)]
    described = "Feature: D\n\n  Scenario: s\n    Explains the purpose.\n    Given a\n"
    assert run_check(check, described) == []
