"""Registry of every check class, in registration order."""

from __future__ import annotations

from gherkin_analyzer.checks.base import (
    BaseCheck,
    CrossFileCheck,
    CrossFileIssue,
    FeatureContext,
    Issue,
    PropertyKind,
    RuleDescriptor,
    RuleProperty,
)
from gherkin_analyzer.checks import (
    comments,
    cross_file,
    design,
    rule_blocks,
    spelling,
    steps,
    structure,
    style,
    tags,
)

EXCLUDED_RULE_KEY = "spelling-accuracy"

ALL_CHECKS: tuple[type[BaseCheck], ...] = (
    # Structure
    structure.FeatureFileRequiredCheck,
    structure.FeatureNameRequiredCheck,
    structure.FeatureDescriptionRecommendedCheck,
    structure.ScenarioRequiredCheck,
    structure.ScenarioNameRequiredCheck,
    structure.StepRequiredCheck,
    structure.ExamplesMinimumRowsCheck,
    structure.ExamplesColumnCoverageCheck,
    structure.ScenarioCountLimitCheck,
    structure.StepCountLimitCheck,
    # Design
    design.BackgroundGivenOnlyCheck,
    design.SharedGivenToBackgroundCheck,
    design.StepOrderGivenWhenThenCheck,
    design.SingleWhenPerScenarioCheck,
    design.WhenThenRequiredCheck,
    cross_file.UniqueFeatureNameCheck,
    cross_file.UniqueScenarioNameCheck,
    design.NoDuplicateStepsCheck,
    design.UseScenarioOutlineForExamplesCheck,
    steps.BusinessLanguageOnlyCheck,
    cross_file.ConsistentFeatureLanguageCheck,
    # Style
    style.ConsistentIndentationCheck,
    style.NoTabCharactersCheck,
    style.NoTrailingWhitespaceCheck,
    style.NewlineAtEndOfFileCheck,
    style.NoByteOrderMarkCheck,
    style.ConsistentLineEndingsCheck,
    style.FileNameConventionCheck,
    comments.CommentFormatCheck,
    design.PreferAndButKeywordsCheck,
    design.NoStarStepPrefixCheck,
    style.ExamplesSeparatorLineCheck,
    steps.StepSentenceMaxLengthCheck,
    # Tags
    tags.TagNamePatternCheck,
    tags.TagPermittedValuesCheck,
    tags.TagPlacementCheck,
    tags.NoRedundantTagsCheck,
    tags.NoExamplesTagsCheck,
    # Variables
    structure.NoUnusedVariablesCheck,
    # Step patterns
    steps.GivenStepPatternCheck,
    steps.WhenStepPatternCheck,
    steps.ThenStepPatternCheck,
    steps.NoUnknownStepTypeCheck,
    # Comments
    comments.TodoCommentCheck,
    comments.FixmeCommentCheck,
    comments.CommentPatternMatchCheck,
    spelling.SpellingAccuracyCheck,
    structure.ParseErrorCheck,
    # Rule blocks
    rule_blocks.RuleNameRequiredCheck,
    rule_blocks.RuleScenarioRequiredCheck,
    rule_blocks.UniqueRuleNameCheck,
    rule_blocks.RuleDescriptionRecommendedCheck,
    # Structural integrity
    design.OutlinePlaceholderRequiredCheck,
    design.ScenarioOutlineRequiresExamplesCheck,
    design.BackgroundNeedsMultipleScenariosCheck,
    style.BlankLineBeforeScenarioCheck,
    # Rule-scoped practices
    rule_blocks.RuleScenarioCountLimitCheck,
    rule_blocks.FeatureRuleCountLimitCheck,
    tags.NoRedundantRuleTagsCheck,
    tags.RuleTagPlacementCheck,
    structure.ExamplesNameWhenMultipleCheck,
    design.ConsistentScenarioKeywordCheck,
    tags.NoDuplicateTagsCheck,
    style.NoMultipleEmptyLinesCheck,
    tags.RequiredTagsCheck,
    tags.NoRestrictedTagsCheck,
    tags.NameMaxLengthCheck,
    style.OneSpaceBetweenTagsCheck,
    style.NoPartiallyCommentedTagLinesCheck,
    # Thresholds
    structure.OutlineSingleExampleRowCheck,
    steps.NoRestrictedPatternsCheck,
    tags.MaxTagsPerElementCheck,
    style.FeatureFileMaxLinesCheck,
    structure.DataTableMaxColumnsCheck,
    rule_blocks.UniqueExamplesHeadersCheck,
    structure.NoEmptyExamplesCellsCheck,
    design.NoDuplicateScenarioBodiesCheck,
    tags.NoConflictingTagsCheck,
    comments.NoCommentedOutStepsCheck,
    rule_blocks.BackgroundStepCountLimitCheck,
    structure.FeatureNameMatchesFilenameCheck,
    structure.ScenarioDescriptionRecommendedCheck,
    rule_blocks.NoEmptyDocStringsCheck,
)

CHECKS_BY_KEY: dict[str, type[BaseCheck]] = {
    check.descriptor.key: check for check in ALL_CHECKS
}
DESCRIPTORS_BY_KEY: dict[str, RuleDescriptor] = {
    key: check.descriptor for key, check in CHECKS_BY_KEY.items()
}
DEFAULT_RULE_KEYS: tuple[str, ...] = tuple(
    check.descriptor.key
    for check in ALL_CHECKS
    if check.descriptor.default_enabled and check.descriptor.key != EXCLUDED_RULE_KEY
)


def is_cross_file(check: type[BaseCheck]) -> bool:
    return issubclass(check, CrossFileCheck)


def export_default_rules() -> dict[str, dict[str, object]]:
    """Default settings object for every rule that can be activated.

    Each entry carries ``enabled``, ``severity`` and the rule's property
    defaults, in the shape accepted under ``settings["rules"]``.
    """
    rules: dict[str, dict[str, object]] = {}
    for check in ALL_CHECKS:
        descriptor = check.descriptor
        if descriptor.key == EXCLUDED_RULE_KEY:
            continue
        entry: dict[str, object] = {
            "enabled": descriptor.default_enabled,
            "severity": descriptor.severity.value,
        }
        entry.update(descriptor.property_defaults())
        rules[descriptor.key] = entry
    return rules


__all__ = [
    "ALL_CHECKS",
    "BaseCheck",
    "CHECKS_BY_KEY",
    "CrossFileCheck",
    "CrossFileIssue",
    "DEFAULT_RULE_KEYS",
    "DESCRIPTORS_BY_KEY",
    "EXCLUDED_RULE_KEY",
    "FeatureContext",
    "Issue",
    "PropertyKind",
    "RuleDescriptor",
    "RuleProperty",
    "export_default_rules",
    "is_cross_file",
]
