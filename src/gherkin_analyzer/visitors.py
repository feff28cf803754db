"""Visitor protocol and the deterministic walker over a FeatureFile tree."""

from __future__ import annotations

from gherkin_analyzer.model import (
    BackgroundDefinition,
    Comment,
    ExamplesDefinition,
    FeatureDefinition,
    FeatureFile,
    RuleDefinition,
    ScenarioDefinition,
    StepDefinition,
    TagDefinition,
)


class FeatureVisitor:
    """Callbacks invoked by :func:`walk`.

    Every method is a no-op here, so subclasses override only what they need.
    Only container nodes (file, feature, scenario, rule) get a ``leave_*``
    callback.
    """

    def visit_feature_file(self, file: FeatureFile) -> None:
        pass

    def visit_feature(self, feature: FeatureDefinition) -> None:
        pass

    def visit_background(self, background: BackgroundDefinition) -> None:
        pass

    def visit_scenario(self, scenario: ScenarioDefinition) -> None:
        pass

    def visit_rule(self, rule: RuleDefinition) -> None:
        pass

    def visit_step(self, step: StepDefinition) -> None:
        pass

    def visit_tag(self, tag: TagDefinition) -> None:
        pass

    def visit_examples(self, examples: ExamplesDefinition) -> None:
        pass

    def visit_comment(self, comment: Comment) -> None:
        pass

    def leave_feature_file(self, file: FeatureFile) -> None:
        pass

    def leave_feature(self, feature: FeatureDefinition) -> None:
        pass

    def leave_scenario(self, scenario: ScenarioDefinition) -> None:
        pass

    def leave_rule(self, rule: RuleDefinition) -> None:
        pass


def walk(file: FeatureFile, visitor: FeatureVisitor) -> None:
    """Walk ``file`` in document order.

    Order: the file, then the Feature (its tags, Background, top-level
    Scenarios, Rules), then file-level comments, then the leave callback for
    the file.
    """
    visitor.visit_feature_file(file)
    if file.feature is not None:
        _walk_feature(file.feature, visitor)
    for comment in file.comments:
        visitor.visit_comment(comment)
    visitor.leave_feature_file(file)


def _walk_feature(feature: FeatureDefinition, visitor: FeatureVisitor) -> None:
    visitor.visit_feature(feature)
    for tag in feature.tags:
        visitor.visit_tag(tag)
    if feature.background is not None:
        _walk_background(feature.background, visitor)
    for scenario in feature.scenarios:
        _walk_scenario(scenario, visitor)
    for rule in feature.rules:
        _walk_rule(rule, visitor)
    visitor.leave_feature(feature)


def _walk_rule(rule: RuleDefinition, visitor: FeatureVisitor) -> None:
    visitor.visit_rule(rule)
    for tag in rule.tags:
        visitor.visit_tag(tag)
    if rule.background is not None:
        _walk_background(rule.background, visitor)
    for scenario in rule.scenarios:
        _walk_scenario(scenario, visitor)
    visitor.leave_rule(rule)


def _walk_scenario(scenario: ScenarioDefinition, visitor: FeatureVisitor) -> None:
    visitor.visit_scenario(scenario)
    for tag in scenario.tags:
        visitor.visit_tag(tag)
    for step in scenario.steps:
        visitor.visit_step(step)
    for examples in scenario.examples:
        visitor.visit_examples(examples)
        for tag in examples.tags:
            visitor.visit_tag(tag)
    visitor.leave_scenario(scenario)


def _walk_background(background: BackgroundDefinition, visitor: FeatureVisitor) -> None:
    visitor.visit_background(background)
    for step in background.steps:
        visitor.visit_step(step)
