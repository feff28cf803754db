from __future__ import annotations

from gherkin_analyzer.model import FeatureFile
from gherkin_analyzer.visitors import FeatureVisitor, walk


class _Recorder(FeatureVisitor):
    def __init__(self) -> None:
        self.events: list[str] = []

    def visit_feature_file(self, file):
        self.events.append("file")

    def visit_feature(self, feature):
        self.events.append(f"feature:{feature.name}")

    def visit_background(self, background):
        self.events.append("background")

    def visit_scenario(self, scenario):
        self.events.append(f"scenario:{scenario.name}")

    def visit_rule(self, rule):
        self.events.append(f"rule:{rule.name}")

    def visit_step(self, step):
        self.events.append(f"step:{step.text}")

    def visit_tag(self, tag):
        self.events.append(f"tag:{tag.name}")

    def visit_examples(self, examples):
        self.events.append("examples")

    def visit_comment(self, comment):
        self.events.append(f"comment:{comment.position.line}")

    def leave_feature_file(self, file):
        self.events.append("leave:file")

    def leave_feature(self, feature):
        self.events.append("leave:feature")

    def leave_scenario(self, scenario):
        self.events.append(f"leave:scenario:{scenario.name}")

    def leave_rule(self, rule):
        self.events.append(f"leave:rule:{rule.name}")


def test_walk_visits_in_document_order(parse_text) -> None:
    tree = parse_text(
        "@walk\n"
        "Feature: Walk\n"
        "  Background:\n"
        "    Given a base\n"
        "\n"
        "  @outline\n"
        "  Scenario Outline: outline\n"
        "    Given <x>\n"
        "    When go\n"
        "    Then done\n"
        "\n"
        "    @extag\n"
        "    Examples:\n"
        "      | x |\n"
        "      | 1 |\n"
        "\n"
        "  Rule: r1\n"
        "    Scenario: inner\n"
        "      Given a\n"
        "      When b\n"
        "      Then c\n"
        "# trailing comment\n"
    )
    recorder = _Recorder()
    walk(tree, recorder)
    assert recorder.events == [
        "file",
        "feature:Walk",
        "tag:walk",
        "background",
        "step:a base",
        "scenario:outline",
        "tag:outline",
        "step:<x>",
        "step:go",
        "step:done",
        "examples",
        "tag:extag",
        "leave:scenario:outline",
        "rule:r1",
        "scenario:inner",
        "step:a",
        "step:b",
        "step:c",
        "leave:scenario:inner",
        "leave:rule:r1",
        "leave:feature",
        "comment:22",
        "leave:file",
    ]


def test_walk_without_feature_still_visits_comments() -> None:
    tree = FeatureFile(feature=None)
    recorder = _Recorder()
    walk(tree, recorder)
    assert recorder.events == ["file", "leave:file"]


def test_walk_syntax_error_tree_visits_salvaged_comments(parse_text) -> None:
    tree = parse_text("# note\nnot gherkin\n")
    recorder = _Recorder()
    walk(tree, recorder)
    assert recorder.events == ["file", "comment:1", "leave:file"]


def test_base_visitor_callbacks_are_noops(parse_text) -> None:
    walk(parse_text("Feature: Quiet\n  Scenario: s\n    Given a\n"), FeatureVisitor())
