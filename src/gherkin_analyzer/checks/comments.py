"""Comment rules."""

from __future__ import annotations

import re

from gherkin_analyzer.checks.base import (
    BaseCheck,
    PropertyKind,
    PropertyValue,
    RuleDescriptor,
    RuleProperty,
)
from gherkin_analyzer.model import Comment
from gherkin_analyzer.severity import RuleSeverity

_STEP_KEYWORDS = ("Given", "When", "Then", "And", "But", "*")


def _comment_body(comment: Comment) -> str:
    return comment.text.strip().removeprefix("#").strip()


class TodoCommentCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="todo-comment",
        severity=RuleSeverity.INFO,
        default_enabled=True,
    )

    def visit_comment(self, comment: Comment) -> None:
        if "todo" in comment.text.lower():
            self.add_issue(comment.position, "Complete the task associated with this TODO comment.")


class FixmeCommentCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="fixme-comment",
        severity=RuleSeverity.INFO,
        default_enabled=True,
    )

    def visit_comment(self, comment: Comment) -> None:
        if "fixme" in comment.text.lower():
            self.add_issue(comment.position, "Address or remove this FIXME comment.")


class CommentPatternMatchCheck(BaseCheck):
    """Flag comments whose text matches a configured regular expression.

    The default empty pattern leaves the rule silent.
    """

    descriptor = RuleDescriptor(
        key="comment-pattern-match",
        severity=RuleSeverity.MAJOR,
        properties=(
            RuleProperty(
                "pattern",
                PropertyKind.STRING,
                "",
                "Regular expression searched for in comment text. "
                "Leave empty to disable the rule.",
            ),
        ),
    )

    def __init__(self) -> None:
        super().__init__()
        self.pattern: re.Pattern[str] | None = None

    def set_property(self, name: str, value: PropertyValue) -> None:
        if name != "pattern":
            super().set_property(name, value)
        text = str(value)
        try:
            self.pattern = re.compile(text) if text else None
        except re.error as exc:
            raise ValueError(str(exc)) from exc

    def visit_comment(self, comment: Comment) -> None:
        if self.pattern is not None and self.pattern.search(_comment_body(comment)):
            self.add_issue(
                comment.position,
                f'This comment matches the pattern "{self.pattern.pattern}". '
                "Rephrase or remove it.",
            )


class CommentFormatCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="comment-format",
        severity=RuleSeverity.MINOR,
        default_enabled=True,
    )

    def visit_comment(self, comment: Comment) -> None:
        text = comment.text.lstrip()
        # A bare "#" is allowed.
        if text.startswith("#") and len(text) > 1 and text[1] != " ":
            self.add_issue(
                comment.position, "Add a space after the '#' symbol in this comment."
            )


class NoCommentedOutStepsCheck(BaseCheck):
    descriptor = RuleDescriptor(
        key="no-commented-out-steps",
        severity=RuleSeverity.MINOR,
    )

    def visit_comment(self, comment: Comment) -> None:
        body = _comment_body(comment)
        if body.startswith("language:"):
            return
        if any(body == keyword or body.startswith(keyword + " ") for keyword in _STEP_KEYWORDS):
            self.add_line_issue(
                comment.position.line, "Remove or restore this commented-out step."
            )
