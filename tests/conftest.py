from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
for entry in (ROOT, ROOT / "src"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))


import pytest

from gherkin_analyzer.checks import BaseCheck, FeatureContext, Issue
from gherkin_analyzer.model import FeatureFile
from gherkin_analyzer.parser import parse
from gherkin_analyzer.visitors import walk

CLEAN_FEATURE = (
    "Feature: Account transfers\n"
    "  Moving money between accounts.\n"
    "\n"
    "  Scenario: Transfer within limit\n"
    "    Given an account with 100 credits\n"
    "    When the user transfers 40 credits\n"
    "    Then the balance is 60 credits\n"
)


@pytest.fixture
def clean_feature() -> str:
    return CLEAN_FEATURE


@pytest.fixture
def parse_text():
    def _parse(text: str | bytes, uri: str = "file:///work/example.feature") -> FeatureFile:
        return parse(uri, text)

    return _parse


@pytest.fixture
def run_check(parse_text):
    """Walk one check over ``text`` the way the engine does and return its issues."""

    def _run(check: BaseCheck, text: str, uri: str = "file:///work/example.feature") -> list[Issue]:
        tree = parse_text(text, uri)
        context = FeatureContext(tree, raw_content=text)
        check.bind(context)
        try:
            walk(tree, check)
        finally:
            check.unbind()
        return list(context.issues)

    return _run
