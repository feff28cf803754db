from __future__ import annotations

from datetime import date, datetime, time
from pathlib import Path
from typing import Mapping, TypeAlias
import tomllib

from gherkin_analyzer.checks.base import parse_bool
from gherkin_analyzer.rule_config import unwrap_settings

DEFAULT_CONFIG_NAME = "gherkin-analyzer.toml"

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def settings_from_config(data: TomlTable) -> dict[str, object]:
    """Map a ``gherkin-analyzer.toml`` table onto the editor settings shape."""
    settings: dict[str, object] = {}
    rules = data.get("rules")
    if isinstance(rules, dict):
        settings["rules"] = {
            key: dict(value) for key, value in rules.items() if isinstance(value, dict)
        }
    if "rules_replace_defaults" in data:
        settings["rulesReplaceDefaults"] = parse_bool(data["rules_replace_defaults"]) is True
    return settings


def project_settings(
    root: Path | None = None, config_path: Path | None = None
) -> dict[str, object]:
    return settings_from_config(load_config(root=root, config_path=config_path))


def merge_settings(
    base: Mapping[str, object], override: Mapping[str, object] | None
) -> dict[str, object]:
    """Layer editor settings over project settings.

    Rule entries merge per property, so an editor may change one property of
    a rule without restating the others.
    """
    merged: dict[str, object] = dict(unwrap_settings(base))
    top = unwrap_settings(override)
    base_rules = merged.get("rules")
    rules: dict[str, object] = dict(base_rules) if isinstance(base_rules, Mapping) else {}
    for key, value in top.items():
        if key != "rules":
            if value is not None:
                merged[key] = value
            continue
        if not isinstance(value, Mapping):
            continue
        for rule_key, entry in value.items():
            current = rules.get(rule_key)
            if isinstance(current, Mapping) and isinstance(entry, Mapping):
                rules[rule_key] = {**current, **entry}
            else:
                rules[rule_key] = entry
    if rules:
        merged["rules"] = rules
    return merged
