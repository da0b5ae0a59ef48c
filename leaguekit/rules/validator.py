"""
RuleSet config validation.

validate() parses and checks a config in two passes: structure (pydantic) and
then cross-field invariants. Semantic issues are collected in one pass rather
than stopping at the first, so an author sees every problem at once.
"""
from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

from .schemas import RuleSetConfig

MALFORMED_JSON = "malformed_json"
SCHEMA_VIOLATION = "schema_violation"
SEMANTIC_VIOLATION = "semantic_violation"


@dataclass(frozen=True)
class ConfigIssue:
    """One problem in a config. path is dotted, e.g. scoring.rules.2.statKey."""
    path: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message}


class ConfigError(ValueError):
    """Config rejected. kind is one of malformed_json | schema_violation | semantic_violation."""

    def __init__(self, kind: str, issues: list[ConfigIssue] | None = None, message: str | None = None) -> None:
        self.kind = kind
        self.issues: list[ConfigIssue] = list(issues or [])
        if message is None:
            message = "; ".join(f"{i.path or '(root)'}: {i.message}" for i in self.issues) or kind
        self.message = message
        super().__init__(f"{kind}: {message}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.kind,
            "detail": self.message,
            "issues": [i.to_dict() for i in self.issues],
        }


def _loc_to_path(loc: tuple[Any, ...]) -> str:
    return ".".join(str(part) for part in loc)


def _schema_issues(exc: ValidationError) -> list[ConfigIssue]:
    return [ConfigIssue(_loc_to_path(err["loc"]), err["msg"]) for err in exc.errors()]


def semantic_issues(config: RuleSetConfig) -> list[ConfigIssue]:
    """Cross-field checks on a structurally valid config. Empty list = valid."""
    issues: list[ConfigIssue] = []

    seen_slots: set[str] = set()
    for i, slot in enumerate(config.roster.starter_slots):
        if slot.key in seen_slots:
            issues.append(ConfigIssue(
                f"roster.starterSlots.{i}.key", f"Duplicate roster slot key: {slot.key}"
            ))
        seen_slots.add(slot.key)

    seen_stats: set[str] = set()
    for i, stat in enumerate(config.scoring.stats):
        if stat.min_value > stat.max_value:
            issues.append(ConfigIssue(
                f"scoring.stats.{i}.min",
                f"Stat {stat.key} has min > max ({stat.min_value} > {stat.max_value})",
            ))
        if stat.key in seen_stats:
            issues.append(ConfigIssue(
                f"scoring.stats.{i}.key", f"Duplicate stat key: {stat.key}"
            ))
        seen_stats.add(stat.key)

    for i, rule in enumerate(config.scoring.rules):
        if rule.stat_key not in seen_stats:
            issues.append(ConfigIssue(
                f"scoring.rules.{i}.statKey",
                f"Scoring rule references unknown statKey: {rule.stat_key}",
            ))
    return issues


def validate(raw: str | bytes | Mapping[str, Any] | RuleSetConfig) -> RuleSetConfig:
    """
    Parse and validate a RuleSet config.
    Accepts JSON text, an already-decoded mapping, or a RuleSetConfig (re-checked).
    Raises ConfigError; never repairs input.
    """
    data: Any
    if isinstance(raw, RuleSetConfig):
        data = raw.to_dict()
    elif isinstance(raw, (str, bytes, bytearray)):
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ConfigError(MALFORMED_JSON, message=f"RuleSet config is not valid JSON: {exc}") from None
    else:
        data = raw

    try:
        config = RuleSetConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(SCHEMA_VIOLATION, _schema_issues(exc)) from None

    issues = semantic_issues(config)
    if issues:
        raise ConfigError(SEMANTIC_VIOLATION, issues)
    return config


def parse_stored_config(config_json: str) -> RuleSetConfig:
    """
    Load a config that was validated when it was written.
    A stored config that no longer validates is a bug, not user input.
    """
    try:
        return validate(config_json)
    except ConfigError as exc:
        raise RuntimeError(f"Stored RuleSet config failed validation: {exc}") from exc
