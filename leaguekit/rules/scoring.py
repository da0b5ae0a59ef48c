"""
Fantasy scoring: a linear combination of stat values and configured weights.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping

from .schemas import RuleSetConfig


def score_from_stats(config: RuleSetConfig, stat_line: Mapping[str, float]) -> float:
    """
    sum(stat_line[rule.stat_key] * rule.points_per_unit).
    Missing keys score zero so partial or legacy stat lines still score.
    """
    total = 0.0
    for rule in config.scoring.rules:
        total += stat_line.get(rule.stat_key, 0) * rule.points_per_unit
    return total


def score_breakdown(config: RuleSetConfig, stat_line: Mapping[str, float]) -> dict[str, float]:
    """Points contributed per rule stat key (rules on the same key are summed)."""
    out: dict[str, float] = {}
    for rule in config.scoring.rules:
        pts = stat_line.get(rule.stat_key, 0) * rule.points_per_unit
        out[rule.stat_key] = out.get(rule.stat_key, 0.0) + pts
    return out


def score_athletes(
    config: RuleSetConfig,
    athlete_ids: Iterable[str | None],
    stat_lines: Mapping[str, Mapping[str, float]],
) -> float:
    """Team total over lineup athletes; empty slots and athletes without a line add nothing."""
    total = 0.0
    for athlete_id in athlete_ids:
        if athlete_id is None:
            continue
        line = stat_lines.get(athlete_id)
        if line is None:
            continue
        total += score_from_stats(config, line)
    return total
