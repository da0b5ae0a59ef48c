"""
Deterministic stat line generation.
Uniform within each stat's configured bounds; not a realistic sports model.
"""
from __future__ import annotations

import math

from .rng import SeededRNG
from .schemas import RuleSetConfig


def stat_seed(league_id: str, week: int, athlete_id: str) -> str:
    """Canonical generation context for one athlete in one league week."""
    return f"{league_id}:{week}:{athlete_id}"


def round_half_up(value: float, decimals: int) -> float:
    factor = 10 ** decimals
    return math.floor(value * factor + 0.5) / factor


def simulate_athlete_stats(config: RuleSetConfig, seed: str) -> dict[str, float]:
    """
    One value per declared stat, in declaration order.
    Same (config, seed) => identical stat line.
    """
    rng = SeededRNG(seed)
    line: dict[str, float] = {}
    for stat in config.scoring.stats:
        raw = rng.uniform(stat.min_value, stat.max_value)
        line[stat.key] = round_half_up(raw, stat.decimals)
    return line
