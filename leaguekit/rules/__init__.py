"""
Rules engine: one validated RuleSetConfig drives roster shape, stat bounds
and scoring for any sport. Everything here is pure.
"""
from .schemas import (
    RuleSetConfig,
    StarterSlot,
    RosterSection,
    StatDefinition,
    ScoringRule,
    ScoringSection,
    ScheduleSection,
    MatchupSection,
)
from .validator import (
    ConfigError,
    ConfigIssue,
    MALFORMED_JSON,
    SCHEMA_VIOLATION,
    SEMANTIC_VIOLATION,
    validate,
    semantic_issues,
    parse_stored_config,
)
from .roster import StarterSlotInstance, derive_starter_slots, total_roster_size, starter_count, slot_order
from .rng import SeededRNG, Mulberry32, fnv1a32
from .stats import simulate_athlete_stats, stat_seed, round_half_up
from .scoring import score_from_stats, score_breakdown, score_athletes

__all__ = [
    "RuleSetConfig",
    "StarterSlot",
    "RosterSection",
    "StatDefinition",
    "ScoringRule",
    "ScoringSection",
    "ScheduleSection",
    "MatchupSection",
    "ConfigError",
    "ConfigIssue",
    "MALFORMED_JSON",
    "SCHEMA_VIOLATION",
    "SEMANTIC_VIOLATION",
    "validate",
    "semantic_issues",
    "parse_stored_config",
    "StarterSlotInstance",
    "derive_starter_slots",
    "total_roster_size",
    "starter_count",
    "slot_order",
    "SeededRNG",
    "Mulberry32",
    "fnv1a32",
    "simulate_athlete_stats",
    "stat_seed",
    "round_half_up",
    "score_from_stats",
    "score_breakdown",
    "score_athletes",
]
