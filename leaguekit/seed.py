"""
Built-in sports and RuleSet templates.
Seeding is idempotent by slug: existing rows are left untouched, so admin
edits to a seeded RuleSet survive restarts.
"""
from __future__ import annotations

import copy
import logging
import sqlite3
from typing import Any

from leaguekit.persistence.repositories import RuleSetRepository, SportRepository
from leaguekit.rules import validate

logger = logging.getLogger(__name__)


def _slots(*spec: tuple[str, int]) -> list[dict[str, Any]]:
    return [{"key": key, "label": key, "count": count} for key, count in spec]


def _stat(key: str, label: str, lo: float, hi: float, decimals: int = 0) -> dict[str, Any]:
    return {"key": key, "label": label, "min": lo, "max": hi, "decimals": decimals}


def _rules(*spec: tuple[str, float]) -> list[dict[str, Any]]:
    return [{"statKey": key, "pointsPerUnit": ppu} for key, ppu in spec]


def _config(starters: list[dict[str, Any]], bench: int, stats: list[dict[str, Any]],
            rules: list[dict[str, Any]], weeks: int) -> dict[str, Any]:
    return {
        "roster": {"starterSlots": starters, "benchSlots": bench},
        "scoring": {"stats": stats, "rules": rules},
        "schedule": {"type": "roundRobin", "weeks": weeks},
        "matchup": {"format": "H2H_POINTS"},
    }


def starter_rule_set_config() -> dict[str, Any]:
    """Default authoring template: 5 starters, 3 bench, three points-based stats."""
    return _config(
        [{"key": "A", "label": "Slot A", "count": 3}, {"key": "B", "label": "Slot B", "count": 2}],
        3,
        [
            _stat("points", "Points", 4, 30),
            _stat("assists", "Assists", 0, 10),
            _stat("blocks", "Blocks", 0, 5),
        ],
        _rules(("points", 1), ("assists", 2), ("blocks", 3)),
        8,
    )


# ---------- Templates ----------

_FOOTBALL_SLOTS = _slots(("QB", 1), ("RB", 2), ("WR", 2), ("TE", 1), ("FLEX", 1), ("K", 1), ("DEF", 1))
_FOOTBALL_STATS = [
    _stat("passYds", "Pass Yds", 0, 420),
    _stat("passTd", "Pass TD", 0, 6),
    _stat("rushYds", "Rush Yds", 0, 220),
    _stat("rushTd", "Rush TD", 0, 5),
    _stat("recYds", "Rec Yds", 0, 220),
    _stat("recTd", "Rec TD", 0, 5),
    _stat("receptions", "Receptions", 0, 12),
    _stat("turnovers", "Turnovers", 0, 3),
]


def _football(reception_points: float) -> dict[str, Any]:
    return _config(
        _FOOTBALL_SLOTS,
        6,
        _FOOTBALL_STATS,
        _rules(
            ("passYds", 0.04), ("passTd", 4), ("rushYds", 0.1), ("rushTd", 6),
            ("recYds", 0.1), ("recTd", 6), ("receptions", reception_points), ("turnovers", -2),
        ),
        14,
    )


def _nebula() -> dict[str, Any]:
    config = starter_rule_set_config()
    config["scoring"] = {
        "stats": [_stat("flux", "Flux", 0, 14), _stat("shards", "Shards", 0, 8), _stat("surge", "Surge", 0, 5)],
        "rules": _rules(("flux", 3), ("shards", 5), ("surge", 9)),
    }
    return config


SPORTS: list[dict[str, str]] = [
    {"slug": "football", "name": "Football", "description": "Common fantasy football formats (H2H points)."},
    {"slug": "basketball", "name": "Basketball", "description": "Fantasy basketball templates with flexible rosters."},
    {"slug": "baseball", "name": "Baseball", "description": "Points-based fantasy baseball templates."},
    {"slug": "soccer", "name": "Soccer", "description": "Fantasy soccer templates (goals/assists/clean sheets)."},
    {"slug": "hockey", "name": "Hockey", "description": "Fantasy hockey templates (skaters + goalie)."},
    {"slug": "gridball", "name": "Gridball", "description": "A demo sport template with configurable roster + scoring."},
    {"slug": "nebula-league", "name": "Nebula League", "description": "A high-variance demo format."},
]

RULE_SETS: list[dict[str, Any]] = [
    {
        "sport": "football",
        "slug": "football-standard",
        "name": "Standard (0.5 PPR)",
        "description": "QB/RB/WR/TE/FLEX/K/DEF with half-point receptions.",
        "config": _football(0.5),
    },
    {
        "sport": "football",
        "slug": "football-ppr",
        "name": "PPR",
        "description": "Same roster with full-point receptions.",
        "config": _football(1),
    },
    {
        "sport": "basketball",
        "slug": "basketball-standard",
        "name": "Standard Points",
        "description": "Guards/Forwards/Center/UTIL with turnovers penalty.",
        "config": _config(
            _slots(("G", 2), ("F", 2), ("C", 1), ("UTIL", 1)),
            6,
            [
                _stat("points", "Points", 6, 42),
                _stat("reb", "Rebounds", 0, 18),
                _stat("ast", "Assists", 0, 14),
                _stat("stl", "Steals", 0, 5),
                _stat("blk", "Blocks", 0, 5),
                _stat("tov", "Turnovers", 0, 7),
            ],
            _rules(("points", 1), ("reb", 1.2), ("ast", 1.5), ("stl", 3), ("blk", 3), ("tov", -1)),
            10,
        ),
    },
    {
        "sport": "baseball",
        "slug": "baseball-points",
        "name": "Points",
        "description": "Pitchers + hitters with HR and wins weighted.",
        "config": _config(
            _slots(("SP", 2), ("RP", 1), ("INF", 2), ("OF", 2), ("UTIL", 1)),
            6,
            [
                _stat("runs", "Runs", 0, 6),
                _stat("hits", "Hits", 0, 6),
                _stat("hr", "HR", 0, 3),
                _stat("rbi", "RBI", 0, 6),
                _stat("sb", "SB", 0, 3),
                _stat("so", "SO", 0, 12),
                _stat("wins", "Wins", 0, 2),
                _stat("saves", "Saves", 0, 2),
            ],
            _rules(
                ("runs", 1), ("hits", 1), ("hr", 4), ("rbi", 1),
                ("sb", 2), ("so", 1), ("wins", 5), ("saves", 5),
            ),
            12,
        ),
    },
    {
        "sport": "soccer",
        "slug": "soccer-standard",
        "name": "Standard",
        "description": "Goals/assists/clean sheets with basic keeper saves.",
        "config": _config(
            _slots(("FWD", 2), ("MID", 3), ("DEF", 3), ("GK", 1)),
            5,
            [
                _stat("goals", "Goals", 0, 3),
                _stat("assists", "Assists", 0, 3),
                _stat("shots", "Shots", 0, 8),
                _stat("cs", "Clean Sheets", 0, 1),
                _stat("saves", "Saves", 0, 10),
                _stat("cards", "Cards", 0, 2),
            ],
            _rules(("goals", 5), ("assists", 3), ("shots", 0.6), ("cs", 4), ("saves", 0.35), ("cards", -1)),
            10,
        ),
    },
    {
        "sport": "hockey",
        "slug": "hockey-standard",
        "name": "Standard",
        "description": "Skaters + goalie with shots/hits/blocks.",
        "config": _config(
            _slots(("F", 3), ("D", 2), ("G", 1), ("UTIL", 1)),
            5,
            [
                _stat("goals", "Goals", 0, 4),
                _stat("assists", "Assists", 0, 4),
                _stat("shots", "Shots", 0, 10),
                _stat("hits", "Hits", 0, 10),
                _stat("blocks", "Blocks", 0, 8),
                _stat("wins", "Wins", 0, 1),
                _stat("saves", "Saves", 0, 35),
            ],
            _rules(
                ("goals", 3), ("assists", 2), ("shots", 0.4), ("hits", 0.3),
                ("blocks", 0.4), ("wins", 4), ("saves", 0.15),
            ),
            10,
        ),
    },
    {
        "sport": "gridball",
        "slug": "gridball-lite",
        "name": "Gridball Lite",
        "description": "Config starter: 5 starters, 3 bench, points-based H2H.",
        "config": starter_rule_set_config(),
    },
    {
        "sport": "nebula-league",
        "slug": "nebula-showcase",
        "name": "Nebula Showcase",
        "description": "A more volatile scoring curve.",
        "config": _nebula(),
    },
]


def seed_default_templates(conn: sqlite3.Connection) -> int:
    """
    Insert missing sports and RuleSets. Every config passes validate() before
    it is stored. Returns the number of RuleSets created.
    """
    sport_repo = SportRepository()
    rule_set_repo = RuleSetRepository()

    sport_ids: dict[str, str] = {}
    for sport in SPORTS:
        existing = sport_repo.get_by_slug(conn, sport["slug"])
        if existing is None:
            existing = sport_repo.create(conn, sport["slug"], sport["name"], sport["description"])
        sport_ids[sport["slug"]] = existing.id

    created = 0
    for template in RULE_SETS:
        if rule_set_repo.get_by_slug(conn, template["slug"]) is not None:
            continue
        config = validate(copy.deepcopy(template["config"]))
        rule_set_repo.create(
            conn,
            sport_ids[template["sport"]],
            template["slug"],
            template["name"],
            config.to_json(),
            description=template["description"],
        )
        created += 1
    if created:
        logger.info("Seeded %d rule set template(s)", created)
    return created
