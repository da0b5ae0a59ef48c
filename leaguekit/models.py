"""
Data models for the league engine.
Domain objects only. No persistence or API logic.

A RuleSet holds the serialized sport configuration; a League references one
RuleSet and tracks current_week. Teams own athletes; each team has one lineup
per week, and lineup slots are derived from the RuleSet roster section.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


# ---------- Roles ----------
class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class MemberRole(str, Enum):
    COMMISSIONER = "COMMISSIONER"
    MEMBER = "MEMBER"


# ---------- Matchup status ----------
class MatchupStatus(str, Enum):
    """Scheduled until a result is locked in; FINAL afterwards."""
    SCHEDULED = "SCHEDULED"
    FINAL = "FINAL"


# ---------- Lineup lock state (derived from locked_at) ----------
class LineupStatus(str, Enum):
    """OPEN → LOCKED, one-way."""
    OPEN = "OPEN"
    LOCKED = "LOCKED"


# ---------- User ----------
@dataclass
class User:
    id: str
    name: str
    role: str  # UserRole value
    created_at: datetime

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "created_at": self.created_at.isoformat(),
        }


# ---------- Sport ----------
@dataclass
class Sport:
    """A named family of RuleSets (football, basketball, ...)."""
    id: str
    slug: str
    name: str
    description: str | None
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "description": self.description,
            "created_at": self.created_at.isoformat(),
        }


# ---------- RuleSet ----------
@dataclass
class RuleSet:
    """
    Named, versionless configuration. config is the canonical JSON of a
    validated RuleSetConfig; leagues reference it, never copy it.
    """
    id: str
    sport_id: str
    slug: str
    name: str
    description: str | None
    config: str
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "sport_id": self.sport_id,
            "slug": self.slug,
            "name": self.name,
            "description": self.description,
            "config": self.config,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


# ---------- League ----------
@dataclass
class League:
    """current_week is 1-based and clamped to the RuleSet's schedule length."""
    id: str
    name: str
    sport_id: str
    rule_set_id: str
    commissioner_id: str
    current_week: int
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "sport_id": self.sport_id,
            "rule_set_id": self.rule_set_id,
            "commissioner_id": self.commissioner_id,
            "current_week": self.current_week,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class LeagueMember:
    league_id: str
    user_id: str
    role: str  # MemberRole value
    joined_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "league_id": self.league_id,
            "user_id": self.user_id,
            "role": self.role,
            "joined_at": self.joined_at.isoformat(),
        }


# ---------- Team / Athlete ----------
@dataclass
class Team:
    """Team names are unique within a league."""
    id: str
    league_id: str
    owner_id: str
    name: str
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "league_id": self.league_id,
            "owner_id": self.owner_id,
            "name": self.name,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class Athlete:
    """position is the stable roster order used for auto-fill."""
    id: str
    team_id: str
    name: str
    position: int
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "team_id": self.team_id,
            "name": self.name,
            "position": self.position,
            "created_at": self.created_at.isoformat(),
        }


# ---------- Lineup ----------
@dataclass
class LineupSlot:
    id: str
    lineup_id: str
    slot_key: str
    slot_index: int
    athlete_id: str | None = None

    @property
    def is_filled(self) -> bool:
        return self.athlete_id is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "lineup_id": self.lineup_id,
            "slot_key": self.slot_key,
            "slot_index": self.slot_index,
            "athlete_id": self.athlete_id,
        }


@dataclass
class Lineup:
    """
    One per (team, week). Slots are held in canonical order (declaration order,
    then index). Locked once locked_at is set.
    """
    id: str
    team_id: str
    week: int
    locked_at: datetime | None
    created_at: datetime
    slots: list[LineupSlot] = field(default_factory=list)

    @property
    def status(self) -> LineupStatus:
        return LineupStatus.LOCKED if self.locked_at is not None else LineupStatus.OPEN

    @property
    def is_complete(self) -> bool:
        return all(s.is_filled for s in self.slots)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "team_id": self.team_id,
            "week": self.week,
            "status": self.status.value,
            "locked_at": self.locked_at.isoformat() if self.locked_at else None,
            "created_at": self.created_at.isoformat(),
            "slots": [s.to_dict() for s in self.slots],
        }


# ---------- Matchups ----------
@dataclass
class MatchupResult:
    id: str
    matchup_id: str
    home_score: float
    away_score: float
    simulated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "matchup_id": self.matchup_id,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "simulated_at": self.simulated_at.isoformat(),
        }


@dataclass
class Matchup:
    """A scheduled fixture. Immutable except for wholesale regeneration before any result."""
    id: str
    league_id: str
    week: int
    home_team_id: str
    away_team_id: str
    status: str  # MatchupStatus value
    created_at: datetime
    result: MatchupResult | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "id": self.id,
            "league_id": self.league_id,
            "week": self.week,
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "status": self.status,
            "created_at": self.created_at.isoformat(),
        }
        if self.result is not None:
            d["result"] = self.result.to_dict()
        return d


# ---------- Stat lines ----------
@dataclass
class AthleteWeekStat:
    """Cached stat line for one athlete in one league week."""
    id: str
    league_id: str
    week: int
    athlete_id: str
    stats: dict[str, float]
    created_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "league_id": self.league_id,
            "week": self.week,
            "athlete_id": self.athlete_id,
            "stats": dict(self.stats),
            "created_at": self.created_at.isoformat(),
        }
