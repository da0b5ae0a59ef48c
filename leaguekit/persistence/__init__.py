"""
Persistence layer for league data.
Read/write interfaces only; no business logic.
"""
from .db import get_connection, init_db, set_db_path, get_db_path, transaction
from .repositories import (
    UserRepository,
    SportRepository,
    RuleSetRepository,
    LeagueRepository,
    LeagueMemberRepository,
    TeamRepository,
    AthleteRepository,
    LineupRepository,
    MatchupRepository,
    MatchupResultRepository,
    AthleteWeekStatRepository,
)

__all__ = [
    "get_connection",
    "init_db",
    "set_db_path",
    "get_db_path",
    "transaction",
    "UserRepository",
    "SportRepository",
    "RuleSetRepository",
    "LeagueRepository",
    "LeagueMemberRepository",
    "TeamRepository",
    "AthleteRepository",
    "LineupRepository",
    "MatchupRepository",
    "MatchupResultRepository",
    "AthleteWeekStatRepository",
]
