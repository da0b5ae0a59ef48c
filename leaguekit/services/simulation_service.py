"""
Matchup simulation for a league's current week.

Stat lines are generated once per (league, week, athlete) from the seed
"league:week:athlete" and cached; scoring always reads the cached line. The
result row and FINAL status are written together, and the unique index on
matchup_results.matchup_id decides the winner of a concurrent simulate.
"""
from __future__ import annotations

import logging
import sqlite3
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from leaguekit.persistence.repositories import (
    AthleteRepository,
    AthleteWeekStatRepository,
    LeagueRepository,
    MatchupRepository,
    MatchupResultRepository,
    RuleSetRepository,
    TeamRepository,
)
from leaguekit.rules import (
    RuleSetConfig,
    parse_stored_config,
    score_athletes,
    simulate_athlete_stats,
    stat_seed,
)
from leaguekit.services.errors import FORBIDDEN, INCOMPLETE, NO_MATCHUP, NOT_FOUND, LineupError
from leaguekit.services.lineup_service import LineupService

logger = logging.getLogger(__name__)


@dataclass
class SimulationOutcome:
    matchup_id: str
    week: int
    home_team_id: str
    away_team_id: str
    home_score: float
    away_score: float
    already_final: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "matchup_id": self.matchup_id,
            "week": self.week,
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "already_final": self.already_final,
        }


class SimulationService:
    def __init__(self, lineup_service: LineupService | None = None) -> None:
        self._lineups = lineup_service or LineupService()
        self._league_repo = LeagueRepository()
        self._rule_set_repo = RuleSetRepository()
        self._team_repo = TeamRepository()
        self._athlete_repo = AthleteRepository()
        self._matchup_repo = MatchupRepository()
        self._result_repo = MatchupResultRepository()
        self._stat_repo = AthleteWeekStatRepository()

    def ensure_stat_lines(
        self,
        conn: sqlite3.Connection,
        league_id: str,
        week: int,
        config: RuleSetConfig,
        team_ids: Sequence[str],
    ) -> dict[str, dict[str, float]]:
        """
        Stat lines for every athlete on the given teams (starters and bench).
        Missing lines are generated and inserted; existing ones are never rewritten.
        """
        athlete_ids = [a.id for team_id in team_ids for a in self._athlete_repo.list_by_team(conn, team_id)]
        cached = self._stat_repo.get_many(conn, league_id, week, athlete_ids)
        missing = {
            athlete_id: simulate_athlete_stats(config, stat_seed(league_id, week, athlete_id))
            for athlete_id in athlete_ids
            if athlete_id not in cached
        }
        if not missing:
            return cached
        self._stat_repo.create_many_if_absent(conn, league_id, week, missing)
        # Re-read so a concurrent writer's rows win over ours
        return self._stat_repo.get_many(conn, league_id, week, athlete_ids)

    def simulate_matchup(
        self, conn: sqlite3.Connection, user_id: str | None, league_id: str, team_id: str
    ) -> SimulationOutcome:
        """
        Simulate the current-week matchup of team_id on behalf of its owner.
        A matchup that already has a result is returned as-is.
        """
        team = self._team_repo.get(conn, team_id)
        if team is None or team.league_id != league_id:
            raise LineupError(NOT_FOUND, f"Team not found in league: {team_id}")
        if user_id is None or team.owner_id != user_id:
            raise LineupError(FORBIDDEN, "Only the team owner can simulate")
        league = self._league_repo.get(conn, league_id)
        if league is None:
            raise LineupError(NOT_FOUND, f"League not found: {league_id}")
        rule_set = self._rule_set_repo.get(conn, league.rule_set_id)
        if rule_set is None:
            raise RuntimeError(f"League {league_id} references missing rule set {league.rule_set_id}")
        config = parse_stored_config(rule_set.config)
        week = league.current_week

        matchup = self._matchup_repo.find_for_team_week(conn, league_id, week, team_id)
        if matchup is None:
            raise LineupError(NO_MATCHUP, f"No matchup for week {week}")
        if matchup.result is not None:
            logger.info("Matchup %s already final", matchup.id)
            return SimulationOutcome(
                matchup_id=matchup.id,
                week=matchup.week,
                home_team_id=matchup.home_team_id,
                away_team_id=matchup.away_team_id,
                home_score=matchup.result.home_score,
                away_score=matchup.result.away_score,
                already_final=True,
            )

        home = self._lineups.ensure_lineup(conn, matchup.home_team_id, week, config)
        away = self._lineups.ensure_lineup(conn, matchup.away_team_id, week, config)
        own, opponent = (home, away) if matchup.home_team_id == team_id else (away, home)
        if not own.is_complete:
            raise LineupError(INCOMPLETE, "Fill every lineup slot before simulating")
        if not opponent.is_complete:
            opponent = self._lineups.autofill(conn, opponent, config)
            if own is home:
                away = opponent
            else:
                home = opponent

        stat_lines = self.ensure_stat_lines(
            conn, league_id, week, config, [matchup.home_team_id, matchup.away_team_id]
        )
        home_score = score_athletes(config, [s.athlete_id for s in home.slots], stat_lines)
        away_score = score_athletes(config, [s.athlete_id for s in away.slots], stat_lines)

        result, created = self._result_repo.create_final(conn, matchup.id, home_score, away_score)
        if created:
            logger.info("Simulated matchup %s (week %d): %.2f - %.2f", matchup.id, week, home_score, away_score)
        else:
            logger.info("Matchup %s was finalized concurrently; returning stored result", matchup.id)
        return SimulationOutcome(
            matchup_id=matchup.id,
            week=matchup.week,
            home_team_id=matchup.home_team_id,
            away_team_id=matchup.away_team_id,
            home_score=result.home_score,
            away_score=result.away_score,
            already_final=not created,
        )
