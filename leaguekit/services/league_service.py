"""
League-centric service: creation, team provisioning, schedule and week sequencing.
A league's shape (roster size, season length) is read from its RuleSet on
every call; nothing is copied onto the league.
"""
from __future__ import annotations

import logging
import sqlite3

from leaguekit.models import League, Matchup, MemberRole, Team
from leaguekit.persistence.repositories import (
    LeagueMemberRepository,
    LeagueRepository,
    MatchupRepository,
    RuleSetRepository,
    TeamRepository,
    UserRepository,
)
from leaguekit.rules import RuleSetConfig, parse_stored_config, total_roster_size
from leaguekit.services.errors import (
    DUPLICATE,
    FORBIDDEN,
    INVALID,
    LOCKED,
    NEED_TEAMS,
    NOT_FOUND,
    LeagueError,
    ScheduleError,
)
from leaguekit.services.scheduling import generate_league_schedule, teams_on_bye

logger = logging.getLogger(__name__)


def athlete_names(count: int) -> list[str]:
    return [f"Athlete {i}" for i in range(1, count + 1)]


# ---------- LeagueService ----------


class LeagueService:
    """
    Domain logic for leagues: membership, teams, fixtures, current week.
    Persistence is delegated to repositories.
    """

    def __init__(self) -> None:
        self._user_repo = UserRepository()
        self._rule_set_repo = RuleSetRepository()
        self._league_repo = LeagueRepository()
        self._member_repo = LeagueMemberRepository()
        self._team_repo = TeamRepository()
        self._matchup_repo = MatchupRepository()

    def get_league(self, conn: sqlite3.Connection, league_id: str) -> League:
        league = self._league_repo.get(conn, league_id)
        if league is None:
            raise LeagueError(NOT_FOUND, f"League not found: {league_id}")
        return league

    def load_config(self, conn: sqlite3.Connection, league_id: str) -> RuleSetConfig:
        """The league's RuleSet, validated. RuntimeError if the stored config is corrupt."""
        league = self.get_league(conn, league_id)
        rule_set = self._rule_set_repo.get(conn, league.rule_set_id)
        if rule_set is None:
            raise RuntimeError(f"League {league_id} references missing rule set {league.rule_set_id}")
        return parse_stored_config(rule_set.config)

    def _require_user(self, conn: sqlite3.Connection, user_id: str | None) -> str:
        if not user_id or self._user_repo.get(conn, user_id) is None:
            raise LeagueError(FORBIDDEN, "Unknown user")
        return user_id

    def _require_commissioner(self, conn: sqlite3.Connection, league: League, user_id: str | None) -> None:
        if user_id is None or league.commissioner_id != user_id:
            raise LeagueError(FORBIDDEN, "Commissioner only")

    def create_league(self, conn: sqlite3.Connection, user_id: str | None, name: str, rule_set_id: str) -> League:
        """The creator becomes commissioner; current_week starts at 1."""
        user_id = self._require_user(conn, user_id)
        name = name.strip()
        if not name:
            raise LeagueError(INVALID, "League name is required")
        rule_set = self._rule_set_repo.get(conn, rule_set_id)
        if rule_set is None:
            raise LeagueError(NOT_FOUND, f"RuleSet not found: {rule_set_id}")
        # Reject a league on a config that no longer validates
        parse_stored_config(rule_set.config)
        league = self._league_repo.create(conn, name, rule_set.sport_id, rule_set.id, user_id)
        self._member_repo.ensure(conn, league.id, user_id, MemberRole.COMMISSIONER)
        logger.info("Created league %s on rule set %s", league.id, rule_set.slug)
        return league

    def create_team(self, conn: sqlite3.Connection, user_id: str | None, league_id: str, name: str) -> Team:
        """
        Creates the team with total_roster_size athletes. The first time the
        league reaches 2 teams with no fixtures, the schedule is generated.
        """
        user_id = self._require_user(conn, user_id)
        league = self.get_league(conn, league_id)
        config = self.load_config(conn, league_id)
        name = name.strip()
        if not name:
            raise LeagueError(INVALID, "Team name is required")
        if self._team_repo.get_by_name(conn, league_id, name) is not None:
            raise LeagueError(DUPLICATE, f"Team name already taken: {name}")
        try:
            team = self._team_repo.create(
                conn, league_id, user_id, name, athlete_names(total_roster_size(config))
            )
        except sqlite3.IntegrityError:
            raise LeagueError(DUPLICATE, f"Team name already taken: {name}") from None
        self._member_repo.ensure(conn, league_id, user_id, MemberRole.MEMBER)

        teams = self._team_repo.list_by_league(conn, league_id)
        if len(teams) >= 2 and self._matchup_repo.count(conn, league_id) == 0:
            fixtures = generate_league_schedule([t.id for t in teams], config.schedule.weeks)
            self._matchup_repo.create_many(conn, league.id, fixtures)
            logger.info("Generated schedule for league %s: %d matchups over %d weeks",
                        league_id, len(fixtures), config.schedule.weeks)
        return team

    def regenerate_schedule(self, conn: sqlite3.Connection, user_id: str | None, league_id: str) -> list[Matchup]:
        """
        Replace all fixtures from the current team list. Refused once any
        matchup is FINAL.
        """
        league = self.get_league(conn, league_id)
        self._require_commissioner(conn, league, user_id)
        config = self.load_config(conn, league_id)
        teams = self._team_repo.list_by_league(conn, league_id)
        if len(teams) < 2:
            raise ScheduleError(NEED_TEAMS, "At least 2 teams are required")
        fixtures = generate_league_schedule([t.id for t in teams], config.schedule.weeks)
        if not self._matchup_repo.replace_for_league(conn, league_id, fixtures):
            raise ScheduleError(LOCKED, "Schedule is locked once a matchup is final")
        logger.info("Regenerated schedule for league %s: %d matchups", league_id, len(fixtures))
        return self._matchup_repo.list_by_league(conn, league_id)

    def advance_week(self, conn: sqlite3.Connection, user_id: str | None, league_id: str) -> int:
        """current_week + 1, clamped to schedule.weeks. Returns the new week."""
        league = self.get_league(conn, league_id)
        self._require_commissioner(conn, league, user_id)
        config = self.load_config(conn, league_id)
        weeks = config.schedule.weeks
        next_week = max(1, min(league.current_week + 1, weeks))
        if next_week != league.current_week:
            self._league_repo.update_current_week(conn, league_id, next_week)
            logger.info("League %s advanced to week %d", league_id, next_week)
        return next_week

    def list_teams(self, conn: sqlite3.Connection, league_id: str) -> list[Team]:
        self.get_league(conn, league_id)
        return self._team_repo.list_by_league(conn, league_id)

    def list_schedule(self, conn: sqlite3.Connection, league_id: str, week: int | None = None) -> list[Matchup]:
        self.get_league(conn, league_id)
        return self._matchup_repo.list_by_league(conn, league_id, week)

    def list_byes(self, conn: sqlite3.Connection, league_id: str, week: int) -> list[Team]:
        """Teams sitting out the given week (odd team count, or joined after the schedule was built)."""
        teams = {t.id: t for t in self.list_teams(conn, league_id)}
        fixtures = self._matchup_repo.list_by_league(conn, league_id, week)
        return [teams[team_id] for team_id in teams_on_bye(list(teams), fixtures, week)]
