"""
Weekly lineups: provisioning, slot assignment, locking and opponent auto-fill.

Provisioning is set reconciliation: the desired slot set comes from
derive_starter_slots(config); only the difference is inserted, and the unique
(lineup_id, slot_key, slot_index) index makes retries harmless.

Lock state machine: OPEN -> LOCKED, one-way. A locked lineup rejects every
slot mutation.
"""
from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone

from leaguekit.models import Athlete, Lineup, LineupSlot
from leaguekit.persistence.repositories import AthleteRepository, LineupRepository, TeamRepository
from leaguekit.rules import RuleSetConfig, derive_starter_slots, slot_order
from leaguekit.services.errors import (
    BAD_ATHLETE,
    DUPLICATE,
    FORBIDDEN,
    INCOMPLETE,
    LOCKED,
    NOT_FOUND,
    LineupError,
)

logger = logging.getLogger(__name__)


def sort_slots(config: RuleSetConfig, slots: list[LineupSlot]) -> list[LineupSlot]:
    """Canonical order; slots the config no longer declares go last."""
    order = slot_order(config)
    tail = len(order)
    return sorted(slots, key=lambda s: (order.get((s.slot_key, s.slot_index), tail), s.slot_key, s.slot_index))


def plan_autofill(slots: list[LineupSlot], roster: list[Athlete]) -> list[tuple[str, str]]:
    """
    Pair empty slots with unused roster athletes, both in stable order.
    Slots beyond the available pool stay empty; no athlete is used twice.
    """
    used = {s.athlete_id for s in slots if s.athlete_id is not None}
    available = [a.id for a in roster if a.id not in used]
    empty = [s for s in slots if s.athlete_id is None]
    return [(slot.id, athlete_id) for slot, athlete_id in zip(empty, available)]


class LineupService:
    def __init__(self) -> None:
        self._lineup_repo = LineupRepository()
        self._team_repo = TeamRepository()
        self._athlete_repo = AthleteRepository()

    def ensure_lineup(self, conn: sqlite3.Connection, team_id: str, week: int, config: RuleSetConfig) -> Lineup:
        """
        Idempotent: creates the (team, week) lineup and any missing slots.
        A locked lineup keeps the slots it was locked with.
        """
        lineup = self._lineup_repo.get_or_create(conn, team_id, week)
        if lineup.locked_at is not None:
            lineup.slots = sort_slots(config, lineup.slots)
            return lineup
        existing = {(s.slot_key, s.slot_index) for s in lineup.slots}
        missing = [s.identity for s in derive_starter_slots(config) if s.identity not in existing]
        if missing:
            added = self._lineup_repo.add_slots(conn, lineup.id, missing)
            logger.debug("Lineup %s (team %s, week %d): added %d slot(s)", lineup.id, team_id, week, added)
            lineup.slots = self._lineup_repo.list_slots(conn, lineup.id)
        lineup.slots = sort_slots(config, lineup.slots)
        return lineup

    def get_lineup(self, conn: sqlite3.Connection, lineup_id: str, config: RuleSetConfig | None = None) -> Lineup:
        lineup = self._lineup_repo.get(conn, lineup_id)
        if lineup is None:
            raise LineupError(NOT_FOUND, f"Lineup not found: {lineup_id}")
        if config is not None:
            lineup.slots = sort_slots(config, lineup.slots)
        return lineup

    def _require_owner(self, conn: sqlite3.Connection, team_id: str, user_id: str | None) -> None:
        team = self._team_repo.get(conn, team_id)
        if team is None:
            raise LineupError(NOT_FOUND, f"Team not found: {team_id}")
        if user_id is None or team.owner_id != user_id:
            raise LineupError(FORBIDDEN, "Only the team owner can change this lineup")

    def update_slot(
        self,
        conn: sqlite3.Connection,
        user_id: str | None,
        slot_id: str,
        athlete_id: str | None,
    ) -> LineupSlot:
        """Assign an athlete to a slot, or clear it with athlete_id=None."""
        slot = self._lineup_repo.get_slot(conn, slot_id)
        if slot is None:
            raise LineupError(NOT_FOUND, f"Lineup slot not found: {slot_id}")
        lineup = self._lineup_repo.get(conn, slot.lineup_id)
        if lineup is None:
            raise LineupError(NOT_FOUND, f"Lineup not found: {slot.lineup_id}")
        self._require_owner(conn, lineup.team_id, user_id)
        if lineup.locked_at is not None:
            raise LineupError(LOCKED, "Lineup is locked")

        if athlete_id is not None:
            athlete = self._athlete_repo.get(conn, athlete_id)
            if athlete is None or athlete.team_id != lineup.team_id:
                raise LineupError(BAD_ATHLETE, "Athlete is not on this team")
            if self._lineup_repo.find_slot_with_athlete(conn, lineup.id, athlete_id, exclude_slot_id=slot_id):
                raise LineupError(DUPLICATE, "Athlete already fills another slot in this lineup")

        if not self._lineup_repo.set_slot_athlete(conn, slot_id, athlete_id):
            # Locked between the check and the write
            raise LineupError(LOCKED, "Lineup is locked")
        slot.athlete_id = athlete_id
        return slot

    def lock_lineup(self, conn: sqlite3.Connection, user_id: str | None, lineup_id: str) -> datetime:
        """OPEN -> LOCKED. Every slot must hold an athlete."""
        lineup = self._lineup_repo.get(conn, lineup_id)
        if lineup is None:
            raise LineupError(NOT_FOUND, f"Lineup not found: {lineup_id}")
        self._require_owner(conn, lineup.team_id, user_id)
        if lineup.locked_at is not None:
            raise LineupError(LOCKED, "Lineup is already locked")
        missing = sum(1 for s in lineup.slots if s.athlete_id is None)
        if missing:
            raise LineupError(INCOMPLETE, f"{missing} slot(s) still empty")

        locked_at = datetime.now(timezone.utc)
        if not self._lineup_repo.lock(conn, lineup_id, locked_at.isoformat()):
            raise LineupError(LOCKED, "Lineup is already locked")
        logger.info("Locked lineup %s (team %s, week %d)", lineup.id, lineup.team_id, lineup.week)
        return locked_at

    def autofill(self, conn: sqlite3.Connection, lineup: Lineup, config: RuleSetConfig) -> Lineup:
        """Fill empty slots from the team's unused athletes (roster order). Locked lineups are returned as-is."""
        if lineup.locked_at is not None:
            return lineup
        roster = self._athlete_repo.list_by_team(conn, lineup.team_id)
        assignments = plan_autofill(lineup.slots, roster)
        if assignments:
            self._lineup_repo.fill_slots(conn, assignments)
            logger.info("Auto-filled %d slot(s) in lineup %s", len(assignments), lineup.id)
        return self.get_lineup(conn, lineup.id, config)
