"""
Repository interfaces for league data.
No business logic, only read/write operations. Idempotent writes lean on
unique indexes (INSERT OR IGNORE, then read back).
"""
from __future__ import annotations

import json
import sqlite3
import uuid
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import Any

from leaguekit.models import (
    Athlete,
    AthleteWeekStat,
    League,
    LeagueMember,
    Lineup,
    LineupSlot,
    Matchup,
    MatchupResult,
    MatchupStatus,
    MemberRole,
    RuleSet,
    Sport,
    Team,
    User,
    UserRole,
)

from .db import transaction


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _parse_datetime(s: str | None) -> datetime:
    if s is None:
        raise ValueError("expected datetime string")
    return datetime.fromisoformat(s.replace("Z", "+00:00"))


def _placeholders(n: int) -> str:
    return ", ".join("?" for _ in range(n))


# ---------- UserRepository ----------


class UserRepository:
    """CRUD for users. Identity only; no credentials are stored here."""

    def create(self, conn: sqlite3.Connection, name: str, role: str = UserRole.USER, id: str | None = None) -> User:
        uid = id or str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            "INSERT INTO users (id, name, role, created_at) VALUES (?, ?, ?, ?)",
            (uid, name, UserRole(role).value, now),
        )
        conn.commit()
        return User(id=uid, name=name, role=UserRole(role).value, created_at=_parse_datetime(now))

    def get(self, conn: sqlite3.Connection, user_id: str) -> User | None:
        row = conn.execute(
            "SELECT id, name, role, created_at FROM users WHERE id = ?", (user_id,)
        ).fetchone()
        if row is None:
            return None
        return User(id=row["id"], name=row["name"], role=row["role"], created_at=_parse_datetime(row["created_at"]))


# ---------- SportRepository ----------


class SportRepository:
    """CRUD for sports. slug is globally unique (IntegrityError on conflict)."""

    def create(
        self,
        conn: sqlite3.Connection,
        slug: str,
        name: str,
        description: str | None = None,
        id: str | None = None,
    ) -> Sport:
        sid = id or str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            "INSERT INTO sports (id, slug, name, description, created_at) VALUES (?, ?, ?, ?, ?)",
            (sid, slug, name, description, now),
        )
        conn.commit()
        return Sport(id=sid, slug=slug, name=name, description=description, created_at=_parse_datetime(now))

    def _from_row(self, row: sqlite3.Row) -> Sport:
        return Sport(
            id=row["id"],
            slug=row["slug"],
            name=row["name"],
            description=row["description"],
            created_at=_parse_datetime(row["created_at"]),
        )

    def get(self, conn: sqlite3.Connection, sport_id: str) -> Sport | None:
        row = conn.execute("SELECT * FROM sports WHERE id = ?", (sport_id,)).fetchone()
        return self._from_row(row) if row else None

    def get_by_slug(self, conn: sqlite3.Connection, slug: str) -> Sport | None:
        row = conn.execute("SELECT * FROM sports WHERE slug = ?", (slug,)).fetchone()
        return self._from_row(row) if row else None

    def list_all(self, conn: sqlite3.Connection) -> list[Sport]:
        rows = conn.execute("SELECT * FROM sports ORDER BY name").fetchall()
        return [self._from_row(r) for r in rows]


# ---------- RuleSetRepository ----------


class RuleSetRepository:
    """CRUD for rule sets. Stores config text as given; callers validate first."""

    def create(
        self,
        conn: sqlite3.Connection,
        sport_id: str,
        slug: str,
        name: str,
        config_json: str,
        description: str | None = None,
        id: str | None = None,
    ) -> RuleSet:
        rid = id or str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            "INSERT INTO rule_sets (id, sport_id, slug, name, description, config, created_at, updated_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (rid, sport_id, slug, name, description, config_json, now, now),
        )
        conn.commit()
        return RuleSet(
            id=rid, sport_id=sport_id, slug=slug, name=name, description=description,
            config=config_json, created_at=_parse_datetime(now), updated_at=_parse_datetime(now),
        )

    def _from_row(self, row: sqlite3.Row) -> RuleSet:
        return RuleSet(
            id=row["id"],
            sport_id=row["sport_id"],
            slug=row["slug"],
            name=row["name"],
            description=row["description"],
            config=row["config"],
            created_at=_parse_datetime(row["created_at"]),
            updated_at=_parse_datetime(row["updated_at"]),
        )

    def get(self, conn: sqlite3.Connection, rule_set_id: str) -> RuleSet | None:
        row = conn.execute("SELECT * FROM rule_sets WHERE id = ?", (rule_set_id,)).fetchone()
        return self._from_row(row) if row else None

    def get_by_slug(self, conn: sqlite3.Connection, slug: str) -> RuleSet | None:
        row = conn.execute("SELECT * FROM rule_sets WHERE slug = ?", (slug,)).fetchone()
        return self._from_row(row) if row else None

    def list_all(self, conn: sqlite3.Connection, sport_id: str | None = None) -> list[RuleSet]:
        if sport_id is None:
            rows = conn.execute("SELECT * FROM rule_sets ORDER BY slug").fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM rule_sets WHERE sport_id = ? ORDER BY slug", (sport_id,)
            ).fetchall()
        return [self._from_row(r) for r in rows]

    def update(
        self,
        conn: sqlite3.Connection,
        rule_set_id: str,
        name: str,
        description: str | None,
        config_json: str,
    ) -> None:
        conn.execute(
            "UPDATE rule_sets SET name = ?, description = ?, config = ?, updated_at = ? WHERE id = ?",
            (name, description, config_json, _now_iso(), rule_set_id),
        )
        conn.commit()

    def count_leagues(self, conn: sqlite3.Connection, rule_set_id: str) -> int:
        row = conn.execute(
            "SELECT COUNT(*) FROM leagues WHERE rule_set_id = ?", (rule_set_id,)
        ).fetchone()
        return int(row[0])


# ---------- LeagueRepository ----------


class LeagueRepository:
    """CRUD for leagues. No business logic."""

    def create(
        self,
        conn: sqlite3.Connection,
        name: str,
        sport_id: str,
        rule_set_id: str,
        commissioner_id: str,
        id: str | None = None,
    ) -> League:
        lid = id or str(uuid.uuid4())
        now = _now_iso()
        conn.execute(
            "INSERT INTO leagues (id, name, sport_id, rule_set_id, commissioner_id, current_week, created_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?)",
            (lid, name, sport_id, rule_set_id, commissioner_id, 1, now),
        )
        conn.commit()
        return League(
            id=lid, name=name, sport_id=sport_id, rule_set_id=rule_set_id,
            commissioner_id=commissioner_id, current_week=1, created_at=_parse_datetime(now),
        )

    def _from_row(self, row: sqlite3.Row) -> League:
        return League(
            id=row["id"],
            name=row["name"],
            sport_id=row["sport_id"],
            rule_set_id=row["rule_set_id"],
            commissioner_id=row["commissioner_id"],
            current_week=row["current_week"],
            created_at=_parse_datetime(row["created_at"]),
        )

    def get(self, conn: sqlite3.Connection, league_id: str) -> League | None:
        row = conn.execute("SELECT * FROM leagues WHERE id = ?", (league_id,)).fetchone()
        return self._from_row(row) if row else None

    def list_all(self, conn: sqlite3.Connection) -> list[League]:
        rows = conn.execute("SELECT * FROM leagues ORDER BY created_at DESC").fetchall()
        return [self._from_row(r) for r in rows]

    def update_current_week(self, conn: sqlite3.Connection, league_id: str, current_week: int) -> None:
        conn.execute("UPDATE leagues SET current_week = ? WHERE id = ?", (current_week, league_id))
        conn.commit()


# ---------- LeagueMemberRepository ----------


class LeagueMemberRepository:
    """league_members: one row per (league, user)."""

    def ensure(self, conn: sqlite3.Connection, league_id: str, user_id: str, role: str = MemberRole.MEMBER) -> LeagueMember:
        """Insert membership if missing; an existing role is left unchanged."""
        conn.execute(
            "INSERT OR IGNORE INTO league_members (league_id, user_id, role, joined_at) VALUES (?, ?, ?, ?)",
            (league_id, user_id, MemberRole(role).value, _now_iso()),
        )
        conn.commit()
        member = self.get(conn, league_id, user_id)
        assert member is not None
        return member

    def get(self, conn: sqlite3.Connection, league_id: str, user_id: str) -> LeagueMember | None:
        row = conn.execute(
            "SELECT league_id, user_id, role, joined_at FROM league_members WHERE league_id = ? AND user_id = ?",
            (league_id, user_id),
        ).fetchone()
        if row is None:
            return None
        return LeagueMember(
            league_id=row["league_id"], user_id=row["user_id"], role=row["role"],
            joined_at=_parse_datetime(row["joined_at"]),
        )

    def list_by_league(self, conn: sqlite3.Connection, league_id: str) -> list[LeagueMember]:
        rows = conn.execute(
            "SELECT league_id, user_id, role, joined_at FROM league_members WHERE league_id = ? ORDER BY joined_at, rowid",
            (league_id,),
        ).fetchall()
        return [
            LeagueMember(
                league_id=r["league_id"], user_id=r["user_id"], role=r["role"],
                joined_at=_parse_datetime(r["joined_at"]),
            )
            for r in rows
        ]


# ---------- TeamRepository ----------


class TeamRepository:
    """CRUD for teams. Athletes are created together with their team."""

    def create(
        self,
        conn: sqlite3.Connection,
        league_id: str,
        owner_id: str,
        name: str,
        athlete_names: Sequence[str] = (),
        id: str | None = None,
    ) -> Team:
        """Raises sqlite3.IntegrityError when the name is taken in this league."""
        tid = id or str(uuid.uuid4())
        now = _now_iso()
        with transaction(conn):
            conn.execute(
                "INSERT INTO teams (id, league_id, owner_id, name, created_at) VALUES (?, ?, ?, ?, ?)",
                (tid, league_id, owner_id, name, now),
            )
            conn.executemany(
                "INSERT INTO athletes (id, team_id, name, position, created_at) VALUES (?, ?, ?, ?, ?)",
                [(str(uuid.uuid4()), tid, athlete_name, pos, now) for pos, athlete_name in enumerate(athlete_names)],
            )
        return Team(id=tid, league_id=league_id, owner_id=owner_id, name=name, created_at=_parse_datetime(now))

    def _from_row(self, row: sqlite3.Row) -> Team:
        return Team(
            id=row["id"],
            league_id=row["league_id"],
            owner_id=row["owner_id"],
            name=row["name"],
            created_at=_parse_datetime(row["created_at"]),
        )

    def get(self, conn: sqlite3.Connection, team_id: str) -> Team | None:
        row = conn.execute("SELECT * FROM teams WHERE id = ?", (team_id,)).fetchone()
        return self._from_row(row) if row else None

    def get_by_name(self, conn: sqlite3.Connection, league_id: str, name: str) -> Team | None:
        row = conn.execute(
            "SELECT * FROM teams WHERE league_id = ? AND name = ?", (league_id, name)
        ).fetchone()
        return self._from_row(row) if row else None

    def list_by_league(self, conn: sqlite3.Connection, league_id: str) -> list[Team]:
        """Creation order; schedule pairing depends on it."""
        rows = conn.execute(
            "SELECT * FROM teams WHERE league_id = ? ORDER BY created_at, rowid", (league_id,)
        ).fetchall()
        return [self._from_row(r) for r in rows]


# ---------- AthleteRepository ----------


class AthleteRepository:
    """Read access to athletes; roster order is (position, rowid)."""

    def _from_row(self, row: sqlite3.Row) -> Athlete:
        return Athlete(
            id=row["id"],
            team_id=row["team_id"],
            name=row["name"],
            position=row["position"],
            created_at=_parse_datetime(row["created_at"]),
        )

    def get(self, conn: sqlite3.Connection, athlete_id: str) -> Athlete | None:
        row = conn.execute("SELECT * FROM athletes WHERE id = ?", (athlete_id,)).fetchone()
        return self._from_row(row) if row else None

    def list_by_team(self, conn: sqlite3.Connection, team_id: str) -> list[Athlete]:
        rows = conn.execute(
            "SELECT * FROM athletes WHERE team_id = ? ORDER BY position, rowid", (team_id,)
        ).fetchall()
        return [self._from_row(r) for r in rows]

    def list_by_league(self, conn: sqlite3.Connection, league_id: str) -> list[Athlete]:
        rows = conn.execute(
            "SELECT a.* FROM athletes a JOIN teams t ON t.id = a.team_id"
            " WHERE t.league_id = ? ORDER BY t.created_at, t.rowid, a.position, a.rowid",
            (league_id,),
        ).fetchall()
        return [self._from_row(r) for r in rows]


# ---------- LineupRepository ----------


class LineupRepository:
    """Lineups keyed by (team_id, week); slots keyed by (lineup_id, slot_key, slot_index)."""

    def _slot_from_row(self, row: sqlite3.Row) -> LineupSlot:
        return LineupSlot(
            id=row["id"],
            lineup_id=row["lineup_id"],
            slot_key=row["slot_key"],
            slot_index=row["slot_index"],
            athlete_id=row["athlete_id"],
        )

    def _from_row(self, conn: sqlite3.Connection, row: sqlite3.Row) -> Lineup:
        return Lineup(
            id=row["id"],
            team_id=row["team_id"],
            week=row["week"],
            locked_at=_parse_datetime(row["locked_at"]) if row["locked_at"] else None,
            created_at=_parse_datetime(row["created_at"]),
            slots=self.list_slots(conn, row["id"]),
        )

    def get(self, conn: sqlite3.Connection, lineup_id: str) -> Lineup | None:
        row = conn.execute("SELECT * FROM lineups WHERE id = ?", (lineup_id,)).fetchone()
        return self._from_row(conn, row) if row else None

    def get_by_team_week(self, conn: sqlite3.Connection, team_id: str, week: int) -> Lineup | None:
        row = conn.execute(
            "SELECT * FROM lineups WHERE team_id = ? AND week = ?", (team_id, week)
        ).fetchone()
        return self._from_row(conn, row) if row else None

    def get_or_create(self, conn: sqlite3.Connection, team_id: str, week: int) -> Lineup:
        conn.execute(
            "INSERT OR IGNORE INTO lineups (id, team_id, week, locked_at, created_at) VALUES (?, ?, ?, NULL, ?)",
            (str(uuid.uuid4()), team_id, week, _now_iso()),
        )
        conn.commit()
        lineup = self.get_by_team_week(conn, team_id, week)
        assert lineup is not None
        return lineup

    def list_slots(self, conn: sqlite3.Connection, lineup_id: str) -> list[LineupSlot]:
        rows = conn.execute(
            "SELECT * FROM lineup_slots WHERE lineup_id = ? ORDER BY rowid", (lineup_id,)
        ).fetchall()
        return [self._slot_from_row(r) for r in rows]

    def add_slots(self, conn: sqlite3.Connection, lineup_id: str, identities: Iterable[tuple[str, int]]) -> int:
        """
        Insert missing (slot_key, slot_index) rows; existing ones are ignored.
        Nothing is added once the lineup is locked. Returns rows added.
        """
        before = conn.total_changes
        with transaction(conn):
            conn.executemany(
                "INSERT OR IGNORE INTO lineup_slots (id, lineup_id, slot_key, slot_index, athlete_id)"
                " SELECT ?, ?, ?, ?, NULL WHERE EXISTS (SELECT 1 FROM lineups WHERE id = ? AND locked_at IS NULL)",
                [(str(uuid.uuid4()), lineup_id, key, idx, lineup_id) for key, idx in identities],
            )
        return conn.total_changes - before

    def get_slot(self, conn: sqlite3.Connection, slot_id: str) -> LineupSlot | None:
        row = conn.execute("SELECT * FROM lineup_slots WHERE id = ?", (slot_id,)).fetchone()
        return self._slot_from_row(row) if row else None

    def find_slot_with_athlete(
        self, conn: sqlite3.Connection, lineup_id: str, athlete_id: str, exclude_slot_id: str | None = None
    ) -> LineupSlot | None:
        row = conn.execute(
            "SELECT * FROM lineup_slots WHERE lineup_id = ? AND athlete_id = ? AND id IS NOT ?",
            (lineup_id, athlete_id, exclude_slot_id),
        ).fetchone()
        return self._slot_from_row(row) if row else None

    def set_slot_athlete(self, conn: sqlite3.Connection, slot_id: str, athlete_id: str | None) -> bool:
        """Assign only while the owning lineup is unlocked. False if the lineup was locked."""
        cur = conn.execute(
            "UPDATE lineup_slots SET athlete_id = ? WHERE id = ?"
            " AND lineup_id IN (SELECT id FROM lineups WHERE locked_at IS NULL)",
            (athlete_id, slot_id),
        )
        conn.commit()
        return cur.rowcount == 1

    def fill_slots(self, conn: sqlite3.Connection, assignments: Sequence[tuple[str, str]]) -> None:
        """Assign (slot_id, athlete_id) pairs into still-empty slots of unlocked lineups, in one transaction."""
        with transaction(conn):
            conn.executemany(
                "UPDATE lineup_slots SET athlete_id = ? WHERE id = ? AND athlete_id IS NULL"
                " AND lineup_id IN (SELECT id FROM lineups WHERE locked_at IS NULL)",
                [(athlete_id, slot_id) for slot_id, athlete_id in assignments],
            )

    def lock(self, conn: sqlite3.Connection, lineup_id: str, locked_at_iso: str) -> bool:
        """OPEN -> LOCKED. False if it was already locked."""
        cur = conn.execute(
            "UPDATE lineups SET locked_at = ? WHERE id = ? AND locked_at IS NULL",
            (locked_at_iso, lineup_id),
        )
        conn.commit()
        return cur.rowcount == 1


# ---------- MatchupRepository ----------


class MatchupRepository:
    """Fixtures and their results. Listing order: week, then generation order."""

    _SELECT = (
        "SELECT m.*, r.id AS result_id, r.home_score, r.away_score, r.simulated_at"
        " FROM matchups m LEFT JOIN matchup_results r ON r.matchup_id = m.id"
    )

    def _from_row(self, row: sqlite3.Row) -> Matchup:
        result = None
        if row["result_id"] is not None:
            result = MatchupResult(
                id=row["result_id"],
                matchup_id=row["id"],
                home_score=row["home_score"],
                away_score=row["away_score"],
                simulated_at=_parse_datetime(row["simulated_at"]),
            )
        return Matchup(
            id=row["id"],
            league_id=row["league_id"],
            week=row["week"],
            home_team_id=row["home_team_id"],
            away_team_id=row["away_team_id"],
            status=row["status"],
            created_at=_parse_datetime(row["created_at"]),
            result=result,
        )

    def _insert_fixtures(self, conn: sqlite3.Connection, league_id: str, fixtures: Sequence[dict[str, Any]]) -> None:
        now = _now_iso()
        conn.executemany(
            "INSERT INTO matchups (id, league_id, week, home_team_id, away_team_id, status, seq, created_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            [
                (
                    str(uuid.uuid4()), league_id, f["week"], f["home_team_id"], f["away_team_id"],
                    MatchupStatus.SCHEDULED.value, seq, now,
                )
                for seq, f in enumerate(fixtures)
            ],
        )

    def create_many(self, conn: sqlite3.Connection, league_id: str, fixtures: Sequence[dict[str, Any]]) -> None:
        with transaction(conn):
            self._insert_fixtures(conn, league_id, fixtures)

    def replace_for_league(self, conn: sqlite3.Connection, league_id: str, fixtures: Sequence[dict[str, Any]]) -> bool:
        """
        Swap the league's fixtures for a new list atomically.
        Returns False, changing nothing, once any matchup is final or has a result.
        """
        with transaction(conn):
            # Write lock first so no result can land between the check and the delete
            conn.execute("BEGIN IMMEDIATE")
            if self.count_final(conn, league_id):
                return False
            conn.execute("DELETE FROM matchups WHERE league_id = ?", (league_id,))
            self._insert_fixtures(conn, league_id, fixtures)
        return True

    def get(self, conn: sqlite3.Connection, matchup_id: str) -> Matchup | None:
        row = conn.execute(f"{self._SELECT} WHERE m.id = ?", (matchup_id,)).fetchone()
        return self._from_row(row) if row else None

    def list_by_league(self, conn: sqlite3.Connection, league_id: str, week: int | None = None) -> list[Matchup]:
        if week is None:
            rows = conn.execute(
                f"{self._SELECT} WHERE m.league_id = ? ORDER BY m.week, m.seq", (league_id,)
            ).fetchall()
        else:
            rows = conn.execute(
                f"{self._SELECT} WHERE m.league_id = ? AND m.week = ? ORDER BY m.seq", (league_id, week)
            ).fetchall()
        return [self._from_row(r) for r in rows]

    def find_for_team_week(self, conn: sqlite3.Connection, league_id: str, week: int, team_id: str) -> Matchup | None:
        row = conn.execute(
            f"{self._SELECT} WHERE m.league_id = ? AND m.week = ? AND (m.home_team_id = ? OR m.away_team_id = ?)"
            " ORDER BY m.seq LIMIT 1",
            (league_id, week, team_id, team_id),
        ).fetchone()
        return self._from_row(row) if row else None

    def count(self, conn: sqlite3.Connection, league_id: str) -> int:
        row = conn.execute("SELECT COUNT(*) FROM matchups WHERE league_id = ?", (league_id,)).fetchone()
        return int(row[0])

    def count_final(self, conn: sqlite3.Connection, league_id: str) -> int:
        """Matchups that are FINAL or already carry a result."""
        row = conn.execute(
            "SELECT COUNT(*) FROM matchups m WHERE m.league_id = ? AND (m.status = ?"
            " OR EXISTS (SELECT 1 FROM matchup_results r WHERE r.matchup_id = m.id))",
            (league_id, MatchupStatus.FINAL.value),
        ).fetchone()
        return int(row[0])


# ---------- MatchupResultRepository ----------


class MatchupResultRepository:
    """At most one result per matchup (unique index on matchup_id)."""

    def _from_row(self, row: sqlite3.Row) -> MatchupResult:
        return MatchupResult(
            id=row["id"],
            matchup_id=row["matchup_id"],
            home_score=row["home_score"],
            away_score=row["away_score"],
            simulated_at=_parse_datetime(row["simulated_at"]),
        )

    def get_by_matchup(self, conn: sqlite3.Connection, matchup_id: str) -> MatchupResult | None:
        row = conn.execute(
            "SELECT * FROM matchup_results WHERE matchup_id = ?", (matchup_id,)
        ).fetchone()
        return self._from_row(row) if row else None

    def create_final(
        self, conn: sqlite3.Connection, matchup_id: str, home_score: float, away_score: float
    ) -> tuple[MatchupResult, bool]:
        """
        Insert the result and mark the matchup FINAL in one transaction.
        Returns (result, created). When another writer got there first the
        stored result is returned with created=False.
        """
        with transaction(conn):
            cur = conn.execute(
                "INSERT OR IGNORE INTO matchup_results (id, matchup_id, home_score, away_score, simulated_at)"
                " VALUES (?, ?, ?, ?, ?)",
                (str(uuid.uuid4()), matchup_id, home_score, away_score, _now_iso()),
            )
            created = cur.rowcount == 1
            if created:
                conn.execute(
                    "UPDATE matchups SET status = ? WHERE id = ?", (MatchupStatus.FINAL.value, matchup_id)
                )
        result = self.get_by_matchup(conn, matchup_id)
        assert result is not None
        return result, created


# ---------- AthleteWeekStatRepository ----------


class AthleteWeekStatRepository:
    """Cached stat lines, one per (league, week, athlete)."""

    def _from_row(self, row: sqlite3.Row) -> AthleteWeekStat:
        return AthleteWeekStat(
            id=row["id"],
            league_id=row["league_id"],
            week=row["week"],
            athlete_id=row["athlete_id"],
            stats=json.loads(row["stats"]),
            created_at=_parse_datetime(row["created_at"]),
        )

    def get_many(
        self, conn: sqlite3.Connection, league_id: str, week: int, athlete_ids: Sequence[str]
    ) -> dict[str, dict[str, float]]:
        if not athlete_ids:
            return {}
        rows = conn.execute(
            f"SELECT * FROM athlete_week_stats WHERE league_id = ? AND week = ?"
            f" AND athlete_id IN ({_placeholders(len(athlete_ids))})",
            (league_id, week, *athlete_ids),
        ).fetchall()
        return {r["athlete_id"]: json.loads(r["stats"]) for r in rows}

    def create_many_if_absent(
        self, conn: sqlite3.Connection, league_id: str, week: int, lines: dict[str, dict[str, float]]
    ) -> None:
        """Rows that already exist keep their original line."""
        now = _now_iso()
        with transaction(conn):
            conn.executemany(
                "INSERT OR IGNORE INTO athlete_week_stats (id, league_id, week, athlete_id, stats, created_at)"
                " VALUES (?, ?, ?, ?, ?, ?)",
                [
                    (str(uuid.uuid4()), league_id, week, athlete_id, json.dumps(stats), now)
                    for athlete_id, stats in lines.items()
                ],
            )

    def list_by_league(self, conn: sqlite3.Connection, league_id: str) -> list[AthleteWeekStat]:
        rows = conn.execute(
            "SELECT * FROM athlete_week_stats WHERE league_id = ? ORDER BY week, rowid", (league_id,)
        ).fetchall()
        return [self._from_row(r) for r in rows]
