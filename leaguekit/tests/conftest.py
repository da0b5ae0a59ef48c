"""
Shared fixtures: a temporary SQLite database per test plus a small league.
"""
from __future__ import annotations

from types import SimpleNamespace

import pytest

from leaguekit.models import UserRole
from leaguekit.persistence import (
    RuleSetRepository,
    SportRepository,
    UserRepository,
    get_connection,
    init_db,
    set_db_path,
)
from leaguekit.rules import validate
from leaguekit.seed import starter_rule_set_config
from leaguekit.services import LeagueService


@pytest.fixture
def db_conn(tmp_path):
    """Temporary DB with the full schema."""
    db_path = tmp_path / "leaguekit_test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def starter_config():
    return validate(starter_rule_set_config())


@pytest.fixture
def admin(db_conn):
    return UserRepository().create(db_conn, "Admin", UserRole.ADMIN)


@pytest.fixture
def rule_set(db_conn, starter_config):
    """gridball-lite style rule set: A x3, B x2, bench 3, 8 weeks."""
    sport = SportRepository().create(db_conn, "gridball", "Gridball")
    return RuleSetRepository().create(db_conn, sport.id, "gridball-lite", "Gridball Lite", starter_config.to_json())


@pytest.fixture
def league_service():
    return LeagueService()


@pytest.fixture
def season(db_conn, rule_set, league_service):
    """League with two teams; alice is commissioner and owns the first team."""
    users = UserRepository()
    alice = users.create(db_conn, "alice")
    bob = users.create(db_conn, "bob")
    league = league_service.create_league(db_conn, alice.id, "Test League", rule_set.id)
    team_a = league_service.create_team(db_conn, alice.id, league.id, "Alpha")
    team_b = league_service.create_team(db_conn, bob.id, league.id, "Bravo")
    return SimpleNamespace(
        league=league,
        alice=alice,
        bob=bob,
        team_a=team_a,
        team_b=team_b,
        config=league_service.load_config(db_conn, league.id),
    )
