"""
API integration tests.
Uses TestClient to avoid starting a server.
"""
from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from leaguekit.api import app
from leaguekit.persistence import get_connection, init_db, set_db_path
from leaguekit.seed import seed_default_templates, starter_rule_set_config


@pytest.fixture(autouse=True)
def isolated_db(tmp_path):
    """Use a temporary, seeded DB for each test."""
    db_path = tmp_path / "test.db"
    set_db_path(db_path)
    init_db(db_path=db_path)
    conn = get_connection()
    try:
        seed_default_templates(conn)
    finally:
        conn.close()
    yield db_path


@pytest.fixture
def client():
    return TestClient(app)


def _user(client, name, role="USER"):
    resp = client.post("/users", json={"name": name, "role": role})
    assert resp.status_code == 200
    return resp.json()["id"]


def _hdr(user_id):
    return {"X-User-Id": user_id}


def _rule_set_id(client, slug):
    rule_sets = client.get("/rulesets").json()["rule_sets"]
    return next(r["id"] for r in rule_sets if r["slug"] == slug)


@pytest.fixture
def league(client):
    """League on gridball-lite with two teams."""
    alice = _user(client, "alice")
    bob = _user(client, "bob")
    resp = client.post(
        "/leagues", json={"name": "API League", "rule_set_id": _rule_set_id(client, "gridball-lite")}, headers=_hdr(alice)
    )
    assert resp.status_code == 200
    league_id = resp.json()["id"]
    team_a = client.post(f"/leagues/{league_id}/teams", json={"name": "Alpha"}, headers=_hdr(alice)).json()
    team_b = client.post(f"/leagues/{league_id}/teams", json={"name": "Bravo"}, headers=_hdr(bob)).json()
    return {"id": league_id, "alice": alice, "bob": bob, "team_a": team_a, "team_b": team_b}


def test_list_rule_sets_and_detail(client):
    resp = client.get("/rulesets")
    assert resp.status_code == 200
    slugs = {r["slug"] for r in resp.json()["rule_sets"]}
    assert {"football-standard", "gridball-lite", "nebula-showcase"} <= slugs

    detail = client.get(f"/rulesets/{_rule_set_id(client, 'gridball-lite')}").json()
    assert detail["config"]["roster"]["benchSlots"] == 3
    assert detail["roster_size"] == {"starters": 5, "bench": 3, "total": 8}


def test_validate_endpoint_reports_every_issue(client):
    raw = starter_rule_set_config()
    raw["roster"]["starterSlots"].append({"key": "A", "label": "Dup", "count": 1})
    raw["scoring"]["rules"].append({"statKey": "nonexistent", "pointsPerUnit": 1})
    resp = client.post("/rulesets/validate", json={"config": raw})
    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "semantic_violation"
    assert len(body["issues"]) == 2

    resp = client.post("/rulesets/validate", json={"config": "{oops"})
    assert resp.status_code == 422
    assert resp.json()["error"] == "malformed_json"

    resp = client.post("/rulesets/validate", json={"config": starter_rule_set_config()})
    assert resp.status_code == 200
    assert resp.json()["roster_size"]["total"] == 8


def test_rule_set_writes_require_admin(client):
    user = _user(client, "plain")
    admin = _user(client, "root", role="ADMIN")
    sport_id = client.get("/sports").json()["sports"][0]["id"]
    payload = {"sport_id": sport_id, "slug": "custom", "name": "Custom", "config": starter_rule_set_config()}

    assert client.post("/rulesets", json=payload).status_code == 401
    resp = client.post("/rulesets", json=payload, headers=_hdr(user))
    assert resp.status_code == 403
    assert resp.json()["error"] == "forbidden"

    resp = client.post("/rulesets", json=payload, headers=_hdr(admin))
    assert resp.status_code == 200
    assert client.post("/rulesets", json=payload, headers=_hdr(admin)).status_code == 409


def test_create_league_and_teams(client, league):
    detail = client.get(f"/leagues/{league['id']}").json()
    assert detail["current_week"] == 1
    assert detail["weeks"] == 8
    assert [t["name"] for t in detail["teams"]] == ["Alpha", "Bravo"]
    assert len(league["team_a"]["athletes"]) == 8

    schedule = client.get(f"/leagues/{league['id']}/schedule").json()["matchups"]
    assert len(schedule) == 8
    week1 = client.get(f"/leagues/{league['id']}/schedule", params={"week": 1}).json()
    assert len(week1["matchups"]) == 1
    assert week1["byes"] == []

    resp = client.post(f"/leagues/{league['id']}/teams", json={"name": "Alpha"}, headers=_hdr(league["bob"]))
    assert resp.status_code == 409
    assert resp.json()["error"] == "duplicate"


def test_unknown_league_is_404(client):
    resp = client.get("/leagues/missing")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


def test_lineup_lock_and_simulate_flow(client, league):
    lid, alice = league["id"], league["alice"]
    lineup = client.get(f"/leagues/{lid}/teams/{league['team_a']['id']}/lineup").json()
    assert [s["label"] for s in lineup["slots"]] == ["Slot A"] * 3 + ["Slot B"] * 2
    assert lineup["status"] == "OPEN"

    resp = client.post(f"/leagues/{lid}/teams/{league['team_a']['id']}/simulate", headers=_hdr(alice))
    assert resp.status_code == 409
    assert resp.json()["error"] == "incomplete"

    for slot, athlete in zip(lineup["slots"], lineup["roster"]):
        resp = client.put(f"/lineup-slots/{slot['id']}", json={"athlete_id": athlete["id"]}, headers=_hdr(alice))
        assert resp.status_code == 200

    resp = client.put(
        f"/lineup-slots/{lineup['slots'][0]['id']}", json={"athlete_id": lineup["roster"][1]["id"]}, headers=_hdr(alice)
    )
    assert resp.status_code == 409
    assert resp.json()["error"] == "duplicate"

    resp = client.post(f"/lineups/{lineup['id']}/lock", headers=_hdr(league["bob"]))
    assert resp.status_code == 403
    resp = client.post(f"/lineups/{lineup['id']}/lock", headers=_hdr(alice))
    assert resp.status_code == 200

    resp = client.put(f"/lineup-slots/{lineup['slots'][0]['id']}", json={"athlete_id": None}, headers=_hdr(alice))
    assert resp.status_code == 409
    assert resp.json()["error"] == "locked"

    first = client.post(f"/leagues/{lid}/teams/{league['team_a']['id']}/simulate", headers=_hdr(alice)).json()
    again = client.post(f"/leagues/{lid}/teams/{league['team_a']['id']}/simulate", headers=_hdr(alice)).json()
    assert first["already_final"] is False
    assert again["already_final"] is True
    assert (again["home_score"], again["away_score"]) == (first["home_score"], first["away_score"])

    standings = client.get(f"/leagues/{lid}/standings").json()["standings"]
    assert [s["rank"] for s in standings] == [1, 2]
    assert all(s["played"] == 1 for s in standings)

    totals = client.get(f"/leagues/{lid}/athletes/totals").json()["athletes"]
    assert len(totals) == 16

    resp = client.post(f"/leagues/{lid}/schedule/regenerate", headers=_hdr(alice))
    assert resp.status_code == 409
    assert resp.json()["error"] == "locked"


def test_advance_week_commissioner_only(client, league):
    resp = client.post(f"/leagues/{league['id']}/advance-week", headers=_hdr(league["bob"]))
    assert resp.status_code == 403
    resp = client.post(f"/leagues/{league['id']}/advance-week", headers=_hdr(league["alice"]))
    assert resp.status_code == 200
    assert resp.json()["current_week"] == 2
