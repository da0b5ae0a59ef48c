"""
Tests for admin RuleSet management.
"""
from __future__ import annotations

import json
import logging

import pytest

from leaguekit.persistence.repositories import RuleSetRepository, SportRepository, UserRepository
from leaguekit.rules import ConfigError, validate
from leaguekit.seed import starter_rule_set_config
from leaguekit.services.errors import RuleSetError
from leaguekit.services.ruleset_service import RuleSetService


@pytest.fixture
def service():
    return RuleSetService()


@pytest.fixture
def sport(db_conn, admin, service):
    return service.create_sport(db_conn, admin.id, "Curling", "Curling", "Stones and brooms")


def test_create_sport_normalizes_slug(sport):
    assert sport.slug == "curling"
    assert sport.description == "Stones and brooms"


def test_non_admin_cannot_write(db_conn, service, sport):
    user = UserRepository().create(db_conn, "plain")
    with pytest.raises(RuleSetError) as exc_info:
        service.create_sport(db_conn, user.id, "darts", "Darts")
    assert exc_info.value.kind == "forbidden"
    with pytest.raises(RuleSetError) as exc_info:
        service.create_rule_set(db_conn, user.id, sport.id, "c1", "C1", starter_rule_set_config())
    assert exc_info.value.kind == "forbidden"
    with pytest.raises(RuleSetError) as exc_info:
        service.create_rule_set(db_conn, None, sport.id, "c1", "C1", starter_rule_set_config())
    assert exc_info.value.kind == "forbidden"


def test_duplicate_sport_slug(db_conn, admin, service, sport):
    with pytest.raises(RuleSetError) as exc_info:
        service.create_sport(db_conn, admin.id, "curling", "Curling again")
    assert exc_info.value.kind == "duplicate"


def test_create_rule_set_stores_canonical_json(db_conn, admin, service, sport):
    raw = json.dumps(starter_rule_set_config(), indent=2)
    rule_set = service.create_rule_set(db_conn, admin.id, sport.id, "curling-basic", "Basic", raw)
    assert rule_set.config == validate(raw).to_json()
    assert service.get_config(db_conn, rule_set.id) == validate(raw)


def test_create_rule_set_rejects_bad_config(db_conn, admin, service, sport):
    raw = starter_rule_set_config()
    raw["scoring"]["rules"].append({"statKey": "nonexistent", "pointsPerUnit": 1})
    with pytest.raises(ConfigError) as exc_info:
        service.create_rule_set(db_conn, admin.id, sport.id, "broken", "Broken", raw)
    assert exc_info.value.kind == "semantic_violation"
    assert RuleSetRepository().get_by_slug(db_conn, "broken") is None


def test_create_rule_set_duplicate_slug(db_conn, admin, service, sport):
    service.create_rule_set(db_conn, admin.id, sport.id, "curling-basic", "Basic", starter_rule_set_config())
    with pytest.raises(RuleSetError) as exc_info:
        service.create_rule_set(db_conn, admin.id, sport.id, "curling-basic", "Again", starter_rule_set_config())
    assert exc_info.value.kind == "duplicate"


def test_create_rule_set_unknown_sport(db_conn, admin, service):
    with pytest.raises(RuleSetError) as exc_info:
        service.create_rule_set(db_conn, admin.id, "missing", "x", "X", starter_rule_set_config())
    assert exc_info.value.kind == "not_found"


def test_update_rule_set(db_conn, admin, service, sport):
    rule_set = service.create_rule_set(db_conn, admin.id, sport.id, "curling-basic", "Basic", starter_rule_set_config())
    raw = starter_rule_set_config()
    raw["schedule"]["weeks"] = 12
    updated = service.update_rule_set(db_conn, admin.id, rule_set.id, "Basic (12 weeks)", raw)
    assert updated.name == "Basic (12 weeks)"
    assert service.get_config(db_conn, rule_set.id).schedule.weeks == 12


def test_update_rule_set_rejects_bad_config_without_writing(db_conn, admin, service, sport):
    rule_set = service.create_rule_set(db_conn, admin.id, sport.id, "curling-basic", "Basic", starter_rule_set_config())
    with pytest.raises(ConfigError):
        service.update_rule_set(db_conn, admin.id, rule_set.id, "Basic", "{not json")
    assert RuleSetRepository().get(db_conn, rule_set.id).config == rule_set.config


def test_editing_rule_set_in_use_logs_warning(db_conn, admin, service, sport, league_service, caplog):
    rule_set = service.create_rule_set(db_conn, admin.id, sport.id, "curling-basic", "Basic", starter_rule_set_config())
    league = league_service.create_league(db_conn, admin.id, "Rink", rule_set.id)
    raw = starter_rule_set_config()
    raw["roster"]["benchSlots"] = 1
    with caplog.at_level(logging.WARNING, logger="leaguekit.services.ruleset_service"):
        service.update_rule_set(db_conn, admin.id, rule_set.id, "Basic", raw)
    assert any("curling-basic" in r.getMessage() for r in caplog.records)
    # Leagues read the edited config from now on
    assert league_service.load_config(db_conn, league.id).roster.bench_slots == 1


def test_sports_listed_by_name(db_conn, admin, service, sport):
    service.create_sport(db_conn, admin.id, "archery", "Archery")
    assert [s.slug for s in SportRepository().list_all(db_conn)] == ["archery", "curling"]
