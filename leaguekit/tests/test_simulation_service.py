"""
Tests for matchup simulation: preconditions, opponent auto-fill, stat caching
and the at-most-one-result guarantee.
"""
from __future__ import annotations

import pytest

from leaguekit.models import MatchupStatus
from leaguekit.persistence.repositories import (
    AthleteRepository,
    AthleteWeekStatRepository,
    MatchupRepository,
    RuleSetRepository,
    UserRepository,
)
from leaguekit.rules import score_from_stats, simulate_athlete_stats, stat_seed, validate
from leaguekit.seed import starter_rule_set_config
from leaguekit.services.errors import LineupError
from leaguekit.services.lineup_service import LineupService
from leaguekit.services.simulation_service import SimulationService


@pytest.fixture
def lineup_service():
    return LineupService()


@pytest.fixture
def simulation_service(lineup_service):
    return SimulationService(lineup_service)


def _fill_lineup(db_conn, lineup_service, season, team, owner):
    lineup = lineup_service.ensure_lineup(db_conn, team.id, season.league.current_week, season.config)
    roster = AthleteRepository().list_by_team(db_conn, team.id)
    for slot, athlete in zip(lineup.slots, roster):
        lineup_service.update_slot(db_conn, owner.id, slot.id, athlete.id)
    return lineup


def _result_count(db_conn):
    return db_conn.execute("SELECT COUNT(*) FROM matchup_results").fetchone()[0]


def test_simulate_requires_complete_own_lineup(db_conn, season, simulation_service):
    with pytest.raises(LineupError) as exc_info:
        simulation_service.simulate_matchup(db_conn, season.alice.id, season.league.id, season.team_a.id)
    assert exc_info.value.kind == "incomplete"
    assert _result_count(db_conn) == 0


def test_simulate_rejects_non_owner(db_conn, season, simulation_service):
    with pytest.raises(LineupError) as exc_info:
        simulation_service.simulate_matchup(db_conn, season.bob.id, season.league.id, season.team_a.id)
    assert exc_info.value.kind == "forbidden"


def test_simulate_rejects_team_outside_league(db_conn, season, simulation_service):
    with pytest.raises(LineupError) as exc_info:
        simulation_service.simulate_matchup(db_conn, season.alice.id, "other-league", season.team_a.id)
    assert exc_info.value.kind == "not_found"


def test_simulate_creates_final_result(db_conn, season, lineup_service, simulation_service):
    _fill_lineup(db_conn, lineup_service, season, season.team_a, season.alice)
    outcome = simulation_service.simulate_matchup(db_conn, season.alice.id, season.league.id, season.team_a.id)
    assert outcome.already_final is False
    assert outcome.week == 1

    matchup = MatchupRepository().get(db_conn, outcome.matchup_id)
    assert matchup.status == MatchupStatus.FINAL
    assert matchup.result is not None
    assert (matchup.result.home_score, matchup.result.away_score) == (outcome.home_score, outcome.away_score)


def test_simulate_autofills_opponent(db_conn, season, lineup_service, simulation_service):
    _fill_lineup(db_conn, lineup_service, season, season.team_a, season.alice)
    simulation_service.simulate_matchup(db_conn, season.alice.id, season.league.id, season.team_a.id)
    opponent = lineup_service.ensure_lineup(db_conn, season.team_b.id, 1, season.config)
    roster = AthleteRepository().list_by_team(db_conn, season.team_b.id)
    assert opponent.is_complete
    assert [s.athlete_id for s in opponent.slots] == [a.id for a in roster[:5]]


def test_resimulating_returns_same_result(db_conn, season, lineup_service, simulation_service):
    _fill_lineup(db_conn, lineup_service, season, season.team_a, season.alice)
    first = simulation_service.simulate_matchup(db_conn, season.alice.id, season.league.id, season.team_a.id)
    second = simulation_service.simulate_matchup(db_conn, season.alice.id, season.league.id, season.team_a.id)
    assert second.already_final is True
    assert (second.home_score, second.away_score) == (first.home_score, first.away_score)
    assert _result_count(db_conn) == 1


def test_opponent_simulating_a_final_matchup_gets_stored_result(db_conn, season, lineup_service, simulation_service):
    _fill_lineup(db_conn, lineup_service, season, season.team_a, season.alice)
    first = simulation_service.simulate_matchup(db_conn, season.alice.id, season.league.id, season.team_a.id)
    second = simulation_service.simulate_matchup(db_conn, season.bob.id, season.league.id, season.team_b.id)
    assert second.matchup_id == first.matchup_id
    assert second.already_final is True
    assert (second.home_score, second.away_score) == (first.home_score, first.away_score)


def test_stat_lines_cached_for_both_full_rosters(db_conn, season, lineup_service, simulation_service):
    _fill_lineup(db_conn, lineup_service, season, season.team_a, season.alice)
    simulation_service.simulate_matchup(db_conn, season.alice.id, season.league.id, season.team_a.id)

    rows = AthleteWeekStatRepository().list_by_league(db_conn, season.league.id)
    roster_ids = {a.id for a in AthleteRepository().list_by_league(db_conn, season.league.id)}
    # 8 athletes per team, starters and bench
    assert len(rows) == 16
    assert {r.athlete_id for r in rows} == roster_ids
    for row in rows:
        assert row.week == 1
        assert row.stats == simulate_athlete_stats(season.config, stat_seed(season.league.id, 1, row.athlete_id))


def test_scores_are_sum_over_starters(db_conn, season, lineup_service, simulation_service):
    _fill_lineup(db_conn, lineup_service, season, season.team_a, season.alice)
    outcome = simulation_service.simulate_matchup(db_conn, season.alice.id, season.league.id, season.team_a.id)
    lines = {r.athlete_id: r.stats for r in AthleteWeekStatRepository().list_by_league(db_conn, season.league.id)}

    def team_score(team_id):
        lineup = lineup_service.ensure_lineup(db_conn, team_id, 1, season.config)
        return sum(score_from_stats(season.config, lines[s.athlete_id]) for s in lineup.slots)

    assert outcome.home_score == pytest.approx(team_score(outcome.home_team_id))
    assert outcome.away_score == pytest.approx(team_score(outcome.away_team_id))


def test_cached_stat_lines_are_not_regenerated(db_conn, season, simulation_service):
    athlete = AthleteRepository().list_by_team(db_conn, season.team_a.id)[0]
    AthleteWeekStatRepository().create_many_if_absent(
        db_conn, season.league.id, 1, {athlete.id: {"points": 99, "assists": 0, "blocks": 0}}
    )
    lines = simulation_service.ensure_stat_lines(
        db_conn, season.league.id, 1, season.config, [season.team_a.id]
    )
    assert lines[athlete.id] == {"points": 99, "assists": 0, "blocks": 0}
    assert len(lines) == 8


def test_bye_week_has_no_matchup(db_conn, season, league_service, lineup_service, simulation_service):
    # A third team after the schedule exists is unscheduled until regeneration
    carol = UserRepository().create(db_conn, "carol")
    team_c = league_service.create_team(db_conn, carol.id, season.league.id, "Charlie")
    league_service.regenerate_schedule(db_conn, season.alice.id, season.league.id)
    week1 = MatchupRepository().list_by_league(db_conn, season.league.id, week=1)
    assert len(week1) == 1
    playing = {week1[0].home_team_id, week1[0].away_team_id}
    bye_team, owner = next(
        (t, u) for t, u in ((season.team_a, season.alice), (season.team_b, season.bob), (team_c, carol))
        if t.id not in playing
    )
    _fill_lineup(db_conn, lineup_service, season, bye_team, owner)
    with pytest.raises(LineupError) as exc_info:
        simulation_service.simulate_matchup(db_conn, owner.id, season.league.id, bye_team.id)
    assert exc_info.value.kind == "no_matchup"


def _add_slot_c(db_conn, season):
    raw = starter_rule_set_config()
    raw["roster"]["starterSlots"].append({"key": "C", "label": "Slot C", "count": 1})
    wider = validate(raw)
    repo = RuleSetRepository()
    rule_set = repo.get(db_conn, season.league.rule_set_id)
    repo.update(db_conn, rule_set.id, rule_set.name, rule_set.description, wider.to_json())
    return wider


def test_locked_opponent_untouched_after_rule_set_edit(db_conn, season, lineup_service, simulation_service):
    bob_lineup = _fill_lineup(db_conn, lineup_service, season, season.team_b, season.bob)
    lineup_service.lock_lineup(db_conn, season.bob.id, bob_lineup.id)
    locked = lineup_service.get_lineup(db_conn, bob_lineup.id)

    wider = _add_slot_c(db_conn, season)
    alice_lineup = lineup_service.ensure_lineup(db_conn, season.team_a.id, 1, wider)
    assert len(alice_lineup.slots) == 6
    roster = AthleteRepository().list_by_team(db_conn, season.team_a.id)
    for slot, athlete in zip(alice_lineup.slots, roster):
        lineup_service.update_slot(db_conn, season.alice.id, slot.id, athlete.id)

    outcome = simulation_service.simulate_matchup(db_conn, season.alice.id, season.league.id, season.team_a.id)
    assert outcome.already_final is False
    after = lineup_service.get_lineup(db_conn, bob_lineup.id)
    assert [(s.id, s.athlete_id) for s in after.slots] == [(s.id, s.athlete_id) for s in locked.slots]


def test_locked_own_lineup_still_simulates_after_rule_set_edit(db_conn, season, lineup_service, simulation_service):
    bob_lineup = _fill_lineup(db_conn, lineup_service, season, season.team_b, season.bob)
    lineup_service.lock_lineup(db_conn, season.bob.id, bob_lineup.id)
    _add_slot_c(db_conn, season)

    outcome = simulation_service.simulate_matchup(db_conn, season.bob.id, season.league.id, season.team_b.id)
    assert outcome.already_final is False
    assert len(lineup_service.get_lineup(db_conn, bob_lineup.id).slots) == 5
