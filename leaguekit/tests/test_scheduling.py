"""
Tests for round-robin schedule generation.
"""
from __future__ import annotations

from collections import Counter
from itertools import combinations

import pytest

from leaguekit.services.scheduling import (
    BYE,
    generate_league_schedule,
    generate_round_robin,
    teams_on_bye,
)


def _pair(m):
    return frozenset((m.home_team_id, m.away_team_id))


def test_fewer_than_two_teams_returns_empty():
    assert generate_round_robin([], 5) == []
    assert generate_round_robin(["t1"], 5) == []


@pytest.mark.parametrize("n", [2, 4, 6, 8])
def test_even_full_rotation_covers_every_pair_once(n):
    teams = [f"t{i}" for i in range(n)]
    fixtures = generate_round_robin(teams, n - 1)
    pairs = Counter(_pair(m) for m in fixtures)
    assert set(pairs) == {frozenset(p) for p in combinations(teams, 2)}
    assert all(count == 1 for count in pairs.values())
    for week in range(1, n):
        playing = [t for m in fixtures if m.week == week for t in (m.home_team_id, m.away_team_id)]
        assert sorted(playing) == sorted(teams)


@pytest.mark.parametrize("n", [3, 5, 7])
def test_odd_team_count_gives_one_bye_per_week(n):
    teams = [f"t{i}" for i in range(n)]
    fixtures = generate_round_robin(teams, n)
    for week in range(1, n + 1):
        assert sum(1 for m in fixtures if m.week == week) == (n - 1) // 2
        assert len(teams_on_bye(teams, fixtures, week)) == 1
    assert all(BYE not in (m.home_team_id, m.away_team_id) for m in fixtures)
    # Over a full cycle every team sits out exactly once
    byes = Counter(t for week in range(1, n + 1) for t in teams_on_bye(teams, fixtures, week))
    assert byes == Counter(teams)


def test_first_round_pairing_and_home_alternation():
    fixtures = generate_round_robin(["a", "b", "c", "d"], 3)
    week1 = [(m.home_team_id, m.away_team_id) for m in fixtures if m.week == 1]
    week2 = [(m.home_team_id, m.away_team_id) for m in fixtures if m.week == 2]
    week3 = [(m.home_team_id, m.away_team_id) for m in fixtures if m.week == 3]
    assert week1 == [("a", "d"), ("b", "c")]
    assert week2 == [("c", "a"), ("b", "d")]
    assert week3 == [("a", "b"), ("c", "d")]


def test_weeks_beyond_one_rotation_repeat_pairings():
    teams = ["a", "b", "c", "d"]
    fixtures = generate_round_robin(teams, 6)
    assert len(fixtures) == 12
    for week in range(1, 4):
        first = {_pair(m) for m in fixtures if m.week == week}
        repeat = {_pair(m) for m in fixtures if m.week == week + 3}
        assert first == repeat


def test_schedule_is_deterministic_and_ordered():
    teams = ["x", "y", "z", "w", "v"]
    a = generate_round_robin(teams, 8)
    b = generate_round_robin(list(teams), 8)
    assert a == b
    assert [m.week for m in a] == sorted(m.week for m in a)


def test_generate_league_schedule_returns_dicts():
    fixtures = generate_league_schedule(["a", "b"], 2)
    assert fixtures == [
        {"week": 1, "home_team_id": "a", "away_team_id": "b"},
        {"week": 2, "home_team_id": "b", "away_team_id": "a"},
    ]
