"""
Tests for standings and athlete totals.
"""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from leaguekit.analytics import (
    athlete_fantasy_totals,
    compute_standings,
    format_last5,
    format_streak,
    win_pct,
)
from leaguekit.models import AthleteWeekStat, Matchup, MatchupResult, MatchupStatus, Team

NOW = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _team(tid, name):
    return Team(id=tid, league_id="L", owner_id="u", name=name, created_at=NOW)


def _game(week, home, away, hs=None, as_=None):
    mid = f"m{week}{home}{away}"
    result = None
    if hs is not None:
        result = MatchupResult(id=f"r-{mid}", matchup_id=mid, home_score=hs, away_score=as_, simulated_at=NOW)
    return Matchup(
        id=mid, league_id="L", week=week, home_team_id=home, away_team_id=away,
        status=MatchupStatus.FINAL if result else MatchupStatus.SCHEDULED, created_at=NOW, result=result,
    )


def test_win_pct_counts_ties_half():
    assert win_pct(2, 1, 4) == 0.625
    assert win_pct(0, 0, 0) == 0


def test_streak_and_last5():
    assert format_streak([]) == "-"
    assert format_streak(["W", "L", "L"]) == "L2"
    assert format_last5(["W", "W", "L", "W", "L", "L"]) == "2-3"
    assert format_last5(["T", "W"]) == "1-0-1"


def test_compute_standings():
    teams = [_team("a", "Alpha"), _team("b", "Bravo"), _team("c", "Charlie"), _team("d", "Delta")]
    matchups = [
        _game(1, "a", "d", 50, 40),
        _game(1, "b", "c", 30, 30),
        _game(2, "c", "a", 60, 45),
        _game(2, "b", "d", 41, 20),
        _game(3, "a", "b"),  # unplayed
    ]
    standings = compute_standings(teams, matchups)
    by_id = {s.team_id: s for s in standings}

    assert [s.rank for s in standings] == [1, 2, 3, 4]
    # Charlie, Bravo and Alpha all have 1 win; Charlie and Bravo add a tie
    assert [s.team_id for s in standings] == ["c", "b", "a", "d"]

    a = by_id["a"]
    assert (a.played, a.wins, a.losses, a.ties) == (2, 1, 1, 0)
    assert a.points_for == 95 and a.points_against == 100 and a.diff == -5
    assert a.streak == "L1"
    assert a.last5 == "1-1"
    assert a.ceiling == 50 and a.floor == 45 and a.avg == 47.5
    assert a.stddev == pytest.approx(2.5)

    c = by_id["c"]
    assert c.win_pct == 0.75
    assert c.last5 == "1-0-1"

    d = by_id["d"]
    assert d.wins == 0 and d.streak == "L2"


def test_standings_tie_break_falls_back_to_name():
    teams = [_team("z", "Zulu"), _team("y", "Yankee")]
    standings = compute_standings(teams, [])
    assert [s.team_name for s in standings] == ["Yankee", "Zulu"]
    assert standings[0].streak == "-" and standings[0].last5 == "0-0"


def test_athlete_fantasy_totals(starter_config):
    rows = [
        AthleteWeekStat(id="1", league_id="L", week=1, athlete_id="x",
                        stats={"points": 10, "assists": 2, "blocks": 1}, created_at=NOW),
        AthleteWeekStat(id="2", league_id="L", week=2, athlete_id="x",
                        stats={"points": 20, "assists": 0, "blocks": 0}, created_at=NOW),
        AthleteWeekStat(id="3", league_id="L", week=1, athlete_id="y",
                        stats={"points": 4, "legacy": 100}, created_at=NOW),
    ]
    totals = athlete_fantasy_totals(starter_config, rows)
    x = totals["x"]
    assert x.weeks_played == 2
    assert x.totals["points"] == 30
    assert x.fantasy == 17 + 20
    assert x.best_week == 2 and x.best_fantasy == 20
    assert x.averages()["fantasy"] == 18.5
    assert x.points_by_stat == {"points": 30, "assists": 4, "blocks": 3}
    assert sum(x.points_by_stat.values()) == x.fantasy

    y = totals["y"]
    assert y.fantasy == 4
    assert "legacy" not in y.totals
