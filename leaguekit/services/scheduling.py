"""
Deterministic round-robin schedule generation for leagues.

Circle method: fix the first slot, rotate the others one step per round. With
an odd number of teams a virtual BYE joins the rotation; any pairing with BYE
is dropped, so that team sits the week out.

Season length comes from the RuleSet (schedule.weeks), not from the team
count. When weeks exceeds one full rotation (n-1 rounds) the rotation keeps
cycling and pairings repeat in the same order.

Home/away alternates with round parity: even rounds the first position hosts,
odd rounds the second.

Same team list ordering yields the same schedule, so callers pass a stable
order (team creation order).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

# Sentinel for bye when number of teams is odd
BYE = "__BYE__"


@dataclass(frozen=True)
class ScheduledMatchup:
    week: int  # 1-based
    home_team_id: str
    away_team_id: str

    def to_dict(self) -> dict[str, Any]:
        return {"week": self.week, "home_team_id": self.home_team_id, "away_team_id": self.away_team_id}


def generate_round_robin(team_ids: Sequence[str], weeks: int) -> list[ScheduledMatchup]:
    """
    Fixtures for `weeks` rounds, ordered by week then pairing order.
    Fewer than 2 teams => [].
    """
    ids = list(team_ids)
    if len(ids) < 2:
        return []
    if len(ids) % 2 == 1:
        ids.append(BYE)
    n = len(ids)

    result: list[ScheduledMatchup] = []
    rotation = list(ids)
    for rnd in range(weeks):
        for i in range(n // 2):
            a, b = rotation[i], rotation[n - 1 - i]
            if a == BYE or b == BYE:
                continue
            home, away = (a, b) if rnd % 2 == 0 else (b, a)
            result.append(ScheduledMatchup(week=rnd + 1, home_team_id=home, away_team_id=away))
        # Keep position 0; last element moves to the front of the rest
        rotation = [rotation[0], rotation[-1]] + rotation[1:-1]
    return result


def generate_league_schedule(team_ids: Sequence[str], weeks: int) -> list[dict[str, Any]]:
    """
    Return list of fixtures: { "week": int, "home_team_id": str, "away_team_id": str }.
    Byes do not appear.
    """
    return [m.to_dict() for m in generate_round_robin(team_ids, weeks)]


def teams_on_bye(team_ids: Sequence[str], fixtures: Sequence[Any], week: int) -> list[str]:
    """
    Teams with no fixture in the given week, in team_ids order.
    fixtures may be ScheduledMatchup or persisted Matchup rows.
    """
    playing = set()
    for m in fixtures:
        if m.week == week:
            playing.add(m.home_team_id)
            playing.add(m.away_team_id)
    return [t for t in team_ids if t not in playing]
