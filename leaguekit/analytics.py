"""
Deterministic league analytics.
Read-only: consumes teams, matchups with results and cached stat lines, returns
structured standings and athlete totals. No simulation, no persistence.
"""
from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from leaguekit.models import AthleteWeekStat, Matchup, Team
from leaguekit.rules import RuleSetConfig, score_breakdown, score_from_stats

WIN, LOSS, TIE = "W", "L", "T"


def win_pct(wins: int, ties: int, played: int) -> float:
    """Ties count as half a win."""
    if played <= 0:
        return 0.0
    return (wins + ties * 0.5) / played


def format_streak(results: Sequence[str]) -> str:
    if not results:
        return "-"
    last = results[-1]
    n = 0
    for r in reversed(results):
        if r != last:
            break
        n += 1
    return f"{last}{n}"


def format_last5(results: Sequence[str]) -> str:
    recent = results[-5:]
    w, l, t = recent.count(WIN), recent.count(LOSS), recent.count(TIE)
    return f"{w}-{l}-{t}" if t else f"{w}-{l}"


def _stddev(values: Sequence[float]) -> float:
    # Population standard deviation
    if len(values) < 2:
        return 0.0
    mean = sum(values) / len(values)
    return math.sqrt(sum((v - mean) ** 2 for v in values) / len(values))


@dataclass
class TeamStanding:
    team_id: str
    team_name: str
    rank: int = 0
    played: int = 0
    wins: int = 0
    losses: int = 0
    ties: int = 0
    win_pct: float = 0.0
    points_for: float = 0.0
    points_against: float = 0.0
    diff: float = 0.0
    streak: str = "-"
    last5: str = "0-0"
    ceiling: float = 0.0
    floor: float = 0.0
    avg: float = 0.0
    stddev: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "rank": self.rank,
            "team_id": self.team_id,
            "team_name": self.team_name,
            "played": self.played,
            "wins": self.wins,
            "losses": self.losses,
            "ties": self.ties,
            "win_pct": round(self.win_pct, 4),
            "points_for": self.points_for,
            "points_against": self.points_against,
            "diff": self.diff,
            "streak": self.streak,
            "last5": self.last5,
            "ceiling": self.ceiling,
            "floor": self.floor,
            "avg": self.avg,
            "stddev": self.stddev,
        }


def compute_standings(teams: Iterable[Team], matchups: Iterable[Matchup]) -> list[TeamStanding]:
    """
    Standings from matchups that carry a result; unresolved fixtures are ignored.
    Order: wins, win pct, points for, diff (all descending), then team name.
    """
    rows = {t.id: TeamStanding(team_id=t.id, team_name=t.name) for t in teams}
    results: dict[str, list[str]] = {tid: [] for tid in rows}
    weekly_points: dict[str, list[float]] = {tid: [] for tid in rows}

    for m in sorted(matchups, key=lambda m: m.week):
        if m.result is None:
            continue
        home, away = rows.get(m.home_team_id), rows.get(m.away_team_id)
        if home is None or away is None:
            continue
        hs, as_ = m.result.home_score, m.result.away_score
        for row, pf, pa in ((home, hs, as_), (away, as_, hs)):
            row.played += 1
            row.points_for += pf
            row.points_against += pa
            weekly_points[row.team_id].append(pf)
            if pf > pa:
                row.wins += 1
                results[row.team_id].append(WIN)
            elif pf < pa:
                row.losses += 1
                results[row.team_id].append(LOSS)
            else:
                row.ties += 1
                results[row.team_id].append(TIE)

    for tid, row in rows.items():
        pts = weekly_points[tid]
        row.win_pct = win_pct(row.wins, row.ties, row.played)
        row.diff = row.points_for - row.points_against
        row.streak = format_streak(results[tid])
        row.last5 = format_last5(results[tid])
        row.ceiling = max(pts) if pts else 0.0
        row.floor = min(pts) if pts else 0.0
        row.avg = row.points_for / row.played if row.played else 0.0
        row.stddev = _stddev(pts)

    ordered = sorted(
        rows.values(),
        key=lambda r: (-r.wins, -r.win_pct, -r.points_for, -r.diff, r.team_name),
    )
    for i, row in enumerate(ordered, start=1):
        row.rank = i
    return ordered


# ---------- Athlete totals ----------


@dataclass
class AthleteTotals:
    athlete_id: str
    weeks_played: int = 0
    totals: dict[str, float] = field(default_factory=dict)
    best_week: int | None = None
    best_fantasy: float | None = None
    points_by_stat: dict[str, float] = field(default_factory=dict)

    @property
    def fantasy(self) -> float:
        return self.totals.get("fantasy", 0.0)

    def averages(self) -> dict[str, float]:
        if not self.weeks_played:
            return {k: 0.0 for k in self.totals}
        return {k: v / self.weeks_played for k, v in self.totals.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "athlete_id": self.athlete_id,
            "weeks_played": self.weeks_played,
            "totals": dict(self.totals),
            "averages": self.averages(),
            "best_week": self.best_week,
            "best_fantasy": self.best_fantasy,
            "points_by_stat": dict(self.points_by_stat),
        }


def athlete_fantasy_totals(
    config: RuleSetConfig, stat_rows: Iterable[AthleteWeekStat]
) -> dict[str, AthleteTotals]:
    """
    Per-athlete sums of every declared stat plus "fantasy" points, over all
    cached weeks. points_by_stat splits the fantasy total by scoring stat.
    Stat keys the config does not declare are ignored.
    """
    keys = ["fantasy", *config.stat_keys]
    out: dict[str, AthleteTotals] = {}
    for row in stat_rows:
        acc = out.get(row.athlete_id)
        if acc is None:
            acc = out[row.athlete_id] = AthleteTotals(row.athlete_id, totals={k: 0.0 for k in keys})
        for key in config.stat_keys:
            value = row.stats.get(key)
            if isinstance(value, (int, float)):
                acc.totals[key] += value
        breakdown = score_breakdown(config, row.stats)
        for key, pts in breakdown.items():
            acc.points_by_stat[key] = acc.points_by_stat.get(key, 0.0) + pts
        fantasy = score_from_stats(config, row.stats)
        acc.totals["fantasy"] += fantasy
        acc.weeks_played += 1
        if acc.best_fantasy is None or fantasy > acc.best_fantasy:
            acc.best_week, acc.best_fantasy = row.week, fantasy
    return out
