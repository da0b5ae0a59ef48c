#!/usr/bin/env python3
"""
Season demo: seed templates -> league with four teams -> lineups -> simulate week 1 -> standings.
Run from project root: python3 scripts/season_demo.py [rule-set-slug]
"""
from __future__ import annotations

import sys
from pathlib import Path

# Ensure project root on path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from leaguekit.analytics import compute_standings
from leaguekit.models import UserRole
from leaguekit.persistence import (
    AthleteRepository,
    MatchupRepository,
    RuleSetRepository,
    UserRepository,
    get_connection,
    init_db,
    set_db_path,
)
from leaguekit.services import LeagueService, LineupService, SimulationService
from leaguekit.seed import seed_default_templates
from leaguekit.settings import configure_logging

TEAM_NAMES = ["Comets", "Foxes", "Harbor", "Summit"]


def main(slug: str = "gridball-lite") -> None:
    configure_logging("INFO")
    # Separate from the API database
    db_path = PROJECT_ROOT / "data" / "season_demo.db"
    if db_path.exists():
        db_path.unlink()
    set_db_path(db_path)
    init_db(db_path)

    conn = get_connection()
    try:
        seed_default_templates(conn)
        rule_set = RuleSetRepository().get_by_slug(conn, slug)
        if rule_set is None:
            print(f"Unknown rule set: {slug}")
            sys.exit(1)

        leagues = LeagueService()
        lineups = LineupService()
        simulation = SimulationService(lineups)
        users = UserRepository()

        commissioner = users.create(conn, "Commissioner", UserRole.USER)
        league = leagues.create_league(conn, commissioner.id, "Demo League", rule_set.id)
        config = leagues.load_config(conn, league.id)
        print(f"League {league.name} on {rule_set.name}: {config.schedule.weeks} weeks")

        teams = []
        for i, name in enumerate(TEAM_NAMES):
            owner = commissioner if i == 0 else users.create(conn, f"Owner {name}")
            teams.append((owner, leagues.create_team(conn, owner.id, league.id, name)))

        # Only the first two owners set a lineup; the others are auto-filled at simulate time
        athletes = AthleteRepository()
        for owner, team in teams[:2]:
            lineup = lineups.ensure_lineup(conn, team.id, 1, config)
            roster = athletes.list_by_team(conn, team.id)
            for slot, athlete in zip(lineup.slots, roster):
                lineups.update_slot(conn, owner.id, slot.id, athlete.id)
            lineups.lock_lineup(conn, owner.id, lineup.id)

        names = {team.id: team.name for _, team in teams}
        simulated = set()
        for owner, team in teams:
            matchup = MatchupRepository().find_for_team_week(conn, league.id, 1, team.id)
            if matchup is None or matchup.id in simulated:
                continue
            outcome = simulation.simulate_matchup(conn, owner.id, league.id, team.id)
            simulated.add(outcome.matchup_id)
            print(
                f"Week 1: {names[outcome.home_team_id]} {outcome.home_score:.2f}"
                f" - {outcome.away_score:.2f} {names[outcome.away_team_id]}"
            )

        print("\nStandings")
        standings = compute_standings([t for _, t in teams], MatchupRepository().list_by_league(conn, league.id))
        for row in standings:
            print(f"{row.rank:>2}. {row.team_name:<10} {row.wins}-{row.losses}-{row.ties}  PF {row.points_for:.2f}")
    finally:
        conn.close()


if __name__ == "__main__":
    main(*sys.argv[1:2])
