"""
SQLite schema for league entities.
Each table created with IF NOT EXISTS. Unique indexes carry the idempotency
guarantees (lineup per team/week, slot per lineup/key/index, one result per
matchup, one stat line per league/week/athlete).
"""
from __future__ import annotations


def users_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        role TEXT NOT NULL DEFAULT 'USER',
        created_at TEXT NOT NULL
    );
    """


def sports_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS sports (
        id TEXT PRIMARY KEY,
        slug TEXT NOT NULL,
        name TEXT NOT NULL,
        description TEXT,
        created_at TEXT NOT NULL
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_sports_slug ON sports(slug);
    """


def rule_sets_schema() -> str:
    """config holds the canonical JSON of a validated RuleSetConfig."""
    return """
    CREATE TABLE IF NOT EXISTS rule_sets (
        id TEXT PRIMARY KEY,
        sport_id TEXT NOT NULL,
        slug TEXT NOT NULL,
        name TEXT NOT NULL,
        description TEXT,
        config TEXT NOT NULL,
        created_at TEXT NOT NULL,
        updated_at TEXT NOT NULL,
        FOREIGN KEY (sport_id) REFERENCES sports(id) ON DELETE CASCADE
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_rule_sets_slug ON rule_sets(slug);
    CREATE INDEX IF NOT EXISTS ix_rule_sets_sport ON rule_sets(sport_id);
    """


def leagues_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS leagues (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        sport_id TEXT NOT NULL,
        rule_set_id TEXT NOT NULL,
        commissioner_id TEXT NOT NULL,
        current_week INTEGER NOT NULL DEFAULT 1,
        created_at TEXT NOT NULL,
        FOREIGN KEY (sport_id) REFERENCES sports(id),
        FOREIGN KEY (rule_set_id) REFERENCES rule_sets(id),
        FOREIGN KEY (commissioner_id) REFERENCES users(id)
    );
    CREATE INDEX IF NOT EXISTS ix_leagues_rule_set ON leagues(rule_set_id);
    CREATE INDEX IF NOT EXISTS ix_leagues_commissioner ON leagues(commissioner_id);
    """


def league_members_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS league_members (
        league_id TEXT NOT NULL,
        user_id TEXT NOT NULL,
        role TEXT NOT NULL DEFAULT 'MEMBER',
        joined_at TEXT NOT NULL,
        PRIMARY KEY (league_id, user_id),
        FOREIGN KEY (league_id) REFERENCES leagues(id) ON DELETE CASCADE,
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
    );
    CREATE INDEX IF NOT EXISTS ix_league_members_user ON league_members(user_id);
    """


def teams_schema() -> str:
    """Team names are unique per league."""
    return """
    CREATE TABLE IF NOT EXISTS teams (
        id TEXT PRIMARY KEY,
        league_id TEXT NOT NULL,
        owner_id TEXT NOT NULL,
        name TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (league_id) REFERENCES leagues(id) ON DELETE CASCADE,
        FOREIGN KEY (owner_id) REFERENCES users(id)
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_teams_league_name ON teams(league_id, name);
    CREATE INDEX IF NOT EXISTS ix_teams_owner ON teams(owner_id);
    """


def athletes_schema() -> str:
    return """
    CREATE TABLE IF NOT EXISTS athletes (
        id TEXT PRIMARY KEY,
        team_id TEXT NOT NULL,
        name TEXT NOT NULL,
        position INTEGER NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (team_id) REFERENCES teams(id) ON DELETE CASCADE
    );
    CREATE INDEX IF NOT EXISTS ix_athletes_team ON athletes(team_id);
    """


def lineups_schema() -> str:
    """locked_at NULL = OPEN. Slot athlete_id NULL = empty slot."""
    return """
    CREATE TABLE IF NOT EXISTS lineups (
        id TEXT PRIMARY KEY,
        team_id TEXT NOT NULL,
        week INTEGER NOT NULL,
        locked_at TEXT,
        created_at TEXT NOT NULL,
        FOREIGN KEY (team_id) REFERENCES teams(id) ON DELETE CASCADE
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_lineups_team_week ON lineups(team_id, week);
    CREATE INDEX IF NOT EXISTS ix_lineups_week ON lineups(week);

    CREATE TABLE IF NOT EXISTS lineup_slots (
        id TEXT PRIMARY KEY,
        lineup_id TEXT NOT NULL,
        slot_key TEXT NOT NULL,
        slot_index INTEGER NOT NULL,
        athlete_id TEXT,
        FOREIGN KEY (lineup_id) REFERENCES lineups(id) ON DELETE CASCADE,
        FOREIGN KEY (athlete_id) REFERENCES athletes(id) ON DELETE SET NULL
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_lineup_slots_identity ON lineup_slots(lineup_id, slot_key, slot_index);
    CREATE INDEX IF NOT EXISTS ix_lineup_slots_athlete ON lineup_slots(athlete_id);
    """


def matchups_schema() -> str:
    """status: SCHEDULED | FINAL. One result row per matchup at most."""
    return """
    CREATE TABLE IF NOT EXISTS matchups (
        id TEXT PRIMARY KEY,
        league_id TEXT NOT NULL,
        week INTEGER NOT NULL,
        home_team_id TEXT NOT NULL,
        away_team_id TEXT NOT NULL,
        status TEXT NOT NULL DEFAULT 'SCHEDULED',
        seq INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL,
        FOREIGN KEY (league_id) REFERENCES leagues(id) ON DELETE CASCADE,
        FOREIGN KEY (home_team_id) REFERENCES teams(id),
        FOREIGN KEY (away_team_id) REFERENCES teams(id)
    );
    CREATE INDEX IF NOT EXISTS ix_matchups_league_week ON matchups(league_id, week);

    CREATE TABLE IF NOT EXISTS matchup_results (
        id TEXT PRIMARY KEY,
        matchup_id TEXT NOT NULL,
        home_score REAL NOT NULL,
        away_score REAL NOT NULL,
        simulated_at TEXT NOT NULL,
        FOREIGN KEY (matchup_id) REFERENCES matchups(id) ON DELETE CASCADE
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_matchup_results_matchup ON matchup_results(matchup_id);
    """


def athlete_week_stats_schema() -> str:
    """stats: JSON object stat_key -> number. Generated once per (league, week, athlete)."""
    return """
    CREATE TABLE IF NOT EXISTS athlete_week_stats (
        id TEXT PRIMARY KEY,
        league_id TEXT NOT NULL,
        week INTEGER NOT NULL,
        athlete_id TEXT NOT NULL,
        stats TEXT NOT NULL,
        created_at TEXT NOT NULL,
        FOREIGN KEY (league_id) REFERENCES leagues(id) ON DELETE CASCADE,
        FOREIGN KEY (athlete_id) REFERENCES athletes(id) ON DELETE CASCADE
    );
    CREATE UNIQUE INDEX IF NOT EXISTS ix_athlete_week_stats_identity ON athlete_week_stats(league_id, week, athlete_id);
    """


def all_schema_sql() -> str:
    """All DDL in dependency order."""
    return "\n".join([
        users_schema(),
        sports_schema(),
        rule_sets_schema(),
        leagues_schema(),
        league_members_schema(),
        teams_schema(),
        athletes_schema(),
        lineups_schema(),
        matchups_schema(),
        athlete_week_stats_schema(),
    ])
