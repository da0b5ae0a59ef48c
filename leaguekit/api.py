"""
REST API for the league engine.
Thin wrappers around the services; every precondition failure is a typed
exception rendered by the handlers below.

The acting user arrives in the X-User-Id header. Identity is established
upstream of this process.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager, contextmanager
from typing import Any, AsyncGenerator, Generator

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from leaguekit.analytics import athlete_fantasy_totals, compute_standings
from leaguekit.models import Lineup, UserRole
from leaguekit.persistence import (
    AthleteRepository,
    AthleteWeekStatRepository,
    LeagueRepository,
    MatchupRepository,
    RuleSetRepository,
    SportRepository,
    UserRepository,
    get_connection,
    init_db,
)
from leaguekit.rules import ConfigError, RuleSetConfig, derive_starter_slots, validate
from leaguekit.seed import seed_default_templates, starter_rule_set_config
from leaguekit.services import (
    LeagueService,
    LineupService,
    RuleSetService,
    ServiceError,
    SimulationService,
)
from leaguekit.services.errors import FORBIDDEN, INVALID, NOT_FOUND
from leaguekit.settings import configure_logging, get_settings

logger = logging.getLogger(__name__)


@contextmanager
def db_conn() -> Generator:
    """Yield a DB connection, ensure close on exit."""
    conn = get_connection()
    try:
        yield conn
    finally:
        conn.close()


# ---------- Lifespan ----------
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings = get_settings()
    configure_logging(settings.log_level)
    init_db()
    if settings.seed_templates:
        with db_conn() as conn:
            seed_default_templates(conn)
    yield


# ---------- FastAPI app ----------
app = FastAPI(
    title="LeagueKit API",
    description="Configurable fantasy league engine: rule sets, lineups, schedules and matchups",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

league_service = LeagueService()
lineup_service = LineupService()
simulation_service = SimulationService(lineup_service)
rule_set_service = RuleSetService()


# ---------- Error mapping ----------

_STATUS_BY_KIND = {
    NOT_FOUND: 404,
    FORBIDDEN: 403,
    INVALID: 422,
}


@app.exception_handler(ServiceError)
async def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(status_code=_STATUS_BY_KIND.get(exc.kind, 409), content=exc.to_dict())


@app.exception_handler(ConfigError)
async def _config_error_handler(request: Request, exc: ConfigError) -> JSONResponse:
    return JSONResponse(status_code=422, content=exc.to_dict())


def _current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="X-User-Id header required")
    return x_user_id


# ---------- Request models ----------


class CreateUserRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    role: UserRole = UserRole.USER


class CreateSportRequest(BaseModel):
    slug: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None


class RuleSetConfigRequest(BaseModel):
    # JSON text or an already-decoded object
    config: dict[str, Any] | str


class CreateRuleSetRequest(RuleSetConfigRequest):
    sport_id: str
    slug: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None


class UpdateRuleSetRequest(RuleSetConfigRequest):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = None


class CreateLeagueRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    rule_set_id: str


class CreateTeamRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class UpdateSlotRequest(BaseModel):
    athlete_id: str | None = None


# ---------- Users ----------


@app.post("/users")
def create_user(req: CreateUserRequest) -> dict[str, Any]:
    with db_conn() as conn:
        return UserRepository().create(conn, req.name.strip(), req.role).to_dict()


@app.get("/users/{user_id}")
def get_user(user_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        user = UserRepository().get(conn, user_id)
        if user is None:
            raise HTTPException(status_code=404, detail="User not found")
        return user.to_dict()


# ---------- Sports and rule sets ----------


@app.get("/sports")
def list_sports() -> dict[str, Any]:
    with db_conn() as conn:
        return {"sports": [s.to_dict() for s in SportRepository().list_all(conn)]}


@app.post("/sports")
def create_sport(req: CreateSportRequest, user_id: str = Depends(_current_user_id)) -> dict[str, Any]:
    with db_conn() as conn:
        return rule_set_service.create_sport(conn, user_id, req.slug, req.name, req.description).to_dict()


@app.get("/rulesets")
def list_rule_sets(sport_id: str | None = Query(None)) -> dict[str, Any]:
    with db_conn() as conn:
        return {"rule_sets": [r.to_dict() for r in RuleSetRepository().list_all(conn, sport_id)]}


@app.get("/rulesets/starter-template")
def get_starter_template() -> dict[str, Any]:
    return {"config": starter_rule_set_config()}


@app.post("/rulesets/validate")
def validate_rule_set_config(req: RuleSetConfigRequest) -> dict[str, Any]:
    """Dry run: canonical config on success, 422 with every issue otherwise."""
    config = validate(req.config)
    return {"valid": True, "config": config.to_dict(), "roster_size": _roster_summary(config)}


@app.get("/rulesets/{rule_set_id}")
def get_rule_set(rule_set_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        rule_set = rule_set_service.get_rule_set(conn, rule_set_id)
        config = rule_set_service.get_config(conn, rule_set_id)
        out = rule_set.to_dict()
        out["config"] = config.to_dict()
        out["roster_size"] = _roster_summary(config)
        out["leagues_using"] = RuleSetRepository().count_leagues(conn, rule_set_id)
        return out


@app.post("/rulesets")
def create_rule_set(req: CreateRuleSetRequest, user_id: str = Depends(_current_user_id)) -> dict[str, Any]:
    with db_conn() as conn:
        rule_set = rule_set_service.create_rule_set(
            conn, user_id, req.sport_id, req.slug, req.name, req.config, req.description
        )
        return rule_set.to_dict()


@app.put("/rulesets/{rule_set_id}")
def update_rule_set(
    rule_set_id: str, req: UpdateRuleSetRequest, user_id: str = Depends(_current_user_id)
) -> dict[str, Any]:
    with db_conn() as conn:
        rule_set = rule_set_service.update_rule_set(
            conn, user_id, rule_set_id, req.name, req.config, req.description
        )
        return rule_set.to_dict()


def _roster_summary(config: RuleSetConfig) -> dict[str, int]:
    starters = len(derive_starter_slots(config))
    return {"starters": starters, "bench": config.roster.bench_slots, "total": starters + config.roster.bench_slots}


# ---------- Leagues ----------


@app.post("/leagues")
def create_league(req: CreateLeagueRequest, user_id: str = Depends(_current_user_id)) -> dict[str, Any]:
    with db_conn() as conn:
        return league_service.create_league(conn, user_id, req.name, req.rule_set_id).to_dict()


@app.get("/leagues")
def list_leagues() -> dict[str, Any]:
    with db_conn() as conn:
        return {"leagues": [league.to_dict() for league in LeagueRepository().list_all(conn)]}


@app.get("/leagues/{league_id}")
def get_league(league_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        league = league_service.get_league(conn, league_id)
        config = league_service.load_config(conn, league_id)
        out = league.to_dict()
        out["weeks"] = config.schedule.weeks
        out["teams"] = [t.to_dict() for t in league_service.list_teams(conn, league_id)]
        return out


@app.post("/leagues/{league_id}/teams")
def create_team(league_id: str, req: CreateTeamRequest, user_id: str = Depends(_current_user_id)) -> dict[str, Any]:
    with db_conn() as conn:
        team = league_service.create_team(conn, user_id, league_id, req.name)
        out = team.to_dict()
        out["athletes"] = [a.to_dict() for a in AthleteRepository().list_by_team(conn, team.id)]
        return out


@app.get("/leagues/{league_id}/teams")
def list_teams(league_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        return {"teams": [t.to_dict() for t in league_service.list_teams(conn, league_id)]}


@app.get("/leagues/{league_id}/schedule")
def get_schedule(league_id: str, week: int | None = Query(None, ge=1)) -> dict[str, Any]:
    """With a week, also lists the teams on a bye that week."""
    with db_conn() as conn:
        out: dict[str, Any] = {
            "matchups": [m.to_dict() for m in league_service.list_schedule(conn, league_id, week)]
        }
        if week is not None:
            out["byes"] = [t.to_dict() for t in league_service.list_byes(conn, league_id, week)]
        return out


@app.post("/leagues/{league_id}/schedule/regenerate")
def regenerate_schedule(league_id: str, user_id: str = Depends(_current_user_id)) -> dict[str, Any]:
    with db_conn() as conn:
        matchups = league_service.regenerate_schedule(conn, user_id, league_id)
        return {"matchups": [m.to_dict() for m in matchups]}


@app.post("/leagues/{league_id}/advance-week")
def advance_week(league_id: str, user_id: str = Depends(_current_user_id)) -> dict[str, Any]:
    with db_conn() as conn:
        return {"league_id": league_id, "current_week": league_service.advance_week(conn, user_id, league_id)}


# ---------- Lineups ----------


def _lineup_payload(lineup: Lineup, config: RuleSetConfig) -> dict[str, Any]:
    labels = {s.identity: s.label for s in derive_starter_slots(config)}
    out = lineup.to_dict()
    for slot, d in zip(lineup.slots, out["slots"]):
        d["label"] = labels.get((slot.slot_key, slot.slot_index))
    out["is_complete"] = lineup.is_complete
    return out


@app.get("/leagues/{league_id}/teams/{team_id}/lineup")
def get_lineup(league_id: str, team_id: str, week: int | None = Query(None, ge=1)) -> dict[str, Any]:
    """Provisions the lineup on first read; defaults to the league's current week."""
    with db_conn() as conn:
        league = league_service.get_league(conn, league_id)
        team = next((t for t in league_service.list_teams(conn, league_id) if t.id == team_id), None)
        if team is None:
            raise HTTPException(status_code=404, detail="Team not found")
        config = league_service.load_config(conn, league_id)
        lineup = lineup_service.ensure_lineup(conn, team.id, week or league.current_week, config)
        out = _lineup_payload(lineup, config)
        out["roster"] = [a.to_dict() for a in AthleteRepository().list_by_team(conn, team.id)]
        return out


@app.put("/lineup-slots/{slot_id}")
def update_lineup_slot(slot_id: str, req: UpdateSlotRequest, user_id: str = Depends(_current_user_id)) -> dict[str, Any]:
    with db_conn() as conn:
        return lineup_service.update_slot(conn, user_id, slot_id, req.athlete_id).to_dict()


@app.post("/lineups/{lineup_id}/lock")
def lock_lineup(lineup_id: str, user_id: str = Depends(_current_user_id)) -> dict[str, Any]:
    with db_conn() as conn:
        locked_at = lineup_service.lock_lineup(conn, user_id, lineup_id)
        return {"lineup_id": lineup_id, "locked_at": locked_at.isoformat()}


# ---------- Simulation and analytics ----------


@app.post("/leagues/{league_id}/teams/{team_id}/simulate")
def simulate_matchup(league_id: str, team_id: str, user_id: str = Depends(_current_user_id)) -> dict[str, Any]:
    with db_conn() as conn:
        return simulation_service.simulate_matchup(conn, user_id, league_id, team_id).to_dict()


@app.get("/leagues/{league_id}/standings")
def get_standings(league_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        teams = league_service.list_teams(conn, league_id)
        matchups = MatchupRepository().list_by_league(conn, league_id)
        return {"standings": [s.to_dict() for s in compute_standings(teams, matchups)]}


@app.get("/leagues/{league_id}/athletes/totals")
def get_athlete_totals(league_id: str) -> dict[str, Any]:
    with db_conn() as conn:
        config = league_service.load_config(conn, league_id)
        athletes = {a.id: a for a in AthleteRepository().list_by_league(conn, league_id)}
        totals = athlete_fantasy_totals(config, AthleteWeekStatRepository().list_by_league(conn, league_id))
        rows = []
        for athlete_id, acc in totals.items():
            d = acc.to_dict()
            athlete = athletes.get(athlete_id)
            d["athlete_name"] = athlete.name if athlete else None
            d["team_id"] = athlete.team_id if athlete else None
            rows.append(d)
        rows.sort(key=lambda r: -r["totals"]["fantasy"])
        return {"athletes": rows}
