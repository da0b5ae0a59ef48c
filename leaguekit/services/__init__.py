"""
Service layer: preconditions, ownership checks and orchestration over the
pure rules engine. Persistence is delegated to repositories.
"""
from .errors import LeagueError, LineupError, RuleSetError, ScheduleError, ServiceError
from .scheduling import BYE, ScheduledMatchup, generate_league_schedule, generate_round_robin
from .lineup_service import LineupService
from .league_service import LeagueService
from .simulation_service import SimulationOutcome, SimulationService
from .ruleset_service import RuleSetService

__all__ = [
    "ServiceError",
    "LineupError",
    "ScheduleError",
    "LeagueError",
    "RuleSetError",
    "BYE",
    "ScheduledMatchup",
    "generate_round_robin",
    "generate_league_schedule",
    "LineupService",
    "LeagueService",
    "SimulationOutcome",
    "SimulationService",
    "RuleSetService",
]
