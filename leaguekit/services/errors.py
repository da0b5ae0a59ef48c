"""
Service-layer rejections. Each carries a machine-readable kind so the transport
can render a user-facing message; none are retried automatically.
"""
from __future__ import annotations

NOT_FOUND = "not_found"
FORBIDDEN = "forbidden"
LOCKED = "locked"
BAD_ATHLETE = "bad_athlete"
DUPLICATE = "duplicate"
INCOMPLETE = "incomplete"
NO_MATCHUP = "no_matchup"
NEED_TEAMS = "need_teams"
INVALID = "invalid"


class ServiceError(ValueError):
    """Base for precondition failures raised by services."""

    def __init__(self, kind: str, message: str | None = None) -> None:
        self.kind = kind
        self.message = message or kind
        super().__init__(self.message)

    def to_dict(self) -> dict[str, str]:
        return {"error": self.kind, "detail": self.message}


class LineupError(ServiceError):
    """not_found | forbidden | locked | bad_athlete | duplicate | incomplete | no_matchup."""


class ScheduleError(ServiceError):
    """need_teams | locked (a result exists, schedule is frozen)."""


class LeagueError(ServiceError):
    """not_found | forbidden | duplicate | invalid."""


class RuleSetError(ServiceError):
    """not_found | forbidden | duplicate | invalid."""
