"""
RuleSetConfig schema: the declarative sport definition.

Serialized form is JSON with camelCase keys (starterSlots, pointsPerUnit, ...);
attributes are snake_case. Models are frozen; sequences are tuples so a
validated config is a hashable value.
"""
from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

SLOT_KEY_PATTERN = r"^[A-Za-z0-9_-]+$"
STAT_KEY_PATTERN = r"^[A-Za-z0-9_.-]+$"

SlotKey = Annotated[str, Field(strict=True, min_length=1, max_length=24, pattern=SLOT_KEY_PATTERN)]
StatKey = Annotated[str, Field(strict=True, min_length=1, max_length=32, pattern=STAT_KEY_PATTERN)]
Label = Annotated[str, Field(strict=True, min_length=1, max_length=48)]
FiniteNumber = Annotated[float, Field(strict=True, allow_inf_nan=False)]


def _integral_float(value: Any) -> Any:
    # 3.0 counts as an integer in JSON; 3.5, booleans and strings are still rejected
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


WholeNumber = Annotated[int, BeforeValidator(_integral_float), Field(strict=True)]


class _ConfigModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        frozen=True,
    )


class StarterSlot(_ConfigModel):
    """A named roster position requiring `count` distinct athletes each week."""
    key: SlotKey
    label: Label
    count: Annotated[WholeNumber, Field(ge=1, le=20)]


class RosterSection(_ConfigModel):
    starter_slots: tuple[StarterSlot, ...] = Field(min_length=1)
    bench_slots: Annotated[WholeNumber, Field(ge=0, le=50)] = 0


class StatDefinition(_ConfigModel):
    """Simulated values are drawn uniformly from [min, max] and rounded to `decimals`."""
    key: StatKey
    label: Label
    min_value: FiniteNumber = Field(alias="min")
    max_value: FiniteNumber = Field(alias="max")
    decimals: Annotated[WholeNumber, Field(ge=0, le=3)] = 0


class ScoringRule(_ConfigModel):
    stat_key: Annotated[str, Field(strict=True, min_length=1, max_length=32)]
    points_per_unit: FiniteNumber


class ScoringSection(_ConfigModel):
    stats: tuple[StatDefinition, ...] = Field(min_length=1)
    rules: tuple[ScoringRule, ...] = Field(min_length=1)


class ScheduleSection(_ConfigModel):
    type: Literal["roundRobin"]
    weeks: Annotated[WholeNumber, Field(ge=1, le=52)]


class MatchupSection(_ConfigModel):
    format: Literal["H2H_POINTS"]


class RuleSetConfig(_ConfigModel):
    """
    The sole configuration artifact. Structural constraints live on the fields;
    cross-field invariants (unique keys, min <= max, rule references) are
    checked by rules.validator so all of them can be reported together.
    """
    roster: RosterSection
    scoring: ScoringSection
    schedule: ScheduleSection
    matchup: MatchupSection

    @property
    def stat_keys(self) -> list[str]:
        return [s.key for s in self.scoring.stats]

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        """Canonical serialization; validate(config.to_json()) == config."""
        return self.model_dump_json(by_alias=True)
