"""
Roster derivation: expand starter slot declarations into concrete slot instances.
"""
from __future__ import annotations

from dataclasses import dataclass

from .schemas import RuleSetConfig


@dataclass(frozen=True)
class StarterSlotInstance:
    """One lineup position, e.g. (RB, 1) = second RB slot."""
    slot_key: str
    slot_index: int  # 0-based within its key's count
    label: str

    @property
    def identity(self) -> tuple[str, int]:
        return (self.slot_key, self.slot_index)


def derive_starter_slots(config: RuleSetConfig) -> list[StarterSlotInstance]:
    """
    Canonical lineup order: declaration order, then index order.
    [{A,3},{B,2}] -> (A,0),(A,1),(A,2),(B,0),(B,1).
    """
    return [
        StarterSlotInstance(slot_key=slot.key, slot_index=i, label=slot.label)
        for slot in config.roster.starter_slots
        for i in range(slot.count)
    ]


def starter_count(config: RuleSetConfig) -> int:
    return sum(slot.count for slot in config.roster.starter_slots)


def total_roster_size(config: RuleSetConfig) -> int:
    """Starters plus bench; the number of athletes provisioned per team."""
    return starter_count(config) + config.roster.bench_slots


def slot_order(config: RuleSetConfig) -> dict[tuple[str, int], int]:
    """Map (slot_key, slot_index) to its canonical position."""
    return {s.identity: pos for pos, s in enumerate(derive_starter_slots(config))}
