"""
Seeded RNG for deterministic, replayable stat simulation.

String seeds are reduced to 32 bits with FNV-1a (over UTF-16 code units) and
drive a mulberry32 stream. Same seed string => same stream, on any platform.
"""
from __future__ import annotations

_MASK32 = 0xFFFFFFFF
_FNV_OFFSET = 0x811C9DC5
_FNV_PRIME = 0x01000193


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


def _utf16_units(text: str):
    data = text.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def fnv1a32(text: str) -> int:
    """32-bit FNV-1a hash of a string."""
    h = _FNV_OFFSET
    for unit in _utf16_units(text):
        h ^= unit
        h = _imul(h, _FNV_PRIME)
    return h


class Mulberry32:
    """Small 32-bit generator; floats in [0, 1)."""

    def __init__(self, seed: int) -> None:
        self._state = seed & _MASK32

    def next_uint32(self) -> int:
        self._state = (self._state + 0x6D2B79F5) & _MASK32
        t = self._state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        return (t ^ (t >> 14)) & _MASK32

    def random(self) -> float:
        return self.next_uint32() / 4294967296


class SeededRNG:
    """Seed is always explicit: there is no global or entropy-backed state."""

    def __init__(self, seed: str) -> None:
        self._seed = seed
        self._seed32 = fnv1a32(seed)
        self._gen = Mulberry32(self._seed32)

    @property
    def seed(self) -> str:
        return self._seed

    @property
    def seed32(self) -> int:
        return self._seed32

    def random(self) -> float:
        return self._gen.random()

    def uniform(self, a: float, b: float) -> float:
        return a + self.random() * (b - a)
