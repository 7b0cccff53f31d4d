# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""Shared probability primitives.

Every judgment in the engine follows the same shape: a base rate, weighted
deviations of abilities from the neutral midpoint of 50, a clamp, then exactly
one uniform draw compared against the rate. Call order of draws is part of
each engine's contract, so deterministic tests can replay a scripted sequence.
"""

from __future__ import annotations

import logging
import random
from typing import Iterable, Protocol

from engine.errors import ScriptExhaustedError

logger = logging.getLogger(__name__)

NEUTRAL = 50.0


class RandomSource(Protocol):
    """Anything with ``random() -> float`` in [0, 1)."""

    def random(self) -> float: ...


def make_rng(seed: int | None = None) -> random.Random:
    """Return a seeded generator, or an unseeded one when ``seed`` is None."""
    return random.Random(seed)


def resolve_rng(rng: RandomSource | None) -> RandomSource:
    return rng if rng is not None else random.Random()


def clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, value))


def deviation(value: float | None, weight: float, midpoint: float = NEUTRAL) -> float:
    """Weighted distance of an ability from the midpoint (None counts as neutral)."""
    if value is None:
        return 0.0
    return (value - midpoint) * weight


def roll(rng: RandomSource) -> float:
    """One draw on the 0-100 scale."""
    return rng.random() * 100


def chance(rng: RandomSource, rate: float, label: str = "") -> bool:
    """Draw once and report whether it lands under ``rate``."""
    r = roll(rng)
    if label:
        logger.debug("%s rate=%.1f roll=%.1f", label, rate, r)
    return r < rate


class ScriptedRandom:
    """Replays a fixed sequence of draws.

    Values are given on the [0, 1) scale, the same as ``random.random()``.
    Running past the end raises instead of wrapping so a test notices when an
    engine makes more draws than expected.
    """

    def __init__(self, values: Iterable[float]):
        self._values = list(values)
        self._index = 0

    def random(self) -> float:
        if self._index >= len(self._values):
            raise ScriptExhaustedError(
                f"Scripted random source exhausted after {len(self._values)} draws"
            )
        value = self._values[self._index]
        self._index += 1
        return value

    @property
    def draws_used(self) -> int:
        return self._index

    @property
    def remaining(self) -> int:
        return len(self._values) - self._index
