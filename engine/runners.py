# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Runner-state transition rules shared by every engine.

Engines never move runners themselves. They report an ordered list of
``Advancement`` intents; the caller turns that into a new ``RunnerState``
with ``apply_advancements``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Literal

from engine.errors import InvalidAdvancementError
from models import Runner, RunnerState

logger = logging.getLogger(__name__)

BASES = ("first", "second", "third")

FromBase = Literal["batter", "first", "second", "third"]
ToBase = Literal["first", "second", "third", "home", "out"]

_NEXT_BASE = {"batter": "first", "first": "second", "second": "third", "third": "home"}


@dataclass
class Advancement:
    """Where one runner (or the batter) ends up after a play."""
    from_base: FromBase
    to: ToBase
    is_tag_up: bool = False
    is_extra_base: bool = False
    was_thrown: bool = False
    description: str = ""

    @property
    def scored(self) -> bool:
        return self.to == "home"

    @property
    def is_out(self) -> bool:
        return self.to == "out"

    def to_dict(self) -> dict:
        d = {"from": self.from_base, "to": self.to}
        if self.is_tag_up:
            d["is_tag_up"] = True
        if self.is_extra_base:
            d["is_extra_base"] = True
        if self.was_thrown:
            d["was_thrown"] = True
        if self.description:
            d["description"] = self.description
        return d


@dataclass
class TransitionResult:
    runners: RunnerState
    runs: int
    outs: int
    scorers: list[Runner]


def next_base(base: str) -> str:
    try:
        return _NEXT_BASE[base]
    except KeyError:
        raise ValueError(f"No base follows '{base}'") from None


def advance_all_runners(runners: RunnerState) -> list[Advancement]:
    """Every runner moves up one base, lead runner first."""
    return [Advancement(base, next_base(base))
            for base in reversed(BASES) if runners.get(base) is not None]


def forced_advancements(runners: RunnerState) -> list[Advancement]:
    """Runners forced by the batter reaching first, lead runner first."""
    forced = []
    for base in BASES:
        if runners.get(base) is None:
            break
        forced.append(Advancement(base, next_base(base)))
    return list(reversed(forced))


def lead_runner(runners: RunnerState) -> str | None:
    """Base of the runner closest to home."""
    for base in reversed(BASES):
        if runners.get(base) is not None:
            return base
    return None


def runs_in(advancements: list[Advancement]) -> int:
    return sum(1 for a in advancements if a.scored)


def outs_in(advancements: list[Advancement]) -> int:
    return sum(1 for a in advancements if a.is_out)


def apply_advancements(
    runners: RunnerState,
    advancements: list[Advancement],
    batter: Runner | None = None,
) -> TransitionResult:
    """Apply advancement intents and return the resulting state.

    Runners not named in the list stay where they are. Raises
    InvalidAdvancementError for moves from empty bases, a batter move without
    a batter, or two runners finishing on one base.
    """
    origin: dict[str, Runner] = {b: runners.get(b) for b in BASES if runners.get(b) is not None}
    placed: dict[str, Runner] = {}
    moved: set[str] = set()
    runs = 0
    outs = 0
    scorers: list[Runner] = []

    for adv in advancements:
        if adv.from_base in moved:
            raise InvalidAdvancementError(f"Runner from {adv.from_base} moved twice")
        if adv.from_base == "batter":
            if batter is None:
                raise InvalidAdvancementError("Batter advancement given without a batter")
            runner = batter
        else:
            runner = origin.get(adv.from_base)
            if runner is None:
                raise InvalidAdvancementError(f"No runner on {adv.from_base} to advance")
        moved.add(adv.from_base)

        if adv.to == "home":
            runs += 1
            scorers.append(runner)
        elif adv.to == "out":
            outs += 1
        else:
            if adv.to in placed:
                raise InvalidAdvancementError(f"Two runners finish on {adv.to}")
            placed[adv.to] = runner

    for base, runner in origin.items():
        if base in moved:
            continue
        if base in placed:
            raise InvalidAdvancementError(
                f"{placed[base].player_name} lands on {base}, still occupied by {runner.player_name}"
            )
        placed[base] = runner

    logger.debug("bases %s -> runs=%d outs=%d", runners.bases_string(), runs, outs)
    return TransitionResult(
        runners=RunnerState(**placed),
        runs=runs,
        outs=outs,
        scorers=scorers,
    )
