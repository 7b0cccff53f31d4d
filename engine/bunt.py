# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Bunt engine: sacrifice and safety bunts, squeezes, and fielding the bunt.

An attempt resolves to one of Success(direction, strength), Foul, Strikeout,
SwingMiss or Popup. A successful bunt is then handed to
``resolve_bunt_fielding`` with the fielder picked by ``bunt_fielders``.

Draw order:
  bunt     success, then failure kind or direction + strength
  squeeze  success, direction, strength, runner
  fielding catch, [speed-weighted lead-runner check], lead-runner check, throw
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from engine import commentary
from engine.errors import PreconditionError
from engine.probability import RandomSource, chance, clamp, resolve_rng, roll
from engine.runners import (
    Advancement,
    advance_all_runners,
    forced_advancements,
    lead_runner,
)
from models import Hand, PlayerInGame, Runner, RunnerState

logger = logging.getLogger(__name__)


class BuntType(str, Enum):
    SACRIFICE = "sacrifice"
    SAFETY = "safety"


class BuntOutcome(str, Enum):
    SUCCESS = "success"
    FOUL = "foul"
    STRIKEOUT = "strikeout"
    SWING_MISS = "swing_miss"
    POPUP = "popup"


BUNT_DIRECTIONS = ("third_base_line", "pitcher_front", "first_base_line")
BUNT_STRENGTHS = ("very_weak", "weak", "medium")

SQUEEZE_STRENGTH_BONUS = {"very_weak": -20, "weak": 0, "medium": 10}
CATCH_BASE = {"very_weak": 95, "weak": 80, "medium": 60}
THROW_STRENGTH_MODIFIER = {"very_weak": 15, "weak": 5, "medium": -10}
LEAD_RUNNER_THROW_RATE = 70.0


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class BattedBunt:
    direction: str  # third_base_line, pitcher_front, first_base_line
    strength: str  # very_weak, weak, medium
    bunt_type: BuntType

    def to_dict(self) -> dict:
        return {"direction": self.direction, "strength": self.strength,
                "bunt_type": self.bunt_type.value}


@dataclass
class BuntResult:
    outcome: BuntOutcome
    batted_bunt: BattedBunt | None = None
    commentary: str = ""
    balls: int = 0
    strikes: int = 0

    @property
    def success(self) -> bool:
        return self.outcome == BuntOutcome.SUCCESS

    @property
    def is_foul(self) -> bool:
        return self.outcome in (BuntOutcome.FOUL, BuntOutcome.STRIKEOUT)

    @property
    def is_strikeout(self) -> bool:
        return self.outcome == BuntOutcome.STRIKEOUT

    @property
    def is_popup(self) -> bool:
        return self.outcome == BuntOutcome.POPUP

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.value,
            "success": self.success,
            "batted_bunt": self.batted_bunt.to_dict() if self.batted_bunt else None,
            "is_foul": self.is_foul,
            "is_strikeout": self.is_strikeout,
            "is_popup": self.is_popup,
            "count": f"{self.balls}-{self.strikes}",
            "commentary": self.commentary,
        }


@dataclass
class SqueezeResult(BuntResult):
    runner_safe: bool = False

    def to_dict(self) -> dict:
        d = super().to_dict()
        d["runner_safe"] = self.runner_safe
        return d


@dataclass
class BuntFieldingResult:
    batter_out: bool
    batter_reached_base: bool
    runners_advanced: list[Advancement] = field(default_factory=list)
    throw_target: str | None = None  # "first", "lead_runner", or None if not fielded
    target_runner: str | None = None  # base of the runner put out, or "batter"
    fielder_name: str = ""
    fielder_position: str = ""
    commentary: str = ""

    @property
    def outs_recorded(self) -> int:
        return sum(1 for a in self.runners_advanced if a.is_out)

    @property
    def runs_scored(self) -> int:
        return sum(1 for a in self.runners_advanced if a.scored)

    def to_dict(self) -> dict:
        return {
            "batter_out": self.batter_out,
            "batter_reached_base": self.batter_reached_base,
            "runners_advanced": [a.to_dict() for a in self.runners_advanced],
            "throw_target": self.throw_target,
            "target_runner": self.target_runner,
            "outs_recorded": self.outs_recorded,
            "runs_scored": self.runs_scored,
            "commentary": self.commentary,
        }


# ---------------------------------------------------------------------------
# Rates
# ---------------------------------------------------------------------------

def bunt_ability(batter: PlayerInGame, bunt_type: BuntType) -> float:
    if BuntType(bunt_type) == BuntType.SACRIFICE:
        return batter.fielding.sacrifice_bunt
    return batter.fielding.bunt_for_hit


def bunt_success_rate(ability: float, pitcher_ability: float, strikes: int = 0) -> float:
    rate = 70 + (ability - 50) * 0.4 - (pitcher_ability - 50) * 0.2
    if strikes == 2:
        rate -= 20
    return clamp(rate, 30, 95)


def squeeze_runner_rate(speed: float, baserunning: float, strength: str) -> float:
    rate = (60
            + (speed - 60) * 0.35
            + (baserunning - 50) * 0.25
            + SQUEEZE_STRENGTH_BONUS[strength])
    return clamp(rate, 20, 95)


def bunt_catch_rate(strength: str, infield_range: float) -> float:
    return CATCH_BASE[strength] * infield_range / 100


def throw_to_first_rate(batter: PlayerInGame, strength: str, fielder_arm: float) -> float:
    rate = 75 - (batter.running.speed - 60) * 0.3
    if batter.batter_hand == Hand.LEFT:
        rate -= 10
    rate += THROW_STRENGTH_MODIFIER[strength]
    rate += (fielder_arm - 50) * 0.2
    return clamp(rate, 30, 95)


def _pitcher_ability(pitcher: PlayerInGame) -> float:
    p = pitcher.pitching
    control = p.control if p and p.control else 50
    stuff = p.stuff if p and p.stuff else 50
    return (control + stuff) / 2


# ---------------------------------------------------------------------------
# Attempt
# ---------------------------------------------------------------------------

def _failure_outcome(strikes: int, rng: RandomSource) -> BuntOutcome:
    r = roll(rng)
    if strikes == 2 and r < 60:
        return BuntOutcome.STRIKEOUT
    if r < 50:
        return BuntOutcome.FOUL
    if r < 75:
        return BuntOutcome.SWING_MISS
    return BuntOutcome.POPUP


def _bunt_direction(batter_hand: Hand, bunt_type: BuntType, bunt_for_hit: float,
                    rng: RandomSource) -> str:
    r = roll(rng)
    pull_bonus = (bunt_for_hit - 50) * 0.2 if bunt_type == BuntType.SAFETY else 0.0

    if batter_hand == Hand.LEFT:
        first_line = 50 + pull_bonus
        if r < first_line:
            return "first_base_line"
        if r < first_line + 30:
            return "pitcher_front"
        return "third_base_line"
    if batter_hand == Hand.RIGHT:
        third_line = 40 + pull_bonus
        if r < third_line:
            return "third_base_line"
        if r < third_line + 35:
            return "pitcher_front"
        return "first_base_line"
    if r < 33:
        return "third_base_line"
    if r < 66:
        return "pitcher_front"
    return "first_base_line"


def _bunt_strength(ability: float, rng: RandomSource) -> str:
    medium_threshold = ability * 0.5
    weak_threshold = medium_threshold + 60
    r = roll(rng)
    if r < medium_threshold:
        return "medium"
    if r < weak_threshold:
        return "weak"
    return "very_weak"


def _judge_bunt(batter: PlayerInGame, pitcher: PlayerInGame, bunt_type: BuntType,
                strikes: int, rng: RandomSource) -> BuntResult:
    ability = bunt_ability(batter, bunt_type)
    rate = bunt_success_rate(ability, _pitcher_ability(pitcher), strikes)

    if not chance(rng, rate, "bunt"):
        return BuntResult(_failure_outcome(strikes, rng))

    direction = _bunt_direction(batter.batter_hand, bunt_type, batter.fielding.bunt_for_hit, rng)
    strength = _bunt_strength(ability, rng)
    return BuntResult(BuntOutcome.SUCCESS, BattedBunt(direction, strength, bunt_type))


def _check_count(balls: int, strikes: int) -> None:
    if not 0 <= balls <= 3 or not 0 <= strikes <= 2:
        raise PreconditionError(f"No bunt on a {balls}-{strikes} count",
                                requirement="balls 0-3 and strikes 0-2")


def resolve_bunt(
    batter: PlayerInGame,
    pitcher: PlayerInGame,
    bunt_type: BuntType | str = BuntType.SACRIFICE,
    runners: RunnerState | None = None,
    balls: int = 0,
    strikes: int = 0,
    rng: RandomSource | None = None,
) -> BuntResult:
    """Judge a bunt attempt on the given count. Two-strike fouls are strikeouts.

    ``runners`` only shapes the commentary; fielding the bunt is
    ``resolve_bunt_fielding``'s job.
    """
    bunt_type = BuntType(bunt_type)
    _check_count(balls, strikes)
    result = _judge_bunt(batter, pitcher, bunt_type, strikes, resolve_rng(rng))
    result.balls, result.strikes = balls, strikes
    result.commentary = commentary.bunt(result, batter.name, runners)
    return result


def resolve_squeeze(
    batter: PlayerInGame,
    pitcher: PlayerInGame,
    third_runner: Runner | None,
    runner_player: PlayerInGame | None,
    balls: int = 0,
    strikes: int = 0,
    rng: RandomSource | None = None,
) -> SqueezeResult:
    """A sacrifice bunt with the runner breaking from third.

    A failed bunt leaves the runner failed too, without another draw.
    """
    if third_runner is None:
        raise PreconditionError("A squeeze needs a runner on third", requirement="runner on third")
    if runner_player is None:
        raise PreconditionError("No player record for the runner on third",
                                requirement="runner player")
    _check_count(balls, strikes)
    rng = resolve_rng(rng)

    bunt = _judge_bunt(batter, pitcher, BuntType.SACRIFICE, strikes, rng)
    result = SqueezeResult(bunt.outcome, bunt.batted_bunt)
    result.balls, result.strikes = balls, strikes
    if bunt.success:
        rate = squeeze_runner_rate(runner_player.running.speed,
                                   runner_player.running.baserunning,
                                   bunt.batted_bunt.strength)
        result.runner_safe = chance(rng, rate, "squeeze runner")

    result.commentary = commentary.squeeze(result, batter.name, runner_player.name)
    return result


# ---------------------------------------------------------------------------
# Fielding the bunt
# ---------------------------------------------------------------------------

def bunt_fielders(batted_bunt: BattedBunt) -> tuple[str, str]:
    """(primary, assist) positions for where and how hard the bunt went."""
    if batted_bunt.direction == "third_base_line":
        return "3B", "P"
    if batted_bunt.direction == "pitcher_front":
        if batted_bunt.strength == "very_weak":
            return "C", "P"
        return "P", "C"
    return "1B", "P"


def find_bunt_fielders(
    batted_bunt: BattedBunt, defense: list[PlayerInGame]
) -> tuple[PlayerInGame, PlayerInGame | None]:
    primary_pos, assist_pos = bunt_fielders(batted_bunt)
    by_position = {p.position: p for p in defense}
    primary = by_position.get(primary_pos)
    if primary is None:
        raise PreconditionError(f"No fielder at {primary_pos} to field the bunt",
                                requirement=f"fielder at {primary_pos}")
    return primary, by_position.get(assist_pos)


def _throw_target(runners: RunnerState, outs: int, bunt_type: BuntType,
                  batter_speed: float, rng: RandomSource) -> str:
    if bunt_type == BuntType.SAFETY or outs == 2 or runners.is_empty:
        return "first"
    if batter_speed > 70 and rng.random() > 0.6:
        return "lead_runner"
    if rng.random() > 0.7:
        return "lead_runner"
    return "first"


def _not_fielded(fielder: PlayerInGame, runners: RunnerState, throw_target: str | None) -> BuntFieldingResult:
    return BuntFieldingResult(
        batter_out=False,
        batter_reached_base=True,
        runners_advanced=[Advancement("batter", "first"), *advance_all_runners(runners)],
        throw_target=throw_target,
        fielder_name=fielder.name,
        fielder_position=fielder.position,
    )


def resolve_bunt_fielding(
    batted_bunt: BattedBunt,
    batter: PlayerInGame,
    fielder: PlayerInGame | None,
    assist_fielder: PlayerInGame | None,
    runners: RunnerState,
    outs: int,
    rng: RandomSource | None = None,
) -> BuntFieldingResult:
    """Resolve the defense on a bunt that was put down.

    A bunt that is not cleanly fielded puts the batter on first and moves
    every runner up a base.
    """
    if fielder is None:
        raise PreconditionError("No fielder available for the bunt", requirement="bunt fielder")
    rng = resolve_rng(rng)
    strength = batted_bunt.strength

    if not chance(rng, bunt_catch_rate(strength, fielder.fielding.infield_range), "bunt catch"):
        result = _not_fielded(fielder, runners, None)
    else:
        target = _throw_target(runners, outs, batted_bunt.bunt_type, batter.running.speed, rng)
        if target == "first":
            rate = throw_to_first_rate(batter, strength, fielder.fielding.infield_arm)
            batter_out = chance(rng, rate, "bunt throw to first")
            result = BuntFieldingResult(
                batter_out=batter_out,
                batter_reached_base=not batter_out,
                runners_advanced=[Advancement("batter", "out" if batter_out else "first"),
                                  *advance_all_runners(runners)],
                throw_target="first",
                target_runner="batter" if batter_out else None,
                fielder_name=fielder.name,
                fielder_position=fielder.position,
            )
        else:
            lead = lead_runner(runners)
            if chance(rng, LEAD_RUNNER_THROW_RATE, "bunt throw to lead runner"):
                # Runners forced by the batter move up into bases the out vacates.
                forced = [a for a in forced_advancements(runners) if a.from_base != lead]
                result = BuntFieldingResult(
                    batter_out=False,
                    batter_reached_base=True,
                    runners_advanced=[Advancement("batter", "first"),
                                      Advancement(lead, "out"),
                                      *forced],
                    throw_target="lead_runner",
                    target_runner=lead,
                    fielder_name=fielder.name,
                    fielder_position=fielder.position,
                )
            else:
                result = _not_fielded(fielder, runners, "lead_runner")

    result.commentary = commentary.bunt_fielding(result, batter.name, runners)
    logger.debug("bunt fielding target=%s batter_out=%s", result.throw_target, result.batter_out)
    return result
