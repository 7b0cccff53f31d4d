# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Defensive engine: turns a batted ball into an out, a hit, or an error.

The fielder is picked from the (shift-adjusted) direction of the ball, then
the ball type decides how the play is judged. Hits hand off to the
base-running engine for runner movement.

Draw order:
  ground ball  catch, [guaranteed hit], [infield hit], [very_strong double],
               error, [double play]
  fly ball     catch, [extra-base roll on an outfield miss], error, [tag-up]
  line drive   catch, extra-base roll on a miss, error
  then, for a single or double the shift leaves a gap for, one stretch roll
  then base running for singles and doubles
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from engine import commentary
from engine.base_running import basic_advancement, double_advancement, single_advancement
from engine.errors import PreconditionError
from engine.probability import RandomSource, chance, clamp, resolve_rng, roll
from engine.runners import Advancement, advance_all_runners, outs_in, runs_in
from engine.shift import (
    air_ball_shift_effect,
    average_defensive_range,
    ball_side,
    extra_base_shift_effect,
    ground_ball_shift_effect,
    shift_was_effective,
)
from models import DefensiveShift, PlayerInGame, RunnerState

logger = logging.getLogger(__name__)


class DefensiveOutcome(str, Enum):
    SINGLE = "single"
    DOUBLE = "double"
    TRIPLE = "triple"
    HOME_RUN = "home_run"
    OUT = "out"
    DOUBLE_PLAY = "double_play"
    ERROR = "error"
    SAC_FLY = "sac_fly"


class ErrorType(str, Enum):
    FIELDING = "fielding"
    THROWING = "throwing"
    DROPPED_FLY = "dropped_fly"


PRIORITY_POSITIONS = {
    "left": ("LF", "3B", "SS", "CF"),
    "center_left": ("CF", "LF", "SS", "2B"),
    "center": ("CF", "2B", "SS", "P"),
    "center_right": ("CF", "RF", "2B", "1B"),
    "right": ("RF", "1B", "2B", "CF"),
}

GROUND_BALL_INFIELD = ("1B", "2B", "3B", "SS", "P")
FLY_BALL_INFIELD = ("1B", "2B", "3B", "SS")
OUTFIELD = ("LF", "CF", "RF")

GROUND_BALL_ASSIST = {"SS": "2B", "3B": "2B", "2B": "SS", "1B": "SS", "P": "1B"}
FLY_BALL_RELAY = {"LF": "SS", "CF": "2B", "RF": "2B"}

GROUND_BALL_CATCH = {"weak": 90, "medium": 70, "strong": 45, "very_strong": 20}
FLY_BALL_CATCH = {"weak": 95, "medium": 85, "strong": 70, "very_strong": 50}
LINE_DRIVE_CATCH = {"weak": 75, "medium": 60, "strong": 45, "very_strong": 30}
DOUBLE_PLAY_STRENGTH = {"weak": 1.5, "medium": 1.0, "strong": 0.6, "very_strong": 0.3}
TAG_UP_DEPTH = {"weak": -30, "medium": 0, "strong": 15, "very_strong": 25}

GROUND_BALL_ERROR_WEIGHT = 0.15
FLY_BALL_ERROR_WEIGHT = 0.08
LINE_DRIVE_ERROR_WEIGHT = 0.02

_OUT_OUTCOMES = (DefensiveOutcome.OUT, DefensiveOutcome.DOUBLE_PLAY, DefensiveOutcome.SAC_FLY)
_HIT_OUTCOMES = (DefensiveOutcome.SINGLE, DefensiveOutcome.DOUBLE, DefensiveOutcome.TRIPLE)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class FielderAssignment:
    fielder: PlayerInGame
    position: str
    assist: PlayerInGame | None = None


@dataclass
class DefensiveResult:
    outcome: DefensiveOutcome
    fielder_name: str = ""
    fielder_position: str | None = None
    assist_name: str = ""
    error_type: ErrorType | None = None
    runners_advanced: list[Advancement] = field(default_factory=list)
    shift_effective: bool = False
    commentary: str = ""

    @property
    def category(self) -> str:
        """home_run / hit / out / error."""
        if self.outcome == DefensiveOutcome.HOME_RUN:
            return "home_run"
        if self.outcome in _HIT_OUTCOMES:
            return "hit"
        if self.outcome in _OUT_OUTCOMES:
            return "out"
        return "error"

    @property
    def runs_scored(self) -> int:
        return runs_in(self.runners_advanced)

    @property
    def outs_recorded(self) -> int:
        return outs_in(self.runners_advanced)

    @property
    def batter_out(self) -> bool:
        return any(a.from_base == "batter" and a.is_out for a in self.runners_advanced)

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.value,
            "category": self.category,
            "fielder": self.fielder_name,
            "fielder_position": self.fielder_position,
            "assist_by": self.assist_name or None,
            "error_type": self.error_type.value if self.error_type else None,
            "runners_advanced": [a.to_dict() for a in self.runners_advanced],
            "runs_scored": self.runs_scored,
            "outs_recorded": self.outs_recorded,
            "batter_out": self.batter_out,
            "commentary": self.commentary,
        }


# ---------------------------------------------------------------------------
# Fielder assignment
# ---------------------------------------------------------------------------

def shifted_direction(direction: str, shift: DefensiveShift) -> str:
    """Where the ball goes relative to where the fielders now stand."""
    shift = DefensiveShift(shift)
    if shift == DefensiveShift.PULL_RIGHT:
        return {"left": "center_left", "center_left": "center"}.get(direction, direction)
    if shift == DefensiveShift.PULL_LEFT:
        return {"right": "center_right", "center_right": "center"}.get(direction, direction)
    if shift == DefensiveShift.EXTREME_SHIFT:
        return "center"
    return direction


def priority_positions(direction: str, ball_type: str) -> list[str]:
    positions = PRIORITY_POSITIONS[direction]
    if ball_type == "ground_ball":
        return ([p for p in positions if p in GROUND_BALL_INFIELD]
                + [p for p in positions if p in OUTFIELD])
    if ball_type == "fly_ball":
        return ([p for p in positions if p in OUTFIELD]
                + [p for p in positions if p in FLY_BALL_INFIELD])
    return list(positions)


def _assist_position(position: str, ball_type: str) -> str | None:
    if ball_type == "ground_ball":
        return GROUND_BALL_ASSIST.get(position)
    if ball_type == "fly_ball":
        return FLY_BALL_RELAY.get(position)
    return None


def find_fielder(batted_ball, defense: list[PlayerInGame],
                 shift: DefensiveShift = DefensiveShift.NORMAL) -> FielderAssignment:
    """First fielder on the priority list for the ball's shifted direction."""
    direction = shifted_direction(batted_ball.direction, shift)
    by_position = {p.position: p for p in defense}
    for position in priority_positions(direction, batted_ball.type):
        fielder = by_position.get(position)
        if fielder is None:
            continue
        assist_pos = _assist_position(position, batted_ball.type)
        assist = by_position.get(assist_pos) if assist_pos else None
        return FielderAssignment(fielder, position, assist)
    raise PreconditionError(
        f"No fielder covers a {batted_ball.type} to {direction}",
        requirement="fielder for the batted ball",
    )


# ---------------------------------------------------------------------------
# Judgments
# ---------------------------------------------------------------------------

def double_play_rate(fielder: PlayerInGame, assist: PlayerInGame, strength: str) -> float:
    avg_turn = (fielder.fielding.turn_dp + assist.fielding.turn_dp) / 2
    return clamp((35 + (avg_turn - 50) * 0.3) * DOUBLE_PLAY_STRENGTH[strength], 10, 70)


def tag_up_rate(outfield_arm: float, strength: str) -> float:
    return clamp(60 - (outfield_arm - 50) * 0.6 + TAG_UP_DEPTH[strength], 20, 95)


def _ground_ball(batted_ball, assignment: FielderAssignment, runners: RunnerState, outs: int,
                 shift: DefensiveShift, side: str, defense: list[PlayerInGame],
                 rng: RandomSource) -> tuple[DefensiveOutcome, ErrorType | None]:
    fielder = assignment.fielder
    strength = batted_ball.strength
    effect = ground_ball_shift_effect(shift, side, average_defensive_range(defense, infield=True))

    catch = GROUND_BALL_CATCH[strength] * fielder.fielding.infield_range / 100
    catch += effect.out_probability
    r = roll(rng)
    logger.debug("ground ball catch=%.1f roll=%.1f", catch, r)

    if effect.guaranteed_hit > 0 and chance(rng, effect.guaranteed_hit, "shift hole"):
        return DefensiveOutcome.SINGLE, None

    through = r > catch
    if not through and effect.infield_hit_rate > 0:
        through = chance(rng, effect.infield_hit_rate, "infield hit")
    if through:
        if strength == "very_strong" and rng.random() > 0.7:
            return DefensiveOutcome.DOUBLE, None
        return DefensiveOutcome.SINGLE, None

    if chance(rng, (100 - fielder.fielding.infield_error) * GROUND_BALL_ERROR_WEIGHT, "ground ball error"):
        return DefensiveOutcome.ERROR, ErrorType.FIELDING

    if runners.first is not None and outs < 2 and assignment.assist is not None:
        if chance(rng, double_play_rate(fielder, assignment.assist, strength), "double play"):
            return DefensiveOutcome.DOUBLE_PLAY, None
    return DefensiveOutcome.OUT, None


def _is_infield(position: str) -> bool:
    return position in GROUND_BALL_INFIELD


def _fly_ball(batted_ball, assignment: FielderAssignment, runners: RunnerState, outs: int,
              shift: DefensiveShift, side: str, defense: list[PlayerInGame],
              rng: RandomSource) -> tuple[DefensiveOutcome, ErrorType | None]:
    fielder = assignment.fielder
    strength = batted_ball.strength
    ebp = batted_ball.extra_base_potential
    infield = _is_infield(assignment.position)

    if not infield:
        if strength == "very_strong" and ebp > 80:
            return DefensiveOutcome.HOME_RUN, None
        if strength == "very_strong" and ebp > 65:
            return DefensiveOutcome.TRIPLE, None
        if strength in ("strong", "very_strong") and ebp > 45:
            return DefensiveOutcome.DOUBLE, None

    f = fielder.fielding
    field_range = f.infield_range if infield else f.outfield_range
    sure_hands = f.infield_error if infield else f.outfield_error
    effect = air_ball_shift_effect(shift, "fly", infield, average_defensive_range(defense, infield), side)

    catch = min(99, FLY_BALL_CATCH[strength] * (field_range + effect.range_modifier) / 100)
    catch += effect.catch_modifier
    r = roll(rng)
    logger.debug("fly ball catch=%.1f roll=%.1f", catch, r)

    if r > catch:
        if not infield:
            extra = roll(rng) + effect.extra_base_modifier
            if strength == "very_strong" or extra > 70:
                return DefensiveOutcome.TRIPLE, None
            if strength == "strong" or extra > 40:
                return DefensiveOutcome.DOUBLE, None
        return DefensiveOutcome.SINGLE, None

    if chance(rng, (100 - sure_hands) * FLY_BALL_ERROR_WEIGHT, "dropped fly"):
        return DefensiveOutcome.ERROR, ErrorType.DROPPED_FLY

    if runners.third is not None and outs < 2 and not infield:
        return DefensiveOutcome.SAC_FLY, None
    return DefensiveOutcome.OUT, None


def _line_drive(batted_ball, assignment: FielderAssignment, runners: RunnerState, outs: int,
                shift: DefensiveShift, side: str, defense: list[PlayerInGame],
                rng: RandomSource) -> tuple[DefensiveOutcome, ErrorType | None]:
    fielder = assignment.fielder
    strength = batted_ball.strength
    ebp = batted_ball.extra_base_potential
    infield = _is_infield(assignment.position)

    f = fielder.fielding
    field_range = f.infield_range if infield else f.outfield_range
    sure_hands = f.infield_error if infield else f.outfield_error
    effect = air_ball_shift_effect(shift, "liner", infield, average_defensive_range(defense, infield), side)

    catch = LINE_DRIVE_CATCH[strength] * field_range / 100 + effect.catch_modifier
    r = roll(rng)
    logger.debug("line drive catch=%.1f roll=%.1f", catch, r)

    if r > catch:
        extra = roll(rng) + effect.extra_base_modifier
        if not infield:
            if strength == "very_strong" and ebp > 70:
                return DefensiveOutcome.TRIPLE, None
            if strength in ("strong", "very_strong") and ebp > 50:
                return DefensiveOutcome.DOUBLE, None
        elif strength == "very_strong" and extra > 70:
            return DefensiveOutcome.DOUBLE, None
        return DefensiveOutcome.SINGLE, None

    if chance(rng, (100 - sure_hands) * LINE_DRIVE_ERROR_WEIGHT, "line drive error"):
        return DefensiveOutcome.ERROR, ErrorType.FIELDING
    return DefensiveOutcome.OUT, None


_JUDGES = {
    "ground_ball": _ground_ball,
    "fly_ball": _fly_ball,
    "line_drive": _line_drive,
}


# ---------------------------------------------------------------------------
# Runner movement
# ---------------------------------------------------------------------------

def error_advancements(error_type: ErrorType | None, runners: RunnerState) -> list[Advancement]:
    """A throwing error gives everyone two bases; other errors give one."""
    if error_type == ErrorType.THROWING:
        moves = [Advancement("batter", "second")]
        for base, to in (("third", "home"), ("second", "home"), ("first", "third")):
            if runners.get(base) is not None:
                moves.append(Advancement(base, to))
        return moves
    return [Advancement("batter", "first"), *advance_all_runners(runners)]


def double_play_advancements(runners: RunnerState, outs: int) -> list[Advancement]:
    """Batter and the runner from first are out; the rest move up if they can."""
    moves = [Advancement("batter", "out")]
    if runners.first is not None:
        moves.append(Advancement("first", "out"))
    third_scores = runners.third is not None and outs == 0
    if third_scores:
        moves.append(Advancement("third", "home"))
    if runners.second is not None and (runners.third is None or third_scores):
        moves.append(Advancement("second", "third"))
    return moves


def sac_fly_advancements(runners: RunnerState, fielder: PlayerInGame, strength: str,
                         rng: RandomSource) -> list[Advancement]:
    moves = [Advancement("batter", "out")]
    if runners.third is not None:
        if chance(rng, tag_up_rate(fielder.fielding.outfield_arm, strength), "tag up"):
            moves.append(Advancement("third", "home", is_tag_up=True))
    return moves


_STRETCH = {DefensiveOutcome.SINGLE: DefensiveOutcome.DOUBLE, DefensiveOutcome.DOUBLE: DefensiveOutcome.TRIPLE}


def _stretch(outcome: DefensiveOutcome, shift: DefensiveShift, side: str,
             rng: RandomSource) -> DefensiveOutcome:
    """A hit into a gap the alignment left open may go for one more base."""
    longer = _STRETCH[outcome]
    rate = extra_base_shift_effect(shift, longer.value, side).extra_base_rate
    if rate > 0 and chance(rng, rate, "shift extra base"):
        logger.debug("%s stretched to %s against %s", outcome.value, longer.value, shift.value)
        return longer
    return outcome


def _advance_bonus(shift: DefensiveShift, outcome: DefensiveOutcome, side: str) -> float:
    return extra_base_shift_effect(shift, outcome.value, side).advance_runner


def resolve_ball_in_play(
    batted_ball,
    batter: PlayerInGame,
    runners: RunnerState,
    outs: int,
    defense: list[PlayerInGame],
    shift: DefensiveShift | str = DefensiveShift.NORMAL,
    rng: RandomSource | None = None,
) -> DefensiveResult:
    """Judge a ball in play and report where everyone ends up."""
    shift = DefensiveShift(shift)
    rng = resolve_rng(rng)
    assignment = find_fielder(batted_ball, defense, shift)
    side = ball_side(batter.batter_hand, batted_ball.direction)

    judge = _JUDGES.get(batted_ball.type)
    if judge is None:
        raise ValueError(f"Unknown batted ball type: {batted_ball.type}")
    outcome, error_type = judge(batted_ball, assignment, runners, outs, shift, side, defense, rng)
    if outcome in _STRETCH:
        outcome = _stretch(outcome, shift, side, rng)
    logger.debug("ball in play %s by %s", outcome.value, assignment.position)

    fielder = assignment.fielder
    result = DefensiveResult(
        outcome=outcome,
        fielder_name=fielder.name,
        fielder_position=assignment.position,
        assist_name=assignment.assist.name if assignment.assist else "",
        error_type=error_type,
    )

    running_text = ""
    if outcome in (DefensiveOutcome.HOME_RUN, DefensiveOutcome.TRIPLE):
        running = basic_advancement(outcome.value, runners, batter)
        result.runners_advanced = running.advancements
        running_text = running.commentary
    elif outcome == DefensiveOutcome.DOUBLE:
        running = double_advancement(runners, batter, batted_ball, fielder, assignment.assist, rng,
                                     advance_bonus=_advance_bonus(shift, outcome, side))
        result.runners_advanced = running.advancements
        running_text = running.commentary
    elif outcome == DefensiveOutcome.SINGLE:
        running = single_advancement(runners, batter, batted_ball, fielder, rng,
                                     advance_bonus=_advance_bonus(shift, outcome, side))
        result.runners_advanced = running.advancements
        running_text = running.commentary
    elif outcome == DefensiveOutcome.OUT:
        result.runners_advanced = [Advancement("batter", "out")]
    elif outcome == DefensiveOutcome.DOUBLE_PLAY:
        result.runners_advanced = double_play_advancements(runners, outs)
    elif outcome == DefensiveOutcome.SAC_FLY:
        result.runners_advanced = sac_fly_advancements(runners, fielder, batted_ball.strength, rng)
    else:
        result.runners_advanced = error_advancements(error_type, runners)

    result.shift_effective = shift_was_effective(shift, outcome.value, side)
    lines = [
        commentary.defensive_play(result, batter.name),
        running_text,
        commentary.shift_effect(shift, outcome.value, fielder.name, result.shift_effective, side),
    ]
    result.commentary = " ".join(line for line in lines if line)
    return result
