# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""At-bat engine.

Resolves a plate appearance pitch by pitch. Each pitch is up to four
single-draw decisions (zone, swing, contact, foul) using the batter's and
pitcher's adjusted abilities at the current pitch count. A ball put in play
produces a ``BattedBall`` descriptor for the defensive engine.

Draw order per pitch: zone, swing (skipped when the instruction decides it),
contact, foul. A ball in play then draws type, direction, strength.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from engine import commentary
from engine.abilities import adjusted_batting, adjusted_pitching
from engine.errors import UnsupportedInstructionError
from engine.probability import RandomSource, chance, clamp, resolve_rng, roll
from models import BattingAbilities, Hand, OffensiveInstruction, PitchingAbilities, PlayerInGame, RunnerState

logger = logging.getLogger(__name__)

PITCH_OUTCOMES = ("called_strike", "swinging_strike", "ball", "foul", "in_play")
AT_BAT_OUTCOMES = ("strikeout", "walk", "in_play")

BATTED_BALL_TYPES = ("ground_ball", "fly_ball", "line_drive")
DIRECTIONS = ("left", "center_left", "center", "center_right", "right")
STRENGTHS = ("weak", "medium", "strong", "very_strong")

TYPE_POWER_FACTOR = {"line_drive": 1.3, "fly_ball": 1.5, "ground_ball": 0.3}
STRENGTH_POWER_FACTOR = {"weak": 0.3, "medium": 0.7, "strong": 1.2, "very_strong": 1.8}

# Direction lanes from the pull line to the opposite line, with widths.
_PULL_LANES = ((35, "pull_line"), (20, "pull_gap"), (20, "center"), (15, "oppo_gap"), (10, "oppo_line"))
_LANE_DIRECTIONS = {
    Hand.RIGHT: {"pull_line": "left", "pull_gap": "center_left", "center": "center",
                 "oppo_gap": "center_right", "oppo_line": "right"},
    Hand.LEFT: {"pull_line": "right", "pull_gap": "center_right", "center": "center",
                "oppo_gap": "center_left", "oppo_line": "left"},
}

_BUNT_INSTRUCTIONS = (OffensiveInstruction.BUNT, OffensiveInstruction.SQUEEZE)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class BattedBall:
    """Descriptor of a ball put in play."""
    type: str  # ground_ball, fly_ball, line_drive
    direction: str  # left .. right, from the catcher's view
    strength: str  # weak, medium, strong, very_strong
    extra_base_potential: float  # 0-100

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "direction": self.direction,
            "strength": self.strength,
            "extra_base_potential": round(self.extra_base_potential, 1),
        }


@dataclass
class PitchResult:
    outcome: str
    description: str = ""


@dataclass
class PitchRecord:
    """One pitch of a plate appearance; balls/strikes are the count after it."""
    pitch_number: int
    outcome: str
    balls: int
    strikes: int
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "pitch_number": self.pitch_number,
            "outcome": self.outcome,
            "balls": self.balls,
            "strikes": self.strikes,
            "description": self.description,
        }


@dataclass
class AtBatResult:
    outcome: str  # strikeout, walk, in_play
    pitches: list[PitchRecord] = field(default_factory=list)
    batted_ball: BattedBall | None = None
    commentary: str = ""

    @property
    def final_pitch(self) -> PitchRecord | None:
        return self.pitches[-1] if self.pitches else None

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome,
            "pitches": [p.to_dict() for p in self.pitches],
            "batted_ball": self.batted_ball.to_dict() if self.batted_ball else None,
            "commentary": self.commentary,
        }


# ---------------------------------------------------------------------------
# Rates
# ---------------------------------------------------------------------------

def zone_rate(control: float) -> float:
    return clamp(50 + (control - 50) * 0.4, 25, 80)


def swing_rate(batting: BattingAbilities, movement: float, in_zone: bool, strikes: int) -> float:
    two_strikes = strikes >= 2
    if in_zone:
        rate = 65 + (batting.contact - 50) * 0.2
        if two_strikes:
            rate += 15
        return clamp(rate, 40, 95)
    rate = 30 - (batting.eye - 50) * 0.4 + (movement - 50) * 0.2
    if two_strikes:
        rate += 10
    return clamp(rate, 5, 60)


def contact_rate(batting: BattingAbilities, stuff: float, movement: float,
                 in_zone: bool, strikes: int) -> float:
    rate = (75
            + (batting.contact - 50) * 0.4
            + (batting.avoid_ks - 50) * 0.2
            - (stuff - 50) * 0.3
            - (movement - 50) * 0.2)
    if not in_zone:
        rate -= 20
    if strikes >= 2:
        rate += 5
    return clamp(rate, 30, 95)


def foul_rate(batting: BattingAbilities, stuff: float, strikes: int) -> float:
    rate = 40 + (stuff - 50) * 0.2 - (batting.contact - 50) * 0.1
    if strikes >= 2:
        rate += 10
    return clamp(rate, 20, 60)


def strikeout_chance(stuff: float, movement: float, avoid_ks: float, contact: float) -> float:
    pitcher_k = (stuff + movement) / 2
    batter_resist = (avoid_ks + contact) / 2
    return clamp(22 + (pitcher_k - batter_resist) * 0.15, 5, 40)


def walk_chance(control: float, eye: float) -> float:
    differential = ((100 - control) * 0.5 + eye * 0.5) / 2 - 50
    return clamp(8 + differential * 0.1, 2, 20)


def extra_base_potential(gap_power: float, hr_power: float, ball_type: str, strength: str) -> float:
    potential = (gap_power + hr_power) / 2
    potential *= TYPE_POWER_FACTOR[ball_type]
    potential *= STRENGTH_POWER_FACTOR[strength]
    return clamp(potential, 0, 100)


# ---------------------------------------------------------------------------
# Batted ball
# ---------------------------------------------------------------------------

def _pitching_values(pitching: PitchingAbilities | None) -> tuple[float, float, float, float]:
    if pitching is None:
        return 50.0, 50.0, 50.0, 50.0
    return pitching.stuff, pitching.movement, pitching.control, pitching.ground_ball_pct


def _batted_ball_type(ground_ball_pct: float, raw_babip: float, rng: RandomSource) -> str:
    ground = ground_ball_pct * 0.5
    liner = raw_babip * 0.25
    r = roll(rng)
    if r < ground:
        return "ground_ball"
    if r < ground + liner:
        return "line_drive"
    return "fly_ball"


def _batted_ball_direction(batter_hand: Hand, rng: RandomSource) -> str:
    r = roll(rng)
    if batter_hand == Hand.SWITCH:
        return DIRECTIONS[min(4, int(r // 20))]
    lanes = _LANE_DIRECTIONS[Hand(batter_hand)]
    edge = 0
    for width, lane in _PULL_LANES:
        edge += width
        if r < edge:
            return lanes[lane]
    return lanes["oppo_line"]


def _batted_ball_strength(contact: float, babip: float, rng: RandomSource) -> str:
    score = (contact + babip) / 2
    strong_threshold = max(20, 100 - score * 0.5)
    medium_threshold = max(50, 100 - score * 0.3)
    r = roll(rng)
    if r < strong_threshold * 0.3:
        return "very_strong"
    if r < strong_threshold:
        return "strong"
    if r < medium_threshold:
        return "medium"
    return "weak"


def generate_batted_ball(
    batter: PlayerInGame,
    batting: BattingAbilities,
    pitching: PitchingAbilities | None,
    rng: RandomSource,
) -> BattedBall:
    """Type, direction and strength draws, in that order."""
    _, _, _, ground_ball_pct = _pitching_values(pitching)
    ball_type = _batted_ball_type(ground_ball_pct, batter.batting.babip, rng)
    direction = _batted_ball_direction(batter.batter_hand, rng)
    strength = _batted_ball_strength(batting.contact, batting.babip, rng)
    ebp = extra_base_potential(batting.gap_power, batting.hr_power, ball_type, strength)
    logger.debug("batted ball %s %s %s ebp=%.1f", ball_type, direction, strength, ebp)
    return BattedBall(ball_type, direction, strength, ebp)


# ---------------------------------------------------------------------------
# Pitch resolution
# ---------------------------------------------------------------------------

def _check_instruction(instruction: OffensiveInstruction | str) -> OffensiveInstruction:
    instruction = OffensiveInstruction(instruction)
    if instruction in _BUNT_INSTRUCTIONS:
        raise UnsupportedInstructionError(instruction.value, "at-bat")
    return instruction


def _pitcher_hand(pitcher: PlayerInGame) -> Hand:
    return pitcher.pitcher_hand or Hand.RIGHT


def resolve_pitch(
    batter: PlayerInGame,
    pitcher: PlayerInGame,
    balls: int,
    strikes: int,
    pitch_count: int = 0,
    instruction: OffensiveInstruction | str = OffensiveInstruction.NORMAL_SWING,
    rng: RandomSource | None = None,
) -> PitchResult:
    """Resolve a single pitch into ball / called_strike / swinging_strike / foul / in_play."""
    instruction = _check_instruction(instruction)
    rng = resolve_rng(rng)
    batting = adjusted_batting(batter, _pitcher_hand(pitcher))
    stuff, movement, control, _ = _pitching_values(adjusted_pitching(pitcher, pitch_count))

    in_zone = chance(rng, zone_rate(control), "zone")

    if instruction == OffensiveInstruction.WAIT and strikes == 0:
        swings = False
    elif instruction == OffensiveInstruction.HIT_AND_RUN:
        swings = True
    else:
        swings = chance(rng, swing_rate(batting, movement, in_zone, strikes), "swing")

    if not swings:
        outcome = "called_strike" if in_zone else "ball"
    elif not chance(rng, contact_rate(batting, stuff, movement, in_zone, strikes), "contact"):
        outcome = "swinging_strike"
    elif chance(rng, foul_rate(batting, stuff, strikes), "foul"):
        outcome = "foul"
    else:
        outcome = "in_play"

    return PitchResult(outcome, commentary.pitch(outcome, batter.name, pitcher.name))


def resolve_at_bat(
    batter: PlayerInGame,
    pitcher: PlayerInGame,
    runners: RunnerState | None = None,
    pitch_count: int = 0,
    instruction: OffensiveInstruction | str = OffensiveInstruction.NORMAL_SWING,
    rng: RandomSource | None = None,
) -> AtBatResult:
    """Run the pitch loop until a walk, strikeout, or ball in play.

    ``pitch_count`` is the pitcher's count before this plate appearance; pitch
    numbers continue from it. Fouls with two strikes leave the count alone.
    """
    instruction = _check_instruction(instruction)
    rng = resolve_rng(rng)
    balls = 0
    strikes = 0
    pitches: list[PitchRecord] = []

    while True:
        number = pitch_count + len(pitches) + 1
        pitch = resolve_pitch(batter, pitcher, balls, strikes, number - 1, instruction, rng)

        if pitch.outcome == "ball":
            balls += 1
        elif pitch.outcome in ("called_strike", "swinging_strike"):
            strikes += 1
        elif pitch.outcome == "foul" and strikes < 2:
            strikes += 1

        pitches.append(PitchRecord(number, pitch.outcome, balls, strikes, pitch.description))

        if balls >= 4:
            result = AtBatResult("walk", pitches)
            break
        if strikes >= 3:
            result = AtBatResult("strikeout", pitches)
            break
        if pitch.outcome == "in_play":
            batting = adjusted_batting(batter, _pitcher_hand(pitcher))
            pitching = adjusted_pitching(pitcher, number)
            result = AtBatResult("in_play", pitches, generate_batted_ball(batter, batting, pitching, rng))
            break

    result.commentary = commentary.at_bat(result, batter.name)
    logger.debug("at-bat %s after %d pitches", result.outcome, len(pitches))
    return result


def judge_at_bat_outcome(
    batter: PlayerInGame,
    pitcher: PlayerInGame,
    runners: RunnerState | None = None,
    pitch_count: int = 0,
    instruction: OffensiveInstruction | str = OffensiveInstruction.NORMAL_SWING,
    rng: RandomSource | None = None,
) -> AtBatResult:
    """Quick mode: one draw decides strikeout / walk / in play, no pitch log."""
    _check_instruction(instruction)
    rng = resolve_rng(rng)
    batting = adjusted_batting(batter, _pitcher_hand(pitcher))
    pitching = adjusted_pitching(pitcher, pitch_count)
    stuff, movement, control, _ = _pitching_values(pitching)

    k = strikeout_chance(stuff, movement, batting.avoid_ks, batting.contact)
    bb = walk_chance(control, batting.eye)
    r = roll(rng)
    logger.debug("quick at-bat k=%.1f bb=%.1f roll=%.1f", k, bb, r)

    if r < k:
        result = AtBatResult("strikeout")
    elif r < k + bb:
        result = AtBatResult("walk")
    else:
        result = AtBatResult("in_play", batted_ball=generate_batted_ball(batter, batting, pitching, rng))
    result.commentary = commentary.at_bat(result, batter.name)
    return result
