# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Ability model: archetypes, situational modifiers, and overall ratings.

Derived batting and pitching values are capped at 100 but have no explicit
floor. Callers feeding very low ratings through several multipliers can see
values below 1; the probability formulas downstream accept that.
"""

from __future__ import annotations

from enum import Enum

from engine.errors import PreconditionError
from models import (
    BattingAbilities,
    Condition,
    FatigueLevel,
    Hand,
    PitchingAbilities,
    Player,
)


class BatterType(str, Enum):
    POWER = "power"
    CONTACT = "contact"
    BALANCED = "balanced"
    SPEEDSTER = "speedster"
    SLAP = "slap"


class PitcherType(str, Enum):
    POWER = "power"
    CONTROL = "control"
    GROUNDBALL = "groundball"
    BALANCED = "balanced"


CONDITION_MODIFIERS = {
    Condition.EXCELLENT: 1.10,
    Condition.GOOD: 1.05,
    Condition.NORMAL: 1.00,
    Condition.POOR: 0.95,
    Condition.TERRIBLE: 0.85,
}

FATIGUE_MODIFIERS = {
    FatigueLevel.FRESH: 1.00,
    FatigueLevel.NORMAL: 0.98,
    FatigueLevel.TIRED: 0.92,
    FatigueLevel.EXHAUSTED: 0.80,
}

CONDITION_LABELS = {
    Condition.EXCELLENT: "On fire",
    Condition.GOOD: "Hot",
    Condition.NORMAL: "Steady",
    Condition.POOR: "Cold",
    Condition.TERRIBLE: "Ice cold",
}

FATIGUE_LABELS = {
    FatigueLevel.FRESH: "Fresh",
    FatigueLevel.NORMAL: "Normal",
    FatigueLevel.TIRED: "Tired",
    FatigueLevel.EXHAUSTED: "Exhausted",
}

# (minimum rating, grade, display color), highest tier first
GRADE_TIERS = [
    (90, "S", "#ff4444"),
    (80, "A", "#ff8800"),
    (70, "B", "#ffcc00"),
    (60, "C", "#88cc00"),
    (50, "D", "#00cc88"),
    (40, "E", "#0088cc"),
]
LOWEST_GRADE = ("F", "#888888")

VS_RATING_BASELINE = 65.0
MATCHUP_SCALED = ("contact", "babip", "gap_power", "hr_power", "eye", "avoid_ks")
FATIGUE_SCALED = ("stuff", "movement", "control", "velocity", "hold_runners")


# ---------------------------------------------------------------------------
# Archetypes
# ---------------------------------------------------------------------------

def classify_batter(batting: BattingAbilities) -> BatterType:
    power = batting.hr_power + batting.gap_power
    contact = batting.contact + batting.avoid_ks

    if power >= 140 and batting.hr_power >= 70:
        return BatterType.POWER
    if batting.babip >= 70 and contact >= 130:
        return BatterType.SPEEDSTER
    if contact >= 140 and power < 120:
        return BatterType.CONTACT
    if batting.contact >= 70 and power < 100:
        return BatterType.SLAP
    return BatterType.BALANCED


def classify_pitcher(pitching: PitchingAbilities | None) -> PitcherType:
    if pitching is None:
        raise PreconditionError("Cannot classify a player without pitching abilities",
                                requirement="pitching abilities")
    power = pitching.stuff + pitching.velocity

    if power >= 150 and pitching.velocity >= 75:
        return PitcherType.POWER
    if pitching.ground_ball_pct >= 65:
        return PitcherType.GROUNDBALL
    if pitching.control >= 70 and power < 140:
        return PitcherType.CONTROL
    return PitcherType.BALANCED


# ---------------------------------------------------------------------------
# Situational modifiers
# ---------------------------------------------------------------------------

def condition_modifier(condition: Condition) -> float:
    return CONDITION_MODIFIERS[Condition(condition)]


def fatigue_modifier(fatigue: FatigueLevel) -> float:
    return FATIGUE_MODIFIERS[FatigueLevel(fatigue)]


def pitch_count_fatigue(stamina: float, pitch_count: int) -> float:
    """Multiplier for cumulative pitches thrown.

    No penalty up to a stamina-scaled threshold; past it each pitch costs
    0.3% down to a floor of 70%.
    """
    threshold = 60 + (stamina - 50) * 0.4
    if pitch_count <= threshold:
        return 1.0
    excess = pitch_count - threshold
    return max(0.7, 1.0 - excess * 0.003)


def hand_matchup_modifier(batter_hand: Hand, pitcher_hand: Hand) -> float:
    """Platoon multiplier: same hand favors the pitcher, opposite the batter."""
    if batter_hand == Hand.SWITCH:
        return 1.05
    if batter_hand == pitcher_hand:
        return 0.9
    return 1.1


def apply_hand_matchup(batting: BattingAbilities, pitcher_hand: Hand) -> BattingAbilities:
    """Scale hitting by the batter's split rating against this pitcher's hand."""
    vs_rating = batting.vs_lhp if pitcher_hand == Hand.LEFT else batting.vs_rhp
    modifier = vs_rating / VS_RATING_BASELINE
    return batting.model_copy(update={
        name: min(100.0, getattr(batting, name) * modifier) for name in MATCHUP_SCALED
    })


def adjusted_batting(player: Player, pitcher_hand: Hand | None = None) -> BattingAbilities:
    """Batting abilities after handedness split, platoon, condition and fatigue."""
    pitcher_hand = pitcher_hand or Hand.RIGHT
    batting = apply_hand_matchup(player.batting, pitcher_hand)
    factor = (hand_matchup_modifier(player.batter_hand, pitcher_hand)
              * condition_modifier(player.condition)
              * fatigue_modifier(player.fatigue))
    return batting.model_copy(update={
        name: min(100.0, getattr(batting, name) * factor) for name in MATCHUP_SCALED
    })


def adjusted_pitching(player: Player, pitch_count: int = 0) -> PitchingAbilities | None:
    """Pitching abilities after condition, fatigue and pitch count.

    Stamina and ground-ball tendency are left as rated.
    """
    pitching = player.pitching
    if pitching is None:
        return None
    factor = (condition_modifier(player.condition)
              * fatigue_modifier(player.fatigue)
              * pitch_count_fatigue(pitching.stamina, pitch_count))
    return pitching.model_copy(update={
        name: min(100.0, getattr(pitching, name) * factor) for name in FATIGUE_SCALED
    })


# ---------------------------------------------------------------------------
# Overall ratings
# ---------------------------------------------------------------------------

def batter_overall(player: Player) -> int:
    b = player.batting
    batting = (
        b.contact * 0.2
        + b.babip * 0.15
        + b.gap_power * 0.15
        + b.hr_power * 0.15
        + b.eye * 0.15
        + b.avoid_ks * 0.1
        + (b.vs_lhp + b.vs_rhp) / 2 * 0.1
    )

    r = player.running
    running = r.speed * 0.4 + r.stealing_ability * 0.3 + r.baserunning * 0.3

    f = player.fielding
    if player.position in ("C", "1B", "2B", "3B", "SS"):
        fielding = (f.infield_range * 0.3 + f.infield_error * 0.3
                    + f.infield_arm * 0.2 + f.turn_dp * 0.2)
    else:
        fielding = f.outfield_range * 0.4 + f.outfield_error * 0.4 + f.outfield_arm * 0.2

    return round(batting * 0.5 + running * 0.2 + fielding * 0.3)


def pitcher_overall(player: Player) -> int:
    p = player.pitching
    if p is None:
        return 0
    pitching = (
        p.stuff * 0.25
        + p.movement * 0.2
        + p.control * 0.25
        + p.stamina * 0.15
        + p.velocity * 0.1
        + p.hold_runners * 0.05
    )
    return round(pitching * 0.9 + player.fielding.infield_range * 0.1)


def overall_rating(player: Player) -> int:
    if player.position == "P" and player.pitching is not None:
        return pitcher_overall(player)
    return batter_overall(player)


def rating_grade(value: float) -> str:
    for minimum, grade, _ in GRADE_TIERS:
        if value >= minimum:
            return grade
    return LOWEST_GRADE[0]


def grade_color(value: float) -> str:
    for minimum, _, color in GRADE_TIERS:
        if value >= minimum:
            return color
    return LOWEST_GRADE[1]


def condition_label(condition: Condition) -> str:
    return CONDITION_LABELS[Condition(condition)]


def fatigue_label(fatigue: FatigueLevel) -> str:
    return FATIGUE_LABELS[FatigueLevel(fatigue)]
