# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Defensive shift model.

Translates a defensive alignment into modifiers on the defensive engine's
catch, hit and extra-base rates, scaled by how much range the affected
fielders have (70 is the neutral team average).
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field

from models import INFIELD_POSITIONS, OUTFIELD_POSITIONS, DefensiveShift, Hand, PlayerInGame

NEUTRAL_TEAM_RANGE = 70.0

_PULL_SHIFTS = (DefensiveShift.PULL_RIGHT, DefensiveShift.PULL_LEFT, DefensiveShift.EXTREME_SHIFT)


@dataclass(frozen=True)
class ShiftModifiers:
    # ground balls
    pull_ground_ball: float = 0
    pull_ground_ball_out: float = 0
    opposite_ground_ball: float = 0
    opposite_guaranteed_hit: float = 0
    ground_ball_speed: float = 0
    infield_hit_rate: float = 0
    # fly balls and liners
    outfield_range: float = 0
    outfield_catch: float = 0
    infield_fly_range: float = 0
    infield_fly_extra_base: float = 0
    pull_liner_catch: float = 0
    opposite_liner_catch: float = 0
    # hits and runners
    extra_base_hit_rate: float = 0
    opposite_double_rate: float = 0
    opposite_triple_rate: float = 0
    triple_rate: float = 0
    advance_runner_rate: float = 0
    opposite_advance_runner: float = 0


_PULL_SHIFT = ShiftModifiers(
    pull_ground_ball=30, opposite_ground_ball=40,
    pull_liner_catch=15, opposite_liner_catch=-20,
    opposite_double_rate=20, opposite_advance_runner=20,
)

SHIFT_MODIFIERS: dict[DefensiveShift, ShiftModifiers] = {
    DefensiveShift.NORMAL: ShiftModifiers(),
    DefensiveShift.PULL_RIGHT: _PULL_SHIFT,
    DefensiveShift.PULL_LEFT: _PULL_SHIFT,
    DefensiveShift.EXTREME_SHIFT: ShiftModifiers(
        pull_ground_ball=50,
        pull_ground_ball_out=20,
        opposite_ground_ball=60,
        opposite_guaranteed_hit=30,
        pull_liner_catch=25,
        opposite_liner_catch=-40,
        opposite_double_rate=35,
        opposite_triple_rate=50,
        opposite_advance_runner=20,
    ),
    DefensiveShift.INFIELD_IN: ShiftModifiers(
        ground_ball_speed=20,
        outfield_range=-10,
        extra_base_hit_rate=10,
        advance_runner_rate=15,
        opposite_advance_runner=20,
    ),
    DefensiveShift.INFIELD_BACK: ShiftModifiers(
        infield_hit_rate=20,
        outfield_range=20,
        outfield_catch=15,
        infield_fly_range=-10,
        infield_fly_extra_base=15,
        triple_rate=-20,
        opposite_advance_runner=20,
    ),
}


@dataclass
class GroundBallShiftEffect:
    infield_hit_rate: float = 0.0
    out_probability: float = 0.0
    guaranteed_hit: float = 0.0


@dataclass
class AirBallShiftEffect:
    range_modifier: float = 0.0
    catch_modifier: float = 0.0
    extra_base_modifier: float = 0.0


@dataclass
class ExtraBaseShiftEffect:
    extra_base_rate: float = 0.0
    advance_runner: float = 0.0


def average_defensive_range(defense: list[PlayerInGame], infield: bool) -> float:
    """Mean infield (1B/2B/3B/SS) or outfield range, 70 if nobody plays there."""
    positions = INFIELD_POSITIONS if infield else OUTFIELD_POSITIONS
    ranges = [
        (p.fielding.infield_range if infield else p.fielding.outfield_range) or NEUTRAL_TEAM_RANGE
        for p in defense if p.position in positions
    ]
    if not ranges:
        return NEUTRAL_TEAM_RANGE
    return sum(ranges) / len(ranges)


def ball_side(batter_hand: Hand, direction: str) -> str:
    """pull / center / opposite relative to the batter's natural side."""
    if batter_hand == Hand.RIGHT:
        pull, opposite = ("left", "center_left"), ("right", "center_right")
    elif batter_hand == Hand.LEFT:
        pull, opposite = ("right", "center_right"), ("left", "center_left")
    else:
        return "center"
    if direction in pull:
        return "pull"
    if direction in opposite:
        return "opposite"
    return "center"


def ground_ball_shift_effect(shift: DefensiveShift, side: str, avg_infield_range: float) -> GroundBallShiftEffect:
    shift = DefensiveShift(shift)
    effect = GroundBallShiftEffect()
    if shift == DefensiveShift.NORMAL:
        return effect

    m = SHIFT_MODIFIERS[shift]
    ability = avg_infield_range / NEUTRAL_TEAM_RANGE
    if shift == DefensiveShift.INFIELD_IN:
        effect.out_probability = m.ground_ball_speed * ability
        return effect
    if shift == DefensiveShift.INFIELD_BACK:
        effect.infield_hit_rate = m.infield_hit_rate
        return effect

    if side == "pull":
        effect.infield_hit_rate = -m.pull_ground_ball * ability
        effect.out_probability = m.pull_ground_ball_out * ability
    elif side == "opposite":
        # the holes get bigger the less range the defense has
        gap = 80 / avg_infield_range
        effect.infield_hit_rate = m.opposite_ground_ball * gap
        effect.guaranteed_hit = m.opposite_guaranteed_hit
    return effect


def air_ball_shift_effect(
    shift: DefensiveShift,
    ball_kind: str,
    is_infield: bool,
    avg_range: float,
    side: str,
) -> AirBallShiftEffect:
    """Effect on fly balls (``ball_kind="fly"``) and liners (``"liner"``)."""
    shift = DefensiveShift(shift)
    effect = AirBallShiftEffect()
    if shift == DefensiveShift.NORMAL:
        return effect

    m = SHIFT_MODIFIERS[shift]
    ability = avg_range / NEUTRAL_TEAM_RANGE
    gap = 80 / avg_range

    if shift == DefensiveShift.INFIELD_BACK:
        if not is_infield:
            effect.range_modifier = m.outfield_range * ability
            effect.catch_modifier = m.outfield_catch * ability
        else:
            effect.range_modifier = m.infield_fly_range * gap
            effect.extra_base_modifier = m.infield_fly_extra_base * gap

    if shift == DefensiveShift.INFIELD_IN and not is_infield:
        effect.range_modifier = m.outfield_range * gap
        effect.extra_base_modifier = m.extra_base_hit_rate * gap

    if ball_kind == "liner" and shift in _PULL_SHIFTS:
        if side == "pull":
            effect.catch_modifier = m.pull_liner_catch * ability
        elif side == "opposite":
            effect.catch_modifier = m.opposite_liner_catch * NEUTRAL_TEAM_RANGE / avg_range
    return effect


def extra_base_shift_effect(shift: DefensiveShift, hit_type: str, side: str) -> ExtraBaseShiftEffect:
    """How a shift opens up (or closes off) extra bases.

    ``extra_base_rate`` is the chance a hit stretches into ``hit_type``;
    ``advance_runner`` is added to the runners' rates on a ``hit_type``.
    """
    shift = DefensiveShift(shift)
    m = SHIFT_MODIFIERS[shift]
    effect = ExtraBaseShiftEffect()

    if hit_type == "double":
        effect.extra_base_rate = m.extra_base_hit_rate
        effect.advance_runner = m.advance_runner_rate
    elif hit_type == "triple":
        effect.extra_base_rate = m.triple_rate
    if side == "opposite":
        if hit_type == "double":
            effect.extra_base_rate += m.opposite_double_rate
        elif hit_type == "triple":
            effect.extra_base_rate += m.opposite_triple_rate
        effect.advance_runner += m.opposite_advance_runner
    return effect


def shift_was_effective(shift: DefensiveShift, outcome: str, side: str) -> bool:
    """Whether the alignment visibly decided the play, for better or worse."""
    shift = DefensiveShift(shift)
    if shift == DefensiveShift.NORMAL:
        return False
    is_out = outcome in ("out", "double_play")
    is_hit = outcome in ("single", "double", "triple")
    if shift in _PULL_SHIFTS:
        return (side == "pull" and is_out) or (side == "opposite" and is_hit)
    return outcome == "out"


# ---------------------------------------------------------------------------
# Usage tracking
# ---------------------------------------------------------------------------

@dataclass
class ShiftStatistics:
    shift: DefensiveShift
    usage_count: int = 0
    success_count: int = 0
    failure_count: int = 0
    extra_base_hits: int = 0

    @property
    def success_rate(self) -> float:
        if self.usage_count == 0:
            return 0.0
        return self.success_count / self.usage_count * 100

    def to_dict(self) -> dict:
        d = asdict(self)
        d["shift"] = self.shift.value
        d["success_rate"] = round(self.success_rate, 1)
        return d


@dataclass
class ShiftTracker:
    """Per-alignment tallies of balls in play."""
    stats: dict[DefensiveShift, ShiftStatistics] = field(
        default_factory=lambda: {s: ShiftStatistics(s) for s in DefensiveShift}
    )

    def record(self, shift: DefensiveShift, category: str, outcome: str) -> None:
        """Tally one ball in play by its result category (out/hit/home_run/error)."""
        stat = self.stats[DefensiveShift(shift)]
        stat.usage_count += 1
        if category == "out":
            stat.success_count += 1
        elif category in ("hit", "home_run"):
            stat.failure_count += 1
            if outcome in ("double", "triple", "home_run"):
                stat.extra_base_hits += 1

    def get(self, shift: DefensiveShift) -> ShiftStatistics:
        return self.stats[DefensiveShift(shift)]

    def to_dict(self) -> dict:
        return {s.value: st.to_dict() for s, st in self.stats.items() if st.usage_count}
