# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Stealing engine: steals, double steals, hit-and-runs and pickoffs.

Draw order:
  steal         one draw
  double steal  one draw per attempting runner, first to third
  hit-and-run   the steal draw only; the batting outcome is supplied
  pickoff       attempt, then success and wild throw
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from engine import commentary
from engine.errors import PreconditionError
from engine.probability import RandomSource, clamp, resolve_rng, roll
from engine.runners import BASES, Advancement, next_base
from models import PlayerInGame, Runner, RunnerState

logger = logging.getLogger(__name__)

BASE_PENALTY = {"first": 0.0, "second": 15.0, "third": 25.0}
UNDEFENDED_STEAL_RATE = 95.0
HIT_AND_RUN_OUTCOMES = ("hit", "out", "swing_miss")

_COVER_POSITIONS = {
    "first": ("1B",),
    "second": ("2B", "SS"),
    "third": ("3B",),
}


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass
class StealResult:
    success: bool
    runner: Runner
    from_base: str
    target_base: str
    rate: float = 0.0
    catcher_name: str = ""
    cover_name: str = ""
    undefended: bool = False
    commentary: str = ""

    @property
    def caught_stealing(self) -> bool:
        return not self.success

    def advancement(self) -> Advancement:
        return Advancement(self.from_base, self.target_base if self.success else "out")

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "runner": self.runner.model_dump(),
            "from_base": self.from_base,
            "target_base": self.target_base,
            "caught_stealing": self.caught_stealing,
            "commentary": self.commentary,
        }


@dataclass
class DoubleStealResult:
    results: list[StealResult]
    throw_target: str
    catcher_name: str = ""
    commentary: str = ""

    @property
    def runners_advanced(self) -> list[Advancement]:
        # lead runner first so the list applies cleanly
        return [r.advancement() for r in reversed(self.results)]

    def to_dict(self) -> dict:
        return {
            "results": [r.to_dict() for r in self.results],
            "throw_target": self.throw_target,
            "runners_advanced": [a.to_dict() for a in self.runners_advanced],
            "commentary": self.commentary,
        }


@dataclass
class HitAndRunResult:
    steal_attempt: StealResult
    batting_result: str  # hit, out, swing_miss
    runner_advancement: Advancement
    outs_recorded: int
    commentary: str = ""

    @property
    def is_double_play(self) -> bool:
        return self.outs_recorded == 2

    def to_dict(self) -> dict:
        return {
            "steal_attempt": self.steal_attempt.to_dict(),
            "batting_result": self.batting_result,
            "runner_advancement": self.runner_advancement.to_dict(),
            "outs_recorded": self.outs_recorded,
            "is_double_play": self.is_double_play,
            "commentary": self.commentary,
        }


@dataclass
class PickoffResult:
    attempted: bool
    success: bool
    runner: Runner | None
    target_base: str | None
    wild_throw: bool = False
    close_play: bool = False
    pitcher_name: str = ""
    cover_name: str = ""
    runners_advanced: list[Advancement] = field(default_factory=list)
    commentary: str = ""

    def to_dict(self) -> dict:
        return {
            "attempted": self.attempted,
            "success": self.success,
            "runner": self.runner.model_dump() if self.runner else None,
            "target_base": self.target_base,
            "wild_throw": self.wild_throw,
            "runners_advanced": [a.to_dict() for a in self.runners_advanced],
            "commentary": self.commentary,
        }


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def cover_fielder(base: str, infielders: list[PlayerInGame]) -> PlayerInGame | None:
    """The infielder taking the throw at ``base``."""
    positions = _COVER_POSITIONS.get(base, ())
    for p in infielders:
        if p.position in positions:
            return p
    return None


def catcher_fielding(catcher: PlayerInGame) -> float:
    f = catcher.fielding
    return f.catcher_ability if f.catcher_ability is not None else f.infield_error


def _require_pitching(pitcher: PlayerInGame) -> None:
    if pitcher.pitching is None:
        raise PreconditionError(f"{pitcher.name} has no pitching abilities",
                                requirement="pitching abilities")


def can_steal(runners: RunnerState) -> bool:
    return not runners.is_empty


def can_double_steal(runners: RunnerState) -> bool:
    return runners.count >= 2


def can_hit_and_run(runners: RunnerState) -> bool:
    return runners.first is not None or runners.second is not None


# ---------------------------------------------------------------------------
# Rates
# ---------------------------------------------------------------------------

def steal_success_rate(
    from_base: str,
    runner_player: PlayerInGame,
    pitcher: PlayerInGame,
    catcher: PlayerInGame,
    cover: PlayerInGame | None,
) -> float:
    r = runner_player.running
    p = pitcher.pitching
    quickness = p.control * 0.3

    cover_fielding = cover.fielding.infield_error if cover else 50
    cover_range = cover.fielding.infield_range if cover else 50

    rate = 50.0
    rate += (r.stealing_ability - 50) * 0.8
    rate += (r.speed - 50) * 0.5
    rate += (r.baserunning - 50) * 0.3
    rate -= (p.hold_runners - 50) * 0.6
    rate -= (quickness - 50) * 0.2
    rate -= (catcher.fielding.infield_arm - 50) * 0.7
    rate -= (catcher_fielding(catcher) - 50) * 0.3
    rate -= (cover_fielding - 50) * 0.2
    rate -= (cover_range - 50) * 0.2
    rate -= BASE_PENALTY[from_base]
    return clamp(rate, 0, 100)


def pickoff_attempt_rate(hold_runners: float, stealing_aggr: float) -> float:
    return clamp(20 + (hold_runners - 50) * 0.5 + (stealing_aggr - 50) * 0.4)


def lead_distance(runner_player: PlayerInGame, hold_runners: float) -> float:
    r = runner_player.running
    lead = (50
            + (r.stealing_ability - 50) * 0.4
            + (r.stealing_aggr - 50) * 0.3
            - (r.baserunning - 50) * 0.2
            - (hold_runners - 50) * 0.5)
    return clamp(lead)


def pickoff_success_rate(
    runner_player: PlayerInGame,
    hold_runners: float,
    lead: float,
    cover: PlayerInGame | None,
) -> float:
    r = runner_player.running
    rate = 10 + (hold_runners - 50) * 0.6 + (lead - 50) * 0.5
    if cover is not None:
        rate += (cover.fielding.infield_error - 50) * 0.3
        rate += (cover.fielding.infield_range - 50) * 0.2
    rate -= (r.baserunning - 50) * 0.4
    rate -= (r.speed - 50) * 0.3
    return clamp(rate)


def wild_throw_rate(control: float) -> float:
    rate = 5.0
    if control < 50:
        rate += (50 - control) * 0.2
    return rate


# ---------------------------------------------------------------------------
# Single steal
# ---------------------------------------------------------------------------

def _judge_steal(runner: Runner, from_base: str, runner_player: PlayerInGame,
                 pitcher: PlayerInGame, catcher: PlayerInGame,
                 infielders: list[PlayerInGame], rng: RandomSource) -> StealResult:
    target = next_base(from_base)
    cover = cover_fielder(target, infielders)
    rate = steal_success_rate(from_base, runner_player, pitcher, catcher, cover)
    r = roll(rng)
    logger.debug("steal %s->%s rate=%.1f roll=%.1f", from_base, target, rate, r)
    return StealResult(
        success=r < rate,
        runner=runner,
        from_base=from_base,
        target_base=target,
        rate=rate,
        catcher_name=catcher.name,
        cover_name=cover.name if cover else "",
    )


def resolve_steal(
    runner: Runner,
    from_base: str,
    runner_player: PlayerInGame,
    pitcher: PlayerInGame,
    catcher: PlayerInGame,
    infielders: list[PlayerInGame],
    rng: RandomSource | None = None,
) -> StealResult:
    """One steal attempt from ``from_base`` to the next base."""
    if from_base not in BASES:
        raise ValueError(f"Cannot steal from '{from_base}'")
    if runner is None or runner_player is None:
        raise PreconditionError(f"No runner on {from_base} to steal", requirement=f"runner on {from_base}")
    _require_pitching(pitcher)
    result = _judge_steal(runner, from_base, runner_player, pitcher, catcher, infielders,
                          resolve_rng(rng))
    result.commentary = commentary.steal(result)
    return result


# ---------------------------------------------------------------------------
# Double steal
# ---------------------------------------------------------------------------

def double_steal_throw_target(bases: list[str]) -> str:
    """The catcher defends the base the lead runner is heading to."""
    if "third" in bases:
        return "home"
    if "second" in bases:
        return "third"
    return "second"


def resolve_double_steal(
    runners: RunnerState,
    runner_players: dict[str, PlayerInGame],
    pitcher: PlayerInGame,
    catcher: PlayerInGame,
    infielders: list[PlayerInGame],
    rng: RandomSource | None = None,
) -> DoubleStealResult:
    """Every runner goes; the catcher can only throw to one base.

    ``runner_players`` maps base name to the runner's player record.
    """
    attempting = [b for b in BASES
                  if runners.get(b) is not None and runner_players.get(b) is not None]
    if len(attempting) < 2:
        raise PreconditionError("A double steal needs at least two runners",
                                requirement="two runners")
    _require_pitching(pitcher)
    rng = resolve_rng(rng)
    throw_target = double_steal_throw_target(attempting)

    results = []
    for base in attempting:
        runner = runners.get(base)
        target = next_base(base)
        if target == throw_target:
            result = _judge_steal(runner, base, runner_players[base], pitcher, catcher, infielders, rng)
        else:
            r = roll(rng)
            logger.debug("undefended steal %s->%s roll=%.1f", base, target, r)
            result = StealResult(
                success=r < UNDEFENDED_STEAL_RATE,
                runner=runner,
                from_base=base,
                target_base=target,
                rate=UNDEFENDED_STEAL_RATE,
                catcher_name=catcher.name,
                undefended=True,
            )
        result.commentary = commentary.steal(result)
        results.append(result)

    double = DoubleStealResult(results, throw_target, catcher.name)
    double.commentary = commentary.double_steal(double)
    return double


# ---------------------------------------------------------------------------
# Hit-and-run
# ---------------------------------------------------------------------------

def resolve_hit_and_run(
    runner: Runner,
    from_base: str,
    runner_player: PlayerInGame,
    batter: PlayerInGame,
    pitcher: PlayerInGame,
    catcher: PlayerInGame,
    infielders: list[PlayerInGame],
    batting_outcome: str,
    rng: RandomSource | None = None,
) -> HitAndRunResult:
    """The runner breaks with the pitch; ``batting_outcome`` is what the batter did.

    hit        a runner who beat the throw takes an extra base; one who didn't
               still reaches the next base
    out        a runner thrown out completes a double play; otherwise the
               runner returns to the original base
    swing_miss the steal stands on its own
    """
    if from_base not in ("first", "second"):
        raise PreconditionError("A hit-and-run needs a runner on first or second",
                                requirement="runner on first or second")
    if batting_outcome not in HIT_AND_RUN_OUTCOMES:
        raise ValueError(f"Unknown batting outcome: {batting_outcome}")

    steal = resolve_steal(runner, from_base, runner_player, pitcher, catcher, infielders, rng)

    if batting_outcome == "hit":
        to = next_base(steal.target_base) if steal.success else steal.target_base
        advancement = Advancement(from_base, to, is_extra_base=steal.success)
        outs = 0
    elif batting_outcome == "out":
        if steal.caught_stealing:
            advancement = Advancement(from_base, "out")
            outs = 2
        else:
            advancement = Advancement(from_base, from_base)
            outs = 1
    else:
        advancement = steal.advancement()
        outs = 0 if steal.success else 1

    result = HitAndRunResult(steal, batting_outcome, advancement, outs)
    result.commentary = commentary.hit_and_run(result, batter.name)
    return result


# ---------------------------------------------------------------------------
# Pickoff
# ---------------------------------------------------------------------------

def _no_pickoff() -> PickoffResult:
    return PickoffResult(attempted=False, success=False, runner=None, target_base=None)


def resolve_pickoff(
    runner: Runner | None,
    target_base: str,
    runner_player: PlayerInGame | None,
    pitcher: PlayerInGame,
    infielders: list[PlayerInGame],
    rng: RandomSource | None = None,
) -> PickoffResult:
    """Pitcher may throw over to ``target_base``.

    With no runner there is nothing to do and no draw is made. A wild throw
    overrides the success draw and gives the runner the next base.
    """
    if runner is None or runner_player is None:
        return _no_pickoff()
    _require_pitching(pitcher)
    rng = resolve_rng(rng)
    hold = pitcher.pitching.hold_runners

    attempt = pickoff_attempt_rate(hold, runner_player.running.stealing_aggr)
    attempt_roll = roll(rng)
    logger.debug("pickoff attempt rate=%.1f roll=%.1f", attempt, attempt_roll)
    if attempt_roll >= attempt:
        return _no_pickoff()

    cover = cover_fielder(target_base, infielders)
    lead = lead_distance(runner_player, hold)
    rate = pickoff_success_rate(runner_player, hold, lead, cover)
    success_roll = roll(rng)
    wild = roll(rng) < wild_throw_rate(pitcher.pitching.control)
    logger.debug("pickoff success rate=%.1f roll=%.1f wild=%s", rate, success_roll, wild)

    result = PickoffResult(
        attempted=True,
        success=success_roll < rate and not wild,
        runner=runner,
        target_base=target_base,
        wild_throw=wild,
        close_play=abs(success_roll - rate) < 20,
        pitcher_name=pitcher.name,
        cover_name=cover.name if cover else "",
    )
    if wild:
        result.runners_advanced = [Advancement(target_base, next_base(target_base))]
    elif result.success:
        result.runners_advanced = [Advancement(target_base, "out")]
    result.commentary = commentary.pickoff(result)
    return result
