# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Base-running engine: who goes where on a hit.

Home runs and triples clear the bases. Singles and doubles are contested:
runners test the fielder's arm, one draw per decision.

Draw order:
  single  [runner on second scores?], [runner on first attempts?, succeeds?],
          [batter stretches to second?]
  double  [runner on first scores?]
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from engine import commentary
from engine.probability import RandomSource, chance, resolve_rng, roll
from engine.runners import Advancement, outs_in, runs_in
from models import PlayerInGame, RunnerState

logger = logging.getLogger(__name__)

HIT_TYPES = ("single", "double", "triple", "home_run")

SECOND_TO_HOME_DIRECTION = {"left": 10, "center_left": 5, "center": -10, "center_right": 5, "right": 10}
SECOND_TO_HOME_STRENGTH = {"weak": -30, "medium": 0, "strong": 15, "very_strong": 25}
FIRST_TO_THIRD_ATTEMPT = {"very_strong": 40, "strong": 20}
FIRST_TO_THIRD_SUCCESS = {"very_strong": 25, "strong": 15}
FIRST_TO_HOME_DEPTH = {"weak": -40, "medium": -10, "strong": 20, "very_strong": 20}
FIRST_TO_HOME_DIRECTION = {"left": 5, "center_left": 0, "center": -15, "center_right": 0, "right": 5}


@dataclass
class BaseRunningResult:
    advancements: list[Advancement] = field(default_factory=list)
    commentary: str = ""

    @property
    def runs_scored(self) -> int:
        return runs_in(self.advancements)

    @property
    def outs_recorded(self) -> int:
        return outs_in(self.advancements)

    def to_dict(self) -> dict:
        return {
            "advancements": [a.to_dict() for a in self.advancements],
            "runs_scored": self.runs_scored,
            "outs_recorded": self.outs_recorded,
            "commentary": self.commentary,
        }


def _name(runners: RunnerState, base: str) -> str:
    return runners.get(base).player_name


def basic_advancement(hit_type: str, runners: RunnerState, batter: PlayerInGame) -> BaseRunningResult:
    """Station-to-station rules with no throws and no draws."""
    if hit_type not in HIT_TYPES:
        raise ValueError(f"Unknown hit type: {hit_type}")
    lines = [commentary.hit_call(hit_type, batter.name)]

    if hit_type == "home_run":
        advancements = [Advancement("batter", "home")]
        destinations = {"third": "home", "second": "home", "first": "home"}
    elif hit_type == "triple":
        advancements = [Advancement("batter", "third")]
        destinations = {"third": "home", "second": "home", "first": "home"}
    elif hit_type == "double":
        advancements = [Advancement("batter", "second")]
        destinations = {"third": "home", "second": "home", "first": "third"}
    else:
        advancements = [Advancement("batter", "first")]
        destinations = {"third": "home", "second": "third", "first": "second"}

    for base, to in destinations.items():
        if runners.get(base) is None:
            continue
        advancements.append(Advancement(base, to))
        name = _name(runners, base)
        lines.append(commentary.runner_scores(name) if to == "home" else commentary.runner_to(name, to))

    result = BaseRunningResult(advancements)
    lines.append(commentary.scoring_summary(advancements, result.runs_scored))
    result.commentary = " ".join(line for line in lines if line)
    return result


# ---------------------------------------------------------------------------
# Single
# ---------------------------------------------------------------------------

def score_from_second_rate(direction: str, strength: str, arm: float) -> float:
    return (50
            + SECOND_TO_HOME_DIRECTION[direction]
            + SECOND_TO_HOME_STRENGTH[strength]
            - (arm - 50) * 0.8)


def first_to_third_attempt_rate(strength: str, second_was_empty: bool, arm: float) -> float:
    rate = 20 + FIRST_TO_THIRD_ATTEMPT.get(strength, 0)
    if second_was_empty:
        rate += 25
    if arm < 60:
        rate += 15
    return rate


def first_to_third_success_rate(strength: str, second_was_empty: bool, arm: float) -> float:
    rate = 40 + FIRST_TO_THIRD_SUCCESS.get(strength, 0)
    if second_was_empty:
        rate += 15
    return rate - (arm - 50) * 0.6


def batter_to_second_rate(batter: PlayerInGame, arm: float) -> float:
    r = batter.running
    return 25 + (r.speed - 50) * 0.5 + (r.baserunning - 50) * 0.3 - (arm - 50) * 0.6


def single_advancement(
    runners: RunnerState,
    batter: PlayerInGame,
    batted_ball,
    fielder: PlayerInGame,
    rng: RandomSource | None = None,
    advance_bonus: float = 0,
) -> BaseRunningResult:
    """Advance runners on a single, testing ``fielder``'s outfield arm.

    A runner from second who holds at third keeps the runner from first at
    second, so no first-to-third attempt is drawn.

    ``advance_bonus`` is added to the rate of each runner trying for an
    extra base.
    """
    rng = resolve_rng(rng)
    arm = fielder.fielding.outfield_arm
    direction, strength = batted_ball.direction, batted_ball.strength
    batter_adv = Advancement("batter", "first")
    advancements = [batter_adv]
    lines = [commentary.hit_call("single", batter.name)]

    if runners.third is not None:
        advancements.append(Advancement("third", "home"))
        lines.append(commentary.runner_scores(runners.third.player_name))

    third_blocked = False
    if runners.second is not None:
        name = runners.second.player_name
        rate = score_from_second_rate(direction, strength, arm) + advance_bonus
        r = roll(rng)
        logger.debug("score from second rate=%.1f roll=%.1f", rate, r)
        scored = r < rate
        text = commentary.score_from_second(name, scored, abs(r - rate) < 20)
        if scored:
            advancements.append(Advancement("second", "home", was_thrown=abs(r - rate) < 20,
                                            description=text))
        else:
            advancements.append(Advancement("second", "third", description=text))
            third_blocked = True
        lines.append(text)

    if runners.first is not None:
        name = runners.first.player_name
        second_was_empty = runners.second is None
        attempt = (not third_blocked
                   and chance(rng, first_to_third_attempt_rate(strength, second_was_empty, arm),
                              "first to third attempt"))
        if not attempt:
            advancements.append(Advancement("first", "second"))
            lines.append(commentary.runner_to(name, "second"))
        else:
            rate = first_to_third_success_rate(strength, second_was_empty, arm) + advance_bonus
            r = roll(rng)
            logger.debug("first to third rate=%.1f roll=%.1f", rate, r)
            success = r < rate
            caught_out = not success and r > rate + 30
            text = commentary.first_to_third(name, success, caught_out)
            if success:
                advancements.append(Advancement("first", "third", is_extra_base=True, description=text))
            elif caught_out:
                advancements.append(Advancement("first", "out", was_thrown=True, description=text))
            else:
                advancements.append(Advancement("first", "second", description=text))
            lines.append(text)

    if runners.first is None and strength == "very_strong":
        if chance(rng, batter_to_second_rate(batter, arm), "batter to second"):
            text = commentary.batter_stretch(batter.name)
            batter_adv.to = "second"
            batter_adv.is_extra_base = True
            batter_adv.description = text
            lines.append(text)

    result = BaseRunningResult(advancements)
    lines.append(commentary.scoring_summary(advancements, result.runs_scored))
    result.commentary = " ".join(line for line in lines if line)
    return result


# ---------------------------------------------------------------------------
# Double
# ---------------------------------------------------------------------------

def score_from_first_rate(direction: str, strength: str, arm: float, relay_arm: float = 50) -> float:
    throwing = (arm - 50) * 0.4 + (relay_arm - 50) * 0.3
    return 45 + FIRST_TO_HOME_DEPTH[strength] + FIRST_TO_HOME_DIRECTION[direction] - throwing


def double_advancement(
    runners: RunnerState,
    batter: PlayerInGame,
    batted_ball,
    fielder: PlayerInGame,
    relay: PlayerInGame | None = None,
    rng: RandomSource | None = None,
    advance_bonus: float = 0,
) -> BaseRunningResult:
    """Advance runners on a double; the runner from first may try to score.

    ``advance_bonus`` is added to the runner from first's scoring chance.
    """
    rng = resolve_rng(rng)
    advancements = [Advancement("batter", "second")]
    lines = [commentary.hit_call("double", batter.name)]

    for base in ("third", "second"):
        if runners.get(base) is not None:
            advancements.append(Advancement(base, "home"))
            lines.append(commentary.runner_scores(_name(runners, base)))

    if runners.first is not None:
        name = runners.first.player_name
        relay_arm = relay.fielding.infield_arm if relay is not None else 50
        rate = score_from_first_rate(batted_ball.direction, batted_ball.strength,
                                     fielder.fielding.outfield_arm, relay_arm) + advance_bonus
        will_throw = rate > 20
        r = roll(rng)
        logger.debug("score from first rate=%.1f roll=%.1f throw=%s", rate, r, will_throw)
        success = r < rate
        caught_out = not success and will_throw and r > rate + 10
        text = commentary.score_from_first(name, success, caught_out, will_throw,
                                           relay.name if relay is not None else "")
        if success:
            advancements.append(Advancement("first", "home", was_thrown=will_throw, description=text))
        elif caught_out:
            advancements.append(Advancement("first", "out", was_thrown=True, description=text))
        else:
            advancements.append(Advancement("first", "third", description=text))
        lines.append(text)

    result = BaseRunningResult(advancements)
    lines.append(commentary.scoring_summary(advancements, result.runs_scored))
    result.commentary = " ".join(line for line in lines if line)
    return result
