# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Play resolution engines -- pure functions from game state and abilities to outcomes."""

from engine.errors import (
    EngineError,
    InvalidAdvancementError,
    PreconditionError,
    ScriptExhaustedError,
    UnsupportedInstructionError,
)
from engine.probability import ScriptedRandom, make_rng
from engine.runners import Advancement, apply_advancements
from engine.at_bat import resolve_at_bat, resolve_pitch, judge_at_bat_outcome
from engine.bunt import resolve_bunt, resolve_squeeze, resolve_bunt_fielding
from engine.stealing import resolve_steal, resolve_double_steal, resolve_hit_and_run, resolve_pickoff
from engine.defense import resolve_ball_in_play

RESOLVERS = [
    resolve_at_bat,
    resolve_bunt,
    resolve_squeeze,
    resolve_bunt_fielding,
    resolve_steal,
    resolve_double_steal,
    resolve_hit_and_run,
    resolve_pickoff,
    resolve_ball_in_play,
]
