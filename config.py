# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Centralized configuration for environment variables."""

import os
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, Field

SEED_ENV = "PLAYSIM_SEED"
LOG_LEVEL_ENV = "PLAYSIM_LOG_LEVEL"
ROSTERS_ENV = "PLAYSIM_ROSTERS"
PITCH_BY_PITCH_ENV = "PLAYSIM_PITCH_BY_PITCH"
DIFFICULTY_ENV = "PLAYSIM_DIFFICULTY"

DEFAULT_ROSTERS = Path(__file__).resolve().parent / "data" / "sample_rosters.json"


class Difficulty(str, Enum):
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"


class SimulationSettings(BaseModel):
    """Settings for the command-line driver. Engines take explicit arguments instead."""
    seed: Optional[int] = Field(default=None, description="Seed for reproducible runs")
    log_level: str = Field(default="WARNING", pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    rosters_path: Path = DEFAULT_ROSTERS
    pitch_by_pitch: bool = Field(default=True, description="Pitch loop, or one-shot quick mode")
    difficulty: Difficulty = Difficulty.NORMAL


def get_settings(environ: Optional[Mapping[str, str]] = None) -> SimulationSettings:
    """Build settings from ``environ`` (default ``os.environ``).

    Unset or empty variables fall back to the defaults. Invalid values raise
    pydantic's ValidationError.
    """
    env = os.environ if environ is None else environ
    values = {}
    if env.get(SEED_ENV):
        values["seed"] = env[SEED_ENV]
    if env.get(LOG_LEVEL_ENV):
        values["log_level"] = env[LOG_LEVEL_ENV].upper()
    if env.get(ROSTERS_ENV):
        values["rosters_path"] = env[ROSTERS_ENV]
    if env.get(PITCH_BY_PITCH_ENV):
        values["pitch_by_pitch"] = env[PITCH_BY_PITCH_ENV]
    if env.get(DIFFICULTY_ENV):
        values["difficulty"] = env[DIFFICULTY_ENV].lower()
    return SimulationSettings(**values)
