# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Data models for the baseball play resolution engine."""

from __future__ import annotations

import time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Hand(str, Enum):
    LEFT = "left"
    RIGHT = "right"
    SWITCH = "switch"  # batters only


class Condition(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    NORMAL = "normal"
    POOR = "poor"
    TERRIBLE = "terrible"


class FatigueLevel(str, Enum):
    FRESH = "fresh"
    NORMAL = "normal"
    TIRED = "tired"
    EXHAUSTED = "exhausted"


class Position(str, Enum):
    P = "P"
    C = "C"
    FIRST_BASE = "1B"
    SECOND_BASE = "2B"
    THIRD_BASE = "3B"
    SS = "SS"
    LF = "LF"
    CF = "CF"
    RF = "RF"
    DH = "DH"


INFIELD_POSITIONS = frozenset({"1B", "2B", "3B", "SS"})
OUTFIELD_POSITIONS = frozenset({"LF", "CF", "RF"})


class DefensiveShift(str, Enum):
    NORMAL = "normal"
    PULL_RIGHT = "pull_right"
    PULL_LEFT = "pull_left"
    EXTREME_SHIFT = "extreme_shift"
    INFIELD_IN = "infield_in"
    INFIELD_BACK = "infield_back"


class OffensiveInstruction(str, Enum):
    NORMAL_SWING = "normal_swing"
    BUNT = "bunt"
    HIT_AND_RUN = "hit_and_run"
    STEAL = "steal"
    WAIT = "wait"
    SQUEEZE = "squeeze"
    DOUBLE_STEAL = "double_steal"


class Half(str, Enum):
    TOP = "top"
    BOTTOM = "bottom"


# ---------------------------------------------------------------------------
# Ability blocks
# ---------------------------------------------------------------------------

class BattingAbilities(BaseModel):
    """Hitting attributes on a 1-100 scale."""
    contact: float = Field(ge=0, le=100)
    babip: float = Field(ge=0, le=100)
    gap_power: float = Field(ge=0, le=100)
    hr_power: float = Field(ge=0, le=100)
    eye: float = Field(ge=0, le=100)
    avoid_ks: float = Field(ge=0, le=100)
    vs_lhp: float = Field(ge=0, le=100, description="Rating against left-handed pitching")
    vs_rhp: float = Field(ge=0, le=100, description="Rating against right-handed pitching")


class PitchingAbilities(BaseModel):
    """Pitching attributes on a 1-100 scale."""
    stuff: float = Field(ge=0, le=100)
    movement: float = Field(ge=0, le=100)
    control: float = Field(ge=0, le=100)
    stamina: float = Field(ge=0, le=100)
    ground_ball_pct: float = Field(ge=0, le=100)
    velocity: float = Field(ge=0, le=100)
    hold_runners: float = Field(ge=0, le=100, description="Ability to keep runners close")


class RunningAbilities(BaseModel):
    speed: float = Field(ge=0, le=100)
    stealing_ability: float = Field(ge=0, le=100)
    stealing_aggr: float = Field(ge=0, le=100, description="Willingness to take leads and run")
    baserunning: float = Field(ge=0, le=100)


class FieldingAbilities(BaseModel):
    """Defensive attributes. Error ratings are higher-is-surer."""
    infield_range: float = Field(ge=0, le=100)
    outfield_range: float = Field(ge=0, le=100)
    infield_error: float = Field(ge=0, le=100)
    outfield_error: float = Field(ge=0, le=100)
    infield_arm: float = Field(ge=0, le=100)
    outfield_arm: float = Field(ge=0, le=100)
    turn_dp: float = Field(ge=0, le=100)
    catcher_ability: Optional[float] = Field(default=None, ge=0, le=100)
    catcher_arm: Optional[float] = Field(default=None, ge=0, le=100)
    sacrifice_bunt: float = Field(ge=0, le=100)
    bunt_for_hit: float = Field(ge=0, le=100)
    position_ratings: dict[str, str] = Field(
        default_factory=dict,
        description="Position -> aptitude grade A/B/C/D/F",
    )


# ---------------------------------------------------------------------------
# Player data models
# ---------------------------------------------------------------------------

class Player(BaseModel):
    """Immutable reference data for one player."""
    model_config = {"use_enum_values": True}

    id: str
    name: str
    position: Position
    batter_hand: Hand
    pitcher_hand: Optional[Hand] = None
    batting: BattingAbilities
    pitching: Optional[PitchingAbilities] = None
    running: RunningAbilities
    fielding: FieldingAbilities
    condition: Condition = Condition.NORMAL
    fatigue: FatigueLevel = FatigueLevel.FRESH

    @model_validator(mode="after")
    def _pitcher_hand_is_not_switch(self) -> Player:
        if self.pitcher_hand == Hand.SWITCH:
            raise ValueError("pitcher_hand must be left or right")
        return self


class PlayerInGame(Player):
    """A player plus the per-game counters the driver maintains."""
    pitch_count: int = Field(default=0, ge=0)
    at_bats: int = Field(default=0, ge=0)
    hits: int = Field(default=0, ge=0)
    runs: int = Field(default=0, ge=0)
    rbis: int = Field(default=0, ge=0)


class TeamRoster(BaseModel):
    """A lineup (batting order) and the nine players in the field."""
    team_name: str
    lineup: list[PlayerInGame] = Field(min_length=1)
    defense: list[PlayerInGame] = Field(min_length=1)

    def player_at(self, position: str) -> PlayerInGame | None:
        for p in self.defense:
            if p.position == position:
                return p
        return None

    def pitcher(self) -> PlayerInGame | None:
        return self.player_at("P")


# ---------------------------------------------------------------------------
# Base runners
# ---------------------------------------------------------------------------

class Runner(BaseModel):
    """Occupancy marker for a base; not the full player."""
    player_id: str
    player_name: str

    @classmethod
    def for_player(cls, player: Player) -> Runner:
        return cls(player_id=player.id, player_name=player.name)


class RunnerState(BaseModel):
    first: Optional[Runner] = None
    second: Optional[Runner] = None
    third: Optional[Runner] = None

    @model_validator(mode="after")
    def _one_base_per_runner(self) -> RunnerState:
        ids = [r.player_id for r in (self.first, self.second, self.third) if r is not None]
        if len(ids) != len(set(ids)):
            raise ValueError("a runner can occupy only one base")
        return self

    def get(self, base: str) -> Runner | None:
        if base not in ("first", "second", "third"):
            raise ValueError(f"Unknown base: {base}")
        return getattr(self, base)

    def occupied(self) -> list[str]:
        """Occupied bases, first to third."""
        return [b for b in ("first", "second", "third") if getattr(self, b) is not None]

    @property
    def count(self) -> int:
        return len(self.occupied())

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    def bases_string(self) -> str:
        """Compact diamond notation, e.g. '1-3' or '---'."""
        marks = [str(i + 1) if getattr(self, b) else "-"
                 for i, b in enumerate(("first", "second", "third"))]
        return "".join(marks) if any(m != "-" for m in marks) else "---"


# ---------------------------------------------------------------------------
# Play log
# ---------------------------------------------------------------------------

class PlayEvent(BaseModel):
    """One immutable play-by-play log line."""
    model_config = {"frozen": True}

    timestamp: float = Field(default_factory=time.time)
    inning: int = Field(ge=1)
    half: Half
    description: str
    type: str = Field(description="Event category, e.g. at_bat, steal, bunt, inning_end")
    source: str = Field(default="engine", description="Who produced the event")
