# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Half-inning simulation driver.

Plays plate appearances against the play resolution engines until the
defense records three outs. The driver owns the only random generator, so a
seed reproduces the whole play-by-play. Engines only report outcomes; this
module applies them to the runner state, the out count and the box-score
counters on each player.
"""

from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from dataclasses import dataclass, field
from pathlib import Path

from pydantic import ValidationError

from config import DEFAULT_ROSTERS, get_settings
from engine import commentary
from engine.at_bat import judge_at_bat_outcome, resolve_at_bat
from engine.bunt import (
    BuntOutcome,
    BuntType,
    find_bunt_fielders,
    resolve_bunt,
    resolve_bunt_fielding,
    resolve_squeeze,
)
from engine.defense import DefensiveOutcome, resolve_ball_in_play
from engine.errors import EngineError, PreconditionError
from engine.runners import Advancement, apply_advancements, forced_advancements
from engine.shift import ShiftTracker
from engine.stealing import resolve_double_steal, resolve_hit_and_run, resolve_pickoff, resolve_steal
from models import (
    INFIELD_POSITIONS,
    DefensiveShift,
    Half,
    OffensiveInstruction,
    PlayEvent,
    PlayerInGame,
    Runner,
    RunnerState,
    TeamRoster,
)

logger = logging.getLogger(__name__)

OUTS_PER_HALF = 3


# ---------------------------------------------------------------------------
# Load roster data
# ---------------------------------------------------------------------------

def team_from_dict(d: dict) -> TeamRoster:
    """Build a roster from ``players`` plus ``lineup``/``defense`` id lists.

    A player listed in both the lineup and the field is one object, so the
    counters it carries are shared.
    """
    players = {}
    for raw in d.get("players", []):
        player = PlayerInGame.model_validate(raw)
        players[player.id] = player

    def pick(key: str) -> list[PlayerInGame]:
        ids = d.get(key, [])
        missing = [pid for pid in ids if pid not in players]
        if missing:
            raise ValueError(f"{d.get('team_name', 'team')}: unknown player ids in {key}: {missing}")
        return [players[pid] for pid in ids]

    return TeamRoster(team_name=d.get("team_name", ""), lineup=pick("lineup"), defense=pick("defense"))


def load_rosters(path: Path | None = None) -> dict[str, TeamRoster]:
    """Load and validate both team rosters ("away" and "home") from JSON.

    Raises OSError for an unreadable file, ValueError for malformed JSON or
    unknown player ids, and pydantic's ValidationError for a player or roster
    that does not fit the model.
    """
    p = path or DEFAULT_ROSTERS
    with open(p) as f:
        raw = json.load(f)
    if not isinstance(raw, dict) or not all(isinstance(raw.get(s), dict) for s in ("away", "home")):
        raise ValueError(f"{p}: expected 'away' and 'home' rosters")
    return {side: team_from_dict(raw[side]) for side in ("away", "home")}


# ---------------------------------------------------------------------------
# Instruction choice
# ---------------------------------------------------------------------------

def choose_instruction(
    runners: RunnerState,
    outs: int,
    batter: PlayerInGame,
    runner_players: dict[str, PlayerInGame],
) -> OffensiveInstruction:
    """Situational manager: a fixed rule table, no random draws."""
    first = runner_players.get("first")
    second = runner_players.get("second")
    third = runner_players.get("third")

    if third is not None and outs < 2 and batter.fielding.sacrifice_bunt >= 70:
        return OffensiveInstruction.SQUEEZE
    if (first is not None and second is not None and third is None
            and min(first.running.stealing_ability, second.running.stealing_ability) >= 65):
        return OffensiveInstruction.DOUBLE_STEAL
    if first is not None and second is None and third is None:
        if outs == 0 and batter.fielding.sacrifice_bunt >= 65:
            return OffensiveInstruction.BUNT
        if first.running.stealing_ability >= 70:
            return OffensiveInstruction.STEAL
        if outs < 2 and batter.batting.contact >= 70 and first.running.speed >= 60:
            return OffensiveInstruction.HIT_AND_RUN
    if second is not None and third is None and first is None and second.running.stealing_ability >= 80:
        return OffensiveInstruction.STEAL
    return OffensiveInstruction.NORMAL_SWING


def _instruction_applies(instruction: OffensiveInstruction, runners: RunnerState) -> bool:
    if instruction == OffensiveInstruction.STEAL:
        return _steal_base(runners) is not None
    if instruction == OffensiveInstruction.DOUBLE_STEAL:
        return runners.count >= 2
    if instruction == OffensiveInstruction.SQUEEZE:
        return runners.third is not None
    if instruction == OffensiveInstruction.HIT_AND_RUN:
        return runners.first is not None and runners.second is None and runners.third is None
    return True


def _steal_base(runners: RunnerState) -> str | None:
    """Base of the runner with an open base ahead, trailing runner first."""
    if runners.first is not None and runners.second is None:
        return "first"
    if runners.second is not None and runners.third is None:
        return "second"
    return None


# ---------------------------------------------------------------------------
# Half-inning state
# ---------------------------------------------------------------------------

@dataclass
class HalfInningState:
    """Mutable state for one half-inning."""
    inning: int
    half: Half
    offense: TeamRoster
    defense: TeamRoster
    batter_index: int = 0
    outs: int = 0
    runs: int = 0
    hits: int = 0
    errors: int = 0
    runners: RunnerState = field(default_factory=RunnerState)
    play_log: list[PlayEvent] = field(default_factory=list)

    @property
    def is_over(self) -> bool:
        return self.outs >= OUTS_PER_HALF

    @property
    def pitcher(self) -> PlayerInGame:
        p = self.defense.pitcher()
        if p is None:
            raise PreconditionError(f"{self.defense.team_name} has no pitcher in the field",
                                    requirement="pitcher")
        return p

    @property
    def catcher(self) -> PlayerInGame | None:
        return self.defense.player_at("C")

    @property
    def infielders(self) -> list[PlayerInGame]:
        return [p for p in self.defense.defense if p.position in INFIELD_POSITIONS]

    def current_batter(self) -> PlayerInGame:
        return self.offense.lineup[self.batter_index % len(self.offense.lineup)]

    def runner_players(self) -> dict[str, PlayerInGame]:
        by_id = {p.id: p for p in self.offense.lineup}
        players = {}
        for base in self.runners.occupied():
            player = by_id.get(self.runners.get(base).player_id)
            if player is not None:
                players[base] = player
        return players

    def log(self, description: str, event_type: str) -> None:
        if not description:
            return
        self.play_log.append(PlayEvent(
            inning=self.inning, half=self.half, description=description, type=event_type,
        ))


@dataclass
class HalfInningResult:
    team_name: str
    inning: int
    half: Half
    runs: int
    hits: int
    errors: int
    left_on_base: int
    seed: int
    play_log: list[PlayEvent] = field(default_factory=list)
    shift_stats: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "team_name": self.team_name,
            "inning": self.inning,
            "half": self.half.value,
            "runs": self.runs,
            "hits": self.hits,
            "errors": self.errors,
            "left_on_base": self.left_on_base,
            "seed": self.seed,
            "play_log": [e.model_dump(mode="json") for e in self.play_log],
            "shift_stats": self.shift_stats,
        }


# ---------------------------------------------------------------------------
# Simulation engine
# ---------------------------------------------------------------------------

class SimulationEngine:
    """Drives the play resolution engines through a half-inning.

    ``instruction_script`` fixes the offensive instruction for each plate
    appearance in order; past its end, or when ``None``, the situational
    rules in ``choose_instruction`` decide. An instruction that does not fit
    the base state falls back to a normal swing.
    """

    def __init__(
        self,
        seed: int | None = None,
        pitch_by_pitch: bool = True,
        shift: DefensiveShift | str = DefensiveShift.NORMAL,
        instruction_script: list[OffensiveInstruction | str] | None = None,
    ):
        if seed is None:
            seed = random.randint(0, 2**31 - 1)
        self.seed = seed
        self.rng = random.Random(seed)
        self.pitch_by_pitch = pitch_by_pitch
        self.shift = DefensiveShift(shift)
        self.instruction_script = [OffensiveInstruction(i) for i in instruction_script or []]
        self.shift_tracker = ShiftTracker()
        self._plate_appearances = 0

    # -- applying outcomes ---------------------------------------------------

    def _apply(self, state: HalfInningState, advancements: list[Advancement],
               batter: PlayerInGame | None = None, rbi: bool = True) -> int:
        """Move runners and count outs; runs on a play that ends the half don't count."""
        batter_runner = Runner.for_player(batter) if batter is not None else None
        transition = apply_advancements(state.runners, advancements, batter_runner)
        state.runners = transition.runners
        state.outs += transition.outs
        if state.is_over:
            return 0

        state.runs += transition.runs
        by_id = {p.id: p for p in state.offense.lineup}
        for scorer in transition.scorers:
            player = by_id.get(scorer.player_id)
            if player is not None:
                player.runs += 1
        if batter is not None and rbi:
            batter.rbis += transition.runs
        return transition.runs

    def _next_instruction(self, state: HalfInningState, batter: PlayerInGame) -> OffensiveInstruction:
        index = self._plate_appearances
        if index < len(self.instruction_script):
            instruction = self.instruction_script[index]
        else:
            instruction = choose_instruction(state.runners, state.outs, batter, state.runner_players())
        if not _instruction_applies(instruction, state.runners):
            return OffensiveInstruction.NORMAL_SWING
        return instruction

    # -- running game --------------------------------------------------------

    def _pickoff(self, state: HalfInningState) -> None:
        if state.runners.first is None or state.runners.second is not None:
            return
        player = state.runner_players().get("first")
        result = resolve_pickoff(state.runners.first, "first", player, state.pitcher,
                                 state.infielders, self.rng)
        if result.attempted:
            state.log(result.commentary, "pickoff")
            self._apply(state, result.runners_advanced, rbi=False)

    def _steal(self, state: HalfInningState) -> None:
        base = _steal_base(state.runners)
        catcher = state.catcher
        if base is None or catcher is None:
            return
        result = resolve_steal(state.runners.get(base), base, state.runner_players()[base],
                               state.pitcher, catcher, state.infielders, self.rng)
        state.log(result.commentary, "steal")
        self._apply(state, [result.advancement()], rbi=False)

    def _double_steal(self, state: HalfInningState) -> None:
        catcher = state.catcher
        if catcher is None:
            return
        result = resolve_double_steal(state.runners, state.runner_players(), state.pitcher,
                                      catcher, state.infielders, self.rng)
        state.log(result.commentary, "double_steal")
        self._apply(state, result.runners_advanced, rbi=False)

    # -- plate appearance ----------------------------------------------------

    def _at_bat(self, state: HalfInningState, batter: PlayerInGame,
                instruction: OffensiveInstruction):
        pitcher = state.pitcher
        if self.pitch_by_pitch:
            result = resolve_at_bat(batter, pitcher, state.runners, pitcher.pitch_count,
                                    instruction, self.rng)
            pitcher.pitch_count += len(result.pitches)
        else:
            result = judge_at_bat_outcome(batter, pitcher, state.runners, pitcher.pitch_count,
                                          instruction, self.rng)
            pitcher.pitch_count += 1
        state.log(result.commentary, "at_bat")
        return result

    def _walk(self, state: HalfInningState, batter: PlayerInGame) -> None:
        self._apply(state, [Advancement("batter", "first"), *forced_advancements(state.runners)], batter)

    def _ball_in_play(self, state: HalfInningState, batter: PlayerInGame, batted_ball):
        result = resolve_ball_in_play(batted_ball, batter, state.runners, state.outs,
                                      state.defense.defense, self.shift, self.rng)
        self.shift_tracker.record(self.shift, result.category, result.outcome.value)
        state.log(result.commentary, "ball_in_play")
        if result.category in ("hit", "home_run"):
            state.hits += 1
            batter.hits += 1
        elif result.category == "error":
            state.errors += 1
        if result.outcome != DefensiveOutcome.SAC_FLY:
            batter.at_bats += 1
        return result

    def _swing_away(self, state: HalfInningState, batter: PlayerInGame,
                    instruction: OffensiveInstruction) -> None:
        at_bat = self._at_bat(state, batter, instruction)
        if at_bat.outcome == "walk":
            self._walk(state, batter)
            return
        if at_bat.outcome == "strikeout":
            batter.at_bats += 1
            self._apply(state, [Advancement("batter", "out")], batter)
            return
        play = self._ball_in_play(state, batter, at_bat.batted_ball)
        rbi = play.category != "error" and play.outcome != DefensiveOutcome.DOUBLE_PLAY
        self._apply(state, play.runners_advanced, batter, rbi)

    def _hit_and_run(self, state: HalfInningState, batter: PlayerInGame) -> None:
        runner = state.runners.first
        runner_player = state.runner_players()["first"]
        catcher = state.catcher
        if catcher is None:
            self._swing_away(state, batter, OffensiveInstruction.NORMAL_SWING)
            return

        at_bat = self._at_bat(state, batter, OffensiveInstruction.HIT_AND_RUN)
        if at_bat.outcome == "walk":
            self._walk(state, batter)
            return

        args = (runner, "first", runner_player, batter, state.pitcher, catcher, state.infielders)
        if at_bat.outcome == "strikeout":
            batter.at_bats += 1
            hr = resolve_hit_and_run(*args, "swing_miss", self.rng)
            state.log(hr.commentary, "hit_and_run")
            self._apply(state, [Advancement("batter", "out"), hr.runner_advancement], batter)
            return

        play = self._ball_in_play(state, batter, at_bat.batted_ball)
        advancements = play.runners_advanced
        if play.outcome == DefensiveOutcome.SINGLE:
            hr = resolve_hit_and_run(*args, "hit", self.rng)
            advancements = [a for a in advancements if a.from_base != "first"] + [hr.runner_advancement]
            state.log(hr.commentary, "hit_and_run")
        elif play.outcome == DefensiveOutcome.OUT:
            hr = resolve_hit_and_run(*args, "out", self.rng)
            advancements = [*advancements, hr.runner_advancement]
            state.log(hr.commentary, "hit_and_run")
        rbi = play.category != "error" and play.outcome != DefensiveOutcome.DOUBLE_PLAY
        self._apply(state, advancements, batter, rbi)

    def _bunt(self, state: HalfInningState, batter: PlayerInGame) -> None:
        strikes = 0
        while True:
            result = resolve_bunt(batter, state.pitcher, BuntType.SACRIFICE, state.runners,
                                  0, strikes, self.rng)
            state.pitcher.pitch_count += 1
            state.log(result.commentary, "bunt")
            if result.success:
                break
            if result.is_strikeout or (result.outcome == BuntOutcome.SWING_MISS and strikes == 2):
                batter.at_bats += 1
                self._apply(state, [Advancement("batter", "out")], batter)
                return
            if result.is_popup:
                batter.at_bats += 1
                self._apply(state, [Advancement("batter", "out")], batter)
                return
            strikes += 1

        fielder, assist = find_bunt_fielders(result.batted_bunt, state.defense.defense)
        fielding = resolve_bunt_fielding(result.batted_bunt, batter, fielder, assist,
                                         state.runners, state.outs, self.rng)
        state.log(fielding.commentary, "bunt_fielding")
        sacrifice = fielding.batter_out and not state.runners.is_empty
        if not sacrifice:
            batter.at_bats += 1
        self._apply(state, fielding.runners_advanced, batter)

    def _squeeze(self, state: HalfInningState, batter: PlayerInGame) -> None:
        runner = state.runners.third
        runner_player = state.runner_players().get("third")
        result = resolve_squeeze(batter, state.pitcher, runner, runner_player, 0, 0, self.rng)
        state.pitcher.pitch_count += 1
        state.log(result.commentary, "squeeze")

        if result.outcome == BuntOutcome.FOUL:
            # runner goes back to third and the batter swings away
            self._swing_away(state, batter, OffensiveInstruction.NORMAL_SWING)
            return
        if not result.success:
            self._apply(state, [Advancement("third", "out")], rbi=False)
            if not state.is_over and result.is_popup:
                batter.at_bats += 1
                self._apply(state, [Advancement("batter", "out")], batter)
            elif not state.is_over:
                self._swing_away(state, batter, OffensiveInstruction.NORMAL_SWING)
            return

        # The race at the plate is already decided; fielding plays on everyone else.
        trailing = state.runners.model_copy(update={"third": None})
        if not result.runner_safe:
            batter.at_bats += 1
            forced = [a for a in forced_advancements(trailing) if a.from_base != "third"]
            self._apply(state, [Advancement("third", "out"), Advancement("batter", "first"), *forced],
                        batter, rbi=False)
            return

        fielder, assist = find_bunt_fielders(result.batted_bunt, state.defense.defense)
        fielding = resolve_bunt_fielding(result.batted_bunt, batter, fielder, assist,
                                         trailing, state.outs, self.rng)
        state.log(fielding.commentary, "bunt_fielding")
        self._apply(state, [Advancement("third", "home"), *fielding.runners_advanced], batter)

    def play_plate_appearance(self, state: HalfInningState) -> None:
        batter = state.current_batter()
        if not state.runners.is_empty:
            self._pickoff(state)
            if state.is_over:
                return

        instruction = self._next_instruction(state, batter)
        self._plate_appearances += 1
        logger.debug("%s up with %s, %d out: %s", batter.name, state.runners.bases_string(),
                     state.outs, instruction.value)

        if instruction == OffensiveInstruction.STEAL:
            self._steal(state)
        elif instruction == OffensiveInstruction.DOUBLE_STEAL:
            self._double_steal(state)
        if state.is_over:
            return

        if instruction == OffensiveInstruction.BUNT:
            self._bunt(state, batter)
        elif instruction == OffensiveInstruction.SQUEEZE:
            self._squeeze(state, batter)
        elif instruction == OffensiveInstruction.HIT_AND_RUN:
            self._hit_and_run(state, batter)
        elif instruction == OffensiveInstruction.WAIT:
            self._swing_away(state, batter, OffensiveInstruction.WAIT)
        else:
            self._swing_away(state, batter, OffensiveInstruction.NORMAL_SWING)
        state.batter_index += 1

    def play_half_inning(
        self,
        offense: TeamRoster,
        defense: TeamRoster,
        inning: int = 1,
        half: Half | str = Half.TOP,
    ) -> HalfInningResult:
        state = HalfInningState(inning=inning, half=Half(half), offense=offense, defense=defense)
        label = "Top" if state.half == Half.TOP else "Bottom"
        logger.info("%s of inning %d: %s batting, seed %d", label, inning, offense.team_name, self.seed)
        state.log(f"{label} of the {_ordinal(inning)}. {offense.team_name} batting.", "inning_start")
        state.log(commentary.shift_instruction(self.shift), "shift")

        while not state.is_over:
            self.play_plate_appearance(state)

        left_on_base = state.runners.count
        state.log(
            f"End of the half. {state.runs} run{'s' if state.runs != 1 else ''}, "
            f"{state.hits} hit{'s' if state.hits != 1 else ''}, {left_on_base} left on base.",
            "inning_end",
        )
        logger.info("Half-inning over: %d runs, %d hits", state.runs, state.hits)
        return HalfInningResult(
            team_name=offense.team_name,
            inning=inning,
            half=state.half,
            runs=state.runs,
            hits=state.hits,
            errors=state.errors,
            left_on_base=left_on_base,
            seed=self.seed,
            play_log=state.play_log,
            shift_stats=self.shift_tracker.to_dict(),
        )


def _ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    try:
        settings = get_settings()
    except ValidationError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1

    parser = argparse.ArgumentParser(
        description="Simulate one half-inning with the play resolution engine."
    )
    parser.add_argument(
        "--seed", type=int, default=settings.seed,
        help="Seed for a reproducible play-by-play.",
    )
    parser.add_argument(
        "--rosters", type=Path, default=settings.rosters_path,
        help="Roster JSON with 'away' and 'home' teams.",
    )
    parser.add_argument(
        "--half", choices=[h.value for h in Half], default=Half.TOP.value,
        help="top: away team bats; bottom: home team bats.",
    )
    parser.add_argument(
        "--shift", choices=[s.value for s in DefensiveShift], default=DefensiveShift.NORMAL.value,
        help="Defensive alignment for the fielding team.",
    )
    parser.add_argument(
        "--quick", action="store_true", default=not settings.pitch_by_pitch,
        help="Resolve each at-bat with one draw instead of pitch by pitch.",
    )
    parser.add_argument(
        "--json", action="store_true",
        help="Print the play log as JSON.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Debug logging for every rate and draw.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(levelname)s: %(message)s",
    )

    try:
        rosters = load_rosters(args.rosters)
    except (OSError, ValueError) as e:
        print(f"Error: could not load rosters from {args.rosters}: {e}", file=sys.stderr)
        return 1

    if args.half == Half.TOP.value:
        offense, defense = rosters["away"], rosters["home"]
    else:
        offense, defense = rosters["home"], rosters["away"]

    engine = SimulationEngine(seed=args.seed, pitch_by_pitch=not args.quick, shift=args.shift)
    try:
        result = engine.play_half_inning(offense, defense, half=args.half)
    except EngineError as e:
        logger.error("Simulation stopped: %s", e.message)
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    else:
        print(f"Seed: {result.seed}")
        for event in result.play_log:
            print(event.description)
    return 0


if __name__ == "__main__":
    sys.exit(main())
