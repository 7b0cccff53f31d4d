# /// script
# requires-python = ">=3.12"
# dependencies = ["pytest>=7.0", "pydantic>=2.0"]
# ///
"""Tests for the defensive engine.

Verifies:
  1. Fielder assignment by direction, ball type and shift
  2. Ground balls: out, single, scorched double, error, double play
  3. Fly balls: home run, sacrifice fly, gap double
  4. Line drives: caught and dropped in
  5. Runner movement on errors and double plays
  6. Shift effects show up in the result and its commentary
  7. Shifted gaps stretch hits and speed runners up
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from engine.at_bat import BattedBall
from engine.defense import (
    DefensiveOutcome,
    ErrorType,
    double_play_advancements,
    double_play_rate,
    error_advancements,
    find_fielder,
    priority_positions,
    resolve_ball_in_play,
    shifted_direction,
    tag_up_rate,
)
from engine.errors import PreconditionError
from engine.probability import ScriptedRandom
from engine.runners import apply_advancements
from models import DefensiveShift, Runner, RunnerState

from factories import make_defense, make_fielder, make_player, make_runners


def ball(kind="ground_ball", direction="left", strength="medium", ebp=50.0):
    return BattedBall(kind, direction, strength, ebp)


def moves(result):
    return [(a.from_base, a.to) for a in result.runners_advanced]


BATTER = make_player(name="Kit Alder")


def play(batted_ball, draws, runners=None, outs=0, shift=DefensiveShift.NORMAL, defense=None):
    rng = ScriptedRandom(draws)
    result = resolve_ball_in_play(batted_ball, BATTER, runners or RunnerState(), outs,
                                  defense or make_defense(), shift, rng=rng)
    assert rng.remaining == 0
    return result


# ---------------------------------------------------------------------------
# Fielder assignment
# ---------------------------------------------------------------------------

class TestFieldersAssignment:
    def test_priority_by_ball_type(self):
        assert priority_positions("left", "ground_ball") == ["3B", "SS", "LF", "CF"]
        assert priority_positions("left", "fly_ball") == ["LF", "CF", "3B", "SS"]
        assert priority_positions("left", "line_drive") == ["LF", "3B", "SS", "CF"]

    def test_shifted_direction(self):
        assert shifted_direction("left", DefensiveShift.PULL_RIGHT) == "center_left"
        assert shifted_direction("right", DefensiveShift.PULL_LEFT) == "center_right"
        assert shifted_direction("right", DefensiveShift.EXTREME_SHIFT) == "center"
        assert shifted_direction("left", DefensiveShift.INFIELD_IN) == "left"

    def test_ground_ball_to_third_with_assist(self):
        assignment = find_fielder(ball(), make_defense())
        assert assignment.position == "3B"
        assert assignment.assist.position == "2B"

    def test_next_fielder_when_one_is_missing(self):
        assignment = find_fielder(ball(), make_defense(**{"3B": None}))
        assert assignment.position == "SS"

    def test_nobody_to_field_it(self):
        with pytest.raises(PreconditionError):
            find_fielder(ball(), [make_fielder("RF")])

    def test_extreme_shift_sends_everything_up_the_middle(self):
        assignment = find_fielder(ball(), make_defense(), DefensiveShift.EXTREME_SHIFT)
        assert assignment.position == "2B"


# ---------------------------------------------------------------------------
# Ground balls
# ---------------------------------------------------------------------------

class TestGroundBall:
    # medium grounder to an average 3B: catch 35, error 7.5, double play 35

    def test_routine_out(self):
        result = play(ball(), [0.1, 0.5])
        assert result.outcome == DefensiveOutcome.OUT
        assert result.batter_out and result.outs_recorded == 1
        assert result.category == "out"
        assert result.commentary == "Fielder 3B (3B) makes the play. Kit Alder is out."

    def test_through_for_a_single(self):
        result = play(ball(), [0.9])
        assert result.outcome == DefensiveOutcome.SINGLE
        assert moves(result) == [("batter", "first")]
        assert "Kit Alder with a single." in result.commentary

    def test_scorcher_can_become_a_double(self):
        result = play(ball(strength="very_strong"), [0.9, 0.8])
        assert result.outcome == DefensiveOutcome.DOUBLE
        assert moves(result) == [("batter", "second")]

    def test_fielding_error(self):
        result = play(ball(), [0.1, 0.05], runners=make_runners(second="r2"))
        assert result.outcome == DefensiveOutcome.ERROR
        assert result.error_type == ErrorType.FIELDING
        assert moves(result) == [("batter", "first"), ("second", "third")]
        assert "boots it" in result.commentary
        assert result.category == "error"

    def test_double_play(self):
        runners = make_runners(first="r1")
        result = play(ball(), [0.1, 0.5, 0.1], runners=runners)
        assert result.outcome == DefensiveOutcome.DOUBLE_PLAY
        assert result.outs_recorded == 2
        assert "Fielder 3B (3B) to Fielder 2B, double play!" in result.commentary

    def test_no_double_play_with_two_outs(self):
        result = play(ball(), [0.1, 0.5], runners=make_runners(first="r1"), outs=2)
        assert result.outcome == DefensiveOutcome.OUT

    def test_double_play_rate_bounds(self):
        slick = make_fielder("SS", fielding={"turn_dp": 100})
        clumsy = make_fielder("2B", fielding={"turn_dp": 0})
        assert double_play_rate(slick, slick, "weak") == 70
        assert double_play_rate(clumsy, clumsy, "very_strong") == 10
        assert double_play_rate(make_fielder("SS"), make_fielder("2B"), "medium") == 35


# ---------------------------------------------------------------------------
# Fly balls and line drives
# ---------------------------------------------------------------------------

class TestFlyBall:
    def test_home_run_without_a_draw(self):
        result = play(ball("fly_ball", "center", "very_strong", 90), [],
                      runners=make_runners(first="r1"))
        assert result.outcome == DefensiveOutcome.HOME_RUN
        assert result.runs_scored == 2
        assert result.category == "home_run"
        assert "Kit Alder hits a home run!" in result.commentary

    def test_sacrifice_fly_scores_runner(self):
        runners = make_runners(third="r3")
        result = play(ball("fly_ball", "center"), [0.1, 0.5, 0.1], runners=runners)
        assert result.outcome == DefensiveOutcome.SAC_FLY
        assert moves(result) == [("batter", "out"), ("third", "home")]
        assert result.runners_advanced[-1].is_tag_up
        assert "tags and scores" in result.commentary

    def test_sacrifice_fly_runner_holds(self):
        result = play(ball("fly_ball", "center"), [0.1, 0.5, 0.9], runners=make_runners(third="r3"))
        assert result.outcome == DefensiveOutcome.SAC_FLY
        assert result.runs_scored == 0
        assert "holds at third" in result.commentary

    def test_no_sac_fly_with_two_outs(self):
        result = play(ball("fly_ball", "center"), [0.1, 0.5], runners=make_runners(third="r3"), outs=2)
        assert result.outcome == DefensiveOutcome.OUT

    def test_dropped_fly(self):
        result = play(ball("fly_ball", "center"), [0.1, 0.01])
        assert result.error_type == ErrorType.DROPPED_FLY
        assert "drops the fly ball" in result.commentary

    def test_gap_double(self):
        result = play(ball("fly_ball", "center"), [0.9, 0.5])
        assert result.outcome == DefensiveOutcome.DOUBLE

    def test_tag_up_rate_bounds(self):
        assert tag_up_rate(50, "medium") == 60
        assert tag_up_rate(100, "weak") == 20
        assert tag_up_rate(0, "very_strong") == 95


class TestLineDrive:
    def test_caught(self):
        result = play(ball("line_drive"), [0.1, 0.5])
        assert result.outcome == DefensiveOutcome.OUT
        assert result.fielder_position == "LF"

    def test_falls_in(self):
        result = play(ball("line_drive"), [0.9, 0.5])
        assert result.outcome == DefensiveOutcome.SINGLE

    def test_hard_liner_to_outfield_is_a_double(self):
        result = play(ball("line_drive", strength="strong", ebp=60), [0.9, 0.5])
        assert result.outcome == DefensiveOutcome.DOUBLE

    def test_unknown_ball_type(self):
        with pytest.raises(ValueError):
            play(ball("bunt"), [])


# ---------------------------------------------------------------------------
# Runner movement
# ---------------------------------------------------------------------------

class TestAdvancements:
    def test_throwing_error_gives_two_bases(self):
        runners = make_runners(first="r1", third="r3")
        result = error_advancements(ErrorType.THROWING, runners)
        assert [(a.from_base, a.to) for a in result] == [
            ("batter", "second"), ("third", "home"), ("first", "third")]

    def test_double_play_runner_on_second_moves_up(self):
        runners = make_runners(first="r1", second="r2")
        result = double_play_advancements(runners, 0)
        assert [(a.from_base, a.to) for a in result] == [
            ("batter", "out"), ("first", "out"), ("second", "third")]

    def test_double_play_bases_loaded_one_out(self):
        runners = make_runners(first="r1", second="r2", third="r3")
        result = double_play_advancements(runners, 1)
        t = apply_advancements(runners, result, Runner(player_id="bat", player_name="Batter"))
        assert t.outs == 2 and t.runs == 0
        assert t.runners.second.player_id == "r2"
        assert t.runners.third.player_id == "r3"

    def test_double_play_bases_loaded_no_outs(self):
        runners = make_runners(first="r1", second="r2", third="r3")
        result = double_play_advancements(runners, 0)
        t = apply_advancements(runners, result, Runner(player_id="bat", player_name="Batter"))
        assert t.runs == 1
        assert t.runners.third.player_id == "r2"


# ---------------------------------------------------------------------------
# Shifts
# ---------------------------------------------------------------------------

class TestShiftInPlay:
    def test_grounder_into_the_shift(self):
        result = play(ball(), [0.1, 0.5], shift=DefensiveShift.EXTREME_SHIFT)
        assert result.outcome == DefensiveOutcome.OUT
        assert result.fielder_position == "2B"
        assert result.shift_effective
        assert "The extreme shift pays off." in result.commentary

    def test_grounder_the_other_way_finds_the_hole(self):
        # 0.9: the single does not stretch through the open gap
        result = play(ball(direction="right"), [0.1, 0.1, 0.9], shift=DefensiveShift.EXTREME_SHIFT)
        assert result.outcome == DefensiveOutcome.SINGLE
        assert result.shift_effective
        assert "right where the shift left a hole" in result.commentary

    def test_left_handed_batter_pulls_to_right(self):
        lefty = make_player(name="Lefty", batter_hand="left")
        rng = ScriptedRandom([0.1, 0.1, 0.9])
        result = resolve_ball_in_play(ball(direction="left"), lefty, RunnerState(), 0, make_defense(),
                                      DefensiveShift.EXTREME_SHIFT, rng=rng)
        # opposite field for a left-handed hitter
        assert result.outcome == DefensiveOutcome.SINGLE
        assert rng.remaining == 0

    def test_single_stretches_into_the_open_gap(self):
        # the extreme shift gives an opposite-field single a 35% stretch chance
        result = play(ball(direction="right"), [0.1, 0.1, 0.1], shift=DefensiveShift.EXTREME_SHIFT)
        assert result.outcome == DefensiveOutcome.DOUBLE
        assert moves(result) == [("batter", "second")]

    def test_no_stretch_roll_without_a_gap(self):
        # a pulled single against the extreme shift has no stretch chance, so no extra draw
        result = play(ball(kind="line_drive", direction="left", strength="strong"), [0.9, 0.9],
                      shift=DefensiveShift.EXTREME_SHIFT)
        assert result.outcome == DefensiveOutcome.SINGLE

    def test_runner_scores_through_the_open_side(self):
        # score from second: 60 straight up, 80 with the opposite-field bonus
        runners = make_runners(second="r2")
        shifted = play(ball(direction="right"), [0.1, 0.1, 0.9, 0.7], runners=runners,
                       shift=DefensiveShift.EXTREME_SHIFT)
        assert ("second", "home") in moves(shifted)
        straight_up = play(ball(direction="right"), [0.99, 0.7], runners=runners)
        assert ("second", "third") in moves(straight_up)

    def test_to_dict(self):
        d = play(ball(), [0.1, 0.5]).to_dict()
        assert d["outcome"] == "out"
        assert d["fielder_position"] == "3B"
        assert d["assist_by"] == "Fielder 2B"
        assert d["batter_out"] is True
