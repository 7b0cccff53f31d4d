# /// script
# requires-python = ">=3.12"
# dependencies = ["pytest>=7.0", "pydantic>=2.0"]
# ///
"""Tests for the at-bat engine.

Verifies:
  1. Single-pitch resolution follows the zone / swing / contact / foul draw order
  2. Wait and hit-and-run instructions skip the swing draw
  3. The pitch loop ends on four balls, three strikes, or a ball in play
  4. Two-strike fouls leave the count alone; pitch numbers continue from the pitcher's count
  5. Batted-ball type / direction / strength mapping and pull tendencies by hand
  6. Quick-mode outcomes and the rate tables' clamps
  7. Bunt instructions are refused
"""

import random
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from engine.at_bat import (
    contact_rate,
    extra_base_potential,
    foul_rate,
    generate_batted_ball,
    judge_at_bat_outcome,
    resolve_at_bat,
    resolve_pitch,
    strikeout_chance,
    swing_rate,
    walk_chance,
    zone_rate,
)
from engine.errors import UnsupportedInstructionError
from engine.probability import ScriptedRandom
from models import BattingAbilities

from factories import BATTING, make_pitcher, make_player

# Neutral right-handed batter vs neutral right-hander (0.9 platoon factor):
# zone 50, swing 64 in zone / 32 out, contact 72 in zone, foul 40.5.
BALL = [0.9, 0.9]
CALLED_STRIKE = [0.1, 0.9]
SWINGING_STRIKE = [0.1, 0.1, 0.9]
FOUL = [0.1, 0.1, 0.1, 0.1]
IN_PLAY = [0.1, 0.1, 0.1, 0.9]


def neutral_batting(**overrides) -> BattingAbilities:
    return BattingAbilities(**{**BATTING, **overrides})


# ---------------------------------------------------------------------------
# Single pitch
# ---------------------------------------------------------------------------

class TestResolvePitch:
    @pytest.mark.parametrize("draws, expected", [
        (BALL, "ball"),
        (CALLED_STRIKE, "called_strike"),
        (SWINGING_STRIKE, "swinging_strike"),
        (FOUL, "foul"),
        (IN_PLAY, "in_play"),
    ])
    def test_outcomes(self, draws, expected):
        rng = ScriptedRandom(draws)
        result = resolve_pitch(make_player(), make_pitcher(), 0, 0, rng=rng)
        assert result.outcome == expected
        assert rng.remaining == 0

    def test_wait_skips_swing_on_zero_strikes(self):
        rng = ScriptedRandom([0.1])
        result = resolve_pitch(make_player(), make_pitcher(), 0, 0, instruction="wait", rng=rng)
        assert result.outcome == "called_strike"

    def test_wait_swings_normally_after_a_strike(self):
        rng = ScriptedRandom(SWINGING_STRIKE)
        result = resolve_pitch(make_player(), make_pitcher(), 0, 1, instruction="wait", rng=rng)
        assert result.outcome == "swinging_strike"

    def test_hit_and_run_always_swings(self):
        rng = ScriptedRandom([0.9, 0.1, 0.9])
        result = resolve_pitch(make_player(), make_pitcher(), 0, 0, instruction="hit_and_run", rng=rng)
        # out of the zone but swung at, contact 52 made, not foul
        assert result.outcome == "in_play"

    def test_bunt_instruction_refused(self):
        with pytest.raises(UnsupportedInstructionError):
            resolve_pitch(make_player(), make_pitcher(), 0, 0, instruction="bunt",
                          rng=ScriptedRandom([]))

    def test_description_names_players(self):
        result = resolve_pitch(make_player(name="Ada Voss"), make_pitcher(), 0, 0,
                               rng=ScriptedRandom(CALLED_STRIKE))
        assert "Ada Voss" in result.description


# ---------------------------------------------------------------------------
# Plate appearance
# ---------------------------------------------------------------------------

class TestResolveAtBat:
    def test_walk_on_four_balls(self):
        rng = ScriptedRandom(BALL * 4)
        result = resolve_at_bat(make_player(), make_pitcher(), rng=rng)
        assert result.outcome == "walk"
        assert len(result.pitches) == 4
        assert result.final_pitch.balls == 4
        assert result.batted_ball is None
        assert "walk" in result.commentary

    def test_strikeout_looking(self):
        rng = ScriptedRandom(CALLED_STRIKE * 3)
        result = resolve_at_bat(make_player(name="Cal"), make_pitcher(), rng=rng)
        assert result.outcome == "strikeout"
        assert result.commentary == "Cal strikes out looking."

    def test_strikeout_swinging(self):
        rng = ScriptedRandom(CALLED_STRIKE * 2 + SWINGING_STRIKE)
        result = resolve_at_bat(make_player(name="Cal"), make_pitcher(), rng=rng)
        assert result.commentary == "Cal strikes out swinging."

    def test_two_strike_foul_keeps_count(self):
        rng = ScriptedRandom(FOUL * 4 + CALLED_STRIKE)
        result = resolve_at_bat(make_player(), make_pitcher(), rng=rng)
        assert [p.strikes for p in result.pitches] == [1, 2, 2, 2, 3]
        assert result.outcome == "strikeout"

    def test_ball_in_play_builds_batted_ball(self):
        # in play, then type (ground), direction (pull side), strength (strong)
        rng = ScriptedRandom(IN_PLAY + [0.1, 0.1, 0.5])
        result = resolve_at_bat(make_player(), make_pitcher(), rng=rng)
        assert result.outcome == "in_play"
        ball = result.batted_ball
        assert (ball.type, ball.direction, ball.strength) == ("ground_ball", "left", "strong")
        assert rng.remaining == 0

    def test_pitch_numbers_continue_from_pitch_count(self):
        rng = ScriptedRandom(BALL * 4)
        result = resolve_at_bat(make_player(), make_pitcher(), pitch_count=10, rng=rng)
        assert [p.pitch_number for p in result.pitches] == [11, 12, 13, 14]

    def test_squeeze_refused(self):
        with pytest.raises(UnsupportedInstructionError):
            resolve_at_bat(make_player(), make_pitcher(), instruction="squeeze")

    def test_to_dict(self):
        result = resolve_at_bat(make_player(), make_pitcher(), rng=ScriptedRandom(BALL * 4))
        d = result.to_dict()
        assert d["outcome"] == "walk"
        assert len(d["pitches"]) == 4
        assert d["batted_ball"] is None


# ---------------------------------------------------------------------------
# Batted ball
# ---------------------------------------------------------------------------

class TestBattedBall:
    @pytest.mark.parametrize("draw, expected", [
        (0.1, "ground_ball"),
        (0.3, "line_drive"),
        (0.5, "fly_ball"),
    ])
    def test_type_bands(self, draw, expected):
        player = make_player()
        ball = generate_batted_ball(player, player.batting, make_pitcher().pitching,
                                    ScriptedRandom([draw, 0.5, 0.5]))
        assert ball.type == expected

    @pytest.mark.parametrize("draw, expected", [
        (0.1, "very_strong"),
        (0.5, "strong"),
        (0.8, "medium"),
        (0.95, "weak"),
    ])
    def test_strength_bands(self, draw, expected):
        player = make_player()
        ball = generate_batted_ball(player, player.batting, None, ScriptedRandom([0.5, 0.5, draw]))
        assert ball.strength == expected

    def test_left_handed_batter_pulls_right(self):
        player = make_player(batter_hand="left")
        ball = generate_batted_ball(player, player.batting, None, ScriptedRandom([0.5, 0.1, 0.5]))
        assert ball.direction == "right"

    def test_switch_hitter_spread_evenly(self):
        player = make_player(batter_hand="switch")
        ball = generate_batted_ball(player, player.batting, None, ScriptedRandom([0.5, 0.5, 0.5]))
        assert ball.direction == "center"

    def test_pull_tendency_distribution(self):
        """Right-handed batters should favor the left side, left-handed the right."""
        rng = random.Random(11)
        righty = make_player(batter_hand="right")
        lefty = make_player(batter_hand="left")
        pull_left = sum(
            generate_batted_ball(righty, righty.batting, None, rng).direction in ("left", "center_left")
            for _ in range(2000)
        )
        pull_right = sum(
            generate_batted_ball(lefty, lefty.batting, None, rng).direction in ("right", "center_right")
            for _ in range(2000)
        )
        assert pull_left > 1000
        assert pull_right > 1000

    def test_extra_base_potential(self):
        assert extra_base_potential(50, 50, "fly_ball", "strong") == pytest.approx(90.0)
        assert extra_base_potential(100, 100, "fly_ball", "very_strong") == 100
        assert extra_base_potential(50, 50, "ground_ball", "weak") == pytest.approx(4.5)


# ---------------------------------------------------------------------------
# Quick mode and rate tables
# ---------------------------------------------------------------------------

class TestQuickMode:
    def test_strikeout(self):
        result = judge_at_bat_outcome(make_player(), make_pitcher(), rng=ScriptedRandom([0.1]))
        assert result.outcome == "strikeout"
        assert result.pitches == []

    def test_walk(self):
        # k = 22.75, bb = 5.375 for neutral same-handed players
        result = judge_at_bat_outcome(make_player(), make_pitcher(), rng=ScriptedRandom([0.25]))
        assert result.outcome == "walk"

    def test_in_play(self):
        rng = ScriptedRandom([0.5, 0.5, 0.5, 0.5])
        result = judge_at_bat_outcome(make_player(), make_pitcher(), rng=rng)
        assert result.outcome == "in_play"
        assert result.batted_ball is not None
        assert rng.remaining == 0


class TestRates:
    def test_zone_rate_clamped(self):
        assert zone_rate(50) == 50
        assert zone_rate(0) == 30
        assert zone_rate(100) == 70
        assert 25 <= zone_rate(-200) and zone_rate(300) <= 80

    def test_two_strikes_widen_swing(self):
        batting = neutral_batting()
        assert swing_rate(batting, 50, True, 2) == swing_rate(batting, 50, True, 0) + 15
        assert swing_rate(batting, 50, False, 2) == swing_rate(batting, 50, False, 0) + 10

    def test_contact_out_of_zone_penalty(self):
        batting = neutral_batting()
        assert contact_rate(batting, 50, 50, False, 0) == contact_rate(batting, 50, 50, True, 0) - 20

    def test_rates_stay_in_bounds(self):
        weak = neutral_batting(contact=0, avoid_ks=0, eye=0)
        strong = neutral_batting(contact=100, avoid_ks=100, eye=100)
        for batting in (weak, strong):
            for stuff in (0, 100):
                for strikes in (0, 2):
                    for in_zone in (True, False):
                        assert 30 <= contact_rate(batting, stuff, stuff, in_zone, strikes) <= 95
                        assert 5 <= swing_rate(batting, stuff, in_zone, strikes) <= 95
                    assert 20 <= foul_rate(batting, stuff, strikes) <= 60
        assert 5 <= strikeout_chance(100, 100, 0, 0) <= 40
        assert 2 <= walk_chance(0, 100) <= 20
