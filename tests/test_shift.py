# /// script
# requires-python = ">=3.12"
# dependencies = ["pytest>=7.0", "pydantic>=2.0"]
# ///
"""Tests for the defensive shift model.

Verifies:
  1. Pull / center / opposite classification by batter hand
  2. Ground-ball effects for pull shifts, infield in and infield back
  3. Fly-ball and liner effects scale with average range
  4. Extra-base effects by hit type and side
  5. Effectiveness judgment and the usage tracker
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from engine.shift import (
    SHIFT_MODIFIERS,
    ShiftTracker,
    air_ball_shift_effect,
    average_defensive_range,
    ball_side,
    extra_base_shift_effect,
    ground_ball_shift_effect,
    shift_was_effective,
)
from models import DefensiveShift

from factories import make_defense, make_fielder


def test_ball_side_by_hand():
    assert ball_side("right", "left") == "pull"
    assert ball_side("right", "center_right") == "opposite"
    assert ball_side("left", "right") == "pull"
    assert ball_side("left", "center_left") == "opposite"
    assert ball_side("right", "center") == "center"
    assert ball_side("switch", "left") == "center"


def test_average_range():
    defense = make_defense(SS=make_fielder("SS", fielding={"infield_range": 90}))
    # 1B/2B/3B at 50, SS at 90
    assert average_defensive_range(defense, infield=True) == pytest.approx(60.0)
    assert average_defensive_range(defense, infield=False) == pytest.approx(50.0)
    assert average_defensive_range([], infield=True) == 70.0


def test_normal_alignment_has_no_effect():
    assert ground_ball_shift_effect("normal", "pull", 70).infield_hit_rate == 0
    air = air_ball_shift_effect("normal", "liner", True, 70, "pull")
    assert (air.range_modifier, air.catch_modifier, air.extra_base_modifier) == (0, 0, 0)
    assert extra_base_shift_effect("normal", "double", "opposite").extra_base_rate == 0


class TestGroundBall:
    def test_pull_side_closes_holes(self):
        effect = ground_ball_shift_effect(DefensiveShift.PULL_RIGHT, "pull", 70)
        assert effect.infield_hit_rate == pytest.approx(-30)
        assert effect.guaranteed_hit == 0

    def test_extreme_shift_pull_side(self):
        effect = ground_ball_shift_effect(DefensiveShift.EXTREME_SHIFT, "pull", 70)
        assert effect.infield_hit_rate == pytest.approx(-50)
        assert effect.out_probability == pytest.approx(20)

    def test_extreme_shift_opposite_side(self):
        effect = ground_ball_shift_effect(DefensiveShift.EXTREME_SHIFT, "opposite", 80)
        assert effect.infield_hit_rate == pytest.approx(60)
        assert effect.guaranteed_hit == 30

    def test_opposite_hole_bigger_with_less_range(self):
        slow = ground_ball_shift_effect(DefensiveShift.PULL_LEFT, "opposite", 40)
        quick = ground_ball_shift_effect(DefensiveShift.PULL_LEFT, "opposite", 80)
        assert slow.infield_hit_rate > quick.infield_hit_rate

    def test_infield_in_and_back(self):
        assert ground_ball_shift_effect("infield_in", "center", 70).out_probability == pytest.approx(20)
        assert ground_ball_shift_effect("infield_back", "center", 70).infield_hit_rate == 20


class TestAirBall:
    def test_infield_back_helps_outfield(self):
        effect = air_ball_shift_effect("infield_back", "fly", False, 70, "center")
        assert effect.range_modifier == pytest.approx(20)
        assert effect.catch_modifier == pytest.approx(15)

    def test_infield_back_hurts_infield(self):
        effect = air_ball_shift_effect("infield_back", "fly", True, 80, "center")
        assert effect.range_modifier == pytest.approx(-10)
        assert effect.extra_base_modifier == pytest.approx(15)

    def test_infield_in_shallow_outfield(self):
        effect = air_ball_shift_effect("infield_in", "fly", False, 80, "center")
        assert effect.range_modifier == pytest.approx(-10)
        assert effect.extra_base_modifier == pytest.approx(10)

    def test_liner_into_and_away_from_shift(self):
        pull = air_ball_shift_effect("extreme_shift", "liner", True, 70, "pull")
        oppo = air_ball_shift_effect("extreme_shift", "liner", True, 70, "opposite")
        assert pull.catch_modifier == pytest.approx(25)
        assert oppo.catch_modifier == pytest.approx(-40)

    def test_fly_ignores_side_for_pull_shift(self):
        effect = air_ball_shift_effect("pull_right", "fly", False, 70, "opposite")
        assert effect.catch_modifier == 0


class TestExtraBase:
    def test_extreme_shift_opposite(self):
        assert extra_base_shift_effect("extreme_shift", "double", "opposite").extra_base_rate == 35
        assert extra_base_shift_effect("extreme_shift", "triple", "opposite").extra_base_rate == 50

    def test_pull_shift_opposite_double(self):
        effect = extra_base_shift_effect("pull_left", "double", "opposite")
        assert effect.extra_base_rate == 20
        assert effect.advance_runner == 20

    def test_infield_in_double(self):
        effect = extra_base_shift_effect("infield_in", "double", "center")
        assert effect.extra_base_rate == 10
        assert effect.advance_runner == 15

    def test_infield_back_triple(self):
        assert extra_base_shift_effect("infield_back", "triple", "pull").extra_base_rate == -20


class TestEffectiveness:
    def test_pull_shift(self):
        assert shift_was_effective("pull_right", "out", "pull")
        assert shift_was_effective("pull_right", "single", "opposite")
        assert not shift_was_effective("pull_right", "single", "pull")

    def test_depth_shifts_count_outs(self):
        assert shift_was_effective("infield_in", "out", "center")
        assert not shift_was_effective("infield_back", "single", "center")

    def test_normal_never_effective(self):
        assert not shift_was_effective("normal", "out", "pull")


class TestTracker:
    def test_record_and_rate(self):
        tracker = ShiftTracker()
        tracker.record("extreme_shift", "out", "out")
        tracker.record("extreme_shift", "out", "double_play")
        tracker.record("extreme_shift", "hit", "double")
        tracker.record("extreme_shift", "error", "error")
        stat = tracker.get(DefensiveShift.EXTREME_SHIFT)
        assert stat.usage_count == 4
        assert stat.success_count == 2
        assert stat.failure_count == 1
        assert stat.extra_base_hits == 1
        assert stat.success_rate == pytest.approx(50.0)

    def test_to_dict_only_used_shifts(self):
        tracker = ShiftTracker()
        tracker.record("normal", "home_run", "home_run")
        d = tracker.to_dict()
        assert list(d) == ["normal"]
        assert d["normal"]["extra_base_hits"] == 1
        assert d["normal"]["shift"] == "normal"

    def test_every_alignment_has_modifiers(self):
        assert set(SHIFT_MODIFIERS) == set(DefensiveShift)
