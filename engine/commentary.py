# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""Play-by-play text for engine outcomes.

Renderers read finished outcome records and return a line of English.
They never draw random numbers, so commentary can be regenerated from a
stored result without changing what happened.
"""

from __future__ import annotations

BASE_LABELS = {
    "first": "first",
    "second": "second",
    "third": "third",
    "home": "home",
    "batter": "the plate",
}

POSITION_NAMES = {
    "P": "pitcher",
    "C": "catcher",
    "1B": "first baseman",
    "2B": "second baseman",
    "3B": "third baseman",
    "SS": "shortstop",
    "LF": "left fielder",
    "CF": "center fielder",
    "RF": "right fielder",
}

DIRECTION_NAMES = {
    "left": "to left",
    "center_left": "to left-center",
    "center": "up the middle",
    "center_right": "to right-center",
    "right": "to right",
}

BALL_TYPE_NAMES = {
    "ground_ball": "grounder",
    "fly_ball": "fly ball",
    "line_drive": "line drive",
}

STRENGTH_NAMES = {
    "weak": "soft",
    "medium": "routine",
    "strong": "hard",
    "very_strong": "scorching",
}

BUNT_DIRECTION_NAMES = {
    "third_base_line": "down the third-base line",
    "pitcher_front": "back toward the mound",
    "first_base_line": "down the first-base line",
}

SHIFT_DISPLAY_NAMES = {
    "normal": "standard alignment",
    "pull_right": "shift to the right side",
    "pull_left": "shift to the left side",
    "extreme_shift": "extreme shift",
    "infield_in": "infield in",
    "infield_back": "infield back",
}

HIT_NAMES = {"single": "single", "double": "double", "triple": "triple", "home_run": "home run"}


def _value(v) -> str:
    """Enum members render by value; plain strings pass through."""
    return getattr(v, "value", v)


def _fielder(name: str, position: str | None) -> str:
    if not name:
        return "the defense"
    if position:
        return f"{name} ({_value(position)})"
    return name


# ---------------------------------------------------------------------------
# At-bat
# ---------------------------------------------------------------------------

def pitch(outcome: str, batter_name: str, pitcher_name: str) -> str:
    if outcome == "ball":
        return f"{pitcher_name} misses the zone. Ball."
    if outcome == "called_strike":
        return f"{batter_name} takes it for a called strike."
    if outcome == "swinging_strike":
        return f"{batter_name} swings and misses."
    if outcome == "foul":
        return f"{batter_name} fouls it off."
    return f"{batter_name} puts it in play."


def batted_ball(ball) -> str:
    """e.g. 'a hard line drive to left-center'."""
    strength = STRENGTH_NAMES.get(ball.strength, ball.strength)
    kind = BALL_TYPE_NAMES.get(ball.type, ball.type)
    direction = DIRECTION_NAMES.get(ball.direction, ball.direction)
    return f"a {strength} {kind} {direction}"


def at_bat(result, batter_name: str) -> str:
    if result.outcome == "strikeout":
        last = result.pitches[-1].outcome if result.pitches else None
        if last == "called_strike":
            return f"{batter_name} strikes out looking."
        if last == "swinging_strike":
            return f"{batter_name} strikes out swinging."
        return f"{batter_name} strikes out."
    if result.outcome == "walk":
        return f"{batter_name} draws a walk."
    if result.batted_ball is not None:
        return f"{batter_name} hits {batted_ball(result.batted_ball)}."
    return f"{batter_name} puts the ball in play."


# ---------------------------------------------------------------------------
# Bunts
# ---------------------------------------------------------------------------

def _bunt_failure(outcome: str, batter_name: str) -> str:
    if outcome == "strikeout":
        return f"{batter_name} bunts foul with two strikes. That's a strikeout."
    if outcome == "foul":
        return f"{batter_name} bunts it foul."
    if outcome == "swing_miss":
        return f"{batter_name} squares and misses the bunt."
    return f"{batter_name} pops the bunt up."


def bunt(result, batter_name: str, runners=None) -> str:
    outcome = _value(result.outcome)
    if outcome != "success":
        return _bunt_failure(outcome, batter_name)
    b = result.batted_bunt
    kind = "sacrifice bunt" if _value(b.bunt_type) == "sacrifice" else "bunt for a hit"
    direction = BUNT_DIRECTION_NAMES.get(b.direction, b.direction)
    on_base = runners.count if runners is not None else 0
    if kind == "sacrifice bunt" and on_base:
        who = "the runner" if on_base == 1 else "the runners"
        return f"{batter_name} lays down a {kind} {direction} to move {who} up."
    return f"{batter_name} lays down a {kind} {direction}."


def squeeze(result, batter_name: str, runner_name: str) -> str:
    outcome = _value(result.outcome)
    if outcome != "success":
        return (f"Squeeze is on and {runner_name} breaks from third. "
                + _bunt_failure(outcome, batter_name))
    direction = BUNT_DIRECTION_NAMES.get(result.batted_bunt.direction, result.batted_bunt.direction)
    if result.runner_safe:
        return f"Squeeze play! {batter_name} bunts {direction} and {runner_name} slides in safely."
    return f"{batter_name} gets the squeeze down {direction} but {runner_name} is cut down at the plate."


def bunt_fielding(result, batter_name: str, runners) -> str:
    who = _fielder(result.fielder_name, result.fielder_position)
    if result.throw_target is None:
        return f"{who} can't come up with it. {batter_name} is aboard and everyone moves up."
    if result.throw_target == "first":
        if result.batter_out:
            if runners is not None and not runners.is_empty:
                return f"{who} throws to first for the out. The runners advance."
            return f"{who} throws to first in time."
        return f"{who} throws to first but {batter_name} beats it."
    lead = runners.get(result.target_runner) if runners is not None and result.target_runner else None
    if result.outs_recorded:
        name = lead.player_name if lead else "the lead runner"
        return f"{who} goes after the lead runner and gets {name}. {batter_name} is on at first."
    return f"{who} tries for the lead runner and is too late. Everyone is safe."


# ---------------------------------------------------------------------------
# Running game
# ---------------------------------------------------------------------------

def steal(result) -> str:
    name = result.runner.player_name
    target = BASE_LABELS.get(result.target_base, result.target_base)
    if result.undefended:
        if result.success:
            return f"{name} takes {target} without a throw."
        return f"{name} stumbles and is tagged out going to {target}."
    if result.success:
        if result.rate > 70:
            return f"{name} steals {target} easily."
        return f"{name} steals {target}, just beating the throw from {result.catcher_name}."
    cover = f" to {result.cover_name}" if result.cover_name else ""
    return f"{result.catcher_name} fires{cover} and {name} is caught stealing {target}."


def double_steal(result) -> str:
    safe = [r for r in result.results if r.success]
    if len(safe) == len(result.results):
        return "Double steal! Both runners are in safely."
    if not safe:
        return "The double steal backfires. Both runners are out."
    out = [r.runner.player_name for r in result.results if not r.success]
    return f"Double steal, but {result.catcher_name} throws out {', '.join(out)}."


def hit_and_run(result, batter_name: str) -> str:
    name = result.steal_attempt.runner.player_name
    if result.batting_result == "hit":
        if result.runner_advancement.is_extra_base:
            return f"Hit-and-run works! {batter_name} finds a hole and {name} goes first to third."
        return f"{batter_name} gets a hit behind the runner and {name} moves up."
    if result.batting_result == "out":
        if result.is_double_play:
            return f"{batter_name} hits into the out and {name} is thrown out too. Double play."
        return f"{batter_name} is retired but {name} gets back safely."
    if result.steal_attempt.success:
        return f"{batter_name} swings through it but {name} steals the base anyway."
    return f"{batter_name} misses and {name} is hung out to dry."


def pickoff(result) -> str:
    if not result.attempted:
        return ""
    name = result.runner.player_name if result.runner else "the runner"
    base = BASE_LABELS.get(result.target_base, result.target_base)
    if result.wild_throw:
        return f"{result.pitcher_name}'s pickoff throw to {base} gets away! {name} advances."
    if result.success:
        return f"{result.pitcher_name} picks {name} off {base}!"
    if result.close_play:
        return f"{result.pitcher_name} throws over to {base}. {name} dives back just in time."
    return f"{result.pitcher_name} checks {name} at {base}."


# ---------------------------------------------------------------------------
# Ball in play
# ---------------------------------------------------------------------------

def error_call(error_type: str | None, fielder_name: str, position: str | None) -> str:
    who = _fielder(fielder_name, position)
    error_type = _value(error_type) if error_type else None
    if error_type == "fielding":
        return f"{who} boots it. Error."
    if error_type == "throwing":
        return f"{who} throws it away. Error."
    if error_type == "dropped_fly":
        return f"{who} drops the fly ball. Error."
    return f"Error on {who}."


def defensive_play(result, batter_name: str) -> str:
    """The fielding half of a ball in play; hits defer to the base-running text."""
    outcome = _value(result.outcome)
    who = _fielder(result.fielder_name, result.fielder_position)
    if outcome == "out":
        return f"{who} makes the play. {batter_name} is out."
    if outcome == "double_play":
        if result.assist_name:
            return f"{who} to {result.assist_name}, double play!"
        return f"{who} turns the double play!"
    if outcome == "sac_fly":
        if any(a.is_tag_up for a in result.runners_advanced):
            return f"{who} makes the catch. Sacrifice fly, the runner tags and scores."
        return f"{who} makes the catch. The runner holds at third."
    if outcome == "error":
        return error_call(result.error_type, result.fielder_name, result.fielder_position)
    return ""


# ---------------------------------------------------------------------------
# Base running
# ---------------------------------------------------------------------------

def hit_call(hit_type: str, batter_name: str) -> str:
    if hit_type == "home_run":
        return f"{batter_name} hits a home run!"
    return f"{batter_name} with a {HIT_NAMES.get(hit_type, hit_type)}."


def runner_scores(name: str) -> str:
    return f"{name} scores."


def runner_to(name: str, base: str) -> str:
    return f"{name} to {BASE_LABELS.get(base, base)}."


def score_from_second(name: str, success: bool, close: bool) -> str:
    if not success:
        return f"{name} holds at third on a strong throw."
    if close:
        return f"{name} races home from second and beats the throw!"
    return f"{name} scores easily from second."


def first_to_third(name: str, success: bool, caught_out: bool) -> str:
    if success:
        return f"{name} goes first to third on the hit."
    if caught_out:
        return f"{name} tries for third and is thrown out."
    return f"{name} stops at second."


def batter_stretch(name: str) -> str:
    return f"{name} hustles into second."


def score_from_first(name: str, success: bool, caught_out: bool, was_thrown: bool,
                     relay_name: str = "") -> str:
    if success:
        if was_thrown:
            return f"{name} comes all the way around from first and is safe at the plate!"
        return f"{name} scores standing up from first."
    if caught_out:
        if relay_name:
            return f"{name} is gunned down at the plate on the relay from {relay_name}."
        return f"{name} is thrown out at the plate."
    return f"{name} holds at third."


def scoring_summary(advancements, runs_scored: int) -> str:
    """RBI and home run headline for a set of advancements."""
    if runs_scored <= 0:
        return ""
    batter_scored = any(a.from_base == "batter" and a.to == "home" for a in advancements)
    if batter_scored:
        if runs_scored == 4:
            return "Grand slam!"
        if runs_scored == 1:
            return "A solo shot."
        return f"A {runs_scored}-run homer."
    if runs_scored == 1:
        return "An RBI knock."
    return f"{runs_scored} runs come in."


# ---------------------------------------------------------------------------
# Shifts
# ---------------------------------------------------------------------------

def shift_name(shift) -> str:
    return SHIFT_DISPLAY_NAMES.get(_value(shift), _value(shift))


def shift_instruction(shift) -> str:
    if _value(shift) == "normal":
        return "The defense plays straight up."
    return f"The defense goes to the {shift_name(shift)}."


def shift_effect(shift, outcome: str, fielder_name: str, effective: bool, side: str) -> str:
    shift = _value(shift)
    if shift == "normal" or not effective:
        return ""
    name = shift_name(shift)
    if outcome in ("out", "double_play"):
        if shift == "extreme_shift":
            return f"The {name} pays off. {fielder_name} is right there."
        if shift == "infield_back":
            return f"Playing back, {fielder_name} has time to make the play."
        return f"The {name} puts {fielder_name} in perfect position."
    if outcome in ("single", "double", "triple") and side == "opposite":
        if shift == "extreme_shift" and outcome in ("double", "triple"):
            return f"Right through the vacated side for a {outcome}. The shift gets burned."
        return "Hit the other way, right where the shift left a hole."
    return ""
