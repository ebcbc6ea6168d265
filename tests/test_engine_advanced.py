import math
import random

import pytest

from matchplay.engine import (
    calculate_match_points,
    calculate_match_state,
    normalize_hole_results,
    parse_hole_number,
)
from matchplay.exceptions import InvalidHoleNumberError
from matchplay.models import HoleResult, HoleWinner, Match, MatchStatus, Team


# ---------------------------------------------------------
# Helpers
# ---------------------------------------------------------

def make_match():
    return Match(id="m1", session_id="s1")


def random_log(rng, size):
    return [
        HoleResult(
            match_id="m1",
            hole_number=rng.randint(-2, 20),
            winner=rng.choice(list(HoleWinner)),
            timestamp=float(rng.randint(0, 50)),
            sequence=i,
        )
        for i in range(size)
    ]


# ---------------------------------------------------------
# Invariants over arbitrary logs
# ---------------------------------------------------------

@pytest.mark.parametrize("seed", range(25))
def test_state_invariants_hold_for_random_logs(seed):
    rng = random.Random(seed)
    state = calculate_match_state(make_match(), random_log(rng, rng.randint(0, 60)))

    assert state.holes_played + state.holes_remaining <= 18
    assert state.current_score == state.team_a_holes_won - state.team_b_holes_won
    assert state.display_score

    if state.is_closed_out:
        assert abs(state.current_score) > state.holes_remaining
        assert state.status is MatchStatus.COMPLETED

    if state.is_dormie:
        assert abs(state.current_score) == state.holes_remaining
        assert state.holes_remaining > 0

    if state.winning_team is not None:
        assert state.status is MatchStatus.COMPLETED
        assert (state.winning_team is Team.TEAM_A) == (state.current_score > 0)

    points = calculate_match_points(state)
    assert points.team_a_points + points.team_b_points in (0, 1)


def test_one_result_per_hole_after_normalization():
    rng = random.Random(7)
    normalized = normalize_hole_results(random_log(rng, 200))

    holes = [r.hole_number for r in normalized]
    assert holes == sorted(set(holes))
    assert all(1 <= h <= 18 for h in holes)


# ---------------------------------------------------------
# Deterministic replay
# ---------------------------------------------------------

def test_reducer_is_idempotent():
    log = random_log(random.Random(3), 40)

    first = calculate_match_state(make_match(), log)
    second = calculate_match_state(make_match(), log)

    assert first == second


def test_input_order_does_not_matter_for_distinct_timestamps():
    log = [
        HoleResult(match_id="m1", hole_number=(i % 18) + 1,
                   winner=random.Random(i).choice(list(HoleWinner)),
                   timestamp=float(i))
        for i in range(30)
    ]
    shuffled = list(log)
    random.Random(11).shuffle(shuffled)

    assert calculate_match_state(make_match(), log) == calculate_match_state(make_match(), shuffled)


# ---------------------------------------------------------
# Tie-breaks and corrupt entries
# ---------------------------------------------------------

def test_equal_timestamps_later_sequence_wins():
    log = [
        HoleResult(match_id="m1", hole_number=4, winner=HoleWinner.TEAM_B, timestamp=5.0, sequence=2),
        HoleResult(match_id="m1", hole_number=4, winner=HoleWinner.TEAM_A, timestamp=5.0, sequence=1),
    ]

    assert calculate_match_state(make_match(), log).current_score == -1


def test_non_finite_timestamp_loses_to_any_real_one():
    log = [
        HoleResult(match_id="m1", hole_number=1, winner=HoleWinner.TEAM_A, timestamp=1.0),
        HoleResult(match_id="m1", hole_number=1, winner=HoleWinner.TEAM_B, timestamp=math.nan),
    ]

    assert calculate_match_state(make_match(), log).current_score == 1


def test_unknown_winner_is_treated_as_undecided():
    log = [
        HoleResult(match_id="m1", hole_number=1, winner="eagle", timestamp=1.0),
        HoleResult(match_id="m1", hole_number=2, winner="teamA", timestamp=2.0),
    ]

    state = calculate_match_state(make_match(), log)

    assert state.holes_played == 1
    assert state.current_score == 1


def test_non_integer_hole_numbers_are_ignored():
    log = [
        HoleResult(match_id="m1", hole_number=1.5, winner=HoleWinner.TEAM_A, timestamp=1.0),
        HoleResult(match_id="m1", hole_number=True, winner=HoleWinner.TEAM_A, timestamp=2.0),
    ]

    assert calculate_match_state(make_match(), log).holes_played == 0


@pytest.mark.parametrize("raw, expected", [(7, 7), (7.0, 7), (" 12 ", 12), (19, 19)])
def test_parse_hole_number_accepts_whole_values(raw, expected):
    assert parse_hole_number(raw) == expected


@pytest.mark.parametrize("raw", [2.7, "2.7", "", True, None, [3]])
def test_parse_hole_number_rejects_fractions_and_junk(raw):
    with pytest.raises(InvalidHoleNumberError):
        parse_hole_number(raw)


# ---------------------------------------------------------
# Results after a closeout still count
# ---------------------------------------------------------

def test_holes_scored_after_closeout_keep_bounds():
    log = [
        HoleResult(match_id="m1", hole_number=h, winner=HoleWinner.TEAM_A, timestamp=float(h))
        for h in range(1, 19)
    ]

    state = calculate_match_state(make_match(), log)

    assert state.holes_remaining == 0
    assert state.display_score == "18 UP"
    assert state.status is MatchStatus.COMPLETED


# ---------------------------------------------------------
# Configurable hole count
# ---------------------------------------------------------

def test_nine_hole_match():
    log = [
        HoleResult(match_id="m1", hole_number=h, winner=HoleWinner.TEAM_B, timestamp=float(h))
        for h in range(1, 6)
    ]

    state = calculate_match_state(make_match(), log, total_holes=9)

    assert state.holes_remaining == 4
    assert state.display_score == "5&4"
    assert state.winning_team is Team.TEAM_B
