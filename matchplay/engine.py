from __future__ import annotations

import math
from typing import Iterable, List, Optional, Tuple

from matchplay.config import FIRST_HOLE, TOTAL_HOLES
from matchplay.exceptions import InvalidHoleNumberError, MatchNotFinishedError
from matchplay.models import (
    DormieStatus,
    HoleResult,
    HoleWinner,
    Match,
    MatchPoints,
    MatchResult,
    MatchState,
    MatchStatus,
    Team,
)


DECIDED_WINNERS = (HoleWinner.TEAM_A, HoleWinner.TEAM_B, HoleWinner.HALVED)


# =========================================================
# LOG NORMALIZATION
# =========================================================

def is_valid_hole_number(hole_number, total_holes: int = TOTAL_HOLES) -> bool:
    if isinstance(hole_number, bool) or not isinstance(hole_number, int):
        return False
    return FIRST_HOLE <= hole_number <= total_holes


def parse_hole_number(value) -> int:
    """
    Hole number from an imported record. Whole floats (3.0) and digit strings
    are accepted; fractions and booleans raise InvalidHoleNumberError.
    Range is not checked here, the reducer filters out-of-range holes.
    """
    if isinstance(value, bool):
        raise InvalidHoleNumberError(f"Invalid hole number: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidHoleNumberError(f"Invalid hole number: {value!r}")
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            raise InvalidHoleNumberError(f"Invalid hole number: {value!r}") from None
    raise InvalidHoleNumberError(f"Invalid hole number: {value!r}")


def coerce_winner(value) -> Optional[HoleWinner]:
    try:
        return HoleWinner(value)
    except ValueError:
        return None


def _timestamp_value(value) -> float:
    try:
        ts = float(value)
    except (TypeError, ValueError):
        return -math.inf
    return ts if math.isfinite(ts) else -math.inf


def event_order_key(result: HoleResult, position: int) -> Tuple[float, int, int]:
    """
    Total order over a match's log: timestamp, then append sequence,
    then position in the list handed to us.
    """
    return (_timestamp_value(result.timestamp), result.sequence, position)


def normalize_hole_results(
    hole_results: Iterable[HoleResult],
    total_holes: int = TOTAL_HOLES,
) -> List[HoleResult]:
    """
    Drop out-of-range holes and keep one result per hole: the one with
    the latest timestamp. Returned sorted by hole number.
    """
    latest = {}

    for position, result in enumerate(hole_results):
        if not is_valid_hole_number(result.hole_number, total_holes):
            continue

        key = event_order_key(result, position)
        current = latest.get(result.hole_number)
        if current is None or key >= current[0]:
            latest[result.hole_number] = (key, result)

    return [latest[hole][1] for hole in sorted(latest)]


# =========================================================
# MATCH STATE
# =========================================================

def calculate_match_state(
    match: Match,
    hole_results: Iterable[HoleResult],
    *,
    total_holes: int = TOTAL_HOLES,
) -> MatchState:
    """
    Fold a match's hole log into its canonical state.

    Never raises on log content: invalid holes are filtered and unknown
    winners are treated as undecided.
    """
    normalized = normalize_hole_results(hole_results, total_holes)

    team_a_won = 0
    team_b_won = 0
    holes_played = 0

    for result in normalized:
        winner = coerce_winner(result.winner)
        if winner is HoleWinner.TEAM_A:
            team_a_won += 1
            holes_played += 1
        elif winner is HoleWinner.TEAM_B:
            team_b_won += 1
            holes_played += 1
        elif winner is HoleWinner.HALVED:
            holes_played += 1

    current_score = team_a_won - team_b_won
    holes_remaining = total_holes - holes_played

    is_closed_out = abs(current_score) > holes_remaining
    is_dormie = check_dormie(current_score, holes_remaining).is_dormie

    if holes_played == 0:
        status = MatchStatus.SCHEDULED
    elif is_closed_out or holes_remaining == 0:
        status = MatchStatus.COMPLETED
    else:
        status = MatchStatus.ACTIVE

    winning_team = None
    if status is MatchStatus.COMPLETED and current_score != 0:
        winning_team = Team.TEAM_A if current_score > 0 else Team.TEAM_B

    return MatchState(
        match_id=match.id,
        hole_results=tuple(normalized),
        holes_played=holes_played,
        holes_remaining=holes_remaining,
        team_a_holes_won=team_a_won,
        team_b_holes_won=team_b_won,
        current_score=current_score,
        is_dormie=is_dormie,
        is_closed_out=is_closed_out,
        display_score=format_match_score(
            current_score, holes_remaining, is_closed_out, holes_played
        ),
        status=status,
        winning_team=winning_team,
    )


def format_match_score(
    score: int,
    holes_remaining: int,
    is_closed_out: bool,
    holes_played: int,
) -> str:
    """
    Short form: "AS", "2 UP", "3&2". A match won on the last hole is
    "1 UP", never "1&0".
    """
    if holes_played == 0 or score == 0:
        return "AS"

    margin = abs(score)

    if is_closed_out and holes_remaining > 0:
        return f"{margin}&{holes_remaining}"

    return f"{margin} UP"


def current_hole(
    hole_results: Iterable[HoleResult],
    total_holes: int = TOTAL_HOLES,
) -> Optional[int]:
    decided = {
        r.hole_number
        for r in normalize_hole_results(hole_results, total_holes)
        if coerce_winner(r.winner) in DECIDED_WINNERS
    }

    for hole in range(FIRST_HOLE, total_holes + 1):
        if hole not in decided:
            return hole

    return None


# =========================================================
# DORMIE / CLOSEOUT
# =========================================================

def check_dormie(score: int, holes_remaining: int) -> DormieStatus:
    return DormieStatus(
        team_a_dormie=score > 0 and score == holes_remaining,
        team_b_dormie=score < 0 and -score == holes_remaining,
    )


def would_close_out(
    prev_score: int,
    prev_holes_remaining: int,
    winner: HoleWinner,
) -> bool:
    """
    Would scoring one more hole with this winner end the match?
    Nothing is mutated.
    """
    winner = coerce_winner(winner)

    new_score = prev_score
    if winner is HoleWinner.TEAM_A:
        new_score += 1
    elif winner is HoleWinner.TEAM_B:
        new_score -= 1

    return abs(new_score) > prev_holes_remaining - 1


# =========================================================
# RESULT & POINTS
# =========================================================

def calculate_match_points(state: MatchState) -> MatchPoints:
    if state.status is not MatchStatus.COMPLETED:
        return MatchPoints(0, 0)

    if state.current_score == 0:
        return MatchPoints(0.5, 0.5)

    if state.current_score > 0:
        return MatchPoints(1, 0)

    return MatchPoints(0, 1)


def calculate_match_result(state: MatchState) -> MatchResult:
    if state.status is not MatchStatus.COMPLETED:
        return MatchResult.NOT_FINISHED

    if state.current_score == 0:
        return MatchResult.HALVED

    if state.current_score > 0:
        return MatchResult.TEAM_A_WIN

    return MatchResult.TEAM_B_WIN


def format_final_result(state: MatchState, team_a_name: str, team_b_name: str) -> str:
    if state.status is not MatchStatus.COMPLETED:
        raise MatchNotFinishedError(
            f"Match {state.match_id} is {state.status.value}, not completed"
        )

    if state.current_score == 0:
        return "Match Halved"

    winner = team_a_name if state.current_score > 0 else team_b_name
    return f"{winner} wins {state.display_score}"
