from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from matchplay.config import TOTAL_HOLES
from matchplay.engine import calculate_match_points, calculate_match_state
from matchplay.exceptions import StandingsInconsistentError
from matchplay.models import (
    HoleResult,
    Match,
    MatchState,
    MatchStatus,
    PlayerRecord,
    SessionStandings,
    Team,
    TeamStandings,
)


def group_results_by_match(hole_results: Iterable[HoleResult]) -> Dict[str, List[HoleResult]]:
    grouped: Dict[str, List[HoleResult]] = defaultdict(list)
    for result in hole_results:
        grouped[result.match_id].append(result)
    return grouped


def _match_states(
    matches: Iterable[Match],
    hole_results: Iterable[HoleResult],
    total_holes: int,
) -> List[MatchState]:
    by_match = group_results_by_match(hole_results)
    return [
        calculate_match_state(m, by_match.get(m.id, []), total_holes=total_holes)
        for m in matches
    ]


# =========================================================
# TEAM STANDINGS
# =========================================================

def calculate_team_standings(
    matches: Iterable[Match],
    hole_results: Iterable[HoleResult],
    *,
    total_holes: int = TOTAL_HOLES,
    total_matches: Optional[int] = None,
) -> TeamStandings:
    """
    Re-derive every match's state from its log and sum the points.

    total_matches lets setup count matches that have not been created
    yet; by default every match passed in is the whole tournament.
    """
    matches = list(matches)
    states = _match_states(matches, hole_results, total_holes)

    if total_matches is None:
        total_matches = len(matches)
    elif total_matches < len(matches):
        raise StandingsInconsistentError(
            f"total_matches={total_matches} but {len(matches)} matches exist"
        )

    team_a_points = 0.0
    team_b_points = 0.0
    team_a_projected = 0.0
    team_b_projected = 0.0
    matches_completed = 0
    matches_played = 0

    for state in states:
        if state.holes_played > 0:
            matches_played += 1

        if state.status is MatchStatus.COMPLETED:
            matches_completed += 1
            points = calculate_match_points(state)
            team_a_points += points.team_a_points
            team_b_points += points.team_b_points
            team_a_projected += points.team_a_points
            team_b_projected += points.team_b_points
        elif state.status is MatchStatus.ACTIVE:
            # In progress: credit the current leader
            if state.current_score > 0:
                team_a_projected += 1
            elif state.current_score < 0:
                team_b_projected += 1
            else:
                team_a_projected += 0.5
                team_b_projected += 0.5

    if team_a_points > team_b_points:
        leader = Team.TEAM_A
    elif team_a_points < team_b_points:
        leader = Team.TEAM_B
    else:
        leader = None

    return TeamStandings(
        team_a_points=team_a_points,
        team_b_points=team_b_points,
        matches_completed=matches_completed,
        matches_remaining=total_matches - matches_completed,
        total_matches=total_matches,
        leader=leader,
        margin=abs(team_a_points - team_b_points),
        matches_played=matches_played,
        team_a_projected=team_a_projected,
        team_b_projected=team_b_projected,
    )


def calculate_session_standings(
    session_id: str,
    matches: Iterable[Match],
    hole_results: Iterable[HoleResult],
    *,
    total_holes: int = TOTAL_HOLES,
) -> SessionStandings:
    session_matches = [m for m in matches if m.session_id == session_id]
    standings = calculate_team_standings(
        session_matches, hole_results, total_holes=total_holes
    )

    return SessionStandings(
        session_id=session_id,
        team_a_points=standings.team_a_points,
        team_b_points=standings.team_b_points,
        matches_completed=standings.matches_completed,
        total_matches=standings.total_matches,
    )


# =========================================================
# PLAYER RECORDS
# =========================================================

def calculate_player_record(
    player_id: str,
    matches: Iterable[Match],
    hole_results: Iterable[HoleResult],
    *,
    total_holes: int = TOTAL_HOLES,
) -> PlayerRecord:
    """
    W-L-H over the player's completed matches.
    """
    played = [
        m for m in matches
        if player_id in m.team_a_player_ids or player_id in m.team_b_player_ids
    ]

    wins = losses = halves = 0

    for match, state in zip(played, _match_states(played, hole_results, total_holes)):
        if state.status is not MatchStatus.COMPLETED:
            continue

        on_team_a = player_id in match.team_a_player_ids

        if state.current_score == 0:
            halves += 1
        elif (state.current_score > 0) == on_team_a:
            wins += 1
        else:
            losses += 1

    return PlayerRecord(player_id=player_id, wins=wins, losses=losses, halves=halves)


def calculate_player_leaderboard(
    matches: Iterable[Match],
    hole_results: Iterable[HoleResult],
    *,
    player_ids: Optional[Iterable[str]] = None,
    total_holes: int = TOTAL_HOLES,
) -> List[PlayerRecord]:
    """
    Records for every rostered player (or the ids given), best first:
    points, then win percentage.
    """
    matches = list(matches)
    hole_results = list(hole_results)

    if player_ids is None:
        seen: Dict[str, None] = {}
        for m in matches:
            for pid in list(m.team_a_player_ids) + list(m.team_b_player_ids):
                seen.setdefault(pid, None)
        player_ids = list(seen)

    records = [
        calculate_player_record(pid, matches, hole_results, total_holes=total_holes)
        for pid in player_ids
    ]

    records.sort(key=lambda r: (-r.points, -r.win_pct))
    return records
