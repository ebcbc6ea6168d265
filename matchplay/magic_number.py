import math
from typing import Optional

from matchplay.exceptions import SimultaneousClinchError, StandingsInconsistentError
from matchplay.models import MagicNumber, Team, TeamStandings


def default_points_to_win(total_matches: int) -> float:
    """
    Ryder Cup convention: a strict majority, e.g. 14.5 of 28.
    The half point means nobody can tie at the threshold.
    """
    return math.floor(total_matches / 2) + 0.5


def calculate_magic_number(
    standings: TeamStandings,
    points_to_win: Optional[float] = None,
) -> MagicNumber:
    """
    Points each team still needs, and whether either side has clinched.

    A team has clinched when the opponent's best possible total (current
    points plus every remaining match) is still below its own points.
    """
    if points_to_win is None:
        points_to_win = default_points_to_win(standings.total_matches)

    remaining = standings.matches_remaining

    team_a_needed = max(0.0, points_to_win - standings.team_a_points)
    team_b_needed = max(0.0, points_to_win - standings.team_b_points)

    team_a_clinched = standings.team_a_points > standings.team_b_points + remaining
    team_b_clinched = standings.team_b_points > standings.team_a_points + remaining

    if team_a_clinched and team_b_clinched:
        raise SimultaneousClinchError(standings, points_to_win)

    if remaining < 0:
        raise StandingsInconsistentError(f"matches_remaining is negative: {remaining}")

    clinching_team = None
    if team_a_clinched:
        clinching_team = Team.TEAM_A
    elif team_b_clinched:
        clinching_team = Team.TEAM_B

    return MagicNumber(
        points_to_win=points_to_win,
        team_a_needed=team_a_needed,
        team_b_needed=team_b_needed,
        team_a_clinched=team_a_clinched,
        team_b_clinched=team_b_clinched,
        has_clinched=clinching_team is not None,
        clinching_team=clinching_team,
        team_a_can_clinch=team_a_needed <= remaining,
        team_b_can_clinch=team_b_needed <= remaining,
        remaining_points=remaining,
    )
