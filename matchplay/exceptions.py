class MatchPlayError(Exception):
    pass


class InvalidHoleNumberError(MatchPlayError, ValueError):
    pass


class InvalidWinnerError(MatchPlayError, ValueError):
    pass


class MatchNotFoundError(MatchPlayError, KeyError):
    pass


class MatchNotFinishedError(MatchPlayError):
    pass


class SnapshotFormatError(MatchPlayError, ValueError):
    pass


class StandingsInconsistentError(MatchPlayError):
    pass


class SimultaneousClinchError(StandingsInconsistentError):
    """
    Both teams report a clinch.

    Only reachable when points_to_win / total_matches disagree with the
    standings passed in, so the caller gets the inputs back to inspect.
    """

    def __init__(self, standings, points_to_win: float):
        self.standings = standings
        self.points_to_win = points_to_win
        super().__init__(
            f"Both teams clinched with {standings.team_a_points}-{standings.team_b_points} "
            f"and {standings.matches_remaining} remaining (points_to_win={points_to_win})"
        )
