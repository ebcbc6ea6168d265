import logging
import time
import uuid
from dataclasses import replace
from typing import Callable, Dict, List, Optional

from matchplay.config import TOTAL_HOLES
from matchplay.engine import (
    calculate_match_result,
    calculate_match_state,
    coerce_winner,
    current_hole,
    event_order_key,
    is_valid_hole_number,
    parse_hole_number,
)
from matchplay.exceptions import (
    InvalidHoleNumberError,
    InvalidWinnerError,
    MatchNotFoundError,
)
from matchplay.magic_number import calculate_magic_number
from matchplay.models import HoleResult, HoleWinner, MagicNumber, Match, MatchState, TeamStandings
from matchplay.standings import calculate_team_standings

logger = logging.getLogger(__name__)


class TournamentScorer:
    """
    In-memory hole logs for every match of one tournament.

    Responsibilities:
    - Append / retract hole results (the log is append-only otherwise)
    - Rebuild each match's cached status from its full log after every mutation
    - Bulk replace a match log atomically
    - Feed the standings and magic number calculators
    """

    def __init__(
        self,
        total_holes: int = TOTAL_HOLES,
        clock: Callable[[], float] = time.time,
        total_matches: Optional[int] = None,
    ):
        self._total_holes = total_holes
        self._total_matches = total_matches
        self._clock = clock
        self._matches: Dict[str, Match] = {}
        self._results: Dict[str, List[HoleResult]] = {}
        self._sequence = 0

    @property
    def total_holes(self) -> int:
        return self._total_holes

    @property
    def total_matches(self) -> Optional[int]:
        return self._total_matches

    # ---------------------------------------------------------
    # Matches
    # ---------------------------------------------------------

    def create_match(
        self,
        session_id: str,
        team_a_player_ids: List[str],
        team_b_player_ids: List[str],
        match_order: Optional[int] = None,
        match_id: Optional[str] = None,
    ) -> Match:
        if match_order is None:
            match_order = 1 + sum(
                1 for m in self._matches.values() if m.session_id == session_id
            )

        match = Match(
            id=match_id or str(uuid.uuid4()),
            session_id=session_id,
            team_a_player_ids=list(team_a_player_ids),
            team_b_player_ids=list(team_b_player_ids),
            match_order=match_order,
            holes_remaining=self._total_holes,
        )

        self.add_match(match)
        return match

    def add_match(self, match: Match, hole_results: Optional[List[HoleResult]] = None) -> MatchState:
        if match.id in self._matches:
            raise ValueError(f"Duplicate match id: {match.id}")

        self._matches[match.id] = match
        self._results[match.id] = []
        for result in hole_results or []:
            self._append(match.id, result)

        return self.refresh(match.id)

    def get_match(self, match_id: str) -> Match:
        try:
            return self._matches[match_id]
        except KeyError:
            raise MatchNotFoundError(f"Match not found: {match_id}") from None

    def delete_match(self, match_id: str) -> None:
        self.get_match(match_id)
        del self._matches[match_id]
        del self._results[match_id]

    @property
    def matches(self) -> List[Match]:
        return list(self._matches.values())

    def hole_results(self, match_id: str) -> List[HoleResult]:
        self.get_match(match_id)
        return list(self._results[match_id])

    def all_hole_results(self) -> List[HoleResult]:
        return [r for results in list(self._results.values()) for r in list(results)]

    # ---------------------------------------------------------
    # Scoring
    # ---------------------------------------------------------

    def record_hole_result(
        self,
        match_id: str,
        hole_number: int,
        winner: HoleWinner,
        team_a_score: Optional[int] = None,
        team_b_score: Optional[int] = None,
        actor_id: Optional[str] = None,
    ) -> HoleResult:
        """
        Append a new result for the hole and recompute the match.
        An earlier result for the same hole is superseded, not overwritten.
        """
        self.get_match(match_id)

        if not is_valid_hole_number(hole_number, self._total_holes):
            raise InvalidHoleNumberError(
                f"Invalid hole number: {hole_number}. Must be 1-{self._total_holes}."
            )

        resolved = coerce_winner(winner)
        if resolved is None:
            raise InvalidWinnerError(f"Invalid hole winner: {winner}")

        result = self._append(
            match_id,
            HoleResult(
                match_id=match_id,
                hole_number=hole_number,
                winner=resolved,
                timestamp=self._next_timestamp(match_id),
                team_a_score=team_a_score,
                team_b_score=team_b_score,
                scored_by=actor_id,
            ),
        )

        state = self.refresh(match_id)

        logger.info(
            "Score recorded match=%s hole=%s winner=%s score=%s",
            match_id, hole_number, resolved.value, state.display_score,
        )

        return result

    def undo_last_score(self, match_id: str) -> bool:
        """
        Remove the most recent result by timestamp (not the highest hole)
        and recompute. Returns False when the log is empty.
        """
        self.get_match(match_id)
        results = self._results[match_id]

        if not results:
            return False

        last_index = max(
            range(len(results)),
            key=lambda i: event_order_key(results[i], i),
        )
        removed = results.pop(last_index)

        state = self.refresh(match_id)

        logger.info(
            "Score undone match=%s hole=%s previous_winner=%s score=%s",
            match_id, removed.hole_number, removed.winner.value, state.display_score,
        )

        return True

    def load_events(self, match_id: str, events: List[Dict]) -> MatchState:
        """
        Replace a match's log from a list of dicts.
        Atomic: if any event fails -> no state mutation.
        """
        self.get_match(match_id)

        if not isinstance(events, list):
            raise ValueError("events must be a list")

        parsed: List[HoleResult] = []
        for e in events:
            if "hole_number" not in e or "winner" not in e or "timestamp" not in e:
                raise ValueError("invalid event format")

            winner = coerce_winner(e["winner"])
            if winner is None:
                raise InvalidWinnerError(f"Invalid hole winner: {e['winner']}")

            parsed.append(
                HoleResult(
                    match_id=match_id,
                    hole_number=parse_hole_number(e["hole_number"]),
                    winner=winner,
                    timestamp=float(e["timestamp"]),
                    team_a_score=e.get("team_a_score"),
                    team_b_score=e.get("team_b_score"),
                    scored_by=e.get("scored_by"),
                )
            )

        # Everything parsed -> commit
        self._results[match_id] = []
        for result in parsed:
            self._append(match_id, result)

        return self.refresh(match_id)

    def export_events(self, match_id: str) -> List[Dict]:
        return [
            {
                "hole_number": r.hole_number,
                "winner": r.winner.value,
                "timestamp": r.timestamp,
                "team_a_score": r.team_a_score,
                "team_b_score": r.team_b_score,
                "scored_by": r.scored_by,
            }
            for r in self.hole_results(match_id)
        ]

    # ---------------------------------------------------------
    # Derived views
    # ---------------------------------------------------------

    def match_state(self, match_id: str) -> MatchState:
        return calculate_match_state(
            self.get_match(match_id),
            self.hole_results(match_id),
            total_holes=self._total_holes,
        )

    def refresh(self, match_id: str) -> MatchState:
        """
        Rebuild the match's cached fields from its full log.
        """
        match = self.get_match(match_id)
        results = self.hole_results(match_id)
        state = calculate_match_state(match, results, total_holes=self._total_holes)

        match.status = state.status
        match.result = calculate_match_result(state)
        match.margin = abs(state.current_score)
        match.holes_remaining = state.holes_remaining
        match.current_hole = current_hole(results, self._total_holes)

        return state

    def standings(self, session_id: Optional[str] = None) -> TeamStandings:
        matches = self.matches
        if session_id is not None:
            matches = [m for m in matches if m.session_id == session_id]

        # a session view only counts its own matches
        total_matches = self._total_matches if session_id is None else None

        return calculate_team_standings(
            matches,
            self.all_hole_results(),
            total_holes=self._total_holes,
            total_matches=total_matches,
        )

    def magic_number(self, points_to_win: Optional[float] = None) -> MagicNumber:
        return calculate_magic_number(self.standings(), points_to_win)

    # ---------------------------------------------------------
    # Internals
    # ---------------------------------------------------------

    def _next_timestamp(self, match_id: str) -> float:
        """
        Clock reading, but never earlier than anything already in the log.
        Imported events may carry timestamps ahead of our clock; on a tie the
        append sequence puts the new result last.
        """
        now = self._clock()
        logged = [event_order_key(r, i)[0] for i, r in enumerate(self._results[match_id])]
        if logged and max(logged) > now:
            return max(logged)
        return now

    def _append(self, match_id: str, result: HoleResult) -> HoleResult:
        self._sequence += 1
        stamped = replace(result, match_id=match_id, sequence=self._sequence)
        self._results[match_id].append(stamped)
        return stamped
