from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from matchplay.config import TOTAL_HOLES


class HoleWinner(str, Enum):
    TEAM_A = "teamA"
    TEAM_B = "teamB"
    HALVED = "halved"
    NONE = "none"


class Team(str, Enum):
    TEAM_A = "teamA"
    TEAM_B = "teamB"


class MatchStatus(str, Enum):
    SCHEDULED = "scheduled"
    ACTIVE = "active"
    COMPLETED = "completed"


class MatchResult(str, Enum):
    NOT_FINISHED = "notFinished"
    TEAM_A_WIN = "teamAWin"
    TEAM_B_WIN = "teamBWin"
    HALVED = "halved"


# --- EVENT LOG ---

@dataclass(frozen=True)
class HoleResult:
    match_id: str
    hole_number: int
    winner: HoleWinner
    timestamp: float
    team_a_score: Optional[int] = None
    team_b_score: Optional[int] = None
    scored_by: Optional[str] = None
    sequence: int = 0  # append position, breaks timestamp ties


@dataclass
class Match:
    """
    Identity + roster. The status fields are a cache written by the scorer
    after every recomputation; the hole log stays authoritative.
    """
    id: str
    session_id: str
    team_a_player_ids: List[str] = field(default_factory=list)
    team_b_player_ids: List[str] = field(default_factory=list)
    match_order: int = 0

    status: MatchStatus = MatchStatus.SCHEDULED
    result: MatchResult = MatchResult.NOT_FINISHED
    margin: int = 0
    holes_remaining: int = TOTAL_HOLES
    current_hole: Optional[int] = 1


# --- DERIVED ---

@dataclass(frozen=True)
class MatchState:
    match_id: str
    hole_results: Tuple[HoleResult, ...]
    holes_played: int
    holes_remaining: int
    team_a_holes_won: int
    team_b_holes_won: int
    current_score: int
    is_dormie: bool
    is_closed_out: bool
    display_score: str
    status: MatchStatus
    winning_team: Optional[Team]


@dataclass(frozen=True)
class MatchPoints:
    team_a_points: float
    team_b_points: float


@dataclass(frozen=True)
class TeamStandings:
    team_a_points: float
    team_b_points: float
    matches_completed: int
    matches_remaining: int
    total_matches: int
    leader: Optional[Team]
    margin: float
    matches_played: int = 0
    team_a_projected: float = 0.0
    team_b_projected: float = 0.0


@dataclass(frozen=True)
class SessionStandings:
    session_id: str
    team_a_points: float
    team_b_points: float
    matches_completed: int
    total_matches: int


@dataclass(frozen=True)
class MagicNumber:
    points_to_win: float
    team_a_needed: float
    team_b_needed: float
    team_a_clinched: bool
    team_b_clinched: bool
    has_clinched: bool
    clinching_team: Optional[Team]
    team_a_can_clinch: bool = False
    team_b_can_clinch: bool = False
    remaining_points: int = 0


@dataclass(frozen=True)
class PlayerRecord:
    player_id: str
    wins: int = 0
    losses: int = 0
    halves: int = 0

    @property
    def points(self) -> float:
        return self.wins + self.halves * 0.5

    @property
    def matches_played(self) -> int:
        return self.wins + self.losses + self.halves

    @property
    def win_pct(self) -> float:
        if not self.matches_played:
            return 0.0
        return self.wins / self.matches_played


@dataclass(frozen=True)
class TimelineEntry:
    timestamp: float
    hole_number: int
    winner: HoleWinner
    state: MatchState


@dataclass(frozen=True)
class DormieStatus:
    team_a_dormie: bool
    team_b_dormie: bool

    @property
    def is_dormie(self) -> bool:
        return self.team_a_dormie or self.team_b_dormie
