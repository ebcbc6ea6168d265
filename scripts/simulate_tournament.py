# scripts/simulate_tournament.py
from __future__ import annotations

import argparse
import itertools
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

import numpy as np
from tqdm import tqdm

from matchplay.config import (
    DEFAULT_MATCH_COUNT,
    DEFAULT_SEED,
    DEFAULT_SESSIONS,
    HOLE_OUTCOME_WEIGHTS,
    TOURNAMENTS_DIR,
)
from matchplay.engine import format_final_result
from matchplay.exceptions import MatchPlayError
from matchplay.models import HoleWinner, MatchStatus
from matchplay.scorer import TournamentScorer
from matchplay.storage import save_tournament
from matchplay.timeline import build_match_timeline


OUTCOMES = (HoleWinner.TEAM_A, HoleWinner.TEAM_B, HoleWinner.HALVED)


# ----------------------------
# Build & score
# ----------------------------
def build_tournament(
    match_count: int,
    sessions=DEFAULT_SESSIONS,
    total_matches: Optional[int] = None,
) -> TournamentScorer:
    """
    Lay out match_count matches round-robin over the sessions.
    Singles sessions get one player a side, everything else two.
    total_matches is the size of the whole cup when only part of it is built.
    """
    ticks = itertools.count(1)
    scorer = TournamentScorer(clock=lambda: float(next(ticks)), total_matches=total_matches)

    for i in range(match_count):
        session = sessions[i % len(sessions)]
        side = 1 if "singles" in session.lower() else 2
        first = (i * side) % 12 + 1
        roster = [(first + k - 1) % 12 + 1 for k in range(side)]

        scorer.create_match(
            session_id=session,
            team_a_player_ids=[f"A{n}" for n in roster],
            team_b_player_ids=[f"B{n}" for n in roster],
            match_id=f"M{i + 1:02d}",
        )

    return scorer


def play_match(scorer: TournamentScorer, match_id: str, rng: np.random.Generator, weights=HOLE_OUTCOME_WEIGHTS) -> int:
    """
    Score holes in order until the match is decided. Returns holes scored.
    """
    p = np.asarray(weights, dtype=float)
    p = p / p.sum()

    scored = 0
    for hole in range(1, scorer.total_holes + 1):
        if scorer.get_match(match_id).status is MatchStatus.COMPLETED:
            break
        winner = OUTCOMES[int(rng.choice(len(OUTCOMES), p=p))]
        scorer.record_hole_result(match_id, hole, winner, actor_id="simulator")
        scored += 1

    return scored


def simulate(
    match_count: int,
    seed: int,
    progress: bool = True,
    total_matches: Optional[int] = None,
) -> TournamentScorer:
    scorer = build_tournament(match_count, total_matches=total_matches)
    rng = np.random.default_rng(seed)

    matches = scorer.matches
    iterator = tqdm(matches, desc="matches", unit="match") if progress else matches
    for match in iterator:
        play_match(scorer, match.id, rng)

    return scorer


# ----------------------------
# Report
# ----------------------------
def print_report(scorer: TournamentScorer, points_to_win: Optional[float] = None) -> None:
    for match in scorer.matches:
        state = scorer.match_state(match.id)
        print(f"{match.id}  {match.session_id:<16}  {format_final_result(state, 'Team A', 'Team B')}")

    standings = scorer.standings()
    magic = scorer.magic_number(points_to_win)

    print("==========================")
    print(f"Team A {standings.team_a_points:g} - {standings.team_b_points:g} Team B")
    print(f"Completed: {standings.matches_completed}/{standings.total_matches}")
    print(f"Points to win: {magic.points_to_win:g}")
    if magic.has_clinched:
        print(f"Clinched: {magic.clinching_team.value}")
    else:
        print(f"Needed: A {magic.team_a_needed:g}  B {magic.team_b_needed:g}")
    print("==========================")


def print_timeline(scorer: TournamentScorer, match_id: str) -> None:
    match = scorer.get_match(match_id)
    for entry in build_match_timeline(match, scorer.hole_results(match_id), scorer.total_holes):
        print(f"hole {entry.hole_number:>2}  {entry.winner.value:<7}  {entry.state.display_score}")


def main(argv: Optional[List[str]] = None) -> int:
    p = argparse.ArgumentParser(
        description="Simulate a Ryder Cup tournament hole by hole and print the standings."
    )
    p.add_argument("--matches", type=int, default=DEFAULT_MATCH_COUNT)
    p.add_argument("--seed", type=int, default=DEFAULT_SEED)
    p.add_argument("--total-matches", type=int, default=None, help="Matches in the whole cup (default: --matches)")
    p.add_argument("--points-to-win", type=float, default=None)
    p.add_argument("--timeline", default=None, help="Match id to replay hole by hole, e.g. M01")
    p.add_argument("--out", default=None, help="Save the tournament snapshot json here")
    p.add_argument("--save", action="store_true", help="Save the snapshot under tournaments/ (ignored with --out)")
    p.add_argument("--no-progress", action="store_true")
    p.add_argument("--debug", action="store_true")
    args = p.parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG)

    if args.matches <= 0:
        print("[ERROR] --matches must be positive", file=sys.stderr)
        return 2

    if args.total_matches is not None and args.total_matches < args.matches:
        print("[ERROR] --total-matches must be at least --matches", file=sys.stderr)
        return 2

    t0 = time.time()
    scorer = simulate(
        args.matches,
        args.seed,
        progress=not args.no_progress,
        total_matches=args.total_matches,
    )
    print(f"[INFO] Simulated {args.matches} matches  seed={args.seed}  elapsed={time.time() - t0:.2f}s")

    try:
        print_report(scorer, args.points_to_win)
        if args.timeline:
            print_timeline(scorer, args.timeline)
    except MatchPlayError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    out_path = None
    if args.out:
        out_path = Path(args.out)
    elif args.save:
        out_path = TOURNAMENTS_DIR / f"sim_{args.matches}_{args.seed}.json"

    if out_path is not None:
        out_path.parent.mkdir(parents=True, exist_ok=True)
        save_tournament(out_path, scorer)
        print(f"[INFO] Saved: {out_path}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
