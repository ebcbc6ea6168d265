import json
from pathlib import Path

from matchplay.config import SCHEMA_VERSION, TOTAL_HOLES
from matchplay.engine import coerce_winner, parse_hole_number
from matchplay.exceptions import SnapshotFormatError
from matchplay.models import HoleResult, Match
from matchplay.scorer import TournamentScorer


def load_tournament(path: Path) -> TournamentScorer:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    try:
        if not isinstance(data, dict):
            raise SnapshotFormatError(f"Tournament snapshot must be an object, got {type(data).__name__}")

        if data.get("schema_version") != SCHEMA_VERSION:
            raise SnapshotFormatError(f"Unsupported schema_version: {data.get('schema_version')}")

        total_matches = data.get("total_matches")
        scorer = TournamentScorer(
            total_holes=int(data.get("total_holes", TOTAL_HOLES)),
            total_matches=None if total_matches is None else int(total_matches),
        )

        for m in data["matches"]:
            match = Match(
                id=str(m["id"]),
                session_id=str(m["session_id"]),
                team_a_player_ids=list(m.get("team_a_player_ids", [])),
                team_b_player_ids=list(m.get("team_b_player_ids", [])),
                match_order=int(m.get("match_order", 0)),
            )

            results = []
            for r in m.get("hole_results", []):
                winner = coerce_winner(r["winner"])
                if winner is None:
                    raise SnapshotFormatError(f"match {match.id}: invalid winner {r['winner']!r}")

                results.append(
                    HoleResult(
                        match_id=match.id,
                        hole_number=parse_hole_number(r["hole_number"]),
                        winner=winner,
                        timestamp=float(r["timestamp"]),
                        team_a_score=r.get("team_a_score"),
                        team_b_score=r.get("team_b_score"),
                        scored_by=r.get("scored_by"),
                    )
                )

            scorer.add_match(match, results)
    except SnapshotFormatError:
        raise
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise SnapshotFormatError(f"Malformed tournament snapshot: {e}") from e

    return scorer


def save_tournament(path: Path, scorer: TournamentScorer):
    with open(path, "w", encoding="utf-8") as f:
        json.dump({
            "schema_version": SCHEMA_VERSION,
            "total_holes": scorer.total_holes,
            "total_matches": scorer.total_matches,
            "matches": [
                {
                    "id": m.id,
                    "session_id": m.session_id,
                    "match_order": m.match_order,
                    "team_a_player_ids": m.team_a_player_ids,
                    "team_b_player_ids": m.team_b_player_ids,
                    "hole_results": scorer.export_events(m.id),
                }
                for m in scorer.matches
            ],
        }, f, indent=4)
