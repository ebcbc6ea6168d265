import json

import pytest

from matchplay.config import SCHEMA_VERSION
from matchplay.exceptions import SnapshotFormatError
from matchplay.models import HoleWinner, MatchStatus
from matchplay.scorer import TournamentScorer
from matchplay.storage import load_tournament, save_tournament


def write_snapshot(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_save_and_load_keeps_logs_and_rebuilds_cache(tmp_path):
    scorer = TournamentScorer(clock=iter(range(1, 100)).__next__)
    scorer.create_match("day1", ["a1"], ["b1"], match_id="m1")
    scorer.create_match("day1", ["a2"], ["b2"], match_id="m2")
    for hole in range(1, 11):
        scorer.record_hole_result("m1", hole, HoleWinner.TEAM_B)
    scorer.record_hole_result("m2", 1, HoleWinner.HALVED)

    path = tmp_path / "tournament.json"
    save_tournament(path, scorer)
    loaded = load_tournament(path)

    assert [m.id for m in loaded.matches] == ["m1", "m2"]
    assert loaded.get_match("m1").status is MatchStatus.COMPLETED
    assert loaded.match_state("m1").display_score == "10&8"
    assert loaded.export_events("m2") == scorer.export_events("m2")


def test_unsupported_schema_version(tmp_path):
    path = write_snapshot(tmp_path / "t.json", {"schema_version": SCHEMA_VERSION + 1, "matches": []})

    with pytest.raises(SnapshotFormatError):
        load_tournament(path)


def test_missing_match_field(tmp_path):
    path = write_snapshot(tmp_path / "t.json", {
        "schema_version": SCHEMA_VERSION,
        "matches": [{"id": "m1"}],
    })

    with pytest.raises(SnapshotFormatError):
        load_tournament(path)


def test_invalid_winner_in_snapshot(tmp_path):
    path = write_snapshot(tmp_path / "t.json", {
        "schema_version": SCHEMA_VERSION,
        "matches": [{
            "id": "m1",
            "session_id": "day1",
            "hole_results": [{"hole_number": 1, "winner": "albatross", "timestamp": 1}],
        }],
    })

    with pytest.raises(SnapshotFormatError):
        load_tournament(path)


def test_out_of_range_holes_survive_load_but_do_not_count(tmp_path):
    path = write_snapshot(tmp_path / "t.json", {
        "schema_version": SCHEMA_VERSION,
        "matches": [{
            "id": "m1",
            "session_id": "day1",
            "hole_results": [
                {"hole_number": 19, "winner": "teamA", "timestamp": 1},
                {"hole_number": 1, "winner": "teamA", "timestamp": 2},
            ],
        }],
    })

    scorer = load_tournament(path)

    assert len(scorer.hole_results("m1")) == 2
    assert scorer.match_state("m1").holes_played == 1


@pytest.mark.parametrize("data", [
    [],
    "tournament",
    {"schema_version": SCHEMA_VERSION, "total_holes": "abc", "matches": []},
    {"schema_version": SCHEMA_VERSION, "total_matches": "many", "matches": []},
])
def test_malformed_top_level_is_a_snapshot_error(tmp_path, data):
    path = write_snapshot(tmp_path / "t.json", data)

    with pytest.raises(SnapshotFormatError):
        load_tournament(path)


@pytest.mark.parametrize("hole", [2.7, "1.5", False])
def test_fractional_hole_in_snapshot_is_rejected(tmp_path, hole):
    path = write_snapshot(tmp_path / "t.json", {
        "schema_version": SCHEMA_VERSION,
        "matches": [{
            "id": "m1",
            "session_id": "day1",
            "hole_results": [{"hole_number": hole, "winner": "teamA", "timestamp": 1}],
        }],
    })

    with pytest.raises(SnapshotFormatError):
        load_tournament(path)


def test_total_matches_survives_save_and_load(tmp_path):
    scorer = TournamentScorer(total_matches=28)
    scorer.create_match("day1", ["a1"], ["b1"], match_id="m1")

    path = tmp_path / "tournament.json"
    save_tournament(path, scorer)
    loaded = load_tournament(path)

    assert loaded.total_matches == 28
    assert loaded.standings().matches_remaining == 28
