from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
TOURNAMENTS_DIR = PROJECT_ROOT / "tournaments"

SCHEMA_VERSION = 1

TOTAL_HOLES = 18
FIRST_HOLE = 1

# Simulation harness
DEFAULT_MATCH_COUNT = 28
DEFAULT_SEED = 2026
DEFAULT_SESSIONS = ("Day 1 Fourball", "Day 1 Foursomes", "Day 2 Fourball", "Day 2 Foursomes", "Singles")
# P(teamA), P(teamB), P(halved) for a simulated hole
HOLE_OUTCOME_WEIGHTS = (0.38, 0.38, 0.24)
