from typing import Iterable, List

from matchplay.config import TOTAL_HOLES
from matchplay.engine import calculate_match_state, event_order_key
from matchplay.models import HoleResult, Match, TimelineEntry


def build_match_timeline(
    match: Match,
    hole_results: Iterable[HoleResult],
    total_holes: int = TOTAL_HOLES,
) -> List[TimelineEntry]:
    """
    Replays a match's log from scratch in event order.
    Returns the state after each event.
    Does NOT mutate external state.
    """

    ordered = [
        result
        for _, result in sorted(
            ((event_order_key(r, i), r) for i, r in enumerate(hole_results)),
            key=lambda pair: pair[0],
        )
    ]

    timeline: List[TimelineEntry] = []

    for index, result in enumerate(ordered):
        state = calculate_match_state(
            match, ordered[: index + 1], total_holes=total_holes
        )

        timeline.append(
            TimelineEntry(
                timestamp=result.timestamp,
                hole_number=result.hole_number,
                winner=result.winner,
                state=state,
            )
        )

    return timeline
