"""
Conversions between API payloads and simulator models.
"""

from typing import Dict, List

from fastapi import HTTPException, status

from .schemas import (
    DesiredOutcomePayload,
    HistoricalStatsPayload,
    ScoresPayload,
    SkirmishPayload,
)
from ..core.tiers import Region, award_table_for_time
from ..core.windows import TimeWindow
from ..simulator.models import (
    AwardTable,
    Competitor,
    COMPETITORS,
    DesiredOutcome,
    Event,
    HistoricalStats,
    PlacementProbabilities,
    ScoreVector,
)


def to_scores(payload: ScoresPayload) -> ScoreVector:
    return {
        Competitor.RED: payload.red,
        Competitor.BLUE: payload.blue,
        Competitor.GREEN: payload.green
    }


def to_events(skirmishes: List[SkirmishPayload], region: str) -> List[Event]:
    """Build events, looking up awards by start time where none were given."""
    events = []
    for skirmish in skirmishes:
        if skirmish.awards is not None:
            awards = AwardTable(
                first=skirmish.awards.first,
                second=skirmish.awards.second,
                third=skirmish.awards.third
            )
        else:
            awards = award_table_for_time(skirmish.start_time, Region(region))
        events.append(Event(id=skirmish.id, awards=awards, start_time=skirmish.start_time))
    return events


def to_desired(payload: DesiredOutcomePayload) -> DesiredOutcome:
    return DesiredOutcome(
        first=Competitor(payload.first),
        second=Competitor(payload.second),
        third=Competitor(payload.third)
    )


def _probabilities(payload) -> PlacementProbabilities:
    return PlacementProbabilities(first=payload.first, second=payload.second, third=payload.third)


def to_historical_stats(payload: Dict[str, HistoricalStatsPayload]) -> Dict[Competitor, HistoricalStats]:
    """
    Convert per-world stats.

    Raises:
        HTTPException: 400 if a world or time window is missing or unknown
    """
    unknown = [key for key in payload if key not in {c.value for c in COMPETITORS}]
    missing = [c.value for c in COMPETITORS if c.value not in payload]
    if unknown or missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                "historical_stats needs exactly red, blue and green "
                f"(missing: {missing or 'none'}, unknown: {unknown or 'none'})"
            )
        )

    windows = {w.value for w in TimeWindow}
    stats = {}
    for competitor in COMPETITORS:
        entry = payload[competitor.value]
        bad_windows = [key for key in entry.by_window if key not in windows]
        if bad_windows:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=(
                    f"Unknown time window(s) for {competitor.value}: {bad_windows} "
                    f"(expected one of {sorted(windows)})"
                )
            )
        stats[competitor] = HistoricalStats(
            competitor=competitor,
            overall=_probabilities(entry.overall),
            by_window={TimeWindow(window): _probabilities(p) for window, p in entry.by_window.items()}
        )
    return stats
