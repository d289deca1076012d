"""
Historical performance analysis.

Turns past skirmish results into per-world placement probabilities,
overall, per coverage window and per alliance composition, for use by the
Monte Carlo engine. Also estimates how many first places a world needs to
reach a desired placement and how that compares with its history.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from ..core.windows import SKIRMISH_DURATION, TimeWindow, time_window_for
from .models import (
    AllianceStats,
    AwardTable,
    Competitor,
    COMPETITORS,
    DesiredOutcome,
    Difficulty,
    Event,
    HistoricalStats,
    Placement,
    PlacementProbabilities,
    RequiredPerformance,
    ScoreVector,
    UNIFORM_PROBABILITIES,
    WindowSummary,
)
from .tiebreakers import placements_from_scores


# World IDs linked under each color
Alliances = Dict[Competitor, List[int]]


@dataclass
class PastSkirmish:
    """A completed skirmish and where each world finished."""

    skirmish_id: int
    timestamp: datetime
    placements: Dict[Competitor, Placement]
    scores: Dict[Competitor, int] = field(default_factory=dict)
    vp_awarded: Dict[Competitor, int] = field(default_factory=dict)
    alliances: Optional[Alliances] = None

    @classmethod
    def from_scores(
        cls,
        skirmish_id: int,
        timestamp: datetime,
        scores: Dict[Competitor, int],
        awards: Optional[AwardTable] = None,
        alliances: Optional[Alliances] = None
    ) -> 'PastSkirmish':
        """Build from raw war scores; the highest score takes first."""
        placements = placements_from_scores(scores)
        vp_awarded = {}
        if awards is not None:
            vp_awarded = {c: awards.points_for(p) for c, p in placements.items()}
        return cls(
            skirmish_id=skirmish_id,
            timestamp=timestamp,
            placements=placements,
            scores=dict(scores),
            vp_awarded=vp_awarded,
            alliances={c: list(ids) for c, ids in alliances.items()} if alliances else None
        )


def alliance_key(world_ids: Iterable[int]) -> str:
    """Identify an alliance by its sorted, comma separated world IDs."""
    return ",".join(str(world_id) for world_id in sorted(world_ids))


class _Tally:
    """Running placement counts and score/VP totals."""

    def __init__(self):
        self.counts = {p: 0 for p in Placement}
        self.score = 0
        self.vp = 0

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def add(self, skirmish: PastSkirmish, competitor: Competitor):
        self.counts[skirmish.placements[competitor]] += 1
        self.score += skirmish.scores.get(competitor, 0)
        self.vp += skirmish.vp_awarded.get(competitor, 0)

    def probabilities(self) -> Optional[PlacementProbabilities]:
        total = self.total
        if total == 0:
            return None
        return PlacementProbabilities(
            first=self.counts[Placement.FIRST] / total,
            second=self.counts[Placement.SECOND] / total,
            third=self.counts[Placement.THIRD] / total
        )

    def summary(self) -> WindowSummary:
        total = self.total
        return WindowSummary(
            total_skirmishes=total,
            first=self.counts[Placement.FIRST],
            second=self.counts[Placement.SECOND],
            third=self.counts[Placement.THIRD],
            average_score=self.score / total if total else 0.0,
            average_vp=self.vp / total if total else 0.0
        )


def _window_probabilities(
    tallies: Dict[TimeWindow, _Tally],
    fallback: PlacementProbabilities
) -> Dict[TimeWindow, PlacementProbabilities]:
    return {
        window: (tallies[window].probabilities() if window in tallies else None) or fallback
        for window in TimeWindow
    }


def analyze_historical_performance(
    skirmishes: Sequence[PastSkirmish],
    competitor: Competitor
) -> HistoricalStats:
    """
    Calculate a world's placement probabilities from past skirmishes.

    Windows without data fall back to the overall probabilities; with no
    data at all every window uses a near uniform 0.33/0.34/0.33. Skirmishes
    that carry alliance composition are also tallied per alliance, and the
    last one seen sets the current alliance.

    Args:
        skirmishes: Completed skirmishes, oldest first
        competitor: World to analyze

    Returns:
        HistoricalStats for the world
    """
    if not skirmishes:
        return HistoricalStats(
            competitor=competitor,
            overall=UNIFORM_PROBABILITIES,
            by_window={window: UNIFORM_PROBABILITIES for window in TimeWindow},
            summary=WindowSummary()
        )

    overall = _Tally()
    by_window: Dict[TimeWindow, _Tally] = {}
    alliance_tallies: Dict[str, _Tally] = {}
    alliance_windows: Dict[str, Dict[TimeWindow, _Tally]] = {}
    alliance_worlds: Dict[str, List[int]] = {}
    current_alliance = None

    for skirmish in skirmishes:
        window = time_window_for(skirmish.timestamp)
        overall.add(skirmish, competitor)
        by_window.setdefault(window, _Tally()).add(skirmish, competitor)

        world_ids = (skirmish.alliances or {}).get(competitor)
        if world_ids:
            key = alliance_key(world_ids)
            alliance_worlds.setdefault(key, sorted(world_ids))
            alliance_tallies.setdefault(key, _Tally()).add(skirmish, competitor)
            alliance_windows.setdefault(key, {}).setdefault(window, _Tally()).add(skirmish, competitor)
            current_alliance = key

    overall_probabilities = overall.probabilities()

    by_alliance = {}
    for key, tally in alliance_tallies.items():
        alliance_overall = tally.probabilities()
        by_alliance[key] = AllianceStats(
            alliance_key=key,
            world_ids=alliance_worlds[key],
            summary=tally.summary(),
            overall=alliance_overall,
            by_window=_window_probabilities(alliance_windows[key], alliance_overall)
        )

    return HistoricalStats(
        competitor=competitor,
        overall=overall_probabilities,
        by_window=_window_probabilities(by_window, overall_probabilities),
        total_events=len(skirmishes),
        summary=overall.summary(),
        window_summaries={
            window: by_window[window].summary() if window in by_window else WindowSummary()
            for window in TimeWindow
        },
        by_alliance=by_alliance,
        current_alliance=current_alliance
    )


def analyze_match_history(skirmishes: Sequence[PastSkirmish]) -> Dict[Competitor, HistoricalStats]:
    """Historical stats for all three worlds."""
    return {c: analyze_historical_performance(skirmishes, c) for c in COMPETITORS}


def skirmishes_from_scores(
    skirmish_scores: List[Dict[Competitor, int]],
    match_start: datetime,
    first_id: int = 1,
    awards_for: Optional[Callable[[datetime], AwardTable]] = None,
    alliances: Optional[Alliances] = None
) -> List[PastSkirmish]:
    """
    Convert a match's per-skirmish war scores into placements.

    Skirmishes are two hours long and consecutive from `match_start`.

    Args:
        skirmish_scores: War scores per skirmish, in play order
        match_start: Start of the first skirmish
        first_id: ID given to the first skirmish
        awards_for: Award table lookup by start time, for VP awarded
        alliances: Alliance composition for the whole match
    """
    past = []
    for i, scores in enumerate(skirmish_scores):
        timestamp = match_start + i * SKIRMISH_DURATION
        awards = awards_for(timestamp) if awards_for else None
        past.append(PastSkirmish.from_scores(first_id + i, timestamp, scores, awards, alliances))
    return past


def window_score_totals(skirmishes: Sequence[PastSkirmish]) -> Dict[TimeWindow, ScoreVector]:
    """War score each world earned per coverage window."""
    totals = {window: {c: 0 for c in COMPETITORS} for window in TimeWindow}
    for skirmish in skirmishes:
        window = time_window_for(skirmish.timestamp)
        for competitor in COMPETITORS:
            totals[window][competitor] += skirmish.scores.get(competitor, 0)
    return totals


def dominant_competitor(scores: ScoreVector) -> Optional[Competitor]:
    """World with the most score; None when nobody scored. Ties follow identity order."""
    if all(scores.get(c, 0) == 0 for c in COMPETITORS):
        return None
    return max(COMPETITORS, key=lambda c: scores.get(c, 0))


def score_distribution(
    window_totals: Dict[TimeWindow, ScoreVector],
    competitor: Competitor
) -> Dict[TimeWindow, float]:
    """Percentage of a world's score earned in each window, to one decimal."""
    total = sum(scores.get(competitor, 0) for scores in window_totals.values())
    if total == 0:
        return {window: 0.0 for window in window_totals}
    return {
        window: round(scores.get(competitor, 0) / total * 100, 1)
        for window, scores in window_totals.items()
    }


def _difficulty(required: float, historical: float) -> Difficulty:
    if required <= historical * 1.2:
        return Difficulty.EASY
    if required <= historical * 1.5:
        return Difficulty.MODERATE
    if required <= historical * 2:
        return Difficulty.HARD
    return Difficulty.VERY_HARD


def _feasibility(required: float, historical: float) -> str:
    if required <= historical:
        return f"On track - historically wins {historical * 100:.1f}%"
    if required <= historical * 1.5:
        return f"Challenging - needs {required * 100:.1f}% vs historical {historical * 100:.1f}%"
    return f"Very difficult - needs {required * 100:.1f}% vs historical {historical * 100:.1f}%"


def calculate_required_performance(
    scores: ScoreVector,
    events: Sequence[Event],
    desired: DesiredOutcome,
    historical_stats: Dict[Competitor, HistoricalStats],
    min_margin: int = 1
) -> List[RequiredPerformance]:
    """
    Estimate the first places each world needs for the desired ranking.

    A world has to finish `min_margin` ahead of the world desired directly
    below it. Each first place it takes while that rival comes last closes
    the gap by the average first-minus-third award of the remaining
    skirmishes. This is a rough guide; the solvers give the exact answer.

    Returns:
        One RequiredPerformance per world, in identity order
    """
    remaining = len(events)
    swing = (
        sum(e.awards.first - e.awards.third for e in events) / remaining
        if remaining else 0
    )
    order = desired.order

    results = []
    for competitor in COMPETITORS:
        position = order.index(competitor)
        deficit = 0
        if position < 2:
            rival = order[position + 1]
            deficit = max(0, scores[rival] + min_margin - scores[competitor])

        if deficit == 0:
            required_firsts, required_rate = 0, 0.0
        elif remaining == 0:
            required_firsts, required_rate = 0, 1.0
        else:
            required_firsts = math.ceil(deficit / swing)
            required_rate = min(1.0, required_firsts / remaining)

        historical = historical_stats[competitor].overall.first
        results.append(RequiredPerformance(
            competitor=competitor,
            target_placement=Placement(position + 1),
            required_first_places=required_firsts,
            required_win_rate=required_rate,
            historical_win_rate=historical,
            difficulty=_difficulty(required_rate, historical),
            feasibility=_feasibility(required_rate, historical)
        ))
    return results
