"""
Monte Carlo simulation engine for final standing probabilities.
"""

import math
import random
from datetime import datetime
from itertools import permutations
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from ..core.config import MONTE_CARLO_ITERATIONS
from ..core.windows import time_window_for
from .models import (
    Competitor,
    COMPETITORS,
    DesiredOutcome,
    Event,
    HistoricalStats,
    MonteCarloResult,
    OutcomeFrequency,
    Placement,
    PlacementProbabilities,
    PLACEMENTS,
    ScoreInterval,
    ScoreVector,
)


# Competitor indices (into COMPETITORS) holding 1st, 2nd and 3rd
ORDERS: Tuple[Tuple[int, int, int], ...] = tuple(permutations(range(3)))

WindowResolver = Callable[[datetime], str]


def joint_distribution(probabilities: Sequence[PlacementProbabilities]) -> List[float]:
    """
    Probability of each order in ORDERS for one skirmish.

    The winner is drawn from the three P(1st) values, then second place from
    the remaining two worlds' P(2nd) values; third is whoever is left. Zero
    weights fall back to a uniform draw.
    """
    firsts = [p.first for p in probabilities]
    total_first = sum(firsts)

    joint = []
    for first, second, third in ORDERS:
        p_first = firsts[first] / total_first if total_first > 0 else 1 / 3
        second_weight = probabilities[second].second
        pair_total = second_weight + probabilities[third].second
        p_second = second_weight / pair_total if pair_total > 0 else 0.5
        joint.append(p_first * p_second)
    return joint


def _event_table(event: Event, probabilities: Sequence[PlacementProbabilities]):
    """Cumulative order probabilities and the VP each world earns per order."""
    joint = joint_distribution(probabilities)
    cumulative = []
    running = 0.0
    for p in joint:
        running += p
        cumulative.append(running)
    cumulative[-1] = 1.0

    awards = event.awards.as_tuple()
    points = []
    for order in ORDERS:
        earned = [0, 0, 0]
        for placement_index, competitor_index in enumerate(order):
            earned[competitor_index] = awards[placement_index]
        points.append(tuple(earned))
    return tuple(cumulative), tuple(points)


def _ranking_index(s0: int, s1: int, s2: int) -> int:
    """Index into ORDERS of the standings; ties go to the earlier competitor."""
    if s0 >= s1:
        if s1 >= s2:
            return 0  # (0, 1, 2)
        if s0 >= s2:
            return 1  # (0, 2, 1)
        return 4      # (2, 0, 1)
    if s0 >= s2:
        return 2      # (1, 0, 2)
    if s1 >= s2:
        return 3      # (1, 2, 0)
    return 5          # (2, 1, 0)


def percentile(sorted_values: Sequence[int], p: float) -> int:
    """Nearest-rank percentile of an ascending sequence."""
    index = math.ceil(len(sorted_values) * p / 100) - 1
    return sorted_values[max(0, index)]


def simulate(
    scores: ScoreVector,
    events: Sequence[Event],
    historical_stats: Dict[Competitor, HistoricalStats],
    iterations: int = MONTE_CARLO_ITERATIONS,
    rng: Optional[random.Random] = None,
    window_for: Optional[WindowResolver] = None
) -> MonteCarloResult:
    """
    Run Monte Carlo simulation of the remaining skirmishes.

    Args:
        scores: Current victory points
        events: Remaining skirmishes
        historical_stats: Placement tendencies per competitor
        iterations: Number of simulated matches
        rng: Random source (pass a seeded Random for reproducible runs)
        window_for: Maps a skirmish start time to a time window key

    Returns:
        MonteCarloResult with rank probabilities, outcome table and score intervals

    Raises:
        ValueError: If iterations < 1 or a competitor has no stats
    """
    if iterations < 1:
        raise ValueError(f"iterations must be at least 1, got {iterations}")
    missing = [c.value for c in COMPETITORS if c not in historical_stats or c not in scores]
    if missing:
        raise ValueError(f"Missing scores or historical stats for: {', '.join(missing)}")

    rng = rng or random.Random()
    window_for = window_for or time_window_for

    # Resolve windows and sampling tables once, outside the hot loop
    tables = []
    for event in events:
        window = window_for(event.start_time) if event.start_time is not None else None
        probabilities = [historical_stats[c].probabilities_for(window) for c in COMPETITORS]
        tables.append(_event_table(event, probabilities))

    initial = [scores[c] for c in COMPETITORS]
    finals = ([0] * iterations, [0] * iterations, [0] * iterations)
    outcome_counts = [0] * len(ORDERS)
    draw = rng.random

    for sim_idx in range(iterations):
        s0, s1, s2 = initial

        for cumulative, points in tables:
            r = draw()
            k = 0
            while k < 5 and r >= cumulative[k]:
                k += 1
            earned = points[k]
            s0 += earned[0]
            s1 += earned[1]
            s2 += earned[2]

        finals[0][sim_idx] = s0
        finals[1][sim_idx] = s1
        finals[2][sim_idx] = s2
        outcome_counts[_ranking_index(s0, s1, s2)] += 1

    return _aggregate(iterations, finals, outcome_counts)


def _aggregate(
    iterations: int,
    finals: Tuple[List[int], List[int], List[int]],
    outcome_counts: List[int]
) -> MonteCarloResult:
    rank_counts = {c: {p: 0 for p in PLACEMENTS} for c in COMPETITORS}
    frequencies = []

    for order, count in zip(ORDERS, outcome_counts):
        if count == 0:
            continue
        for placement, competitor_index in zip(PLACEMENTS, order):
            rank_counts[COMPETITORS[competitor_index]][placement] += count
        frequencies.append(OutcomeFrequency(
            outcome=DesiredOutcome(*(COMPETITORS[i] for i in order)),
            count=count,
            probability=count / iterations
        ))

    # Stable sort keeps ORDERS order among equal counts
    frequencies.sort(key=lambda f: f.count, reverse=True)

    rank_probabilities: Dict[Competitor, Dict[Placement, float]] = {
        c: {p: rank_counts[c][p] / iterations for p in PLACEMENTS}
        for c in COMPETITORS
    }

    score_intervals = {}
    average_scores = {}
    for competitor, values in zip(COMPETITORS, finals):
        ordered = sorted(values)
        score_intervals[competitor] = ScoreInterval(
            p10=percentile(ordered, 10),
            p50=percentile(ordered, 50),
            p90=percentile(ordered, 90)
        )
        average_scores[competitor] = sum(ordered) / iterations

    return MonteCarloResult(
        iterations=iterations,
        rank_probabilities=rank_probabilities,
        outcome_frequencies=frequencies,
        score_intervals=score_intervals,
        average_scores=average_scores
    )
