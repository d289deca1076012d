"""
Shared building blocks for the scenario solvers.

Solvers work in "desired order space": scores are tuples ordered as
(desired first, desired second, desired third) and each skirmish outcome is
one of six permutations giving the placement index (0 = 1st, 1 = 2nd,
2 = 3rd) earned by each of those three worlds.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from ..core.config import MAX_OPTIMIZATION_PASSES
from .feasibility import check_feasibility
from .models import (
    AwardTable,
    COMPETITORS,
    DesiredOutcome,
    Difficulty,
    Event,
    PlacementAssignment,
    ScoreVector,
    SolverResult,
    SolveStatus,
    Strategy,
)


logger = logging.getLogger(__name__)

Permutation = Tuple[int, int, int]
OrderedScores = Tuple[int, int, int]

# Canonical trial order, shared by every deterministic caller
PERMUTATIONS: Tuple[Permutation, ...] = (
    (0, 1, 2),  # standard win: 1st, 2nd, 3rd
    (0, 2, 1),  # winner 1st, second world held to 3rd (max catch-up)
    (1, 0, 2),
    (1, 2, 0),
    (2, 0, 1),
    (2, 1, 0),
)

# Re-assignments tried when relaxing a skirmish the winner takes first,
# dropping the winner to 2nd before 3rd
RELAXATIONS: Tuple[Permutation, ...] = tuple(p for p in PERMUTATIONS if p[0] != 0)


def validate_inputs(
    scores: ScoreVector,
    events: Sequence[Event],
    desired: DesiredOutcome,
    min_margin: int,
    max_events: Optional[int] = None
) -> Optional[str]:
    """
    Validate solver input.

    Returns:
        A description of the first problem found, or None if the input is usable
    """
    if not desired.is_distinct:
        return (
            f"Invalid desired outcome {desired.label()}: "
            f"each world must hold a different placement"
        )
    missing = [c.value for c in COMPETITORS if c not in scores]
    if missing:
        return f"Missing current victory points for: {', '.join(missing)}"
    if min_margin < 1:
        return f"Minimum margin must be at least 1, got {min_margin}"
    if max_events is not None:
        if not events:
            return "No remaining skirmishes to plan"
        if len(events) > max_events:
            return (
                f"Too many remaining skirmishes: {len(events)} "
                f"(maximum is {max_events})"
            )
    return None


def canonical_order(events: Sequence[Event]) -> List[int]:
    """Indices of `events` sorted by first place award, highest first (stable)."""
    return sorted(range(len(events)), key=lambda i: -events[i].awards.first)


def to_ordered(scores: ScoreVector, desired: DesiredOutcome) -> OrderedScores:
    return (scores[desired.first], scores[desired.second], scores[desired.third])


def gains(awards: AwardTable, perm: Permutation) -> OrderedScores:
    table = awards.as_tuple()
    return (table[perm[0]], table[perm[1]], table[perm[2]])


def apply_permutation(scores: OrderedScores, awards: AwardTable, perm: Permutation) -> OrderedScores:
    table = awards.as_tuple()
    return (
        scores[0] + table[perm[0]],
        scores[1] + table[perm[1]],
        scores[2] + table[perm[2]],
    )


def final_scores(
    initial: OrderedScores,
    awards: Sequence[AwardTable],
    perms: Sequence[Permutation]
) -> OrderedScores:
    scores = initial
    for table, perm in zip(awards, perms):
        scores = apply_permutation(scores, table, perm)
    return scores


def margins(scores: OrderedScores) -> Tuple[int, int]:
    return (scores[0] - scores[1], scores[1] - scores[2])


def satisfies(scores: OrderedScores, min_margin: int) -> bool:
    return scores[0] - scores[1] >= min_margin and scores[1] - scores[2] >= min_margin


def winner_firsts(perms: Sequence[Permutation]) -> int:
    return sum(1 for p in perms if p[0] == 0)


def classify_difficulty(first_places: int, total: int) -> Difficulty:
    """
    Bucket the share of skirmishes the winner must take.

    <=40% easy, <=60% moderate, <=80% hard, otherwise very hard.
    """
    if total == 0:
        return Difficulty.EASY
    pct = first_places / total * 100
    if pct <= 40:
        return Difficulty.EASY
    if pct <= 60:
        return Difficulty.MODERATE
    if pct <= 80:
        return Difficulty.HARD
    return Difficulty.VERY_HARD


def relax_min_effort(
    initial: OrderedScores,
    awards: Sequence[AwardTable],
    perms: List[Permutation],
    min_margin: int
) -> Tuple[List[Permutation], int]:
    """
    Reduce how often the winner has to take first place.

    Walks the skirmishes in order; wherever the winner is first, tries the
    re-assignments in RELAXATIONS and keeps the first one that still yields
    a valid final ranking. Repeats until a full pass changes nothing.

    Returns:
        Tuple of (relaxed permutations, number of candidates evaluated)
    """
    perms = list(perms)
    current = final_scores(initial, awards, perms)
    evaluations = 0
    improved = True

    while improved:
        improved = False
        for i, perm in enumerate(perms):
            if perm[0] != 0:
                continue
            old = gains(awards[i], perm)
            for candidate in RELAXATIONS:
                evaluations += 1
                new = gains(awards[i], candidate)
                trial = (
                    current[0] - old[0] + new[0],
                    current[1] - old[1] + new[1],
                    current[2] - old[2] + new[2],
                )
                if satisfies(trial, min_margin):
                    perms[i] = candidate
                    current = trial
                    improved = True
                    break

    return perms, evaluations


def relax_lexicographic(
    initial: OrderedScores,
    awards: Sequence[AwardTable],
    perms: List[Permutation],
    min_margin: int
) -> Tuple[List[Permutation], int]:
    """
    Hill climb towards the smallest margins, then the fewest winner first places.

    Any single skirmish change that keeps the ranking valid and strictly lowers
    (first-second margin, second-third margin, winner first places) is kept.
    """
    perms = list(perms)
    current = final_scores(initial, awards, perms)
    firsts = winner_firsts(perms)
    best_key = margins(current) + (firsts,)
    evaluations = 0
    passes = 0
    improved = True

    while improved and passes < MAX_OPTIMIZATION_PASSES:
        improved = False
        passes += 1
        for i, perm in enumerate(perms):
            old = gains(awards[i], perm)
            for candidate in PERMUTATIONS:
                if candidate == perms[i]:
                    continue
                evaluations += 1
                new = gains(awards[i], candidate)
                trial = (
                    current[0] - old[0] + new[0],
                    current[1] - old[1] + new[1],
                    current[2] - old[2] + new[2],
                )
                if not satisfies(trial, min_margin):
                    continue
                trial_firsts = firsts - (perms[i][0] == 0) + (candidate[0] == 0)
                key = margins(trial) + (trial_firsts,)
                if key < best_key:
                    perms[i] = candidate
                    current, firsts, best_key = trial, trial_firsts, key
                    old = new
                    improved = True

    if passes >= MAX_OPTIMIZATION_PASSES:
        logger.warning("Margin optimization stopped after %d passes", passes)

    return perms, evaluations


def build_scenario(
    events: Sequence[Event],
    order: Sequence[int],
    perms: Sequence[Permutation],
    desired: DesiredOutcome
) -> List[PlacementAssignment]:
    """
    Turn permutations over the canonically ordered skirmishes into
    placement assignments listed in the caller's skirmish order.
    """
    by_position = {}
    for position, perm in zip(order, perms):
        event = events[position]
        holders = [None, None, None]
        for world, placement_index in zip(desired.order, perm):
            holders[placement_index] = world
        by_position[position] = PlacementAssignment(
            event_id=event.id,
            awards=event.awards,
            first=holders[0],
            second=holders[1],
            third=holders[2]
        )
    return [by_position[i] for i in range(len(events))]


def achievable_result(
    scores: ScoreVector,
    events: Sequence[Event],
    desired: DesiredOutcome,
    order: Sequence[int],
    perms: Sequence[Permutation],
    strategy: Strategy,
    iterations: int
) -> SolverResult:
    """Assemble a successful SolverResult from a solved permutation list."""
    scenario = build_scenario(events, order, perms, desired)
    final = dict(scores)
    for assignment in scenario:
        for world, points in assignment.points_awarded().items():
            final[world] += points

    return SolverResult(
        status=SolveStatus.ACHIEVABLE,
        strategy_used=strategy,
        scenario=scenario,
        final_scores={c: final[c] for c in COMPETITORS},
        margin=final[desired.first] - final[desired.second],
        difficulty=classify_difficulty(winner_firsts(perms), len(perms)),
        iterations=iterations
    )


def invalid_result(reason: str, strategy: Strategy) -> SolverResult:
    return SolverResult(
        status=SolveStatus.INVALID_INPUT,
        strategy_used=strategy,
        reason=reason
    )


def degenerate_result(
    scores: ScoreVector,
    desired: DesiredOutcome,
    min_margin: int,
    strategy: Strategy
) -> SolverResult:
    """With no skirmishes left the standings are final; no search is needed."""
    if satisfies(to_ordered(scores, desired), min_margin):
        return SolverResult(
            status=SolveStatus.ACHIEVABLE,
            strategy_used=strategy,
            scenario=[],
            final_scores={c: scores[c] for c in COMPETITORS},
            margin=scores[desired.first] - scores[desired.second],
            difficulty=Difficulty.EASY,
            degenerate=True
        )

    feasibility = check_feasibility(scores, [], desired, min_margin)
    return SolverResult(
        status=SolveStatus.INFEASIBLE,
        strategy_used=strategy,
        final_scores={c: scores[c] for c in COMPETITORS},
        reason=f"No skirmishes remaining; {feasibility.reason}",
        degenerate=True
    )
