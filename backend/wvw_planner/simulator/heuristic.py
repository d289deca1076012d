"""
Greedy fallback solver.

Builds one scenario per "number of first places given to the desired
winner" and binary searches for the smallest number that works. Fast, but
not guaranteed to find a solution when one exists.
"""

import logging
from typing import Dict, List, Sequence, Tuple

from ..core.config import DEFAULT_MIN_MARGIN
from .models import (
    AwardTable,
    DesiredOutcome,
    Event,
    ScoreVector,
    SolverResult,
    SolveStatus,
    Strategy,
)
from .search import (
    OrderedScores,
    Permutation,
    achievable_result,
    apply_permutation,
    canonical_order,
    degenerate_result,
    invalid_result,
    margins,
    satisfies,
    to_ordered,
    validate_inputs,
)


logger = logging.getLogger(__name__)

# Skirmishes the winner takes, keyed on whether second currently leads third.
# Candidates are listed in preference order.
WINNER_TABLE: Dict[bool, Tuple[Permutation, ...]] = {
    True: ((0, 2, 1), (0, 1, 2)),   # second is ahead: max catch-up if its lead survives
    False: ((0, 1, 2),),            # second needs the points over third
}

# All other skirmishes, keyed on (first leads second, second leads third)
DECISION_TABLE: Dict[Tuple[bool, bool], Tuple[Permutation, ...]] = {
    # both gaps hold: spend whichever lead is larger
    (True, True): ((1, 0, 2), (1, 2, 0), (2, 0, 1), (2, 1, 0)),
    # second trails third: second wins, third last
    (True, False): ((1, 0, 2), (2, 0, 1), (1, 2, 0), (2, 1, 0)),
    # winner trails second: winner 2nd, second last
    (False, True): ((1, 2, 0), (1, 0, 2), (2, 0, 1), (2, 1, 0)),
    # both gaps inverted: lift second over third first
    (False, False): ((1, 0, 2), (1, 2, 0), (2, 0, 1), (2, 1, 0)),
}


def choose_permutation(
    scores: OrderedScores,
    table: AwardTable,
    candidates: Sequence[Permutation],
    min_margin: int
) -> Permutation:
    """
    Pick the candidate that keeps the tighter gap widest.

    Candidates that would give up a lead currently worth `min_margin` are
    skipped; ties keep table order. Falls back to the first candidate when
    every one gives up a lead.
    """
    held = [g >= min_margin for g in margins(scores)]
    best = None
    best_key = None
    for perm in candidates:
        gaps = margins(apply_permutation(scores, table, perm))
        if any(h and g < min_margin for h, g in zip(held, gaps)):
            continue
        key = min(gaps)
        if best_key is None or key > best_key:
            best, best_key = perm, key
    return best if best is not None else candidates[0]


def construct_scenario(
    initial: OrderedScores,
    awards: Sequence[AwardTable],
    k: int,
    min_margin: int = DEFAULT_MIN_MARGIN
) -> Tuple[List[Permutation], OrderedScores]:
    """
    Build the scenario where the winner takes the `k` most valuable skirmishes.

    Args:
        initial: Scores of the desired first/second/third worlds
        awards: Award tables sorted by first place value, highest first
        k: Number of first places granted to the desired winner
        min_margin: Lead that counts as held

    Returns:
        Tuple of (permutations in search order, final scores)
    """
    scores = initial
    perms = []
    for i, table in enumerate(awards):
        leads_second = scores[0] - scores[1] > 0
        second_leads_third = scores[1] - scores[2] > 0
        if i < k:
            candidates = WINNER_TABLE[second_leads_third]
        else:
            candidates = DECISION_TABLE[(leads_second, second_leads_third)]
        perm = choose_permutation(scores, table, candidates, min_margin)
        perms.append(perm)
        scores = apply_permutation(scores, table, perm)
    return perms, scores


def _shortfall(desired: DesiredOutcome, scores: OrderedScores, min_margin: int) -> str:
    gaps = []
    for (upper, lower), (upper_score, lower_score) in (
        ((desired.first, desired.second), (scores[0], scores[1])),
        ((desired.second, desired.third), (scores[1], scores[2])),
    ):
        missing = lower_score + min_margin - upper_score
        if missing > 0:
            gaps.append(f"{upper.value} is {missing} VP short of {lower.value}")
    return "; ".join(gaps)


def solve_heuristic(
    scores: ScoreVector,
    events: Sequence[Event],
    desired: DesiredOutcome,
    min_margin: int = DEFAULT_MIN_MARGIN
) -> SolverResult:
    """
    Find a minimum-effort path with the greedy construction.

    Args:
        scores: Current victory points
        events: Remaining skirmishes
        desired: Target ranking
        min_margin: Required lead between adjacent worlds

    Returns:
        SolverResult tagged with the heuristic strategy
    """
    error = validate_inputs(scores, events, desired, min_margin)
    if error:
        return invalid_result(error, Strategy.HEURISTIC)

    if not events:
        return degenerate_result(scores, desired, min_margin, Strategy.HEURISTIC)

    order = canonical_order(events)
    awards = [events[i].awards for i in order]
    initial = to_ordered(scores, desired)
    n = len(awards)

    low, high = 0, n
    best = None
    constructions = 0

    # Binary search for the minimum number of winner first places
    while low <= high:
        mid = (low + high) // 2
        perms, final = construct_scenario(initial, awards, mid, min_margin)
        constructions += 1

        if satisfies(final, min_margin):
            best = perms
            high = mid - 1
        else:
            low = mid + 1

    if best is None:
        _, final = construct_scenario(initial, awards, n, min_margin)
        constructions += 1
        logger.info("Heuristic solver: no valid construction for %s", desired.label())
        return SolverResult(
            status=SolveStatus.INFEASIBLE,
            strategy_used=Strategy.HEURISTIC,
            reason=(
                f"Could not find a valid path even with {desired.first.value} winning "
                f"all {n} skirmishes: {_shortfall(desired, final, min_margin)}"
            ),
            iterations=constructions
        )

    return achievable_result(
        scores, events, desired, order, best,
        Strategy.HEURISTIC, constructions
    )
