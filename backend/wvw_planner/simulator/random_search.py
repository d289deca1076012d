"""
Randomized restart solver.

Runs many short depth-first searches, each trying the placement
permutations in a random order at every node. In orderings where the
canonical search gets stuck deep in a hopeless subtree, a random restart
often reaches a valid scenario much sooner.
"""

import logging
import random
from typing import Optional, Sequence

from ..core.config import DEFAULT_MIN_MARGIN, RANDOM_ATTEMPTS, RANDOM_ITERATIONS_PER_ATTEMPT
from .exact import BranchAndBoundSearch, SearchOutcome
from .feasibility import check_feasibility
from .models import DesiredOutcome, Event, ScoreVector, SolverResult, SolveStatus, Strategy
from .search import (
    PERMUTATIONS,
    achievable_result,
    canonical_order,
    degenerate_result,
    invalid_result,
    relax_min_effort,
    to_ordered,
    validate_inputs,
)


logger = logging.getLogger(__name__)


def solve_random(
    scores: ScoreVector,
    events: Sequence[Event],
    desired: DesiredOutcome,
    min_margin: int = DEFAULT_MIN_MARGIN,
    attempts: int = RANDOM_ATTEMPTS,
    iterations_per_attempt: int = RANDOM_ITERATIONS_PER_ATTEMPT,
    rng: Optional[random.Random] = None
) -> SolverResult:
    """
    Look for any valid scenario with randomized restarts.

    Finding nothing is not a proof, so failure is reported as inconclusive.
    The one exception is an attempt that explores its whole tree within its
    budget, which does prove the ranking impossible.

    Args:
        scores: Current victory points
        events: Remaining skirmishes
        desired: Target ranking
        min_margin: Required lead between adjacent worlds
        attempts: Number of restarts
        iterations_per_attempt: Node budget of each restart
        rng: Random source (a fresh one is created if omitted)

    Returns:
        SolverResult tagged with the random strategy
    """
    error = validate_inputs(scores, events, desired, min_margin)
    if error:
        return invalid_result(error, Strategy.RANDOM)

    if not events:
        return degenerate_result(scores, desired, min_margin, Strategy.RANDOM)

    feasibility = check_feasibility(scores, events, desired, min_margin)
    if not feasibility.possible:
        return SolverResult(
            status=SolveStatus.INFEASIBLE,
            strategy_used=Strategy.RANDOM,
            reason=feasibility.reason
        )

    rng = rng or random.Random()
    order = canonical_order(events)
    awards = [events[i].awards for i in order]
    initial = to_ordered(scores, desired)
    total_iterations = 0

    def shuffled(depth):
        candidates = list(PERMUTATIONS)
        rng.shuffle(candidates)
        return candidates

    for attempt in range(attempts):
        search = BranchAndBoundSearch(
            initial, awards, min_margin,
            max_iterations=iterations_per_attempt,
            candidates_for=shuffled
        )
        perms = search.run()
        total_iterations += search.iterations

        if search.outcome == SearchOutcome.EXHAUSTED:
            return SolverResult(
                status=SolveStatus.INFEASIBLE,
                strategy_used=Strategy.RANDOM,
                reason=(
                    f"Every placement combination over the {len(events)} remaining "
                    f"skirmishes was explored; none gives {desired.label()} "
                    f"with a margin of at least {min_margin}"
                ),
                iterations=total_iterations
            )

        if perms is not None:
            logger.debug("Random solver: witness found on attempt %d", attempt + 1)
            perms, evaluations = relax_min_effort(initial, awards, perms, min_margin)
            return achievable_result(
                scores, events, desired, order, perms,
                Strategy.RANDOM, total_iterations + evaluations
            )

    logger.info("Random solver: no witness after %d attempts", attempts)
    return SolverResult(
        status=SolveStatus.INCONCLUSIVE,
        strategy_used=Strategy.RANDOM,
        reason=f"No valid scenario found in {attempts} randomized attempts",
        iterations=total_iterations
    )
