"""
Exact scenario solver (branch and bound).

Guarantees:
- If a valid scenario exists and the budget allows, it is found.
- If the search tree is exhausted, the desired ranking is proven impossible.

Skirmishes are searched highest value first. Each node tries the six
placement permutations in a fixed order and only descends when the
reachability bounds say the desired ranking can still be reached.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from ..core.config import DEFAULT_MIN_MARGIN
from .feasibility import bounds_allow, check_feasibility, suffix_bounds
from .models import (
    AwardTable,
    DesiredOutcome,
    Event,
    Objective,
    ScoreVector,
    SearchBudget,
    SolverResult,
    SolveStatus,
    Strategy,
)
from .search import (
    OrderedScores,
    Permutation,
    PERMUTATIONS,
    achievable_result,
    apply_permutation,
    canonical_order,
    degenerate_result,
    invalid_result,
    relax_lexicographic,
    relax_min_effort,
    satisfies,
    to_ordered,
    validate_inputs,
)


logger = logging.getLogger(__name__)

# How many nodes between wall clock checks
DEADLINE_CHECK_INTERVAL = 256


class SearchOutcome:
    FOUND = "found"
    EXHAUSTED = "exhausted"
    BUDGET_EXCEEDED = "budget_exceeded"


@dataclass
class _Frame:
    """One level of the explicit search stack."""

    depth: int
    scores: OrderedScores
    candidates: Sequence[Permutation]
    next_index: int = 0


class BranchAndBoundSearch:
    """
    Depth-first search over per-skirmish permutations with bound pruning.

    Uses an explicit frame stack instead of recursion so that iterations can
    be counted and the budget checked at every node.
    """

    def __init__(
        self,
        initial: OrderedScores,
        awards: Sequence[AwardTable],
        min_margin: int,
        max_iterations: Optional[int] = None,
        deadline: Optional[float] = None,
        candidates_for: Optional[Callable[[int], Sequence[Permutation]]] = None
    ):
        """
        Args:
            initial: Scores of the desired first/second/third worlds
            awards: Award tables in search order
            min_margin: Required lead between adjacent worlds
            max_iterations: Node budget (None = unlimited)
            deadline: time.monotonic() value after which the search gives up
            candidates_for: Permutation order for a given depth (default canonical)
        """
        self.initial = initial
        self.awards = list(awards)
        self.min_margin = min_margin
        self.max_iterations = max_iterations
        self.deadline = deadline
        self.candidates_for = candidates_for or (lambda depth: PERMUTATIONS)
        self.suffix_first, self.suffix_third = suffix_bounds(self.awards)
        self.iterations = 0
        self.outcome: Optional[str] = None

    def _budget_exceeded(self) -> bool:
        if self.max_iterations is not None and self.iterations > self.max_iterations:
            return True
        if (self.deadline is not None
                and self.iterations % DEADLINE_CHECK_INTERVAL == 0
                and time.monotonic() > self.deadline):
            return True
        return False

    def run(self) -> Optional[List[Permutation]]:
        """
        Search for any valid assignment.

        Returns:
            Permutations (one per skirmish, in search order) or None. Check
            `outcome` to tell exhaustion apart from an exceeded budget.
        """
        n = len(self.awards)
        frames = [_Frame(depth=0, scores=self.initial, candidates=self.candidates_for(0))]
        path: List[Permutation] = []

        while frames:
            frame = frames[-1]

            if frame.depth == n:
                if satisfies(frame.scores, self.min_margin):
                    self.outcome = SearchOutcome.FOUND
                    return list(path)
                frames.pop()
                path.pop()
                continue

            if frame.next_index >= len(frame.candidates):
                # Dead end: backtrack to the parent frame
                frames.pop()
                if path:
                    path.pop()
                continue

            perm = frame.candidates[frame.next_index]
            frame.next_index += 1

            self.iterations += 1
            if self._budget_exceeded():
                self.outcome = SearchOutcome.BUDGET_EXCEEDED
                return None

            child = apply_permutation(frame.scores, self.awards[frame.depth], perm)
            depth = frame.depth + 1
            if not bounds_allow(child, self.suffix_first[depth], self.suffix_third[depth], self.min_margin):
                continue

            path.append(perm)
            frames.append(_Frame(depth=depth, scores=child, candidates=self.candidates_for(depth)))

        self.outcome = SearchOutcome.EXHAUSTED
        return None


def relax(
    initial: OrderedScores,
    awards: Sequence[AwardTable],
    perms: List[Permutation],
    min_margin: int,
    objective: Objective
):
    """Run the post-search optimization pass for the requested objective."""
    if objective == Objective.LEXICOGRAPHIC_MARGIN:
        return relax_lexicographic(initial, awards, perms, min_margin)
    return relax_min_effort(initial, awards, perms, min_margin)


def solve_exact(
    scores: ScoreVector,
    events: Sequence[Event],
    desired: DesiredOutcome,
    min_margin: int = DEFAULT_MIN_MARGIN,
    budget: Optional[SearchBudget] = None,
    objective: Objective = Objective.MIN_EFFORT
) -> SolverResult:
    """
    Find a scenario producing the desired ranking, or prove there is none.

    Args:
        scores: Current victory points
        events: Remaining skirmishes
        desired: Target ranking
        min_margin: Required lead between adjacent worlds
        budget: Iteration and/or wall clock limit
        objective: What the post-search pass minimizes

    Returns:
        SolverResult with status achievable, infeasible or inconclusive
    """
    error = validate_inputs(scores, events, desired, min_margin)
    if error:
        return invalid_result(error, Strategy.EXACT)

    if not events:
        return degenerate_result(scores, desired, min_margin, Strategy.EXACT)

    feasibility = check_feasibility(scores, events, desired, min_margin)
    if not feasibility.possible:
        logger.info("Exact solver: rejected by bounds (%s)", feasibility.reason)
        return SolverResult(
            status=SolveStatus.INFEASIBLE,
            strategy_used=Strategy.EXACT,
            reason=feasibility.reason
        )

    budget = budget or SearchBudget()
    deadline = None
    if budget.deadline_seconds is not None:
        deadline = time.monotonic() + budget.deadline_seconds

    order = canonical_order(events)
    awards = [events[i].awards for i in order]
    initial = to_ordered(scores, desired)

    search = BranchAndBoundSearch(
        initial, awards, min_margin,
        max_iterations=budget.max_iterations,
        deadline=deadline
    )
    perms = search.run()

    if search.outcome == SearchOutcome.BUDGET_EXCEEDED:
        logger.info("Exact solver: budget exhausted after %d iterations", search.iterations)
        return SolverResult(
            status=SolveStatus.INCONCLUSIVE,
            strategy_used=Strategy.EXACT,
            reason=(
                f"Search budget exhausted after {search.iterations} iterations "
                f"without proving or disproving {desired.label()}"
            ),
            iterations=search.iterations
        )

    if perms is None:
        logger.info("Exact solver: search space exhausted, no solution")
        return SolverResult(
            status=SolveStatus.INFEASIBLE,
            strategy_used=Strategy.EXACT,
            reason=_exhaustion_reason(events, desired, min_margin, feasibility, search.iterations),
            iterations=search.iterations
        )

    logger.debug("Exact solver: solution found in %d iterations", search.iterations)
    perms, evaluations = relax(initial, awards, perms, min_margin, objective)

    return achievable_result(
        scores, events, desired, order, perms,
        Strategy.EXACT, search.iterations + evaluations
    )


def _exhaustion_reason(events, desired, min_margin, feasibility, iterations) -> str:
    # Cite the tightest adjacent bound so the caller sees how close it was
    pairs = ((desired.first, desired.second), (desired.second, desired.third))
    upper, lower = min(
        pairs,
        key=lambda p: feasibility.max_reachable[p[0]] - feasibility.min_reachable[p[1]]
    )
    return (
        f"No placements over the {len(events)} remaining skirmishes give "
        f"{desired.label()} with a margin of at least {min_margin} "
        f"({iterations} branches explored; tightest bound "
        f"maxReachable[{upper.value}]={feasibility.max_reachable[upper]}, "
        f"minReachable[{lower.value}]={feasibility.min_reachable[lower]})"
    )
