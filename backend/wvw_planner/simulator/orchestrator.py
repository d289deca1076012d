"""
Solver orchestration.

Validates the request, then tries strategies from cheapest to most
expensive until one gives a definitive answer:

1. obvious   - the ranking is already locked in
2. exact     - branch and bound within a budget
3. random    - randomized restarts if the exact search ran out of budget
4. heuristic - greedy construction as a last resort

Only the bound check and an exhaustive search prove a ranking impossible.
A heuristic that finds no path reports inconclusive.
"""

import logging
import random
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..core.config import (
    DEFAULT_MIN_MARGIN,
    MAX_EVENTS,
    RANDOM_ATTEMPTS,
    RANDOM_ITERATIONS_PER_ATTEMPT,
    SOLVER_DEADLINE_SECONDS,
    SOLVER_MAX_ITERATIONS,
)
from .exact import solve_exact
from .feasibility import outcome_locked
from .heuristic import solve_heuristic
from .models import (
    DesiredOutcome,
    Event,
    Objective,
    ScoreVector,
    SearchBudget,
    SolverResult,
    SolveStatus,
    Strategy,
    StrategyAttempt,
)
from .random_search import solve_random
from .search import achievable_result, canonical_order, invalid_result, validate_inputs


logger = logging.getLogger(__name__)

DEFINITIVE = (SolveStatus.ACHIEVABLE, SolveStatus.INFEASIBLE)

# Desired second takes first, winner second: no effort from the winner
_ZERO_EFFORT = (1, 0, 2)


def default_budget() -> SearchBudget:
    return SearchBudget(
        max_iterations=SOLVER_MAX_ITERATIONS,
        deadline_seconds=SOLVER_DEADLINE_SECONDS
    )


class SolverStrategy(ABC):
    """A way of answering "can this ranking happen, and how"."""

    # Whether an infeasible answer from this strategy is a proof
    proves_infeasibility = True

    @property
    @abstractmethod
    def strategy(self) -> Strategy:
        """Which strategy results are attributed to."""
        pass

    @abstractmethod
    def solve(
        self,
        scores: ScoreVector,
        events: Sequence[Event],
        desired: DesiredOutcome,
        min_margin: int
    ) -> SolverResult:
        """
        Attempt a solve.

        Returns:
            SolverResult; achievable or infeasible ends the orchestration,
            inconclusive hands over to the next strategy
        """
        pass


class ObviousStrategy(SolverStrategy):
    """Answers immediately when no skirmish result can change the ranking."""

    @property
    def strategy(self) -> Strategy:
        return Strategy.OBVIOUS

    def solve(self, scores, events, desired, min_margin) -> SolverResult:
        if not outcome_locked(scores, events, desired, min_margin):
            return SolverResult(
                status=SolveStatus.INCONCLUSIVE,
                strategy_used=Strategy.OBVIOUS,
                reason="Ranking is not yet locked in"
            )
        order = canonical_order(events)
        perms = [_ZERO_EFFORT] * len(events)
        return achievable_result(scores, events, desired, order, perms, Strategy.OBVIOUS, 1)


class ExactStrategy(SolverStrategy):

    def __init__(self, budget: Optional[SearchBudget] = None, objective: Objective = Objective.MIN_EFFORT):
        self.budget = budget or default_budget()
        self.objective = objective

    @property
    def strategy(self) -> Strategy:
        return Strategy.EXACT

    def solve(self, scores, events, desired, min_margin) -> SolverResult:
        return solve_exact(scores, events, desired, min_margin, self.budget, self.objective)


class RandomStrategy(SolverStrategy):

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        attempts: int = RANDOM_ATTEMPTS,
        iterations_per_attempt: int = RANDOM_ITERATIONS_PER_ATTEMPT
    ):
        self.rng = rng
        self.attempts = attempts
        self.iterations_per_attempt = iterations_per_attempt

    @property
    def strategy(self) -> Strategy:
        return Strategy.RANDOM

    def solve(self, scores, events, desired, min_margin) -> SolverResult:
        return solve_random(
            scores, events, desired, min_margin,
            attempts=self.attempts,
            iterations_per_attempt=self.iterations_per_attempt,
            rng=self.rng
        )


class HeuristicStrategy(SolverStrategy):

    proves_infeasibility = False

    @property
    def strategy(self) -> Strategy:
        return Strategy.HEURISTIC

    def solve(self, scores, events, desired, min_margin) -> SolverResult:
        return solve_heuristic(scores, events, desired, min_margin)


def default_strategies(
    budget: Optional[SearchBudget] = None,
    rng: Optional[random.Random] = None,
    objective: Objective = Objective.MIN_EFFORT
) -> List[SolverStrategy]:
    return [
        ObviousStrategy(),
        ExactStrategy(budget, objective),
        RandomStrategy(rng),
        HeuristicStrategy(),
    ]


def solve(
    scores: ScoreVector,
    events: Sequence[Event],
    desired: DesiredOutcome,
    min_margin: int = DEFAULT_MIN_MARGIN,
    budget: Optional[SearchBudget] = None,
    rng: Optional[random.Random] = None,
    objective: Objective = Objective.MIN_EFFORT,
    strategies: Optional[List[SolverStrategy]] = None
) -> SolverResult:
    """
    Decide whether a desired final ranking is achievable and how.

    Args:
        scores: Current victory points
        events: Remaining skirmishes (1 to MAX_EVENTS)
        desired: Target ranking
        min_margin: Required lead between adjacent worlds
        budget: Limit for the exact search (defaults from config)
        rng: Random source for the randomized strategy
        objective: What the exact solver's post pass minimizes
        strategies: Override the strategy sequence

    Returns:
        The first definitive SolverResult, with a trace of every strategy tried
    """
    error = validate_inputs(scores, events, desired, min_margin, max_events=MAX_EVENTS)
    if error:
        logger.info("Rejected solve request: %s", error)
        return invalid_result(error, Strategy.OBVIOUS)

    if strategies is None:
        strategies = default_strategies(budget, rng, objective)

    trace: List[StrategyAttempt] = []
    total_iterations = 0
    result = None

    for strategy in strategies:
        result = strategy.solve(scores, events, desired, min_margin)
        if result.status == SolveStatus.INFEASIBLE and not strategy.proves_infeasibility:
            result.status = SolveStatus.INCONCLUSIVE
            result.reason = f"Not proven infeasible; {strategy.strategy.value} search found no path. {result.reason}"
        total_iterations += result.iterations
        trace.append(StrategyAttempt(
            strategy=strategy.strategy,
            status=result.status,
            iterations=result.iterations,
            reason=result.reason
        ))
        logger.debug("Strategy %s: %s", strategy.strategy.value, result.status.value)

        if result.status in DEFINITIVE:
            break

    if result is None:
        return invalid_result("No solver strategies configured", Strategy.OBVIOUS)

    result.iterations = total_iterations
    result.trace = trace
    logger.info(
        "Solved %s: %s via %s (%d iterations)",
        desired.label(), result.status.value, result.strategy_used.value, total_iterations
    )
    return result
