"""
Tests for the branch and bound solver.
"""

import itertools
import random

import pytest

from wvw_planner.simulator.exact import BranchAndBoundSearch, SearchOutcome, solve_exact
from wvw_planner.simulator.models import (
    AwardTable,
    Difficulty,
    DesiredOutcome,
    Objective,
    Placement,
    SearchBudget,
    SolveStatus,
    Strategy,
)

from conftest import RED, BLUE, GREEN, brute_force_solutions, make_events


def assert_consistent(result, scores, desired, min_margin=1):
    """Scenario accounting and ranking invariants of an achievable result."""
    final = dict(scores)
    for assignment in result.scenario:
        assert {assignment.first, assignment.second, assignment.third} == {RED, BLUE, GREEN}
        for world, points in assignment.points_awarded().items():
            final[world] += points

    assert final == result.final_scores
    assert final[desired.first] - final[desired.second] >= min_margin
    assert final[desired.second] - final[desired.third] >= min_margin
    assert result.margin == final[desired.first] - final[desired.second]


class TestSolveExact:
    """Tests for solve_exact."""

    @pytest.mark.parametrize("order", list(itertools.permutations([RED, BLUE, GREEN])))
    def test_every_order_reachable_from_tie(self, tied_scores, single_event, order):
        """Test a three-way tie with one skirmish allows every ranking."""
        desired = DesiredOutcome(*order)

        result = solve_exact(tied_scores, single_event, desired)

        assert result.status == SolveStatus.ACHIEVABLE
        assert result.strategy_used == Strategy.EXACT
        assert result.scenario[0].order == desired.order
        assert result.final_scores[desired.first] == 1005
        assert result.final_scores[desired.second] == 1004
        assert result.final_scores[desired.third] == 1003
        assert result.difficulty == Difficulty.VERY_HARD

    def test_bound_rejection(self, single_event, red_blue_green):
        """Test infeasible input is rejected before searching."""
        result = solve_exact({RED: 100, BLUE: 1000, GREEN: 500}, single_event, red_blue_green)

        assert result.status == SolveStatus.INFEASIBLE
        assert result.iterations == 0
        assert "maxReachable[red]=105 <= minReachable[blue]=1003" in result.reason

    def test_exhaustion_proves_infeasible(self, single_event, red_blue_green):
        """Test a ranking the bounds allow but no placement reaches."""
        scores = {RED: 0, BLUE: 0, GREEN: 0}

        result = solve_exact(scores, single_event, red_blue_green, min_margin=2)

        assert result.status == SolveStatus.INFEASIBLE
        assert result.iterations == 6
        assert "No placements" in result.reason
        assert brute_force_solutions(scores, single_event, red_blue_green, 2) == []

    def test_accounting(self, mixed_events, red_blue_green):
        """Test final scores add up and the ranking holds."""
        scores = {RED: 200, BLUE: 250, GREEN: 230}

        result = solve_exact(scores, mixed_events, red_blue_green)

        assert result.status == SolveStatus.ACHIEVABLE
        assert_consistent(result, scores, red_blue_green)

    def test_scenario_in_input_order(self, tied_scores, red_blue_green):
        """Test assignments follow the caller's skirmish order, not the search order."""
        events = make_events((5, 4, 3), (31, 24, 17), (15, 14, 12))

        result = solve_exact(tied_scores, events, red_blue_green)

        assert [a.event_id for a in result.scenario] == [1, 2, 3]
        assert [a.awards.first for a in result.scenario] == [5, 31, 15]

    def test_deterministic(self, mixed_events, red_blue_green):
        """Test identical input gives an identical result."""
        scores = {RED: 200, BLUE: 250, GREEN: 230}

        first = solve_exact(scores, mixed_events, red_blue_green)
        second = solve_exact(scores, mixed_events, red_blue_green)

        assert first.to_dict() == second.to_dict()

    def test_min_effort_drops_needless_wins(self, single_event, red_blue_green):
        """Test a comfortable leader is not asked to win the skirmish."""
        scores = {RED: 1000, BLUE: 500, GREEN: 0}

        result = solve_exact(scores, single_event, red_blue_green)

        assert result.status == SolveStatus.ACHIEVABLE
        assert result.scenario[0].placement_of(RED) != Placement.FIRST
        assert result.difficulty == Difficulty.EASY

    def test_lexicographic_margin(self, single_event, red_blue_green):
        """Test the margin objective shrinks the lead as far as it can."""
        scores = {RED: 1000, BLUE: 990, GREEN: 0}

        min_effort = solve_exact(scores, single_event, red_blue_green)
        tight = solve_exact(
            scores, single_event, red_blue_green,
            objective=Objective.LEXICOGRAPHIC_MARGIN
        )

        assert min_effort.margin == 9
        assert tight.margin == 8
        assert tight.scenario[0].placement_of(RED) == Placement.THIRD
        assert_consistent(tight, scores, red_blue_green)

    def test_budget_exceeded_is_inconclusive(self, tied_scores, red_blue_green):
        """Test running out of iterations is not reported as infeasible."""
        events = make_events(*[(5, 4, 3)] * 5)

        result = solve_exact(
            tied_scores, events, red_blue_green,
            budget=SearchBudget(max_iterations=3)
        )

        assert result.status == SolveStatus.INCONCLUSIVE
        assert "budget" in result.reason

    def test_no_events(self, red_blue_green):
        """Test zero skirmishes returns the standings unchanged."""
        result = solve_exact({RED: 3, BLUE: 2, GREEN: 1}, [], red_blue_green)

        assert result.status == SolveStatus.ACHIEVABLE
        assert result.degenerate is True
        assert result.scenario == []

    def test_no_events_wrong_order(self, red_blue_green):
        result = solve_exact({RED: 1, BLUE: 2, GREEN: 3}, [], red_blue_green)

        assert result.status == SolveStatus.INFEASIBLE
        assert result.degenerate is True
        assert result.reason.startswith("No skirmishes remaining")

    def test_invalid_outcome(self, tied_scores, single_event):
        result = solve_exact(tied_scores, single_event, DesiredOutcome(RED, RED, GREEN))

        assert result.status == SolveStatus.INVALID_INPUT


class TestAgreesWithBruteForce:
    """The exact solver must match exhaustive enumeration on small inputs."""

    @pytest.mark.parametrize("seed", range(30))
    def test_random_instances(self, seed):
        rng = random.Random(seed)
        tiers = [(5, 4, 3), (15, 14, 12), (23, 18, 14), (51, 37, 24)]
        events = make_events(*(rng.choice(tiers) for _ in range(rng.randint(1, 4))))
        scores = {c: rng.randint(0, 100) for c in (RED, BLUE, GREEN)}
        order = [RED, BLUE, GREEN]
        rng.shuffle(order)
        desired = DesiredOutcome(*order)
        margin = rng.randint(1, 4)

        result = solve_exact(scores, events, desired, margin)
        solutions = brute_force_solutions(scores, events, desired, margin)

        assert result.achievable == bool(solutions)
        if result.achievable:
            assert_consistent(result, scores, desired, margin)


class TestBranchAndBoundSearch:
    """Tests for the search itself."""

    def test_counts_iterations(self):
        search = BranchAndBoundSearch((1000, 1000, 1000), [AwardTable(5, 4, 3)], 1)

        perms = search.run()

        assert perms == [(0, 1, 2)]
        assert search.outcome == SearchOutcome.FOUND
        assert search.iterations == 1

    def test_custom_candidate_order(self):
        """Test the candidate order decides which witness is found first."""
        search = BranchAndBoundSearch(
            (1000, 990, 0), [AwardTable(5, 4, 3)], 1,
            candidates_for=lambda depth: [(2, 1, 0), (0, 1, 2)]
        )

        assert search.run() == [(2, 1, 0)]
