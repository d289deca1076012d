"""
Shared fixtures for the planner tests.
"""

import itertools

import pytest

from wvw_planner.simulator.models import AwardTable, Competitor, DesiredOutcome, Event
from wvw_planner.simulator.search import PERMUTATIONS, final_scores, satisfies, to_ordered


RED = Competitor.RED
BLUE = Competitor.BLUE
GREEN = Competitor.GREEN


def make_events(*awards):
    """Events with sequential IDs from (first, second, third) tuples."""
    return [
        Event(id=i + 1, awards=AwardTable(*table))
        for i, table in enumerate(awards)
    ]


def brute_force_solutions(scores, events, desired, min_margin=1):
    """Every permutation assignment (input order) that yields the desired ranking."""
    initial = to_ordered(scores, desired)
    awards = [e.awards for e in events]
    return [
        perms for perms in itertools.product(PERMUTATIONS, repeat=len(events))
        if satisfies(final_scores(initial, awards, perms), min_margin)
    ]


@pytest.fixture
def tied_scores():
    """All three worlds level on 1000 VP."""
    return {RED: 1000, BLUE: 1000, GREEN: 1000}


@pytest.fixture
def red_blue_green():
    return DesiredOutcome(first=RED, second=BLUE, third=GREEN)


@pytest.fixture
def single_event():
    return make_events((5, 4, 3))


@pytest.fixture
def mixed_events():
    """Six skirmishes across EU tiers."""
    return make_events(
        (51, 37, 24),
        (31, 24, 17),
        (22, 18, 14),
        (15, 14, 12),
        (51, 37, 24),
        (31, 24, 17),
    )
