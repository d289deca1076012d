"""
Reachability bounds for a desired final ranking.

A world's best case is winning every remaining skirmish; its worst case is
finishing third in all of them. If the world that must finish above another
cannot clear the other's worst case even with its own best case, the ranking
is impossible no matter what happens.
"""

from typing import List, Sequence, Tuple

from .models import (
    AwardTable, Competitor, COMPETITORS, DesiredOutcome, Event, FeasibilityResult, ScoreVector
)


def reachable_bounds(
    scores: ScoreVector,
    events: Sequence[Event]
) -> Tuple[ScoreVector, ScoreVector]:
    """
    Best and worst case final victory points for every competitor.

    Returns:
        Tuple of (max_reachable, min_reachable)
    """
    max_gain = sum(e.awards.first for e in events)
    min_gain = sum(e.awards.third for e in events)
    max_reachable = {c: scores[c] + max_gain for c in COMPETITORS}
    min_reachable = {c: scores[c] + min_gain for c in COMPETITORS}
    return max_reachable, min_reachable


def _violation(
    upper: Competitor,
    lower: Competitor,
    max_reachable: ScoreVector,
    min_reachable: ScoreVector,
    min_margin: int
) -> str:
    best = max_reachable[upper]
    worst = min_reachable[lower]
    if min_margin == 1:
        bound = f"maxReachable[{upper.value}]={best} <= minReachable[{lower.value}]={worst}"
    else:
        bound = (
            f"maxReachable[{upper.value}]={best} < "
            f"minReachable[{lower.value}]={worst} + minMargin={min_margin}"
        )
    return f"{upper.value} cannot finish ahead of {lower.value}: {bound}"


def check_feasibility(
    scores: ScoreVector,
    events: Sequence[Event],
    desired: DesiredOutcome,
    min_margin: int = 1
) -> FeasibilityResult:
    """
    Check whether the desired ranking is reachable at all.

    For every adjacent pair in the desired order (A directly above B) the
    ranking needs maxReachable[A] - minReachable[B] >= min_margin. A failed
    check is a proof: no assignment of the remaining skirmishes can produce
    the ranking. A passed check does not guarantee a solution exists.

    Args:
        scores: Current victory points
        events: Remaining skirmishes (may be empty)
        desired: Target ranking
        min_margin: Required lead between adjacent worlds

    Returns:
        FeasibilityResult with the bounds and, when impossible, the violated inequality
    """
    max_reachable, min_reachable = reachable_bounds(scores, events)

    for upper, lower in ((desired.first, desired.second), (desired.second, desired.third)):
        if max_reachable[upper] - min_reachable[lower] < min_margin:
            return FeasibilityResult(
                possible=False,
                reason=_violation(upper, lower, max_reachable, min_reachable, min_margin),
                max_reachable=max_reachable,
                min_reachable=min_reachable
            )

    return FeasibilityResult(
        possible=True,
        max_reachable=max_reachable,
        min_reachable=min_reachable
    )


def outcome_locked(
    scores: ScoreVector,
    events: Sequence[Event],
    desired: DesiredOutcome,
    min_margin: int = 1
) -> bool:
    """
    True when the desired ranking holds whatever happens in the remaining skirmishes.

    Every adjacent pair must satisfy minReachable[A] - maxReachable[B] >= min_margin.
    """
    max_reachable, min_reachable = reachable_bounds(scores, events)
    return all(
        min_reachable[upper] - max_reachable[lower] >= min_margin
        for upper, lower in ((desired.first, desired.second), (desired.second, desired.third))
    )


def suffix_bounds(awards: Sequence[AwardTable]) -> Tuple[List[int], List[int]]:
    """
    Cumulative first/third place awards from each depth to the end.

    suffix_first[d] is the most VP one world can still gain from skirmish d
    onwards; suffix_third[d] the least. Both lists have len(awards) + 1 entries.
    """
    n = len(awards)
    suffix_first = [0] * (n + 1)
    suffix_third = [0] * (n + 1)
    for i in range(n - 1, -1, -1):
        suffix_first[i] = suffix_first[i + 1] + awards[i].first
        suffix_third[i] = suffix_third[i + 1] + awards[i].third
    return suffix_first, suffix_third


def bounds_allow(
    ordered_scores: Tuple[int, int, int],
    max_gain: int,
    min_gain: int,
    min_margin: int
) -> bool:
    """
    Constant time form of check_feasibility used while searching.

    `ordered_scores` are the scores of the desired first, second and third
    worlds; `max_gain`/`min_gain` come from suffix_bounds.
    """
    s1, s2, s3 = ordered_scores
    spread = max_gain - min_gain
    return s1 - s2 + spread >= min_margin and s2 - s3 + spread >= min_margin
