"""
Final standings and tie resolution.

Worlds are ranked by victory points. Exact ties are broken by the fixed
identity order red, blue, green so that rankings are deterministic.
"""

from typing import Dict, Tuple

from .models import Competitor, COMPETITORS, DesiredOutcome, Placement, PLACEMENTS


def rank_competitors(scores: Dict[Competitor, int]) -> Tuple[Competitor, Competitor, Competitor]:
    """
    Order competitors from first to third.

    Args:
        scores: Victory points per competitor

    Returns:
        Tuple of competitors, highest score first
    """
    return tuple(sorted(COMPETITORS, key=lambda c: (-scores[c], COMPETITORS.index(c))))


def current_standings(scores: Dict[Competitor, int]) -> DesiredOutcome:
    """Get the ranking implied by a score vector as an outcome."""
    first, second, third = rank_competitors(scores)
    return DesiredOutcome(first=first, second=second, third=third)


def placements_from_scores(scores: Dict[Competitor, int]) -> Dict[Competitor, Placement]:
    """Map each competitor to the placement its score earns."""
    ranking = rank_competitors(scores)
    return {competitor: PLACEMENTS[i] for i, competitor in enumerate(ranking)}
