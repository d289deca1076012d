"""
Data models for the scenario solver and outcome simulator.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple


class Competitor(str, Enum):
    """One of the three worlds in a match."""
    RED = "red"
    BLUE = "blue"
    GREEN = "green"


# Fixed identity order, also used to break ties in final standings
COMPETITORS: Tuple[Competitor, Competitor, Competitor] = (
    Competitor.RED, Competitor.BLUE, Competitor.GREEN
)


class Placement(int, Enum):
    FIRST = 1
    SECOND = 2
    THIRD = 3


PLACEMENTS: Tuple[Placement, Placement, Placement] = (
    Placement.FIRST, Placement.SECOND, Placement.THIRD
)


class SolveStatus(str, Enum):
    ACHIEVABLE = "achievable"
    INFEASIBLE = "infeasible"
    INCONCLUSIVE = "inconclusive"
    INVALID_INPUT = "invalid_input"


class Strategy(str, Enum):
    OBVIOUS = "obvious"
    EXACT = "exact"
    RANDOM = "random"
    HEURISTIC = "heuristic"


class Difficulty(str, Enum):
    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"
    VERY_HARD = "very-hard"


class Objective(str, Enum):
    """What the relaxation pass minimizes once a valid scenario is known."""
    MIN_EFFORT = "min_effort"
    LEXICOGRAPHIC_MARGIN = "lexicographic_margin"


class RiskLevel(str, Enum):
    VERY_LOW = "very-low"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very-high"


# Current (or final) victory points per competitor
ScoreVector = Dict[Competitor, int]


@dataclass(frozen=True)
class AwardTable:
    """Victory points awarded for each placement in one skirmish."""

    first: int
    second: int
    third: int

    def __post_init__(self):
        if self.third <= 0:
            raise ValueError(f"Awards must be positive, got third={self.third}")
        if not self.first > self.second > self.third:
            raise ValueError(
                f"Awards must be strictly decreasing, got "
                f"({self.first}, {self.second}, {self.third})"
            )

    def points_for(self, placement: Placement) -> int:
        if placement == Placement.FIRST:
            return self.first
        if placement == Placement.SECOND:
            return self.second
        if placement == Placement.THIRD:
            return self.third
        raise ValueError(f"Unknown placement: {placement!r}")

    def as_tuple(self) -> Tuple[int, int, int]:
        return (self.first, self.second, self.third)

    def to_dict(self) -> dict:
        return {"first": self.first, "second": self.second, "third": self.third}


@dataclass(frozen=True)
class Event:
    """A remaining skirmish with its award table."""

    id: int
    awards: AwardTable
    start_time: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "awards": self.awards.to_dict(),
            "start_time": self.start_time.isoformat() if self.start_time else None
        }


@dataclass(frozen=True)
class PlacementAssignment:
    """Who finishes where in one skirmish. Always a bijection."""

    event_id: int
    awards: AwardTable
    first: Competitor
    second: Competitor
    third: Competitor

    def __post_init__(self):
        if len({self.first, self.second, self.third}) != 3:
            raise ValueError(
                f"Skirmish {self.event_id}: each competitor must hold exactly one placement"
            )

    @property
    def order(self) -> Tuple[Competitor, Competitor, Competitor]:
        return (self.first, self.second, self.third)

    def placement_of(self, competitor: Competitor) -> Placement:
        return PLACEMENTS[self.order.index(competitor)]

    def points_awarded(self) -> Dict[Competitor, int]:
        return {
            self.first: self.awards.first,
            self.second: self.awards.second,
            self.third: self.awards.third
        }

    def to_dict(self) -> dict:
        awarded = self.points_awarded()
        return {
            "event_id": self.event_id,
            "placements": {c.value: int(self.placement_of(c)) for c in COMPETITORS},
            "points_awarded": {c.value: awarded[c] for c in COMPETITORS}
        }


# One assignment per remaining skirmish
Scenario = List[PlacementAssignment]


@dataclass(frozen=True)
class DesiredOutcome:
    """A target final ranking. Distinctness is checked by validation, not here."""

    first: Competitor
    second: Competitor
    third: Competitor

    @property
    def order(self) -> Tuple[Competitor, Competitor, Competitor]:
        return (self.first, self.second, self.third)

    @property
    def is_distinct(self) -> bool:
        return len(set(self.order)) == 3

    def rank_of(self, competitor: Competitor) -> Placement:
        return PLACEMENTS[self.order.index(competitor)]

    def label(self) -> str:
        return " > ".join(c.value for c in self.order)

    def to_dict(self) -> dict:
        return {
            "first": self.first.value,
            "second": self.second.value,
            "third": self.third.value
        }


@dataclass
class SearchBudget:
    """Cooperative limits for the exact search. None disables a limit."""

    max_iterations: Optional[int] = None
    deadline_seconds: Optional[float] = None


@dataclass
class FeasibilityResult:
    """Outcome of the reachability bound check."""

    possible: bool
    reason: Optional[str] = None
    max_reachable: ScoreVector = field(default_factory=dict)
    min_reachable: ScoreVector = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "possible": self.possible,
            "reason": self.reason,
            "max_reachable": {c.value: v for c, v in self.max_reachable.items()},
            "min_reachable": {c.value: v for c, v in self.min_reachable.items()}
        }


@dataclass
class StrategyAttempt:
    """Trace entry for one strategy the orchestrator tried."""

    strategy: Strategy
    status: SolveStatus
    iterations: int = 0
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "strategy": self.strategy.value,
            "status": self.status.value,
            "iterations": self.iterations,
            "reason": self.reason
        }


@dataclass
class SolverResult:
    """Result of a solve call. `reason` is set whenever the outcome is not achievable."""

    status: SolveStatus
    strategy_used: Strategy
    scenario: Optional[Scenario] = None
    final_scores: Optional[ScoreVector] = None
    margin: Optional[int] = None
    reason: Optional[str] = None
    difficulty: Optional[Difficulty] = None
    iterations: int = 0
    degenerate: bool = False
    trace: List[StrategyAttempt] = field(default_factory=list)

    @property
    def achievable(self) -> bool:
        return self.status == SolveStatus.ACHIEVABLE

    def to_dict(self) -> dict:
        return {
            "achievable": self.achievable,
            "status": self.status.value,
            "strategy_used": self.strategy_used.value,
            "scenario": [a.to_dict() for a in self.scenario] if self.scenario is not None else None,
            "final_scores": (
                {c.value: self.final_scores[c] for c in COMPETITORS}
                if self.final_scores is not None else None
            ),
            "margin": self.margin,
            "reason": self.reason,
            "difficulty": self.difficulty.value if self.difficulty else None,
            "iterations": self.iterations,
            "degenerate": self.degenerate,
            "trace": [t.to_dict() for t in self.trace]
        }


@dataclass(frozen=True)
class PlacementProbabilities:
    """Empirical probability of finishing 1st/2nd/3rd in a skirmish."""

    first: float
    second: float
    third: float

    def to_dict(self) -> dict:
        return {"first": self.first, "second": self.second, "third": self.third}


UNIFORM_PROBABILITIES = PlacementProbabilities(first=0.33, second=0.34, third=0.33)


@dataclass
class WindowSummary:
    """Placement counts and averages for one world over a set of skirmishes."""

    total_skirmishes: int = 0
    first: int = 0
    second: int = 0
    third: int = 0
    average_score: float = 0.0
    average_vp: float = 0.0

    def to_dict(self) -> dict:
        return {
            "total_skirmishes": self.total_skirmishes,
            "placements": {"first": self.first, "second": self.second, "third": self.third},
            "average_score": self.average_score,
            "average_vp": self.average_vp
        }


@dataclass
class AllianceStats:
    """Placement tendencies of one alliance, the set of worlds linked under a color."""

    alliance_key: str
    world_ids: List[int]
    summary: WindowSummary
    overall: PlacementProbabilities = UNIFORM_PROBABILITIES
    by_window: Dict[str, PlacementProbabilities] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "alliance_key": self.alliance_key,
            "world_ids": list(self.world_ids),
            "summary": self.summary.to_dict(),
            "overall": self.overall.to_dict(),
            "by_window": {str(getattr(k, "value", k)): v.to_dict() for k, v in self.by_window.items()}
        }


@dataclass
class HistoricalStats:
    """Historical placement tendencies for one competitor."""

    competitor: Competitor
    overall: PlacementProbabilities = UNIFORM_PROBABILITIES
    # Keyed by core.windows.TimeWindow values
    by_window: Dict[str, PlacementProbabilities] = field(default_factory=dict)
    total_events: int = 0
    summary: Optional[WindowSummary] = None
    window_summaries: Dict[str, WindowSummary] = field(default_factory=dict)
    by_alliance: Dict[str, AllianceStats] = field(default_factory=dict)
    current_alliance: Optional[str] = None

    def probabilities_for(self, window: Optional[str] = None) -> PlacementProbabilities:
        if window is not None and window in self.by_window:
            return self.by_window[window]
        return self.overall

    def for_alliance(self, alliance_key: Optional[str] = None) -> 'HistoricalStats':
        """
        Stats narrowed to one alliance composition.

        Defaults to the current alliance. Returns self when the alliance has
        no recorded skirmishes, so relinked worlds fall back to the color's
        full history.
        """
        key = alliance_key or self.current_alliance
        alliance = self.by_alliance.get(key) if key else None
        if alliance is None:
            return self
        return HistoricalStats(
            competitor=self.competitor,
            overall=alliance.overall,
            by_window=dict(alliance.by_window),
            total_events=alliance.summary.total_skirmishes,
            summary=alliance.summary,
            current_alliance=alliance.alliance_key
        )

    def to_dict(self) -> dict:
        return {
            "competitor": self.competitor.value,
            "overall": self.overall.to_dict(),
            "by_window": {str(getattr(k, "value", k)): v.to_dict() for k, v in self.by_window.items()},
            "total_events": self.total_events,
            "summary": self.summary.to_dict() if self.summary else None,
            "window_summaries": {
                str(getattr(k, "value", k)): v.to_dict() for k, v in self.window_summaries.items()
            },
            "by_alliance": {k: v.to_dict() for k, v in self.by_alliance.items()},
            "current_alliance": self.current_alliance
        }


@dataclass
class RequiredPerformance:
    """First places a world needs to reach its desired placement, against its history."""

    competitor: Competitor
    target_placement: Placement
    required_first_places: int
    required_win_rate: float
    historical_win_rate: float
    difficulty: Difficulty
    feasibility: str

    def to_dict(self) -> dict:
        return {
            "competitor": self.competitor.value,
            "target_placement": int(self.target_placement),
            "required_first_places": self.required_first_places,
            "required_win_rate": self.required_win_rate,
            "historical_win_rate": self.historical_win_rate,
            "difficulty": self.difficulty.value,
            "feasibility": self.feasibility
        }


@dataclass(frozen=True)
class ScoreInterval:
    """10th/50th/90th percentile of a competitor's simulated final score."""

    p10: int
    p50: int
    p90: int

    def to_dict(self) -> dict:
        return {"p10": self.p10, "p50": self.p50, "p90": self.p90}


@dataclass
class OutcomeFrequency:
    outcome: DesiredOutcome
    count: int
    probability: float

    def to_dict(self) -> dict:
        return {
            "outcome": self.outcome.to_dict(),
            "count": self.count,
            "probability": self.probability
        }


@dataclass
class MonteCarloResult:
    """Aggregated results from a Monte Carlo simulation."""

    iterations: int
    rank_probabilities: Dict[Competitor, Dict[Placement, float]]
    outcome_frequencies: List[OutcomeFrequency]
    score_intervals: Dict[Competitor, ScoreInterval]
    average_scores: Dict[Competitor, float]

    @property
    def most_likely_outcome(self) -> DesiredOutcome:
        return self.outcome_frequencies[0].outcome

    @property
    def most_likely_probability(self) -> float:
        return self.outcome_frequencies[0].probability

    def probability_of(self, outcome: DesiredOutcome) -> float:
        for entry in self.outcome_frequencies:
            if entry.outcome == outcome:
                return entry.probability
        return 0.0

    def to_dict(self) -> dict:
        return {
            "iterations": self.iterations,
            "rank_probabilities": {
                c.value: {p.name.lower(): self.rank_probabilities[c][p] for p in PLACEMENTS}
                for c in COMPETITORS
            },
            "outcome_frequencies": [o.to_dict() for o in self.outcome_frequencies],
            "score_intervals": {c.value: self.score_intervals[c].to_dict() for c in COMPETITORS},
            "average_scores": {c.value: self.average_scores[c] for c in COMPETITORS},
            "most_likely_outcome": self.most_likely_outcome.to_dict(),
            "most_likely_probability": self.most_likely_probability
        }


@dataclass
class RiskAssessment:
    probability: float
    risk: RiskLevel
    message: str

    def to_dict(self) -> dict:
        return {
            "probability": self.probability,
            "risk": self.risk.value,
            "message": self.message
        }
