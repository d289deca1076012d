"""
Pydantic schemas for API request/response validation.
"""

from datetime import datetime
from typing import Optional, List, Dict
from pydantic import BaseModel, Field, model_validator

from ..core.config import DEFAULT_MIN_MARGIN, MONTE_CARLO_ITERATIONS, MONTE_CARLO_MAX_ITERATIONS


COMPETITOR_PATTERN = "^(red|blue|green)$"


# ============== Shared Schemas ==============

class ScoresPayload(BaseModel):
    """Current victory points per world."""
    red: int = Field(..., ge=0)
    blue: int = Field(..., ge=0)
    green: int = Field(..., ge=0)


class AwardsPayload(BaseModel):
    """VP awarded for 1st/2nd/3rd place in a skirmish."""
    first: int = Field(..., gt=0)
    second: int = Field(..., gt=0)
    third: int = Field(..., gt=0)

    @model_validator(mode="after")
    def check_order(self):
        if not self.first > self.second > self.third:
            raise ValueError("awards must be strictly decreasing (first > second > third)")
        return self


class SkirmishPayload(BaseModel):
    """A remaining skirmish. Awards are looked up from start_time when omitted."""
    id: int
    start_time: Optional[datetime] = None
    awards: Optional[AwardsPayload] = None

    @model_validator(mode="after")
    def check_awards_source(self):
        if self.awards is None and self.start_time is None:
            raise ValueError("either awards or start_time is required")
        return self


class DesiredOutcomePayload(BaseModel):
    """Target final ranking."""
    first: str = Field(..., pattern=COMPETITOR_PATTERN)
    second: str = Field(..., pattern=COMPETITOR_PATTERN)
    third: str = Field(..., pattern=COMPETITOR_PATTERN)


# ============== Scenario Schemas ==============

class FeasibilityRequest(BaseModel):
    """Reachability bound check request."""
    scores: ScoresPayload
    skirmishes: List[SkirmishPayload]
    desired: DesiredOutcomePayload
    region: str = Field(default="na", pattern="^(na|eu)$")
    min_margin: int = Field(default=DEFAULT_MIN_MARGIN, ge=1)


class FeasibilityResponse(BaseModel):
    """Reachability bound check response."""
    possible: bool
    reason: Optional[str] = None
    max_reachable: Dict[str, int]
    min_reachable: Dict[str, int]


class SolveRequest(BaseModel):
    """Scenario solve request."""
    scores: ScoresPayload
    skirmishes: List[SkirmishPayload]
    desired: DesiredOutcomePayload
    region: str = Field(default="na", pattern="^(na|eu)$")
    min_margin: int = Field(default=DEFAULT_MIN_MARGIN, ge=1)
    strategy: str = Field(default="auto", pattern="^(auto|exact|heuristic)$")
    objective: str = Field(default="min_effort", pattern="^(min_effort|lexicographic_margin)$")
    max_iterations: Optional[int] = Field(default=None, ge=1)
    deadline_seconds: Optional[float] = Field(default=None, gt=0, le=30)


class PlacementResult(BaseModel):
    """Placements and VP for one skirmish of a scenario."""
    event_id: int
    placements: Dict[str, int]
    points_awarded: Dict[str, int]


class StrategyAttemptResult(BaseModel):
    strategy: str
    status: str
    iterations: int
    reason: Optional[str] = None


class SolveResponse(BaseModel):
    """Scenario solve response."""
    achievable: bool
    status: str
    strategy_used: str
    scenario: Optional[List[PlacementResult]] = None
    final_scores: Optional[Dict[str, int]] = None
    margin: Optional[int] = None
    reason: Optional[str] = None
    difficulty: Optional[str] = None
    iterations: int
    degenerate: bool = False
    trace: List[StrategyAttemptResult] = []


# ============== Simulation Schemas ==============

class PlacementProbabilitiesPayload(BaseModel):
    """Historical probability of finishing 1st/2nd/3rd."""
    first: float = Field(..., ge=0, le=1)
    second: float = Field(..., ge=0, le=1)
    third: float = Field(..., ge=0, le=1)

    @model_validator(mode="after")
    def check_total(self):
        total = self.first + self.second + self.third
        if abs(total - 1) > 0.01:
            raise ValueError(f"probabilities must sum to 1, got {total:.3f}")
        return self


class HistoricalStatsPayload(BaseModel):
    """Historical placement tendencies for one world."""
    overall: PlacementProbabilitiesPayload
    by_window: Dict[str, PlacementProbabilitiesPayload] = {}


class SimulationRunRequest(BaseModel):
    """Monte Carlo simulation request."""
    scores: ScoresPayload
    skirmishes: List[SkirmishPayload]
    historical_stats: Dict[str, HistoricalStatsPayload]
    region: str = Field(default="na", pattern="^(na|eu)$")
    n_simulations: int = Field(default=MONTE_CARLO_ITERATIONS, ge=100, le=MONTE_CARLO_MAX_ITERATIONS)
    seed: Optional[int] = None
    desired: Optional[DesiredOutcomePayload] = None


class OutcomeFrequencyResult(BaseModel):
    outcome: Dict[str, str]
    count: int
    probability: float


class RiskResult(BaseModel):
    probability: float
    risk: str
    message: str


class RequiredPerformanceResult(BaseModel):
    competitor: str
    target_placement: int
    required_first_places: int
    required_win_rate: float
    historical_win_rate: float
    difficulty: str
    feasibility: str


class SimulationResultsResponse(BaseModel):
    """Monte Carlo simulation response."""
    iterations: int
    rank_probabilities: Dict[str, Dict[str, float]]
    outcome_frequencies: List[OutcomeFrequencyResult]
    score_intervals: Dict[str, Dict[str, int]]
    average_scores: Dict[str, float]
    most_likely_outcome: Dict[str, str]
    most_likely_probability: float
    risk: Optional[RiskResult] = None
    required_performance: Optional[List[RequiredPerformanceResult]] = None
