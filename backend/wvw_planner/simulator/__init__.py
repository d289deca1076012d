"""
WvW Victory Point Scenario Planner

Scenario solvers for a desired final ranking and Monte Carlo simulation of
final standings.
"""

from .models import (
    AwardTable,
    Competitor,
    COMPETITORS,
    DesiredOutcome,
    Difficulty,
    Event,
    FeasibilityResult,
    HistoricalStats,
    MonteCarloResult,
    Objective,
    Placement,
    PlacementAssignment,
    PlacementProbabilities,
    RequiredPerformance,
    RiskAssessment,
    RiskLevel,
    ScoreVector,
    SearchBudget,
    SolverResult,
    SolveStatus,
    Strategy,
)
from .feasibility import check_feasibility
from .exact import solve_exact
from .heuristic import solve_heuristic
from .random_search import solve_random
from .orchestrator import solve, SolverStrategy
from .engine import simulate
from .risk import assess_risk
from .tiebreakers import rank_competitors, current_standings
from .history import (
    PastSkirmish,
    alliance_key,
    analyze_historical_performance,
    analyze_match_history,
    calculate_required_performance,
)

__all__ = [
    # Models
    "AwardTable",
    "Competitor",
    "COMPETITORS",
    "DesiredOutcome",
    "Difficulty",
    "Event",
    "FeasibilityResult",
    "HistoricalStats",
    "MonteCarloResult",
    "Objective",
    "Placement",
    "PlacementAssignment",
    "PlacementProbabilities",
    "RequiredPerformance",
    "RiskAssessment",
    "RiskLevel",
    "ScoreVector",
    "SearchBudget",
    "SolverResult",
    "SolveStatus",
    "Strategy",
    # Solvers
    "check_feasibility",
    "solve_exact",
    "solve_heuristic",
    "solve_random",
    "solve",
    "SolverStrategy",
    # Simulation
    "simulate",
    "assess_risk",
    # Standings and history
    "rank_competitors",
    "current_standings",
    "PastSkirmish",
    "analyze_historical_performance",
    "analyze_match_history",
    "alliance_key",
    "calculate_required_performance",
]
