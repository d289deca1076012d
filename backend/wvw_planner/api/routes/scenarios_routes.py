"""
Scenario planning API routes.
"""

from fastapi import APIRouter, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from ..convert import to_desired, to_events, to_scores
from ..schemas import FeasibilityRequest, FeasibilityResponse, SolveRequest, SolveResponse
from ...simulator import SolveStatus, check_feasibility, solve
from ...simulator.models import Objective
from ...simulator.orchestrator import ExactStrategy, HeuristicStrategy, default_budget, default_strategies
from ...simulator.search import validate_inputs


router = APIRouter(prefix="/scenarios", tags=["scenarios"])


@router.post("/feasibility", response_model=FeasibilityResponse)
async def feasibility(request: FeasibilityRequest) -> FeasibilityResponse:
    """
    Quick reachability check for a desired ranking.

    An impossible result is a proof; a possible result only means the
    ranking is not ruled out by the bounds.
    """
    scores = to_scores(request.scores)
    events = to_events(request.skirmishes, request.region)
    desired = to_desired(request.desired)

    error = validate_inputs(scores, events, desired, request.min_margin)
    if error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)

    result = check_feasibility(scores, events, desired, request.min_margin)
    return FeasibilityResponse(**result.to_dict())


@router.post("/solve", response_model=SolveResponse)
async def solve_scenario(request: SolveRequest) -> SolveResponse:
    """
    Find the placements needed for a desired final ranking.

    Runs the strategy sequence (or a single strategy when requested) in a
    worker thread so the event loop stays responsive.
    """
    scores = to_scores(request.scores)
    events = to_events(request.skirmishes, request.region)
    desired = to_desired(request.desired)
    objective = Objective(request.objective)

    budget = default_budget()
    if request.max_iterations is not None:
        budget.max_iterations = request.max_iterations
    if request.deadline_seconds is not None:
        budget.deadline_seconds = request.deadline_seconds

    if request.strategy == "exact":
        strategies = [ExactStrategy(budget, objective)]
    elif request.strategy == "heuristic":
        strategies = [HeuristicStrategy()]
    else:
        strategies = default_strategies(budget, objective=objective)

    result = await run_in_threadpool(
        solve, scores, events, desired, request.min_margin,
        budget=budget, objective=objective, strategies=strategies
    )

    if result.status == SolveStatus.INVALID_INPUT:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.reason)

    return SolveResponse(**result.to_dict())
