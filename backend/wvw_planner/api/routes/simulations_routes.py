"""
Simulation API routes.
"""

import random

from fastapi import APIRouter, HTTPException, status
from fastapi.concurrency import run_in_threadpool

from ..convert import to_desired, to_events, to_historical_stats, to_scores
from ..schemas import (
    RequiredPerformanceResult,
    RiskResult,
    SimulationResultsResponse,
    SimulationRunRequest,
)
from ...simulator import assess_risk, calculate_required_performance, simulate


router = APIRouter(prefix="/simulations", tags=["simulations"])


@router.post("/run", response_model=SimulationResultsResponse)
async def run_simulation(request: SimulationRunRequest) -> SimulationResultsResponse:
    """
    Simulate the rest of the match from historical placement tendencies.

    When a desired outcome is supplied, its risk level and the first places
    each world needs for it are included.
    """
    scores = to_scores(request.scores)
    events = to_events(request.skirmishes, request.region)
    stats = to_historical_stats(request.historical_stats)

    desired = None
    if request.desired is not None:
        desired = to_desired(request.desired)
        if not desired.is_distinct:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Invalid desired outcome: each world must hold a different placement"
            )

    rng = random.Random(request.seed) if request.seed is not None else None
    result = await run_in_threadpool(
        simulate, scores, events, stats, request.n_simulations, rng
    )

    response = SimulationResultsResponse(**result.to_dict())
    if desired is not None:
        response.risk = RiskResult(**assess_risk(desired, result).to_dict())
        response.required_performance = [
            RequiredPerformanceResult(**r.to_dict())
            for r in calculate_required_performance(scores, events, desired, stats)
        ]
    return response
