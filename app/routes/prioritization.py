"""
Prioritization endpoints - the dashboard's window into the engine.

DESIGN PRINCIPLES (CRITICAL):
- Routes FORWARD data; all scoring lives in the services layer
- Weights are replaced WHOLESALE (PUT), never patched field by field
- An invalid weight set is rejected with 422 and the old set stays in effect
- Filters are a view: they never change the order of surviving entries

WHAT THESE ENDPOINTS PROVIDE:
✅ Current weights, weight replacement, reset to defaults
✅ Ranked, tiered backlog with optional filters
✅ Backlog summary (tier counts, score statistics)
✅ What-if capacity projection

WHAT THEY DO NOT DO:
❌ Create, edit or resolve requests
❌ Persist scores
❌ Send notifications
"""

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import datetime

from app.models.priority import (
    FactorContribution,
    InvalidWeightsError,
    PrioritizedRequest,
    PriorityMetrics,
    ProjectionResult,
    RankingFilters,
    RankingSummary,
    Tier,
    WeightSet,
)
from app.models.service_request import RequestStatus
from app.services.prioritization_engine import PrioritizationEngine, get_prioritization_engine
from app.services.priority_scoring import describe_score


router = APIRouter(prefix="/prioritization", tags=["Prioritization"])

WEIGHTS_EXAMPLE = {
    "severity": 5,
    "people_impact": 3,
    "urgency": 4,
    "location_criticality": 2,
    "wait_time": 3,
    "recurrence": 1,
}


# Response models
class RankedRequestResponse(BaseModel):
    """One row of the ranked backlog."""
    rank: int = Field(..., ge=1, description="1-based position in the ranking")
    id: str
    protocol: str
    title: Optional[str] = None
    status: RequestStatus
    category: str
    neighborhood: str
    secretariat_id: Optional[str] = None
    created_at: datetime
    score: int
    tier: Tier
    metrics: PriorityMetrics
    breakdown: List[FactorContribution]
    priority_reason: str = Field(..., description="Explainable reason for the score")


class RankedListResponse(BaseModel):
    weights: WeightSet
    count: int
    items: List[RankedRequestResponse]


def _to_row(position: int, item: PrioritizedRequest) -> RankedRequestResponse:
    request = item.request
    return RankedRequestResponse(
        rank=position,
        id=request.id,
        protocol=request.protocol,
        title=request.title,
        status=request.status,
        category=request.category,
        neighborhood=request.neighborhood,
        secretariat_id=request.secretariat_id,
        created_at=request.created_at,
        score=item.score,
        tier=item.tier,
        metrics=item.metrics,
        breakdown=item.breakdown,
        priority_reason=describe_score(item.breakdown),
    )


def ranking_filters(
    secretariat_id: Optional[str] = Query(None, description="Filter by owning secretariat"),
    category: Optional[str] = Query(None, description="Filter by category slug"),
    neighborhood: Optional[str] = Query(None, description="Filter by neighborhood"),
    request_status: Optional[RequestStatus] = Query(None, alias="status", description="Filter by status"),
    tier: Optional[Tier] = Query(None, description="Filter by tier"),
    min_score: Optional[int] = Query(None, ge=0, le=150, description="Minimum composite score"),
    search: Optional[str] = Query(None, max_length=100, description="Search protocol or title"),
) -> RankingFilters:
    return RankingFilters(
        secretariat_id=secretariat_id,
        category=category,
        neighborhood=neighborhood,
        status=request_status,
        tier=tier,
        min_score=min_score,
        search=search,
    )


@router.get("/weights", response_model=WeightSet)
async def get_weights(engine: PrioritizationEngine = Depends(get_prioritization_engine)):
    """Current weight coefficients."""
    return engine.get_weights()


@router.put("/weights", response_model=WeightSet)
async def replace_weights(
    payload: Dict[str, Any] = Body(..., examples=[WEIGHTS_EXAMPLE]),
    engine: PrioritizationEngine = Depends(get_prioritization_engine),
):
    """
    Replace all six weights at once.

    Every coefficient is required and must be an integer in [0, 5].

    Raises:
        422: Missing, unknown, non-integer or out-of-range coefficient
    """
    try:
        return engine.set_weights(payload)
    except InvalidWeightsError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors
        )


@router.post("/weights/reset", response_model=WeightSet)
async def reset_weights(engine: PrioritizationEngine = Depends(get_prioritization_engine)):
    """Restore the configured default weights."""
    return engine.reset_weights()


@router.get("/ranked", response_model=RankedListResponse)
async def get_ranked_list(
    filters: RankingFilters = Depends(ranking_filters),
    engine: PrioritizationEngine = Depends(get_prioritization_engine),
):
    """
    Ranked backlog: score descending, oldest first on ties, then id.

    Closed requests (resolved, cancelled, archived) never appear.
    Rank numbers refer to the position in the filtered view.
    """
    weights = engine.get_weights()
    ranked = engine.get_ranked_list(filters)
    return RankedListResponse(
        weights=weights,
        count=len(ranked),
        items=[_to_row(position, item) for position, item in enumerate(ranked, 1)],
    )


@router.get("/summary", response_model=RankingSummary)
async def get_summary(
    filters: RankingFilters = Depends(ranking_filters),
    engine: PrioritizationEngine = Depends(get_prioritization_engine),
):
    """Tier counts and score statistics for the (filtered) backlog."""
    return engine.get_summary(filters)


@router.get("/projection", response_model=ProjectionResult)
async def project_capacity(
    capacity_delta: float = Query(0, ge=-1000, le=1000, description="Extra resolutions per day"),
    extra_crews: int = Query(0, ge=0, le=100, description="Extra crews to simulate"),
    filters: RankingFilters = Depends(ranking_filters),
    engine: PrioritizationEngine = Depends(get_prioritization_engine),
):
    """
    What-if clearance estimate.

    Treats the backlog as a single queue drained at the throughput observed
    over the trailing window. New arrivals during the projection are ignored.
    Clearance days are null when the queue would never drain.

    Filters scope the projection, e.g. ?secretariat_id=drainage simulates
    extra crews for one secretariat: its backlog drained at its own throughput.
    """
    return engine.project_capacity(capacity_delta=capacity_delta, extra_crews=extra_crews, filters=filters)
