"""
Ranking Service - ordered, tiered backlog for one point in time.

DESIGN PRINCIPLES:
- Closed work (resolved/cancelled/archived) is NEVER ranked
- Every call is a FULL recomputation; no incremental scoring
- Order: score descending, then oldest first, then id ascending
- Filters are a VIEW over the ranked list: they remove entries, never re-rank
"""

from datetime import datetime
from typing import Iterable, List, Optional
import logging

from app.models.priority import (
    PrioritizedRequest,
    RankingFilters,
    RankingSummary,
    Tier,
    WeightSet,
)
from app.models.service_request import ServiceRequest
from app.services.metric_extraction import RiskLookup, extract_metrics, normalize_category
from app.services.priority_scoring import calculate_score, classify_tier, score_breakdown
from app.services.repositories.base import neighborhood_key

logger = logging.getLogger(__name__)


def ranking_key(item: PrioritizedRequest):
    return (-item.score, item.request.created_at, item.request.id)


def rank(
    requests: Iterable[ServiceRequest],
    weights: WeightSet,
    risk_lookup: RiskLookup,
    now: datetime,
    history: Iterable[ServiceRequest] = (),
) -> List[PrioritizedRequest]:
    """
    Score and order every open request.

    Args:
        requests: Request snapshot (closed requests are dropped here)
        weights: Weight set captured at the start of the pass
        risk_lookup: Neighborhood -> risk record (or None)
        now: Point in time of the pass; all time-based metrics use it
        history: Extra requests (e.g. recently resolved) counted for recurrence only

    Returns:
        List of PrioritizedRequest in ranking order
    """
    snapshot = list(requests)
    snapshot_ids = {r.id for r in snapshot}
    recurrence_pool = snapshot + [r for r in history if r.id not in snapshot_ids]

    open_requests = [r for r in snapshot if not r.is_closed]
    skipped = len(snapshot) - len(open_requests)

    ranked = []
    for request in open_requests:
        metrics = extract_metrics(request, risk_lookup, recurrence_pool, now)
        score = calculate_score(metrics, weights)
        ranked.append(PrioritizedRequest(
            request=request,
            metrics=metrics,
            score=score,
            tier=classify_tier(score),
            breakdown=score_breakdown(metrics, weights),
        ))

    ranked.sort(key=ranking_key)

    logger.info(f"Ranked {len(ranked)} open requests ({skipped} closed skipped)")
    return ranked


def in_scope(request: ServiceRequest, filters: Optional[RankingFilters]) -> bool:
    """
    Request-level part of the filters (secretariat, category, neighborhood).

    Also selects the resolved history a scoped capacity projection measures.
    """
    if filters is None:
        return True
    if filters.secretariat_id and request.secretariat_id != filters.secretariat_id:
        return False
    if filters.category and normalize_category(request.category) != normalize_category(filters.category):
        return False
    if filters.neighborhood and neighborhood_key(request.neighborhood) != neighborhood_key(filters.neighborhood):
        return False
    return True


def _matches(item: PrioritizedRequest, filters: RankingFilters) -> bool:
    request = item.request

    if not in_scope(request, filters):
        return False
    if filters.status and request.status != filters.status:
        return False
    if filters.tier and item.tier != filters.tier:
        return False
    if filters.min_score is not None and item.score < filters.min_score:
        return False
    if filters.search:
        needle = filters.search.strip().lower()
        haystack = f"{request.protocol} {request.title or ''}".lower()
        if needle not in haystack:
            return False
    return True


def apply_filters(
    ranked: List[PrioritizedRequest],
    filters: Optional[RankingFilters] = None,
) -> List[PrioritizedRequest]:
    """Keep the entries matching every set filter, preserving ranking order."""
    if filters is None:
        return list(ranked)
    return [item for item in ranked if _matches(item, filters)]


def summarize(ranked: List[PrioritizedRequest]) -> RankingSummary:
    """Tier counts and score statistics for a ranked list."""
    if not ranked:
        return RankingSummary()

    counts = {tier: 0 for tier in Tier}
    for item in ranked:
        counts[item.tier] += 1

    scores = [item.score for item in ranked]
    return RankingSummary(
        total=len(ranked),
        critical=counts[Tier.CRITICAL],
        high=counts[Tier.HIGH],
        medium=counts[Tier.MEDIUM],
        low=counts[Tier.LOW],
        average_score=round(sum(scores) / len(scores), 1),
        max_score=max(scores),
    )
