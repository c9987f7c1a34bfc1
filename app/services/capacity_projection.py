"""
Capacity Projection Service - what-if backlog clearance estimates.

DESIGN PRINCIPLES:
- Projection is READ-ONLY: it never touches the backlog or the weights
- The backlog is treated as ONE queue drained at the observed throughput
- Arrival of new requests during the window is ignored (first-order estimate)
- Arithmetic is exact (Fraction); floats enter through their shortest decimal repr,
  so 0.3 means 3/10 and ceil() never drifts on binary noise
"""

from datetime import datetime
from fractions import Fraction
from math import ceil
from typing import Iterable, List, Optional, Union
import logging

from app.models.priority import PrioritizedRequest, ProjectionResult
from app.models.service_request import ServiceRequest
from app.utils.time_helpers import ensure_utc

logger = logging.getLogger(__name__)

Number = Union[int, float, Fraction]


def as_rate(value: Number) -> Fraction:
    """Exact rational for a rate given as int, float or Fraction (0.3 -> 3/10)."""
    if isinstance(value, float):
        return Fraction(repr(value))
    return Fraction(value)


def measure_throughput(
    resolved: Iterable[ServiceRequest],
    since: datetime,
    now: datetime,
) -> Fraction:
    """
    Average resolutions per day over [since, now].

    Only requests whose resolved_at falls inside the window count.
    """
    since = ensure_utc(since)
    now = ensure_utc(now)
    window_days = as_rate((now - since).total_seconds()) / 86400
    if window_days <= 0:
        return Fraction(0)

    count = sum(
        1 for request in resolved
        if request.resolved_at is not None and since <= request.resolved_at <= now
    )
    return Fraction(count) / window_days


def crews_to_capacity(crews: Number, per_crew: Number) -> Fraction:
    """Extra crews expressed as extra resolutions per day."""
    return as_rate(crews) * as_rate(per_crew)


def clearance_days(backlog_size: int, throughput: Fraction) -> Optional[int]:
    """ceil(B / R); 0 for an empty backlog, None when R cannot drain it."""
    if backlog_size == 0:
        return 0
    if throughput <= 0:
        return None
    return ceil(Fraction(backlog_size) / throughput)


def project(
    ranked_backlog: List[PrioritizedRequest],
    throughput: Number,
    capacity_delta: Number = 0,
) -> ProjectionResult:
    """
    Estimate clearance time now and with extra capacity.

    Args:
        ranked_backlog: Published ranking (only its size is used)
        throughput: Observed resolutions per day (R)
        capacity_delta: Extra resolution units per day; negative models lost capacity

    Returns:
        ProjectionResult
    """
    backlog_size = len(ranked_backlog)
    current_rate = as_rate(throughput)
    delta = as_rate(capacity_delta)

    current = clearance_days(backlog_size, current_rate)
    projected = clearance_days(backlog_size, current_rate + delta)

    reduction_pct = None
    if current and projected is not None:
        reduction_pct = round((current - projected) / current * 100, 1)
    elif current == 0 and projected == 0:
        reduction_pct = 0.0

    logger.info(
        f"Capacity projection: backlog={backlog_size} R={float(current_rate):.2f}/day "
        f"delta={float(delta):+.2f} -> {current} vs {projected} days"
    )

    return ProjectionResult(
        backlog_size=backlog_size,
        throughput_per_day=round(float(current_rate), 2),
        capacity_delta=float(delta),
        current_clearance_days=current,
        projected_clearance_days=projected,
        reduction_pct=reduction_pct,
    )
