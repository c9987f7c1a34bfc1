"""
Metric Extraction - derives the six normalized priority metrics for a request.

DESIGN PRINCIPLES:
- Extraction is PURE: no I/O beyond the supplied risk lookup
- Derivation rules are FIXED tables; only their weights are operator-tunable
- Every metric is an integer in [0, 5]
- A missing neighborhood risk record is NOT an error (baseline band 1)
"""

from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional
import logging

from app.models.priority import PriorityMetrics
from app.models.service_request import (
    NeighborhoodRiskRecord,
    PriorityLabel,
    ServiceRequest,
)
from app.services.repositories.base import neighborhood_key
from app.utils.time_helpers import ensure_utc, utc_now, whole_days_between

logger = logging.getLogger(__name__)

RiskLookup = Callable[[str], Optional[NeighborhoodRiskRecord]]

METRIC_CAP = 5

# Severity from the label chosen at filing time, independent of category
SEVERITY_BY_LABEL = {
    PriorityLabel.URGENT: 5,
    PriorityLabel.HIGH: 4,
    PriorityLabel.MEDIUM: 2,
    PriorityLabel.LOW: 1,
}

# People impact by category; shared infrastructure outranks point-source issues
PEOPLE_IMPACT_BY_CATEGORY = {
    "flooding": 5,
    "water_supply": 5,
    "exposed_wiring": 5,
    "lighting": 4,
    "clogged_drain": 4,
    "blocked_culvert": 4,
    "drainage": 4,
    "waste_collection": 4,
    "pothole": 3,
    "damaged_pole": 3,
    "illegal_dumping": 3,
    "debris": 3,
    "market_maintenance": 3,
    "street_sweeping": 2,
    "square_maintenance": 2,
    "damaged_sidewalk": 2,
    "weeding": 2,
    "cemetery_maintenance": 2,
    "tree_pruning": 1,
    "damaged_furniture": 1,
    "other": 1,
}
DEFAULT_PEOPLE_IMPACT = 2

# Fallback SLA when the repository supplies no deadline
FALLBACK_SLA_HOURS_BY_LABEL = {
    PriorityLabel.URGENT: 4,
    PriorityLabel.HIGH: 24,
    PriorityLabel.MEDIUM: 72,
    PriorityLabel.LOW: 168,
}

# Urgency by hours left before the deadline: (upper bound inclusive, metric)
URGENCY_BANDS = (
    (24, 5),
    (72, 3),
)
URGENCY_OVERDUE = 5
URGENCY_DISTANT = 1

# Location criticality: risk score split into 5 bands of equal width
RISK_BAND_WIDTH = 20
RISK_BASELINE_BAND = 1

RECURRENCE_WINDOW_DAYS = 90


def normalize_category(category: Optional[str]) -> str:
    """Category slug used for table lookups: 'Clogged Drain' -> 'clogged_drain'."""
    if not category:
        return "other"
    return category.strip().lower().replace("-", "_").replace(" ", "_")


def severity_metric(request: ServiceRequest) -> int:
    return SEVERITY_BY_LABEL[request.priority_label]


def people_impact_metric(request: ServiceRequest) -> int:
    return PEOPLE_IMPACT_BY_CATEGORY.get(normalize_category(request.category), DEFAULT_PEOPLE_IMPACT)


def service_deadline(request: ServiceRequest) -> datetime:
    """Deadline supplied by the repository, else created_at plus the label's fallback SLA."""
    if request.sla_deadline is not None:
        return request.sla_deadline
    hours = FALLBACK_SLA_HOURS_BY_LABEL[request.priority_label]
    return request.created_at + timedelta(hours=hours)


def urgency_metric(request: ServiceRequest, now: datetime) -> int:
    hours_left = (service_deadline(request) - ensure_utc(now)).total_seconds() / 3600
    if hours_left < 0:
        return URGENCY_OVERDUE
    for upper_hours, metric in URGENCY_BANDS:
        if hours_left <= upper_hours:
            return metric
    return URGENCY_DISTANT


def location_criticality_metric(record: Optional[NeighborhoodRiskRecord]) -> int:
    if record is None:
        return RISK_BASELINE_BAND
    band = int(record.risk_score // RISK_BAND_WIDTH) + 1
    return min(METRIC_CAP, band)


def wait_time_metric(request: ServiceRequest, now: datetime) -> int:
    return min(METRIC_CAP, whole_days_between(request.created_at, now))


def recurrence_metric(
    request: ServiceRequest,
    record: Optional[NeighborhoodRiskRecord],
    recent_requests: Iterable[ServiceRequest],
    now: datetime,
) -> int:
    """
    Similar complaints in the same neighborhood over the trailing window.

    Only categories the risk registry tags as recurring for the area count.
    The request itself is excluded.
    """
    if record is None or not record.recurring_issue_tags:
        return 0

    tags = {normalize_category(tag) for tag in record.recurring_issue_tags}
    if normalize_category(request.category) not in tags:
        return 0

    area = neighborhood_key(request.neighborhood)
    now = ensure_utc(now)
    window_start = now - timedelta(days=RECURRENCE_WINDOW_DAYS)
    count = 0
    for other in recent_requests:
        if other.id == request.id or neighborhood_key(other.neighborhood) != area:
            continue
        if normalize_category(other.category) not in tags:
            continue
        if window_start <= other.created_at <= now:
            count += 1
            if count >= METRIC_CAP:
                break
    return count


def extract_metrics(
    request: ServiceRequest,
    risk_lookup: RiskLookup,
    recent_requests: Iterable[ServiceRequest] = (),
    now: Optional[datetime] = None,
) -> PriorityMetrics:
    """
    Derive the metric vector for one request.

    Args:
        request: Open request snapshot
        risk_lookup: Neighborhood -> risk record (or None)
        recent_requests: Requests considered for recurrence
        now: Point in time of the ranking pass (defaults to the current time)

    Returns:
        PriorityMetrics with every value in [0, 5]
    """
    if now is None:
        now = utc_now()

    record = risk_lookup(request.neighborhood)
    if record is None:
        logger.debug(f"No risk record for neighborhood '{request.neighborhood}', using baseline band")

    return PriorityMetrics(
        severity=severity_metric(request),
        people_impact=people_impact_metric(request),
        urgency=urgency_metric(request, now),
        location_criticality=location_criticality_metric(record),
        wait_time=wait_time_metric(request, now),
        recurrence=recurrence_metric(request, record, recent_requests, now),
    )
