"""
Shared fixtures: a fixed clock and small factories for request snapshots.
"""

from datetime import datetime, timedelta, timezone

import pytest

from app.models.priority import WeightSet
from app.models.service_request import NeighborhoodRiskRecord, ServiceRequest
from app.services.prioritization_engine import PrioritizationEngine
from app.services.repositories import InMemoryRiskRegistry, InMemoryServiceRequestRepository

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)

# Only the label-derived severity counts; keeps expected scores easy to read
SEVERITY_ONLY = WeightSet(
    severity=1,
    people_impact=0,
    urgency=0,
    location_criticality=0,
    wait_time=0,
    recurrence=0,
)


def make_request(
    id="req-1",
    status="open",
    category="pothole",
    neighborhood="Centro",
    priority_label="medium",
    created_at=None,
    resolved_at=None,
    **extra,
):
    created_at = created_at or NOW - timedelta(days=1)
    if status == "resolved" and resolved_at is None:
        resolved_at = created_at + timedelta(days=1)
    return ServiceRequest(
        id=id,
        protocol=extra.pop("protocol", f"P-{id}"),
        status=status,
        category=category,
        neighborhood=neighborhood,
        priority_label=priority_label,
        created_at=created_at,
        resolved_at=resolved_at,
        **extra,
    )


def make_risk(neighborhood="Centro", risk_score=50, tags=()):
    return NeighborhoodRiskRecord(
        neighborhood=neighborhood,
        risk_score=risk_score,
        recurring_issue_tags=frozenset(tags),
    )


def no_risk(neighborhood):
    return None


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def repository():
    return InMemoryServiceRequestRepository([
        make_request("req-1", priority_label="urgent", category="flooding", created_at=NOW - timedelta(days=3)),
        make_request("req-2", priority_label="high", category="lighting", neighborhood="Cohabinal"),
        make_request("req-3", status="in_progress", priority_label="low", category="tree_pruning"),
        make_request("req-4", status="resolved", priority_label="urgent", category="flooding",
                     created_at=NOW - timedelta(days=5)),
        make_request("req-5", status="cancelled", priority_label="urgent"),
        make_request("req-6", status="archived", priority_label="urgent"),
    ])


@pytest.fixture
def risk_registry():
    return InMemoryRiskRegistry([
        make_risk("Centro", 85, tags=["flooding"]),
        make_risk("Cohabinal", 45),
    ])


@pytest.fixture
def engine(repository, risk_registry):
    return PrioritizationEngine(
        repository,
        risk_registry,
        clock=lambda: NOW,
        throughput_window_days=30,
        crew_daily_throughput=4,
    )
