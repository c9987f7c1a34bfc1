"""
Pydantic models for the read-only snapshots supplied by the collaborators:
service requests from the request repository and neighborhood risk records
from the risk registry.

DESIGN PRINCIPLE:
- These models reflect data structure, not business logic
- The engine never writes them back; status transitions belong to the repository
"""

from pydantic import BaseModel, Field, field_validator, model_validator
from datetime import datetime
from typing import Optional, FrozenSet
from enum import Enum

from app.utils.time_helpers import ensure_utc


class RequestStatus(str, Enum):
    """Lifecycle states owned by the request repository."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    ARCHIVED = "archived"
    CANCELLED = "cancelled"


# Closed work is never ranked
CLOSED_STATUSES = frozenset({
    RequestStatus.RESOLVED,
    RequestStatus.CANCELLED,
    RequestStatus.ARCHIVED,
})


class PriorityLabel(str, Enum):
    """Priority label chosen when the request was filed."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class ServiceRequest(BaseModel):
    """
    Snapshot of one citizen service request.

    `sla_deadline` is derived by the repository from the category SLA hours
    and `created_at`; it may be absent for categories without an SLA.
    """
    id: str = Field(..., min_length=1, description="Repository document ID")
    protocol: str = Field(..., description="Display identifier shown to citizens")
    status: RequestStatus
    category: str = Field(..., description="Category slug, e.g. 'flooding'")
    neighborhood: str
    priority_label: PriorityLabel = Field(default=PriorityLabel.MEDIUM)
    created_at: datetime
    resolved_at: Optional[datetime] = None
    sla_deadline: Optional[datetime] = None
    secretariat_id: Optional[str] = Field(None, description="Owning secretariat/department")
    title: Optional[str] = None

    @field_validator("created_at", "resolved_at", "sla_deadline", mode="after")
    @classmethod
    def _normalize_timestamps(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @model_validator(mode="after")
    def _resolved_at_matches_status(self):
        is_resolved = self.status == RequestStatus.RESOLVED
        if is_resolved and self.resolved_at is None:
            raise ValueError("resolved requests must carry resolved_at")
        if not is_resolved and self.resolved_at is not None:
            raise ValueError(f"resolved_at is only valid for resolved requests (status={self.status.value})")
        return self

    @property
    def is_closed(self) -> bool:
        return self.status in CLOSED_STATUSES

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "id": "req-0042",
                "protocol": "2024-000042",
                "status": "open",
                "category": "flooding",
                "neighborhood": "Centro",
                "priority_label": "urgent",
                "created_at": "2024-03-10T08:15:00Z",
                "sla_deadline": "2024-03-11T08:15:00Z",
                "secretariat_id": "drainage",
                "title": "Street flooded after rain",
            }
        }


class NeighborhoodRiskRecord(BaseModel):
    """Risk registry entry for one neighborhood."""
    neighborhood: str
    risk_score: float = Field(..., ge=0, le=100, description="Composite area risk (0-100)")
    recurring_issue_tags: FrozenSet[str] = Field(
        default_factory=frozenset,
        description="Category slugs known to recur in this neighborhood"
    )

    class Config:
        frozen = True
