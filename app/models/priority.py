"""
Pydantic models for the prioritization engine.

WeightSet is the only operator-tunable input. It is immutable: a new set
replaces the old one wholesale, never field by field.
"""

from pydantic import BaseModel, Field, StrictInt, ValidationError
from typing import Dict, List, Optional, Union
from enum import Enum

from app.models.service_request import ServiceRequest, RequestStatus


# Scoring factors in display order; every weight/metric mapping is keyed by these names
FACTORS = (
    "severity",
    "people_impact",
    "urgency",
    "location_criticality",
    "wait_time",
    "recurrence",
)

COEFFICIENT_MIN = 0
COEFFICIENT_MAX = 5


class InvalidWeightsError(ValueError):
    """Raised when a weight replacement is malformed. The current weights stay in effect."""

    def __init__(self, errors: List[Dict]):
        self.errors = errors
        details = "; ".join(f"{'.'.join(str(p) for p in e['loc']) or 'weights'}: {e['msg']}" for e in errors)
        super().__init__(f"Invalid weight set: {details}")


class WeightSet(BaseModel):
    """Six integer coefficients, one per scoring factor, each in [0, 5]."""
    severity: StrictInt = Field(..., ge=COEFFICIENT_MIN, le=COEFFICIENT_MAX)
    people_impact: StrictInt = Field(..., ge=COEFFICIENT_MIN, le=COEFFICIENT_MAX)
    urgency: StrictInt = Field(..., ge=COEFFICIENT_MIN, le=COEFFICIENT_MAX)
    location_criticality: StrictInt = Field(..., ge=COEFFICIENT_MIN, le=COEFFICIENT_MAX)
    wait_time: StrictInt = Field(..., ge=COEFFICIENT_MIN, le=COEFFICIENT_MAX)
    recurrence: StrictInt = Field(..., ge=COEFFICIENT_MIN, le=COEFFICIENT_MAX)

    @classmethod
    def create(cls, values: Union["WeightSet", Dict]) -> "WeightSet":
        """
        Build a validated WeightSet.

        Raises:
            InvalidWeightsError: missing, unknown, non-integer or out-of-range coefficient
        """
        if isinstance(values, WeightSet):
            return values
        try:
            return cls.model_validate(values)
        except ValidationError as e:
            raise InvalidWeightsError([
                {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
                for err in e.errors()
            ]) from e

    def as_dict(self) -> Dict[str, int]:
        return {factor: getattr(self, factor) for factor in FACTORS}

    class Config:
        frozen = True
        extra = "forbid"
        json_schema_extra = {
            "example": {
                "severity": 3,
                "people_impact": 2,
                "urgency": 2,
                "location_criticality": 2,
                "wait_time": 1,
                "recurrence": 1,
            }
        }


class PriorityMetrics(BaseModel):
    """Per-request metric vector, each value normalized to [0, 5]. Never persisted."""
    severity: StrictInt = Field(..., ge=0, le=5)
    people_impact: StrictInt = Field(..., ge=0, le=5)
    urgency: StrictInt = Field(..., ge=0, le=5)
    location_criticality: StrictInt = Field(..., ge=0, le=5)
    wait_time: StrictInt = Field(..., ge=0, le=5)
    recurrence: StrictInt = Field(..., ge=0, le=5)

    def as_dict(self) -> Dict[str, int]:
        return {factor: getattr(self, factor) for factor in FACTORS}

    class Config:
        frozen = True


class Tier(str, Enum):
    """Coarse priority bucket. Boundaries are fixed so reports stay comparable across periods."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class FactorContribution(BaseModel):
    """One factor's share of a composite score."""
    factor: str
    metric: int
    weight: int
    contribution: int

    class Config:
        frozen = True


class PrioritizedRequest(BaseModel):
    """A request with its metrics, composite score and tier for one ranking pass."""
    request: ServiceRequest
    metrics: PriorityMetrics
    score: int = Field(..., ge=0, le=150)
    tier: Tier
    breakdown: List[FactorContribution] = Field(default_factory=list)

    class Config:
        frozen = True


class RankingFilters(BaseModel):
    """View filters over an already-ranked list. Filtering never re-ranks."""
    secretariat_id: Optional[str] = None
    category: Optional[str] = None
    neighborhood: Optional[str] = None
    status: Optional[RequestStatus] = None
    tier: Optional[Tier] = None
    min_score: Optional[int] = Field(None, ge=0)
    search: Optional[str] = Field(None, description="Substring of protocol or title (case-insensitive)")

    class Config:
        frozen = True


class RankingSummary(BaseModel):
    """Backlog overview shown above the ranked list."""
    total: int = 0
    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0
    average_score: float = 0.0
    max_score: int = 0


class ProjectionResult(BaseModel):
    """
    What-if clearance estimate.

    Clearance days are None when the effective throughput cannot drain a
    non-empty backlog (zero or negative resolutions per day).
    """
    backlog_size: int
    throughput_per_day: float
    capacity_delta: float
    current_clearance_days: Optional[int]
    projected_clearance_days: Optional[int]
    reduction_pct: Optional[float] = None

    class Config:
        json_schema_extra = {
            "example": {
                "backlog_size": 80,
                "throughput_per_day": 8.0,
                "capacity_delta": 8.0,
                "current_clearance_days": 10,
                "projected_clearance_days": 5,
                "reduction_pct": 50.0,
            }
        }
