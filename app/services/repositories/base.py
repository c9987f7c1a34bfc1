from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional
import logging

from app.models.service_request import NeighborhoodRiskRecord, ServiceRequest

logger = logging.getLogger(__name__)


class ServiceRequestRepository(ABC):
    """
    Read side of the external request repository.

    Contract:
    - Returns complete, immutable ServiceRequest snapshots.
    - list_open_requests(): every request not yet closed (open, in_progress).
    - list_resolved_requests(since): resolved requests with resolved_at >= since.
    - Creation, persistence and status transitions live elsewhere.
    """

    @abstractmethod
    def list_open_requests(self) -> List[ServiceRequest]:
        raise NotImplementedError

    @abstractmethod
    def list_resolved_requests(self, since: datetime) -> List[ServiceRequest]:
        raise NotImplementedError


class NeighborhoodRiskRegistry(ABC):
    """
    Read side of the neighborhood risk registry.

    Contract:
    - risk_for(neighborhood) returns the record, or None when the area is unmapped.
    - list_records() returns every record; the engine snapshots it once per pass.
    - An unmapped neighborhood is NOT an error.
    """

    @abstractmethod
    def risk_for(self, neighborhood: str) -> Optional[NeighborhoodRiskRecord]:
        raise NotImplementedError

    @abstractmethod
    def list_records(self) -> List[NeighborhoodRiskRecord]:
        raise NotImplementedError


def neighborhood_key(neighborhood: str) -> str:
    return neighborhood.strip().lower()
