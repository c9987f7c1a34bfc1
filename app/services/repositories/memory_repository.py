"""
In-memory collaborators.

Used in mock DB mode (seeded from a JSON file shaped like the Firestore
collections) and by the test-suite.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple
import json
import logging
import os

from pydantic import ValidationError

from app.models.service_request import NeighborhoodRiskRecord, RequestStatus, ServiceRequest
from app.utils.time_helpers import ensure_utc
from .base import NeighborhoodRiskRegistry, ServiceRequestRepository, neighborhood_key

logger = logging.getLogger(__name__)


class InMemoryServiceRequestRepository(ServiceRequestRepository):
    """Holds an immutable tuple of requests; replace_all() publishes a new snapshot."""

    def __init__(self, requests: Iterable[ServiceRequest] = ()):
        self._requests: Tuple[ServiceRequest, ...] = tuple(requests)

    def replace_all(self, requests: Iterable[ServiceRequest]) -> None:
        self._requests = tuple(requests)

    def upsert(self, request: ServiceRequest) -> None:
        others = tuple(r for r in self._requests if r.id != request.id)
        self._requests = others + (request,)

    def list_open_requests(self) -> List[ServiceRequest]:
        return [r for r in self._requests if not r.is_closed]

    def list_resolved_requests(self, since: datetime) -> List[ServiceRequest]:
        since = ensure_utc(since)
        return [
            r for r in self._requests
            if r.status == RequestStatus.RESOLVED and r.resolved_at >= since
        ]


class InMemoryRiskRegistry(NeighborhoodRiskRegistry):
    def __init__(self, records: Iterable[NeighborhoodRiskRecord] = ()):
        self._records: Dict[str, NeighborhoodRiskRecord] = {
            neighborhood_key(r.neighborhood): r for r in records
        }

    def risk_for(self, neighborhood: str) -> Optional[NeighborhoodRiskRecord]:
        return self._records.get(neighborhood_key(neighborhood))

    def list_records(self) -> List[NeighborhoodRiskRecord]:
        return list(self._records.values())


def load_mock_collaborators(
    path: str,
    requests_collection: str,
    risk_collection: str,
) -> Tuple[InMemoryServiceRequestRepository, InMemoryRiskRegistry]:
    """
    Build in-memory collaborators from a seed file.

    File shape: {collection: {doc_id: {field: value}}}. Missing file yields
    empty collaborators; malformed documents are skipped with a warning.
    """
    if not os.path.exists(path):
        logger.warning(f"Mock DB file not found: {path}. Starting with empty collections")
        return InMemoryServiceRequestRepository(), InMemoryRiskRegistry()

    with open(path, "r", encoding="utf-8") as f:
        seed = json.load(f)

    requests = []
    for doc_id, data in seed.get(requests_collection, {}).items():
        try:
            requests.append(ServiceRequest.model_validate({**data, "id": doc_id}))
        except ValidationError as e:
            logger.warning(f"Skipping malformed request {doc_id} in {path}: {e.error_count()} error(s)")

    records = []
    for doc_id, data in seed.get(risk_collection, {}).items():
        try:
            records.append(NeighborhoodRiskRecord.model_validate({"neighborhood": doc_id, **data}))
        except ValidationError as e:
            logger.warning(f"Skipping malformed risk record {doc_id} in {path}: {e.error_count()} error(s)")

    logger.info(f"Loaded mock DB from {path}: {len(requests)} requests, {len(records)} risk records")
    return InMemoryServiceRequestRepository(requests), InMemoryRiskRegistry(records)
