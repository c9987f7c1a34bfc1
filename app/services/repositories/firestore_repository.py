"""
Firestore-backed collaborators.

Documents are read, never written. A malformed document is logged and
skipped so one bad record cannot block a ranking pass.
"""

from datetime import datetime
from typing import Dict, List, Optional
import logging

from pydantic import ValidationError

from app.config.firebase import get_db
from app.core.settings import settings
from app.models.service_request import NeighborhoodRiskRecord, RequestStatus, ServiceRequest
from app.utils.firestore_helpers import where_filter
from app.utils.time_helpers import ensure_utc
from .base import NeighborhoodRiskRegistry, ServiceRequestRepository, neighborhood_key

logger = logging.getLogger(__name__)

OPEN_STATUS_VALUES = [RequestStatus.OPEN.value, RequestStatus.IN_PROGRESS.value]


def _to_request(doc) -> Optional[ServiceRequest]:
    data = doc.to_dict() or {}
    data["id"] = doc.id
    try:
        return ServiceRequest.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Skipping malformed service request {doc.id}: {e.error_count()} error(s)")
        return None


class FirestoreServiceRequestRepository(ServiceRequestRepository):

    def __init__(self, db=None, collection: Optional[str] = None):
        self.db = db if db is not None else get_db()
        self.collection = collection or settings.REQUESTS_COLLECTION

    def _stream(self, query) -> List[ServiceRequest]:
        requests = []
        for doc in query.stream():
            request = _to_request(doc)
            if request is not None:
                requests.append(request)
        return requests

    def list_open_requests(self) -> List[ServiceRequest]:
        ref = self.db.collection(self.collection)
        query = where_filter(ref, "status", "in", OPEN_STATUS_VALUES)
        requests = self._stream(query)
        logger.debug(f"Fetched {len(requests)} open requests from '{self.collection}'")
        return requests

    def list_resolved_requests(self, since: datetime) -> List[ServiceRequest]:
        ref = self.db.collection(self.collection)
        query = where_filter(ref, "status", "==", RequestStatus.RESOLVED.value)
        query = where_filter(query, "resolved_at", ">=", ensure_utc(since))
        requests = self._stream(query)
        logger.debug(f"Fetched {len(requests)} requests resolved since {since.isoformat()}")
        return requests


class FirestoreRiskRegistry(NeighborhoodRiskRegistry):
    """Risk records keyed by document ID = neighborhood name."""

    def __init__(self, db=None, collection: Optional[str] = None):
        self.db = db if db is not None else get_db()
        self.collection = collection or settings.RISK_COLLECTION

    def _to_record(self, doc) -> Optional[NeighborhoodRiskRecord]:
        data = {"neighborhood": doc.id, **(doc.to_dict() or {})}
        try:
            return NeighborhoodRiskRecord.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Skipping malformed risk record {doc.id}: {e.error_count()} error(s)")
            return None

    def risk_for(self, neighborhood: str) -> Optional[NeighborhoodRiskRecord]:
        ref = self.db.collection(self.collection)
        for doc in where_filter(ref, "neighborhood", "==", neighborhood).limit(1).stream():
            return self._to_record(doc)

        # Fall back to a case-insensitive match over the registry
        key = neighborhood_key(neighborhood)
        for record in self.list_records():
            if neighborhood_key(record.neighborhood) == key:
                return record
        return None

    def list_records(self) -> List[NeighborhoodRiskRecord]:
        records: Dict[str, NeighborhoodRiskRecord] = {}
        for doc in self.db.collection(self.collection).stream():
            record = self._to_record(doc)
            if record is not None:
                records[neighborhood_key(record.neighborhood)] = record
        return list(records.values())
