import logging
from typing import Optional, Tuple

from app.core.settings import settings
from .base import NeighborhoodRiskRegistry, ServiceRequestRepository

logger = logging.getLogger(__name__)

_collaborators: Optional[Tuple[ServiceRequestRepository, NeighborhoodRiskRegistry]] = None


def get_collaborators() -> Tuple[ServiceRequestRepository, NeighborhoodRiskRegistry]:
    """
    Resolve the request repository and risk registry based on settings.

    Rules:
    - USE_MOCK_DB=true: in-memory collaborators seeded from MOCK_DB_PATH.
    - Otherwise: Firestore collaborators (initializes Firestore on first use).
    """
    global _collaborators
    if _collaborators is not None:
        return _collaborators

    if settings.USE_MOCK_DB:
        from .memory_repository import load_mock_collaborators

        _collaborators = load_mock_collaborators(
            settings.MOCK_DB_PATH,
            settings.REQUESTS_COLLECTION,
            settings.RISK_COLLECTION,
        )
        logger.info("Collaborators initialized: in-memory (mock DB)")
        return _collaborators

    from .firestore_repository import FirestoreRiskRegistry, FirestoreServiceRequestRepository

    _collaborators = (FirestoreServiceRequestRepository(), FirestoreRiskRegistry())
    logger.info("Collaborators initialized: firestore")
    return _collaborators
