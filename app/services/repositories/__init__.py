"""
Collaborator adapters: the request repository and the neighborhood risk registry.
The engine only reads from them.
"""

from .base import NeighborhoodRiskRegistry, ServiceRequestRepository
from .memory_repository import InMemoryRiskRegistry, InMemoryServiceRequestRepository
from .resolver import get_collaborators

__all__ = [
    "NeighborhoodRiskRegistry",
    "ServiceRequestRepository",
    "InMemoryRiskRegistry",
    "InMemoryServiceRequestRepository",
    "get_collaborators",
]
