"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and collaborator connectivity tests.
"""

from fastapi import APIRouter, Depends, HTTPException
from app.core.settings import settings
from app.services.prioritization_engine import PrioritizationEngine, get_prioritization_engine
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/db")
async def database_health(engine: PrioritizationEngine = Depends(get_prioritization_engine)):
    """
    Collaborator connectivity check.
    Reads the open backlog and the risk registry once.
    """
    try:
        open_requests = engine.repository.list_open_requests()
        risk_records = engine.risk_registry.list_records()

        return {
            "status": "healthy",
            "database": "mock" if settings.USE_MOCK_DB else "firestore",
            "connected": True,
            "open_requests": len(open_requests),
            "risk_records": len(risk_records),
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
    except Exception as e:
        logger.error(f"Collaborator health check failed: {e}")
        raise HTTPException(
            status_code=503,
            detail=f"Database connection failed: {str(e)}"
        )
