"""Health & Readiness Checks — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if database is unreachable (readiness)
    - Readiness also reports how many channels are currently registered

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
"""

import logging
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from socialhub.api.deps import get_registry
from socialhub.infrastructure import database
from socialhub.infrastructure.connection_registry import ConnectionRegistry

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness check. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "socialhub-realtime",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(
    registry: ConnectionRegistry = Depends(get_registry),
):
    """Readiness check — includes database connectivity."""
    manager = database.db_manager
    db_ok = await manager.health_check() if manager else False
    if not db_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    return {
        "status": "ready",
        "checks": {"database": "healthy"},
        "connections": len(registry),
    }
