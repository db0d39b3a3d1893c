"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /ping and GET /api/v1/health/ always answer if the process is up (liveness)
    - GET /api/v1/health/ready returns 503 if the database is unreachable (readiness)
    - An unreachable cache is reported but never makes the service unready

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, PlainTextResponse

from app.api.dependencies import get_db_manager, get_cache

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])
ping_router = APIRouter(tags=["health"])


@ping_router.get("/ping", response_class=PlainTextResponse)
async def ping():
    return "Pong\n"


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "user-items-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check(db=Depends(get_db_manager), cache=Depends(get_cache)):
    """Readiness probe — database connectivity, cache reported only."""
    db_ok = await db.health_check() if db else False
    cache_ok = await cache.ping() if cache else False
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
        "checks": {
            "database": "healthy",
            "cache": "healthy" if cache_ok else "degraded",
        },
    }
