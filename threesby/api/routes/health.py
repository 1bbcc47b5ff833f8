"""Health routes — process liveness and curator-store readiness.

Invariants:
    - GET /health/ answers 200 whenever the app is serving
    - GET /health/ready answers 503 until the curator store accepts a SELECT 1
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

import threesby.infrastructure.database as database

router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
async def health_check():
    return {
        "status": "healthy",
        "service": "threesby-api",
        "version": "1.0.0",
    }


@router.get("/ready")
async def readiness_check():
    manager = database.db_manager
    if manager is None or not await manager.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "not_ready", "checks": {"database": "unavailable"}},
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
