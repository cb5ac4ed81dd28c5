"""
Health check endpoints for the Visiora backend.

Provides liveness and readiness probes for container orchestration,
plus the legacy /api/health check the dashboard pings.
"""

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])

# Track application start time
_start_time = time.time()


# ============ Backward Compatible Endpoint ============


@router.get("/api/health")
async def api_health_check():
    """
    Backward compatible health check endpoint.

    Kept for the dashboard, which expects this exact payload.
    """
    return {"status": "OK", "message": "Server is running"}


@router.get("/health")
async def health_check():
    """
    Basic health check endpoint (liveness probe).

    Returns 200 if the application is running.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "version": settings.version,
        "uptime_seconds": int(time.time() - _start_time),
    }


@router.get("/health/live")
async def liveness_probe():
    """Kubernetes liveness probe."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_probe(request: Request, db: AsyncSession = Depends(get_db)):
    """
    Kubernetes readiness probe.

    Verifies database connectivity and that the credential cipher was built.
    """
    checks = {
        "database": False,
        "cipher": getattr(request.app.state, "cipher", None) is not None,
    }
    errors = []

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = True
    except Exception as e:
        errors.append(f"Database: {str(e)}")
        logger.error(f"Readiness check failed - database: {e}")

    if not checks["cipher"]:
        errors.append("Cipher: encryption key not loaded")

    if not all(checks.values()):
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not ready",
                "checks": checks,
                "errors": errors,
            },
        )

    return {
        "status": "ready",
        "checks": checks,
    }
