"""Health check endpoints for load balancers and monitoring."""

from datetime import datetime

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fleetdesk.auth.deps import guarded_permission_slugs
from fleetdesk.config import settings
from fleetdesk.database import get_session_factory
from fleetdesk.services.catalog import audit_guard_slugs

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Lightweight liveness check (no database round-trip)."""
    return {
        "status": "ok",
        "service": "FleetDesk",
        "timestamp": datetime.utcnow().isoformat(),
        "environment": settings.environment,
    }


@router.get("/health/ready")
async def readiness_check(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
):
    """Readiness check: 200 only if the database answers.

    Guard slugs missing from the permission catalog are reported but do not
    fail the check; super-admins can still use those routes.
    """
    checks = {"service": "ok", "database": "unknown", "permission_catalog": "unknown"}
    healthy = True

    try:
        async with session_factory() as db:
            await db.execute(text("SELECT 1"))
            missing = await audit_guard_slugs(db, guarded_permission_slugs())
        checks["database"] = "ok"
        checks["permission_catalog"] = f"missing: {', '.join(sorted(missing))}" if missing else "ok"
    except (SQLAlchemyError, OSError) as e:
        checks["database"] = f"error: {str(e)[:100]}"
        healthy = False

    return JSONResponse(
        status_code=status.HTTP_200_OK if healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "healthy" if healthy else "unhealthy",
            "service": "FleetDesk",
            "checks": checks,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )
