"""Application lifespan: startup checks that must not block the API."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from fleetdesk.auth.deps import guarded_permission_slugs
from fleetdesk.database import async_session
from fleetdesk.services.catalog import audit_guard_slugs

logger = logging.getLogger("fleetdesk.startup")


async def _audit_permission_catalog() -> None:
    """Log route guards whose slug is missing from the permission catalog."""
    slugs = guarded_permission_slugs()
    try:
        async with async_session() as db:
            missing = await audit_guard_slugs(db, slugs)
    except (SQLAlchemyError, OSError):
        logger.exception("Permission catalog audit skipped: database unavailable")
        return

    if missing:
        logger.warning(
            "%d of %d guarded permission(s) missing from the catalog; "
            "run `python -m fleetdesk.cli seed-permissions`",
            len(missing),
            len(slugs),
        )
    else:
        logger.info("All %d guarded permissions are catalogued", len(slugs))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan: audit guard slugs on startup."""
    await _audit_permission_catalog()
    yield
    logger.info("FleetDesk API shutting down")
