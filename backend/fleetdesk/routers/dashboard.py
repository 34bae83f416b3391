"""Dashboard router.

Endpoints:
    GET /api/dashboard/metrics    Scoped report, fleet and user counts
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fleetdesk.auth.context import AuthContext
from fleetdesk.auth.deps import require_permission
from fleetdesk.database import get_session_factory
from fleetdesk.schemas.dashboard import DashboardMetrics
from fleetdesk.services.dashboard import collect_metrics

router = APIRouter()


@router.get("/metrics", response_model=DashboardMetrics)
async def dashboard_metrics(
    company_id: str | None = Query(None),
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
    context: AuthContext = Depends(require_permission("dashboard.view")),
):
    """Counts for the dashboard cards.

    Each card needs its own `stats.*` (or entity view) permission; cards the
    caller cannot see come back as null. `company_id` narrows the counts for
    super-admins only.
    """
    return await collect_metrics(session_factory, context, company_id=company_id)
