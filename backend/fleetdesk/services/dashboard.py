"""Dashboard metrics: scoped counts gathered concurrently.

Each count runs on its own session from the session factory, because one
AsyncSession cannot run statements concurrently. Every count goes through
the same tenant scope as the list endpoints, so dashboard totals always
match what the caller could page through.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from fleetdesk.auth.context import AuthContext
from fleetdesk.auth.scope import scope_query
from fleetdesk.config import settings
from fleetdesk.models.cargo_document import CargoDocument
from fleetdesk.models.company import Company
from fleetdesk.models.report import NoonReport, OperationalReport
from fleetdesk.models.role import Role
from fleetdesk.models.user import User
from fleetdesk.models.vessel import Vessel
from fleetdesk.models.voyage import Voyage
from fleetdesk.schemas.dashboard import DashboardMetrics

logger = logging.getLogger(__name__)


@dataclass
class _Metric:
    key: str
    model: type
    slug: str
    filters: list = field(default_factory=list)


def _metrics() -> list[_Metric]:
    return [
        _Metric("noon_reports", NoonReport, "stats.noon", [NoonReport.status == "active"]),
        _Metric("departure_reports", OperationalReport, "stats.departure", [
            OperationalReport.event_type == "departure",
            OperationalReport.status == "active",
        ]),
        _Metric("arrival_reports", OperationalReport, "stats.arrival", [
            OperationalReport.event_type == "arrival",
            OperationalReport.status == "active",
        ]),
        _Metric("nor_reports", OperationalReport, "stats.nor", [
            OperationalReport.event_type == "nor",
            OperationalReport.status == "active",
        ]),
        _Metric("cargo_stowage", CargoDocument, "stats.cargo_stowage", [
            CargoDocument.document_type == "stowage_plan",
            CargoDocument.status == "active",
        ]),
        _Metric("cargo_documents", CargoDocument, "stats.cargo_docs", [
            CargoDocument.document_type == "cargo_documents",
            CargoDocument.status == "active",
        ]),
        _Metric("vessels", Vessel, "vessels.view", [Vessel.status == "active"]),
        _Metric("voyages", Voyage, "voyage.view", [Voyage.status == "active"]),
        _Metric("users", User, "users.view", [User.status == "active"]),
        _Metric("companies", Company, "company.view", [Company.status == "active"]),
    ]


async def _count(
    session_factory: async_sessionmaker[AsyncSession],
    context: AuthContext,
    metric: _Metric,
    company_id: str | None,
) -> int:
    model = metric.model
    query = select(func.count(model.id)).where(*metric.filters)
    if hasattr(model, "deleted_at"):
        query = query.where(model.deleted_at.is_(None))
    if model is User and not context.is_super_admin:
        query = query.outerjoin(Role, User.role_id == Role.id).where(
            or_(Role.name.is_(None), func.lower(Role.name) != settings.super_admin_role.lower())
        )

    async with session_factory() as session:
        query = await scope_query(session, context, query, model, company_id=company_id)
        return await session.scalar(query) or 0


async def collect_metrics(
    session_factory: async_sessionmaker[AsyncSession],
    context: AuthContext,
    company_id: str | None = None,
) -> DashboardMetrics:
    """Run every count the caller may see in parallel.

    Metrics whose permission the caller lacks are left null rather than
    counted.
    """
    visible = [m for m in _metrics() if context.can(m.slug)]
    counts = await asyncio.gather(
        *(_count(session_factory, context, m, company_id) for m in visible)
    )
    logger.debug("Dashboard metrics computed for user %s", context.user_id)
    return DashboardMetrics(**{m.key: c for m, c in zip(visible, counts)})
