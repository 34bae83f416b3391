"""Shared checks for report and document writes."""

from datetime import datetime, timedelta

from sqlalchemy import Select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.auth.context import AuthContext
from fleetdesk.auth.scope import get_visible_or_404, require_tenant
from fleetdesk.middleware.exceptions import BusinessLogicError
from fleetdesk.models.vessel import Vessel
from fleetdesk.models.voyage import Voyage


async def resolve_vessel_voyage(
    db: AsyncSession,
    context: AuthContext,
    vessel_id: str,
    voyage_id: str,
) -> tuple[Vessel, Voyage]:
    """Load the vessel and voyage a new record is filed against.

    Both must be visible to the caller and the voyage must belong to the
    vessel. Voyages created by colleagues are valid references even for
    own-rows roles.
    """
    require_tenant(context)
    vessel = await get_visible_or_404(db, context, Vessel, vessel_id, label="Vessel")
    voyage = await get_visible_or_404(
        db, context, Voyage, voyage_id, label="Voyage", own_rows=False
    )
    if voyage.vessel_id != vessel.id:
        raise BusinessLogicError("Voyage does not belong to the selected vessel")
    return vessel, voyage


def apply_date_window(
    query: Select,
    column,
    context: AuthContext,
    date_from: datetime | None,
    date_to: datetime | None,
) -> Select:
    """Filter on a report date column.

    Without `reports.history.view` and without an explicit range, only
    today's (UTC) reports are listed.
    """
    if date_from is None and date_to is None and not context.can("reports.history.view"):
        today = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
        return query.where(column >= today, column < today + timedelta(days=1))

    if date_from is not None:
        query = query.where(column >= date_from)
    if date_to is not None:
        query = query.where(column <= date_to)
    return query
