"""Departure, arrival and NOR report routers.

The three report kinds share one table and one set of handlers. Each is
mounted under its own prefix and guarded by its own slug family:

    /api/departure-reports   departure.view|create|edit|delete
    /api/arrival-reports     arrival.view|create|edit|delete
    /api/nor-reports         nor.view|create|edit|delete
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.auth.context import AuthContext
from fleetdesk.auth.deps import require_permission
from fleetdesk.auth.scope import get_visible_or_404, scope_query
from fleetdesk.database import get_db
from fleetdesk.middleware.exceptions import ResourceNotFoundError
from fleetdesk.models.report import EVENT_TYPES, OperationalReport
from fleetdesk.schemas.common import MessageResponse, PaginatedResponse
from fleetdesk.schemas.report import (
    OperationalReportCreate,
    OperationalReportOut,
    OperationalReportUpdate,
)
from fleetdesk.services.reports import apply_date_window, resolve_vessel_voyage
from fleetdesk.utils.pagination import PageParams, page_params, paginate

_LABELS = {
    "departure": "Departure report",
    "arrival": "Arrival report",
    "nor": "NOR report",
}


def build_router(event_type: str) -> APIRouter:
    """Router for one operational event type; slugs are `<event_type>.<action>`."""
    if event_type not in EVENT_TYPES:
        raise ValueError(f"Unknown event type: {event_type}")

    label = _LABELS[event_type]
    router = APIRouter()

    async def _get_report(db: AsyncSession, context: AuthContext, report_id: str) -> OperationalReport:
        report = await get_visible_or_404(db, context, OperationalReport, report_id, label=label)
        if report.event_type != event_type:
            raise ResourceNotFoundError(label)
        return report

    @router.get("/", response_model=PaginatedResponse[OperationalReportOut])
    async def list_reports(
        search: str | None = Query(None),
        vessel_id: str | None = Query(None),
        voyage_id: str | None = Query(None),
        report_status: str | None = Query(None, alias="status"),
        date_from: datetime | None = Query(None),
        date_to: datetime | None = Query(None),
        company_id: str | None = Query(None),
        paging: PageParams = Depends(page_params),
        db: AsyncSession = Depends(get_db),
        context: AuthContext = Depends(require_permission(f"{event_type}.view")),
    ):
        query = select(OperationalReport).where(
            OperationalReport.event_type == event_type,
            OperationalReport.deleted_at.is_(None),
        )
        query = await scope_query(db, context, query, OperationalReport, company_id=company_id)
        query = apply_date_window(query, OperationalReport.report_date, context, date_from, date_to)

        if search:
            q = f"%{search}%"
            query = query.where(or_(
                OperationalReport.vessel_name.ilike(q),
                OperationalReport.voyage_no.ilike(q),
                OperationalReport.port_name.ilike(q),
            ))
        if vessel_id:
            query = query.where(OperationalReport.vessel_id == vessel_id)
        if voyage_id:
            query = query.where(OperationalReport.voyage_id == voyage_id)
        if report_status and report_status != "all":
            query = query.where(OperationalReport.status == report_status)
        query = query.order_by(OperationalReport.report_date.desc())

        reports, total = await paginate(db, query, paging)
        return PaginatedResponse.build(
            [OperationalReportOut.model_validate(r) for r in reports],
            total, paging.page, paging.limit,
        )

    @router.get("/{report_id}", response_model=OperationalReportOut)
    async def get_report(
        report_id: str,
        db: AsyncSession = Depends(get_db),
        context: AuthContext = Depends(require_permission(f"{event_type}.view")),
    ):
        return OperationalReportOut.model_validate(await _get_report(db, context, report_id))

    @router.post("/", response_model=OperationalReportOut, status_code=201)
    async def create_report(
        body: OperationalReportCreate,
        db: AsyncSession = Depends(get_db),
        context: AuthContext = Depends(require_permission(f"{event_type}.create")),
    ):
        vessel, voyage = await resolve_vessel_voyage(db, context, body.vessel_id, body.voyage_id)

        data = body.model_dump()
        if data.get("report_date") is None:
            data["report_date"] = data.get("event_time") or datetime.utcnow()
        report = OperationalReport(
            **data,
            event_type=event_type,
            vessel_name=vessel.name,
            voyage_no=voyage.voyage_no,
            created_by=context.user_id,
            updated_by=context.user_id,
        )
        db.add(report)
        await db.flush()
        return OperationalReportOut.model_validate(report)

    @router.patch("/{report_id}", response_model=OperationalReportOut)
    async def update_report(
        report_id: str,
        body: OperationalReportUpdate,
        db: AsyncSession = Depends(get_db),
        context: AuthContext = Depends(require_permission(f"{event_type}.edit")),
    ):
        report = await _get_report(db, context, report_id)
        for key, value in body.model_dump(exclude_unset=True).items():
            if value is None and key == "status":
                continue
            setattr(report, key, value)
        report.updated_by = context.user_id
        await db.flush()
        return OperationalReportOut.model_validate(report)

    @router.delete("/{report_id}", response_model=MessageResponse)
    async def delete_report(
        report_id: str,
        db: AsyncSession = Depends(get_db),
        context: AuthContext = Depends(require_permission(f"{event_type}.delete")),
    ):
        report = await _get_report(db, context, report_id)
        report.deleted_at = datetime.utcnow()
        report.updated_by = context.user_id
        await db.flush()
        return MessageResponse(message=f"{label} deleted")

    return router


departure_router = build_router("departure")
arrival_router = build_router("arrival")
nor_router = build_router("nor")
