"""Daily noon report router.

Endpoints:
    GET    /api/noon-reports/          List reports in scope
    GET    /api/noon-reports/{id}      Report detail
    POST   /api/noon-reports/          File a report
    PATCH  /api/noon-reports/{id}      Update a report
    DELETE /api/noon-reports/{id}      Soft delete
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.auth.context import AuthContext
from fleetdesk.auth.deps import require_permission
from fleetdesk.auth.scope import get_visible_or_404, scope_query
from fleetdesk.database import get_db
from fleetdesk.models.report import NoonReport
from fleetdesk.schemas.common import MessageResponse, PaginatedResponse
from fleetdesk.schemas.report import NoonReportCreate, NoonReportOut, NoonReportUpdate
from fleetdesk.services.reports import apply_date_window, resolve_vessel_voyage
from fleetdesk.utils.pagination import PageParams, page_params, paginate

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[NoonReportOut])
async def list_noon_reports(
    search: str | None = Query(None),
    vessel_id: str | None = Query(None),
    voyage_id: str | None = Query(None),
    report_status: str | None = Query(None, alias="status"),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
    company_id: str | None = Query(None),
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("noon.view")),
):
    query = select(NoonReport).where(NoonReport.deleted_at.is_(None))
    query = await scope_query(db, context, query, NoonReport, company_id=company_id)
    query = apply_date_window(query, NoonReport.report_date, context, date_from, date_to)

    if search:
        q = f"%{search}%"
        query = query.where(or_(NoonReport.vessel_name.ilike(q), NoonReport.voyage_no.ilike(q)))
    if vessel_id:
        query = query.where(NoonReport.vessel_id == vessel_id)
    if voyage_id:
        query = query.where(NoonReport.voyage_id == voyage_id)
    if report_status and report_status != "all":
        query = query.where(NoonReport.status == report_status)
    query = query.order_by(NoonReport.report_date.desc())

    reports, total = await paginate(db, query, paging)
    return PaginatedResponse.build(
        [NoonReportOut.model_validate(r) for r in reports], total, paging.page, paging.limit
    )


@router.get("/{report_id}", response_model=NoonReportOut)
async def get_noon_report(
    report_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("noon.view")),
):
    report = await get_visible_or_404(db, context, NoonReport, report_id, label="Noon report")
    return NoonReportOut.model_validate(report)


@router.post("/", response_model=NoonReportOut, status_code=201)
async def create_noon_report(
    body: NoonReportCreate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("noon.create")),
):
    vessel, voyage = await resolve_vessel_voyage(db, context, body.vessel_id, body.voyage_id)

    report = NoonReport(
        **body.model_dump(),
        vessel_name=vessel.name,
        voyage_no=voyage.voyage_no,
        created_by=context.user_id,
        updated_by=context.user_id,
    )
    db.add(report)
    await db.flush()
    return NoonReportOut.model_validate(report)


@router.patch("/{report_id}", response_model=NoonReportOut)
async def update_noon_report(
    report_id: str,
    body: NoonReportUpdate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("noon.edit")),
):
    report = await get_visible_or_404(db, context, NoonReport, report_id, label="Noon report")

    for key, value in body.model_dump(exclude_unset=True).items():
        if value is None and key in ("report_date", "status"):
            continue
        setattr(report, key, value)
    report.updated_by = context.user_id
    await db.flush()
    return NoonReportOut.model_validate(report)


@router.delete("/{report_id}", response_model=MessageResponse)
async def delete_noon_report(
    report_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("noon.delete")),
):
    report = await get_visible_or_404(db, context, NoonReport, report_id, label="Noon report")
    report.deleted_at = datetime.utcnow()
    report.updated_by = context.user_id
    await db.flush()
    return MessageResponse(message="Noon report deleted")
