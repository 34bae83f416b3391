"""Vessel management router.

Endpoints:
    GET    /api/vessels/                                  List vessels in scope
    GET    /api/vessels/{id}                              Vessel detail + certificate library
    POST   /api/vessels/                                  Create vessel
    PATCH  /api/vessels/{id}                              Update vessel
    DELETE /api/vessels/{id}                              Soft delete
    PUT    /api/vessels/{id}/certificates/{doc_type}      Upsert library certificate
    DELETE /api/vessels/{id}/certificates/{doc_type}      Remove library certificate
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fleetdesk.auth.context import AuthContext
from fleetdesk.auth.deps import require_permission
from fleetdesk.auth.scope import get_visible_or_404, owning_company, scope_query
from fleetdesk.database import get_db
from fleetdesk.middleware.exceptions import ResourceNotFoundError
from fleetdesk.models.vessel import Vessel, VesselCertificate
from fleetdesk.schemas.common import MessageResponse, PaginatedResponse
from fleetdesk.schemas.vessel import (
    CertificateOut,
    CertificateUpsert,
    VesselCreate,
    VesselDetailOut,
    VesselOut,
    VesselUpdate,
)
from fleetdesk.services.pre_arrival import upsert_certificate
from fleetdesk.utils.pagination import PageParams, page_params, paginate

router = APIRouter()


async def _detail(db: AsyncSession, vessel_id: str) -> VesselDetailOut:
    result = await db.execute(
        select(Vessel)
        .options(selectinload(Vessel.certificates))
        .where(Vessel.id == vessel_id)
        .execution_options(populate_existing=True)
    )
    return VesselDetailOut.model_validate(result.scalar_one())


@router.get("/", response_model=PaginatedResponse[VesselOut])
async def list_vessels(
    search: str | None = Query(None),
    vessel_status: str | None = Query(None, alias="status"),
    fleet: str | None = Query(None),
    company_id: str | None = Query(None),
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("vessels.view")),
):
    query = select(Vessel).where(Vessel.deleted_at.is_(None))
    query = await scope_query(db, context, query, Vessel, company_id=company_id)
    if search:
        q = f"%{search}%"
        query = query.where(or_(Vessel.name.ilike(q), Vessel.imo.ilike(q)))
    if vessel_status and vessel_status != "all":
        query = query.where(Vessel.status == vessel_status)
    if fleet:
        query = query.where(Vessel.fleet == fleet)
    query = query.order_by(Vessel.name)

    vessels, total = await paginate(db, query, paging)
    return PaginatedResponse.build(
        [VesselOut.model_validate(v) for v in vessels], total, paging.page, paging.limit
    )


@router.get("/{vessel_id}", response_model=VesselDetailOut)
async def get_vessel(
    vessel_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("vessels.view")),
):
    vessel = await get_visible_or_404(db, context, Vessel, vessel_id, label="Vessel")
    return await _detail(db, vessel.id)


@router.post("/", response_model=VesselDetailOut, status_code=201)
async def create_vessel(
    body: VesselCreate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("vessels.create")),
):
    company_id = await owning_company(db, context, body.company_id)

    vessel = Vessel(
        **body.model_dump(exclude={"company_id"}),
        company_id=company_id,
        created_by=context.user_id,
        updated_by=context.user_id,
    )
    db.add(vessel)
    await db.flush()
    return await _detail(db, vessel.id)


@router.patch("/{vessel_id}", response_model=VesselDetailOut)
async def update_vessel(
    vessel_id: str,
    body: VesselUpdate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("vessels.edit")),
):
    vessel = await get_visible_or_404(db, context, Vessel, vessel_id, label="Vessel")

    for key, value in body.model_dump(exclude_unset=True).items():
        if value is None and key in ("name", "status"):
            continue
        setattr(vessel, key, value)
    vessel.updated_by = context.user_id
    await db.flush()
    return await _detail(db, vessel.id)


@router.delete("/{vessel_id}", response_model=MessageResponse)
async def delete_vessel(
    vessel_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("vessels.delete")),
):
    """Soft delete. Voyages and reports of the vessel drop out of every
    tenant's scope with it."""
    vessel = await get_visible_or_404(db, context, Vessel, vessel_id, label="Vessel")
    vessel.deleted_at = datetime.utcnow()
    vessel.updated_by = context.user_id
    await db.flush()
    return MessageResponse(message="Vessel deleted")


# ── Certificate library ──────────────────────────────────────

@router.put("/{vessel_id}/certificates/{doc_type}", response_model=CertificateOut)
async def upsert_vessel_certificate(
    vessel_id: str,
    doc_type: str,
    body: CertificateUpsert,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("vessels.edit")),
):
    """Create or replace the library certificate for one document type.

    Open pre-arrival packs pointing at it show the new file on next read.
    """
    vessel = await get_visible_or_404(db, context, Vessel, vessel_id, label="Vessel")
    cert = await upsert_certificate(
        db,
        vessel.id,
        doc_type,
        name=body.name,
        owner=body.owner,
        file_name=body.file_name,
        file_url=body.file_url,
        note=body.note,
        user_id=context.user_id,
    )
    return CertificateOut.model_validate(cert)


@router.delete("/{vessel_id}/certificates/{doc_type}", response_model=MessageResponse)
async def delete_vessel_certificate(
    vessel_id: str,
    doc_type: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("vessels.edit")),
):
    vessel = await get_visible_or_404(db, context, Vessel, vessel_id, label="Vessel")
    result = await db.execute(
        select(VesselCertificate).where(
            VesselCertificate.vessel_id == vessel.id,
            VesselCertificate.doc_type == doc_type,
        )
    )
    cert = result.scalar_one_or_none()
    if cert is None:
        raise ResourceNotFoundError("Certificate")

    await db.delete(cert)
    await db.flush()
    return MessageResponse(message="Certificate deleted")
