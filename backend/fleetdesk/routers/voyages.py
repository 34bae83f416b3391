"""Voyage management router.

Endpoints:
    GET    /api/voyages/           List voyages (search, status, vessel, ETA range)
    GET    /api/voyages/lookup     Dropdown options: visible companies and active vessels
    GET    /api/voyages/{id}       Voyage detail
    POST   /api/voyages/           Create voyage
    PATCH  /api/voyages/{id}       Update voyage
    DELETE /api/voyages/{id}       Soft delete
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fleetdesk.auth.context import AuthContext
from fleetdesk.auth.deps import require_permission
from fleetdesk.auth.scope import get_visible_or_404, require_tenant, scope_query
from fleetdesk.database import get_db
from fleetdesk.middleware.exceptions import ConflictError
from fleetdesk.models.company import Company
from fleetdesk.models.vessel import Vessel
from fleetdesk.models.voyage import Voyage
from fleetdesk.schemas.common import MessageResponse, PaginatedResponse
from fleetdesk.schemas.voyage import (
    LookupOption,
    VesselLookupOption,
    VoyageCreate,
    VoyageLookupOut,
    VoyageOut,
    VoyageUpdate,
)
from fleetdesk.utils.pagination import PageParams, page_params, paginate

router = APIRouter()

_JSON_FIELDS = ("route", "charter", "cargo")


def _dump(body: VoyageCreate | VoyageUpdate, **kwargs) -> dict:
    """model_dump with the JSON columns in JSON mode (charter carries dates)."""
    data = body.model_dump(**kwargs)
    for key in _JSON_FIELDS:
        value = getattr(body, key)
        if key in data and value is not None:
            data[key] = value.model_dump(mode="json")
    return data


def _to_out(voyage: Voyage) -> VoyageOut:
    out = VoyageOut.model_validate(voyage)
    out.vessel_name = voyage.vessel.name if voyage.vessel else None
    return out


async def _load(db: AsyncSession, voyage_id: str) -> Voyage:
    result = await db.execute(
        select(Voyage)
        .options(selectinload(Voyage.vessel))
        .where(Voyage.id == voyage_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _ensure_unique_voyage_no(db: AsyncSession, voyage_no: str, exclude_id: str | None = None) -> None:
    query = select(Voyage.id).where(Voyage.voyage_no == voyage_no)
    if exclude_id:
        query = query.where(Voyage.id != exclude_id)
    if (await db.execute(query)).first():
        raise ConflictError(f"Voyage number '{voyage_no}' already exists")


@router.get("/", response_model=PaginatedResponse[VoyageOut])
async def list_voyages(
    search: str | None = Query(None),
    voyage_status: str | None = Query(None, alias="status"),
    vessel_id: str | None = Query(None),
    eta_from: datetime | None = Query(None),
    eta_to: datetime | None = Query(None),
    company_id: str | None = Query(None),
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("voyage.view")),
):
    """List voyages in scope.

    `search` matches voyage number, load port or vessel name.
    """
    query = (
        select(Voyage)
        .join(Vessel, Voyage.vessel_id == Vessel.id)
        .options(selectinload(Voyage.vessel))
        .where(Voyage.deleted_at.is_(None))
    )
    query = await scope_query(db, context, query, Voyage, company_id=company_id)

    if search:
        q = f"%{search}%"
        query = query.where(or_(
            Voyage.voyage_no.ilike(q),
            Voyage.load_port.ilike(q),
            Vessel.name.ilike(q),
        ))
    if voyage_status and voyage_status != "all":
        query = query.where(Voyage.status == voyage_status)
    if vessel_id:
        query = query.where(Voyage.vessel_id == vessel_id)
    if eta_from:
        query = query.where(Voyage.eta >= eta_from)
    if eta_to:
        query = query.where(Voyage.eta <= eta_to)
    query = query.order_by(Voyage.created_at.desc())

    voyages, total = await paginate(db, query, paging)
    return PaginatedResponse.build(
        [_to_out(v) for v in voyages], total, paging.page, paging.limit
    )


@router.get("/lookup", response_model=VoyageLookupOut)
async def voyage_lookup(
    company_id: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("voyage.view")),
):
    """Options for voyage forms: visible companies and their active vessels."""
    company_query = select(Company).where(Company.deleted_at.is_(None))
    company_query = await scope_query(db, context, company_query, Company)
    companies = (await db.execute(company_query.order_by(Company.name))).scalars().all()

    vessel_query = select(Vessel).where(
        Vessel.deleted_at.is_(None), Vessel.status == "active"
    )
    vessel_query = await scope_query(db, context, vessel_query, Vessel, company_id=company_id)
    vessels = (await db.execute(vessel_query.order_by(Vessel.name))).scalars().all()

    return VoyageLookupOut(
        companies=[LookupOption(id=c.id, name=c.name) for c in companies],
        vessels=[
            VesselLookupOption(id=v.id, name=v.name, company_id=v.company_id)
            for v in vessels
        ],
    )


@router.get("/{voyage_id}", response_model=VoyageOut)
async def get_voyage(
    voyage_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("voyage.view")),
):
    voyage = await get_visible_or_404(db, context, Voyage, voyage_id, label="Voyage")
    return _to_out(await _load(db, voyage.id))


@router.post("/", response_model=VoyageOut, status_code=201)
async def create_voyage(
    body: VoyageCreate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("voyage.create")),
):
    require_tenant(context)
    await get_visible_or_404(db, context, Vessel, body.vessel_id, label="Vessel")
    await _ensure_unique_voyage_no(db, body.voyage_no)

    data = _dump(body)
    voyage = Voyage(
        **data,
        load_port=(data.get("route") or {}).get("load_port"),
        created_by=context.user_id,
        updated_by=context.user_id,
    )
    db.add(voyage)
    await db.flush()
    return _to_out(await _load(db, voyage.id))


@router.patch("/{voyage_id}", response_model=VoyageOut)
async def update_voyage(
    voyage_id: str,
    body: VoyageUpdate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("voyage.edit")),
):
    voyage = await get_visible_or_404(db, context, Voyage, voyage_id, label="Voyage")
    updates = _dump(body, exclude_unset=True)

    if updates.get("voyage_no"):
        await _ensure_unique_voyage_no(db, updates["voyage_no"], exclude_id=voyage.id)
    if "route" in updates:
        updates["load_port"] = (updates["route"] or {}).get("load_port")

    for key, value in updates.items():
        if value is None and key in ("voyage_no", "status"):
            continue
        setattr(voyage, key, value)
    voyage.updated_by = context.user_id
    await db.flush()
    return _to_out(await _load(db, voyage.id))


@router.delete("/{voyage_id}", response_model=MessageResponse)
async def delete_voyage(
    voyage_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("voyage.delete")),
):
    voyage = await get_visible_or_404(db, context, Voyage, voyage_id, label="Voyage")
    voyage.deleted_at = datetime.utcnow()
    voyage.updated_by = context.user_id
    await db.flush()
    return MessageResponse(message="Voyage deleted")
