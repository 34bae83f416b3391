"""Pre-arrival document pack router.

Endpoints:
    GET    /api/pre-arrival/                                   List packs (hydrated, uploaded_count)
    GET    /api/pre-arrival/{id}                               Pack detail + injected library certs
    POST   /api/pre-arrival/                                   Create pack
    PATCH  /api/pre-arrival/{id}                               Update pack details
    DELETE /api/pre-arrival/{id}                               Soft delete
    PATCH  /api/pre-arrival/{id}/documents/{doc_type}          Upload document metadata
    PATCH  /api/pre-arrival/{id}/documents/{doc_type}/verify   Approve / reject a document
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
from fleetdesk.middleware.exceptions import BusinessLogicError, ConflictError
from fleetdesk.models.pre_arrival import PreArrival
from fleetdesk.models.vessel import Vessel
from fleetdesk.models.voyage import Voyage
from fleetdesk.schemas.common import MessageResponse, PaginatedResponse
from fleetdesk.schemas.pre_arrival import (
    ChecklistEntry,
    DocumentUpload,
    DocumentVerify,
    PreArrivalCreate,
    PreArrivalOut,
    PreArrivalUpdate,
)
from fleetdesk.services.pre_arrival import (
    LIBRARY_DOC_TYPES,
    build_initial_checklist,
    hydrate_documents,
    load_certificates,
    record_upload,
    record_verification,
    serialize_pack,
    upsert_certificate,
)
from fleetdesk.utils.pagination import PageParams, page_params, paginate

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

async def _get_pack(db: AsyncSession, context: AuthContext, pack_id: str) -> PreArrival:
    return await get_visible_or_404(db, context, PreArrival, pack_id, label="Pre-arrival pack")


def _ensure_unlocked(pack: PreArrival) -> None:
    if pack.is_locked:
        raise ConflictError("Pre-arrival pack is locked", error_code="PACK_LOCKED")


async def _detail(db: AsyncSession, pack: PreArrival) -> PreArrivalOut:
    certificates = await load_certificates(db, [pack.vessel_id])
    vessel = await db.get(Vessel, pack.vessel_id)
    return serialize_pack(
        pack,
        certificates[pack.vessel_id],
        detail=True,
        vessel_name=vessel.name if vessel else None,
    )


async def _hydrated_entry(db: AsyncSession, pack: PreArrival, doc_type: str, entry: dict) -> ChecklistEntry:
    certificates = await load_certificates(db, [pack.vessel_id])
    hydrated = hydrate_documents({doc_type: entry}, certificates[pack.vessel_id])
    return ChecklistEntry.model_validate(hydrated[doc_type])


# ── Routes ───────────────────────────────────────────────────

@router.get("/", response_model=PaginatedResponse[PreArrivalOut])
async def list_pre_arrivals(
    search: str | None = Query(None),
    pack_status: str | None = Query(None, alias="status"),
    vessel_id: str | None = Query(None),
    company_id: str | None = Query(None),
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("prearrival.view")),
):
    query = (
        select(PreArrival)
        .options(selectinload(PreArrival.vessel))
        .where(PreArrival.deleted_at.is_(None))
    )
    query = await scope_query(db, context, query, PreArrival, company_id=company_id)

    if search:
        q = f"%{search}%"
        query = query.where(or_(PreArrival.port_name.ilike(q), PreArrival.request_id.ilike(q)))
    if pack_status and pack_status != "all":
        query = query.where(PreArrival.status == pack_status)
    if vessel_id:
        query = query.where(PreArrival.vessel_id == vessel_id)
    query = query.order_by(PreArrival.created_at.desc())

    packs, total = await paginate(db, query, paging)
    certificates = await load_certificates(db, [p.vessel_id for p in packs])
    data = [
        serialize_pack(
            p,
            certificates[p.vessel_id],
            vessel_name=p.vessel.name if p.vessel else None,
        )
        for p in packs
    ]
    return PaginatedResponse.build(data, total, paging.page, paging.limit)


@router.get("/{pack_id}", response_model=PreArrivalOut)
async def get_pre_arrival(
    pack_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("prearrival.view")),
):
    """Pack detail. Library certificates not yet on the checklist are
    shown as approved library entries."""
    return await _detail(db, await _get_pack(db, context, pack_id))


@router.post("/", response_model=PreArrivalOut, status_code=201)
async def create_pre_arrival(
    body: PreArrivalCreate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("prearrival.create")),
):
    """Create a pack. The checklist starts with a pointer to every library
    certificate of the vessel that has a file."""
    require_tenant(context)
    vessel = await get_visible_or_404(db, context, Vessel, body.vessel_id, label="Vessel")
    if body.voyage_id:
        voyage = await get_visible_or_404(
            db, context, Voyage, body.voyage_id, label="Voyage", own_rows=False
        )
        if voyage.vessel_id != vessel.id:
            raise BusinessLogicError("Voyage does not belong to the selected vessel")

    existing = await db.execute(
        select(PreArrival.id).where(PreArrival.request_id == body.request_id)
    )
    if existing.first():
        raise ConflictError(f"Request ID '{body.request_id}' is already assigned")

    certificates = await load_certificates(db, [vessel.id])
    pack = PreArrival(
        **body.model_dump(),
        documents=build_initial_checklist(certificates[vessel.id], context.user_id),
        is_locked=False,
        created_by=context.user_id,
        updated_by=context.user_id,
    )
    db.add(pack)
    await db.flush()
    return await _detail(db, pack)


@router.patch("/{pack_id}", response_model=PreArrivalOut)
async def update_pre_arrival(
    pack_id: str,
    body: PreArrivalUpdate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("prearrival.edit")),
):
    """Update pack details. A locked pack only accepts being unlocked."""
    pack = await _get_pack(db, context, pack_id)
    updates = body.model_dump(exclude_unset=True)

    if pack.is_locked and set(updates) - {"is_locked"}:
        _ensure_unlocked(pack)

    for key, value in updates.items():
        if value is None and key in ("port_name", "eta", "status", "is_locked"):
            continue
        setattr(pack, key, value)
    pack.updated_by = context.user_id
    await db.flush()
    return await _detail(db, pack)


@router.delete("/{pack_id}", response_model=MessageResponse)
async def delete_pre_arrival(
    pack_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("prearrival.delete")),
):
    pack = await _get_pack(db, context, pack_id)
    pack.deleted_at = datetime.utcnow()
    pack.updated_by = context.user_id
    await db.flush()
    return MessageResponse(message="Pre-arrival pack deleted")


# ── Documents ────────────────────────────────────────────────

@router.patch("/{pack_id}/documents/{doc_type}", response_model=ChecklistEntry)
async def upload_document(
    pack_id: str,
    doc_type: str,
    body: DocumentUpload,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("prearrival.upload")),
):
    """Record an uploaded document on the checklist.

    Library document types uploaded by someone who may edit vessels also
    replace the vessel's library certificate; the checklist then keeps a
    pointer to it.
    """
    pack = await _get_pack(db, context, pack_id)
    _ensure_unlocked(pack)

    certificate = None
    if doc_type in LIBRARY_DOC_TYPES and context.can("vessels.edit"):
        current = (pack.documents or {}).get(doc_type) or {}
        certificate = await upsert_certificate(
            db,
            pack.vessel_id,
            doc_type,
            name=body.name or current.get("name") or doc_type,
            owner=body.owner or "office",
            file_name=body.file_name,
            file_url=body.file_url,
            note=body.note,
            user_id=context.user_id,
        )

    entry = record_upload(pack, doc_type, body, context.user_id, certificate)
    await db.flush()
    return await _hydrated_entry(db, pack, doc_type, entry)


@router.patch("/{pack_id}/documents/{doc_type}/verify", response_model=ChecklistEntry)
async def verify_document(
    pack_id: str,
    doc_type: str,
    body: DocumentVerify,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("prearrival.verify")),
):
    pack = await _get_pack(db, context, pack_id)
    _ensure_unlocked(pack)

    entry = record_verification(pack, doc_type, body, context.user_id)
    await db.flush()
    return await _hydrated_entry(db, pack, doc_type, entry)
