"""Cargo stowage plans and cargo documents router.

Endpoints:
    GET    /api/cargo-documents/          List documents in scope
    GET    /api/cargo-documents/{id}      Document detail
    POST   /api/cargo-documents/          Record a document
    PATCH  /api/cargo-documents/{id}      Update a document
    DELETE /api/cargo-documents/{id}      Soft delete

Files are stored by the client; this API keeps their metadata only.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.auth.context import AuthContext
from fleetdesk.auth.deps import require_permission
from fleetdesk.auth.scope import get_visible_or_404, scope_query
from fleetdesk.database import get_db
from fleetdesk.models.cargo_document import CargoDocument
from fleetdesk.schemas.cargo_document import (
    CargoDocumentCreate,
    CargoDocumentOut,
    CargoDocumentUpdate,
)
from fleetdesk.schemas.common import MessageResponse, PaginatedResponse
from fleetdesk.services.reports import resolve_vessel_voyage
from fleetdesk.utils.pagination import PageParams, page_params, paginate

router = APIRouter()


@router.get("/", response_model=PaginatedResponse[CargoDocumentOut])
async def list_cargo_documents(
    search: str | None = Query(None),
    vessel_id: str | None = Query(None),
    voyage_id: str | None = Query(None),
    document_type: str | None = Query(None),
    port_type: str | None = Query(None),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
    company_id: str | None = Query(None),
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("cargo.view")),
):
    query = select(CargoDocument).where(CargoDocument.deleted_at.is_(None))
    query = await scope_query(db, context, query, CargoDocument, company_id=company_id)

    if search:
        q = f"%{search}%"
        query = query.where(or_(CargoDocument.port_name.ilike(q), CargoDocument.remarks.ilike(q)))
    if vessel_id:
        query = query.where(CargoDocument.vessel_id == vessel_id)
    if voyage_id:
        query = query.where(CargoDocument.voyage_id == voyage_id)
    if document_type and document_type != "all":
        query = query.where(CargoDocument.document_type == document_type)
    if port_type and port_type != "all":
        query = query.where(CargoDocument.port_type == port_type)
    if date_from:
        query = query.where(CargoDocument.document_date >= date_from)
    if date_to:
        query = query.where(CargoDocument.document_date <= date_to)
    query = query.order_by(CargoDocument.document_date.desc())

    documents, total = await paginate(db, query, paging)
    return PaginatedResponse.build(
        [CargoDocumentOut.model_validate(d) for d in documents], total, paging.page, paging.limit
    )


@router.get("/{document_id}", response_model=CargoDocumentOut)
async def get_cargo_document(
    document_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("cargo.view")),
):
    document = await get_visible_or_404(
        db, context, CargoDocument, document_id, label="Cargo document"
    )
    return CargoDocumentOut.model_validate(document)


@router.post("/", response_model=CargoDocumentOut, status_code=201)
async def create_cargo_document(
    body: CargoDocumentCreate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("cargo.create")),
):
    await resolve_vessel_voyage(db, context, body.vessel_id, body.voyage_id)

    document = CargoDocument(
        **body.model_dump(),
        created_by=context.user_id,
        updated_by=context.user_id,
    )
    db.add(document)
    await db.flush()
    return CargoDocumentOut.model_validate(document)


@router.patch("/{document_id}", response_model=CargoDocumentOut)
async def update_cargo_document(
    document_id: str,
    body: CargoDocumentUpdate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("cargo.edit")),
):
    document = await get_visible_or_404(
        db, context, CargoDocument, document_id, label="Cargo document"
    )
    for key, value in body.model_dump(exclude_unset=True).items():
        if value is None and key in ("port_name", "port_type", "document_type", "document_date", "status"):
            continue
        setattr(document, key, value)
    document.updated_by = context.user_id
    await db.flush()
    return CargoDocumentOut.model_validate(document)


@router.delete("/{document_id}", response_model=MessageResponse)
async def delete_cargo_document(
    document_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("cargo.delete")),
):
    document = await get_visible_or_404(
        db, context, CargoDocument, document_id, label="Cargo document"
    )
    document.deleted_at = datetime.utcnow()
    document.updated_by = context.user_id
    await db.flush()
    return MessageResponse(message="Cargo document deleted")
