"""Company (tenant) management router.

Endpoints:
    GET    /api/companies/          List companies in scope
    GET    /api/companies/{id}      Company detail
    POST   /api/companies/          Create company (super-admin)
    PATCH  /api/companies/{id}      Update company
    DELETE /api/companies/{id}      Soft delete (super-admin)

Deactivating or deleting a company ends every session of its users on
their next request.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.auth.context import AuthContext
from fleetdesk.auth.deps import require_permission
from fleetdesk.auth.scope import get_visible_or_404, scope_query
from fleetdesk.database import get_db
from fleetdesk.middleware.exceptions import ConflictError, PermissionDeniedError
from fleetdesk.models.company import Company
from fleetdesk.schemas.common import MessageResponse, PaginatedResponse
from fleetdesk.schemas.company import CompanyCreate, CompanyOut, CompanyUpdate
from fleetdesk.utils.pagination import PageParams, page_params, paginate

router = APIRouter()


async def _ensure_unique_email(db: AsyncSession, email: str, exclude_id: str | None = None) -> None:
    query = select(Company.id).where(Company.email == email)
    if exclude_id:
        query = query.where(Company.id != exclude_id)
    if (await db.execute(query)).first():
        raise ConflictError("A company with this email already exists")


@router.get("/", response_model=PaginatedResponse[CompanyOut])
async def list_companies(
    search: str | None = Query(None),
    company_status: str | None = Query(None, alias="status"),
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("company.view")),
):
    query = select(Company).where(Company.deleted_at.is_(None))
    query = await scope_query(db, context, query, Company)
    if search:
        q = f"%{search}%"
        query = query.where(or_(Company.name.ilike(q), Company.email.ilike(q)))
    if company_status and company_status != "all":
        query = query.where(Company.status == company_status)
    query = query.order_by(Company.name)

    companies, total = await paginate(db, query, paging)
    return PaginatedResponse.build(
        [CompanyOut.model_validate(c) for c in companies], total, paging.page, paging.limit
    )


@router.get("/{company_id}", response_model=CompanyOut)
async def get_company(
    company_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("company.view")),
):
    company = await get_visible_or_404(db, context, Company, company_id, label="Company")
    return CompanyOut.model_validate(company)


@router.post("/", response_model=CompanyOut, status_code=201)
async def create_company(
    body: CompanyCreate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("company.create")),
):
    """Create a tenant. Only super-admins operate across tenants."""
    if not context.is_super_admin:
        raise PermissionDeniedError()
    email = body.email.lower()
    await _ensure_unique_email(db, email)

    company = Company(
        **body.model_dump(exclude={"email"}),
        email=email,
        created_by=context.user_id,
        updated_by=context.user_id,
    )
    db.add(company)
    await db.flush()
    return CompanyOut.model_validate(company)


@router.patch("/{company_id}", response_model=CompanyOut)
async def update_company(
    company_id: str,
    body: CompanyUpdate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("company.edit")),
):
    company = await get_visible_or_404(db, context, Company, company_id, label="Company")
    updates = body.model_dump(exclude_unset=True, exclude_none=True)

    if "status" in updates and not context.is_super_admin:
        # Tenant status is managed by super-admins only
        raise PermissionDeniedError()
    if "email" in updates:
        updates["email"] = updates["email"].lower()
        await _ensure_unique_email(db, updates["email"], exclude_id=company.id)

    for key, value in updates.items():
        setattr(company, key, value)
    company.updated_by = context.user_id
    await db.flush()
    return CompanyOut.model_validate(company)


@router.delete("/{company_id}", response_model=MessageResponse)
async def delete_company(
    company_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("company.delete")),
):
    if not context.is_super_admin:
        raise PermissionDeniedError()
    company = await get_visible_or_404(db, context, Company, company_id, label="Company")
    company.deleted_at = datetime.utcnow()
    company.updated_by = context.user_id
    await db.flush()
    return MessageResponse(message="Company deleted")
