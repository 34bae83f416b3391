"""Crew applications router (seafarer CVs and the hiring workflow).

Endpoints:
    GET    /api/applications/                 List applications in scope
    GET    /api/applications/{id}             Application detail + admin notes
    POST   /api/applications/                 Create (admin-entered CV)
    PATCH  /api/applications/{id}             Update fields / workflow status
    POST   /api/applications/{id}/notes       Append an internal admin note
    DELETE /api/applications/{id}             Soft delete

Applications belong to a company. Tenants only ever see and write their
own company's; super-admins pick one with `company_id`.
"""

from datetime import date, datetime, timedelta

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.auth.context import AuthContext
from fleetdesk.auth.deps import require_permission
from fleetdesk.auth.scope import get_visible_or_404, owning_company, scope_query
from fleetdesk.database import get_db
from fleetdesk.middleware.exceptions import ConflictError
from fleetdesk.models.crew_application import CrewApplication
from fleetdesk.schemas.common import MessageResponse, PaginatedResponse
from fleetdesk.schemas.crew_application import (
    AdminNoteCreate,
    ApplicationCreate,
    ApplicationDetailOut,
    ApplicationOut,
    ApplicationUpdate,
)
from fleetdesk.utils.pagination import PageParams, page_params, paginate

router = APIRouter()

_LIST_FIELDS = (
    "licences",
    "passports",
    "seamans_books",
    "visas",
    "endorsements",
    "stcw_certificates",
    "other_certificates",
    "extra_docs",
    "sea_experience",
)
_JSON_FIELDS = ("resume", "next_of_kin", *_LIST_FIELDS)

# Columns a PATCH may not null out
_REQUIRED = {
    "first_name", "last_name", "rank", "nationality", "date_of_birth",
    "present_address", "email", "status", "languages", *_LIST_FIELDS,
}


def _dump(body: ApplicationCreate | ApplicationUpdate, **kwargs) -> dict:
    """model_dump with the JSON columns in JSON mode (entries carry dates)."""
    data = body.model_dump(**kwargs)
    as_json = body.model_dump(mode="json", **kwargs)
    for key in _JSON_FIELDS:
        if key in data:
            data[key] = as_json[key]
    return data


async def _ensure_unique_email(
    db: AsyncSession, company_id: str, email: str, exclude_id: str | None = None
) -> None:
    query = select(CrewApplication.id).where(
        CrewApplication.company_id == company_id,
        CrewApplication.email == email,
    )
    if exclude_id:
        query = query.where(CrewApplication.id != exclude_id)
    if (await db.execute(query)).first():
        raise ConflictError("A crew member with this email already exists in this company")


@router.get("/", response_model=PaginatedResponse[ApplicationOut])
async def list_applications(
    search: str | None = Query(None),
    application_status: str | None = Query(None, alias="status"),
    rank: str | None = Query(None),
    nationality: str | None = Query(None),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    company_id: str | None = Query(None),
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("jobs.view")),
):
    """List applications, newest first. Admin notes are never listed.

    `search` matches name, email, rank or nationality. `date_to` includes
    the whole day.
    """
    query = select(CrewApplication).where(CrewApplication.deleted_at.is_(None))
    query = await scope_query(db, context, query, CrewApplication, company_id=company_id)

    if application_status and application_status != "all":
        query = query.where(CrewApplication.status == application_status)
    if rank and rank.strip():
        query = query.where(CrewApplication.rank.ilike(f"%{rank.strip()}%"))
    if nationality and nationality.strip():
        query = query.where(CrewApplication.nationality.ilike(f"%{nationality.strip()}%"))
    if search and search.strip():
        q = f"%{search.strip()}%"
        query = query.where(or_(
            CrewApplication.first_name.ilike(q),
            CrewApplication.last_name.ilike(q),
            CrewApplication.email.ilike(q),
            CrewApplication.rank.ilike(q),
            CrewApplication.nationality.ilike(q),
        ))
    if date_from:
        query = query.where(CrewApplication.created_at >= datetime.combine(date_from, datetime.min.time()))
    if date_to:
        end = datetime.combine(date_to, datetime.min.time()) + timedelta(days=1)
        query = query.where(CrewApplication.created_at < end)
    query = query.order_by(CrewApplication.created_at.desc())

    applications, total = await paginate(db, query, paging)
    return PaginatedResponse.build(
        [ApplicationOut.model_validate(a) for a in applications], total, paging.page, paging.limit
    )


@router.get("/{application_id}", response_model=ApplicationDetailOut)
async def get_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("jobs.view")),
):
    application = await get_visible_or_404(
        db, context, CrewApplication, application_id, label="Application"
    )
    return ApplicationDetailOut.model_validate(application)


@router.post("/", response_model=ApplicationDetailOut, status_code=201)
async def create_application(
    body: ApplicationCreate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("jobs.create")),
):
    company_id = await owning_company(db, context, body.company_id)
    email = body.email.lower()
    await _ensure_unique_email(db, company_id, email)

    data = _dump(body, exclude={"company_id", "email"})
    application = CrewApplication(
        **data,
        company_id=company_id,
        email=email,
        form_source="admin_created",
        created_by=context.user_id,
        updated_by=context.user_id,
    )
    db.add(application)
    await db.flush()
    await db.refresh(application)
    return ApplicationDetailOut.model_validate(application)


@router.patch("/{application_id}", response_model=ApplicationDetailOut)
async def update_application(
    application_id: str,
    body: ApplicationUpdate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("jobs.edit")),
):
    application = await get_visible_or_404(
        db, context, CrewApplication, application_id, label="Application"
    )

    updates = _dump(body, exclude_unset=True)
    if updates.get("email"):
        updates["email"] = updates["email"].lower()
        if updates["email"] != application.email:
            await _ensure_unique_email(
                db, application.company_id, updates["email"], exclude_id=application.id
            )

    for key, value in updates.items():
        if value is None and key in _REQUIRED:
            continue
        setattr(application, key, value)
    application.last_edited_by = context.user_id
    application.updated_by = context.user_id
    await db.flush()
    await db.refresh(application)
    return ApplicationDetailOut.model_validate(application)


@router.post("/{application_id}/notes", response_model=ApplicationDetailOut)
async def add_admin_note(
    application_id: str,
    body: AdminNoteCreate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("jobs.edit")),
):
    application = await get_visible_or_404(
        db, context, CrewApplication, application_id, label="Application"
    )
    note = {
        "note": body.note,
        "added_by": context.user_id,
        "added_at": datetime.utcnow().isoformat(),
    }
    # Assign a new list so SQLAlchemy detects the JSON change
    application.admin_notes = [*(application.admin_notes or []), note]
    application.updated_by = context.user_id
    await db.flush()
    await db.refresh(application)
    return ApplicationDetailOut.model_validate(application)


@router.delete("/{application_id}", response_model=MessageResponse)
async def delete_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("jobs.delete")),
):
    application = await get_visible_or_404(
        db, context, CrewApplication, application_id, label="Application"
    )
    application.deleted_at = datetime.utcnow()
    application.updated_by = context.user_id
    await db.flush()
    return MessageResponse(message="Application deleted")
