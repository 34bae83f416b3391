"""User management router.

Endpoints:
    GET    /api/users/          List users in scope (search, status, company)
    GET    /api/users/{id}      User detail
    POST   /api/users/          Create user
    PATCH  /api/users/{id}      Update profile, role, overrides, status
    DELETE /api/users/{id}      Delete user

Non-super-admins only ever see and manage users of their own company, never
see super-admin accounts, and cannot hand out protected roles.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fleetdesk.auth.context import AuthContext
from fleetdesk.auth.deps import require_permission
from fleetdesk.auth.password import hash_password
from fleetdesk.auth.scope import get_visible_or_404, require_tenant, scope_query
from fleetdesk.config import settings
from fleetdesk.database import get_db
from fleetdesk.middleware.exceptions import (
    BusinessLogicError,
    ConflictError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from fleetdesk.models.company import Company
from fleetdesk.models.role import Role
from fleetdesk.models.user import User
from fleetdesk.schemas.common import MessageResponse, PaginatedResponse
from fleetdesk.schemas.user import UserCreate, UserOut, UserUpdate
from fleetdesk.utils.pagination import PageParams, page_params, paginate

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

def _to_out(user: User) -> UserOut:
    out = UserOut.model_validate(user)
    out.role_name = user.role.name if user.role else None
    out.company_name = user.company.name if user.company else None
    return out


def _hide_super_admins(query, context: AuthContext):
    if context.is_super_admin:
        return query
    return query.outerjoin(Role, User.role_id == Role.id).where(
        or_(Role.name.is_(None), func.lower(Role.name) != settings.super_admin_role.lower())
    )


async def _load(db: AsyncSession, user_id: str) -> User:
    result = await db.execute(
        select(User)
        .options(selectinload(User.role), selectinload(User.company))
        .where(User.id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _get_user(db: AsyncSession, context: AuthContext, user_id: str) -> User:
    user = await get_visible_or_404(db, context, User, user_id, label="User")
    user = await _load(db, user.id)
    if not context.is_super_admin and user.role and user.role.name.lower() == settings.super_admin_role.lower():
        raise ResourceNotFoundError("User")
    return user


async def _resolve_role(db: AsyncSession, context: AuthContext, role_id: str | None) -> Role:
    if role_id:
        role = await db.get(Role, role_id)
        if role is None:
            raise ResourceNotFoundError("Role")
    else:
        result = await db.execute(
            select(Role).where(func.lower(Role.name) == settings.default_user_role.lower())
        )
        role = result.scalar_one_or_none()
        if role is None:
            raise BusinessLogicError(f"Default role '{settings.default_user_role}' is not configured")

    if not context.is_super_admin and role.name.lower() in settings.protected_role_names:
        raise PermissionDeniedError()
    return role


async def _resolve_company(
    db: AsyncSession, context: AuthContext, company_id: str | None
) -> str | None:
    """Company a created/updated user belongs to.

    Super-admins may pick any live company (or none); everyone else is
    pinned to their own.
    """
    own = require_tenant(context)
    if own is not None:
        if company_id and company_id != own:
            raise PermissionDeniedError()
        return own

    if company_id is None:
        return None
    company = await db.get(Company, company_id)
    if company is None or company.deleted_at is not None:
        raise ResourceNotFoundError("Company")
    return company.id


async def ensure_unique_email(db: AsyncSession, email: str, exclude_id: str | None = None) -> None:
    query = select(User.id).where(User.email == email)
    if exclude_id:
        query = query.where(User.id != exclude_id)
    if (await db.execute(query)).first():
        raise ConflictError("Email already registered")


# ── Routes ───────────────────────────────────────────────────

@router.get("/", response_model=PaginatedResponse[UserOut])
async def list_users(
    search: str | None = Query(None),
    user_status: str | None = Query(None, alias="status"),
    company_id: str | None = Query(None),
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("users.view")),
):
    """List users. `company_id` narrows the list for super-admins only."""
    query = select(User).options(selectinload(User.role), selectinload(User.company))
    query = await scope_query(db, context, query, User, company_id=company_id)
    query = _hide_super_admins(query, context)
    if search:
        q = f"%{search}%"
        query = query.where(or_(User.email.ilike(q), User.full_name.ilike(q)))
    if user_status and user_status != "all":
        query = query.where(User.status == user_status)
    query = query.order_by(User.created_at.desc())

    users, total = await paginate(db, query, paging)
    return PaginatedResponse.build(
        [_to_out(u) for u in users], total, paging.page, paging.limit
    )


@router.get("/{user_id}", response_model=UserOut)
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("users.view")),
):
    return _to_out(await _get_user(db, context, user_id))


@router.post("/", response_model=UserOut, status_code=201)
async def create_user(
    body: UserCreate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("users.create")),
):
    """Create a user. Role defaults to the standard operations role."""
    email = body.email.lower()
    company_id = await _resolve_company(db, context, body.company_id)
    role = await _resolve_role(db, context, body.role_id)
    await ensure_unique_email(db, email)

    user = User(
        email=email,
        hashed_password=hash_password(body.password),
        full_name=body.full_name,
        phone=body.phone,
        role_id=role.id,
        company_id=company_id,
        additional_permissions=body.additional_permissions,
        excluded_permissions=body.excluded_permissions,
        status=body.status,
    )
    db.add(user)
    await db.flush()
    return _to_out(await _load(db, user.id))


@router.patch("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: str,
    body: UserUpdate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("users.edit")),
):
    """Update a user. Role, override and status changes apply on the
    user's next request; no re-login is needed."""
    user = await _get_user(db, context, user_id)
    updates = body.model_dump(exclude_unset=True)

    if "email" in updates and updates["email"]:
        updates["email"] = updates["email"].lower()
        await ensure_unique_email(db, updates["email"], exclude_id=user.id)
    if "password" in updates:
        password = updates.pop("password")
        if password:
            user.hashed_password = hash_password(password)
    if updates.get("role_id"):
        updates["role_id"] = (await _resolve_role(db, context, updates["role_id"])).id
    if "company_id" in updates:
        updates["company_id"] = await _resolve_company(db, context, updates["company_id"])

    for key, value in updates.items():
        if value is None and key not in ("phone", "company_id"):
            continue
        setattr(user, key, value)
    await db.flush()
    return _to_out(await _load(db, user.id))


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("users.delete")),
):
    if user_id == context.user_id:
        raise BusinessLogicError("You cannot delete your own account")

    user = await _get_user(db, context, user_id)
    await db.delete(user)
    await db.flush()
    return MessageResponse(message="User deleted")
