"""Role management router.

Endpoints:
    GET    /api/roles/          List roles (search, status, paginated)
    GET    /api/roles/{id}      Role detail
    POST   /api/roles/          Create role
    PATCH  /api/roles/{id}      Update name, permissions or status
    DELETE /api/roles/{id}      Delete role (rejected while assigned)

Protected roles (super-admin, admin) are invisible to non-super-admins:
they are left out of listings and every by-id call on them is a 404.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.auth.context import AuthContext
from fleetdesk.auth.deps import require_permission
from fleetdesk.config import settings
from fleetdesk.database import get_db
from fleetdesk.middleware.exceptions import (
    ConflictError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from fleetdesk.models.role import Role
from fleetdesk.models.user import User
from fleetdesk.schemas.common import MessageResponse, PaginatedResponse
from fleetdesk.schemas.role import RoleCreate, RoleOut, RoleUpdate
from fleetdesk.utils.pagination import PageParams, page_params, paginate

router = APIRouter()


def _hide_protected(query, context: AuthContext):
    if context.is_super_admin:
        return query
    return query.where(func.lower(Role.name).not_in(sorted(settings.protected_role_names)))


def _check_protected_name(name: str, context: AuthContext) -> None:
    if not context.is_super_admin and name.lower() in settings.protected_role_names:
        raise PermissionDeniedError()


async def _get_role(db: AsyncSession, role_id: str, context: AuthContext) -> Role:
    query = _hide_protected(select(Role).where(Role.id == role_id), context)
    role = (await db.execute(query)).scalar_one_or_none()
    if not role:
        raise ResourceNotFoundError("Role")
    return role


async def _ensure_unique_name(db: AsyncSession, name: str, exclude_id: str | None = None) -> None:
    query = select(Role.id).where(func.lower(Role.name) == name.lower())
    if exclude_id:
        query = query.where(Role.id != exclude_id)
    if (await db.execute(query)).first():
        raise ConflictError(f"Role '{name}' already exists")


@router.get("/", response_model=PaginatedResponse[RoleOut])
async def list_roles(
    search: str | None = Query(None),
    role_status: str | None = Query(None, alias="status"),
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("roles.view")),
):
    query = _hide_protected(select(Role), context)
    if search:
        query = query.where(Role.name.ilike(f"%{search}%"))
    if role_status and role_status != "all":
        query = query.where(Role.status == role_status)
    query = query.order_by(Role.name)

    roles, total = await paginate(db, query, paging)
    return PaginatedResponse.build(
        [RoleOut.model_validate(r) for r in roles], total, paging.page, paging.limit
    )


@router.get("/{role_id}", response_model=RoleOut)
async def get_role(
    role_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("roles.view")),
):
    return RoleOut.model_validate(await _get_role(db, role_id, context))


@router.post("/", response_model=RoleOut, status_code=201)
async def create_role(
    body: RoleCreate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("roles.create")),
):
    """Create a role. Names are unique regardless of case."""
    _check_protected_name(body.name, context)
    await _ensure_unique_name(db, body.name)

    role = Role(name=body.name, permissions=body.permissions, status=body.status)
    db.add(role)
    await db.flush()
    await db.refresh(role)
    return RoleOut.model_validate(role)


@router.patch("/{role_id}", response_model=RoleOut)
async def update_role(
    role_id: str,
    body: RoleUpdate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("roles.edit")),
):
    """Update a role. Holders see the change on their next request."""
    role = await _get_role(db, role_id, context)
    updates = body.model_dump(exclude_unset=True)

    if updates.get("name"):
        _check_protected_name(updates["name"], context)
        await _ensure_unique_name(db, updates["name"], exclude_id=role.id)

    for key, value in updates.items():
        if value is not None:
            setattr(role, key, value)
    await db.flush()
    await db.refresh(role)
    return RoleOut.model_validate(role)


@router.delete("/{role_id}", response_model=MessageResponse)
async def delete_role(
    role_id: str,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(require_permission("roles.delete")),
):
    role = await _get_role(db, role_id, context)

    in_use = await db.scalar(select(func.count(User.id)).where(User.role_id == role.id))
    if in_use:
        raise ConflictError(
            f"Role is assigned to {in_use} user(s) and cannot be deleted",
            error_code="ROLE_IN_USE",
        )

    await db.delete(role)
    await db.flush()
    return MessageResponse(message="Role deleted")
