"""Permission catalog router.

Endpoints:
    GET    /api/permissions/            List permissions (search, resource, status)
    GET    /api/permissions/catalog     Assignable permissions grouped by resource
    GET    /api/permissions/{id}        Permission detail
    POST   /api/permissions/            Create permission
    PATCH  /api/permissions/{id}        Update name/description/resource/status
    DELETE /api/permissions/{id}        Delete permission

A slug cannot be renamed: roles hold slugs by value. Retire a slug by
marking it deprecated; roles that already hold it keep working.
"""

from collections import defaultdict

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fleetdesk.auth.context import AuthContext
from fleetdesk.auth.deps import require_permission
from fleetdesk.database import get_db
from fleetdesk.middleware.exceptions import ConflictError, ResourceNotFoundError
from fleetdesk.models.permission import Permission, Resource
from fleetdesk.schemas.common import MessageResponse, PaginatedResponse
from fleetdesk.schemas.permission import (
    CatalogEntry,
    CatalogGroup,
    PermissionCreate,
    PermissionOut,
    PermissionUpdate,
)
from fleetdesk.utils.pagination import PageParams, page_params, paginate

router = APIRouter()


def _to_out(permission: Permission) -> PermissionOut:
    out = PermissionOut.model_validate(permission)
    out.resource_name = permission.resource.name if permission.resource else None
    return out


async def _get_permission(db: AsyncSession, permission_id: str) -> Permission:
    result = await db.execute(
        select(Permission)
        .options(selectinload(Permission.resource))
        .where(Permission.id == permission_id)
        .execution_options(populate_existing=True)
    )
    permission = result.scalar_one_or_none()
    if not permission:
        raise ResourceNotFoundError("Permission")
    return permission


async def _get_live_resource(db: AsyncSession, resource_id: str) -> Resource:
    result = await db.execute(
        select(Resource).where(Resource.id == resource_id, Resource.deleted_at.is_(None))
    )
    resource = result.scalar_one_or_none()
    if not resource:
        raise ResourceNotFoundError("Resource")
    return resource


@router.get("/", response_model=PaginatedResponse[PermissionOut])
async def list_permissions(
    search: str | None = Query(None),
    resource_id: str | None = Query(None),
    permission_status: str | None = Query(None, alias="status"),
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    _ctx: AuthContext = Depends(require_permission("permission.view")),
):
    query = select(Permission).options(selectinload(Permission.resource))
    if search:
        q = f"%{search}%"
        query = query.where(or_(Permission.slug.ilike(q), Permission.name.ilike(q)))
    if resource_id:
        query = query.where(Permission.resource_id == resource_id)
    if permission_status and permission_status != "all":
        query = query.where(Permission.status == permission_status)
    query = query.order_by(Permission.slug)

    permissions, total = await paginate(db, query, paging)
    return PaginatedResponse.build(
        [_to_out(p) for p in permissions], total, paging.page, paging.limit
    )


@router.get("/catalog", response_model=list[CatalogGroup])
async def permission_catalog(
    db: AsyncSession = Depends(get_db),
    _ctx: AuthContext = Depends(require_permission("roles.view")),
):
    """Active permissions grouped by their live resource, for role editors."""
    result = await db.execute(
        select(Permission, Resource)
        .join(Resource, Permission.resource_id == Resource.id)
        .where(
            Permission.status == "active",
            Resource.deleted_at.is_(None),
            Resource.status == "active",
        )
        .order_by(Resource.name, Permission.slug)
    )

    groups: dict[str, CatalogGroup] = {}
    entries: dict[str, list[CatalogEntry]] = defaultdict(list)
    for permission, resource in result.all():
        if resource.id not in groups:
            groups[resource.id] = CatalogGroup(
                resource_id=resource.id, resource=resource.name, permissions=[]
            )
        entries[resource.id].append(CatalogEntry(
            slug=permission.slug,
            name=permission.name,
            description=permission.description,
        ))

    for resource_id, group in groups.items():
        group.permissions = entries[resource_id]
    return list(groups.values())


@router.get("/{permission_id}", response_model=PermissionOut)
async def get_permission(
    permission_id: str,
    db: AsyncSession = Depends(get_db),
    _ctx: AuthContext = Depends(require_permission("permission.view")),
):
    return _to_out(await _get_permission(db, permission_id))


@router.post("/", response_model=PermissionOut, status_code=201)
async def create_permission(
    body: PermissionCreate,
    db: AsyncSession = Depends(get_db),
    _ctx: AuthContext = Depends(require_permission("permission.create")),
):
    await _get_live_resource(db, body.resource_id)
    existing = await db.execute(select(Permission.id).where(Permission.slug == body.slug))
    if existing.first():
        raise ConflictError(f"Permission '{body.slug}' already exists")

    permission = Permission(**body.model_dump())
    db.add(permission)
    await db.flush()
    return _to_out(await _get_permission(db, permission.id))


@router.patch("/{permission_id}", response_model=PermissionOut)
async def update_permission(
    permission_id: str,
    body: PermissionUpdate,
    db: AsyncSession = Depends(get_db),
    _ctx: AuthContext = Depends(require_permission("permission.update")),
):
    permission = await _get_permission(db, permission_id)
    updates = body.model_dump(exclude_unset=True, exclude_none=True)
    if "resource_id" in updates:
        await _get_live_resource(db, updates["resource_id"])

    for key, value in updates.items():
        setattr(permission, key, value)
    await db.flush()
    return _to_out(await _get_permission(db, permission_id))


@router.delete("/{permission_id}", response_model=MessageResponse)
async def delete_permission(
    permission_id: str,
    db: AsyncSession = Depends(get_db),
    _ctx: AuthContext = Depends(require_permission("permission.delete")),
):
    """Delete a catalog entry.

    Roles still listing the slug lose it on their holders' next request,
    because sessions only keep slugs present in the catalog.
    """
    permission = await _get_permission(db, permission_id)
    await db.delete(permission)
    await db.flush()
    return MessageResponse(message="Permission deleted")
