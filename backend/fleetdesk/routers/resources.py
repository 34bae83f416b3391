"""Permission resource (group) router.

Endpoints:
    GET    /api/resources/          List resources
    GET    /api/resources/{id}      Resource detail
    POST   /api/resources/          Create resource
    PATCH  /api/resources/{id}      Rename / change status
    DELETE /api/resources/{id}      Soft delete (rejected while it has permissions)
"""

from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.auth.context import AuthContext
from fleetdesk.auth.deps import require_permission
from fleetdesk.database import get_db
from fleetdesk.middleware.exceptions import ConflictError, ResourceNotFoundError
from fleetdesk.models.permission import Permission, Resource
from fleetdesk.schemas.common import MessageResponse, PaginatedResponse
from fleetdesk.schemas.permission import ResourceCreate, ResourceOut, ResourceUpdate
from fleetdesk.utils.pagination import PageParams, page_params, paginate

router = APIRouter()


async def _get_resource(db: AsyncSession, resource_id: str) -> Resource:
    result = await db.execute(
        select(Resource).where(Resource.id == resource_id, Resource.deleted_at.is_(None))
    )
    resource = result.scalar_one_or_none()
    if not resource:
        raise ResourceNotFoundError("Resource")
    return resource


async def _ensure_unique_name(db: AsyncSession, name: str, exclude_id: str | None = None) -> None:
    query = select(Resource.id).where(func.lower(Resource.name) == name.lower())
    if exclude_id:
        query = query.where(Resource.id != exclude_id)
    if (await db.execute(query)).first():
        raise ConflictError(f"Resource '{name}' already exists")


@router.get("/", response_model=PaginatedResponse[ResourceOut])
async def list_resources(
    search: str | None = Query(None),
    paging: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    _ctx: AuthContext = Depends(require_permission("resource.view")),
):
    query = select(Resource).where(Resource.deleted_at.is_(None))
    if search:
        query = query.where(Resource.name.ilike(f"%{search}%"))
    query = query.order_by(Resource.name)

    resources, total = await paginate(db, query, paging)
    return PaginatedResponse.build(
        [ResourceOut.model_validate(r) for r in resources], total, paging.page, paging.limit
    )


@router.get("/{resource_id}", response_model=ResourceOut)
async def get_resource(
    resource_id: str,
    db: AsyncSession = Depends(get_db),
    _ctx: AuthContext = Depends(require_permission("resource.view")),
):
    return ResourceOut.model_validate(await _get_resource(db, resource_id))


@router.post("/", response_model=ResourceOut, status_code=201)
async def create_resource(
    body: ResourceCreate,
    db: AsyncSession = Depends(get_db),
    _ctx: AuthContext = Depends(require_permission("resource.create")),
):
    await _ensure_unique_name(db, body.name)
    resource = Resource(**body.model_dump())
    db.add(resource)
    await db.flush()
    return ResourceOut.model_validate(resource)


@router.patch("/{resource_id}", response_model=ResourceOut)
async def update_resource(
    resource_id: str,
    body: ResourceUpdate,
    db: AsyncSession = Depends(get_db),
    _ctx: AuthContext = Depends(require_permission("resource.edit")),
):
    resource = await _get_resource(db, resource_id)
    updates = body.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in updates:
        await _ensure_unique_name(db, updates["name"], exclude_id=resource.id)

    for key, value in updates.items():
        setattr(resource, key, value)
    await db.flush()
    return ResourceOut.model_validate(resource)


@router.delete("/{resource_id}", response_model=MessageResponse)
async def delete_resource(
    resource_id: str,
    db: AsyncSession = Depends(get_db),
    _ctx: AuthContext = Depends(require_permission("resource.delete")),
):
    resource = await _get_resource(db, resource_id)

    linked = await db.scalar(
        select(func.count(Permission.id)).where(Permission.resource_id == resource.id)
    )
    if linked:
        raise ConflictError(
            f"Resource still groups {linked} permission(s)",
            error_code="RESOURCE_IN_USE",
        )

    resource.deleted_at = datetime.utcnow()
    await db.flush()
    return MessageResponse(message="Resource deleted")
