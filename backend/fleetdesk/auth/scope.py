"""Tenant scope filter.

Every list, count and by-id query passes through `scope_query()` before
ordering, pagination or aggregation, so totals only ever count visible rows.

Models declare how they reach their company with `__tenant_column__`:

    "id"          → the Company table itself
    "company_id"  → direct link (vessels, users)
    "vessel_id"   → via the owning vessel (voyages, reports, documents)

Vessel-linked rows are scoped in two phases: resolve the company's vessel
ids, then filter on `vessel_id IN (...)`.

Fail closed: a non-super-admin without a company gets a query that matches
nothing, never an unrestricted one.
"""

from __future__ import annotations

from sqlalchemy import Select, false, select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.auth.context import AuthContext
from fleetdesk.middleware.exceptions import (
    BusinessLogicError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from fleetdesk.models.company import Company
from fleetdesk.models.vessel import Vessel

ALL_COMPANIES = "all"


async def company_vessel_ids(db: AsyncSession, company_id: str) -> list[str]:
    """Ids of the company's vessels that are not soft-deleted."""
    result = await db.execute(
        select(Vessel.id).where(
            Vessel.company_id == company_id,
            Vessel.deleted_at.is_(None),
        )
    )
    return [row[0] for row in result.all()]


def _tenant_column_name(model) -> str:
    name = getattr(model, "__tenant_column__", None)
    if name is None:
        raise TypeError(f"{model.__name__} is not tenant-scoped")
    return name


def target_company(context: AuthContext, company_id: str | None = None) -> str | None:
    """The company a query should be narrowed to, or None for "no narrowing".

    Only super-admins may pick a company; everyone else is pinned to theirs.
    """
    if context.is_super_admin:
        if company_id and company_id != ALL_COMPANIES:
            return company_id
        return None
    return context.company_id


async def scope_query(
    db: AsyncSession,
    context: AuthContext,
    query: Select,
    model,
    *,
    company_id: str | None = None,
    own_rows: bool = True,
) -> Select:
    """Narrow `query` over `model` to the rows `context` may see.

    `company_id` is an explicit company selector, honoured for super-admins
    only. `own_rows=False` skips the created-by restriction for own-rows
    roles (used when validating references, not when listing).
    """
    column_name = _tenant_column_name(model)

    if not context.is_super_admin and context.company_id is None:
        return query.where(false())

    target = target_company(context, company_id)
    if target is not None:
        column = getattr(model, column_name)
        if column_name == "vessel_id":
            vessel_ids = await company_vessel_ids(db, target)
            query = query.where(column.in_(vessel_ids))
        else:
            query = query.where(column == target)

    if (
        own_rows
        and context.own_rows_only
        and column_name == "vessel_id"
        and hasattr(model, "created_by")
    ):
        query = query.where(model.created_by == context.user_id)

    return query


async def get_visible_or_404(
    db: AsyncSession,
    context: AuthContext,
    model,
    obj_id: str,
    *,
    label: str,
    own_rows: bool = True,
    include_deleted: bool = False,
):
    """Load one row by id inside the caller's scope.

    Rows owned by another tenant raise the same 404 as rows that do not
    exist, so ids cannot be probed across tenants.
    """
    query = select(model).where(model.id == obj_id)
    if not include_deleted and hasattr(model, "deleted_at"):
        query = query.where(model.deleted_at.is_(None))
    query = await scope_query(db, context, query, model, own_rows=own_rows)

    result = await db.execute(query)
    obj = result.scalar_one_or_none()
    if obj is None:
        raise ResourceNotFoundError(label)
    return obj


def require_tenant(context: AuthContext) -> str | None:
    """Return the company new records are created under.

    Super-admins return None (they must name a company explicitly).
    Non-super-admins without a company cannot create tenant records.
    """
    if context.is_super_admin:
        return None
    if context.company_id is None:
        raise PermissionDeniedError("No company assigned")
    return context.company_id


async def owning_company(db: AsyncSession, context: AuthContext, requested: str | None) -> str:
    """Company a new company-owned record is created under.

    Tenants are pinned to their own company and get a 403 for naming
    another one. Super-admins must name a usable company.
    """
    own = require_tenant(context)
    if own is not None:
        if requested and requested != own:
            raise PermissionDeniedError()
        return own

    if not requested:
        raise BusinessLogicError("company_id is required")
    company = await db.get(Company, requested)
    if company is None or not company.is_usable:
        raise ResourceNotFoundError("Company")
    return company.id
