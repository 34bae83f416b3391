"""Request-scoped authorization context.

`materialize_session()` rebuilds the caller's identity from the database on
every request: user, role, company and the permission catalog are read
fresh, so role edits, override edits and deactivations apply to the very
next request without a new login. Nothing here is cached across requests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fleetdesk.auth.permissions import resolve_permissions
from fleetdesk.config import settings
from fleetdesk.models.company import Company
from fleetdesk.models.permission import Permission
from fleetdesk.models.user import User

logger = logging.getLogger("fleetdesk.auth")


class SessionInvalidError(Exception):
    """The session cannot be materialized; treat the caller as unauthenticated."""


@dataclass(frozen=True)
class AuthContext:
    user_id: str
    role_name: str | None
    permissions: frozenset[str]
    is_super_admin: bool
    company_id: str | None
    status: str
    own_rows_only: bool = False

    def can(self, slug: str) -> bool:
        return self.is_super_admin or slug in self.permissions


async def _catalog_slugs(db: AsyncSession) -> set[str]:
    """Every slug in the catalog, active or deprecated."""
    result = await db.execute(select(Permission.slug))
    return {row[0] for row in result.all()}


async def materialize_session(db: AsyncSession, user_id: str) -> AuthContext:
    """Build the AuthContext for `user_id` from current database state.

    Raises SessionInvalidError when the user is gone or not active, when a
    non-super-admin's company is missing, inactive or soft-deleted, or when
    the database cannot be reached.
    """
    try:
        result = await db.execute(
            select(User)
            .options(selectinload(User.role), selectinload(User.company))
            .where(User.id == user_id)
        )
        user = result.scalar_one_or_none()
        if user is None:
            raise SessionInvalidError("user not found")
        if not user.is_active:
            raise SessionInvalidError(f"user status is {user.status}")

        effective = resolve_permissions(
            user.role, user.additional_permissions, user.excluded_permissions
        )

        if not effective.is_super_admin and user.company_id is not None:
            company: Company | None = user.company
            if company is None or not company.is_usable:
                raise SessionInvalidError("company missing, inactive or deleted")

        slugs = effective.slugs
        if settings.enforce_permission_catalog and not effective.is_super_admin and slugs:
            known = await _catalog_slugs(db)
            unknown = slugs - known
            if unknown:
                logger.warning(
                    "Dropping %d uncatalogued permission(s) for user %s",
                    len(unknown),
                    user.id,
                    extra={"user_id": user.id, "slugs": sorted(unknown)},
                )
            slugs = slugs & known
    except (SQLAlchemyError, OSError) as exc:
        logger.error(
            "Session materialization failed: %s", exc, extra={"user_id": user_id}
        )
        raise SessionInvalidError("database unavailable") from exc

    role_name = user.role.name if user.role else None
    return AuthContext(
        user_id=user.id,
        role_name=role_name,
        permissions=slugs,
        is_super_admin=effective.is_super_admin,
        company_id=user.company_id,
        status=user.status,
        own_rows_only=bool(
            role_name
            and not effective.is_super_admin
            and role_name.lower() in settings.own_rows_role_names
        ),
    )
