"""Permission catalog seeding and the startup guard audit."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.auth.permissions import PERMISSION_CATALOG
from fleetdesk.models.permission import Permission, Resource

logger = logging.getLogger(__name__)


async def seed_catalog(db: AsyncSession) -> int:
    """Insert missing resources and permissions. Existing rows are left alone.

    Returns the number of permissions created.
    """
    result = await db.execute(select(Resource))
    resources = {r.name: r for r in result.scalars().all()}
    result = await db.execute(select(Permission.slug))
    existing = {row[0] for row in result.all()}

    created = 0
    for group, entries in PERMISSION_CATALOG.items():
        resource = resources.get(group)
        if resource is None:
            resource = Resource(name=group)
            db.add(resource)
            await db.flush()
            resources[group] = resource

        for slug, description in entries:
            if slug in existing:
                continue
            db.add(Permission(
                slug=slug,
                name=description,
                description=description,
                resource_id=resource.id,
            ))
            existing.add(slug)
            created += 1

    await db.flush()
    return created


async def audit_guard_slugs(db: AsyncSession, guard_slugs: set[str]) -> set[str]:
    """Warn about route guards whose slug is not in the catalog.

    Such routes are reachable by super-admins only until the slug is seeded.
    Returns the missing slugs.
    """
    result = await db.execute(select(Permission.slug))
    known = {row[0] for row in result.all()}
    missing = guard_slugs - known
    for slug in sorted(missing):
        logger.warning(
            "Route guard permission %r is not in the catalog; only super-admins can pass it",
            slug,
            extra={"permission": slug},
        )
    return missing
