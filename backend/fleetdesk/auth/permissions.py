"""Permission resolution and the per-request authorization decision.

Design:
  - A Role holds a flat list of permission slugs (stored in the DB).
  - Each User carries two override lists on top of the role:
      additional_permissions → granted beyond the role
      excluded_permissions   → revoked even if the role grants them
  - `resolve_permissions(role, additional, excluded)` computes the
    effective set. Exclusion always wins, including for a slug that also
    appears in `additional`.
  - The `super-admin` role is a tagged bypass (`is_super_admin=True`),
    never a materialized "every slug" set: the catalog can grow while a
    session is alive.
  - `authorize(context, slug)` is the pure decision used by the FastAPI
    guards in fleetdesk.auth.deps.

Permission naming: `<resource>.<action>`, e.g. "voyage.edit", "users.delete".
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from fleetdesk.config import settings

if TYPE_CHECKING:
    from fleetdesk.auth.context import AuthContext
    from fleetdesk.models.role import Role


# ── Effective permissions ───────────────────────────────────

@dataclass(frozen=True)
class EffectivePermissions:
    slugs: frozenset[str] = frozenset()
    is_super_admin: bool = False


def is_super_admin_role(role_name: str | None) -> bool:
    if not role_name:
        return False
    return role_name.strip().lower() == settings.super_admin_role.lower()


def resolve_permissions(
    role: Role | None,
    additional: Iterable[str] | None = None,
    excluded: Iterable[str] | None = None,
) -> EffectivePermissions:
    """Compute effective permissions for a user.

    1. Start with the role's slugs (nothing if the role is missing/inactive).
    2. Add `additional`.
    3. Remove `excluded`.

    Never raises. A missing role yields an empty, non-super-admin result.
    """
    if role is None or not role.is_active:
        base: set[str] = set()
        super_admin = False
    else:
        base = set(role.permissions or [])
        super_admin = is_super_admin_role(role.name)

    effective = (base | set(additional or [])) - set(excluded or [])
    return EffectivePermissions(slugs=frozenset(effective), is_super_admin=super_admin)


# ── Authorization decision ──────────────────────────────────

UNAUTHENTICATED = "unauthenticated"
FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str | None = None


ALLOW = Decision(True)


def authorize(context: AuthContext | None, required: str) -> Decision:
    """Allow or deny one permission slug for a materialized session.

    No side effects; safe to call any number of times per request.
    """
    if context is None:
        return Decision(False, UNAUTHENTICATED)
    # Checked first: super-admin accounts may have no role permissions at all
    if context.is_super_admin:
        return ALLOW
    if required in context.permissions:
        return ALLOW
    return Decision(False, FORBIDDEN)


# ── Catalog (seeded by `python -m fleetdesk.cli seed-permissions`) ──

def _crud(prefix: str, label: str, *, update: str = "edit") -> list[tuple[str, str]]:
    return [
        (f"{prefix}.view", f"View {label}"),
        (f"{prefix}.create", f"Create {label}"),
        (f"{prefix}.{update}", f"Edit {label}"),
        (f"{prefix}.delete", f"Delete {label}"),
    ]


PERMISSION_CATALOG: dict[str, list[tuple[str, str]]] = {
    "Dashboard": [
        ("dashboard.view", "View Dashboard Page"),
        ("stats.noon", "Show Noon Report Count"),
        ("stats.departure", "Show Departure Report Count"),
        ("stats.arrival", "Show Arrival Report Count"),
        ("stats.nor", "Show NOR Report Count"),
        ("stats.cargo_stowage", "Show Cargo Stowage Count"),
        ("stats.cargo_docs", "Show Cargo Docs Count"),
    ],
    "Company Management": _crud("company", "Companies"),
    "User Management": _crud("users", "Users"),
    "Role Management": _crud("roles", "Roles"),
    "Permission Management": _crud("permission", "Permissions", update="update"),
    "Resource Management": _crud("resource", "Resources"),
    "Vessel Management": _crud("vessels", "Vessels"),
    "Voyage Management": _crud("voyage", "Voyages"),
    "Daily Noon Report": _crud("noon", "Noon Reports") + [
        ("reports.history.view", "View Report History"),
    ],
    "Departure Report": _crud("departure", "Departure Reports"),
    "Arrival Report": _crud("arrival", "Arrival Reports"),
    "NOR Report": _crud("nor", "NOR Reports"),
    "Cargo Stowage": _crud("cargo", "Cargo Documents"),
    "Pre-Arrival": _crud("prearrival", "Pre-Arrival Packs") + [
        ("prearrival.upload", "Upload Pre-Arrival Documents"),
        ("prearrival.verify", "Verify Pre-Arrival Documents"),
    ],
    "Job Applications": _crud("jobs", "Crew Applications"),
}

ALL_PERMISSIONS: set[str] = {
    slug for entries in PERMISSION_CATALOG.values() for slug, _ in entries
}
