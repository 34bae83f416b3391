"""FastAPI dependencies for authentication and authorization.

Dependencies:
  get_auth_context        → decode JWT, materialize the session from the DB
  require_permission(...) → guard one route-specific permission slug
  require_super_admin     → restrict to the super-admin role

Every failure to materialize a session is a generic 401; every missing
permission is a generic 403. The slug that was missing is logged, never
returned.
"""

import logging

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from fleetdesk.auth.context import AuthContext, SessionInvalidError, materialize_session
from fleetdesk.auth.jwt import ACCESS, token_subject
from fleetdesk.auth.permissions import authorize
from fleetdesk.database import get_db
from fleetdesk.middleware.exceptions import AuthenticationError, PermissionDeniedError

logger = logging.getLogger("fleetdesk.auth")

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

# Slugs referenced by route guards; audited against the catalog at startup
_guarded_slugs: set[str] = set()


# ── Core session dependency ─────────────────────────────────

async def get_auth_context(
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> AuthContext:
    """Decode the JWT and rebuild the caller's AuthContext from the database."""
    if not token:
        raise AuthenticationError()

    user_id = token_subject(token, ACCESS)
    if user_id is None:
        raise AuthenticationError()

    try:
        return await materialize_session(db, user_id)
    except SessionInvalidError as exc:
        logger.info(
            "Rejected session for user %s: %s", user_id, exc,
            extra={"user_id": user_id},
        )
        raise AuthenticationError() from exc


# ── Permission-based access control ─────────────────────────

def require_permission(slug: str):
    """Dependency factory: allow only callers holding `slug`.

    Usage:
        @router.patch("/{voyage_id}")
        async def update_voyage(
            ctx: AuthContext = Depends(require_permission("voyage.edit")),
        ):
            ...
    """
    _guarded_slugs.add(slug)

    async def _check(context: AuthContext = Depends(get_auth_context)) -> AuthContext:
        decision = authorize(context, slug)
        if not decision.allowed:
            logger.info(
                "Permission %s denied for user %s", slug, context.user_id,
                extra={"user_id": context.user_id, "permission": slug},
            )
            raise PermissionDeniedError()
        return context

    return _check


async def require_super_admin(
    context: AuthContext = Depends(get_auth_context),
) -> AuthContext:
    """Restrict endpoint to super-admins only."""
    if not context.is_super_admin:
        raise PermissionDeniedError()
    return context


def guarded_permission_slugs() -> set[str]:
    """Every slug a route guard has been declared with."""
    return set(_guarded_slugs)
