"""Auth routes: login, refresh, current user.

Route overview:
  POST /login     email + password login
  POST /refresh   exchange a refresh token for new access + refresh tokens
  GET  /me        the current user profile + effective permissions
  PATCH /me       edit own name, email or phone

Tokens carry only the user id. Permissions are resolved from the database
on every request, so nothing in a token goes stale when a role changes.
"""

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from fleetdesk.auth.context import AuthContext, SessionInvalidError, materialize_session
from fleetdesk.auth.deps import get_auth_context
from fleetdesk.auth.jwt import REFRESH, create_access_token, create_refresh_token, token_subject
from fleetdesk.auth.password import verify_password
from fleetdesk.database import get_db
from fleetdesk.middleware.exceptions import AuthenticationError
from fleetdesk.models.user import User
from fleetdesk.routers.users import ensure_unique_email
from fleetdesk.schemas.auth import LoginRequest, MeOut, ProfileUpdate, RefreshRequest, TokenResponse

router = APIRouter()


# ── Helpers ──────────────────────────────────────────────────

async def _load_user(db: AsyncSession, user_id: str) -> User:
    result = await db.execute(
        select(User)
        .options(selectinload(User.role), selectinload(User.company))
        .where(User.id == user_id)
    )
    return result.scalar_one()


def _build_me(user: User, context: AuthContext) -> MeOut:
    return MeOut(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        phone=user.phone,
        role=context.role_name,
        status=user.status,
        company_id=user.company_id,
        company_name=user.company.name if user.company else None,
        is_super_admin=context.is_super_admin,
        permissions=sorted(context.permissions),
        last_login_at=user.last_login_at,
    )


def _build_token_response(user: User, context: AuthContext) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(user.id),
        refresh_token=create_refresh_token(user.id),
        user=_build_me(user, context),
    )


# ── POST /login ──────────────────────────────────────────────

@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Email + password login."""
    result = await db.execute(select(User).where(User.email == body.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(body.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account deactivated")

    try:
        context = await materialize_session(db, user.id)
    except SessionInvalidError as exc:
        raise AuthenticationError() from exc

    user.last_login_at = datetime.utcnow()
    await db.flush()
    return _build_token_response(await _load_user(db, user.id), context)


# ── POST /refresh ────────────────────────────────────────────

@router.post("/refresh", response_model=TokenResponse)
async def refresh(body: RefreshRequest, db: AsyncSession = Depends(get_db)):
    """Exchange a refresh token for a new access + refresh token pair."""
    user_id = token_subject(body.refresh_token, REFRESH)
    if user_id is None:
        raise AuthenticationError()

    # Same checks as any request: inactive users and dead tenants cannot refresh
    try:
        context = await materialize_session(db, user_id)
    except SessionInvalidError as exc:
        raise AuthenticationError() from exc

    return _build_token_response(await _load_user(db, user_id), context)


# ── GET /me ──────────────────────────────────────────────────

@router.get("/me", response_model=MeOut)
async def me(
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(get_auth_context),
):
    """Return the current authenticated user's profile and permissions."""
    return _build_me(await _load_user(db, context.user_id), context)


@router.patch("/me", response_model=MeOut)
async def update_profile(
    body: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    context: AuthContext = Depends(get_auth_context),
):
    """Edit the caller's own name, email or phone. Empty fields are ignored."""
    user = await _load_user(db, context.user_id)

    updates = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v}
    if "email" in updates:
        updates["email"] = updates["email"].lower()
        if updates["email"] != user.email:
            await ensure_unique_email(db, updates["email"], exclude_id=user.id)

    for key, value in updates.items():
        setattr(user, key, value)
    await db.flush()
    return _build_me(await _load_user(db, user.id), context)
