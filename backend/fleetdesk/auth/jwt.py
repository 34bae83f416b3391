"""JWT issue and verification.

Tokens identify a user and nothing else:

  - sub:   user ID
  - type:  "access" | "refresh"
  - iat / exp

Role, permissions and company are looked up again on every request
(fleetdesk.auth.context), so a token never outlives a role edit or a
deactivation.
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from fleetdesk.config import settings

ACCESS = "access"
REFRESH = "refresh"


def _issue(user_id: str, token_type: str, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    claims = {"sub": user_id, "type": token_type, "iat": now, "exp": now + lifetime}
    return jwt.encode(claims, settings.secret_key, algorithm=settings.jwt_algorithm)


def create_access_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    lifetime = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    return _issue(user_id, ACCESS, lifetime)


def create_refresh_token(user_id: str) -> str:
    return _issue(user_id, REFRESH, timedelta(days=settings.refresh_token_expire_days))


def token_subject(token: str, token_type: str) -> str | None:
    """User id of a valid, unexpired token of `token_type`, else None."""
    try:
        claims = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if claims.get("type") != token_type:
        return None
    return claims.get("sub") or None
