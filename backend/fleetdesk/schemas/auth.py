from datetime import datetime

from pydantic import BaseModel, EmailStr, Field


# ── Login ────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RefreshRequest(BaseModel):
    refresh_token: str


# ── Current user ─────────────────────────────────────────────

class MeOut(BaseModel):
    """Profile plus the permission set resolved for this request."""
    id: str
    email: str
    full_name: str
    phone: str | None
    role: str | None
    status: str
    company_id: str | None
    company_name: str | None = None
    is_super_admin: bool
    permissions: list[str]
    last_login_at: datetime | None = None


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: MeOut


class ProfileUpdate(BaseModel):
    """Self-service profile edit. Role, company and status are admin-only."""
    full_name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=50)
