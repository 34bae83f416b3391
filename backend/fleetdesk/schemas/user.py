"""Pydantic schemas for User management."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

UserStatusLiteral = Literal["active", "inactive", "banned"]


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    full_name: str = Field(..., min_length=1, max_length=255)
    phone: str | None = None
    role_id: str | None = None          # defaults to the op-staff role
    company_id: str | None = None       # non-super-admins: forced to their own
    additional_permissions: list[str] = Field(default_factory=list)
    excluded_permissions: list[str] = Field(default_factory=list)
    status: UserStatusLiteral = "active"


class UserUpdate(BaseModel):
    email: EmailStr | None = None
    password: str | None = Field(None, min_length=8)
    full_name: str | None = Field(None, min_length=1, max_length=255)
    phone: str | None = None
    role_id: str | None = None
    company_id: str | None = None
    additional_permissions: list[str] | None = None
    excluded_permissions: list[str] | None = None
    status: UserStatusLiteral | None = None


class UserOut(BaseModel):
    id: str
    email: str
    full_name: str
    phone: str | None
    role_id: str | None
    role_name: str | None = None
    company_id: str | None
    company_name: str | None = None
    additional_permissions: list[str]
    excluded_permissions: list[str]
    status: str
    last_login_at: datetime | None
    created_at: datetime

    model_config = {"from_attributes": True}
