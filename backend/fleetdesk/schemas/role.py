"""Pydantic schemas for Role CRUD operations."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

SLUG_PATTERN = r"^[a-z0-9._]+$"


def _clean_slugs(values: list[str]) -> list[str]:
    # Preserve order, drop blanks and duplicates
    seen: dict[str, None] = {}
    for v in values:
        v = v.strip()
        if v:
            seen.setdefault(v, None)
    return list(seen)


class RoleCreate(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    permissions: list[str] = Field(default_factory=list)
    status: Literal["active", "inactive"] = "active"

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Role name must be at least 3 characters")
        return v

    @field_validator("permissions")
    @classmethod
    def clean_permissions(cls, v: list[str]) -> list[str]:
        return _clean_slugs(v)


class RoleUpdate(BaseModel):
    name: str | None = Field(None, min_length=3, max_length=100)
    permissions: list[str] | None = None
    status: Literal["active", "inactive"] | None = None

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if len(v) < 3:
            raise ValueError("Role name must be at least 3 characters")
        return v

    @field_validator("permissions")
    @classmethod
    def clean_permissions(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else _clean_slugs(v)


class RoleOut(BaseModel):
    id: str
    name: str
    permissions: list[str]
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
