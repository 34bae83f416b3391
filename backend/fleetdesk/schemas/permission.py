"""Pydantic schemas for the permission catalog and its resource groups."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from fleetdesk.schemas.role import SLUG_PATTERN


# ── Resources ────────────────────────────────────────────────

class ResourceCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    status: Literal["active", "inactive"] = "active"


class ResourceUpdate(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=100)
    status: Literal["active", "inactive"] | None = None


class ResourceOut(BaseModel):
    id: str
    name: str
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


# ── Permissions ──────────────────────────────────────────────

class PermissionCreate(BaseModel):
    slug: str = Field(..., min_length=3, max_length=100, pattern=SLUG_PATTERN)
    name: str = Field(..., max_length=100)
    description: str = ""
    resource_id: str
    status: Literal["active", "deprecated"] = "active"


class PermissionUpdate(BaseModel):
    """Slug is immutable: roles reference it by value."""
    name: str | None = Field(None, max_length=100)
    description: str | None = None
    resource_id: str | None = None
    status: Literal["active", "deprecated"] | None = None


class PermissionOut(BaseModel):
    id: str
    slug: str
    name: str
    description: str
    resource_id: str
    resource_name: str | None = None
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class CatalogEntry(BaseModel):
    slug: str
    name: str
    description: str


class CatalogGroup(BaseModel):
    """Assignable permissions of one resource, for role editors."""
    resource_id: str
    resource: str
    permissions: list[CatalogEntry]
