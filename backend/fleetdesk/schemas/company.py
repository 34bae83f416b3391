"""Pydantic schemas for Company (tenant) CRUD operations."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    phone: str | None = None
    address: str | None = None
    contact_name: str = ""
    contact_email: str = ""
    status: Literal["active", "inactive"] = "active"


class CompanyUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    email: EmailStr | None = None
    phone: str | None = None
    address: str | None = None
    contact_name: str | None = None
    contact_email: str | None = None
    status: Literal["active", "inactive"] | None = None


class CompanyOut(BaseModel):
    id: str
    name: str
    email: str
    phone: str | None
    address: str | None
    contact_name: str
    contact_email: str
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}
