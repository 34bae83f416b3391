"""Pydantic schemas for Vessel CRUD and the vessel certificate library."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

VesselStatus = Literal["active", "laid_up", "sold", "dry_dock"]


class VesselDimensions(BaseModel):
    loa: float | None = None
    beam: float | None = None
    max_draft: float | None = None
    dwt: float | None = None
    gross_tonnage: float | None = None


class VesselPerformance(BaseModel):
    design_speed: float | None = None
    ballast_consumption: float | None = None
    laden_consumption: float | None = None


class VesselMachinery(BaseModel):
    main_engine: str | None = None
    allowed_fuels: list[str] = Field(default_factory=list)


class VesselCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    company_id: str | None = None   # required for super-admins
    imo: str | None = Field(None, max_length=20)
    fleet: str | None = None
    status: VesselStatus = "active"
    call_sign: str | None = None
    mmsi: str | None = None
    flag: str | None = None
    year_built: int | None = Field(None, ge=1900, le=2100)
    dimensions: VesselDimensions | None = None
    performance: VesselPerformance | None = None
    machinery: VesselMachinery | None = None


class VesselUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    imo: str | None = Field(None, max_length=20)
    fleet: str | None = None
    status: VesselStatus | None = None
    call_sign: str | None = None
    mmsi: str | None = None
    flag: str | None = None
    year_built: int | None = Field(None, ge=1900, le=2100)
    dimensions: VesselDimensions | None = None
    performance: VesselPerformance | None = None
    machinery: VesselMachinery | None = None


# ── Certificate library ──────────────────────────────────────

class CertificateUpsert(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    owner: Literal["office", "ship"] = "office"
    file_name: str | None = None
    file_url: str | None = None
    note: str | None = None


class CertificateOut(BaseModel):
    id: str
    vessel_id: str
    doc_type: str
    name: str
    owner: str
    file_name: str | None
    file_url: str | None
    note: str | None
    uploaded_by: str | None
    updated_at: datetime

    model_config = {"from_attributes": True}


class VesselOut(BaseModel):
    id: str
    company_id: str
    name: str
    imo: str | None
    fleet: str | None
    status: str
    call_sign: str | None
    mmsi: str | None
    flag: str | None
    year_built: int | None
    dimensions: dict | None
    performance: dict | None
    machinery: dict | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class VesselDetailOut(VesselOut):
    certificates: list[CertificateOut] = []
