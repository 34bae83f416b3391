"""Pydantic schemas for Voyage CRUD operations."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

VoyageStatus = Literal["scheduled", "active", "completed"]


class VoyageRoute(BaseModel):
    load_port: str | None = None
    discharge_port: str | None = None
    via: str | None = None
    total_distance: float | None = None


class VoyageCharter(BaseModel):
    charterer_name: str | None = None
    charter_party_date: datetime | None = None
    laycan_start: datetime | None = None
    laycan_end: datetime | None = None


class VoyageCargo(BaseModel):
    commodity: str | None = None
    quantity: float | None = None
    grade: str | None = None


class VoyageCreate(BaseModel):
    vessel_id: str
    voyage_no: str = Field(..., min_length=1, max_length=50)
    status: VoyageStatus = "scheduled"
    route: VoyageRoute | None = None
    charter: VoyageCharter | None = None
    cargo: VoyageCargo | None = None
    start_date: datetime | None = None
    eta: datetime | None = None
    end_date: datetime | None = None


class VoyageUpdate(BaseModel):
    voyage_no: str | None = Field(None, min_length=1, max_length=50)
    status: VoyageStatus | None = None
    route: VoyageRoute | None = None
    charter: VoyageCharter | None = None
    cargo: VoyageCargo | None = None
    start_date: datetime | None = None
    eta: datetime | None = None
    end_date: datetime | None = None


class VoyageOut(BaseModel):
    id: str
    vessel_id: str
    vessel_name: str | None = None
    voyage_no: str
    status: str
    route: dict | None
    charter: dict | None
    cargo: dict | None
    start_date: datetime | None
    eta: datetime | None
    end_date: datetime | None
    created_by: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


# ── Dropdown lookup ──────────────────────────────────────────

class LookupOption(BaseModel):
    id: str
    name: str


class VesselLookupOption(LookupOption):
    company_id: str


class VoyageLookupOut(BaseModel):
    companies: list[LookupOption]
    vessels: list[VesselLookupOption]
