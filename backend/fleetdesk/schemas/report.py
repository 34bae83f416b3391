"""Pydantic schemas for noon and operational (departure/arrival/NOR) reports."""

from datetime import datetime

from pydantic import BaseModel, Field


class Position(BaseModel):
    lat: float | None = Field(None, ge=-90, le=90)
    long: float | None = Field(None, ge=-180, le=180)


# ── Noon reports ─────────────────────────────────────────────

class NoonReportCreate(BaseModel):
    vessel_id: str
    voyage_id: str
    report_date: datetime
    position: Position | None = None
    navigation: dict | None = None
    consumption: dict | None = None
    weather: dict | None = None
    remarks: str | None = None


class NoonReportUpdate(BaseModel):
    report_date: datetime | None = None
    position: Position | None = None
    navigation: dict | None = None
    consumption: dict | None = None
    weather: dict | None = None
    remarks: str | None = None
    status: str | None = None


class NoonReportOut(BaseModel):
    id: str
    vessel_id: str
    voyage_id: str
    vessel_name: str
    voyage_no: str
    report_date: datetime
    position: dict | None
    navigation: dict | None
    consumption: dict | None
    weather: dict | None
    remarks: str | None
    status: str
    created_by: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


# ── Operational reports ──────────────────────────────────────

class OperationalReportCreate(BaseModel):
    vessel_id: str
    voyage_id: str
    port_name: str | None = None
    last_port: str | None = None
    event_time: datetime | None = None
    report_date: datetime | None = None
    navigation: dict | None = None
    departure_stats: dict | None = None
    arrival_stats: dict | None = None
    nor_details: dict | None = None
    remarks: str | None = None


class OperationalReportUpdate(BaseModel):
    port_name: str | None = None
    last_port: str | None = None
    event_time: datetime | None = None
    report_date: datetime | None = None
    navigation: dict | None = None
    departure_stats: dict | None = None
    arrival_stats: dict | None = None
    nor_details: dict | None = None
    remarks: str | None = None
    status: str | None = None


class OperationalReportOut(BaseModel):
    id: str
    event_type: str
    vessel_id: str
    voyage_id: str
    vessel_name: str
    voyage_no: str
    port_name: str | None
    last_port: str | None
    event_time: datetime | None
    report_date: datetime | None
    navigation: dict | None
    departure_stats: dict | None
    arrival_stats: dict | None
    nor_details: dict | None
    remarks: str | None
    status: str
    created_by: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
