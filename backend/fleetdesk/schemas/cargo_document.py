"""Pydantic schemas for cargo stowage plans and cargo documents."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

PortType = Literal["load", "discharge", "departure"]
DocumentType = Literal["stowage_plan", "cargo_documents", "other"]


class CargoFile(BaseModel):
    url: str
    original_name: str | None = None
    mime_type: str | None = None
    size_bytes: int | None = Field(None, ge=0)


class CargoDocumentCreate(BaseModel):
    vessel_id: str
    voyage_id: str
    port_name: str = Field(..., min_length=1, max_length=255)
    port_type: PortType
    document_type: DocumentType
    document_date: datetime
    report_date: datetime | None = None
    file: CargoFile | None = None
    remarks: str | None = None


class CargoDocumentUpdate(BaseModel):
    port_name: str | None = Field(None, min_length=1, max_length=255)
    port_type: PortType | None = None
    document_type: DocumentType | None = None
    document_date: datetime | None = None
    report_date: datetime | None = None
    file: CargoFile | None = None
    remarks: str | None = None
    status: str | None = None


class CargoDocumentOut(BaseModel):
    id: str
    vessel_id: str
    voyage_id: str
    port_name: str
    port_type: str
    document_type: str
    document_date: datetime
    report_date: datetime | None
    file: dict | None
    remarks: str | None
    status: str
    created_by: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
