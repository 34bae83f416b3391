"""Pydantic schemas for pre-arrival document packs."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

PackStatus = Literal["draft", "published", "sent", "completed"]


class PreArrivalCreate(BaseModel):
    vessel_id: str
    voyage_id: str | None = None
    request_id: str = Field(..., min_length=1, max_length=50)
    port_name: str = Field(..., min_length=1, max_length=255)
    eta: datetime
    agent_contact: str | None = None
    due_date: datetime | None = None
    notes: str | None = None
    status: PackStatus = "draft"


class PreArrivalUpdate(BaseModel):
    port_name: str | None = Field(None, min_length=1, max_length=255)
    eta: datetime | None = None
    agent_contact: str | None = None
    due_date: datetime | None = None
    notes: str | None = None
    status: PackStatus | None = None
    is_locked: bool | None = None


class DocumentUpload(BaseModel):
    """Metadata for a file already stored by the client."""
    name: str | None = None
    owner: Literal["office", "ship"] | None = None
    file_name: str
    file_url: str
    file_size: int | None = Field(None, ge=0)
    note: str | None = None


class DocumentVerify(BaseModel):
    status: Literal["approved", "rejected", "pending_review"]
    reason: str | None = None


class HistoryEntry(BaseModel):
    message: str
    role: Literal["admin", "ship"]
    created_at: datetime


class ChecklistEntry(BaseModel):
    doc_source: Literal["vessel_library", "onboard_upload"]
    vessel_cert_id: str | None = None
    name: str | None = None
    owner: str | None = None
    file_name: str | None = None
    file_url: str | None = None
    file_size: int | None = None
    note: str | None = None
    status: Literal["pending_review", "approved", "rejected"] = "pending_review"
    rejection_reason: str | None = None
    history: list[HistoryEntry] = []
    uploaded_by: str | None = None
    uploaded_at: datetime | None = None


class PreArrivalOut(BaseModel):
    id: str
    vessel_id: str
    vessel_name: str | None = None
    voyage_id: str | None
    request_id: str
    port_name: str
    eta: datetime
    agent_contact: str | None
    due_date: datetime | None
    notes: str | None
    status: str
    is_locked: bool
    documents: dict[str, ChecklistEntry]
    uploaded_count: int = 0
    created_by: str | None
    created_at: datetime
