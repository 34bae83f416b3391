"""Pydantic schemas for crew applications (seafarer CVs)."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator

ApplicationStatus = Literal[
    "draft", "submitted", "reviewing", "approved", "rejected", "on_hold", "archived"
]
UploadStatus = Literal["not_uploaded", "pending", "approved", "rejected"]


def _split_csv(value):
    # The public form sends languages as a comma-separated string
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    return value


class UploadMeta(BaseModel):
    file_name: str | None = None
    file_url: str | None = None
    upload_status: UploadStatus = "not_uploaded"
    rejection_reason: str = ""
    uploaded_at: datetime | None = None


class DocumentEntry(UploadMeta):
    """One licence, passport, seaman's book, visa, endorsement or certificate.

    `name` labels certificates and extra docs; `kind` carries the licence
    type (coc / coe) or visa type.
    """
    name: str | None = None
    kind: str | None = None
    number: str | None = None
    country: str | None = None
    grade: str | None = None
    place_issued: str | None = None
    date_issued: datetime | None = None
    date_expired: datetime | None = None


class SeaService(BaseModel):
    vessel_name: str = Field(..., min_length=1)
    vessel_type: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    rank: str = Field(..., min_length=1)
    period_from: datetime
    period_to: datetime | None = None
    flag: str | None = None
    grt: float | None = Field(None, ge=0)
    engine_type: str | None = None
    engine_kw: float | None = Field(None, ge=0)
    area_of_operation: str | None = None


class NextOfKin(BaseModel):
    name: str = Field(..., min_length=1)
    relationship: str = Field(..., min_length=1)
    phone: str | None = None
    address: str | None = None


class _ApplicationFields(BaseModel):
    position_applied: str | None = None
    date_of_availability: datetime | None = None
    availability_note: str | None = None
    profile_photo: str | None = None
    resume: UploadMeta | None = None
    place_of_birth: str | None = None
    marital_status: Literal["single", "married", "divorced", "widowed"] | None = None
    cell_phone: str | None = None
    home_phone: str | None = None
    nearest_airport: str | None = None
    medical_cert_issued_date: datetime | None = None
    medical_cert_expired_date: datetime | None = None
    next_of_kin: NextOfKin | None = None
    additional_info: str | None = None
    assigned_to: str | None = None


class ApplicationCreate(_ApplicationFields):
    company_id: str | None = None       # required for super-admins
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    rank: str = Field(..., min_length=1, max_length=100)
    nationality: str = Field(..., min_length=1, max_length=100)
    date_of_birth: datetime
    present_address: str = Field(..., min_length=1, max_length=500)
    email: EmailStr
    status: ApplicationStatus = "draft"
    languages: list[str] = Field(default_factory=list)
    licences: list[DocumentEntry] = Field(default_factory=list)
    passports: list[DocumentEntry] = Field(default_factory=list)
    seamans_books: list[DocumentEntry] = Field(default_factory=list)
    visas: list[DocumentEntry] = Field(default_factory=list)
    endorsements: list[DocumentEntry] = Field(default_factory=list)
    stcw_certificates: list[DocumentEntry] = Field(default_factory=list)
    other_certificates: list[DocumentEntry] = Field(default_factory=list)
    extra_docs: list[DocumentEntry] = Field(default_factory=list)
    sea_experience: list[SeaService] = Field(default_factory=list)

    @field_validator("languages", mode="before")
    @classmethod
    def split_languages(cls, value):
        return _split_csv(value)


class ApplicationUpdate(_ApplicationFields):
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    rank: str | None = Field(None, min_length=1, max_length=100)
    nationality: str | None = Field(None, min_length=1, max_length=100)
    date_of_birth: datetime | None = None
    present_address: str | None = Field(None, min_length=1, max_length=500)
    email: EmailStr | None = None
    status: ApplicationStatus | None = None
    languages: list[str] | None = None
    licences: list[DocumentEntry] | None = None
    passports: list[DocumentEntry] | None = None
    seamans_books: list[DocumentEntry] | None = None
    visas: list[DocumentEntry] | None = None
    endorsements: list[DocumentEntry] | None = None
    stcw_certificates: list[DocumentEntry] | None = None
    other_certificates: list[DocumentEntry] | None = None
    extra_docs: list[DocumentEntry] | None = None
    sea_experience: list[SeaService] | None = None

    @field_validator("languages", mode="before")
    @classmethod
    def split_languages(cls, value):
        return _split_csv(value)


class AdminNoteCreate(BaseModel):
    note: str = Field(..., min_length=1, max_length=2000)


class ApplicationOut(BaseModel):
    id: str
    company_id: str
    submission_token: str
    form_source: str
    first_name: str
    last_name: str
    rank: str
    position_applied: str | None
    date_of_availability: datetime | None
    availability_note: str | None
    profile_photo: str | None
    resume: dict | None
    nationality: str
    date_of_birth: datetime
    place_of_birth: str | None
    marital_status: str | None
    present_address: str
    email: str
    cell_phone: str | None
    home_phone: str | None
    nearest_airport: str | None
    languages: list[str]
    medical_cert_issued_date: datetime | None
    medical_cert_expired_date: datetime | None
    next_of_kin: dict | None
    licences: list[dict]
    passports: list[dict]
    seamans_books: list[dict]
    visas: list[dict]
    endorsements: list[dict]
    stcw_certificates: list[dict]
    other_certificates: list[dict]
    extra_docs: list[dict]
    sea_experience: list[dict]
    additional_info: str | None
    status: str
    assigned_to: str | None
    last_edited_by: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ApplicationDetailOut(ApplicationOut):
    admin_notes: list[dict] = []
