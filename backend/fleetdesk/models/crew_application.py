import secrets
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from fleetdesk.database import Base


def new_submission_token() -> str:
    return secrets.token_urlsafe(24)


class CrewApplication(Base):
    """A seafarer's CV / job application, owned by one company.

    Document sections (licences, passports, visas, ...) are JSON lists of
    entries, each carrying its own upload meta:
    {file_name, file_url, upload_status, rejection_reason, uploaded_at}.
    """

    __tablename__ = "crew_applications"
    __tenant_column__ = "company_id"
    __table_args__ = (
        UniqueConstraint("company_id", "email", name="uq_crew_application_company_email"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id"), nullable=False, index=True
    )

    # ── Form meta ────────────────────────────────────────────
    submission_token: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False, default=new_submission_token
    )
    # public_form | admin_created
    form_source: Mapped[str] = mapped_column(String(20), default="admin_created")
    last_edited_by: Mapped[str | None] = mapped_column(String(36))

    # ── Identity ─────────────────────────────────────────────
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    rank: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    position_applied: Mapped[str | None] = mapped_column(String(100))
    date_of_availability: Mapped[datetime | None] = mapped_column(DateTime)
    availability_note: Mapped[str | None] = mapped_column(String(255))
    profile_photo: Mapped[str | None] = mapped_column(String(1000))
    resume: Mapped[dict | None] = mapped_column(JSON, default=None)

    # ── Personal and contact ─────────────────────────────────
    nationality: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    date_of_birth: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    place_of_birth: Mapped[str | None] = mapped_column(String(255))
    # single | married | divorced | widowed
    marital_status: Mapped[str | None] = mapped_column(String(20))
    present_address: Mapped[str] = mapped_column(String(500), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    cell_phone: Mapped[str | None] = mapped_column(String(50))
    home_phone: Mapped[str | None] = mapped_column(String(50))
    nearest_airport: Mapped[str | None] = mapped_column(String(255))
    languages: Mapped[list] = mapped_column(JSON, default=list)
    medical_cert_issued_date: Mapped[datetime | None] = mapped_column(DateTime)
    medical_cert_expired_date: Mapped[datetime | None] = mapped_column(DateTime, index=True)
    # {name, relationship, phone, address}
    next_of_kin: Mapped[dict | None] = mapped_column(JSON, default=None)

    # ── Documents ────────────────────────────────────────────
    licences: Mapped[list] = mapped_column(JSON, default=list)
    passports: Mapped[list] = mapped_column(JSON, default=list)
    seamans_books: Mapped[list] = mapped_column(JSON, default=list)
    visas: Mapped[list] = mapped_column(JSON, default=list)
    endorsements: Mapped[list] = mapped_column(JSON, default=list)
    stcw_certificates: Mapped[list] = mapped_column(JSON, default=list)
    other_certificates: Mapped[list] = mapped_column(JSON, default=list)
    extra_docs: Mapped[list] = mapped_column(JSON, default=list)
    sea_experience: Mapped[list] = mapped_column(JSON, default=list)
    additional_info: Mapped[str | None] = mapped_column(Text)

    # ── Workflow ─────────────────────────────────────────────
    # draft | submitted | reviewing | approved | rejected | on_hold | archived
    status: Mapped[str] = mapped_column(String(20), default="draft", index=True)
    assigned_to: Mapped[str | None] = mapped_column(String(36))
    # [{note, added_by, added_at}], never in list responses
    admin_notes: Mapped[list] = mapped_column(JSON, default=list)

    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, default=None, index=True)
    created_by: Mapped[str | None] = mapped_column(String(36))
    updated_by: Mapped[str | None] = mapped_column(String(36))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
