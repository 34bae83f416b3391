import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base


class Vessel(Base):
    __tablename__ = "vessels"
    __tenant_column__ = "company_id"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    company_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("companies.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    imo: Mapped[str | None] = mapped_column(String(20), index=True)
    fleet: Mapped[str | None] = mapped_column(String(100))
    # active | laid_up | sold | dry_dock
    status: Mapped[str] = mapped_column(String(20), default="active", index=True)
    call_sign: Mapped[str | None] = mapped_column(String(20))
    mmsi: Mapped[str | None] = mapped_column(String(20))
    flag: Mapped[str | None] = mapped_column(String(100))
    year_built: Mapped[int | None] = mapped_column(Integer)

    # {loa, beam, max_draft, dwt, gross_tonnage}
    dimensions: Mapped[dict | None] = mapped_column(JSON, default=None)
    # {design_speed, ballast_consumption, laden_consumption}
    performance: Mapped[dict | None] = mapped_column(JSON, default=None)
    # {main_engine, allowed_fuels: [...]}
    machinery: Mapped[dict | None] = mapped_column(JSON, default=None)

    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, default=None, index=True)
    created_by: Mapped[str | None] = mapped_column(String(36))
    updated_by: Mapped[str | None] = mapped_column(String(36))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    company = relationship("Company", back_populates="vessels")
    certificates = relationship(
        "VesselCertificate",
        back_populates="vessel",
        cascade="all, delete-orphan",
        order_by="VesselCertificate.doc_type",
    )


class VesselCertificate(Base):
    """Master certificate library entry, one per document type per vessel.

    Pre-arrival checklists point at these rows instead of copying files.
    """

    __tablename__ = "vessel_certificates"
    __tenant_column__ = "vessel_id"
    __table_args__ = (
        UniqueConstraint("vessel_id", "doc_type", name="uq_vessel_certificate_doc_type"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    vessel_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("vessels.id"), nullable=False, index=True
    )
    doc_type: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # office | ship
    owner: Mapped[str] = mapped_column(String(20), default="office")
    file_name: Mapped[str | None] = mapped_column(String(255))
    file_url: Mapped[str | None] = mapped_column(String(1000))
    note: Mapped[str | None] = mapped_column(Text)
    uploaded_by: Mapped[str | None] = mapped_column(String(36))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    vessel = relationship("Vessel", back_populates="certificates")
