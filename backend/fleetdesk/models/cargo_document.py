import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base


class CargoDocument(Base):
    """Stowage plans and cargo documents filed against a voyage."""

    __tablename__ = "cargo_documents"
    __tenant_column__ = "vessel_id"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    vessel_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("vessels.id"), nullable=False, index=True
    )
    voyage_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("voyages.id"), nullable=False, index=True
    )
    port_name: Mapped[str] = mapped_column(String(255), nullable=False)
    # load | discharge | departure
    port_type: Mapped[str] = mapped_column(String(20), nullable=False)
    # stowage_plan | cargo_documents | other
    document_type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    document_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    report_date: Mapped[datetime | None] = mapped_column(DateTime)

    # {url, original_name, mime_type, size_bytes}
    file: Mapped[dict | None] = mapped_column(JSON, default=None)
    remarks: Mapped[str | None] = mapped_column(Text)

    status: Mapped[str] = mapped_column(String(20), default="active")
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, default=None, index=True)
    created_by: Mapped[str | None] = mapped_column(String(36), index=True)
    updated_by: Mapped[str | None] = mapped_column(String(36))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    vessel = relationship("Vessel")
    voyage = relationship("Voyage")
