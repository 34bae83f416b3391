import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base


class PreArrival(Base):
    """Port-call document pack for one vessel.

    `documents` maps a document type (e.g. "registry_cert") to a checklist
    entry. Library entries hold `vessel_cert_id`, a pointer into
    `vessel_certificates`, plus the last-synced copy of the certificate's
    name/owner/file fields. Onboard uploads hold their own file fields.
    """

    __tablename__ = "pre_arrivals"
    __tenant_column__ = "vessel_id"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    vessel_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("vessels.id"), nullable=False, index=True
    )
    voyage_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("voyages.id"))
    request_id: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    port_name: Mapped[str] = mapped_column(String(255), nullable=False)
    eta: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    agent_contact: Mapped[str | None] = mapped_column(String(255))
    due_date: Mapped[datetime | None] = mapped_column(DateTime)
    notes: Mapped[str | None] = mapped_column(Text)
    # draft | published | sent | completed
    status: Mapped[str] = mapped_column(String(20), default="draft", index=True)
    is_locked: Mapped[bool] = mapped_column(Boolean, default=False)

    documents: Mapped[dict] = mapped_column(JSON, default=dict)

    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, default=None, index=True)
    created_by: Mapped[str | None] = mapped_column(String(36), index=True)
    updated_by: Mapped[str | None] = mapped_column(String(36))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    vessel = relationship("Vessel")
    voyage = relationship("Voyage")
