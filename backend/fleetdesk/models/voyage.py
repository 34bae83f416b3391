import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base


class Voyage(Base):
    __tablename__ = "voyages"
    __tenant_column__ = "vessel_id"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    vessel_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("vessels.id"), nullable=False, index=True
    )
    voyage_no: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    # scheduled | active | completed
    status: Mapped[str] = mapped_column(String(20), default="scheduled", index=True)

    # {load_port, discharge_port, via, total_distance}
    route: Mapped[dict | None] = mapped_column(JSON, default=None)
    # {charterer_name, charter_party_date, laycan_start, laycan_end}
    charter: Mapped[dict | None] = mapped_column(JSON, default=None)
    # {commodity, quantity, grade}
    cargo: Mapped[dict | None] = mapped_column(JSON, default=None)
    # Denormalised so searches on the load port stay a plain column filter
    load_port: Mapped[str | None] = mapped_column(String(255), index=True)

    start_date: Mapped[datetime | None] = mapped_column(DateTime)
    eta: Mapped[datetime | None] = mapped_column(DateTime, index=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime)

    deleted_at: Mapped[datetime | None] = mapped_column(DateTime, default=None, index=True)
    created_by: Mapped[str | None] = mapped_column(String(36), index=True)
    updated_by: Mapped[str | None] = mapped_column(String(36))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    vessel = relationship("Vessel")
