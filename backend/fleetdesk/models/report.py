"""Vessel movement reports.

Noon reports have their own table. Departure, arrival and notice-of-readiness
reports share `operational_reports`, discriminated by `event_type`.

Vessel name and voyage number are snapshotted at write time so historic
reports keep the labels they were filed under.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base

EVENT_TYPES = ("departure", "arrival", "nor")


class NoonReport(Base):
    __tablename__ = "noon_reports"
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
    vessel_name: Mapped[str] = mapped_column(String(255), nullable=False)
    voyage_no: Mapped[str] = mapped_column(String(50), nullable=False)

    report_date: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    # {lat, long}
    position: Mapped[dict | None] = mapped_column(JSON, default=None)
    # {dist_last_24h, engine_dist, slip, dist_to_go, next_port}
    navigation: Mapped[dict | None] = mapped_column(JSON, default=None)
    # {vlsfo, lsmgo}
    consumption: Mapped[dict | None] = mapped_column(JSON, default=None)
    # {wind, sea_state, remarks}
    weather: Mapped[dict | None] = mapped_column(JSON, default=None)
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


class OperationalReport(Base):
    __tablename__ = "operational_reports"
    __tenant_column__ = "vessel_id"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # departure | arrival | nor
    event_type: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    vessel_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("vessels.id"), nullable=False, index=True
    )
    voyage_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("voyages.id"), nullable=False, index=True
    )
    vessel_name: Mapped[str] = mapped_column(String(255), nullable=False)
    voyage_no: Mapped[str] = mapped_column(String(50), nullable=False)

    port_name: Mapped[str | None] = mapped_column(String(255))
    last_port: Mapped[str | None] = mapped_column(String(255))
    event_time: Mapped[datetime | None] = mapped_column(DateTime)
    report_date: Mapped[datetime | None] = mapped_column(DateTime, index=True)

    # {distance_to_go, distance_to_next_port_nm, eta_next_port}
    navigation: Mapped[dict | None] = mapped_column(JSON, default=None)
    # {rob_vlsfo, rob_lsmgo, bunkers_received_vlsfo, ..., cargo_summary}
    departure_stats: Mapped[dict | None] = mapped_column(JSON, default=None)
    # {rob_vlsfo, rob_lsmgo, arrival_time, arrival_cargo_qty_mt}
    arrival_stats: Mapped[dict | None] = mapped_column(JSON, default=None)
    # {pilot_station, document_url, eta_port, tender_time, nor_time}
    nor_details: Mapped[dict | None] = mapped_column(JSON, default=None)
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
