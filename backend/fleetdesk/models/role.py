import uuid
from datetime import datetime

from sqlalchemy import DateTime, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base


class Role(Base):
    __tablename__ = "roles"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # e.g. "super-admin", "admin", "op-staff", "Superintendent"
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)

    # Permission slugs, e.g. ["users.view", "noon.create", "vessels.edit"]
    permissions: Mapped[list] = mapped_column(JSON, default=list)

    status: Mapped[str] = mapped_column(String(20), default="active")

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    users = relationship("User", back_populates="role")

    @property
    def is_active(self) -> bool:
        return self.status == "active"
