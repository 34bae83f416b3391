import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, JSON, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fleetdesk.database import Base


class UserStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    BANNED = "banned"


class User(Base):
    __tablename__ = "users"
    __tenant_column__ = "company_id"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50))

    role_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("roles.id"), index=True
    )

    # Per-user overrides on top of the role's permissions.
    # effective = (role.permissions ∪ additional) \ excluded
    additional_permissions: Mapped[list] = mapped_column(JSON, default=list)
    excluded_permissions: Mapped[list] = mapped_column(JSON, default=list)

    # Tenant link. null = no company (super-admins, or not yet assigned)
    company_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("companies.id"), index=True
    )

    status: Mapped[str] = mapped_column(String(20), default=UserStatus.ACTIVE.value)
    last_login_at: Mapped[datetime | None] = mapped_column(DateTime, default=None)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    role = relationship("Role", back_populates="users")
    company = relationship("Company", back_populates="users")

    @property
    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE.value
