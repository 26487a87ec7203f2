"""Back-office administrators and their profile/settings."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, Text
from sqlalchemy import UUID as SQLAlchemyUUID
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class AdminPrivilege(str, Enum):
    VIEWER = "viewer"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    @property
    def rank(self) -> int:
        return PRIVILEGE_RANK[self]

    @property
    def level(self) -> int:
        """Legacy numeric level (1-3) still shown to older clients."""
        return PRIVILEGE_RANK[self]

    def allows(self, minimum: "AdminPrivilege") -> bool:
        return self.rank >= minimum.rank


PRIVILEGE_RANK = {
    AdminPrivilege.VIEWER: 1,
    AdminPrivilege.ADMIN: 2,
    AdminPrivilege.SUPER_ADMIN: 3,
}


class AdminUser(Base):
    __tablename__ = "admin_users"

    id: Mapped[UUID] = mapped_column(
        SQLAlchemyUUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[UUID] = mapped_column(
        SQLAlchemyUUID(as_uuid=True), unique=True, nullable=False, index=True
    )
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    privilege: Mapped[AdminPrivilege] = mapped_column(
        String, nullable=False, default=AdminPrivilege.ADMIN
    )

    # Profile shown to users in the recharge flow
    payment_qr_code_url: Mapped[str | None] = mapped_column(String, nullable=True)
    recharge_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)
    contact_email: Mapped[str | None] = mapped_column(String, nullable=True)
    contact_phone: Mapped[str | None] = mapped_column(String, nullable=True)

    # Global settings, writable by super admins only
    system_settings: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    auto_approve_recharges: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    recharge_approval_threshold: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
