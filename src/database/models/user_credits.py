"""Per-user points balance."""

import uuid
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, Integer, String
from sqlalchemy import UUID as SQLAlchemyUUID
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class UserCredits(Base):
    __tablename__ = "user_credits"

    id: Mapped[UUID] = mapped_column(
        SQLAlchemyUUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    # Identity-provider user id; no FK because auth users live in another schema
    user_id: Mapped[UUID] = mapped_column(
        SQLAlchemyUUID(as_uuid=True), unique=True, nullable=False, index=True
    )
    email: Mapped[str | None] = mapped_column(String, nullable=True, index=True)
    total_credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    remaining_credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("remaining_credits >= 0", name="ck_user_credits_remaining"),
        CheckConstraint("total_credits >= 0", name="ck_user_credits_total"),
    )
