"""Append-only credits ledger."""

import uuid
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy import UUID as SQLAlchemyUUID
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class TransactionType(str, Enum):
    EARN = "earn"
    SPEND = "spend"
    RECHARGE = "recharge"
    ADMIN_ADD = "admin_add"
    ADMIN_DEDUCT = "admin_deduct"


CREDIT_TYPES = frozenset(
    {TransactionType.EARN, TransactionType.RECHARGE, TransactionType.ADMIN_ADD}
)
DEBIT_TYPES = frozenset({TransactionType.SPEND, TransactionType.ADMIN_DEDUCT})


class CreditTransaction(Base):
    __tablename__ = "credit_transactions"

    id: Mapped[UUID] = mapped_column(
        SQLAlchemyUUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[UUID] = mapped_column(
        SQLAlchemyUUID(as_uuid=True), nullable=False, index=True
    )
    transaction_type: Mapped[TransactionType] = mapped_column(String, nullable=False)
    # Signed: positive for credits, negative for debits
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    balance_after: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    created_by: Mapped[UUID] = mapped_column(SQLAlchemyUUID(as_uuid=True), nullable=False)
    recharge_id: Mapped[UUID | None] = mapped_column(
        SQLAlchemyUUID(as_uuid=True),
        ForeignKey("recharge_records.id", ondelete="SET NULL"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True
    )
