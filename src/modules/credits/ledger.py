"""Points ledger: every balance change and its log row commit together."""

from dataclasses import dataclass
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import MessageCode
from src.core.base import BaseService
from src.database.models import (
    CREDIT_TYPES,
    DEBIT_TYPES,
    CreditTransaction,
    TransactionType,
    UserCredits,
)

MAX_REASON_LENGTH = 500

_UPSERT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


@dataclass
class LedgerEntry:
    balance: UserCredits
    transaction: CreditTransaction


class CreditLedgerService(BaseService):
    """
    Balance reads and mutations for the points economy.

    ``credit``/``debit`` work inside the caller's open transaction so other
    services (recharge approval) can compose them; ``add_credits`` and
    ``deduct_credits`` wrap them in their own transaction.
    """

    @staticmethod
    def _validate(amount: int, reason: str) -> str:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise BananaStudioException(
                MessageCode.INVALID_INPUT,
                status.HTTP_400_BAD_REQUEST,
                {"description": "amount must be a positive integer"},
            )
        reason = (reason or "").strip()
        if not reason:
            raise BananaStudioException(
                MessageCode.INVALID_INPUT,
                status.HTTP_400_BAD_REQUEST,
                {"description": "reason is required"},
            )
        if len(reason) > MAX_REASON_LENGTH:
            raise BananaStudioException(
                MessageCode.INVALID_INPUT,
                status.HTTP_400_BAD_REQUEST,
                {"description": f"reason must be at most {MAX_REASON_LENGTH} characters"},
            )
        return reason

    async def _ensure_balance_row(self, user_id: UUID, email: str | None) -> None:
        """Insert a zero balance unless one exists; safe under concurrent callers."""
        dialect = self.db.get_bind().dialect.name
        insert = _UPSERT_INSERTS.get(dialect)
        if insert is None:
            raise RuntimeError(f"Unsupported database dialect for ledger: {dialect}")
        await self.db.execute(
            insert(UserCredits)
            .values(user_id=user_id, email=email, total_credits=0, remaining_credits=0)
            .on_conflict_do_nothing(index_elements=["user_id"])
        )

    async def _load_balance(
        self, user_id: UUID, email: str | None = None, lock: bool = True
    ) -> UserCredits:
        query = select(UserCredits).where(UserCredits.user_id == user_id)
        if lock:
            query = query.with_for_update()
        query = query.execution_options(populate_existing=True)

        balance = (await self.db.execute(query)).scalar_one_or_none()
        if balance is None:
            await self._ensure_balance_row(user_id, email)
            balance = (await self.db.execute(query)).scalar_one()
            self.logger.info("balance_initialized", user_id=str(user_id))
        elif email and not balance.email:
            balance.email = email
        return balance

    async def credit(
        self,
        user_id: UUID,
        amount: int,
        reason: str,
        transaction_type: TransactionType,
        created_by: UUID,
        email: str | None = None,
        recharge_id: UUID | None = None,
    ) -> LedgerEntry:
        """Increase total and remaining credits; caller owns the transaction."""
        reason = self._validate(amount, reason)
        transaction_type = TransactionType(transaction_type)
        if transaction_type not in CREDIT_TYPES:
            raise BananaStudioException(
                MessageCode.TRANSACTION_TYPE_NOT_ALLOWED,
                status.HTTP_400_BAD_REQUEST,
                {"transaction_type": transaction_type.value},
            )

        balance = await self._load_balance(user_id, email)
        balance.total_credits += amount
        balance.remaining_credits += amount

        transaction = CreditTransaction(
            user_id=user_id,
            transaction_type=transaction_type.value,
            amount=amount,
            balance_after=balance.remaining_credits,
            reason=reason,
            created_by=created_by,
            recharge_id=recharge_id,
        )
        self.db.add(transaction)
        await self.db.flush()

        self.logger.info(
            "credits_added",
            user_id=str(user_id),
            amount=amount,
            transaction_type=transaction_type.value,
            balance_after=balance.remaining_credits,
            created_by=str(created_by),
        )
        return LedgerEntry(balance=balance, transaction=transaction)

    async def debit(
        self,
        user_id: UUID,
        amount: int,
        reason: str,
        transaction_type: TransactionType,
        created_by: UUID,
        email: str | None = None,
    ) -> LedgerEntry:
        """Decrease remaining credits, refusing to go below zero."""
        reason = self._validate(amount, reason)
        transaction_type = TransactionType(transaction_type)
        if transaction_type not in DEBIT_TYPES:
            raise BananaStudioException(
                MessageCode.TRANSACTION_TYPE_NOT_ALLOWED,
                status.HTTP_400_BAD_REQUEST,
                {"transaction_type": transaction_type.value},
            )

        balance = await self._load_balance(user_id, email)
        if balance.remaining_credits < amount:
            self.logger.warning(
                "insufficient_credits",
                user_id=str(user_id),
                current_credits=balance.remaining_credits,
                required_credits=amount,
            )
            raise BananaStudioException(
                MessageCode.INSUFFICIENT_CREDITS,
                status.HTTP_400_BAD_REQUEST,
                {
                    "current_credits": balance.remaining_credits,
                    "required_credits": amount,
                },
            )

        balance.remaining_credits -= amount
        transaction = CreditTransaction(
            user_id=user_id,
            transaction_type=transaction_type.value,
            amount=-amount,
            balance_after=balance.remaining_credits,
            reason=reason,
            created_by=created_by,
        )
        self.db.add(transaction)
        await self.db.flush()

        self.logger.info(
            "credits_deducted",
            user_id=str(user_id),
            amount=amount,
            transaction_type=transaction_type.value,
            balance_after=balance.remaining_credits,
            created_by=str(created_by),
        )
        return LedgerEntry(balance=balance, transaction=transaction)

    async def add_credits(
        self,
        user_id: UUID,
        amount: int,
        reason: str,
        transaction_type: TransactionType,
        created_by: UUID,
        email: str | None = None,
    ) -> LedgerEntry:
        async with self.atomic():
            return await self.credit(
                user_id, amount, reason, transaction_type, created_by, email=email
            )

    async def deduct_credits(
        self,
        user_id: UUID,
        amount: int,
        reason: str,
        transaction_type: TransactionType,
        created_by: UUID,
        email: str | None = None,
    ) -> LedgerEntry:
        async with self.atomic():
            return await self.debit(
                user_id, amount, reason, transaction_type, created_by, email=email
            )

    async def apply(
        self,
        user_id: UUID,
        amount: int,
        reason: str,
        transaction_type: TransactionType,
        created_by: UUID,
        email: str | None = None,
    ) -> LedgerEntry:
        """Route to add or deduct by the direction of ``transaction_type``."""
        if TransactionType(transaction_type) in CREDIT_TYPES:
            return await self.add_credits(
                user_id, amount, reason, transaction_type, created_by, email=email
            )
        return await self.deduct_credits(
            user_id, amount, reason, transaction_type, created_by, email=email
        )

    async def open_account(self, user_id: UUID, email: str | None = None) -> UserCredits:
        """Zero balance for a new user inside the caller's transaction."""
        return await self._load_balance(user_id, email, lock=False)

    async def get_balance(self, user_id: UUID, email: str | None = None) -> UserCredits:
        """Current balance, created with zeros on first access."""
        async with self.atomic():
            return await self._load_balance(user_id, email, lock=False)

    async def list_transactions(
        self,
        user_id: UUID,
        transaction_type: TransactionType | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[CreditTransaction], int]:
        """Newest first, with the unpaginated total."""
        conditions = [CreditTransaction.user_id == user_id]
        if transaction_type:
            conditions.append(
                CreditTransaction.transaction_type
                == TransactionType(transaction_type).value
            )

        total = await self.db.scalar(
            select(func.count()).select_from(CreditTransaction).where(*conditions)
        )
        result = await self.db.execute(
            select(CreditTransaction)
            .where(*conditions)
            .order_by(CreditTransaction.created_at.desc(), CreditTransaction.id)
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all()), total or 0
