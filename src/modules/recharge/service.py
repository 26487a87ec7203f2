"""Recharge records and their single approval state machine."""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID

from fastapi import status
from sqlalchemy import func, select
from sqlalchemy.orm import aliased

from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import MessageCode
from src.core.base import BaseService
from src.database.models import (
    AdminUser,
    PaymentMethod,
    RechargeRecord,
    RechargeStatus,
    TransactionType,
    UserCredits,
)
from src.modules.admin.settings import AdminSettingsService
from src.modules.credits.ledger import CreditLedgerService, LedgerEntry
from src.utils.timeutils import now_utc

TERMINAL_STATUSES = (
    RechargeStatus.COMPLETED,
    RechargeStatus.FAILED,
    RechargeStatus.CANCELLED,
)


@dataclass
class RechargeTransition:
    record: RechargeRecord
    previous_status: RechargeStatus
    ledger_entry: LedgerEntry | None = None


@dataclass
class RechargeFilters:
    status: RechargeStatus | None = None
    user_search: str | None = None
    min_amount: int | None = None
    max_amount: int | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None


@dataclass
class RechargeRow:
    record: RechargeRecord
    user_email: str | None
    admin_email: str | None


@dataclass
class RechargeListing:
    rows: list[RechargeRow]
    total: int
    status_breakdown: dict[str, dict[str, int]] = field(default_factory=dict)
    total_amount: int = 0


def parse_target_status(value: str) -> RechargeStatus:
    """Only terminal statuses are valid transition targets."""
    try:
        target = RechargeStatus(value)
    except ValueError:
        target = None
    if target not in TERMINAL_STATUSES:
        raise BananaStudioException(
            MessageCode.INVALID_STATUS,
            status.HTTP_400_BAD_REQUEST,
            {
                "status": value,
                "allowed": [s.value for s in TERMINAL_STATUSES],
            },
        )
    return target


class RechargeService(BaseService):
    def __init__(self, db, ledger: CreditLedgerService | None = None):
        super().__init__(db)
        self.ledger = ledger or CreditLedgerService(db)

    @staticmethod
    def _validate_amount(amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise BananaStudioException(
                MessageCode.INVALID_INPUT,
                status.HTTP_400_BAD_REQUEST,
                {"description": "amount must be a positive integer"},
            )

    async def _get_for_update(self, recharge_id: UUID) -> RechargeRecord:
        result = await self.db.execute(
            select(RechargeRecord)
            .where(RechargeRecord.id == recharge_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        record = result.scalar_one_or_none()
        if not record:
            raise BananaStudioException(
                MessageCode.RECHARGE_NOT_FOUND,
                status.HTTP_404_NOT_FOUND,
                {"recharge_id": str(recharge_id)},
            )
        return record

    async def _apply_transition(
        self,
        record: RechargeRecord,
        target: RechargeStatus,
        admin_id: UUID,
        notes: str | None,
    ) -> RechargeTransition:
        current = RechargeStatus(record.status)
        if current.is_terminal:
            raise BananaStudioException(
                MessageCode.RECHARGE_ALREADY_PROCESSED,
                status.HTTP_400_BAD_REQUEST,
                {"recharge_id": str(record.id), "current_status": current.value},
            )

        record.status = target.value
        record.processed_at = now_utc()
        if notes is not None:
            record.admin_notes = notes
        if record.admin_id is None:
            record.admin_id = admin_id

        ledger_entry = None
        if target is RechargeStatus.COMPLETED:
            ledger_entry = await self.ledger.credit(
                record.user_id,
                record.amount,
                reason=(record.description or "").strip() or f"Recharge {record.id}",
                transaction_type=TransactionType.RECHARGE,
                created_by=admin_id,
                recharge_id=record.id,
            )
        await self.db.flush()

        self.logger.info(
            "recharge_transitioned",
            recharge_id=str(record.id),
            user_id=str(record.user_id),
            from_status=current.value,
            to_status=target.value,
            admin_id=str(admin_id),
        )
        return RechargeTransition(
            record=record, previous_status=current, ledger_entry=ledger_entry
        )

    def _new_record(
        self,
        user_id: UUID,
        amount: int,
        payment_method: PaymentMethod | str,
        description: str | None,
        payment_screenshot_url: str | None,
    ) -> RechargeRecord:
        self._validate_amount(amount)
        record = RechargeRecord(
            user_id=user_id,
            amount=amount,
            payment_method=PaymentMethod(payment_method).value,
            description=description,
            payment_screenshot_url=payment_screenshot_url,
            status=RechargeStatus.PENDING.value,
        )
        self.db.add(record)
        return record

    async def create_request(
        self,
        user_id: UUID,
        amount: int,
        payment_method: PaymentMethod | str = PaymentMethod.WECHAT,
        description: str | None = None,
        payment_screenshot_url: str | None = None,
        email: str | None = None,
    ) -> RechargeRecord:
        """
        User-submitted top-up. Stays pending unless the global settings turn on
        auto approval and the amount is within the threshold, in which case it
        runs the normal completion transition.
        """
        async with self.atomic():
            record = self._new_record(
                user_id, amount, payment_method, description, payment_screenshot_url
            )
            await self.db.flush()
            # Listings show the requester email from the balance row
            await self.ledger.open_account(user_id, email)

            settings = await AdminSettingsService(self.db).get_global_settings()
            if (
                settings is not None
                and settings.auto_approve_recharges
                and settings.recharge_approval_threshold is not None
                and amount <= settings.recharge_approval_threshold
            ):
                await self._apply_transition(
                    record,
                    RechargeStatus.COMPLETED,
                    admin_id=settings.user_id,
                    notes="Auto-approved",
                )

        self.logger.info(
            "recharge_requested",
            recharge_id=str(record.id),
            user_id=str(user_id),
            status=record.status,
        )
        return record

    async def transition(
        self,
        recharge_id: UUID,
        new_status: RechargeStatus | str,
        admin_id: UUID,
        notes: str | None = None,
    ) -> RechargeTransition:
        target = parse_target_status(
            new_status.value if isinstance(new_status, RechargeStatus) else new_status
        )
        async with self.atomic():
            record = await self._get_for_update(recharge_id)
            return await self._apply_transition(record, target, admin_id, notes)

    async def create_completed(
        self,
        user_id: UUID,
        amount: int,
        admin_id: UUID,
        payment_method: PaymentMethod | str = PaymentMethod.MANUAL,
        description: str | None = None,
        notes: str | None = None,
        email: str | None = None,
    ) -> RechargeTransition:
        """Admin-entered recharge: created pending, then completed via the same transition."""
        async with self.atomic():
            await self.ledger.open_account(user_id, email)
            record = self._new_record(user_id, amount, payment_method, description, None)
            record.admin_id = admin_id
            await self.db.flush()
            return await self._apply_transition(
                record, RechargeStatus.COMPLETED, admin_id, notes
            )

    async def list_for_user(
        self, user_id: UUID, limit: int = 20, offset: int = 0
    ) -> tuple[list[RechargeRecord], int]:
        total = await self.db.scalar(
            select(func.count())
            .select_from(RechargeRecord)
            .where(RechargeRecord.user_id == user_id)
        )
        result = await self.db.execute(
            select(RechargeRecord)
            .where(RechargeRecord.user_id == user_id)
            .order_by(RechargeRecord.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all()), total or 0

    async def list_records(
        self, filters: RechargeFilters, limit: int = 20, offset: int = 0
    ) -> RechargeListing:
        owner = aliased(UserCredits)
        conditions = []
        if filters.status:
            conditions.append(RechargeRecord.status == filters.status.value)
        if filters.user_search:
            conditions.append(owner.email.ilike(f"%{filters.user_search}%"))
        if filters.min_amount is not None:
            conditions.append(RechargeRecord.amount >= filters.min_amount)
        if filters.max_amount is not None:
            conditions.append(RechargeRecord.amount <= filters.max_amount)
        if filters.date_from:
            conditions.append(RechargeRecord.created_at >= filters.date_from)
        if filters.date_to:
            conditions.append(RechargeRecord.created_at <= filters.date_to)

        base = select(RechargeRecord).outerjoin(
            owner, owner.user_id == RechargeRecord.user_id
        )
        total = await self.db.scalar(
            select(func.count()).select_from(base.where(*conditions).subquery())
        )

        result = await self.db.execute(
            select(RechargeRecord, owner.email, AdminUser.email)
            .outerjoin(owner, owner.user_id == RechargeRecord.user_id)
            .outerjoin(AdminUser, AdminUser.user_id == RechargeRecord.admin_id)
            .where(*conditions)
            .order_by(RechargeRecord.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        rows = [
            RechargeRow(record=record, user_email=user_email, admin_email=admin_email)
            for record, user_email, admin_email in result.all()
        ]

        breakdown_result = await self.db.execute(
            select(
                RechargeRecord.status,
                func.count(),
                func.coalesce(func.sum(RechargeRecord.amount), 0),
            ).group_by(RechargeRecord.status)
        )
        status_breakdown = {
            status_value: {"count": count, "total_amount": int(amount_sum)}
            for status_value, count, amount_sum in breakdown_result.all()
        }

        return RechargeListing(
            rows=rows,
            total=total or 0,
            status_breakdown=status_breakdown,
            total_amount=sum(v["total_amount"] for v in status_breakdown.values()),
        )
