"""Read-only admin listings with filters and aggregate stats."""

from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import func, select

from src.core.base import BaseService
from src.database.models import (
    AdminPrivilege,
    AdminUser,
    CreditTransaction,
    TransactionType,
    UserCredits,
)


@dataclass
class UserCreditsListing:
    users: list[UserCredits]
    total: int
    credit_stats: dict[str, int] = field(default_factory=dict)


@dataclass
class TransactionRow:
    transaction: CreditTransaction
    user_email: str | None


@dataclass
class TransactionListing:
    rows: list[TransactionRow]
    total: int
    type_breakdown: dict[str, dict[str, int]] = field(default_factory=dict)


@dataclass
class AdminListing:
    admins: list[AdminUser]
    total: int
    level_breakdown: dict[str, int] = field(default_factory=dict)


class AdminQueryService(BaseService):
    async def users_with_credits(
        self,
        search: str | None = None,
        min_credits: int | None = None,
        max_credits: int | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> UserCreditsListing:
        conditions = []
        if search:
            conditions.append(UserCredits.email.ilike(f"%{search}%"))
        if min_credits is not None:
            conditions.append(UserCredits.remaining_credits >= min_credits)
        if max_credits is not None:
            conditions.append(UserCredits.remaining_credits <= max_credits)

        total = await self.db.scalar(
            select(func.count()).select_from(UserCredits).where(*conditions)
        )
        result = await self.db.execute(
            select(UserCredits)
            .where(*conditions)
            .order_by(UserCredits.updated_at.desc())
            .limit(limit)
            .offset(offset)
        )

        # Stats cover every user, not just the filtered page
        stats_row = (
            await self.db.execute(
                select(
                    func.count(),
                    func.coalesce(func.sum(UserCredits.remaining_credits), 0),
                    func.coalesce(func.min(UserCredits.remaining_credits), 0),
                    func.coalesce(func.max(UserCredits.remaining_credits), 0),
                )
            )
        ).one()
        user_count, credit_sum, credit_min, credit_max = stats_row
        credit_stats = {
            "total": int(credit_sum),
            "average": round(credit_sum / user_count) if user_count else 0,
            "min": int(credit_min),
            "max": int(credit_max),
        }

        return UserCreditsListing(
            users=list(result.scalars().all()),
            total=total or 0,
            credit_stats=credit_stats,
        )

    async def transactions_with_users(
        self,
        transaction_type: TransactionType | None = None,
        user_search: str | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> TransactionListing:
        conditions = []
        if transaction_type:
            conditions.append(
                CreditTransaction.transaction_type
                == TransactionType(transaction_type).value
            )
        if user_search:
            conditions.append(UserCredits.email.ilike(f"%{user_search}%"))
        if date_from:
            conditions.append(CreditTransaction.created_at >= date_from)
        if date_to:
            conditions.append(CreditTransaction.created_at <= date_to)

        joined = select(CreditTransaction, UserCredits.email).outerjoin(
            UserCredits, UserCredits.user_id == CreditTransaction.user_id
        )
        total = await self.db.scalar(
            select(func.count()).select_from(joined.where(*conditions).subquery())
        )
        result = await self.db.execute(
            joined.where(*conditions)
            .order_by(CreditTransaction.created_at.desc(), CreditTransaction.id)
            .limit(limit)
            .offset(offset)
        )
        rows = [
            TransactionRow(transaction=transaction, user_email=email)
            for transaction, email in result.all()
        ]

        breakdown_result = await self.db.execute(
            select(
                CreditTransaction.transaction_type,
                func.count(),
                func.coalesce(func.sum(func.abs(CreditTransaction.amount)), 0),
            ).group_by(CreditTransaction.transaction_type)
        )
        type_breakdown = {
            type_value: {"count": count, "total_amount": int(amount_sum)}
            for type_value, count, amount_sum in breakdown_result.all()
        }

        return TransactionListing(
            rows=rows, total=total or 0, type_breakdown=type_breakdown
        )

    async def admin_roster(
        self,
        privilege: AdminPrivilege | None = None,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> AdminListing:
        conditions = []
        if privilege:
            conditions.append(AdminUser.privilege == AdminPrivilege(privilege).value)
        if search:
            conditions.append(AdminUser.email.ilike(f"%{search}%"))

        total = await self.db.scalar(
            select(func.count()).select_from(AdminUser).where(*conditions)
        )
        result = await self.db.execute(
            select(AdminUser)
            .where(*conditions)
            .order_by(AdminUser.created_at.desc())
            .limit(limit)
            .offset(offset)
        )

        level_result = await self.db.execute(
            select(AdminUser.privilege, func.count()).group_by(AdminUser.privilege)
        )
        level_breakdown = {
            privilege_value: count for privilege_value, count in level_result.all()
        }

        return AdminListing(
            admins=list(result.scalars().all()),
            total=total or 0,
            level_breakdown=level_breakdown,
        )
