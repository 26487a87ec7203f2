"""Dashboard counters and time-bucketed system statistics."""

from collections import defaultdict
from datetime import datetime, timedelta
from enum import Enum

from fastapi import status
from sqlalchemy import func, select

from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import MessageCode
from src.core.base import BaseService
from src.database.models import (
    AdminPrivilege,
    AdminUser,
    CreditTransaction,
    RechargeRecord,
    RechargeStatus,
    UserCredits,
)
from src.utils.timeutils import ensure_utc, now_utc, start_of_utc_day, start_of_week_sunday


class StatsPeriod(str, Enum):
    WEEK = "7d"
    MONTH = "30d"
    QUARTER = "90d"
    YEAR = "1y"

    @property
    def days(self) -> int:
        return {"7d": 7, "30d": 30, "90d": 90, "1y": 365}[self.value]


class StatsGranularity(str, Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


def _parse(enum_cls, value, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise BananaStudioException(
            MessageCode.INVALID_INPUT,
            status.HTTP_400_BAD_REQUEST,
            {
                "field": field_name,
                "value": value,
                "allowed": [member.value for member in enum_cls],
            },
        )


def bucket_key(moment: datetime, granularity: StatsGranularity) -> str:
    """Label of the UTC bucket that ``moment`` falls into."""
    moment = ensure_utc(moment)
    match granularity:
        case StatsGranularity.HOUR:
            return moment.strftime("%Y-%m-%dT%H:00:00")
        case StatsGranularity.DAY:
            return moment.strftime("%Y-%m-%d")
        case StatsGranularity.WEEK:
            return start_of_week_sunday(moment).strftime("%Y-%m-%d")
        case StatsGranularity.MONTH:
            return moment.strftime("%Y-%m-01")
    raise ValueError(f"Unknown granularity: {granularity}")


class AdminStatsService(BaseService):
    """Aggregates for the admin console; amounts are in credits."""

    async def _count(self, model, *conditions) -> int:
        return (
            await self.db.scalar(select(func.count()).select_from(model).where(*conditions))
            or 0
        )

    async def _credit_sums(self) -> tuple[int, int]:
        row = (
            await self.db.execute(
                select(
                    func.coalesce(func.sum(UserCredits.total_credits), 0),
                    func.coalesce(func.sum(UserCredits.remaining_credits), 0),
                )
            )
        ).one()
        return int(row[0]), int(row[1])

    async def dashboard(self) -> dict:
        now = now_utc()
        today = start_of_utc_day(now)
        total_credits, available_credits = await self._credit_sums()

        return {
            "users": {"total": await self._count(UserCredits)},
            "admins": {"total": await self._count(AdminUser)},
            "transactions": {
                "total": await self._count(CreditTransaction),
                "today": await self._count(
                    CreditTransaction, CreditTransaction.created_at >= today
                ),
            },
            "recharges": {
                "total": await self._count(RechargeRecord),
                "pending": await self._count(
                    RechargeRecord,
                    RechargeRecord.status == RechargeStatus.PENDING.value,
                ),
            },
            "credits": {"total": total_credits, "available": available_credits},
            "generated_at": now.isoformat(),
        }

    async def _transaction_trends(
        self, start: datetime, granularity: StatsGranularity
    ) -> list[dict]:
        result = await self.db.execute(
            select(
                CreditTransaction.created_at,
                CreditTransaction.transaction_type,
                CreditTransaction.amount,
            ).where(CreditTransaction.created_at >= start)
        )
        buckets: dict[str, dict] = defaultdict(
            lambda: {"count": 0, "total_amount": 0, "by_type": defaultdict(int)}
        )
        for created_at, transaction_type, amount in result.all():
            bucket = buckets[bucket_key(created_at, granularity)]
            bucket["count"] += 1
            bucket["total_amount"] += abs(amount)
            bucket["by_type"][transaction_type] += 1

        return [
            {
                "date": key,
                "count": bucket["count"],
                "total_amount": bucket["total_amount"],
                "by_type": dict(bucket["by_type"]),
            }
            for key, bucket in sorted(buckets.items())
        ]

    async def _recharge_trends(
        self, start: datetime, granularity: StatsGranularity
    ) -> list[dict]:
        result = await self.db.execute(
            select(
                RechargeRecord.created_at,
                RechargeRecord.status,
                RechargeRecord.amount,
            ).where(RechargeRecord.created_at >= start)
        )
        buckets: dict[str, dict] = defaultdict(
            lambda: {"count": 0, "total_amount": 0, "by_status": defaultdict(int)}
        )
        for created_at, record_status, amount in result.all():
            bucket = buckets[bucket_key(created_at, granularity)]
            bucket["count"] += 1
            bucket["total_amount"] += amount
            bucket["by_status"][record_status] += 1

        return [
            {
                "date": key,
                "count": bucket["count"],
                "total_amount": bucket["total_amount"],
                "by_status": dict(bucket["by_status"]),
            }
            for key, bucket in sorted(buckets.items())
        ]

    async def _admin_breakdown(self) -> dict[str, int]:
        result = await self.db.execute(
            select(AdminUser.privilege, func.count()).group_by(AdminUser.privilege)
        )
        counts = dict(result.all())
        return {privilege.value: counts.get(privilege.value, 0) for privilege in AdminPrivilege}

    async def _uptime(self, now: datetime) -> dict:
        first_seen = await self.db.scalar(select(func.min(UserCredits.created_at)))
        if first_seen is None:
            return {"since": None, "days": 0, "hours": 0}
        elapsed = now - ensure_utc(first_seen)
        return {
            "since": ensure_utc(first_seen).isoformat(),
            "days": elapsed.days,
            "hours": elapsed.seconds // 3600,
        }

    async def system_stats(
        self,
        period: StatsPeriod | str = StatsPeriod.MONTH,
        granularity: StatsGranularity | str = StatsGranularity.DAY,
    ) -> dict:
        period = _parse(StatsPeriod, period, "period")
        granularity = _parse(StatsGranularity, granularity, "granularity")

        now = now_utc()
        start = now - timedelta(days=period.days)
        today = start_of_utc_day(now)
        total_credits, available_credits = await self._credit_sums()

        overview = {
            "total_users": await self._count(UserCredits),
            "new_users": await self._count(UserCredits, UserCredits.created_at >= start),
            "transactions": await self._count(
                CreditTransaction, CreditTransaction.created_at >= start
            ),
            "recharges": await self._count(
                RechargeRecord, RechargeRecord.created_at >= start
            ),
            "total_credits": total_credits,
            "available_credits": available_credits,
            "today_transactions": await self._count(
                CreditTransaction, CreditTransaction.created_at >= today
            ),
            "today_recharges": await self._count(
                RechargeRecord, RechargeRecord.created_at >= today
            ),
        }

        return {
            "overview": overview,
            "period": {
                "label": period.value,
                "start": start.isoformat(),
                "end": now.isoformat(),
                "granularity": granularity.value,
            },
            "trends": {
                "transactions": await self._transaction_trends(start, granularity),
                "recharges": await self._recharge_trends(start, granularity),
            },
            "admins": await self._admin_breakdown(),
            "uptime": await self._uptime(now),
            "last_updated": now.isoformat(),
        }
