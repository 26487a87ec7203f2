import asyncio
from dataclasses import dataclass
from typing import Literal

import redis.asyncio as redis
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.utils.logger import get_logger
from src.utils.timeutils import now_utc

logger = get_logger(__name__)

HealthState = Literal["healthy", "degraded", "unhealthy"]


@dataclass
class HealthCheckResult:
    """Result of a single dependency check."""

    service: str
    status: HealthState
    connected: bool
    details: dict
    error: str | None = None


@dataclass
class OverallHealthStatus:
    status: HealthState
    services: dict[str, HealthCheckResult]
    timestamp: str


class HealthService:
    """Checks the database and the Redis throttling store."""

    def __init__(self, db: AsyncSession, redis_client: redis.Redis):
        self.db = db
        self.redis = redis_client

    async def check_database_health(self) -> HealthCheckResult:
        try:
            result = await self.db.execute(text("SELECT 1"))
            return HealthCheckResult(
                service="database",
                status="healthy",
                connected=True,
                details={"test_query_result": result.scalar()},
            )
        except (SQLAlchemyError, OSError) as e:
            logger.error("database_health_check_failed", error=str(e))
            return HealthCheckResult(
                service="database",
                status="unhealthy",
                connected=False,
                details={},
                error=type(e).__name__,
            )

    async def check_redis_health(self) -> HealthCheckResult:
        """Redis only backs throttling, so an outage degrades rather than fails."""
        try:
            await self.redis.ping()
            return HealthCheckResult(
                service="redis", status="healthy", connected=True, details={}
            )
        except (RedisError, OSError) as e:
            logger.error("redis_health_check_failed", error=str(e))
            return HealthCheckResult(
                service="redis",
                status="degraded",
                connected=False,
                details={"rate_limiting": "fail_open"},
                error=type(e).__name__,
            )

    async def run_all_checks(self) -> OverallHealthStatus:
        results = await asyncio.gather(
            self.check_database_health(), self.check_redis_health()
        )

        overall: HealthState = "healthy"
        for result in results:
            if result.status == "unhealthy":
                overall = "unhealthy"
            elif result.status == "degraded" and overall == "healthy":
                overall = "degraded"

        return OverallHealthStatus(
            status=overall,
            services={result.service: result for result in results},
            timestamp=now_utc().isoformat(),
        )
