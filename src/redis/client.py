"""Shared async Redis pool for throttling and cooldown keys."""

import redis.asyncio as redis

from src.utils.logger import get_logger
from src.utils.settings.redis import RedisSettings

logger = get_logger(__name__)

_redis_pool: redis.ConnectionPool | None = None


def _build_pool(settings: RedisSettings) -> redis.ConnectionPool:
    return redis.ConnectionPool.from_url(
        settings.REDIS_URL,
        decode_responses=True,
        max_connections=settings.REDIS_MAX_CONNECTIONS,
        socket_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
        socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
    )


async def get_redis_client() -> redis.Redis:
    """FastAPI dependency; clients share one lazily created pool."""
    global _redis_pool
    if _redis_pool is None:
        _redis_pool = _build_pool(RedisSettings())
        logger.info("redis_pool_created")
    return redis.Redis(connection_pool=_redis_pool)


async def close_redis_pool() -> None:
    global _redis_pool
    if _redis_pool is not None:
        await _redis_pool.disconnect()
        _redis_pool = None
        logger.info("redis_pool_closed")
