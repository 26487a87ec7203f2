import time
import uuid

import redis.asyncio as redis
from redis.exceptions import RedisError

from src.api.core.models.rate_limit import (
    ClientIdentifier,
    RateLimitResult,
)
from src.utils.logger import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """Sliding-window rate limiter backed by a Redis sorted set."""

    def __init__(self, redis_client: redis.Redis):
        self.redis_client = redis_client

    async def is_allowed(
        self, client_identifier: ClientIdentifier, limit: int, window_seconds: int
    ) -> RateLimitResult:
        """
        Record one request for ``client_identifier`` and report whether it fits.

        Redis being unavailable fails open: the request is allowed and the
        error is logged.
        """
        key = client_identifier.to_cache_key()
        current_time = int(time.time())
        window_start = current_time - window_seconds
        request_id = f"req_{current_time}_{uuid.uuid4().hex}"

        try:
            pipe = self.redis_client.pipeline()
            pipe.zremrangebyscore(key, 0, window_start)
            pipe.zcard(key)
            pipe.zadd(key, {request_id: current_time})
            pipe.expire(key, window_seconds + 1)
            results = await pipe.execute()

            # zcard ran before our zadd
            current_count = results[1] + 1
            time_to_reset = None

            if current_count > limit:
                oldest = await self.redis_client.zrange(key, 0, 0, withscores=True)
                if oldest:
                    time_to_reset = max(
                        0, window_seconds - (current_time - int(oldest[0][1]))
                    )
                else:
                    time_to_reset = window_seconds
                await self.redis_client.zrem(key, request_id)
                current_count -= 1
                is_allowed = False
            else:
                is_allowed = True

        except (RedisError, OSError) as e:
            logger.error(
                "rate_limiter_unavailable",
                client=str(client_identifier),
                error=str(e),
            )
            is_allowed, current_count, time_to_reset = True, 0, None

        return RateLimitResult(
            is_allowed=is_allowed,
            current_count=current_count,
            time_to_reset=time_to_reset,
            client_identifier=client_identifier,
            limit=limit,
            window_seconds=window_seconds,
        )
