from functools import wraps
from typing import Any, Callable

import redis.asyncio as redis
from fastapi import Request, status

from src.api.core.decorators._common import extract_request_and_redis
from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import MessageCode
from src.api.core.models.rate_limit import ClientIdentifier, RateLimitClientType
from src.core.rate_limiting import RateLimiter
from src.utils.logger import get_client_ip, get_logger

logger = get_logger(__name__)


def create_rate_limit_key(request: Request, scope: str) -> ClientIdentifier:
    """Authenticated callers are limited per user, anonymous ones per IP."""
    user = getattr(request.state, "user", None)
    if user is not None:
        return ClientIdentifier(
            client_type=RateLimitClientType.USER, client_id=str(user.id), scope=scope
        )
    return ClientIdentifier(
        client_type=RateLimitClientType.IP,
        client_id=get_client_ip(request),
        scope=scope,
    )


def rate_limit(limit: int, window_seconds: int, scope: str = "default"):
    """
    Rate limiting decorator for FastAPI endpoints.

    The endpoint must take ``request: Request`` and a ``redis_client``
    dependency; without a Redis client the check is skipped.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            request, redis_client = extract_request_and_redis(*args, **kwargs)

            if not request:
                logger.error("rate_limit_request_missing", endpoint=func.__name__)
                return await func(*args, **kwargs)

            if not redis_client:
                logger.warning("rate_limit_redis_missing", endpoint=func.__name__)
                return await func(*args, **kwargs)

            await check_rate_limit(request, redis_client, limit, window_seconds, scope)
            return await func(*args, **kwargs)

        return wrapper

    return decorator


async def check_rate_limit(
    request: Request,
    redis_client: redis.Redis,
    limit: int,
    window_seconds: int,
    scope: str = "default",
) -> None:
    """
    Raises:
        BananaStudioException: 429 when the caller is over the limit
    """
    client_identifier = create_rate_limit_key(request, scope)
    result = await RateLimiter(redis_client).is_allowed(
        client_identifier, limit, window_seconds
    )

    if not result.is_allowed:
        retry_after = result.time_to_reset or result.window_seconds
        logger.warning(
            "rate_limit_exceeded",
            rate_key=client_identifier.to_cache_key(),
            current_count=result.current_count,
            limit=result.limit,
            window_seconds=result.window_seconds,
        )
        raise BananaStudioException(
            MessageCode.RATE_LIMIT_EXCEEDED,
            status.HTTP_429_TOO_MANY_REQUESTS,
            details={
                "limit": result.limit,
                "window_seconds": result.window_seconds,
                "retry_after": retry_after,
                "client_type": client_identifier.client_type.value,
            },
            headers={
                "Retry-After": str(retry_after),
                "X-RateLimit-Limit": str(result.limit),
                "X-RateLimit-Reset": str(retry_after),
                "X-RateLimit-Window": str(result.window_seconds),
            },
        )
