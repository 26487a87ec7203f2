from typing import Any

import redis.asyncio as redis
from fastapi import Request


def _find(kind: type, name: str, args: tuple, kwargs: dict) -> Any:
    for arg in args:
        if isinstance(arg, kind):
            return arg
    value = kwargs.get(name)
    return value if isinstance(value, kind) else None


def extract_request_and_redis(
    *args: Any, **kwargs: Any
) -> tuple[Request | None, redis.Redis | None]:
    """Pull the Request and Redis client out of an endpoint's call arguments."""
    return (
        _find(Request, "request", args, kwargs),
        _find(redis.Redis, "redis_client", args, kwargs),
    )
