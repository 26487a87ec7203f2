import structlog
from fastapi import Request, status

from src.api.core.constants import SKIP_AUTH_PATHS, SKIP_AUTH_PATTERNS
from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import MessageCode
from src.utils.path_helpers import path_matches, path_matches_pattern

logger = structlog.get_logger(__name__)


def _bearer_token(authorization: str) -> str:
    parts = authorization.split(" ")
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1]:
        raise BananaStudioException(
            MessageCode.AUTH_REQUIRED,
            status.HTTP_401_UNAUTHORIZED,
            {"description": "Authorization header must be 'Bearer <token>'"},
        )
    return parts[1]


async def auth_middleware(request: Request, call_next):
    """
    Resolve the bearer token to an identity-provider user.

    Sets ``request.state.user``; public paths and CORS preflights pass through
    with ``None``. Errors are answered here because exceptions raised from an
    http middleware bypass the app's exception handlers.
    """
    request.state.user = None

    if request.method == "OPTIONS" or path_matches(
        request.url.path, SKIP_AUTH_PATHS
    ) or path_matches_pattern(request.url.path, SKIP_AUTH_PATTERNS, request.method):
        return await call_next(request)

    try:
        token = _bearer_token(request.headers.get("Authorization", ""))
        identity_client = request.app.state.identity_client
        request.state.user = await identity_client.get_user(token)
    except BananaStudioException as e:
        logger.warning(
            "authentication_failed",
            path=request.url.path,
            message_code=e.message_code.value,
            status_code=e.status_code,
        )
        return e.to_response()

    structlog.contextvars.bind_contextvars(user_id=str(request.state.user.id))
    return await call_next(request)
