import time
import uuid

import structlog
from fastapi import Request

from src.utils.logger import get_client_ip, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


async def logging_middleware(request: Request, call_next):
    """One access log line per request, tagged with a request id."""
    if request.url.path.startswith("/health"):
        return await call_next(request)

    started = time.perf_counter()
    structlog.contextvars.clear_contextvars()
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    structlog.contextvars.bind_contextvars(
        request_id=request_id,
        ip_address=get_client_ip(request),
        method=request.method,
        path=request.url.path,
    )

    response = await call_next(request)
    response.headers[REQUEST_ID_HEADER] = request_id

    log = logger.warning if response.status_code >= 500 else logger.info
    log(
        "request",
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000),
    )
    return response
