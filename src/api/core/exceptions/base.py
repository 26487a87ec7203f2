"""Global exception handlers for the FastAPI application."""

import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..messages import MessageCode, get_default_message
from src.utils.logger import get_logger

logger = get_logger(__name__)


def error_body(
    message_code: MessageCode, message: str, details: dict | None = None
) -> dict:
    return {
        "error": {
            "code": message_code.value,
            "message": message,
            "details": details or {},
        }
    }


class BananaStudioException(Exception):
    """Base exception for the API with unified message codes."""

    def __init__(
        self,
        message_code: MessageCode,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: dict | None = None,
        headers: dict | None = None,
        message: str | None = None,
    ):
        self.message_code = message_code
        self.status_code = status_code
        self.message: str = message or get_default_message(message_code)
        self.details = details or {}
        self.headers = headers or {}
        super().__init__(self.message)

    def to_response_dict(self) -> dict:
        """Convert exception to API response format."""
        return error_body(self.message_code, self.message, self.details)

    def to_response(self) -> JSONResponse:
        return JSONResponse(
            status_code=self.status_code,
            content=self.to_response_dict(),
            headers=self.headers,
        )


def _serializable_validation_errors(errors: list) -> list[dict]:
    serializable = []
    for error in errors:
        serializable.append(
            {
                "field": ".".join(str(part) for part in error.get("loc", ())[1:]),
                "type": error.get("type"),
                "msg": error.get("msg"),
            }
        )
    return serializable


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app."""

    @app.exception_handler(BananaStudioException)
    async def banana_studio_exception_handler(
        request: Request, exc: BananaStudioException
    ) -> JSONResponse:
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "api_exception",
            path=request.url.path,
            method=request.method,
            message_code=exc.message_code.value,
            status_code=exc.status_code,
            details=exc.details,
        )
        return exc.to_response()

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle FastAPI/Starlette HTTP exceptions (404 routes, 405 methods)."""
        logger.warning(
            "http_exception",
            path=request.url.path,
            method=request.method,
            status_code=exc.status_code,
        )
        message_code = (
            MessageCode.RESOURCE_NOT_FOUND
            if exc.status_code == status.HTTP_404_NOT_FOUND
            else MessageCode.BAD_REQUEST
        )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(message_code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        """Malformed or missing fields are client errors (400)."""
        validation_errors = _serializable_validation_errors(exc.errors())
        logger.warning(
            "validation_error",
            path=request.url.path,
            method=request.method,
            errors=validation_errors,
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(
                MessageCode.INVALID_INPUT,
                get_default_message(MessageCode.INVALID_INPUT),
                {"validation_errors": validation_errors},
            ),
        )

    @app.exception_handler(SQLAlchemyError)
    async def sqlalchemy_exception_handler(
        request: Request, exc: SQLAlchemyError
    ) -> JSONResponse:
        """Handle SQLAlchemy database errors."""
        logger.error(
            "database_error",
            path=request.url.path,
            method=request.method,
            exception_type=type(exc).__name__,
            error=str(exc),
        )

        if isinstance(exc, IntegrityError):
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content=error_body(
                    MessageCode.BAD_REQUEST, "Data integrity constraint violated"
                ),
            )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(
                MessageCode.DATABASE_ERROR,
                get_default_message(MessageCode.DATABASE_ERROR),
            ),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle all other unhandled exceptions."""
        if isinstance(exc, BananaStudioException):
            return await banana_studio_exception_handler(request, exc)

        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            exception_type=type(exc).__name__,
            traceback=traceback.format_exc(),
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(
                MessageCode.INTERNAL_ERROR,
                get_default_message(MessageCode.INTERNAL_ERROR),
                {"error_type": type(exc).__name__},
            ),
        )
