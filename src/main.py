from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.core.exceptions.base import register_exception_handlers
from src.api.core.middleware.auth import auth_middleware
from src.api.core.middleware.logging import logging_middleware
from src.api.core.middleware.security import (
    PayloadSizeMiddleware,
    SecurityHeadersMiddleware,
)
from src.api.router import api_router
from src.database.connection import AsyncSessionLocal
from src.modules.identity.supabase import SupabaseAuthClient
from src.redis.client import close_redis_pool
from src.utils.logger import setup_logging
from src.utils.settings.app import AppSettings
from src.utils.settings.auth import AuthSettings

app_settings = AppSettings()
is_production = app_settings.is_production


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger = setup_logging(is_production, app_settings.LOG_LEVEL)
    logger.info("Starting Banana AI Studio API...")

    app_settings.validate_prod()

    app.state.session_factory = AsyncSessionLocal
    # Tests install their own identity client before startup
    if getattr(app.state, "identity_client", None) is None:
        auth_settings = AuthSettings()
        auth_settings.validate_required()
        app.state.identity_client = SupabaseAuthClient(auth_settings)

    yield

    logger.info("Shutting down Banana AI Studio API...")
    await close_redis_pool()


app = FastAPI(
    title="Banana AI Studio API",
    description="Points ledger, recharge review and registration for Banana AI Studio",
    version=app_settings.API_VERSION,
    lifespan=lifespan,
    docs_url=None if is_production else "/docs",
    redoc_url=None if is_production else "/redoc",
    openapi_url=None if is_production else "/openapi.json",
)

register_exception_handlers(app)

# Last added is outermost
app.middleware("http")(auth_middleware)
app.middleware("http")(logging_middleware)
app.add_middleware(
    PayloadSizeMiddleware, max_request_size=app_settings.MAX_REQUEST_SIZE
)
app.add_middleware(SecurityHeadersMiddleware, is_production=is_production)
# Bearer tokens only, no cookies, so wildcard origins stay valid
app.add_middleware(
    CORSMiddleware,
    allow_origins=app_settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=86400,
)

app.include_router(api_router)


def run_dev_server():
    """Run development server with auto-reload."""
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=8010, reload=True, access_log=False
    )


def run_prod_server():
    """Run production server."""
    uvicorn.run(
        "src.main:app", host="0.0.0.0", port=8010, reload=False, access_log=False
    )
