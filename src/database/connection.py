"""Async engine and session factory for the credits database."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.utils.settings.database import DatabaseSettings


def build_engine(settings: DatabaseSettings) -> AsyncEngine:
    url = settings.DATABASE_URL_ASYNC
    if url.startswith("sqlite"):
        # Local runs against a file; pool sizing does not apply
        return create_async_engine(url, echo=settings.DATABASE_ECHO)
    return create_async_engine(
        url,
        echo=settings.DATABASE_ECHO,
        pool_pre_ping=True,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_recycle=settings.DATABASE_POOL_RECYCLE_SECONDS,
    )


async_engine = build_engine(DatabaseSettings())

# Services keep using rows after commit (balances returned in responses)
AsyncSessionLocal = async_sessionmaker(
    bind=async_engine, class_=AsyncSession, expire_on_commit=False
)
