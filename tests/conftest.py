"""Global test configuration and fixtures for the Banana AI Studio API."""

import os
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
import redis.asyncio as redis
from asgi_lifespan import LifespanManager
from fastapi import FastAPI, status
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import MessageCode
from src.database.models import AdminPrivilege, AdminUser, Base
from src.modules.identity.supabase import IdentityProviderError, IdentityUser
from src.utils.timeutils import now_utc
from tests.factories import (
    AdminUserFactory,
    CreditTransactionFactory,
    EmailVerificationCodeFactory,
    RechargeRecordFactory,
    UserCreditsFactory,
)

BASE_URL = "http://test-banana-studio-api"


class FakeIdentityClient:
    """In-memory stand-in for the Supabase Auth client."""

    def __init__(self):
        self.users: dict[UUID, IdentityUser] = {}
        self.tokens: dict[str, UUID] = {}
        self.created: list[tuple[str, str]] = []
        self.create_error: IdentityProviderError | None = None

    def add_user(self, email: str, token: str | None = None) -> IdentityUser:
        user = IdentityUser(id=uuid4(), email=email, created_at=now_utc())
        self.users[user.id] = user
        if token:
            self.tokens[token] = user.id
        return user

    async def get_user(self, token: str) -> IdentityUser:
        user_id = self.tokens.get(token)
        if user_id is None:
            raise BananaStudioException(
                MessageCode.INVALID_TOKEN, status.HTTP_401_UNAUTHORIZED
            )
        return self.users[user_id]

    async def get_user_by_id(self, user_id: UUID) -> IdentityUser | None:
        return self.users.get(user_id)

    async def create_user(self, email: str, password: str) -> IdentityUser:
        if self.create_error:
            raise self.create_error
        if any(user.email == email for user in self.users.values()):
            raise IdentityProviderError(
                422,
                "A user with this email address has already been registered",
                "email_exists",
            )
        self.created.append((email, password))
        return self.add_user(email)


@pytest.fixture
def user_credits_factory():
    return UserCreditsFactory


@pytest.fixture
def transaction_factory():
    return CreditTransactionFactory


@pytest.fixture
def admin_factory():
    return AdminUserFactory


@pytest.fixture
def recharge_factory():
    return RechargeRecordFactory


@pytest.fixture
def verification_code_factory():
    return EmailVerificationCodeFactory


@pytest.fixture(scope="session")
def test_database_uri() -> str:
    """SQLite in memory unless TEST_DATABASE_URL points at a real database."""
    return os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


@pytest_asyncio.fixture
async def async_engine(test_database_uri):
    """Fresh schema per test."""
    if test_database_uri.startswith("sqlite"):
        engine = create_async_engine(
            test_database_uri,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_async_engine(test_database_uri, pool_pre_ping=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(bind=async_engine, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest.fixture
def identity_client() -> FakeIdentityClient:
    return FakeIdentityClient()


@pytest.fixture
def redis_client() -> MagicMock:
    """Redis double: the limiter sees an empty window and cooldown keys are free."""
    client = MagicMock(spec=redis.Redis)
    pipeline = MagicMock()
    pipeline.execute = AsyncMock(return_value=[0, 0, 1, True])
    client.pipeline.return_value = pipeline
    client.set = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    client.zrange = AsyncMock(return_value=[])
    client.zrem = AsyncMock(return_value=1)
    client.ping = AsyncMock(return_value=True)
    return client


@pytest.fixture
def mock_resend(monkeypatch):
    """Patch the Resend SDK; yields the mock for call inspection."""
    monkeypatch.setenv("RESEND_API_KEY", "re_test_key")
    with patch(
        "src.emails.sender.resend.Emails.send", return_value={"id": "email_test_1"}
    ) as send:
        yield send


@pytest_asyncio.fixture
async def app(db_session, identity_client, redis_client):
    """FastAPI application bound to the test session, fake identity and Redis."""
    from src.api.core.dependencies import get_db_session
    from src.main import app
    from src.redis.client import get_redis_client

    async def override_db_session():
        yield db_session

    async def override_redis_client():
        return redis_client

    app.dependency_overrides[get_db_session] = override_db_session
    app.dependency_overrides[get_redis_client] = override_redis_client
    app.state.identity_client = identity_client

    async with LifespanManager(app):
        yield app

    app.dependency_overrides.clear()
    app.state.identity_client = None


# Users
@pytest.fixture
def test_user(identity_client) -> IdentityUser:
    return identity_client.add_user("user@example.com", token="user-token")


@pytest.fixture
def other_user(identity_client) -> IdentityUser:
    return identity_client.add_user("other@example.com", token="other-token")


@pytest.fixture
def make_admin(db_session, identity_client):
    """Create an identity user holding an admin row of the given privilege."""

    async def create(
        privilege: AdminPrivilege = AdminPrivilege.ADMIN, token: str | None = None
    ) -> tuple[IdentityUser, AdminUser]:
        token = token or f"{privilege.value}-token-{uuid4().hex[:6]}"
        user = identity_client.add_user(f"{token}@example.com", token=token)
        admin = await AdminUserFactory.create_async(
            db_session, user_id=user.id, email=user.email, privilege=privilege.value
        )
        await db_session.commit()
        return user, admin

    return create


@pytest_asyncio.fixture
async def test_admin(make_admin) -> tuple[IdentityUser, AdminUser]:
    return await make_admin(AdminPrivilege.ADMIN, token="admin-token")


@pytest_asyncio.fixture
async def test_super_admin(make_admin) -> tuple[IdentityUser, AdminUser]:
    return await make_admin(AdminPrivilege.SUPER_ADMIN, token="super-admin-token")


@pytest_asyncio.fixture
async def test_viewer(make_admin) -> tuple[IdentityUser, AdminUser]:
    return await make_admin(AdminPrivilege.VIEWER, token="viewer-token")


# HTTP Client Fixtures
@pytest.fixture
def client_factory(app: FastAPI):
    """Build clients carrying an optional bearer token."""

    def create_client(token: str | None = None) -> AsyncClient:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        return AsyncClient(
            transport=ASGITransport(app=app), base_url=BASE_URL, headers=headers
        )

    return create_client


@pytest_asyncio.fixture
async def public_client(client_factory) -> AsyncGenerator[AsyncClient, None]:
    async with client_factory() as ac:
        yield ac


@pytest_asyncio.fixture
async def authorized_client(
    client_factory, test_user
) -> AsyncGenerator[AsyncClient, None]:
    async with client_factory("user-token") as ac:
        yield ac


@pytest_asyncio.fixture
async def admin_client(client_factory, test_admin) -> AsyncGenerator[AsyncClient, None]:
    async with client_factory("admin-token") as ac:
        yield ac


@pytest_asyncio.fixture
async def super_admin_client(
    client_factory, test_super_admin
) -> AsyncGenerator[AsyncClient, None]:
    async with client_factory("super-admin-token") as ac:
        yield ac


@pytest_asyncio.fixture
async def viewer_client(
    client_factory, test_viewer
) -> AsyncGenerator[AsyncClient, None]:
    async with client_factory("viewer-token") as ac:
        yield ac
