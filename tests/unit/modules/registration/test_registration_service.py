"""Tests for code-gated registration."""

from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select

from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import MessageCode
from src.database.models import EmailVerificationCode
from src.modules.identity.supabase import IdentityProviderError
from src.modules.registration.service import (
    RegistrationService,
    registration_problems,
)
from src.modules.verification.service import VerificationCodeService
from src.utils.timeutils import now_utc
from tests.utils.queries import fetch_balance


@pytest.fixture
def registration(db_session, identity_client):
    return RegistrationService(
        db_session,
        identity_client,
        verification=VerificationCodeService(db_session, None, MagicMock()),
    )


def test_registration_problems_collects_all():
    problems = registration_problems("bad", "short", "12ab")

    assert problems == [
        "Invalid email address",
        "Verification code must be 6 digits",
        "Password must be between 8 and 128 characters",
        "Password must contain a digit",
    ]


def test_registration_problems_password_rules():
    assert registration_problems("a@b.co", "abcdefgh", "123456") == [
        "Password must contain a digit"
    ]
    assert registration_problems("a@b.co", "12345678", "123456") == [
        "Password must contain a letter"
    ]
    assert registration_problems("a@b.co", "abcd1234", "123456") == []


@pytest.mark.asyncio
async def test_register_creates_identity_and_zero_balance(
    db_session, identity_client, registration, verification_code_factory
):
    await verification_code_factory.create_async(
        db_session, email="new@example.com", code="123456"
    )
    await db_session.commit()

    user = await registration.register("New@Example.com", "abcd1234", "123456")

    assert user.email == "new@example.com"
    assert identity_client.created == [("new@example.com", "abcd1234")]
    balance = await fetch_balance(db_session, user.id)
    assert balance.remaining_credits == 0
    assert balance.email == "new@example.com"
    code = await db_session.scalar(select(EmailVerificationCode))
    assert code.used is True


@pytest.mark.asyncio
async def test_register_with_expired_code_creates_nothing(
    db_session, identity_client, registration, verification_code_factory
):
    """An expired code stops registration before any account exists."""
    await verification_code_factory.create_async(
        db_session,
        email="new@example.com",
        code="123456",
        expires_at=now_utc() - timedelta(seconds=1),
    )
    await db_session.commit()

    with pytest.raises(BananaStudioException) as exc_info:
        await registration.register("new@example.com", "abcd1234", "123456")

    assert exc_info.value.message_code == MessageCode.VERIFICATION_CODE_EXPIRED
    assert identity_client.created == []


@pytest.mark.asyncio
async def test_register_invalid_input_lists_errors(registration, identity_client):
    with pytest.raises(BananaStudioException) as exc_info:
        await registration.register("new@example.com", "abc", "123456")

    exc = exc_info.value
    assert exc.message_code == MessageCode.INVALID_INPUT
    assert exc.message == exc.details["errors"][0]
    assert identity_client.created == []


@pytest.mark.asyncio
async def test_register_existing_email_keeps_code_unused(
    db_session, identity_client, registration, verification_code_factory
):
    """A provider rejection rolls back the code consumption."""
    identity_client.add_user("taken@example.com")
    await verification_code_factory.create_async(
        db_session, email="taken@example.com", code="123456"
    )
    await db_session.commit()

    with pytest.raises(BananaStudioException) as exc_info:
        await registration.register("taken@example.com", "abcd1234", "123456")

    assert exc_info.value.message_code == MessageCode.EMAIL_ALREADY_REGISTERED
    code = await db_session.scalar(select(EmailVerificationCode))
    await db_session.refresh(code)
    assert code.used is False


@pytest.mark.asyncio
async def test_register_provider_error_is_sanitized(
    db_session, identity_client, registration, verification_code_factory
):
    identity_client.create_error = IdentityProviderError(
        500, "invalid service_role key supplied"
    )
    await verification_code_factory.create_async(
        db_session, email="new@example.com", code="123456"
    )
    await db_session.commit()

    with pytest.raises(BananaStudioException) as exc_info:
        await registration.register("new@example.com", "abcd1234", "123456")

    assert exc_info.value.message_code == MessageCode.IDENTITY_SERVICE_ERROR
    assert "key" not in exc_info.value.message
