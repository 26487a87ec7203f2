"""Factory for email verification codes."""

from datetime import timedelta

import factory

from src.database.models import EmailVerificationCode
from src.utils.timeutils import now_utc

from .base import AsyncSQLAlchemyModelFactory


class EmailVerificationCodeFactory(AsyncSQLAlchemyModelFactory[EmailVerificationCode]):
    class Meta:
        model = EmailVerificationCode

    email = factory.Sequence(lambda n: f"new{n}@example.com")
    code = "123456"
    expires_at = factory.LazyFunction(lambda: now_utc() + timedelta(minutes=5))
    used = False
    created_at = factory.LazyFunction(now_utc)
