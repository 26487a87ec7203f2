"""Email + code + password registration against the identity provider."""

import re

from fastapi import status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import MessageCode
from src.core.base import BaseService
from src.modules.credits.ledger import CreditLedgerService
from src.modules.identity.supabase import (
    IdentityProviderError,
    IdentityUser,
    SupabaseAuthClient,
)
from src.modules.verification.service import (
    CODE_PATTERN,
    VerificationCodeService,
    is_valid_email,
    normalize_email,
)
from src.utils.sanitize import sanitize_error_message

MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_LENGTH = 128

_LETTER = re.compile(r"[A-Za-z]")
_DIGIT = re.compile(r"\d")


def registration_problems(email: str, password: str, code: str) -> list[str]:
    """Every reason the input is unacceptable, in a stable order."""
    problems = []
    if not is_valid_email(email):
        problems.append("Invalid email address")
    if not CODE_PATTERN.match(code or ""):
        problems.append("Verification code must be 6 digits")
    password = password or ""
    if not MIN_PASSWORD_LENGTH <= len(password) <= MAX_PASSWORD_LENGTH:
        problems.append(
            f"Password must be between {MIN_PASSWORD_LENGTH} and "
            f"{MAX_PASSWORD_LENGTH} characters"
        )
    if not _LETTER.search(password):
        problems.append("Password must contain a letter")
    if not _DIGIT.search(password):
        problems.append("Password must contain a digit")
    return problems


class RegistrationService(BaseService):
    def __init__(
        self,
        db: AsyncSession,
        identity_client: SupabaseAuthClient,
        verification: VerificationCodeService | None = None,
        ledger: CreditLedgerService | None = None,
    ):
        super().__init__(db)
        self.identity_client = identity_client
        self.verification = verification or VerificationCodeService(db)
        self.ledger = ledger or CreditLedgerService(db)

    async def _create_identity(self, email: str, password: str) -> IdentityUser:
        try:
            return await self.identity_client.create_user(email, password)
        except IdentityProviderError as e:
            if e.is_already_registered:
                self.logger.warning("registration_email_taken", email=email)
                raise BananaStudioException(
                    MessageCode.EMAIL_ALREADY_REGISTERED, status.HTTP_400_BAD_REQUEST
                ) from e
            self.logger.error(
                "registration_identity_failed",
                email=email,
                status_code=e.status_code,
                error=sanitize_error_message(e.message),
            )
            raise BananaStudioException(
                MessageCode.IDENTITY_SERVICE_ERROR,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                message=sanitize_error_message(
                    e.message, "Registration failed, please check your input"
                ),
            ) from e

    async def register(self, email: str, password: str, code: str) -> IdentityUser:
        email = normalize_email(email)
        problems = registration_problems(email, password, code)
        if problems:
            raise BananaStudioException(
                MessageCode.INVALID_INPUT,
                status.HTTP_400_BAD_REQUEST,
                {"errors": problems},
                message=problems[0],
            )

        async with self.atomic():
            await self.verification.consume(email, code)
            user = await self._create_identity(email, password)
            await self.ledger.open_account(user.id, email)

        self.logger.info("user_registered", user_id=str(user.id), email=email)
        return user
