"""One-time email codes that gate registration."""

import re
import secrets
from datetime import timedelta

import redis.asyncio as redis
from fastapi import status
from redis.exceptions import RedisError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import MessageCode
from src.core.base import BaseService
from src.database.models import EmailVerificationCode
from src.emails.sender import EmailSender
from src.utils.settings.credits import CreditsSettings
from src.utils.timeutils import ensure_utc, now_utc

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MAX_EMAIL_LENGTH = 254
CODE_PATTERN = re.compile(r"^\d{6}$")

COOLDOWN_KEY = "verification_code:cooldown:{email}"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return len(email) <= MAX_EMAIL_LENGTH and bool(EMAIL_PATTERN.match(email))


def generate_code() -> str:
    """Uniform six digit code, leading zeros allowed."""
    return f"{secrets.randbelow(1_000_000):06d}"


class VerificationCodeService(BaseService):
    def __init__(
        self,
        db: AsyncSession,
        redis_client: redis.Redis | None = None,
        email_sender: EmailSender | None = None,
        settings: CreditsSettings | None = None,
    ):
        super().__init__(db)
        self.redis_client = redis_client
        self.email_sender = email_sender or EmailSender()
        self.settings = settings or CreditsSettings()

    def _cooldown_error(self, email: str, retry_after: int) -> BananaStudioException:
        self.logger.warning("verification_code_cooldown", email=email)
        return BananaStudioException(
            MessageCode.VERIFICATION_CODE_COOLDOWN,
            status.HTTP_429_TOO_MANY_REQUESTS,
            {"retry_after": retry_after},
            headers={"Retry-After": str(retry_after)},
        )

    async def _claim_cooldown(self, email: str) -> None:
        cooldown = self.settings.VERIFICATION_CODE_COOLDOWN_SECONDS

        if self.redis_client is not None:
            try:
                claimed = await self.redis_client.set(
                    COOLDOWN_KEY.format(email=email), "1", nx=True, ex=cooldown
                )
            except (RedisError, OSError) as e:
                # Database check below still enforces the window
                self.logger.warning("cooldown_store_unavailable", error=str(e))
            else:
                if not claimed:
                    raise self._cooldown_error(email, cooldown)

        window_start = now_utc() - timedelta(seconds=cooldown)
        recent = await self.db.scalar(
            select(EmailVerificationCode.created_at)
            .where(
                EmailVerificationCode.email == email,
                EmailVerificationCode.created_at >= window_start,
            )
            .order_by(EmailVerificationCode.created_at.desc())
            .limit(1)
        )
        if recent is not None:
            elapsed = (now_utc() - ensure_utc(recent)).total_seconds()
            raise self._cooldown_error(email, max(1, int(cooldown - elapsed)))

    async def _release_cooldown(self, email: str) -> None:
        if self.redis_client is None:
            return
        try:
            await self.redis_client.delete(COOLDOWN_KEY.format(email=email))
        except (RedisError, OSError) as e:
            self.logger.warning("cooldown_release_failed", email=email, error=str(e))

    async def issue(self, email: str) -> dict:
        """Store a fresh code and email it. Returns ``{"expires_in": seconds}``."""
        email = normalize_email(email)
        if not is_valid_email(email):
            raise BananaStudioException(
                MessageCode.INVALID_INPUT,
                status.HTTP_400_BAD_REQUEST,
                {"errors": ["Invalid email address"]},
            )

        await self._claim_cooldown(email)

        ttl = self.settings.VERIFICATION_CODE_TTL_SECONDS
        code = generate_code()
        try:
            async with self.atomic():
                self.db.add(
                    EmailVerificationCode(
                        email=email,
                        code=code,
                        expires_at=now_utc() + timedelta(seconds=ttl),
                    )
                )
                await self.db.flush()
                await self.email_sender.send_verification_code(
                    email, code, expires_minutes=ttl // 60
                )
        except Exception:
            # Nothing was sent, so the caller may retry right away
            await self._release_cooldown(email)
            raise

        self.logger.info("verification_code_issued", email=email, expires_in=ttl)
        return {"expires_in": ttl}

    async def consume(self, email: str, code: str) -> EmailVerificationCode:
        """
        Mark the latest matching unused code as used.

        Runs inside the caller's transaction so the consumption only sticks
        when the surrounding operation commits.
        """
        email = normalize_email(email)
        record = (
            await self.db.execute(
                select(EmailVerificationCode)
                .where(
                    EmailVerificationCode.email == email,
                    EmailVerificationCode.code == code,
                    EmailVerificationCode.used.is_(False),
                )
                .order_by(EmailVerificationCode.created_at.desc())
                .limit(1)
                .with_for_update()
            )
        ).scalar_one_or_none()

        if record is None:
            self.logger.warning("verification_code_invalid", email=email)
            raise BananaStudioException(
                MessageCode.VERIFICATION_CODE_INVALID, status.HTTP_400_BAD_REQUEST
            )
        if ensure_utc(record.expires_at) < now_utc():
            self.logger.warning("verification_code_expired", email=email)
            raise BananaStudioException(
                MessageCode.VERIFICATION_CODE_EXPIRED, status.HTTP_400_BAD_REQUEST
            )

        record.used = True
        record.used_at = now_utc()
        await self.db.flush()
        return record
