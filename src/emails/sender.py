"""Outbound email through Resend."""

import asyncio

import resend
from fastapi import status

from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import MessageCode
from src.emails.render import render_email
from src.utils.logger import get_logger
from src.utils.settings.email import EmailSettings

logger = get_logger(__name__)


class EmailSender:
    def __init__(self, settings: EmailSettings | None = None):
        self.settings = settings or EmailSettings()

    async def send_verification_code(
        self, to_email: str, code: str, expires_minutes: int
    ) -> str:
        """Send the registration code; returns the provider message id."""
        if not self.settings.RESEND_API_KEY:
            logger.error("resend_api_key_missing", to=to_email)
            raise BananaStudioException(
                MessageCode.EMAIL_SEND_FAILED,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                {"description": "Email service is not configured"},
            )

        email_data = render_email(
            "verification_code",
            locale=self.settings.EMAIL_LOCALE,
            code=code,
            expires_minutes=expires_minutes,
        )
        resend.api_key = self.settings.RESEND_API_KEY

        try:
            # The Resend SDK is synchronous
            response = await asyncio.to_thread(
                resend.Emails.send,
                {
                    "from": self.settings.sender,
                    "to": [to_email],
                    "subject": email_data["subject"],
                    "html": email_data["html"],
                    "tags": [{"name": "category", "value": "verification_code"}],
                },
            )
        except Exception as e:
            logger.error(
                "verification_email_failed",
                to=to_email,
                exception_type=type(e).__name__,
                error=str(e),
            )
            raise BananaStudioException(
                MessageCode.EMAIL_SEND_FAILED,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            ) from e

        logger.info("verification_email_sent", to=to_email, email_id=response["id"])
        return response["id"]
