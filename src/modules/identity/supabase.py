"""Client for the Supabase Auth REST API (token lookup and admin user calls)."""

import asyncio
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any
from uuid import UUID

import aiohttp
from fastapi import status

from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import MessageCode
from src.utils.logger import get_logger
from src.utils.sanitize import sanitize_error_message
from src.utils.settings.auth import AuthSettings

logger = get_logger(__name__)

ALREADY_REGISTERED_PATTERN = re.compile(r"already (been )?registered", re.IGNORECASE)


@dataclass
class IdentityUser:
    """The subset of an auth user the API relies on."""

    id: UUID
    email: str | None = None
    created_at: datetime | None = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "IdentityUser":
        created_at = payload.get("created_at")
        return cls(
            id=UUID(str(payload["id"])),
            email=payload.get("email"),
            created_at=datetime.fromisoformat(created_at.replace("Z", "+00:00"))
            if created_at
            else None,
        )


class IdentityProviderError(Exception):
    """Non-success answer from the identity provider."""

    def __init__(self, status_code: int, message: str, error_code: str | None = None):
        self.status_code = status_code
        self.message = message
        self.error_code = error_code
        super().__init__(f"{status_code}: {message}")

    @property
    def is_already_registered(self) -> bool:
        return self.error_code == "email_exists" or bool(
            ALREADY_REGISTERED_PATTERN.search(self.message)
        )


def _error_message(payload: Any) -> tuple[str, str | None]:
    if isinstance(payload, dict):
        message = (
            payload.get("msg")
            or payload.get("message")
            or payload.get("error_description")
            or payload.get("error")
            or ""
        )
        return str(message), payload.get("error_code")
    return str(payload or ""), None


class SupabaseAuthClient:
    """Supabase Auth over REST; tokens are never verified locally."""

    def __init__(self, settings: AuthSettings | None = None):
        settings = settings or AuthSettings()
        self.base_url = settings.auth_base_url
        self.anon_key = settings.SUPABASE_ANON_KEY
        self.service_key = settings.SUPABASE_SERVICE_ROLE_KEY.get_secret_value()
        self.timeout = aiohttp.ClientTimeout(total=settings.SUPABASE_TIMEOUT_SECONDS)

    def _service_headers(self) -> dict[str, str]:
        return {
            "apikey": self.service_key,
            "Authorization": f"Bearer {self.service_key}",
        }

    async def _request(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        json: dict | None = None,
    ) -> tuple[int, Any]:
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.request(
                    method, f"{self.base_url}{path}", headers=headers, json=json
                ) as response:
                    payload = await response.json(content_type=None)
                    return response.status, payload
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("identity_provider_unreachable", path=path, error=str(e))
            raise BananaStudioException(
                MessageCode.IDENTITY_SERVICE_ERROR,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                {"description": "Identity provider request failed"},
            )

    async def get_user(self, token: str) -> IdentityUser:
        """Resolve the user behind a bearer token."""
        status_code, payload = await self._request(
            "GET",
            "/user",
            headers={
                "apikey": self.anon_key or self.service_key,
                "Authorization": f"Bearer {token}",
            },
        )
        if status_code in (
            status.HTTP_400_BAD_REQUEST,
            status.HTTP_401_UNAUTHORIZED,
            status.HTTP_403_FORBIDDEN,
            status.HTTP_404_NOT_FOUND,
        ):
            raise BananaStudioException(
                MessageCode.INVALID_TOKEN, status.HTTP_401_UNAUTHORIZED
            )
        if status_code >= 400 or not isinstance(payload, dict):
            logger.error("identity_lookup_failed", status_code=status_code)
            raise BananaStudioException(
                MessageCode.IDENTITY_SERVICE_ERROR,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return IdentityUser.from_payload(payload)

    async def get_user_by_id(self, user_id: UUID) -> IdentityUser | None:
        status_code, payload = await self._request(
            "GET", f"/admin/users/{user_id}", headers=self._service_headers()
        )
        if status_code == status.HTTP_404_NOT_FOUND:
            return None
        if status_code >= 400:
            message, _ = _error_message(payload)
            logger.error(
                "identity_admin_lookup_failed",
                status_code=status_code,
                error=sanitize_error_message(message),
            )
            raise BananaStudioException(
                MessageCode.IDENTITY_SERVICE_ERROR,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        return IdentityUser.from_payload(payload)

    async def create_user(self, email: str, password: str) -> IdentityUser:
        """Create a confirmed email/password user through the admin API."""
        status_code, payload = await self._request(
            "POST",
            "/admin/users",
            headers=self._service_headers(),
            json={"email": email, "password": password, "email_confirm": True},
        )
        if status_code >= 400:
            message, error_code = _error_message(payload)
            raise IdentityProviderError(status_code, message, error_code)
        # Older GoTrue versions wrap the user object
        user_payload = payload.get("user", payload) if isinstance(payload, dict) else {}
        return IdentityUser.from_payload(user_payload)
