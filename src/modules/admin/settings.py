"""Admin profile and global settings updates."""

from dataclasses import dataclass
from typing import Any

from fastapi import status
from sqlalchemy import select

from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import MessageCode
from src.core.base import BaseService
from src.core.context import AdminContext
from src.database.models import AdminPrivilege, AdminUser

# Fields any admin may change on their own row
PROFILE_FIELDS = ("payment_qr_code_url", "recharge_instructions")
# Fields reserved for super admins
SUPER_ADMIN_FIELDS = (
    "contact_email",
    "contact_phone",
    "system_settings",
    "auto_approve_recharges",
    "recharge_approval_threshold",
)
# Recharge switches live on the row returned by get_global_settings
GLOBAL_FIELDS = ("auto_approve_recharges", "recharge_approval_threshold")


@dataclass
class SettingsUpdate:
    admin: AdminUser
    global_settings: AdminUser | None
    updated_fields: list[str]


class AdminSettingsService(BaseService):
    async def update(
        self, context: AdminContext, changes: dict[str, Any]
    ) -> SettingsUpdate:
        """Apply only the provided fields; super-admin fields are checked first."""
        unknown = set(changes) - set(PROFILE_FIELDS) - set(SUPER_ADMIN_FIELDS)
        if unknown:
            raise BananaStudioException(
                MessageCode.INVALID_INPUT,
                status.HTTP_400_BAD_REQUEST,
                {"unknown_fields": sorted(unknown)},
            )
        if not changes:
            raise BananaStudioException(
                MessageCode.INVALID_INPUT,
                status.HTTP_400_BAD_REQUEST,
                {"description": "No settings provided"},
            )

        restricted = [name for name in SUPER_ADMIN_FIELDS if name in changes]
        if restricted and not context.is_super_admin:
            self.logger.warning(
                "super_admin_settings_denied",
                user_id=str(context.user_id),
                fields=restricted,
            )
            raise BananaStudioException(
                MessageCode.SUPER_ADMIN_REQUIRED,
                status.HTTP_403_FORBIDDEN,
                {"restricted_fields": restricted},
            )

        async with self.atomic():
            admin = context.admin
            global_settings = await self.get_global_settings()
            for name, value in changes.items():
                target = admin
                if name in GLOBAL_FIELDS and global_settings is not None:
                    target = global_settings
                setattr(target, name, value)
            await self.db.flush()

        updated_fields = [
            name for name in (*PROFILE_FIELDS, *SUPER_ADMIN_FIELDS) if name in changes
        ]
        self.logger.info(
            "admin_settings_updated",
            user_id=str(context.user_id),
            global_settings_id=str(global_settings.id) if global_settings else None,
            updated_fields=updated_fields,
        )
        return SettingsUpdate(
            admin=admin, global_settings=global_settings, updated_fields=updated_fields
        )

    async def get_global_settings(self) -> AdminUser | None:
        """Settings row of the earliest super admin; it carries the global switches."""
        result = await self.db.execute(
            select(AdminUser)
            .where(AdminUser.privilege == AdminPrivilege.SUPER_ADMIN.value)
            .order_by(AdminUser.created_at)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_payment_info(self) -> AdminUser | None:
        """First admin with a payment QR code, shown in the recharge dialog."""
        result = await self.db.execute(
            select(AdminUser)
            .where(AdminUser.payment_qr_code_url.is_not(None))
            .order_by(AdminUser.created_at)
            .limit(1)
        )
        return result.scalar_one_or_none()
