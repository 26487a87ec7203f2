"""Single source of truth for admin privilege checks."""

from uuid import UUID

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import MessageCode
from src.core.base import BaseService
from src.core.context import AdminContext, AuthenticatedUserContext
from src.database.models import AdminPrivilege, AdminUser


class AdminAuthorizationService(BaseService):
    async def get_admin(self, user_id: UUID) -> AdminUser | None:
        """Admin row for ``user_id``; a failed lookup is an error, never a deny."""
        try:
            result = await self.db.execute(
                select(AdminUser).where(AdminUser.user_id == user_id)
            )
        except SQLAlchemyError as e:
            self.logger.error(
                "admin_lookup_failed", user_id=str(user_id), error=str(e)
            )
            raise BananaStudioException(
                MessageCode.DATABASE_ERROR,
                status.HTTP_500_INTERNAL_SERVER_ERROR,
                {"description": "Admin privilege lookup failed"},
            )
        return result.scalar_one_or_none()

    async def require(
        self,
        user: AuthenticatedUserContext,
        minimum: AdminPrivilege = AdminPrivilege.VIEWER,
    ) -> AdminContext:
        admin = await self.get_admin(user.user_id)
        if admin is None or not AdminPrivilege(admin.privilege).allows(minimum):
            self.logger.warning(
                "admin_access_denied",
                user_id=str(user.user_id),
                required=minimum.value,
                held=admin.privilege if admin else None,
            )
            message_code = (
                MessageCode.SUPER_ADMIN_REQUIRED
                if minimum is AdminPrivilege.SUPER_ADMIN
                else MessageCode.ADMIN_REQUIRED
            )
            raise BananaStudioException(
                message_code,
                status.HTTP_403_FORBIDDEN,
                {"required_privilege": minimum.value},
            )

        if user.email and admin.email is None:
            admin.email = user.email
        return AdminContext(user=user.user, admin=admin)
