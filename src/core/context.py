"""Authentication context model for typed user authentication."""

from dataclasses import dataclass
from uuid import UUID

from src.database.models import AdminPrivilege, AdminUser
from src.modules.identity.supabase import IdentityUser


@dataclass
class AuthenticatedUserContext:
    """The caller resolved from the bearer token."""

    user: IdentityUser

    @property
    def user_id(self) -> UUID:
        return self.user.id

    @property
    def email(self) -> str | None:
        return self.user.email


@dataclass
class AdminContext(AuthenticatedUserContext):
    """A caller holding an admin_users row."""

    admin: AdminUser

    @property
    def privilege(self) -> AdminPrivilege:
        return AdminPrivilege(self.admin.privilege)

    @property
    def is_super_admin(self) -> bool:
        return self.privilege is AdminPrivilege.SUPER_ADMIN
