from typing import Annotated, AsyncGenerator

import redis.asyncio as redis
from fastapi import Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import MessageCode
from src.core.context import AdminContext, AuthenticatedUserContext
from src.database.models import AdminPrivilege
from src.emails.sender import EmailSender
from src.modules.admin.authorization import AdminAuthorizationService
from src.modules.admin.queries import AdminQueryService
from src.modules.admin.settings import AdminSettingsService
from src.modules.admin.stats import AdminStatsService
from src.modules.credits.ledger import CreditLedgerService
from src.modules.identity.supabase import SupabaseAuthClient
from src.modules.recharge.service import RechargeService
from src.modules.registration.service import RegistrationService
from src.modules.verification.service import VerificationCodeService
from src.redis.client import get_redis_client
from src.utils.settings.credits import CreditsSettings

_credits_settings = CreditsSettings()


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session from app state."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        yield session


AsyncSessionDep = Annotated[AsyncSession, Depends(get_db_session)]
RedisDep = Annotated[redis.Redis, Depends(get_redis_client)]


def get_identity_client(request: Request) -> SupabaseAuthClient:
    return request.app.state.identity_client


IdentityClientDep = Annotated[SupabaseAuthClient, Depends(get_identity_client)]


async def get_ledger_service(db: AsyncSessionDep) -> CreditLedgerService:
    return CreditLedgerService(db)


async def get_recharge_service(db: AsyncSessionDep) -> RechargeService:
    return RechargeService(db)


async def get_verification_service(
    db: AsyncSessionDep, redis_client: RedisDep
) -> VerificationCodeService:
    return VerificationCodeService(db, redis_client, EmailSender())


async def get_registration_service(
    db: AsyncSessionDep, identity_client: IdentityClientDep
) -> RegistrationService:
    return RegistrationService(db, identity_client)


async def get_admin_settings_service(db: AsyncSessionDep) -> AdminSettingsService:
    return AdminSettingsService(db)


async def get_admin_query_service(db: AsyncSessionDep) -> AdminQueryService:
    return AdminQueryService(db)


async def get_admin_stats_service(db: AsyncSessionDep) -> AdminStatsService:
    return AdminStatsService(db)


async def get_admin_authorization_service(
    db: AsyncSessionDep,
) -> AdminAuthorizationService:
    return AdminAuthorizationService(db)


LedgerServiceDep = Annotated[CreditLedgerService, Depends(get_ledger_service)]
RechargeServiceDep = Annotated[RechargeService, Depends(get_recharge_service)]
VerificationServiceDep = Annotated[
    VerificationCodeService, Depends(get_verification_service)
]
RegistrationServiceDep = Annotated[
    RegistrationService, Depends(get_registration_service)
]
AdminSettingsServiceDep = Annotated[
    AdminSettingsService, Depends(get_admin_settings_service)
]
AdminQueryServiceDep = Annotated[AdminQueryService, Depends(get_admin_query_service)]
AdminStatsServiceDep = Annotated[AdminStatsService, Depends(get_admin_stats_service)]
AdminAuthorizationServiceDep = Annotated[
    AdminAuthorizationService, Depends(get_admin_authorization_service)
]


async def get_current_user_authenticated(request: Request) -> AuthenticatedUserContext:
    """Caller resolved by the auth middleware."""
    user = getattr(request.state, "user", None)
    if not user:
        raise BananaStudioException(MessageCode.AUTH_REQUIRED, status.HTTP_401_UNAUTHORIZED)
    return AuthenticatedUserContext(user=user)


CurrentUserAuthDep = Annotated[
    AuthenticatedUserContext, Depends(get_current_user_authenticated)
]


def require_admin(minimum: AdminPrivilege):
    """Dependency factory: 403 unless the caller holds ``minimum`` or higher."""

    async def dependency(
        current_user: CurrentUserAuthDep,
        authorization: AdminAuthorizationServiceDep,
    ) -> AdminContext:
        return await authorization.require(current_user, minimum)

    return dependency


AdminContextDep = Annotated[AdminContext, Depends(require_admin(AdminPrivilege.VIEWER))]
MutatingAdminDep = Annotated[AdminContext, Depends(require_admin(AdminPrivilege.ADMIN))]
SuperAdminDep = Annotated[
    AdminContext, Depends(require_admin(AdminPrivilege.SUPER_ADMIN))
]


class PageParams:
    """``limit``/``offset`` query parameters shared by every listing."""

    def __init__(
        self,
        limit: int = Query(
            _credits_settings.DEFAULT_PAGE_LIMIT,
            ge=1,
            le=_credits_settings.MAX_PAGE_LIMIT,
        ),
        offset: int = Query(0, ge=0),
    ):
        self.limit = limit
        self.offset = offset


PageDep = Annotated[PageParams, Depends()]
