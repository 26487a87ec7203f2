"""Email verification code and registration endpoints (public)."""

from fastapi import APIRouter, Request

from src.api.auth.schemas import (
    RegisterData,
    RegisteredUserModel,
    RegisterRequest,
    RegisterResponse,
    VerificationCodeData,
    VerificationCodeRequest,
    VerificationCodeResponse,
)
from src.api.core.constants import RateLimitScopes
from src.api.core.decorators.rate_limit import rate_limit
from src.api.core.dependencies import (
    RedisDep,
    RegistrationServiceDep,
    VerificationServiceDep,
)
from src.api.core.messages import APIResponse, MessageCode
from src.utils.settings.credits import CreditsSettings

credits_settings = CreditsSettings()

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/verification-code", response_model=VerificationCodeResponse)
@rate_limit(
    limit=credits_settings.VERIFICATION_CODE_RATE_LIMIT,
    window_seconds=credits_settings.VERIFICATION_CODE_RATE_WINDOW_SECONDS,
    scope=RateLimitScopes.VERIFICATION_CODE,
)
async def send_verification_code(
    request: Request,
    body: VerificationCodeRequest,
    verification: VerificationServiceDep,
    redis_client: RedisDep,
) -> VerificationCodeResponse:
    """Email a six digit code valid for five minutes."""
    issued = await verification.issue(body.email)
    return APIResponse.success(
        message_code=MessageCode.VERIFICATION_CODE_SENT,
        data=VerificationCodeData(**issued),
    )


@router.post("/register", response_model=RegisterResponse)
@rate_limit(
    limit=credits_settings.REGISTER_RATE_LIMIT,
    window_seconds=credits_settings.REGISTER_RATE_WINDOW_SECONDS,
    scope=RateLimitScopes.REGISTER,
)
async def register_with_code(
    request: Request,
    body: RegisterRequest,
    registration: RegistrationServiceDep,
    redis_client: RedisDep,
) -> RegisterResponse:
    """Create a confirmed account from email, code and password."""
    user = await registration.register(body.email, body.password, body.code)
    return APIResponse.success(
        message_code=MessageCode.USER_REGISTERED,
        data=RegisterData(user=RegisteredUserModel(id=user.id, email=user.email)),
    )
