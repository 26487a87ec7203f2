"""Public registration API schemas."""

from uuid import UUID

from pydantic import BaseModel, Field

from src.api.core.messages import APIResponse


class VerificationCodeRequest(BaseModel):
    email: str = Field(..., max_length=320)


class VerificationCodeData(BaseModel):
    expires_in: int


class RegisterRequest(BaseModel):
    email: str = Field(..., max_length=320)
    code: str = Field(..., max_length=16)
    password: str = Field(..., max_length=256)


class RegisteredUserModel(BaseModel):
    id: UUID
    email: str | None


class RegisterData(BaseModel):
    user: RegisteredUserModel


VerificationCodeResponse = APIResponse[VerificationCodeData]
RegisterResponse = APIResponse[RegisterData]
