"""Centralized message codes and default messages for API responses."""

from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel


class MessageCode(str, Enum):
    """Centralized message codes for API responses."""

    # Success codes
    SUCCESS = "SUCCESS"
    CREATED = "CREATED"
    UPDATED = "UPDATED"

    # Authentication & Authorization
    AUTH_REQUIRED = "AUTH_REQUIRED"
    INVALID_TOKEN = "INVALID_TOKEN"
    FORBIDDEN = "FORBIDDEN"
    ADMIN_REQUIRED = "ADMIN_REQUIRED"
    SUPER_ADMIN_REQUIRED = "SUPER_ADMIN_REQUIRED"

    # Registration & verification
    VERIFICATION_CODE_SENT = "VERIFICATION_CODE_SENT"
    VERIFICATION_CODE_COOLDOWN = "VERIFICATION_CODE_COOLDOWN"
    VERIFICATION_CODE_INVALID = "VERIFICATION_CODE_INVALID"
    VERIFICATION_CODE_EXPIRED = "VERIFICATION_CODE_EXPIRED"
    EMAIL_ALREADY_REGISTERED = "EMAIL_ALREADY_REGISTERED"
    USER_REGISTERED = "USER_REGISTERED"
    EMAIL_SEND_FAILED = "EMAIL_SEND_FAILED"

    # Credits ledger
    CREDITS_ADDED = "CREDITS_ADDED"
    CREDITS_DEDUCTED = "CREDITS_DEDUCTED"
    INSUFFICIENT_CREDITS = "INSUFFICIENT_CREDITS"
    TRANSACTION_CREATED = "TRANSACTION_CREATED"
    TRANSACTION_TYPE_NOT_ALLOWED = "TRANSACTION_TYPE_NOT_ALLOWED"

    # Recharges
    RECHARGE_CREATED = "RECHARGE_CREATED"
    RECHARGE_UPDATED = "RECHARGE_UPDATED"
    RECHARGE_NOT_FOUND = "RECHARGE_NOT_FOUND"
    RECHARGE_ALREADY_PROCESSED = "RECHARGE_ALREADY_PROCESSED"
    INVALID_STATUS = "INVALID_STATUS"

    # Admin
    ADMIN_VERIFIED = "ADMIN_VERIFIED"
    ADMIN_NOT_FOUND = "ADMIN_NOT_FOUND"
    ADMIN_SETTINGS_UPDATED = "ADMIN_SETTINGS_UPDATED"

    # Resources
    USER_NOT_FOUND = "USER_NOT_FOUND"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"

    # Generic errors
    BAD_REQUEST = "BAD_REQUEST"
    INVALID_INPUT = "INVALID_INPUT"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    IDENTITY_SERVICE_ERROR = "IDENTITY_SERVICE_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


DEFAULT_MESSAGES: dict[MessageCode, str] = {
    MessageCode.SUCCESS: "Success",
    MessageCode.CREATED: "Created",
    MessageCode.UPDATED: "Updated",
    MessageCode.AUTH_REQUIRED: "A valid bearer token is required",
    MessageCode.INVALID_TOKEN: "Invalid or expired authorization token",
    MessageCode.FORBIDDEN: "You do not have permission to perform this action",
    MessageCode.ADMIN_REQUIRED: "Administrator privilege required",
    MessageCode.SUPER_ADMIN_REQUIRED: "Super administrator privilege required",
    MessageCode.VERIFICATION_CODE_SENT: "Verification code sent to your email",
    MessageCode.VERIFICATION_CODE_COOLDOWN: "Please wait 60 seconds before requesting another code",
    MessageCode.VERIFICATION_CODE_INVALID: "Verification code is invalid or already used",
    MessageCode.VERIFICATION_CODE_EXPIRED: "Verification code expired",
    MessageCode.EMAIL_ALREADY_REGISTERED: "This email is already registered",
    MessageCode.USER_REGISTERED: "Registration successful",
    MessageCode.EMAIL_SEND_FAILED: "Failed to send verification email",
    MessageCode.CREDITS_ADDED: "Credits added",
    MessageCode.CREDITS_DEDUCTED: "Credits deducted",
    MessageCode.INSUFFICIENT_CREDITS: "Insufficient credits",
    MessageCode.TRANSACTION_CREATED: "Credit transaction recorded",
    MessageCode.TRANSACTION_TYPE_NOT_ALLOWED: "Transaction type not allowed for this caller",
    MessageCode.RECHARGE_CREATED: "Recharge request created",
    MessageCode.RECHARGE_UPDATED: "Recharge status updated",
    MessageCode.RECHARGE_NOT_FOUND: "Recharge record not found",
    MessageCode.RECHARGE_ALREADY_PROCESSED: "Recharge record has already been processed",
    MessageCode.INVALID_STATUS: "Invalid recharge status",
    MessageCode.ADMIN_VERIFIED: "Admin verification completed",
    MessageCode.ADMIN_NOT_FOUND: "Admin record not found",
    MessageCode.ADMIN_SETTINGS_UPDATED: "Admin settings updated",
    MessageCode.USER_NOT_FOUND: "Target user not found",
    MessageCode.RESOURCE_NOT_FOUND: "Resource not found",
    MessageCode.BAD_REQUEST: "Bad request",
    MessageCode.INVALID_INPUT: "Invalid input data",
    MessageCode.RATE_LIMIT_EXCEEDED: "Too many requests, please try again later",
    MessageCode.IDENTITY_SERVICE_ERROR: "Identity service unavailable",
    MessageCode.DATABASE_ERROR: "Database error occurred",
    MessageCode.INTERNAL_ERROR: "Internal server error",
}


T = TypeVar("T")


class PaginationInfo(BaseModel):
    """Common pagination information."""

    total: int
    limit: int
    offset: int
    has_more: bool

    @classmethod
    def build(cls, total: int, limit: int, offset: int) -> "PaginationInfo":
        return cls(
            total=total, limit=limit, offset=offset, has_more=offset + limit < total
        )


class Paginated(BaseModel, Generic[T]):
    """Generic paginated response wrapper."""

    items: list[T]
    pagination: PaginationInfo


class APIResponse(BaseModel, Generic[T]):
    """Success envelope; errors use ``{"error": {...}}`` from the exception handlers."""

    message_code: MessageCode
    message: str
    data: T | None = None

    @classmethod
    def success(
        cls,
        message_code: MessageCode = MessageCode.SUCCESS,
        message: str | None = None,
        data: T | None = None,
    ) -> "APIResponse[T]":
        """Create a success response."""
        return cls(
            message_code=message_code,
            message=message or get_default_message(message_code),
            data=data,
        )


def get_default_message(message_code: MessageCode) -> str:
    """Get default message for a message code."""
    return DEFAULT_MESSAGES.get(message_code, "Operation completed")
