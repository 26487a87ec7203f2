"""Admin console API schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from src.api.core.messages import APIResponse, PaginationInfo
from src.api.credits.schemas import CreditTransactionModel, UserCreditsModel
from src.api.recharge.schemas import RechargeRecordModel
from src.database.models import AdminPrivilege, AdminUser, PaymentMethod
from src.modules.credits.ledger import MAX_REASON_LENGTH


class UserRefModel(BaseModel):
    id: UUID
    email: str | None


class AdminProfileModel(BaseModel):
    id: UUID
    user_id: UUID
    email: str | None
    privilege: AdminPrivilege
    level: int
    payment_qr_code_url: str | None
    recharge_instructions: str | None
    contact_email: str | None
    contact_phone: str | None
    system_settings: dict[str, Any]
    auto_approve_recharges: bool
    recharge_approval_threshold: int | None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_admin(cls, admin: AdminUser) -> "AdminProfileModel":
        privilege = AdminPrivilege(admin.privilege)
        return cls(
            id=admin.id,
            user_id=admin.user_id,
            email=admin.email,
            privilege=privilege,
            level=privilege.level,
            payment_qr_code_url=admin.payment_qr_code_url,
            recharge_instructions=admin.recharge_instructions,
            contact_email=admin.contact_email,
            contact_phone=admin.contact_phone,
            system_settings=admin.system_settings or {},
            auto_approve_recharges=admin.auto_approve_recharges,
            recharge_approval_threshold=admin.recharge_approval_threshold,
            created_at=admin.created_at,
            updated_at=admin.updated_at,
        )


# Credits


class AdminCreditsRequest(BaseModel):
    user_id: UUID
    amount: int = Field(..., gt=0)
    reason: str = Field(..., min_length=1, max_length=MAX_REASON_LENGTH)


class AdminCreditsAddedData(BaseModel):
    target_user: UserRefModel
    admin_user: UserRefModel
    added_credits: int
    new_total_credits: int
    new_remaining_credits: int
    reason: str
    transaction_id: UUID
    transaction_time: datetime


class AdminCreditsDeductedData(BaseModel):
    target_user: UserRefModel
    admin_user: UserRefModel
    deducted_credits: int
    new_total_credits: int
    new_remaining_credits: int
    reason: str
    transaction_id: UUID
    transaction_time: datetime


# Verification


class AdminVerificationData(BaseModel):
    is_admin: bool
    user: UserRefModel
    admin_info: AdminProfileModel | None
    verified_at: datetime


# Listings


class UsersListingData(BaseModel):
    items: list[UserCreditsModel]
    pagination: PaginationInfo
    stats: dict[str, int]
    filters: dict[str, Any]


class AdminRechargeModel(RechargeRecordModel):
    user_email: str | None = None
    admin_email: str | None = None


class RechargeListingData(BaseModel):
    items: list[AdminRechargeModel]
    pagination: PaginationInfo
    status_breakdown: dict[str, dict[str, int]]
    total_amount: int
    pending_count: int
    filters: dict[str, Any]


class AdminTransactionModel(CreditTransactionModel):
    user_email: str | None = None


class TransactionListingData(BaseModel):
    items: list[AdminTransactionModel]
    pagination: PaginationInfo
    type_breakdown: dict[str, dict[str, int]]
    filters: dict[str, Any]


class AdminListingData(BaseModel):
    items: list[AdminProfileModel]
    pagination: PaginationInfo
    level_breakdown: dict[str, int]
    filters: dict[str, Any]


# Recharges


class RechargeStatusUpdateRequest(BaseModel):
    status: str
    admin_notes: str | None = Field(None, max_length=1000)


class RechargeTransitionData(BaseModel):
    recharge: RechargeRecordModel
    previous_status: str
    credited: bool
    balance: UserCreditsModel | None = None


class ManualRechargeRequest(BaseModel):
    user_id: UUID
    amount: int = Field(..., gt=0)
    payment_method: PaymentMethod = PaymentMethod.MANUAL
    description: str | None = Field(None, max_length=500)
    admin_notes: str | None = Field(None, max_length=1000)


# Settings


class AdminSettingsUpdateRequest(BaseModel):
    payment_qr_code_url: str | None = Field(None, max_length=2048)
    recharge_instructions: str | None = Field(None, max_length=2000)
    contact_email: str | None = Field(None, max_length=320)
    contact_phone: str | None = Field(None, max_length=64)
    system_settings: dict[str, Any] | None = None
    auto_approve_recharges: bool | None = None
    recharge_approval_threshold: int | None = Field(None, ge=0)


class AdminSettingsData(BaseModel):
    admin: AdminProfileModel
    global_settings: AdminProfileModel | None = None
    is_super_admin: bool
    updated_fields: list[str]


AdminCreditsAddedResponse = APIResponse[AdminCreditsAddedData]
AdminCreditsDeductedResponse = APIResponse[AdminCreditsDeductedData]
AdminVerificationResponse = APIResponse[AdminVerificationData]
UsersListingResponse = APIResponse[UsersListingData]
RechargeListingResponse = APIResponse[RechargeListingData]
TransactionListingResponse = APIResponse[TransactionListingData]
AdminListingResponse = APIResponse[AdminListingData]
RechargeTransitionResponse = APIResponse[RechargeTransitionData]
AdminSettingsResponse = APIResponse[AdminSettingsData]
StatsResponse = APIResponse[dict[str, Any]]
