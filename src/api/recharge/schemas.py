"""Recharge request schemas shared by the user and admin routers."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.api.core.messages import APIResponse, Paginated
from src.database.models import PaymentMethod, RechargeStatus


class RechargeRecordModel(BaseModel):
    id: UUID
    user_id: UUID
    amount: int
    payment_method: PaymentMethod
    payment_screenshot_url: str | None
    description: str | None
    status: RechargeStatus
    admin_notes: str | None
    admin_id: UUID | None
    processed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CreateRechargeRequest(BaseModel):
    amount: int = Field(..., gt=0)
    payment_method: PaymentMethod = PaymentMethod.WECHAT
    description: str | None = Field(None, max_length=500)
    payment_screenshot_url: str | None = Field(None, max_length=2048)


class PaymentInfoModel(BaseModel):
    payment_qr_code_url: str | None = None
    recharge_instructions: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None


RechargeRecordResponse = APIResponse[RechargeRecordModel]
RechargeHistoryResponse = APIResponse[Paginated[RechargeRecordModel]]
PaymentInfoResponse = APIResponse[PaymentInfoModel]
