"""User-facing recharge requests."""

from fastapi import APIRouter, Request, status

from src.api.core.dependencies import (
    AdminSettingsServiceDep,
    CurrentUserAuthDep,
    PageDep,
    RechargeServiceDep,
)
from src.api.core.messages import APIResponse, MessageCode, Paginated, PaginationInfo

from .schemas import (
    CreateRechargeRequest,
    PaymentInfoModel,
    PaymentInfoResponse,
    RechargeHistoryResponse,
    RechargeRecordModel,
    RechargeRecordResponse,
)

router = APIRouter(prefix="/recharges", tags=["recharges"])


@router.post(
    "",
    response_model=RechargeRecordResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_recharge_request(
    request: Request,
    body: CreateRechargeRequest,
    current_user: CurrentUserAuthDep,
    recharges: RechargeServiceDep,
) -> RechargeRecordResponse:
    """Submit a top-up for admin review."""
    record = await recharges.create_request(
        current_user.user_id,
        body.amount,
        payment_method=body.payment_method,
        description=body.description,
        payment_screenshot_url=body.payment_screenshot_url,
        email=current_user.email,
    )
    return APIResponse.success(
        message_code=MessageCode.RECHARGE_CREATED,
        data=RechargeRecordModel.model_validate(record),
    )


@router.get("", response_model=RechargeHistoryResponse)
async def list_my_recharges(
    request: Request,
    current_user: CurrentUserAuthDep,
    recharges: RechargeServiceDep,
    page: PageDep,
) -> RechargeHistoryResponse:
    records, total = await recharges.list_for_user(
        current_user.user_id, page.limit, page.offset
    )
    return APIResponse.success(
        data=Paginated[RechargeRecordModel](
            items=[RechargeRecordModel.model_validate(r) for r in records],
            pagination=PaginationInfo.build(total, page.limit, page.offset),
        )
    )


@router.get("/payment-info", response_model=PaymentInfoResponse)
async def get_payment_info(
    request: Request,
    settings: AdminSettingsServiceDep,
) -> PaymentInfoResponse:
    """Public: where to pay, shown in the recharge dialog."""
    admin = await settings.get_payment_info()
    if admin is None:
        return APIResponse.success(data=PaymentInfoModel())
    return APIResponse.success(
        data=PaymentInfoModel(
            payment_qr_code_url=admin.payment_qr_code_url,
            recharge_instructions=admin.recharge_instructions,
            contact_email=admin.contact_email,
            contact_phone=admin.contact_phone,
        )
    )
