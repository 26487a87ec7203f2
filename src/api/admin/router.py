"""Admin console: credits, recharges, listings, statistics and settings."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Query, Request, status

from src.api.core.dependencies import (
    AdminAuthorizationServiceDep,
    AdminContextDep,
    AdminQueryServiceDep,
    AdminSettingsServiceDep,
    AdminStatsServiceDep,
    CurrentUserAuthDep,
    IdentityClientDep,
    LedgerServiceDep,
    MutatingAdminDep,
    PageDep,
    RechargeServiceDep,
    SuperAdminDep,
)
from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import APIResponse, MessageCode, PaginationInfo
from src.api.credits.schemas import CreditTransactionModel, UserCreditsModel
from src.api.recharge.schemas import RechargeRecordModel
from src.database.models import (
    AdminPrivilege,
    RechargeStatus,
    TransactionType,
)
from src.modules.identity.supabase import IdentityUser, SupabaseAuthClient
from src.modules.recharge.service import RechargeFilters, RechargeTransition
from src.utils.logger import get_logger
from src.utils.timeutils import ensure_utc, now_utc

from .schemas import (
    AdminCreditsAddedData,
    AdminCreditsAddedResponse,
    AdminCreditsDeductedData,
    AdminCreditsDeductedResponse,
    AdminCreditsRequest,
    AdminListingData,
    AdminListingResponse,
    AdminProfileModel,
    AdminRechargeModel,
    AdminSettingsData,
    AdminSettingsResponse,
    AdminSettingsUpdateRequest,
    AdminTransactionModel,
    AdminVerificationData,
    AdminVerificationResponse,
    ManualRechargeRequest,
    RechargeListingData,
    RechargeListingResponse,
    RechargeStatusUpdateRequest,
    RechargeTransitionData,
    RechargeTransitionResponse,
    StatsResponse,
    TransactionListingData,
    TransactionListingResponse,
    UserRefModel,
    UsersListingData,
    UsersListingResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


async def _require_target(
    identity_client: SupabaseAuthClient, user_id: UUID
) -> IdentityUser:
    target = await identity_client.get_user_by_id(user_id)
    if target is None:
        raise BananaStudioException(
            MessageCode.USER_NOT_FOUND,
            status.HTTP_404_NOT_FOUND,
            {"user_id": str(user_id)},
        )
    return target


def _utc(value: datetime | None) -> datetime | None:
    return ensure_utc(value) if value else None


def _transition_data(transition: RechargeTransition) -> RechargeTransitionData:
    entry = transition.ledger_entry
    return RechargeTransitionData(
        recharge=RechargeRecordModel.model_validate(transition.record),
        previous_status=transition.previous_status.value,
        credited=entry is not None,
        balance=UserCreditsModel.model_validate(entry.balance) if entry else None,
    )


# Credits


@router.post("/credits/add", response_model=AdminCreditsAddedResponse)
async def add_credits_for_user(
    request: Request,
    body: AdminCreditsRequest,
    admin: MutatingAdminDep,
    ledger: LedgerServiceDep,
    identity_client: IdentityClientDep,
) -> AdminCreditsAddedResponse:
    target = await _require_target(identity_client, body.user_id)
    entry = await ledger.add_credits(
        target.id,
        body.amount,
        body.reason,
        TransactionType.ADMIN_ADD,
        created_by=admin.user_id,
        email=target.email,
    )
    logger.info(
        "admin_credits_added",
        admin_id=str(admin.user_id),
        target_user_id=str(target.id),
        amount=body.amount,
    )
    return APIResponse.success(
        message_code=MessageCode.CREDITS_ADDED,
        data=AdminCreditsAddedData(
            target_user=UserRefModel(id=target.id, email=target.email),
            admin_user=UserRefModel(id=admin.user_id, email=admin.email),
            added_credits=body.amount,
            new_total_credits=entry.balance.total_credits,
            new_remaining_credits=entry.balance.remaining_credits,
            reason=entry.transaction.reason,
            transaction_id=entry.transaction.id,
            transaction_time=entry.transaction.created_at,
        ),
    )


@router.post("/credits/deduct", response_model=AdminCreditsDeductedResponse)
async def deduct_credits_for_user(
    request: Request,
    body: AdminCreditsRequest,
    admin: MutatingAdminDep,
    ledger: LedgerServiceDep,
    identity_client: IdentityClientDep,
) -> AdminCreditsDeductedResponse:
    target = await _require_target(identity_client, body.user_id)
    entry = await ledger.deduct_credits(
        target.id,
        body.amount,
        body.reason,
        TransactionType.ADMIN_DEDUCT,
        created_by=admin.user_id,
        email=target.email,
    )
    logger.info(
        "admin_credits_deducted",
        admin_id=str(admin.user_id),
        target_user_id=str(target.id),
        amount=body.amount,
    )
    return APIResponse.success(
        message_code=MessageCode.CREDITS_DEDUCTED,
        data=AdminCreditsDeductedData(
            target_user=UserRefModel(id=target.id, email=target.email),
            admin_user=UserRefModel(id=admin.user_id, email=admin.email),
            deducted_credits=body.amount,
            new_total_credits=entry.balance.total_credits,
            new_remaining_credits=entry.balance.remaining_credits,
            reason=entry.transaction.reason,
            transaction_id=entry.transaction.id,
            transaction_time=entry.transaction.created_at,
        ),
    )


# Verification


@router.get("/verify", response_model=AdminVerificationResponse)
async def verify_admin(
    request: Request,
    current_user: CurrentUserAuthDep,
    authorization: AdminAuthorizationServiceDep,
) -> AdminVerificationResponse:
    """Non-admins get ``is_admin: false`` rather than an error."""
    admin = await authorization.get_admin(current_user.user_id)
    return APIResponse.success(
        message_code=MessageCode.ADMIN_VERIFIED,
        data=AdminVerificationData(
            is_admin=admin is not None,
            user=UserRefModel(id=current_user.user_id, email=current_user.email),
            admin_info=AdminProfileModel.from_admin(admin) if admin else None,
            verified_at=now_utc(),
        ),
    )


# Listings


@router.get("/users", response_model=UsersListingResponse)
async def list_users_with_credits(
    request: Request,
    admin: AdminContextDep,
    queries: AdminQueryServiceDep,
    page: PageDep,
    search: str | None = None,
    min_credits: int | None = None,
    max_credits: int | None = None,
) -> UsersListingResponse:
    listing = await queries.users_with_credits(
        search, min_credits, max_credits, page.limit, page.offset
    )
    return APIResponse.success(
        data=UsersListingData(
            items=[UserCreditsModel.model_validate(u) for u in listing.users],
            pagination=PaginationInfo.build(listing.total, page.limit, page.offset),
            stats=listing.credit_stats,
            filters={
                "search": search,
                "min_credits": min_credits,
                "max_credits": max_credits,
            },
        )
    )


@router.get("/recharges", response_model=RechargeListingResponse)
async def list_recharge_records(
    request: Request,
    admin: AdminContextDep,
    recharges: RechargeServiceDep,
    page: PageDep,
    status_filter: RechargeStatus | None = Query(None, alias="status"),
    user_search: str | None = None,
    min_amount: int | None = None,
    max_amount: int | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> RechargeListingResponse:
    filters = RechargeFilters(
        status=status_filter,
        user_search=user_search,
        min_amount=min_amount,
        max_amount=max_amount,
        date_from=_utc(date_from),
        date_to=_utc(date_to),
    )
    listing = await recharges.list_records(filters, page.limit, page.offset)
    items = [
        AdminRechargeModel(
            **RechargeRecordModel.model_validate(row.record).model_dump(),
            user_email=row.user_email,
            admin_email=row.admin_email,
        )
        for row in listing.rows
    ]
    pending = listing.status_breakdown.get(RechargeStatus.PENDING.value, {})
    return APIResponse.success(
        data=RechargeListingData(
            items=items,
            pagination=PaginationInfo.build(listing.total, page.limit, page.offset),
            status_breakdown=listing.status_breakdown,
            total_amount=listing.total_amount,
            pending_count=pending.get("count", 0),
            filters={
                "status": status_filter.value if status_filter else None,
                "user_search": user_search,
                "min_amount": min_amount,
                "max_amount": max_amount,
                "date_from": date_from.isoformat() if date_from else None,
                "date_to": date_to.isoformat() if date_to else None,
            },
        )
    )


@router.get("/transactions", response_model=TransactionListingResponse)
async def list_transactions_with_users(
    request: Request,
    admin: AdminContextDep,
    queries: AdminQueryServiceDep,
    page: PageDep,
    transaction_type: TransactionType | None = None,
    user_search: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
) -> TransactionListingResponse:
    listing = await queries.transactions_with_users(
        transaction_type,
        user_search,
        _utc(date_from),
        _utc(date_to),
        page.limit,
        page.offset,
    )
    items = [
        AdminTransactionModel(
            **CreditTransactionModel.model_validate(row.transaction).model_dump(),
            user_email=row.user_email,
        )
        for row in listing.rows
    ]
    return APIResponse.success(
        data=TransactionListingData(
            items=items,
            pagination=PaginationInfo.build(listing.total, page.limit, page.offset),
            type_breakdown=listing.type_breakdown,
            filters={
                "transaction_type": transaction_type.value if transaction_type else None,
                "user_search": user_search,
                "date_from": date_from.isoformat() if date_from else None,
                "date_to": date_to.isoformat() if date_to else None,
            },
        )
    )


@router.get("/admins", response_model=AdminListingResponse)
async def list_admin_users(
    request: Request,
    admin: SuperAdminDep,
    queries: AdminQueryServiceDep,
    page: PageDep,
    privilege: AdminPrivilege | None = None,
    search: str | None = None,
) -> AdminListingResponse:
    listing = await queries.admin_roster(privilege, search, page.limit, page.offset)
    return APIResponse.success(
        data=AdminListingData(
            items=[AdminProfileModel.from_admin(a) for a in listing.admins],
            pagination=PaginationInfo.build(listing.total, page.limit, page.offset),
            level_breakdown=listing.level_breakdown,
            filters={
                "privilege": privilege.value if privilege else None,
                "search": search,
            },
        )
    )


# Recharges


@router.patch("/recharges/{recharge_id}/status", response_model=RechargeTransitionResponse)
async def update_recharge_status(
    request: Request,
    recharge_id: UUID,
    body: RechargeStatusUpdateRequest,
    admin: MutatingAdminDep,
    recharges: RechargeServiceDep,
) -> RechargeTransitionResponse:
    """Complete, fail or cancel a pending recharge; completion credits the user."""
    transition = await recharges.transition(
        recharge_id, body.status, admin.user_id, body.admin_notes
    )
    return APIResponse.success(
        message_code=MessageCode.RECHARGE_UPDATED,
        data=_transition_data(transition),
    )


@router.post(
    "/recharges",
    response_model=RechargeTransitionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_manual_recharge(
    request: Request,
    body: ManualRechargeRequest,
    admin: MutatingAdminDep,
    recharges: RechargeServiceDep,
    identity_client: IdentityClientDep,
) -> RechargeTransitionResponse:
    """Record a payment received outside the app and credit it immediately."""
    target = await _require_target(identity_client, body.user_id)
    transition = await recharges.create_completed(
        target.id,
        body.amount,
        admin.user_id,
        payment_method=body.payment_method,
        description=body.description,
        notes=body.admin_notes,
        email=target.email,
    )
    return APIResponse.success(
        message_code=MessageCode.RECHARGE_CREATED,
        data=_transition_data(transition),
    )


# Statistics


@router.get("/stats/dashboard", response_model=StatsResponse)
async def get_dashboard_stats(
    request: Request,
    admin: AdminContextDep,
    stats: AdminStatsServiceDep,
) -> StatsResponse:
    return APIResponse.success(data=await stats.dashboard())


@router.get("/stats/system", response_model=StatsResponse)
async def get_system_stats(
    request: Request,
    admin: AdminContextDep,
    stats: AdminStatsServiceDep,
    period: str = "30d",
    granularity: str = "day",
) -> StatsResponse:
    """``period``: 7d, 30d, 90d or 1y. ``granularity``: hour, day, week or month."""
    return APIResponse.success(data=await stats.system_stats(period, granularity))


# Settings


@router.patch("/settings", response_model=AdminSettingsResponse)
async def update_admin_settings(
    request: Request,
    body: AdminSettingsUpdateRequest,
    admin: MutatingAdminDep,
    settings: AdminSettingsServiceDep,
) -> AdminSettingsResponse:
    update = await settings.update(admin, body.model_dump(exclude_unset=True))
    return APIResponse.success(
        message_code=MessageCode.ADMIN_SETTINGS_UPDATED,
        data=AdminSettingsData(
            admin=AdminProfileModel.from_admin(update.admin),
            global_settings=AdminProfileModel.from_admin(update.global_settings)
            if update.global_settings is not None
            else None,
            is_super_admin=admin.is_super_admin,
            updated_fields=update.updated_fields,
        ),
    )
