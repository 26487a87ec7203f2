"""Credits domain router."""

from uuid import UUID

from fastapi import APIRouter, Request, status

from src.api.core.dependencies import (
    AdminAuthorizationServiceDep,
    CurrentUserAuthDep,
    IdentityClientDep,
    LedgerServiceDep,
    PageDep,
)
from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import APIResponse, MessageCode, Paginated, PaginationInfo
from src.database.models import AdminPrivilege, TransactionType
from src.utils.logger import get_logger

from .schemas import (
    CreatedTransactionData,
    CreatedTransactionResponse,
    CreateTransactionRequest,
    CreditTransactionModel,
    SelfDeductData,
    SelfDeductRequest,
    SelfDeductResponse,
    TransactionsResponse,
    UserCreditsModel,
    UserCreditsResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/credits", tags=["credits"])

# Types a non-admin may post against their own balance
SELF_SERVICE_TRANSACTION_TYPES = {TransactionType.SPEND}


@router.get("/me", response_model=UserCreditsResponse)
async def get_my_credits(
    request: Request,
    current_user: CurrentUserAuthDep,
    ledger: LedgerServiceDep,
) -> UserCreditsResponse:
    """Current balance; a zero balance is created on first access."""
    balance = await ledger.get_balance(current_user.user_id, current_user.email)
    return APIResponse.success(data=UserCreditsModel.model_validate(balance))


@router.post("/deduct", response_model=SelfDeductResponse)
async def deduct_my_credits(
    request: Request,
    body: SelfDeductRequest,
    current_user: CurrentUserAuthDep,
    ledger: LedgerServiceDep,
) -> SelfDeductResponse:
    """Spend credits from the caller's own balance."""
    entry = await ledger.deduct_credits(
        current_user.user_id,
        body.amount,
        body.reason,
        TransactionType.SPEND,
        created_by=current_user.user_id,
        email=current_user.email,
    )
    return APIResponse.success(
        message_code=MessageCode.CREDITS_DEDUCTED,
        data=SelfDeductData(
            user_id=current_user.user_id,
            deducted_credits=body.amount,
            remaining_credits=entry.balance.remaining_credits,
            total_credits=entry.balance.total_credits,
            reason=entry.transaction.reason,
            transaction_id=entry.transaction.id,
            transaction_time=entry.transaction.created_at,
        ),
    )


@router.get("/transactions", response_model=TransactionsResponse)
async def list_transactions(
    request: Request,
    current_user: CurrentUserAuthDep,
    ledger: LedgerServiceDep,
    authorization: AdminAuthorizationServiceDep,
    page: PageDep,
    transaction_type: TransactionType | None = None,
    user_id: UUID | None = None,
) -> TransactionsResponse:
    """Caller's own history; admins may pass ``user_id`` to read another user's."""
    target_id = user_id or current_user.user_id
    if target_id != current_user.user_id:
        await authorization.require(current_user, AdminPrivilege.VIEWER)

    transactions, total = await ledger.list_transactions(
        target_id, transaction_type, page.limit, page.offset
    )
    return APIResponse.success(
        data=Paginated[CreditTransactionModel](
            items=[CreditTransactionModel.model_validate(t) for t in transactions],
            pagination=PaginationInfo.build(total, page.limit, page.offset),
        )
    )


@router.post(
    "/transactions",
    response_model=CreatedTransactionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_transaction(
    request: Request,
    body: CreateTransactionRequest,
    current_user: CurrentUserAuthDep,
    ledger: LedgerServiceDep,
    authorization: AdminAuthorizationServiceDep,
    identity_client: IdentityClientDep,
) -> CreatedTransactionResponse:
    """
    Record a ledger entry and apply it to the balance.

    Users post only ``spend`` for themselves. Targeting another user or using
    any other type needs admin privilege. ``recharge`` entries come only from
    recharge approval.
    """
    if body.transaction_type is TransactionType.RECHARGE:
        raise BananaStudioException(
            MessageCode.TRANSACTION_TYPE_NOT_ALLOWED,
            status.HTTP_400_BAD_REQUEST,
            {"transaction_type": body.transaction_type.value},
        )

    target_id = body.user_id or current_user.user_id
    target_email = current_user.email
    if target_id != current_user.user_id or (
        body.transaction_type not in SELF_SERVICE_TRANSACTION_TYPES
    ):
        await authorization.require(current_user, AdminPrivilege.ADMIN)

    if target_id != current_user.user_id:
        target = await identity_client.get_user_by_id(target_id)
        if target is None:
            raise BananaStudioException(
                MessageCode.USER_NOT_FOUND,
                status.HTTP_404_NOT_FOUND,
                {"user_id": str(target_id)},
            )
        target_email = target.email

    entry = await ledger.apply(
        target_id,
        body.amount,
        body.reason,
        body.transaction_type,
        created_by=current_user.user_id,
        email=target_email,
    )
    return APIResponse.success(
        message_code=MessageCode.TRANSACTION_CREATED,
        data=CreatedTransactionData(
            transaction=CreditTransactionModel.model_validate(entry.transaction),
            balance=UserCreditsModel.model_validate(entry.balance),
        ),
    )
