"""Credits API schemas (combined models/requests)."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.api.core.messages import APIResponse, Paginated
from src.database.models import TransactionType
from src.modules.credits.ledger import MAX_REASON_LENGTH


class UserCreditsModel(BaseModel):
    user_id: UUID
    email: str | None
    total_credits: int
    remaining_credits: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CreditTransactionModel(BaseModel):
    id: UUID
    user_id: UUID
    transaction_type: TransactionType
    amount: int
    balance_after: int
    reason: str
    created_by: UUID | None
    recharge_id: UUID | None
    created_at: datetime

    model_config = {"from_attributes": True}


class SelfDeductRequest(BaseModel):
    amount: int = Field(..., gt=0)
    reason: str = Field(..., min_length=1, max_length=MAX_REASON_LENGTH)


class SelfDeductData(BaseModel):
    user_id: UUID
    deducted_credits: int
    remaining_credits: int
    total_credits: int
    reason: str
    transaction_id: UUID
    transaction_time: datetime


class CreateTransactionRequest(BaseModel):
    user_id: UUID | None = None
    transaction_type: TransactionType
    amount: int = Field(..., gt=0)
    reason: str = Field(..., min_length=1, max_length=MAX_REASON_LENGTH)


class CreatedTransactionData(BaseModel):
    transaction: CreditTransactionModel
    balance: UserCreditsModel


UserCreditsResponse = APIResponse[UserCreditsModel]
SelfDeductResponse = APIResponse[SelfDeductData]
TransactionsResponse = APIResponse[Paginated[CreditTransactionModel]]
CreatedTransactionResponse = APIResponse[CreatedTransactionData]
