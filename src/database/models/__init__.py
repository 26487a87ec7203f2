"""Database models for the Banana AI Studio API."""

from .admin_users import PRIVILEGE_RANK, AdminPrivilege, AdminUser
from .base import Base
from .credit_transactions import (
    CREDIT_TYPES,
    DEBIT_TYPES,
    CreditTransaction,
    TransactionType,
)
from .recharge_records import PaymentMethod, RechargeRecord, RechargeStatus
from .user_credits import UserCredits
from .verification_codes import EmailVerificationCode

__all__ = [
    # Base
    "Base",
    # Enums
    "AdminPrivilege",
    "PaymentMethod",
    "RechargeStatus",
    "TransactionType",
    "CREDIT_TYPES",
    "DEBIT_TYPES",
    "PRIVILEGE_RANK",
    # Models
    "AdminUser",
    "CreditTransaction",
    "EmailVerificationCode",
    "RechargeRecord",
    "UserCredits",
]
