"""Test factories for Banana AI Studio models."""

from .admin import AdminUserFactory
from .base import AsyncSQLAlchemyModelFactory
from .credits import CreditTransactionFactory, UserCreditsFactory
from .recharges import RechargeRecordFactory
from .verification_codes import EmailVerificationCodeFactory

__all__ = [
    "AsyncSQLAlchemyModelFactory",
    "AdminUserFactory",
    "CreditTransactionFactory",
    "EmailVerificationCodeFactory",
    "RechargeRecordFactory",
    "UserCreditsFactory",
]
