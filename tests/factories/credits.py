"""Factories for balances and ledger rows."""

import factory

from src.database.models import CreditTransaction, TransactionType, UserCredits

from .base import AsyncSQLAlchemyModelFactory, UUIDFactory


class UserCreditsFactory(AsyncSQLAlchemyModelFactory[UserCredits]):
    class Meta:
        model = UserCredits

    user_id = UUIDFactory()
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    total_credits = 0
    remaining_credits = 0


class CreditTransactionFactory(AsyncSQLAlchemyModelFactory[CreditTransaction]):
    class Meta:
        model = CreditTransaction

    user_id = UUIDFactory()
    transaction_type = TransactionType.EARN.value
    amount = 10
    balance_after = 10
    reason = factory.Faker("sentence", nb_words=3)
    created_by = factory.SelfAttribute("user_id")
