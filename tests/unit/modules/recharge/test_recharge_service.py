"""Tests for recharge requests and the approval state machine."""

from uuid import uuid4

import pytest
from sqlalchemy import func, select

from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import MessageCode
from src.database.models import (
    AdminPrivilege,
    CreditTransaction,
    RechargeStatus,
    TransactionType,
)
from src.modules.credits.ledger import CreditLedgerService
from src.modules.recharge.service import (
    RechargeFilters,
    RechargeService,
    parse_target_status,
)
from tests.utils.queries import fetch_balance


async def _recharge_transactions(db_session, recharge_id) -> list[CreditTransaction]:
    result = await db_session.execute(
        select(CreditTransaction).where(CreditTransaction.recharge_id == recharge_id)
    )
    return list(result.scalars().all())


@pytest.mark.asyncio
async def test_create_request_stays_pending(db_session):
    """Without auto approval a request waits for review and moves no credits."""
    user_id = uuid4()
    service = RechargeService(db_session)

    record = await service.create_request(
        user_id, 300, description="WeChat 30 RMB", email="buyer@example.com"
    )

    assert record.status == RechargeStatus.PENDING.value
    assert record.processed_at is None
    balance = await fetch_balance(db_session, user_id)
    assert balance.remaining_credits == 0
    assert balance.email == "buyer@example.com"


@pytest.mark.asyncio
async def test_approve_credits_user_once(db_session, user_credits_factory):
    """Completing a pending request credits the user and links the ledger row."""
    balance = await user_credits_factory.create_async(
        db_session, total_credits=100, remaining_credits=40
    )
    await db_session.commit()
    admin_id = uuid4()
    service = RechargeService(db_session)
    record = await service.create_request(balance.user_id, 300)

    transition = await service.transition(
        record.id, RechargeStatus.COMPLETED, admin_id, notes="Paid"
    )

    assert transition.previous_status is RechargeStatus.PENDING
    assert transition.record.status == RechargeStatus.COMPLETED.value
    assert transition.record.admin_id == admin_id
    assert transition.record.admin_notes == "Paid"
    assert transition.record.processed_at is not None
    assert transition.ledger_entry.balance.total_credits == 400
    assert transition.ledger_entry.balance.remaining_credits == 340

    rows = await _recharge_transactions(db_session, record.id)
    assert len(rows) == 1
    assert rows[0].transaction_type == TransactionType.RECHARGE.value
    assert rows[0].amount == 300


@pytest.mark.asyncio
async def test_second_transition_rejected_without_double_credit(db_session):
    """A processed record cannot be completed again."""
    user_id = uuid4()
    service = RechargeService(db_session)
    record = await service.create_request(user_id, 300)
    await service.transition(record.id, "completed", uuid4())

    with pytest.raises(BananaStudioException) as exc_info:
        await service.transition(record.id, "completed", uuid4())

    assert exc_info.value.message_code == MessageCode.RECHARGE_ALREADY_PROCESSED
    assert exc_info.value.details["current_status"] == "completed"
    assert len(await _recharge_transactions(db_session, record.id)) == 1
    balance = await CreditLedgerService(db_session).get_balance(user_id)
    assert balance.remaining_credits == 300


@pytest.mark.asyncio
@pytest.mark.parametrize("target", ["failed", "cancelled"])
async def test_reject_moves_no_credits(db_session, target):
    user_id = uuid4()
    service = RechargeService(db_session)
    record = await service.create_request(user_id, 50)

    transition = await service.transition(record.id, target, uuid4())

    assert transition.record.status == target
    assert transition.ledger_entry is None
    assert await _recharge_transactions(db_session, record.id) == []


@pytest.mark.asyncio
async def test_failed_record_cannot_be_completed(db_session):
    service = RechargeService(db_session)
    record = await service.create_request(uuid4(), 50)
    await service.transition(record.id, "failed", uuid4())

    with pytest.raises(BananaStudioException) as exc_info:
        await service.transition(record.id, "completed", uuid4())

    assert exc_info.value.message_code == MessageCode.RECHARGE_ALREADY_PROCESSED


@pytest.mark.parametrize("value", ["pending", "refunded", ""])
def test_parse_target_status_rejects_non_terminal(value):
    with pytest.raises(BananaStudioException) as exc_info:
        parse_target_status(value)

    assert exc_info.value.message_code == MessageCode.INVALID_STATUS
    assert exc_info.value.details["allowed"] == ["completed", "failed", "cancelled"]


@pytest.mark.asyncio
async def test_transition_unknown_record(db_session):
    with pytest.raises(BananaStudioException) as exc_info:
        await RechargeService(db_session).transition(uuid4(), "completed", uuid4())

    assert exc_info.value.message_code == MessageCode.RECHARGE_NOT_FOUND
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_create_completed_is_atomic_single_credit(db_session):
    """Admin-entered recharges are completed immediately with one ledger row."""
    user_id = uuid4()
    admin_id = uuid4()

    transition = await RechargeService(db_session).create_completed(
        user_id, 120, admin_id, description="Bank transfer"
    )

    assert transition.record.status == RechargeStatus.COMPLETED.value
    assert transition.record.payment_method == "manual"
    assert transition.ledger_entry.balance.remaining_credits == 120
    assert len(await _recharge_transactions(db_session, transition.record.id)) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("amount", [0, -10])
async def test_create_request_rejects_bad_amount(db_session, amount):
    with pytest.raises(BananaStudioException) as exc_info:
        await RechargeService(db_session).create_request(uuid4(), amount)

    assert exc_info.value.message_code == MessageCode.INVALID_INPUT


@pytest.mark.asyncio
async def test_auto_approve_within_threshold(db_session, admin_factory):
    """Global auto approval completes small requests on creation."""
    super_admin = await admin_factory.create_async(
        db_session,
        privilege=AdminPrivilege.SUPER_ADMIN.value,
        auto_approve_recharges=True,
        recharge_approval_threshold=100,
    )
    await db_session.commit()
    service = RechargeService(db_session)

    small = await service.create_request(uuid4(), 100)
    large = await service.create_request(uuid4(), 101)

    assert small.status == RechargeStatus.COMPLETED.value
    assert small.admin_id == super_admin.user_id
    assert small.admin_notes == "Auto-approved"
    assert large.status == RechargeStatus.PENDING.value


@pytest.mark.asyncio
async def test_list_records_joins_emails_and_breakdown(db_session, admin_factory):
    admin = await admin_factory.create_async(db_session, email="reviewer@example.com")
    await db_session.commit()
    service = RechargeService(db_session)
    first = await service.create_request(uuid4(), 100, email="alice@example.com")
    await service.create_request(uuid4(), 40, email="bob@example.com")
    await service.transition(first.id, "completed", admin.user_id)

    listing = await service.list_records(RechargeFilters(user_search="alice"))
    pending = await service.list_records(
        RechargeFilters(status=RechargeStatus.PENDING)
    )

    assert listing.total == 1
    assert listing.rows[0].user_email == "alice@example.com"
    assert listing.rows[0].admin_email == "reviewer@example.com"
    assert listing.status_breakdown["completed"] == {"count": 1, "total_amount": 100}
    assert listing.status_breakdown["pending"] == {"count": 1, "total_amount": 40}
    assert listing.total_amount == 140
    assert pending.total == 1
    assert pending.rows[0].record.amount == 40


@pytest.mark.asyncio
async def test_list_for_user_only_returns_own(db_session):
    user_id = uuid4()
    service = RechargeService(db_session)
    await service.create_request(user_id, 10)
    await service.create_request(user_id, 20)
    await service.create_request(uuid4(), 30)

    records, total = await service.list_for_user(user_id)

    assert total == 2
    assert {r.amount for r in records} == {10, 20}
    count = await db_session.scalar(select(func.count()).select_from(CreditTransaction))
    assert count == 0


@pytest.mark.asyncio
async def test_blank_description_still_completes(db_session):
    """A whitespace-only description falls back to a generated ledger reason."""
    user_id = uuid4()
    service = RechargeService(db_session)
    record = await service.create_request(user_id, 300, description="   ")

    transition = await service.transition(record.id, RechargeStatus.COMPLETED, uuid4())
    manual = await service.create_completed(user_id, 50, uuid4(), description=" \t")

    assert transition.ledger_entry.transaction.reason == f"Recharge {record.id}"
    assert manual.ledger_entry.transaction.reason == f"Recharge {manual.record.id}"
    balance = await fetch_balance(db_session, user_id)
    assert balance.remaining_credits == 350
