"""Tests for admin privilege checks and settings updates."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import MessageCode
from src.core.context import AdminContext, AuthenticatedUserContext
from src.database.models import AdminPrivilege, RechargeStatus
from src.modules.admin.authorization import AdminAuthorizationService
from src.modules.admin.settings import AdminSettingsService
from src.modules.identity.supabase import IdentityUser
from src.modules.recharge.service import RechargeService


def _caller(user_id=None, email="caller@example.com") -> AuthenticatedUserContext:
    return AuthenticatedUserContext(user=IdentityUser(id=user_id or uuid4(), email=email))


@pytest.mark.parametrize(
    "held,minimum,allowed",
    [
        (AdminPrivilege.VIEWER, AdminPrivilege.VIEWER, True),
        (AdminPrivilege.VIEWER, AdminPrivilege.ADMIN, False),
        (AdminPrivilege.ADMIN, AdminPrivilege.ADMIN, True),
        (AdminPrivilege.ADMIN, AdminPrivilege.SUPER_ADMIN, False),
        (AdminPrivilege.SUPER_ADMIN, AdminPrivilege.VIEWER, True),
    ],
)
def test_privilege_ordering(held, minimum, allowed):
    assert held.allows(minimum) is allowed


@pytest.mark.asyncio
async def test_require_non_admin_forbidden(db_session):
    with pytest.raises(BananaStudioException) as exc_info:
        await AdminAuthorizationService(db_session).require(_caller())

    assert exc_info.value.status_code == 403
    assert exc_info.value.message_code == MessageCode.ADMIN_REQUIRED


@pytest.mark.asyncio
async def test_require_insufficient_privilege(db_session, admin_factory):
    admin = await admin_factory.create_async(db_session)
    await db_session.commit()

    with pytest.raises(BananaStudioException) as exc_info:
        await AdminAuthorizationService(db_session).require(
            _caller(admin.user_id), AdminPrivilege.SUPER_ADMIN
        )

    assert exc_info.value.message_code == MessageCode.SUPER_ADMIN_REQUIRED
    assert exc_info.value.details == {"required_privilege": "super_admin"}


@pytest.mark.asyncio
async def test_require_returns_context_and_fills_email(db_session, admin_factory):
    admin = await admin_factory.create_async(db_session, email=None)
    await db_session.commit()

    context = await AdminAuthorizationService(db_session).require(
        _caller(admin.user_id, "ops@example.com"), AdminPrivilege.ADMIN
    )

    assert isinstance(context, AdminContext)
    assert context.privilege is AdminPrivilege.ADMIN
    assert context.is_super_admin is False
    assert context.admin.email == "ops@example.com"


@pytest.mark.asyncio
async def test_lookup_failure_is_an_error_not_a_deny():
    db = MagicMock()
    db.execute = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("gone")))

    with pytest.raises(BananaStudioException) as exc_info:
        await AdminAuthorizationService(db).require(_caller())

    assert exc_info.value.status_code == 500
    assert exc_info.value.message_code == MessageCode.DATABASE_ERROR


@pytest.mark.asyncio
async def test_admin_updates_own_profile(db_session, admin_factory):
    admin = await admin_factory.create_async(db_session)
    await db_session.commit()
    context = AdminContext(user=_caller(admin.user_id).user, admin=admin)

    update = await AdminSettingsService(db_session).update(
        context, {"payment_qr_code_url": "https://cdn.example.com/qr.png"}
    )

    assert update.updated_fields == ["payment_qr_code_url"]
    assert update.admin.payment_qr_code_url == "https://cdn.example.com/qr.png"


@pytest.mark.asyncio
async def test_admin_cannot_change_global_settings(db_session, admin_factory):
    admin = await admin_factory.create_async(db_session)
    await db_session.commit()
    context = AdminContext(user=_caller(admin.user_id).user, admin=admin)

    with pytest.raises(BananaStudioException) as exc_info:
        await AdminSettingsService(db_session).update(
            context,
            {"recharge_instructions": "Scan", "auto_approve_recharges": True},
        )

    assert exc_info.value.message_code == MessageCode.SUPER_ADMIN_REQUIRED
    assert exc_info.value.details == {"restricted_fields": ["auto_approve_recharges"]}
    await db_session.refresh(admin)
    assert admin.recharge_instructions is None


@pytest.mark.asyncio
async def test_super_admin_changes_global_settings(db_session, admin_factory):
    admin = await admin_factory.create_async(
        db_session, privilege=AdminPrivilege.SUPER_ADMIN.value
    )
    await db_session.commit()
    context = AdminContext(user=_caller(admin.user_id).user, admin=admin)
    service = AdminSettingsService(db_session)

    update = await service.update(
        context,
        {"auto_approve_recharges": True, "recharge_approval_threshold": 500},
    )

    assert update.updated_fields == [
        "auto_approve_recharges",
        "recharge_approval_threshold",
    ]
    settings = await service.get_global_settings()
    assert settings.id == admin.id
    assert settings.recharge_approval_threshold == 500


@pytest.mark.asyncio
async def test_second_super_admin_changes_shared_switches(db_session, admin_factory):
    now = datetime.now(timezone.utc)
    founder = await admin_factory.create_async(
        db_session,
        privilege=AdminPrivilege.SUPER_ADMIN.value,
        created_at=now - timedelta(days=30),
    )
    second = await admin_factory.create_async(
        db_session, privilege=AdminPrivilege.SUPER_ADMIN.value, created_at=now
    )
    await db_session.commit()
    context = AdminContext(user=_caller(second.user_id).user, admin=second)
    service = AdminSettingsService(db_session)

    update = await service.update(
        context,
        {
            "auto_approve_recharges": True,
            "recharge_approval_threshold": 200,
            "contact_email": "help@example.com",
        },
    )

    settings = await service.get_global_settings()
    assert settings.id == founder.id
    assert settings.auto_approve_recharges is True
    assert settings.recharge_approval_threshold == 200
    assert update.global_settings.id == founder.id
    assert second.contact_email == "help@example.com"
    assert second.auto_approve_recharges is False
    record = await RechargeService(db_session).create_request(uuid4(), 150)
    assert record.status == RechargeStatus.COMPLETED.value


@pytest.mark.asyncio
@pytest.mark.parametrize("changes", [{}, {"privilege": "super_admin"}])
async def test_settings_update_rejects_empty_or_unknown(
    db_session, admin_factory, changes
):
    admin = await admin_factory.create_async(db_session)
    context = AdminContext(user=_caller(admin.user_id).user, admin=admin)

    with pytest.raises(BananaStudioException) as exc_info:
        await AdminSettingsService(db_session).update(context, changes)

    assert exc_info.value.message_code == MessageCode.INVALID_INPUT


@pytest.mark.asyncio
async def test_payment_info_picks_admin_with_qr(db_session, admin_factory):
    await admin_factory.create_async(db_session)
    with_qr = await admin_factory.create_async(
        db_session, payment_qr_code_url="https://cdn.example.com/qr.png"
    )
    await db_session.commit()

    info = await AdminSettingsService(db_session).get_payment_info()

    assert info.id == with_qr.id
