"""Tests for user recharge requests and the public payment info."""

import pytest
from fastapi import status
from httpx import AsyncClient

from src.api.core.messages import MessageCode
from tests.utils.assertions import (
    ResponseHelper,
    assert_success_response,
    assert_validation_error,
)


@pytest.mark.asyncio
async def test_create_recharge_request(app, authorized_client: AsyncClient, test_user):
    response = await authorized_client.post(
        "/v1/recharges",
        json={
            "amount": 300,
            "payment_method": "alipay",
            "description": "Alipay 30 RMB",
            "payment_screenshot_url": "https://cdn.example.com/shot.png",
        },
    )

    data = assert_success_response(
        response, MessageCode.RECHARGE_CREATED, status.HTTP_201_CREATED
    )
    assert data["status"] == "pending"
    assert data["payment_method"] == "alipay"
    assert data["user_id"] == str(test_user.id)

    history = await authorized_client.get("/v1/recharges")
    items = ResponseHelper.assert_paginated_response(history, expected_total=1)["items"]
    assert items[0]["id"] == data["id"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body,field",
    [({"amount": 0}, "amount"), ({"amount": 10, "payment_method": "cash"}, "payment_method")],
)
async def test_create_recharge_validation(
    app, authorized_client: AsyncClient, body, field
):
    response = await authorized_client.post("/v1/recharges", json=body)

    assert_validation_error(response, fields=[field])


@pytest.mark.asyncio
async def test_recharge_history_is_private(
    app, authorized_client: AsyncClient, client_factory, other_user
):
    await authorized_client.post("/v1/recharges", json={"amount": 50})

    async with client_factory("other-token") as other_client:
        response = await other_client.get("/v1/recharges")

    ResponseHelper.assert_paginated_response(response, expected_total=0)


@pytest.mark.asyncio
async def test_payment_info_is_public(
    app, public_client: AsyncClient, db_session, admin_factory
):
    await admin_factory.create_async(
        db_session,
        payment_qr_code_url="https://cdn.example.com/qr.png",
        recharge_instructions="Scan and note your email",
    )
    await db_session.commit()

    response = await public_client.get("/v1/recharges/payment-info")

    assert_success_response(
        response,
        data_assertions={
            "payment_qr_code_url": "https://cdn.example.com/qr.png",
            "recharge_instructions": "Scan and note your email",
        },
    )


@pytest.mark.asyncio
async def test_payment_info_empty(app, public_client: AsyncClient):
    response = await public_client.get("/v1/recharges/payment-info")

    data = assert_success_response(response)
    assert data["payment_qr_code_url"] is None
