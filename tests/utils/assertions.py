"""Test utilities for asserting API responses and message codes."""

from typing import Any

from httpx import Response

from src.api.core.exceptions.base import BananaStudioException
from src.api.core.messages import MessageCode


def assert_success_response(
    response: Response,
    expected_message_code: MessageCode = MessageCode.SUCCESS,
    expected_status: int = 200,
    data_assertions: dict[str, Any] | None = None,
) -> Any:
    """Assert that response is successful with expected message code.

    Args:
        response: HTTP response to check
        expected_message_code: Expected message code
        expected_status: Expected HTTP status code
        data_assertions: Optional dict of assertions to run on response data,
            dotted keys reach into nested objects ("user.email")

    Returns:
        Response data for further assertions
    """
    assert response.status_code == expected_status, (
        f"Expected status {expected_status}, got {response.status_code}. "
        f"Response: {response.text}"
    )

    json_data = response.json()
    assert json_data.get("message_code") == expected_message_code.value, (
        f"Expected message_code {expected_message_code.value}, "
        f"got {json_data.get('message_code')}"
    )
    assert "message" in json_data, "Success response should have message"

    if data_assertions:
        data = json_data.get("data")
        for field, expected_value in data_assertions.items():
            current = data
            for part in field.split("."):
                current = current[part]
            assert (
                current == expected_value
            ), f"Expected {field} to be {expected_value}, got {current}"

    return json_data.get("data")


def assert_error_response(
    response: Response,
    expected_message_code: MessageCode,
    expected_status: int,
    expected_message: str | None = None,
) -> dict[str, Any]:
    """Assert an ``{"error": {code, message, details}}`` body.

    Returns:
        The inner error object
    """
    assert response.status_code == expected_status, (
        f"Expected status {expected_status}, got {response.status_code}. "
        f"Response: {response.text}"
    )

    error = response.json().get("error")
    assert error is not None, f"Expected error envelope, got {response.text}"
    assert error.get("code") == expected_message_code.value, (
        f"Expected code {expected_message_code.value}, " f"got {error.get('code')}"
    )

    if expected_message:
        assert error.get("message") == expected_message, (
            f"Expected message '{expected_message}', " f"got '{error.get('message')}'"
        )

    return error


def assert_validation_error(
    response: Response, fields: list[str] | None = None
) -> dict[str, Any]:
    """Assert a 400 INVALID_INPUT, optionally naming the offending fields."""
    error = assert_error_response(response, MessageCode.INVALID_INPUT, 400)

    if fields:
        reported = {
            err.get("field")
            for err in error.get("details", {}).get("validation_errors", [])
        }
        for field in fields:
            assert field in reported, f"Expected validation error for '{field}'"

    return error


def assert_authentication_error(
    response: Response, expected_message_code: MessageCode = MessageCode.AUTH_REQUIRED
) -> dict[str, Any]:
    return assert_error_response(response, expected_message_code, 401)


def assert_permission_error(
    response: Response, expected_message_code: MessageCode = MessageCode.ADMIN_REQUIRED
) -> dict[str, Any]:
    return assert_error_response(response, expected_message_code, 403)


def assert_banana_exception(
    exception: BananaStudioException,
    expected_message_code: MessageCode,
    expected_status: int | None = None,
) -> None:
    """Assert that a BananaStudioException has expected properties."""
    assert exception.message_code == expected_message_code, (
        f"Expected message_code {expected_message_code}, "
        f"got {exception.message_code}"
    )

    if expected_status:
        assert exception.status_code == expected_status, (
            f"Expected status_code {expected_status}, " f"got {exception.status_code}"
        )


class ResponseHelper:
    """Helper class for common response assertions and data extraction."""

    @staticmethod
    def get_data(response: Response) -> Any:
        assert response.status_code < 400, f"Response failed: {response.text}"
        return response.json().get("data")

    @staticmethod
    def assert_paginated_response(
        response: Response,
        expected_total: int | None = None,
        expected_limit: int | None = None,
        expected_offset: int = 0,
    ) -> dict[str, Any]:
        """Assert the items/pagination shape and return the data object."""
        data = assert_success_response(response)

        assert "items" in data, "Paginated response should have 'items'"
        assert "pagination" in data, "Paginated response should have 'pagination'"
        pagination = data["pagination"]

        if expected_total is not None:
            assert (
                pagination["total"] == expected_total
            ), f"Expected total {expected_total}, got {pagination['total']}"
        if expected_limit is not None:
            assert pagination["limit"] == expected_limit
        assert pagination["offset"] == expected_offset

        return data
