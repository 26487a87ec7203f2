"""Keep upstream error text from leaking secrets into API responses."""

import re

SENSITIVE_PATTERN = re.compile(
    r"password|token|key|secret|credential", re.IGNORECASE
)

GENERIC_ERROR_MESSAGE = "Request failed, please try again later"


def contains_sensitive_terms(message: str) -> bool:
    return bool(SENSITIVE_PATTERN.search(message or ""))


def sanitize_error_message(
    message: str | None, fallback: str = GENERIC_ERROR_MESSAGE
) -> str:
    """Return ``message`` unless it is empty or mentions a sensitive term."""
    if not message or contains_sensitive_terms(message):
        return fallback
    return message
