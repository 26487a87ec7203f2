API_VERSION_HEADER = "X-Banana-Studio-Version"

# Authentication endpoints configuration
SKIP_AUTH_PATHS = {
    "/openapi.json",
    "/docs",
    "/redoc",
    "/health",
    "/health/liveness",
    "/v1/auth/verification-code",
    "/v1/auth/register",
    "/v1/recharges/payment-info",
}

SKIP_AUTH_PATTERNS: list = [
    (None, r"^/docs/.*$"),
]


class RateLimitScopes:
    """Scopes for the sliding-window limiter keys."""

    VERIFICATION_CODE = "verification_code"
    REGISTER = "register"
