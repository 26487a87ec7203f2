"""Rate limiting types and models."""

from enum import Enum

from pydantic import BaseModel


class RateLimitClientType(str, Enum):
    """Types of clients for rate limiting."""

    USER = "user"
    IP = "ip"


# Cache keys: rate_limit:{scope}:{client_type}:{identifier}
# - rate_limit:register:ip:1.2.3.4
# - rate_limit:verification_code:ip:1.2.3.4


class ClientIdentifier(BaseModel):
    """Client identifier for rate limiting."""

    client_type: RateLimitClientType
    client_id: str
    scope: str = "default"

    def to_cache_key(self) -> str:
        """Generate Redis cache key for this client."""
        return f"rate_limit:{self.scope}:{self.client_type.value}:{self.client_id}"

    def __str__(self) -> str:
        return f"{self.client_type.value}:{self.client_id}"


class RateLimitResult(BaseModel):
    """Result of rate limit check."""

    is_allowed: bool
    current_count: int
    time_to_reset: int | None
    client_identifier: ClientIdentifier
    limit: int
    window_seconds: int
