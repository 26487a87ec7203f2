"""Redis backs request throttling and the verification code cooldown."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class RedisSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    REDIS_URL: str = "redis://localhost:6379/0"
    # Short timeouts: limiter and cooldown fall back when Redis stalls
    REDIS_SOCKET_TIMEOUT_SECONDS: float = 2.0
    REDIS_MAX_CONNECTIONS: int = 50
