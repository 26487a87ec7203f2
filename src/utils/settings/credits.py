"""Points economy and verification code settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class CreditsSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    VERIFICATION_CODE_TTL_SECONDS: int = 300
    VERIFICATION_CODE_COOLDOWN_SECONDS: int = 60

    # Per-IP limits on the public auth endpoints
    VERIFICATION_CODE_RATE_LIMIT: int = 5
    VERIFICATION_CODE_RATE_WINDOW_SECONDS: int = 3600
    REGISTER_RATE_LIMIT: int = 10
    REGISTER_RATE_WINDOW_SECONDS: int = 3600

    DEFAULT_PAGE_LIMIT: int = 20
    MAX_PAGE_LIMIT: int = 100
