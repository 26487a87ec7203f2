from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class AuthSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""
    SUPABASE_SERVICE_ROLE_KEY: SecretStr = SecretStr("")
    SUPABASE_TIMEOUT_SECONDS: float = 10.0

    @property
    def auth_base_url(self) -> str:
        return f"{self.SUPABASE_URL.rstrip('/')}/auth/v1"

    def validate_required(self) -> None:
        """Fail fast when the identity provider is not configured."""
        missing = [
            name
            for name, value in (
                ("SUPABASE_URL", self.SUPABASE_URL),
                (
                    "SUPABASE_SERVICE_ROLE_KEY",
                    self.SUPABASE_SERVICE_ROLE_KEY.get_secret_value(),
                ),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"Missing identity provider settings: {', '.join(missing)}")
