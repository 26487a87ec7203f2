"""Email settings configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class EmailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    RESEND_API_KEY: str = ""
    EMAIL_FROM_NAME: str = "香蕉AI工作室"
    EMAIL_FROM_ADDRESS: str = "onboarding@resend.dev"
    EMAIL_LOCALE: str = "zh"

    @property
    def sender(self) -> str:
        return f"{self.EMAIL_FROM_NAME} <{self.EMAIL_FROM_ADDRESS}>"
