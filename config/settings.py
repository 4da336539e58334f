from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Core
    ENVIRONMENT: str = Field(default="production")
    LOG_LEVEL: str = Field(default="INFO")

    # Telegram Gateway
    TELEGRAM_GATEWAY_BASE_URL: str = Field(default="https://gatewayapi.telegram.org/")
    TELEGRAM_GATEWAY_TOKEN: str = Field(default="")
    TELEGRAM_GATEWAY_TIMEOUT_SEC: float = Field(default=20.0)
    TELEGRAM_GATEWAY_CODE_LENGTH: int = Field(default=6)  # gateway accepts 4..8


settings = Settings()
