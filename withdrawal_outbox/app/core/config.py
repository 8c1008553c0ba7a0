from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Withdrawal Outbox API"
    database_url: str = "sqlite:///withdrawal_outbox.db"
    log_level: str = "INFO"

    publisher_enabled: bool = True
    publish_interval_seconds: float = 5.0
    publish_page_size: int = 100

    channel_backend: Literal["logging", "redis"] = "logging"
    redis_url: str = "redis://localhost:6379/0"
    channel_stream: str = "bank-account-events"
    channel_max_length: int = 100_000
    channel_timeout_seconds: float = 2.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="OUTBOX_",
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
