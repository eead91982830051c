from functools import lru_cache
from typing import Optional

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralised application settings, sourced from environment variables or .env."""

    app_name: str = Field(default="Pocketbook", alias="APP_NAME")
    environment: str = Field(default="development", alias="ENVIRONMENT")
    database_url: str = Field(alias="DATABASE_URL")
    direct_database_url: Optional[str] = Field(
        default=None,
        alias="DIRECT_DATABASE_URL",
        description="Optional direct Postgres connection string used for running migrations.",
    )
    database_isolation_level: str = Field(
        default="REPEATABLE READ",
        alias="DATABASE_ISOLATION_LEVEL",
        description="Isolation level for ledger sessions on PostgreSQL (snapshot isolation by default).",
    )
    auto_run_migrations: bool = Field(default=False, alias="AUTO_RUN_MIGRATIONS")
    timezone: str = Field(
        default="UTC",
        alias="APP_TIMEZONE",
        description="IANA zone that defines calendar days for summaries and dashboards.",
    )
    default_currency: str = Field(default="IDR", alias="DEFAULT_CURRENCY", min_length=3, max_length=3)
    scheduler_enabled: bool = Field(default=True, alias="SCHEDULER_ENABLED")
    daily_summary_cron: str = Field(
        default="1 0 * * *",
        alias="DAILY_SUMMARY_CRON",
        description="Crontab expression for the daily summary builder.",
    )
    daily_summary_timeout_seconds: int = Field(
        default=30 * 60,
        alias="DAILY_SUMMARY_TIMEOUT_SECONDS",
        ge=1,
    )
    refresh_past_summaries: bool = Field(
        default=True,
        alias="REFRESH_PAST_SUMMARIES",
        description="Rebuild a past day's summary after a back-dated transaction is created or cancelled.",
    )
    telegram_bot_token: Optional[str] = Field(default=None, alias="TELEGRAM_BOT_TOKEN")
    telegram_webhook_secret: Optional[str] = Field(
        default=None, alias="TELEGRAM_WEBHOOK_SECRET"
    )
    backend_base_url: Optional[AnyHttpUrl] = Field(
        default=None,
        alias="BACKEND_BASE_URL",
        description="The public URL where FastAPI is reachable (used by Telegram webhooks).",
    )
    internal_backend_base_url: Optional[AnyHttpUrl] = Field(
        default=None,
        alias="INTERNAL_BACKEND_BASE_URL",
        description="Internal URL used by the bot to reach the API; falls back to BACKEND_BASE_URL.",
    )
    telegram_register_webhook_on_start: bool = Field(
        default=False, alias="TELEGRAM_REGISTER_WEBHOOK_ON_START"
    )

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached accessor so imports share a single settings instance."""
    return Settings()  # type: ignore[call-arg]
