from datetime import date
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

# Company floater holidays: the only dates floater leave may be taken on.
_DEFAULT_FLOATER_HOLIDAYS: dict[date, str] = {
    date(2026, 1, 14): "Makar Sankranti",
    date(2026, 3, 4): "Holi",
    date(2026, 8, 28): "Raksha Bandhan",
    date(2026, 9, 4): "Janmashtami",
    date(2026, 11, 9): "Govardhan Puja",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "Leave Flow"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    database_url: str = "postgresql+asyncpg://leaveflow:leaveflow@db:5432/leaveflow"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]

    holiday_provider: Literal["database", "calendarific"] = "database"
    calendarific_api_key: str | None = None
    calendarific_base_url: str = "https://calendarific.com/api/v2"
    holiday_country: str = "IN"
    floater_holidays: dict[date, str] = _DEFAULT_FLOATER_HOLIDAYS

    scheduler_api_key: str | None = None
    accrual_day_of_month: int = 1
    worker_interval_seconds: int = 3600


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
