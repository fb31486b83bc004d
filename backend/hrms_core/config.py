from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "HRMS Attendance Core"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    database_url: str = "postgresql+asyncpg://hrms:hrms@db:5432/hrms"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    # External biometric time-clock feed.
    essl_sync_url: str | None = None
    essl_sync_timeout_seconds: float = Field(default=3.0, ge=1.0, le=15.0)
    essl_live_sync_timeout_seconds: float = Field(default=5.0, ge=1.0, le=15.0)
    essl_sync_interval_seconds: float = Field(default=60.0, gt=0)
    essl_sync_delay_seconds: float = Field(default=0.3, ge=0)
    essl_first_sync_delay_seconds: float = Field(default=1.0, ge=0)
    essl_max_shift_hours: float = Field(default=16.0, gt=0)

    # Punch times are wall-clock strings in this fixed offset (IST by default).
    punch_utc_offset_minutes: int = Field(default=330, ge=-720, le=840)

    # Default leave policy (no carry-forward).
    leave_paid_allocation: float = Field(default=12, ge=0)
    leave_sick_allocation: float = Field(default=6, ge=0)
    leave_year_start_month: int = Field(default=0, ge=0, le=11)


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
