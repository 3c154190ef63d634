from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "LeaveDesk"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"
    database_url: str = "postgresql+asyncpg://leavedesk:leavedesk@db:5432/leavedesk"
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:8000"]
    auto_create_tables: bool = True

    # Holiday calendar used for business-day counts.
    default_canton: Literal["VD", "GE", "FR", "VS", "NE", "ZH", "BE", "TI", "JU"] = "VD"

    # Minimum staff per department for weekly capacity alerts.
    min_staff_default: int = 2
    min_staff_by_department: dict[str, int] = {}

    # Notification recipients per workflow stage.
    manager_recipients: list[str] = []
    hr_recipients: list[str] = []
    director_recipients: list[str] = []
    approval_recipients: list[str] = []


_settings: Settings | None = None


def get_settings() -> Settings:
    """Return cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
