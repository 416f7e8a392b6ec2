"""Centralized application configuration using Pydantic settings."""
from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven configuration for the booking desk."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    database_url: str = Field(
        default="sqlite:///./bookings.db",
        description="SQLAlchemy URL of the local key/value store. Defaults to a SQLite file.",
    )
    storage_namespace: str = Field(
        default="globalmicro_bookings",
        description="Key under which the serialized booking collection is stored.",
    )
    room_catalog: List[str] = Field(
        default_factory=lambda: [
            "Boardroom A",
            "Boardroom B",
            "Meeting Room 1",
            "Meeting Room 2",
            "Training Room",
        ],
        description="Bookable rooms, in display order",
    )
    equipment_catalog: List[str] = Field(
        default_factory=lambda: [
            "Projector",
            "Demo Laptop",
            "Test Tablet",
            "Video Camera",
            "Presentation Clicker",
        ],
        description="Bookable equipment, in display order",
    )
    run_db_migrations: bool = Field(
        default=True,
        description="Whether to create the store's tables on startup.",
    )
    log_dir: str = Field(default="logs", description="Directory for the audit/application log files")
    log_level: str = Field(default="INFO", description="Level of the application loggers")
    message_clear_seconds: float = Field(default=3.0, description="Lifetime (s) of a form feedback message")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")
    default_rate_limit: str = Field(default="60/minute", description="Global rate limiting rule")
    rate_limiting_enabled: bool = Field(default=True, description="Toggle to disable SlowAPI limits (useful in tests)")

    bookings_service_port: int = 8003


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the Settings object."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the cached Settings instance (useful for tests)."""

    get_settings.cache_clear()
