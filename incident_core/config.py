"""Incident core configuration using Pydantic Settings."""

from __future__ import annotations

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class IncidentConfig(BaseSettings):
    """Loads from a .env file and environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "incident-core"
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./incidents.db"
    db_timeout: int = 30  # seconds a writer waits on a locked database

    # Logging
    log_dir: Optional[str] = "logs"
    log_max_bytes: int = 10_000_000
    log_backup_count: int = 5

    @field_validator("database_url")
    @classmethod
    def validate_async_driver(cls, v: str) -> str:
        scheme = v.split("://", 1)[0]
        if "+" not in scheme:
            raise ValueError(
                "database_url must name an async driver, e.g. sqlite+aiosqlite:// or postgresql+asyncpg://"
            )
        return v

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


def get_config() -> IncidentConfig:
    """Factory function to create config instance."""
    return IncidentConfig()
