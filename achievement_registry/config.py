"""
Registry configuration using pydantic-settings.
Loads from environment variables with .env file support.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Registry settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Storage (sqlite+aiosqlite:// keeps the mapping in memory)
    database_url: str = "sqlite+aiosqlite:///./achievement_registry.db"

    # Identity
    bootstrap_admin: str = "registry-admin"
    null_principal: str = "0x0000000000000000000000000000000000000000"

    # Access policy
    read_requires_permission: bool = False
    create_min_level: int = 2
    archive_min_level: int = 3

    # Application
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
