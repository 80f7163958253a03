"""
Application settings.

Values come from environment variables prefixed with BOOKAPP_ or from a .env
file in the working directory.
"""

from functools import lru_cache
from pathlib import Path
from typing import Final, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_TITLE_DEFAULT: Final[str] = "Book App"
# Shared in-memory SQLite database, kept alive by a single pooled connection
IN_MEMORY_DATABASE_URL: Final[str] = "sqlite://"


class Settings(BaseSettings):
    """Global application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="BOOKAPP_",
        extra="ignore",
    )

    app_title: str = APP_TITLE_DEFAULT
    database_url: str = Field(
        default=IN_MEMORY_DATABASE_URL,
        description="SQLAlchemy database URL. Defaults to an in-memory SQLite database.",
    )
    seed_database: bool = Field(
        default=True,
        description="Seed the four demo books on startup when the database is empty.",
    )
    log_level: str = Field(default="INFO", description="Root log level.")
    log_dir: Optional[Path] = Field(
        default=None,
        description="Directory for the rotating log file. No file logging when unset.",
    )
    debug: bool = Field(default=False, description="Show exception details on the error page.")


@lru_cache
def get_settings() -> Settings:
    """Load settings from environment variables and .env file (cached)."""
    return Settings()
