"""Configuration settings for GitHub Issue Backup."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BackupConfig(BaseModel):
    """Configuration for the fetch-dispatch-persist pipeline.

    Controls channel sizing, page size, rate limit waiting and
    per-entry concurrency.
    """

    channel_capacity: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Records buffered between fetcher and writer before the fetcher blocks",
    )
    per_page: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Items requested per page (GitHub maximum is 100)",
    )
    rate_limit_margin_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description="Extra seconds to wait past the rate limit reset time",
    )
    entry_concurrency: int = Field(
        default=1,
        ge=1,
        le=20,
        description="Entries enriched in parallel within one listing page",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # GitHub API
    # --------------------------------------------------------------------------
    github_token: str = Field(
        default="",
        description="GitHub personal access token",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # --------------------------------------------------------------------------
    # Backup Pipeline
    # --------------------------------------------------------------------------
    backup: BackupConfig = Field(
        default_factory=BackupConfig,
        description="Fetch/write pipeline configuration",
    )

    # --------------------------------------------------------------------------
    # Logging Configuration
    # --------------------------------------------------------------------------
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
