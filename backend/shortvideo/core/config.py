"""
Application Configuration

Settings class using pydantic-settings for environment variable loading.
The settings object is frozen: it is built once per process and handed to
every component constructor instead of being read from deep call sites.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


ResponseMode = Literal["binary", "url"]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For example, RESPONSE_MODE=url switches the render endpoint to
    upload-and-return-URL responses.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Application
    app_name: str = Field(default="Short Video Render API", description="Application name")
    version: str = Field(default="0.1.0", description="API version")
    port: int = Field(default=3123, ge=1, le=65535, description="Listen port")
    log_level: str = Field(default="INFO", description="Root log level")

    # Response handling
    response_mode: ResponseMode = Field(
        default="binary",
        description="'binary' returns MP4 bytes, 'url' uploads and returns a videoUrl",
    )

    # Downloads
    audio_download_timeout_ms: int = Field(
        default=15000, gt=0, description="Timeout for the narrated audio download"
    )
    asset_download_timeout_ms: int = Field(
        default=15000, gt=0, description="Timeout for each stock footage download"
    )
    asset_download_concurrency: int = Field(
        default=4, ge=1, le=32, description="Maximum parallel asset downloads per request"
    )
    max_download_bytes: int = Field(
        default=200 * 1024 * 1024,  # 200MB
        gt=0,
        description="Maximum size of a single downloaded resource in bytes",
    )

    # Render collaborator
    render_timeout_ms: int = Field(
        default=180000,  # 3 minutes
        gt=0,
        description="Absolute deadline for one render job, measured from submission",
    )
    render_poll_interval_ms: int = Field(
        default=1000, gt=0, description="Interval between render job status polls"
    )
    render_task: str = Field(
        default="worker.tasks.render.render_short_video",
        description="Import path of the RQ task executed by the render worker",
    )
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL",
    )

    # Storage
    storage_path: str = Field(
        default="/data",
        description="Root path for shared file storage (outputs, render jobs)",
    )
    storage_base_url: Optional[str] = Field(
        default=None,
        description="Public base URL of the outputs directory (url mode only)",
    )
    temp_dir_path: Optional[str] = Field(
        default=None,
        description="Directory for per-request temporary files (default: <storage_path>/tmp)",
    )

    # Resource Limits
    max_request_size: int = Field(
        default=10 * 1024 * 1024,  # 10MB
        description="Maximum request body size in bytes",
    )

    @field_validator("response_mode", mode="before")
    @classmethod
    def _normalize_response_mode(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("storage_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip().rstrip("/")
        return value or None

    @property
    def storage_root(self) -> Path:
        """Resolved storage root."""
        return Path(self.storage_path).resolve()

    @property
    def temp_root(self) -> Path:
        """Directory holding per-request temporary workspaces."""
        if self.temp_dir_path:
            return Path(self.temp_dir_path).resolve()
        return self.storage_root / "tmp"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings instance.

    Uses lru_cache to ensure settings are only loaded once per process.

    Example:
        >>> settings = get_settings()
        >>> settings.port
        3123
    """
    return Settings()
