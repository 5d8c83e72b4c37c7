"""Configuration management for spoolbind."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SPOOLBIND_",
        extra="ignore",
    )

    # Printer web API
    printer_url: Optional[str] = Field(default=None, description="Base URL of the printer web API")
    api_token: Optional[str] = Field(default=None, description="Bearer token for the printer web API")
    context_id: Optional[str] = Field(default=None, description="Printer context to address")

    # Timeouts
    station_fetch_timeout: float = Field(
        default=10.0, gt=0, description="Deadline for a material station fetch (seconds)"
    )
    request_timeout: float = Field(
        default=30.0, gt=0, description="Timeout for job start requests (seconds)"
    )

    # Job start defaults
    leveling: bool = Field(default=False, description="Auto-level the bed before printing")

    # Feature flags
    mock_mode: bool = Field(default=False, description="Use mock station and job executor")

    log_level: str = Field(default="INFO", description="Log level")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def configure(settings: Optional[Settings]) -> None:
    """Override global settings (None resets to environment defaults)."""
    global _settings
    _settings = settings
