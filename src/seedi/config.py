"""
SEEDi Configuration

Centralized configuration using Pydantic Settings.
All configuration is loaded from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CatalogSettings(BaseSettings):
    """Innovation catalog source configuration."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="", extra="ignore"
    )

    source: Literal["bundled", "file", "remote"] = Field(
        default="bundled", alias="SEEDI_CATALOG_SOURCE"
    )
    path: Path | None = Field(default=None, alias="SEEDI_CATALOG_PATH")
    url: str | None = Field(default=None, alias="SEEDI_CATALOG_URL")

    # Remote knowledge base paging
    page_size: int = Field(default=100, ge=1, le=1000, alias="SEEDI_CATALOG_PAGE_SIZE")
    timeout_seconds: float = Field(default=30.0, gt=0.0, alias="SEEDI_CATALOG_TIMEOUT")
    max_retries: int = Field(default=3, ge=1, le=10, alias="SEEDI_CATALOG_MAX_RETRIES")

    @field_validator("path", mode="before")
    @classmethod
    def resolve_path(cls, v: str | Path | None) -> Path | None:
        """Resolve path and expand user."""
        if v is None or v == "":
            return None
        return Path(v).expanduser().resolve()


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="", extra="ignore"
    )

    db_path: Path = Field(default=Path("~/.seedi/seedi.db"), alias="SEEDI_DB_PATH")

    @field_validator("db_path", mode="before")
    @classmethod
    def resolve_path(cls, v: str | Path) -> Path:
        """Resolve path and expand user."""
        return Path(v).expanduser().resolve()


class BaselineSettings(BaseSettings):
    """Default farm baseline used when projecting impact."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="", extra="ignore"
    )

    soil_health: int = Field(default=55, ge=0, le=100, alias="SEEDI_BASELINE_SOIL_HEALTH")
    water_efficiency: int = Field(
        default=60, ge=0, le=100, alias="SEEDI_BASELINE_WATER_EFFICIENCY"
    )
    biodiversity_index: int = Field(
        default=45, ge=0, le=100, alias="SEEDI_BASELINE_BIODIVERSITY_INDEX"
    )
    post_harvest_loss: int = Field(
        default=18, ge=0, le=100, alias="SEEDI_BASELINE_POST_HARVEST_LOSS"
    )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="", extra="ignore"
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )
    log_format: Literal["json", "text"] = Field(default="json", alias="LOG_FORMAT")


class FeatureFlags(BaseSettings):
    """Feature flags for optional functionality."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", env_prefix="", extra="ignore"
    )

    debug: bool = Field(default=False, alias="SEEDI_DEBUG")
    trace_path: Path = Field(default=Path("~/.seedi/traces"), alias="SEEDI_TRACE_PATH")

    @field_validator("trace_path", mode="before")
    @classmethod
    def resolve_path(cls, v: str | Path) -> Path:
        """Resolve path and expand user."""
        return Path(v).expanduser().resolve()


class Settings(BaseSettings):
    """
    Main SEEDi settings aggregator.

    Usage:
        from seedi.config import get_settings
        settings = get_settings()
        print(settings.catalog.source)
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Sub-settings (composed)
    catalog: CatalogSettings = Field(default_factory=CatalogSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    baseline: BaselineSettings = Field(default_factory=BaselineSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    features: FeatureFlags = Field(default_factory=FeatureFlags)

    def ensure_directories(self) -> None:
        """Ensure required directories exist."""
        self.storage.db_path.parent.mkdir(parents=True, exist_ok=True)
        if self.features.debug:
            self.features.trace_path.mkdir(parents=True, exist_ok=True)


# Singleton pattern for settings
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance (singleton)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (useful for testing)."""
    global _settings
    _settings = None
