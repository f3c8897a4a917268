"""Configuration for the plugin settings service."""

from __future__ import annotations

from typing import List

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()


class ServiceConfig(BaseSettings):
    """Service configuration loaded from environment variables."""

    # Storage Configuration
    database_url: str = Field(default="sqlite:///./plugin_settings.db")
    options_storage_key: str = Field(
        default="plugin_settings",
        description="Identifier of the row holding the persisted options blob",
    )
    plugin_version: str = Field(default="1.0.0")

    # Application Configuration
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    # Boundary Configuration
    settings_admin_token: str | None = Field(
        default=None,
        description="Token accepted in X-Settings-Token for write access; unset denies writes",
    )
    cors_origins: str = Field(default="http://localhost:3000,http://127.0.0.1:3000")

    # Schema extension: dotted paths of callables taking the schema registry
    schema_contributors: str = Field(default="")

    @property
    def cors_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        return [
            origin.strip() for origin in self.cors_origins.split(",") if origin.strip()
        ]

    @property
    def schema_contributors_list(self) -> List[str]:
        """Get schema contributor import paths as a list."""
        return [
            path.strip() for path in self.schema_contributors.split(",") if path.strip()
        ]

    @field_validator("options_storage_key")
    @classmethod
    def validate_storage_key(cls, v: str) -> str:
        """Reject blank storage identifiers."""
        if not v.strip():
            raise ValueError("options_storage_key must not be empty")
        return v.strip()

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix for environment variables
        extra="ignore",
    )


def get_config() -> ServiceConfig:
    """Get a fresh configuration instance."""
    return ServiceConfig()


# Cached instance used by the entry points only
config: ServiceConfig | None = None


def get_global_config() -> ServiceConfig:
    """Get or create the cached configuration instance."""
    global config
    if config is None:
        config = get_config()
    return config
