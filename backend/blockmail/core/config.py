"""Application configuration and settings management."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_prefix="BLOCKMAIL_", extra="ignore")

    app_name: str = Field(default="Blockmail Editor API", description="Human readable application name.")
    environment: Literal["local", "development", "staging", "production"] = Field(
        default="local",
        description="Deployment environment name.",
    )
    log_level: str = Field(default="INFO", description="Root logging level.")
    history_limit: int = Field(
        default=50,
        ge=1,
        description="Maximum number of undo steps kept per editing session.",
    )
    autosave_delay_seconds: float = Field(
        default=1.0,
        ge=0,
        description="Quiet period after the last edit before a document is persisted.",
    )
    markup_context: str = Field(
        default="http://schema.org",
        description="JSON-LD @context written into generated action markup.",
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the API from a browser.",
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()


settings = get_settings()
