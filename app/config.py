"""
Application configuration from environment variables (prefix FWR_).
"""
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_prefix="FWR_", extra="ignore")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Root log level"
    )
    preview_limit: int = Field(
        default=100,
        ge=1,
        le=10000,
        description="Default number of rows returned by preview endpoints"
    )
    max_upload_bytes: int = Field(
        default=20 * 1024 * 1024,
        ge=1,
        description="Largest accepted CSV upload in bytes"
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
