"""
Configuration settings for d1kit.

Uses Pydantic Settings to load environment variables for the remote D1
credentials, the local emulator storage root, and logging.
"""
from __future__ import annotations

from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Backend selection
    backend: str = Field("local", alias="D1_BACKEND")

    # Remote service
    account_id: str = Field("", alias="D1_ACCOUNT_ID")
    api_token: str = Field("", alias="D1_API_TOKEN")
    api_base_url: str = Field("https://api.cloudflare.com/client/v4", alias="D1_API_BASE_URL")
    request_timeout_seconds: float = Field(30.0, alias="D1_REQUEST_TIMEOUT_SECONDS")
    transport_retries: int = Field(3, alias="D1_TRANSPORT_RETRIES")

    # Local emulator
    local_path: str = Field(".d1", alias="D1_LOCAL_PATH")
    local_region: str = Field("local", alias="D1_LOCAL_REGION")
    local_statement_timeout_ms: int = Field(30_000, alias="D1_LOCAL_STATEMENT_TIMEOUT_MS")

    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
