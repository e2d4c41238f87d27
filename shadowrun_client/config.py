"""
Client Configuration Settings.

This module defines the client configuration using Pydantic's BaseSettings.
Values are bound from environment variables and an optional .env file.

Only the backend base URL is meant to be overridden per deployment. The
request timeout, content type and token storage key are fixed constants.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_URL = "http://localhost:5000"
DEFAULT_TIMEOUT_SECONDS = 30.0
CONTENT_TYPE = "application/json"
TOKEN_STORAGE_KEY = "shadowrun-session-token"


def default_token_store_path() -> Path:
    return Path.home() / ".config" / "shadowrun-client" / "storage.json"


class ClientSettings(BaseSettings):
    """
    Client settings model.

    All properties are bound from environment variables and .env file.
    `NEXT_PUBLIC_API_URL` is accepted as a fallback name for the base URL so
    the client can share a deployment's existing front-end environment.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    api_url: str = Field(
        default=DEFAULT_API_URL,
        min_length=1,
        description="Base URL of the companion backend (HTTP + SSE).",
        validation_alias=AliasChoices("SHADOWRUN_API_URL", "NEXT_PUBLIC_API_URL", "api_url"),
        examples=["http://localhost:5000", "https://api.example.com"],
    )
    token_store_path: Path = Field(
        default_factory=default_token_store_path,
        description="JSON file holding the persisted bearer token.",
        validation_alias=AliasChoices("SHADOWRUN_TOKEN_STORE", "token_store_path"),
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        validation_alias=AliasChoices("SHADOWRUN_LOG_LEVEL", "log_level"),
    )
    log_format: Literal["simple", "detailed", "json"] = Field(
        default="detailed",
        description="Log line format used by setup_logging().",
        validation_alias=AliasChoices("SHADOWRUN_LOG_FORMAT", "log_format"),
    )
