"""Configuration management."""

import logging
from functools import cache

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings

from .consts import CLIENT_NAME, DEFAULT_TIMEOUT_SECONDS


class Config(BaseSettings):
    """Client configuration, overridable through ALLOCATION_CLIENT_* env vars."""

    model_config = ConfigDict(
        env_prefix="ALLOCATION_CLIENT_", case_sensitive=False, extra="ignore"
    )
    base_url: str = Field(
        default="http://localhost:8080/api",
        description="Base URL of the REST backend",
    )
    storage_file: str = Field(
        default="~/.allocation_client/session.json",
        description="Path to the JSON file holding the persisted session",
    )
    log_level: str = Field(
        default="INFO",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR)$",
        description="Logging level",
    )
    language: str = Field(
        default="en",
        pattern=r"^(en|de)$",
        description="Language for user-facing error messages",
    )
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        le=300,
        description="Per-request timeout in seconds",
    )

    def build_url(self, endpoint: str) -> str:
        """Join an endpoint path onto the base URL without doubling slashes."""
        clean_endpoint = endpoint[1:] if endpoint.startswith("/") else endpoint
        return f"{self.base_url.rstrip('/')}/{clean_endpoint}"


@cache
def get_config() -> Config:
    """Get a cached Config instance."""
    return Config()


def setup_logging(log_level: str = "INFO") -> logging.Logger:
    """Configure logging for the entire application"""
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,  # Override any existing configuration
    )
    return logging.getLogger(CLIENT_NAME)
