"""
Settings and configuration for Figma MCP.

Centralizes configuration values and provides validation with fail-fast behavior.
Loads settings from environment variables at context construction time.
"""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass

from .errors import AuthError

__all__ = ["Settings", "create_settings_from_env", "TOKEN_HELP_URL"]

TOKEN_HELP_URL = "https://www.figma.com/developers/api#access-tokens"

DEFAULT_API_BASE = "https://api.figma.com/v1"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for the Figma MCP server.

    API Settings:
        figma_token: Personal access token sent as X-Figma-Token (required)
        api_base: Base URL of the Figma REST API
        http_timeout_s: HTTP request timeout in seconds
        http_retry: Number of retries for timed out requests (0=no retry)

    Image Cache Settings:
        url_ttl_s: Lifetime of an exported image URL in seconds
        lock_timeout_s: Max wait for the cache lock before failing

    Logging:
        log_level: Level name for the figma_mcp logger
    """
    figma_token: str
    api_base: str = DEFAULT_API_BASE
    http_timeout_s: float = 30.0
    http_retry: int = 0
    url_ttl_s: float = 3600.0
    lock_timeout_s: float = 5.0
    log_level: str = "WARNING"

    def __post_init__(self):
        """Validate settings on construction."""
        if not self.figma_token:
            raise ValueError("figma_token is required")

        if not re.match(r"^https?://[^\s/]+(?:/\S*)?$", self.api_base or ""):
            raise ValueError(f"Invalid api_base format: {self.api_base}")

        if self.http_timeout_s <= 0:
            raise ValueError(f"http_timeout_s must be positive, got {self.http_timeout_s}")

        if self.http_retry < 0:
            raise ValueError(f"http_retry must be non-negative, got {self.http_retry}")

        if self.url_ttl_s <= 0:
            raise ValueError(f"url_ttl_s must be positive, got {self.url_ttl_s}")

        if self.lock_timeout_s <= 0:
            raise ValueError(f"lock_timeout_s must be positive, got {self.lock_timeout_s}")

        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. Expected one of: {', '.join(_LOG_LEVELS)}"
            )

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level.upper())


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.

    Environment Variables:
        - FIGMA_TOKEN (required)
        - FIGMA_API_BASE (default: https://api.figma.com/v1)
        - FIGMA_HTTP_TIMEOUT (default: 30.0)
        - FIGMA_HTTP_RETRY (default: 0)
        - FIGMA_URL_TTL (default: 3600)
        - FIGMA_LOCK_TIMEOUT (default: 5.0)
        - FIGMA_LOG_LEVEL (default: WARNING)

    Returns:
        Settings object with validated configuration

    Raises:
        AuthError: If FIGMA_TOKEN is not set
        ValueError: If any other value is invalid

    Note:
        Creates a fresh Settings instance every time (no caching).
    """
    def get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        return float(value) if value else default

    def get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        return int(value) if value else default

    figma_token = os.getenv("FIGMA_TOKEN")
    if not figma_token:
        raise AuthError(
            f"FIGMA_TOKEN environment variable not set. Get your token from: {TOKEN_HELP_URL}"
        )

    return Settings(
        figma_token=figma_token,
        api_base=os.getenv("FIGMA_API_BASE") or DEFAULT_API_BASE,
        http_timeout_s=get_float("FIGMA_HTTP_TIMEOUT", 30.0),
        http_retry=get_int("FIGMA_HTTP_RETRY", 0),
        url_ttl_s=get_float("FIGMA_URL_TTL", 3600.0),
        lock_timeout_s=get_float("FIGMA_LOCK_TIMEOUT", 5.0),
        log_level=os.getenv("FIGMA_LOG_LEVEL") or "WARNING",
    )
