"""
Server context for managing application dependencies.

Owns the settings, the Figma client and the process-wide image cache so a
host can build them once at startup and hand the operations facade to its
transport, without any module-level global state.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from .figma.client import FigmaClient
from .figma.image_cache import ImageCache
from .logging_config import setup_logging
from .operations import FigmaOperations, OpsConfig
from .settings import Settings, create_settings_from_env

logger = logging.getLogger(__name__)


@dataclass
class ServerContext:
    """
    Shared context for one server process.

    Dependencies are created lazily on first access and reused afterwards.
    The image cache in particular must be a single instance for the whole
    process: resources registered by export_images are read back through
    the same object.
    """
    settings: Settings
    ops_config: OpsConfig = field(default_factory=OpsConfig)
    _client: Optional[FigmaClient] = None
    _cache: Optional[ImageCache] = None
    _operations: Optional[FigmaOperations] = None

    @classmethod
    def from_env(cls, configure_logging: bool = True) -> ServerContext:
        """
        Create server context from environment variables.

        Args:
            configure_logging: Also install the stderr log handler

        Returns:
            ServerContext with settings loaded from environment
        """
        settings = create_settings_from_env()
        if configure_logging:
            setup_logging(settings.log_level_value)
        logger.info(f"Figma MCP context created for {settings.api_base}")
        return cls(settings=settings)

    @property
    def client(self) -> FigmaClient:
        if self._client is None:
            self._client = FigmaClient.from_settings(self.settings)
        return self._client

    @property
    def cache(self) -> ImageCache:
        if self._cache is None:
            self._cache = ImageCache(
                url_ttl_s=self.settings.url_ttl_s,
                lock_timeout_s=self.settings.lock_timeout_s,
            )
        return self._cache

    @property
    def operations(self) -> FigmaOperations:
        if self._operations is None:
            self._operations = FigmaOperations(self.client, self.cache, self.ops_config)
        return self._operations

    async def aclose(self) -> None:
        """Close the HTTP client if one was created."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
