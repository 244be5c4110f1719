"""
In-memory cache for exported Figma images.

The Figma image export endpoint returns download URLs that stop working
after about an hour. This cache turns each export into a stable
``figma://`` resource URI that can be listed and read at any time:

- ``register_export`` records the short-lived URL under a deterministic URI
- bytes are downloaded lazily on first read and kept for the process lifetime
- once the URL is past its TTL, an entry that was never read can no longer
  be served and must be exported again

Entries are never evicted. Re-exporting the same file/node/format/scale
replaces the previous entry and drops any bytes cached for it.

The map is guarded by a reader/writer lock. The lock is only held while
the dict is touched; downloads happen outside the cache entirely.
"""
from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterator, List, Optional, Tuple

from ..errors import CacheInternalError, ResourceNotFoundError
from .rwlock import ReadWriteLock

logger = logging.getLogger(__name__)

__all__ = ["ImageCache", "ImageEntry", "URI_SCHEME", "DEFAULT_URL_TTL_S", "MIME_TYPES"]

URI_SCHEME = "figma"

# Figma export URLs expire after one hour
DEFAULT_URL_TTL_S = 3600.0

DEFAULT_LOCK_TIMEOUT_S = 5.0

MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "svg": "image/svg+xml",
    "pdf": "application/pdf",
}

FALLBACK_MIME_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class ImageEntry:
    """
    One exported image.

    Entries are immutable; the cache swaps in a new instance on every
    update, so a reader holding an entry never sees it change underneath.
    """
    file_key: str
    node_id: str
    format: str
    scale: float
    figma_url: str                        # Short-lived download URL from the export call
    cached_data: Optional[bytes] = None   # Set after the first successful download
    export_time: float = 0.0              # Epoch seconds, from the cache clock

    @property
    def is_materialized(self) -> bool:
        return self.cached_data is not None

    @property
    def size(self) -> Optional[int]:
        return len(self.cached_data) if self.cached_data is not None else None


class ImageCache:
    """
    Thread-safe registry of exported images keyed by resource URI.

    Args:
        url_ttl_s: Lifetime of an export URL, measured from registration
        lock_timeout_s: Max seconds to wait for the lock before raising
            CacheInternalError
        clock: Returns the current time in epoch seconds (injectable for tests)
    """

    def __init__(
        self,
        *,
        url_ttl_s: float = DEFAULT_URL_TTL_S,
        lock_timeout_s: float = DEFAULT_LOCK_TIMEOUT_S,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._entries: Dict[str, ImageEntry] = {}
        self._lock = ReadWriteLock()
        self.url_ttl_s = url_ttl_s
        self.lock_timeout_s = lock_timeout_s
        self._clock = clock

    def register_export(
        self,
        file_key: str,
        node_id: str,
        format: str,
        scale: float,
        figma_url: str,
    ) -> str:
        """
        Record an exported image and return its resource URI.

        An existing entry under the same URI is replaced (last write wins),
        which also discards any bytes downloaded for it.

        Raises:
            CacheInternalError: If the lock cannot be acquired
        """
        uri = self.generate_uri(file_key, node_id, format, scale)
        entry = ImageEntry(
            file_key=file_key,
            node_id=node_id,
            format=format,
            scale=scale,
            figma_url=figma_url,
            cached_data=None,
            export_time=self._clock(),
        )

        with self._write_locked():
            replaced = uri in self._entries
            self._entries[uri] = entry

        logger.info(f"Registered export {uri}{' (replaced existing entry)' if replaced else ''}")
        return uri

    def list_all(self) -> List[Tuple[str, ImageEntry]]:
        """Snapshot of every (uri, entry) pair, in no particular order."""
        with self._read_locked():
            return [(uri, replace(entry)) for uri, entry in self._entries.items()]

    def get_entry(self, uri: str) -> Optional[ImageEntry]:
        """Return a copy of the entry for ``uri``, or None if unknown."""
        with self._read_locked():
            entry = self._entries.get(uri)
            return replace(entry) if entry is not None else None

    def update_cached_data(self, uri: str, data: bytes,
                           expected_url: Optional[str] = None) -> bool:
        """
        Store downloaded bytes on an existing entry.

        With ``expected_url``, the bytes are only stored if the entry still
        points at that URL; a re-export in the meantime keeps its fresh,
        empty entry.

        Returns:
            True if the bytes were stored

        Raises:
            ResourceNotFoundError: If no entry is registered under ``uri``
            CacheInternalError: If the lock cannot be acquired
        """
        data = bytes(data)
        with self._write_locked():
            entry = self._entries.get(uri)
            if entry is None:
                raise ResourceNotFoundError(f"Resource not found: {uri}")
            if expected_url is not None and entry.figma_url != expected_url:
                stored = False
            else:
                self._entries[uri] = replace(entry, cached_data=data)
                stored = True

        if stored:
            logger.debug(f"Cached {len(data)} bytes for {uri}")
        else:
            logger.info(f"Not caching bytes for {uri}: re-exported during download")
        return stored

    def is_expired(self, entry: ImageEntry) -> bool:
        """
        True if the export URL of ``entry`` can no longer be downloaded.

        Only the URL age matters here, not whether bytes are already cached.
        If the clock cannot be read, or reads earlier than the export time,
        the entry is treated as expired.
        """
        try:
            elapsed = self._clock() - entry.export_time
        except (OSError, OverflowError, ValueError) as e:
            logger.warning(f"Clock unavailable, treating entry as expired: {e}")
            return True

        if elapsed < 0:
            return True
        return elapsed > self.url_ttl_s

    @staticmethod
    def get_mime_type(format: str) -> str:
        """Map an export format to its MIME type, case-insensitively."""
        return MIME_TYPES.get(format.lower(), FALLBACK_MIME_TYPE)

    @staticmethod
    def generate_uri(file_key: str, node_id: str, format: str, scale: float) -> str:
        """
        Build the resource URI for an export.

        Scale 1.0 has no suffix; any other scale is rendered as ``@{N}x``
        with the fractional part truncated.
        """
        if scale != 1.0:
            return f"{URI_SCHEME}://file/{file_key}/node/{node_id}@{int(scale)}x.{format}"
        return f"{URI_SCHEME}://file/{file_key}/node/{node_id}.{format}"

    def __len__(self) -> int:
        with self._read_locked():
            return len(self._entries)

    def __contains__(self, uri: object) -> bool:
        with self._read_locked():
            return uri in self._entries

    @contextmanager
    def _read_locked(self) -> Iterator[None]:
        if not self._lock.acquire_read(timeout=self.lock_timeout_s):
            raise CacheInternalError("Failed to acquire lock")
        try:
            yield
        finally:
            self._lock.release_read()

    @contextmanager
    def _write_locked(self) -> Iterator[None]:
        if not self._lock.acquire_write(timeout=self.lock_timeout_s):
            raise CacheInternalError("Failed to acquire lock")
        try:
            yield
        finally:
            self._lock.release_write()
