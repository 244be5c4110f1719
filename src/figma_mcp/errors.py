"""
Figma MCP error classes.

Provides a clear taxonomy of errors raised by the URL parser, the Figma API
client and the image cache. HTTP status codes, transport failures and cache
lock failures are all mapped onto this hierarchy so the operations layer can
render them consistently regardless of where they originated.
"""
from __future__ import annotations

from typing import Optional


class FigmaError(Exception):
    """
    Base class for all Figma MCP errors.

    Tool handlers catch this type and render it as a tool error payload
    instead of letting it terminate the server.
    """
    pass


class InvalidUrlError(FigmaError):
    """
    URL could not be classified.

    Raised when:
    - The string does not parse as an absolute URL
    - The host is not figma.com / www.figma.com
    - A file URL was required but the path shape is not a file URL
    """
    pass


class AuthError(FigmaError):
    """
    Credential problem detected before any request is sent.

    Raised when:
    - FIGMA_TOKEN is not set
    - The token cannot be used as an HTTP header value
    """
    pass


class NetworkError(FigmaError):
    """
    Transport-level failure talking to the Figma API.

    Raised when:
    - Connection, DNS or TLS errors occur
    - Requests time out after all retry attempts
    """
    pass


class FigmaApiError(FigmaError):
    """
    The Figma API answered, but not with a usable payload.

    Raised when:
    - HTTP status is not 2xx (status is set)
    - A 2xx payload carries a non-null ``err`` field
    - The body is not valid JSON
    """

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class ResourceNotFoundError(FigmaError):
    """No cache entry is registered under the requested resource URI."""
    pass


class ResourceExpiredError(FigmaError):
    """
    The export URL behind a resource is past its TTL and no bytes were cached.

    The only recovery is to call export_images again.
    """
    pass


class DownloadError(FigmaError):
    """Fetching bytes from an export URL failed."""
    pass


class CacheInternalError(FigmaError):
    """
    The image cache could not acquire its lock.

    Unlike the other errors this indicates a systemic fault rather than a
    problem with a single request.
    """
    pass


class ProtocolError(Exception):
    """
    Error surfaced to the protocol layer with a JSON-RPC style code.

    Resource handlers raise this instead of returning an error payload.
    """

    def __init__(self, code: int, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


__all__ = [
    "FigmaError",
    "InvalidUrlError",
    "AuthError",
    "NetworkError",
    "FigmaApiError",
    "ResourceNotFoundError",
    "ResourceExpiredError",
    "DownloadError",
    "CacheInternalError",
    "ProtocolError",
]
