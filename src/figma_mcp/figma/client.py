"""
Figma REST API client.

Provides async access to the handful of Figma endpoints the MCP tools need,
plus a plain download helper for the short-lived image URLs that the export
endpoint hands out. Payloads are returned as parsed JSON without any schema
interpretation.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence

import httpx
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from .. import __version__
from ..errors import AuthError, DownloadError, FigmaApiError, NetworkError
from ..settings import DEFAULT_API_BASE, Settings

logger = logging.getLogger(__name__)

__all__ = ["FigmaClient", "FigmaGateway", "TOKEN_HEADER"]

TOKEN_HEADER = "X-Figma-Token"


class FigmaGateway(Protocol):
    """
    Protocol for the Figma API as seen by the operations layer.

    Enables dependency injection so the operations facade can be exercised
    against an in-memory fake.
    """

    async def get_file(self, file_key: str, depth: Optional[int] = None) -> Dict[str, Any]:
        ...

    async def get_file_nodes(self, file_key: str, node_ids: Sequence[str],
                             depth: Optional[int] = None) -> Dict[str, Any]:
        ...

    async def export_images(self, file_key: str, node_ids: Sequence[str], format: str,
                            scale: Optional[float] = None) -> Dict[str, Any]:
        ...

    async def get_me(self) -> Dict[str, Any]:
        ...

    async def download(self, url: str) -> bytes:
        ...


class FigmaClient:
    """
    Async HTTP client for the Figma REST API.

    Bound to a single personal access token for its lifetime. Timed out
    requests are retried with exponential backoff; every other failure is
    classified into the errors module taxonomy on the first attempt.
    """

    def __init__(self, token: str, *, api_base: str = DEFAULT_API_BASE,
                 timeout_s: float = 30.0, retry: int = 0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize Figma API client.

        Args:
            token: Figma personal access token
            api_base: API base URL (e.g., "https://api.figma.com/v1")
            timeout_s: Per-request timeout in seconds
            retry: Extra attempts for timed out requests (0=no retry)
            transport: Optional httpx transport (tests pass httpx.MockTransport)

        Raises:
            AuthError: If the token cannot be sent as a header value
        """
        if not token or "\r" in token or "\n" in token:
            raise AuthError("Invalid token format")
        try:
            token.encode("ascii")
        except UnicodeEncodeError as e:
            raise AuthError("Invalid token format") from e

        self._token = token
        self.api_base = api_base.rstrip("/")
        self.retry = retry

        self.client = httpx.AsyncClient(
            base_url=self.api_base,
            timeout=httpx.Timeout(timeout_s, connect=min(timeout_s, 10.0)),
            follow_redirects=True,
            headers={
                TOKEN_HEADER: token,
                "User-Agent": f"figma-mcp/{__version__}",
            },
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Settings,
                      transport: Optional[httpx.AsyncBaseTransport] = None) -> FigmaClient:
        return cls(
            settings.figma_token,
            api_base=settings.api_base,
            timeout_s=settings.http_timeout_s,
            retry=settings.http_retry,
            transport=transport,
        )

    @property
    def token(self) -> str:
        return self._token

    async def get_file(self, file_key: str, depth: Optional[int] = None) -> Dict[str, Any]:
        """
        Fetch a file document.

        Args:
            file_key: File key from a Figma URL
            depth: Tree depth to return; omitted from the request when None

        Returns:
            Parsed JSON payload
        """
        params: Dict[str, Any] = {}
        if depth is not None:
            params["depth"] = depth
        return await self._get_json(f"/files/{file_key}", params)

    async def get_file_nodes(self, file_key: str, node_ids: Sequence[str],
                             depth: Optional[int] = None) -> Dict[str, Any]:
        """Fetch specific nodes of a file, comma-joining ``node_ids``."""
        params: Dict[str, Any] = {"ids": ",".join(node_ids)}
        if depth is not None:
            params["depth"] = depth
        return await self._get_json(f"/files/{file_key}/nodes", params)

    async def export_images(self, file_key: str, node_ids: Sequence[str], format: str,
                            scale: Optional[float] = None) -> Dict[str, Any]:
        """
        Request rendered image URLs for nodes.

        Returns:
            Payload whose ``images`` field maps node id to download URL
            (or null for nodes that failed to render)
        """
        params: Dict[str, Any] = {"ids": ",".join(node_ids), "format": format}
        if scale is not None:
            params["scale"] = f"{scale:g}"
        return await self._get_json(f"/images/{file_key}", params)

    async def get_me(self) -> Dict[str, Any]:
        """Fetch the user the token belongs to."""
        return await self._get_json("/me")

    async def download(self, url: str) -> bytes:
        """
        Download raw bytes from an export URL.

        The Figma token is not sent; export URLs point at a CDN and are
        self-authorizing.

        Raises:
            DownloadError: On transport failure or non-2xx status
        """
        request = self.client.build_request("GET", url)
        del request.headers[TOKEN_HEADER]

        try:
            response = await self._send(request)
        except httpx.RequestError as e:
            raise DownloadError(f"Failed to download image: {e}") from e

        if not response.is_success:
            raise DownloadError(f"Failed to download image: HTTP {response.status_code}")

        logger.debug(f"Downloaded {len(response.content)} bytes from export URL")
        return response.content

    async def _get_json(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        GET an API path and classify the response.

        Raises:
            NetworkError: On transport failure
            FigmaApiError: On non-2xx status, invalid JSON or an ``err`` field
        """
        request = self.client.build_request("GET", path, params=params)
        logger.debug(f"GET {request.url}")

        try:
            response = await self._send(request)
        except httpx.RequestError as e:
            raise NetworkError(f"Network error requesting {path}: {e}") from e

        if not response.is_success:
            raise FigmaApiError(
                f"HTTP {response.status_code} {response.reason_phrase}: {response.text}",
                status=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:  # JSONDecodeError and UnicodeDecodeError
            raise FigmaApiError(f"Invalid JSON from {path}: {e}", status=response.status_code) from e

        # Figma can answer 200 with an embedded error; "err": null means success
        if isinstance(payload, dict) and payload.get("err") is not None:
            raise FigmaApiError(str(payload["err"]), status=payload.get("status", response.status_code))

        return payload

    async def _send(self, request: httpx.Request) -> httpx.Response:
        """Send a request, retrying timeouts per the configured retry count."""
        async for attempt in AsyncRetrying(
            stop=stop_after_attempt(1 + self.retry),
            wait=wait_exponential(multiplier=1, min=1, max=10),
            retry=retry_if_exception_type(httpx.TimeoutException),
            reraise=True,
        ):
            with attempt:
                return await self.client.send(request)

    async def aclose(self) -> None:
        """Close HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> FigmaClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"FigmaClient(api_base={self.api_base!r})"
