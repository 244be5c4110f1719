"""
Tests for the Figma API client.

Uses httpx.MockTransport to check request construction (paths, query
parameters, headers) and response classification without network access.
"""
from __future__ import annotations

import json

import httpx
import pytest

from figma_mcp.errors import AuthError, DownloadError, FigmaApiError, NetworkError
from figma_mcp.figma.client import TOKEN_HEADER, FigmaClient

API_BASE = "https://api.figma.test/v1"


def make_client(handler, **kwargs) -> FigmaClient:
    return FigmaClient("test-token", api_base=API_BASE, transport=httpx.MockTransport(handler), **kwargs)


class Recorder:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, status_code: int = 200, payload=None, content: bytes = None):
        self.status_code = status_code
        self.payload = payload if payload is not None else {"ok": True}
        self.content = content
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


class TestClientCreation:

    def test_valid_token(self):
        client = FigmaClient("test-token")
        assert client.token == "test-token"
        assert client.client.headers[TOKEN_HEADER] == "test-token"

    @pytest.mark.parametrize("token", ["", "invalid\ntoken", "bad\rtoken", "töken"])
    def test_invalid_token_format(self, token):
        with pytest.raises(AuthError, match="Invalid token format"):
            FigmaClient(token)

    def test_from_settings(self, settings):
        client = FigmaClient.from_settings(settings)

        assert client.api_base == "https://api.figma.test/v1"
        assert client.token == settings.figma_token
        assert client.retry == settings.http_retry

    def test_repr_hides_token(self):
        assert "test-token" not in repr(FigmaClient("test-token"))


class TestRequestConstruction:

    @pytest.mark.asyncio
    async def test_get_file_without_depth(self):
        recorder = Recorder(payload={"name": "Doc"})
        client = make_client(recorder)

        result = await client.get_file("ABC123")

        assert result == {"name": "Doc"}
        assert recorder.last.method == "GET"
        assert recorder.last.url.path == "/v1/files/ABC123"
        assert "depth" not in recorder.last.url.params
        assert recorder.last.headers[TOKEN_HEADER] == "test-token"

    @pytest.mark.asyncio
    async def test_get_file_with_depth(self):
        recorder = Recorder()
        client = make_client(recorder)

        await client.get_file("ABC123", depth=2)

        assert recorder.last.url.params["depth"] == "2"

    @pytest.mark.asyncio
    async def test_get_file_nodes_joins_ids(self):
        recorder = Recorder()
        client = make_client(recorder)

        await client.get_file_nodes("ABC123", ["1:2", "3:4"], depth=1)

        assert recorder.last.url.path == "/v1/files/ABC123/nodes"
        assert recorder.last.url.params["ids"] == "1:2,3:4"
        assert recorder.last.url.params["depth"] == "1"

    @pytest.mark.asyncio
    async def test_get_file_nodes_without_depth(self):
        recorder = Recorder()
        client = make_client(recorder)

        await client.get_file_nodes("ABC123", ["1:2"])

        assert "depth" not in recorder.last.url.params

    @pytest.mark.asyncio
    async def test_export_images_without_scale(self):
        recorder = Recorder(payload={"err": None, "images": {"1:2": "https://cdn/x.png"}})
        client = make_client(recorder)

        result = await client.export_images("ABC123", ["1:2"], "png")

        assert result["images"] == {"1:2": "https://cdn/x.png"}
        assert recorder.last.url.path == "/v1/images/ABC123"
        assert recorder.last.url.params["ids"] == "1:2"
        assert recorder.last.url.params["format"] == "png"
        assert "scale" not in recorder.last.url.params

    @pytest.mark.asyncio
    async def test_export_images_with_scale(self):
        recorder = Recorder(payload={"err": None, "images": {}})
        client = make_client(recorder)

        await client.export_images("ABC123", ["1:2", "5:6"], "svg", scale=2.0)

        assert recorder.last.url.params["scale"] == "2"
        assert recorder.last.url.params["ids"] == "1:2,5:6"

    @pytest.mark.asyncio
    async def test_get_me(self):
        recorder = Recorder(payload={"id": "1", "handle": "me"})
        client = make_client(recorder)

        assert await client.get_me() == {"id": "1", "handle": "me"}
        assert recorder.last.url.path == "/v1/me"


class TestResponseClassification:

    @pytest.mark.asyncio
    async def test_non_2xx_raises_with_status_and_body(self):
        client = make_client(Recorder(status_code=403, content=b"Invalid token"))

        with pytest.raises(FigmaApiError) as exc_info:
            await client.get_me()

        assert exc_info.value.status == 403
        assert "HTTP 403" in str(exc_info.value)
        assert "Invalid token" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_embedded_err_field_raises(self):
        client = make_client(Recorder(payload={"status": 400, "err": "Invalid parameter: ids"}))

        with pytest.raises(FigmaApiError, match="Invalid parameter: ids") as exc_info:
            await client.export_images("ABC123", ["bogus"], "png")

        assert exc_info.value.status == 400

    @pytest.mark.asyncio
    async def test_null_err_field_is_success(self):
        client = make_client(Recorder(payload={"err": None, "images": {"1:2": None}}))

        result = await client.export_images("ABC123", ["1:2"], "png")

        assert result == {"err": None, "images": {"1:2": None}}

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self):
        client = make_client(Recorder(content=b"<html>oops</html>"))

        with pytest.raises(FigmaApiError, match="Invalid JSON"):
            await client.get_file("ABC123")

    @pytest.mark.asyncio
    async def test_undecodable_body_raises(self):
        client = make_client(Recorder(content=b'{"name": "\xff\xfe bad"}'))

        with pytest.raises(FigmaApiError, match="Invalid JSON") as exc_info:
            await client.get_file("ABC123")

        assert exc_info.value.status == 200

    @pytest.mark.asyncio
    async def test_transport_error_raises_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(NetworkError, match="connection refused"):
            await client.get_file("ABC123")

    @pytest.mark.asyncio
    async def test_timeout_without_retry_raises_network_error(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ReadTimeout("timed out", request=request)

        client = make_client(handler)

        with pytest.raises(NetworkError):
            await client.get_me()
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_timeout_is_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            if len(calls) == 1:
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200, json={"id": "1", "handle": "me"})

        client = make_client(handler, retry=1)

        assert await client.get_me() == {"id": "1", "handle": "me"}
        assert len(calls) == 2
        assert calls[1].url.path == "/v1/me"

    @pytest.mark.asyncio
    async def test_non_timeout_errors_are_not_retried(self):
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler, retry=2)

        with pytest.raises(NetworkError):
            await client.get_me()
        assert len(calls) == 1

    @pytest.mark.asyncio
    async def test_payload_passed_through_verbatim(self):
        payload = {"document": {"children": [{"id": "0:1", "type": "CANVAS"}]}, "version": "123"}
        client = make_client(Recorder(payload=payload))

        assert await client.get_file("ABC123", depth=1) == payload


class TestDownload:

    @pytest.mark.asyncio
    async def test_download_returns_bytes_without_token(self):
        recorder = Recorder(content=b"\x89PNG-data")
        client = make_client(recorder)

        data = await client.download("https://cdn.figma.test/images/abc.png")

        assert data == b"\x89PNG-data"
        assert str(recorder.last.url) == "https://cdn.figma.test/images/abc.png"
        assert TOKEN_HEADER not in recorder.last.headers

    @pytest.mark.asyncio
    async def test_download_http_error(self):
        client = make_client(Recorder(status_code=403, content=b"AccessDenied"))

        with pytest.raises(DownloadError, match="HTTP 403"):
            await client.download("https://cdn.figma.test/images/abc.png")

    @pytest.mark.asyncio
    async def test_download_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        client = make_client(handler)

        with pytest.raises(DownloadError, match="Failed to download image"):
            await client.download("https://cdn.figma.test/images/abc.png")


@pytest.mark.asyncio
async def test_async_context_manager_closes_client():
    async with make_client(Recorder()) as client:
        await client.get_me()

    assert client.client.is_closed


@pytest.mark.asyncio
async def test_error_body_is_reported_as_text():
    """Non-2xx bodies are reported as raw text, not parsed."""
    body = json.dumps({"status": 404, "err": "Not found"}).encode()
    client = make_client(Recorder(status_code=404, content=body))

    with pytest.raises(FigmaApiError) as exc_info:
        await client.get_file("MISSING")

    assert exc_info.value.status == 404
    assert '"err": "Not found"' in str(exc_info.value)
