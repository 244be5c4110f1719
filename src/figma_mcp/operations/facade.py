"""
Operations Facade - MCP request dispatcher.

Provides the protocol-facing surface of the server: one coroutine per tool,
the resource list/read handlers, and name-based dispatch for hosts that
route tool calls by string. Transport and framing are left to the host.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type

from pydantic import ValidationError

from .. import __version__
from ..errors import FigmaError, ProtocolError, ResourceExpiredError, ResourceNotFoundError
from ..figma.client import FigmaGateway
from ..figma.image_cache import ImageCache, ImageEntry
from ..figma.url_parser import parse_figma_url
from ..models import (
    BlobResourceContents, EmptyRequest, ExportImageRequest, GetFileNodesRequest,
    GetFileRequest, ParseUrlRequest, ResourceInfo, ServerInfo, ToolInfo, ToolRequest,
    ToolResult,
)
from .formatters import (
    HELP_TEXT, SERVER_INSTRUCTIONS, blob_contents_for, resource_info_for,
)
from .mappers import INVALID_PARAMS, protocol_error_for, run_tool

logger = logging.getLogger(__name__)

SERVER_NAME = "figma-mcp"

EXPIRED_MESSAGE = "Figma URL has expired. Please re-export the image."

# name -> (argument model, description)
TOOLS: Dict[str, Tuple[Type[ToolRequest], str]] = {
    "parse_figma_url": (ParseUrlRequest,
                        "Parse a Figma URL to extract IDs and determine the URL type"),
    "get_file": (GetFileRequest,
                 "Get file contents from a Figma file using file key"),
    "get_file_nodes": (GetFileNodesRequest,
                       "Get specific nodes from a file using file key"),
    "export_images": (ExportImageRequest,
                      "Export images from a Figma file using file key"),
    "get_me": (EmptyRequest,
               "Get current user information (useful for testing authentication)"),
    "help": (EmptyRequest,
             "Help: How to use this Figma file MCP server"),
}


def split_node_ids(node_ids: str) -> List[str]:
    """Split a comma-separated id list, trimming whitespace around each id."""
    return [node_id.strip() for node_id in node_ids.split(",")]


@dataclass(frozen=True)
class OpsConfig:
    """
    Defaults applied by the dispatcher when a tool call omits them.

    The API client never defaults these; omitted values are omitted from
    the HTTP request.
    """
    default_depth: int = 1
    default_format: str = "png"
    default_scale: float = 1.0


class FigmaOperations:
    """
    Application service facade for MCP tool and resource requests.

    Design Notes: Lazy materialization

    Exported images enter the cache with only a short-lived URL. Reading a
    resource moves the entry to one of two terminal states:

    - Materialized: bytes were downloaded once and are served from memory
    - Expired: the URL aged past its TTL before anyone read it

    The cache lock is never held during the download, so two concurrent
    first reads of the same entry may both download; the later update wins.
    """

    def __init__(self, client: FigmaGateway, cache: ImageCache,
                 config: Optional[OpsConfig] = None):
        """
        Initialize Operations facade.

        Args:
            client: Figma API gateway
            cache: Image cache shared by all requests
            config: Defaults for omitted tool arguments
        """
        self.client = client
        self.cache = cache
        self.cfg = config or OpsConfig()

    # Tools

    async def parse_figma_url(self, url: str) -> ToolResult:
        async def call():
            return parse_figma_url(url).to_dict()
        return await run_tool("Error parsing URL", call)

    async def get_file(self, file_key: str, depth: Optional[int] = None) -> ToolResult:
        depth = depth if depth is not None else self.cfg.default_depth

        async def call():
            return await self.client.get_file(file_key, depth)
        return await run_tool("Error fetching file", call)

    async def get_file_nodes(self, file_key: str, node_ids: str,
                             depth: Optional[int] = None) -> ToolResult:
        ids = split_node_ids(node_ids)
        depth = depth if depth is not None else self.cfg.default_depth

        async def call():
            return await self.client.get_file_nodes(file_key, ids, depth)
        return await run_tool("Error fetching file nodes", call)

    async def export_images(self, file_key: str, node_ids: str,
                            format: Optional[str] = None,
                            scale: Optional[float] = None) -> ToolResult:
        """
        Export nodes and register every returned URL as a resource.

        The scale is only sent to Figma when the caller gave one, but
        registration always records the effective scale. Registration is
        best effort: a failure is logged and the export result is still
        returned in full.
        """
        ids = split_node_ids(node_ids)
        format = format or self.cfg.default_format
        effective_scale = scale if scale is not None else self.cfg.default_scale

        async def call():
            result = await self.client.export_images(file_key, ids, format, scale)
            self._register_exports(file_key, format, effective_scale, result)
            return result
        return await run_tool("Error exporting images", call)

    async def get_me(self) -> ToolResult:
        async def call():
            return await self.client.get_me()
        return await run_tool("Error fetching user info", call)

    async def help(self) -> ToolResult:
        return ToolResult.success(HELP_TEXT)

    # Resources

    async def list_resources(self) -> List[ResourceInfo]:
        """
        Describe every exported image in the cache.

        Raises:
            ProtocolError: If the cache cannot be read
        """
        try:
            entries = self.cache.list_all()
        except FigmaError as e:
            raise protocol_error_for(e, f"Failed to list resources: {e}") from e
        return [resource_info_for(uri, entry) for uri, entry in entries]

    async def read_resource(self, uri: str) -> BlobResourceContents:
        """
        Return the image bytes for ``uri``, downloading them on first read.

        Raises:
            ProtocolError: -32002 for unknown URIs, -32603 for expired URLs,
                download failures and cache failures
        """
        try:
            entry, data = await self._materialize(uri)
        except FigmaError as e:
            logger.error(f"Failed to read resource {uri}: {e}")
            raise protocol_error_for(e) from e
        return blob_contents_for(uri, entry, data)

    # Protocol surface

    def server_info(self) -> ServerInfo:
        return ServerInfo(name=SERVER_NAME, version=__version__, instructions=SERVER_INSTRUCTIONS)

    def list_tools(self) -> List[ToolInfo]:
        return [
            ToolInfo(name=name, description=description, input_schema=model.model_json_schema())
            for name, (model, description) in TOOLS.items()
        ]

    async def call_tool(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> ToolResult:
        """
        Validate ``arguments`` for tool ``name`` and run it.

        Raises:
            ProtocolError: INVALID_PARAMS for unknown tools or bad arguments
        """
        if name not in TOOLS:
            raise ProtocolError(INVALID_PARAMS, f"Unknown tool: {name}")

        model, _ = TOOLS[name]
        try:
            request = model.model_validate(dict(arguments or {}))
        except ValidationError as e:
            raise ProtocolError(INVALID_PARAMS, f"Invalid arguments for {name}: {e}") from e

        handler = getattr(self, name)
        return await handler(**request.model_dump())

    # Internals

    def _register_exports(self, file_key: str, format: str, scale: float,
                          result: Mapping[str, Any]) -> None:
        images = result.get("images") if isinstance(result, Mapping) else None
        if not isinstance(images, Mapping):
            return

        for node_id, url in images.items():
            if not isinstance(url, str):
                logger.debug(f"Skipping node {node_id} with no export URL")
                continue
            try:
                self.cache.register_export(file_key, node_id, format, scale, url)
            except FigmaError as e:
                logger.warning(f"Failed to cache export of node {node_id} in {file_key}: {e}")

    async def _materialize(self, uri: str) -> Tuple[ImageEntry, bytes]:
        entry = self.cache.get_entry(uri)
        if entry is None:
            raise ResourceNotFoundError(f"Resource not found: {uri}")

        if entry.cached_data is not None:
            logger.debug(f"Serving {uri} from cache")
            return entry, entry.cached_data

        if self.cache.is_expired(entry):
            raise ResourceExpiredError(EXPIRED_MESSAGE)

        # No lock is held across the download
        data = await self.client.download(entry.figma_url)
        logger.info(f"Downloaded {len(data)} bytes for {uri}")

        try:
            self.cache.update_cached_data(uri, data, expected_url=entry.figma_url)
        except FigmaError as e:
            logger.warning(f"Failed to cache downloaded bytes for {uri}: {e}")

        return entry, data
