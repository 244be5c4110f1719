"""
Protocol output formatting.

Centralizes how payloads, resource listings and usage text are rendered so
the facade stays focused on orchestration.
"""
from __future__ import annotations

import base64
import json
from typing import Any

from ..figma.image_cache import ImageCache, ImageEntry
from ..models import BlobResourceContents, ResourceInfo


def to_pretty_json(payload: Any) -> str:
    """Render a JSON-ready payload the way tool results present it."""
    try:
        return json.dumps(payload, indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        return f"Serialization error: {e}"


def format_scale(scale: float) -> str:
    """Render a scale factor without a trailing ``.0`` (2.0 -> "2")."""
    return f"{scale:g}"


def resource_info_for(uri: str, entry: ImageEntry) -> ResourceInfo:
    """Describe one cache entry for resource listings."""
    return ResourceInfo(
        uri=uri,
        name=f"Node {entry.node_id} Export",
        description=(
            f"Exported from Figma file {entry.file_key} as {entry.format} "
            f"({format_scale(entry.scale)}x scale)"
        ),
        mime_type=ImageCache.get_mime_type(entry.format),
        size=entry.size,
    )


def blob_contents_for(uri: str, entry: ImageEntry, data: bytes) -> BlobResourceContents:
    """Wrap downloaded image bytes as a base64 blob resource."""
    return BlobResourceContents(
        uri=uri,
        mime_type=ImageCache.get_mime_type(entry.format),
        blob=base64.b64encode(data).decode("ascii"),
    )


SERVER_INSTRUCTIONS = (
    "A Figma MCP server that provides tools to access Figma files and export images. "
    "Use 'help' tool for usage instructions."
)

HELP_TEXT = """
# Figma MCP Server Help

This MCP server provides tools to access and work with Figma files using file keys with depth control to manage response size.

## Workflow

1. First, use `parse_figma_url` to extract the file key from a Figma URL
2. Then use the file key with other tools to access file data
3. Use the depth parameter to control how much data is returned and avoid token limits
4. Navigate deeper into the file structure using recursive calls with specific node IDs

## Available Tools

### URL Parsing
- `parse_figma_url`: Parse any Figma URL to extract file key and node information

### File Operations (require file key from parse_figma_url)
- `get_file`: Get file structure using file key with depth control (default: 1)
- `get_file_nodes`: Get specific nodes using file key with depth control (default: 1)
- `export_images`: Export images from file using file key
- `get_me`: Test authentication and get user info

## Resources

After exporting images using the `export_images` tool, they are available as MCP resources.
You can:
- List all exported images using the resources API
- Access image data as base64-encoded blobs
- Resources are identified by URIs like: `figma://file/{file_key}/node/{node_id}.{format}`
  (scales other than 1 add a suffix: `figma://file/{file_key}/node/{node_id}@2x.{format}`)

Export URLs issued by Figma expire after one hour. Read a resource within that
window to keep its bytes cached; after that, export the image again.

## Depth Parameter

Both `get_file` and `get_file_nodes` support a depth parameter to limit response size:

- **depth=1** (default): For files: pages only. For nodes: direct children only
- **depth=2**: For files: pages + top-level objects. For nodes: children + grandchildren
- **depth=3+**: Deeper traversal (use carefully to avoid large responses)

## Supported URL Formats
- File: https://www.figma.com/file/FILE_ID/filename
- File with node: https://www.figma.com/file/FILE_ID/filename?node-id=1%3A2
- Design URL: https://www.figma.com/design/FILE_ID/filename

## Authentication
Set your Figma personal access token as an environment variable:
export FIGMA_TOKEN="your_figma_token_here"

Get your token from: https://www.figma.com/developers/api#access-tokens
"""
