"""
Data models for MCP tool requests and protocol results.

Request models validate tool arguments and double as the source of each
tool's JSON input schema. Result models mirror the shapes an MCP host
expects for tool calls, resource listings and resource reads.
"""
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ToolRequest(BaseModel):
    """Base for tool argument models; unknown arguments are rejected."""
    model_config = ConfigDict(extra="forbid")


class EmptyRequest(ToolRequest):
    """Arguments for tools that take none."""


class ParseUrlRequest(ToolRequest):
    url: str = Field(..., description="The Figma URL to parse (file or design URL)")


class GetFileRequest(ToolRequest):
    file_key: str = Field(..., min_length=1,
                          description="The Figma file key (extract from URL using parse_figma_url)")
    depth: Optional[int] = Field(
        default=None, ge=0,
        description="Depth to traverse into the document tree (default: 1). "
                    "Use 1 for pages only, 2 for pages + top-level objects, etc.",
    )


class GetFileNodesRequest(ToolRequest):
    file_key: str = Field(..., min_length=1,
                          description="The Figma file key (extract from URL using parse_figma_url)")
    node_ids: str = Field(..., description="Comma-separated list of node IDs to fetch")
    depth: Optional[int] = Field(
        default=None, ge=0,
        description="Depth to traverse from each node (default: 1). "
                    "Use 1 for direct children only, 2 for children + grandchildren, etc.",
    )


class ExportImageRequest(ToolRequest):
    file_key: str = Field(..., min_length=1,
                          description="The Figma file key (extract from URL using parse_figma_url)")
    node_ids: str = Field(..., description="Comma-separated node IDs to export")
    format: Optional[str] = Field(default=None, description="Export format: png, jpg, svg, OR pdf")
    scale: Optional[float] = Field(default=None, gt=0, le=4,
                                   description="Export scale factor (1.0, 2.0, 4.0)")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v):
        """Reject blank formats; case is preserved."""
        if v is not None and not v.strip():
            raise ValueError("format cannot be blank")
        return v.strip() if v is not None else v


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """Result of a tool call; tool failures are results, not exceptions."""
    content: List[TextContent]
    is_error: bool = False

    @classmethod
    def success(cls, text: str) -> ToolResult:
        return cls(content=[TextContent(text=text)])

    @classmethod
    def error(cls, text: str) -> ToolResult:
        return cls(content=[TextContent(text=text)], is_error=True)

    @property
    def text(self) -> str:
        return "\n".join(c.text for c in self.content)


class ResourceInfo(BaseModel):
    """Listing entry for one exported image."""
    uri: str
    name: str
    description: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[int] = Field(default=None, description="Cached byte length, if downloaded")


class BlobResourceContents(BaseModel):
    """Binary resource payload, base64 encoded."""
    uri: str
    mime_type: Optional[str] = None
    blob: str


class ToolInfo(BaseModel):
    name: str
    description: str
    input_schema: Dict[str, Any]


class ServerInfo(BaseModel):
    name: str
    version: str
    instructions: str
    capabilities: List[str] = Field(default_factory=lambda: ["tools", "resources"])
