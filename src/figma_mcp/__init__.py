"""
Figma MCP - Figma REST API access for MCP hosts.

Exposes Figma files, nodes and image exports as MCP tools, and exported
images as cached ``figma://`` resources.
"""
__version__ = "0.4.1"

from .errors import FigmaError, ProtocolError
from .settings import Settings, create_settings_from_env
from .figma.client import FigmaClient
from .figma.image_cache import ImageCache, ImageEntry
from .figma.url_parser import FigmaUrlInfo, extract_file_id, parse_figma_url
from .operations import FigmaOperations, OpsConfig
from .context import ServerContext

__all__ = [
    "__version__",
    "FigmaError",
    "ProtocolError",
    "Settings",
    "create_settings_from_env",
    "FigmaClient",
    "ImageCache",
    "ImageEntry",
    "FigmaUrlInfo",
    "parse_figma_url",
    "extract_file_id",
    "FigmaOperations",
    "OpsConfig",
    "ServerContext",
]
