"""Figma core: URL parsing, API client and exported image cache."""
from .client import FigmaClient, FigmaGateway
from .image_cache import ImageCache, ImageEntry
from .url_parser import FigmaUrlInfo, extract_file_id, parse_figma_url

__all__ = [
    "FigmaClient",
    "FigmaGateway",
    "ImageCache",
    "ImageEntry",
    "FigmaUrlInfo",
    "extract_file_id",
    "parse_figma_url",
]
