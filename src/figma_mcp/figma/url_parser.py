"""
Figma URL parsing utilities.

Classifies URLs pasted by a user into file URLs (with an optional node id)
or unrecognized Figma URLs, and rejects anything that is not hosted on
figma.com.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal, Optional
from urllib.parse import urlsplit

from ..errors import InvalidUrlError

__all__ = ["FigmaUrlInfo", "parse_figma_url", "extract_file_id", "FIGMA_HOSTS"]

FIGMA_HOSTS = ("figma.com", "www.figma.com")

_FILE_SEGMENTS = ("file", "design")
_FILE_ID_RE = re.compile(r"^[A-Za-z0-9]+$")


@dataclass(frozen=True)
class FigmaUrlInfo:
    """
    Parsed components of a Figma URL.

    Attributes:
        url_type: "file" for file/design URLs, "unknown" for any other Figma URL
        original_url: Original URL string, unchanged
        file_id: File key (file URLs only)
        node_id: Raw ``node-id`` query value, not percent-decoded (file URLs only)
    """
    url_type: Literal["file", "unknown"]
    original_url: str
    file_id: Optional[str] = None
    node_id: Optional[str] = None

    @property
    def is_file(self) -> bool:
        return self.url_type == "file"

    def to_dict(self) -> dict:
        return {
            "url_type": self.url_type,
            "file_id": self.file_id,
            "node_id": self.node_id,
            "original_url": self.original_url,
        }


def parse_figma_url(url: str) -> FigmaUrlInfo:
    """
    Parse and classify a Figma URL.

    Accepts URLs of the form ``http(s)://[www.]figma.com/{file|design}/{id}/...``
    as file URLs. The ``node-id`` query parameter is captured verbatim, so
    ``1%3A2`` and ``201-95620`` come back exactly as written.

    Any other URL on a Figma host is classified as "unknown" rather than
    rejected; only non-Figma hosts are errors.

    Args:
        url: URL string to parse

    Returns:
        FigmaUrlInfo describing the URL

    Raises:
        InvalidUrlError: If the string is not an absolute URL or not a Figma URL

    Examples:
        >>> parse_figma_url("https://www.figma.com/design/ABC123/name?node-id=1%3A2")
        FigmaUrlInfo(url_type='file', original_url='...', file_id='ABC123', node_id='1%3A2')

        >>> parse_figma_url("https://www.figma.com/files/project/123").url_type
        'unknown'
    """
    if not url:
        raise InvalidUrlError("URL cannot be empty")

    try:
        parts = urlsplit(url.strip())
        host = parts.hostname
    except ValueError as e:
        raise InvalidUrlError(f"Invalid URL {url}: {e}") from e

    if not parts.scheme or not host:
        raise InvalidUrlError(f"Invalid URL, expected scheme://host/path: {url}")

    if host not in FIGMA_HOSTS:
        raise InvalidUrlError(f"Not a Figma URL: {url}")

    file_id = _match_file_id(parts.scheme, parts.path)
    if file_id is None:
        return FigmaUrlInfo(url_type="unknown", original_url=url)

    return FigmaUrlInfo(
        url_type="file",
        original_url=url,
        file_id=file_id,
        node_id=_raw_query_value(parts.query, "node-id"),
    )


def extract_file_id(url: str) -> str:
    """
    Return the file key of a Figma file URL.

    Raises:
        InvalidUrlError: If the URL is not a Figma URL or not a file URL
    """
    info = parse_figma_url(url)
    if not info.is_file:
        raise InvalidUrlError(f"URL is not a file URL: {url}")
    return info.file_id


def _match_file_id(scheme: str, path: str) -> Optional[str]:
    """Match ``/{file|design}/{alphanumeric id}[/...]`` and return the id."""
    if scheme.lower() not in ("http", "https"):
        return None

    segments = path.split("/")[1:]
    if len(segments) < 2 or segments[0] not in _FILE_SEGMENTS:
        return None

    if not _FILE_ID_RE.match(segments[1]):
        return None

    return segments[1]


def _raw_query_value(query: str, key: str) -> Optional[str]:
    """Find a query parameter without percent-decoding its value."""
    for pair in query.split("&"):
        name, sep, value = pair.partition("=")
        if sep and name == key and value:
            return value
    return None
