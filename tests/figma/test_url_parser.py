"""
Tests for Figma URL parsing.

Covers file and design URLs, verbatim node ids, the split between
non-Figma hosts (errors) and unrecognized Figma paths (unknown), and
extract_file_id.
"""
from __future__ import annotations

import pytest

from figma_mcp.errors import InvalidUrlError
from figma_mcp.figma.url_parser import FigmaUrlInfo, extract_file_id, parse_figma_url


class TestParseFileUrls:
    """File and design URLs are classified as files."""

    def test_file_url_basic(self):
        url = "https://www.figma.com/file/ABC123/my-design"
        result = parse_figma_url(url)

        assert result == FigmaUrlInfo(url_type="file", original_url=url, file_id="ABC123", node_id=None)

    def test_design_url_with_encoded_node_id(self):
        """Node ids are kept exactly as written, not percent-decoded."""
        result = parse_figma_url("https://www.figma.com/design/ABC123/name?node-id=1%3A2")

        assert result.url_type == "file"
        assert result.file_id == "ABC123"
        assert result.node_id == "1%3A2"

    def test_design_url_with_hyphenated_node_id(self):
        result = parse_figma_url("https://www.figma.com/design/ABC123/my-design?node-id=201-95620")

        assert result.file_id == "ABC123"
        assert result.node_id == "201-95620"

    def test_additional_query_params_ignored(self):
        result = parse_figma_url(
            "https://www.figma.com/file/XYZ789/another-design?node-id=3%3A4&other=param"
        )

        assert result.file_id == "XYZ789"
        assert result.node_id == "3%3A4"

    def test_node_id_after_other_params(self):
        result = parse_figma_url("https://www.figma.com/design/XYZ789/x?t=abc&node-id=5-6")

        assert result.node_id == "5-6"

    def test_empty_node_id_is_none(self):
        result = parse_figma_url("https://www.figma.com/design/XYZ789/x?node-id=")

        assert result.url_type == "file"
        assert result.node_id is None

    def test_without_www(self):
        result = parse_figma_url("https://figma.com/file/ABC123/my-design")

        assert result.file_id == "ABC123"

    def test_http_scheme(self):
        result = parse_figma_url("http://www.figma.com/file/ABC123/my-design")

        assert result.file_id == "ABC123"

    def test_file_url_without_name_segment(self):
        result = parse_figma_url("https://www.figma.com/design/ABC123")

        assert result.file_id == "ABC123"

    def test_complex_path(self):
        result = parse_figma_url(
            "https://www.figma.com/file/ABC123/My-Design-Project/duplicate?node-id=1%3A2"
        )

        assert result.file_id == "ABC123"
        assert result.node_id == "1%3A2"

    def test_mixed_case_alphanumeric_file_id(self):
        result = parse_figma_url("https://www.figma.com/design/mDRPCttt3pWEmznGjW8JPg/Visual-design-RET")

        assert result.file_id == "mDRPCttt3pWEmznGjW8JPg"

    def test_original_url_preserved(self):
        url = "https://www.figma.com/file/ABC123/my-design?node-id=1%3A2"

        assert parse_figma_url(url).original_url == url


class TestParseUnknownUrls:
    """Figma-hosted URLs with other shapes are unknown, not errors."""

    @pytest.mark.parametrize("url", [
        "https://www.figma.com/files/project/123",
        "https://www.figma.com/files/project/123456",
        "https://www.figma.com/files/team/789012",
        "https://www.figma.com/unknown/path",
        "https://www.figma.com/",
        "https://www.figma.com/file/",
        "https://www.figma.com/file/ABC-123/name",
    ])
    def test_unknown_shapes(self, url):
        result = parse_figma_url(url)

        assert result.url_type == "unknown"
        assert result.file_id is None
        assert result.node_id is None
        assert result.original_url == url

    def test_non_http_scheme_on_figma_host_is_unknown(self):
        result = parse_figma_url("ftp://www.figma.com/file/ABC123/name")

        assert result.url_type == "unknown"


class TestParseInvalidUrls:
    """Non-Figma hosts and malformed strings are errors."""

    def test_non_figma_host(self):
        with pytest.raises(InvalidUrlError, match="Not a Figma URL"):
            parse_figma_url("https://example.com")

    def test_lookalike_host(self):
        with pytest.raises(InvalidUrlError, match="Not a Figma URL"):
            parse_figma_url("https://figma.com.evil.test/file/ABC123/x")

    def test_subdomain_other_than_www(self):
        with pytest.raises(InvalidUrlError, match="Not a Figma URL"):
            parse_figma_url("https://api.figma.com/file/ABC123/x")

    def test_not_a_url(self):
        with pytest.raises(InvalidUrlError):
            parse_figma_url("not a url")

    def test_empty(self):
        with pytest.raises(InvalidUrlError, match="URL cannot be empty"):
            parse_figma_url("")


class TestExtractFileId:

    def test_file_url(self):
        assert extract_file_id("https://www.figma.com/file/ABC123/my-design") == "ABC123"

    def test_design_url(self):
        assert extract_file_id("https://www.figma.com/design/mDRPCttt3pWEmznGjW8JPg/x") == "mDRPCttt3pWEmznGjW8JPg"

    @pytest.mark.parametrize("url", [
        "https://www.figma.com/files/project/123456",
        "https://www.figma.com/files/team/789012",
    ])
    def test_non_file_url_fails(self, url):
        with pytest.raises(InvalidUrlError, match="not a file URL"):
            extract_file_id(url)

    def test_non_figma_url_fails(self):
        with pytest.raises(InvalidUrlError, match="Not a Figma URL"):
            extract_file_id("https://example.com/file/ABC123")


def test_to_dict():
    info = parse_figma_url("https://www.figma.com/design/ABC123/name?node-id=1%3A2")

    assert info.to_dict() == {
        "url_type": "file",
        "file_id": "ABC123",
        "node_id": "1%3A2",
        "original_url": "https://www.figma.com/design/ABC123/name?node-id=1%3A2",
    }
