"""Root pytest configuration for figma-mcp tests."""
import pytest

from figma_mcp.figma.image_cache import ImageCache
from figma_mcp.operations import FigmaOperations, OpsConfig
from figma_mcp.settings import Settings

from .fakes.fake_figma import FakeClock, FakeFigmaClient


# Set up test environment variables
@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Automatically set up a predictable environment for every test."""
    monkeypatch.setenv("FIGMA_TOKEN", "test-figma-token-123456")
    for key in ("FIGMA_API_BASE", "FIGMA_HTTP_TIMEOUT", "FIGMA_HTTP_RETRY",
                "FIGMA_URL_TTL", "FIGMA_LOCK_TIMEOUT", "FIGMA_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


# Standardized test fixtures
@pytest.fixture
def settings():
    """Standard test settings."""
    return Settings(figma_token="test-figma-token-123456", api_base="https://api.figma.test/v1")


@pytest.fixture
def clock():
    """Manually advanced clock starting at a fixed epoch time."""
    return FakeClock(start=1_700_000_000.0)


@pytest.fixture
def cache(clock):
    """Image cache driven by the fake clock."""
    return ImageCache(clock=clock, lock_timeout_s=0.5)


@pytest.fixture
def fake_client():
    """In-memory Figma API gateway."""
    return FakeFigmaClient()


@pytest.fixture
def operations(fake_client, cache):
    """Operations facade wired to the fake client and fake-clock cache."""
    return FigmaOperations(fake_client, cache, OpsConfig())
