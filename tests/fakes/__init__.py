"""Test doubles for figma-mcp."""
from .fake_figma import FakeClock, FakeFigmaClient

__all__ = ["FakeClock", "FakeFigmaClient"]
