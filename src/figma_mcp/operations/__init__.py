"""
Operations package - MCP dispatch layer between the host and the Figma core.

This package provides the FigmaOperations facade that routes tool and
resource requests, centralizes error mapping, and handles output formatting.
"""
from .facade import FigmaOperations, OpsConfig, TOOLS
from .mappers import error_code_for, protocol_error_for, run_tool

__all__ = ["FigmaOperations", "OpsConfig", "TOOLS", "error_code_for", "protocol_error_for", "run_tool"]
