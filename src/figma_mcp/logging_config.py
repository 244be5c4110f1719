"""Logging configuration for figma-mcp.

Logs go to stderr so they never interleave with protocol messages on stdout.
"""

import logging
import sys
from typing import Optional, TextIO

LOGGER_NAME = "figma_mcp"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-20s | %(message)s"


def setup_logging(level: int = logging.WARNING, stream: Optional[TextIO] = None) -> logging.Logger:
    """Set up package logging on a stream handler.

    Args:
        level: Logging level for the figma_mcp logger
        stream: Target stream (default: sys.stderr)

    Returns:
        Configured package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Remove any existing handlers so repeated setup does not duplicate lines
    logger.handlers.clear()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    logger.addHandler(handler)

    logger.propagate = False
    return logger
