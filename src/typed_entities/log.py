"""Logging setup.

The library logs through loguru and never adds sinks on import. Applications
call ``configure_logging`` to route its messages to stderr at a chosen level.
"""

from __future__ import annotations

import sys

from loguru import logger

LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> - {message}"


def configure_logging(level: str = "WARNING") -> int:
    """Replace loguru's sinks with a single stderr sink.

    Args:
        level: Minimum level to emit.

    Returns:
        The id of the added sink.
    """
    logger.remove()
    return logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
