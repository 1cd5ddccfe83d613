"""
Targeting context logger.

Provides logging interface for targeting context with automatic [target] prefix.
"""

from loguru import logger

CONTEXT_PREFIX = "[target]"


def _log_info(message: str) -> None:
    """Log info message with [target] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [target] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")
