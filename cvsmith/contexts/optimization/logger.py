"""
Optimization context logger.

Provides logging interface for optimization context with automatic [optimize] prefix.
"""

from loguru import logger

CONTEXT_PREFIX = "[optimize]"


def _log_info(message: str) -> None:
    """Log info message with [optimize] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [optimize] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [optimize] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")
