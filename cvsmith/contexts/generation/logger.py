"""
Generation context logger.

Provides logging interface for generation context with automatic [generate] prefix.
"""

from pathlib import Path

from loguru import logger

from cvsmith.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[generate]"


def setup_generation_logger(log_dir: Path, resume_id: str = "") -> Path:
    """
    Setup logger for a generation session.

    Args:
        log_dir: Directory for this generation session
        resume_id: Resume being generated, recorded in the provenance header

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="generate",
        log_dir=log_dir,
        extra_provenance={"Resume": resume_id} if resume_id else None,
    )


# Wrapper functions with automatic [generate] prefix


def _log_info(message: str) -> None:
    """Log info message with [generate] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [generate] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [generate] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [generate] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [generate] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_stage(resume_id: str, stage: str, progress: int) -> None:
    """Log a pipeline checkpoint."""
    _log_info(f"{resume_id}: {stage} ({progress}%)")
