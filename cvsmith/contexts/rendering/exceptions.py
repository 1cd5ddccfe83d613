"""Custom exceptions for rendering context."""

from pathlib import Path
from typing import Optional

# Error categories reported to users
UNDEFINED_COMMAND = "undefined_command"
MATH_MODE = "math_mode"
MISSING_FILE = "missing_file"
FATAL_STOP = "fatal_stop"
SANDBOX_UNAVAILABLE = "sandbox_unavailable"
TIMEOUT = "timeout"
UNKNOWN = "unknown"


class CompilationError(Exception):
    """
    Exception raised when a document fails to compile.

    Attributes:
        category: Error category (see module constants)
        user_message: Short human-readable explanation, safe to show users
        temp_dir: Working directory kept for postmortem inspection
        log_excerpt: First compiler error line, if one was found
    """

    def __init__(
        self,
        category: str,
        user_message: str,
        temp_dir: Optional[Path] = None,
        log_excerpt: Optional[str] = None,
    ):
        self.category = category
        self.user_message = user_message
        self.temp_dir = temp_dir
        self.log_excerpt = log_excerpt

        # Build enhanced error message
        parts = [user_message]

        if temp_dir:
            parts.append(f"\nWorking directory (kept): {temp_dir}")

        if log_excerpt:
            parts.append(f"Compiler error: {log_excerpt}")

        super().__init__("\n".join(parts))


class CompilationTimeoutError(CompilationError):
    """Compilation exceeded its time bound."""

    def __init__(self, timeout_s: float, temp_dir: Optional[Path] = None):
        self.timeout_s = timeout_s
        super().__init__(
            category=TIMEOUT,
            user_message=(
                f"LaTeX compilation timed out after {timeout_s:g} seconds. "
                "Please simplify your resume or try a different template."
            ),
            temp_dir=temp_dir,
        )


class SandboxUnavailableError(CompilationError):
    """The compiler runtime itself could not be reached."""

    def __init__(self, detail: str = "", temp_dir: Optional[Path] = None):
        super().__init__(
            category=SANDBOX_UNAVAILABLE,
            user_message=(
                "LaTeX compilation service is not available. "
                "Please ensure Docker is running and the LaTeX container is started."
            ),
            temp_dir=temp_dir,
            log_excerpt=detail or None,
        )
