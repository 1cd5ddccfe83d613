"""
Rendering Context

Responsibilities:
- Strips file-access commands from rendered LaTeX
- Compiles LaTeX to PDF in a sandboxed toolchain with a time bound
- Manages per-compilation working directories and output files
- Translates compiler failures into user-facing categories

Owns: LaTeX compilation, PDF generation, output management
Never: Modifies template content beyond the command denylist
"""

from cvsmith.contexts.rendering.compiler import (
    CompilationResult,
    DocumentCompiler,
    docker_command,
    local_command,
    translate_compiler_error,
)
from cvsmith.contexts.rendering.exceptions import (
    CompilationError,
    CompilationTimeoutError,
    SandboxUnavailableError,
)
from cvsmith.contexts.rendering.sanitizer import sanitize_latex

__all__ = [
    "CompilationError",
    "CompilationResult",
    "CompilationTimeoutError",
    "DocumentCompiler",
    "SandboxUnavailableError",
    "docker_command",
    "local_command",
    "sanitize_latex",
    "translate_compiler_error",
]
