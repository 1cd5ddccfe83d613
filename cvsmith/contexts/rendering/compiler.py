"""
LaTeX Compilation Module

Compiles rendered LaTeX to PDF inside a sandboxed toolchain (a Docker
container by default) with a bounded timeout and two passes.

Each compilation runs in its own working directory named
resume_{timestamp}_{hex8} under the temp root, so concurrent jobs never
collide. The produced PDF is the success signal; the compiler's exit code is
not. On success the PDF is copied to the output directory and the working
directory removed; on failure the working directory is kept for inspection.
"""

import os
import re
import secrets
import shutil
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from dotenv import load_dotenv
from omegaconf import DictConfig

from cvsmith.contexts.rendering.exceptions import (
    FATAL_STOP,
    MATH_MODE,
    MISSING_FILE,
    SANDBOX_UNAVAILABLE,
    UNDEFINED_COMMAND,
    UNKNOWN,
    CompilationError,
    CompilationTimeoutError,
    SandboxUnavailableError,
)
from cvsmith.contexts.rendering.logger import (
    _log_debug,
    _log_info,
    _log_warning,
    log_compilation_result,
    log_compilation_start,
)
from cvsmith.contexts.rendering.sanitizer import find_dangerous_commands, sanitize_latex
from cvsmith.utils.config import load_generation_config
from cvsmith.utils.pdf_processing import page_count
from cvsmith.utils.timestamp import now

load_dotenv()

LATEX_COMPILER = os.getenv("LATEX_COMPILER", "pdflatex")
LATEX_CONTAINER_NAME = os.getenv("LATEX_CONTAINER_NAME", "cvsmith-latex")
LATEX_CONTAINER_MOUNT = os.getenv("LATEX_CONTAINER_MOUNT", "/latex-temp")
LATEX_TEMP_DIR = Path(os.getenv("LATEX_TEMP_DIR", "latex-temp"))
RESUME_OUTPUT_DIR = Path(os.getenv("RESUME_OUTPUT_DIR", "uploads/resumes"))
LATEX_TIMEOUT = os.getenv("LATEX_TIMEOUT")

MAX_NAME_PART_LENGTH = 50
GENERIC_DETAIL_LENGTH = 200

# Builds the argv for one compiler pass from (tex_file, work_dir)
CommandBuilder = Callable[[Path, Path], List[str]]

# (pattern, category, user message); first match wins
ERROR_TRANSLATIONS: List[Tuple[str, str, Optional[str]]] = [
    (r"No such container|Cannot connect to the Docker daemon|is not running", SANDBOX_UNAVAILABLE, None),
    (
        r"Undefined control sequence",
        UNDEFINED_COMMAND,
        "LaTeX compilation failed: Invalid LaTeX command detected. "
        "Please check your template or contact support.",
    ),
    (
        r"Missing \$ inserted",
        MATH_MODE,
        "LaTeX compilation failed: Mathematical expression formatting error. "
        "Please check special characters in your content.",
    ),
    (
        r"File not found|File `[^']*' not found",
        MISSING_FILE,
        "LaTeX compilation failed: Required template file is missing. "
        "Please try a different template.",
    ),
    (
        r"Emergency stop",
        FATAL_STOP,
        "LaTeX compilation failed: Critical error in template. "
        "Please try a different template or contact support.",
    ),
]


@dataclass
class CompilationResult:
    """
    Result of LaTeX compilation.

    Attributes:
        success: Whether a PDF was produced
        pdf_path: Path to generated PDF (None if failed)
        file_name: Permanent artifact name
        work_dir: Working directory used for the compilation
        stdout: Standard output from all passes (bounded)
        stderr: Standard error from all passes (bounded)
        errors: List of parsed LaTeX errors
        warnings: List of parsed LaTeX warnings
        page_count: Number of pages in generated PDF (None if not available)
    """

    success: bool
    pdf_path: Optional[Path] = None
    file_name: str = ""
    work_dir: Optional[Path] = None
    stdout: str = ""
    stderr: str = ""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    page_count: Optional[int] = None


def _parse_latex_log(log_content: str) -> tuple[List[str], List[str]]:
    """
    Parse LaTeX log file for errors and warnings.

    Args:
        log_content: Content of the .log file

    Returns:
        Tuple of (errors, warnings)
    """
    errors = []
    warnings = []

    # LaTeX error pattern: "! Error message"
    error_pattern = re.compile(r"^! (.+)$", re.MULTILINE)
    for match in error_pattern.finditer(log_content):
        errors.append(match.group(1).strip())

    # Error lines that don't start with "!"
    for pattern in (r"File ended while scanning use of", r"Emergency stop"):
        match = re.search(rf"({pattern}.*?)$", log_content, re.MULTILINE)
        if match and match.group(1) not in errors:
            errors.append(match.group(1))

    warning_patterns = [
        r"LaTeX Warning: (.+)",
        r"Package \w+ Warning: (.+)",
        r"Overfull \\hbox \((.+)\)",
        r"Underfull \\hbox \((.+)\)",
    ]
    for pattern in warning_patterns:
        for match in re.finditer(pattern, log_content, re.MULTILINE):
            warnings.append(match.group(1).strip())

    return errors, warnings


def translate_compiler_error(text: str) -> Tuple[str, str]:
    """
    Map raw compiler output to (category, user-facing message).

    Examples:
        >>> translate_compiler_error("! Undefined control sequence.")[0]
        'undefined_command'
    """
    for pattern, category, message in ERROR_TRANSLATIONS:
        if re.search(pattern, text):
            if category == SANDBOX_UNAVAILABLE:
                return category, SandboxUnavailableError().user_message
            return category, message

    detail = " ".join(text.split())[:GENERIC_DETAIL_LENGTH] or "PDF file was not generated"
    return UNKNOWN, (
        f"LaTeX compilation failed: {detail}. "
        "Please try again or contact support if the issue persists."
    )


def sanitize_filename(name: str) -> str:
    """
    Restrict a name part to [A-Za-z0-9_-], collapsing underscores, at most 50 chars.

    Examples:
        >>> sanitize_filename("Acme Corp, Inc.")
        'Acme_Corp_Inc_'
    """
    cleaned = re.sub(r"[^a-zA-Z0-9\-_]", "_", name)
    cleaned = re.sub(r"_+", "_", cleaned)
    return cleaned[:MAX_NAME_PART_LENGTH]


def build_artifact_names(company: str, position: str) -> Tuple[str, str]:
    """
    Unique (artifact file name, working directory name) for one compilation.

    Returns:
        ("{Company}_{Position}_{timestamp}_{hex8}.pdf", "resume_{timestamp}_{hex8}")
    """
    timestamp = now()
    suffix = secrets.token_hex(4)
    company_part = sanitize_filename(company) or "Company"
    position_part = sanitize_filename(position) or "Position"
    file_name = f"{company_part}_{position_part}_{timestamp}_{suffix}.pdf"
    return file_name, f"resume_{timestamp}_{suffix}"


def docker_command(tex_file: Path, work_dir: Path) -> List[str]:
    """
    pdflatex inside the sandbox container.

    The temp root is mounted at LATEX_CONTAINER_MOUNT, so the working
    directory is addressed by name under the mount.
    """
    container_dir = f"{LATEX_CONTAINER_MOUNT.rstrip('/')}/{work_dir.name}"
    return [
        "docker",
        "exec",
        LATEX_CONTAINER_NAME,
        LATEX_COMPILER,
        "-interaction=nonstopmode",
        f"-output-directory={container_dir}",
        f"{container_dir}/{tex_file.name}",
    ]


def local_command(tex_file: Path, work_dir: Path) -> List[str]:
    """pdflatex from the host PATH (no container)."""
    return [
        LATEX_COMPILER,
        "-interaction=nonstopmode",
        "-file-line-error",
        f"-output-directory={work_dir}",
        tex_file.name,
    ]


def _bounded(text: str, limit: int) -> str:
    """Keep the tail of text within limit characters."""
    if len(text) <= limit:
        return text
    return "[... output truncated ...]\n" + text[-limit:]


def _read_tail(path: Path, limit: int) -> str:
    """Decode at most the last limit bytes of a captured output file."""
    size = path.stat().st_size
    with path.open("rb") as handle:
        if size > limit:
            handle.seek(size - limit)
        data = handle.read()
    text = data.decode("utf-8", errors="replace")
    if size > limit:
        return "[... output truncated ...]\n" + text
    return text


def run_compiler(
    tex_file: Path,
    command_builder: CommandBuilder,
    num_passes: int,
    timeout_s: float,
    max_output_bytes: int,
) -> CompilationResult:
    """
    Run every compiler pass on tex_file in its own directory.

    All passes run regardless of exit code; success is decided by the PDF.

    Raises:
        CompilationTimeoutError: If any pass exceeds timeout_s
        SandboxUnavailableError: If the compiler executable cannot be started
    """
    work_dir = tex_file.parent
    all_stdout = []
    all_stderr = []

    # First pass writes .aux, second resolves references
    for pass_number in range(1, num_passes + 1):
        cmd = command_builder(tex_file, work_dir)
        # Output goes to files in work_dir; only the bounded tail is read back
        stdout_file = work_dir / f"{tex_file.stem}.pass{pass_number}.stdout"
        stderr_file = work_dir / f"{tex_file.stem}.pass{pass_number}.stderr"
        try:
            with stdout_file.open("wb") as out, stderr_file.open("wb") as err:
                result = subprocess.run(cmd, cwd=work_dir, stdout=out, stderr=err, timeout=timeout_s)
        except subprocess.TimeoutExpired as e:
            raise CompilationTimeoutError(timeout_s, temp_dir=work_dir) from e
        except FileNotFoundError as e:
            raise SandboxUnavailableError(str(e), temp_dir=work_dir) from e

        all_stdout.append(_read_tail(stdout_file, max_output_bytes))
        all_stderr.append(_read_tail(stderr_file, max_output_bytes))
        _log_debug(f"  Pass {pass_number}/{num_passes}: exit code {result.returncode}")

    errors: List[str] = []
    warnings: List[str] = []
    log_file = work_dir / f"{tex_file.stem}.log"
    if log_file.exists():
        # pdflatex writes log files in latin-1 encoding (font metadata contains non-UTF-8)
        errors, warnings = _parse_latex_log(log_file.read_text(encoding="latin-1"))

    pdf_path = work_dir / f"{tex_file.stem}.pdf"
    success = pdf_path.exists()
    if not success and not errors:
        errors.append("PDF file was not generated")

    return CompilationResult(
        success=success,
        pdf_path=pdf_path if success else None,
        work_dir=work_dir,
        stdout=_bounded("\n".join(all_stdout), max_output_bytes),
        stderr=_bounded("\n".join(all_stderr), max_output_bytes),
        errors=errors,
        warnings=warnings,
    )


class DocumentCompiler:
    """
    Sandboxed LaTeX-to-PDF compiler.

    Attributes:
        temp_root: Parent of the per-compilation working directories
        output_dir: Permanent location for produced PDFs
        timeout_s: Per-pass time bound
        num_passes: Compiler passes per document
        max_output_bytes: Bound on retained compiler output
        command_builder: Builds the argv for one pass
    """

    def __init__(
        self,
        temp_root: Optional[Path] = None,
        output_dir: Optional[Path] = None,
        timeout_s: Optional[float] = None,
        command_builder: CommandBuilder = docker_command,
        config: Optional[DictConfig] = None,
    ):
        settings = (config or load_generation_config()).compiler

        self.temp_root = Path(temp_root or LATEX_TEMP_DIR).resolve()
        self.output_dir = Path(output_dir or RESUME_OUTPUT_DIR).resolve()
        if timeout_s is None:
            timeout_s = float(LATEX_TIMEOUT) if LATEX_TIMEOUT else float(settings.timeout_s)
        self.timeout_s = timeout_s
        self.num_passes = int(settings.num_passes)
        self.max_output_bytes = int(settings.max_output_bytes)
        self.command_builder = command_builder

    def compile(self, latex_source: str, company: str, position: str) -> CompilationResult:
        """
        Compile rendered LaTeX into a permanent PDF.

        Args:
            latex_source: Rendered document (denylisted commands are stripped here)
            company: Target company, used in the artifact name
            position: Target position, used in the artifact name

        Returns:
            CompilationResult with pdf_path in output_dir

        Raises:
            CompilationTimeoutError: If a pass exceeds the time bound
            SandboxUnavailableError: If the compiler runtime is unreachable
            CompilationError: If no PDF was produced
        """
        self.temp_root.mkdir(parents=True, exist_ok=True)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        file_name, base_name = build_artifact_names(company, position)
        work_dir = self.temp_root / base_name
        work_dir.mkdir(parents=True)

        stripped = find_dangerous_commands(latex_source)
        if stripped:
            _log_warning(f"Stripped {len(stripped)} denylisted commands: {sorted(set(stripped))}")

        tex_file = work_dir / f"{base_name}.tex"
        tex_file.write_text(sanitize_latex(latex_source), encoding="utf-8")

        log_compilation_start(file_name, tex_file, self.num_passes, work_dir)
        start_time = time.time()

        result = run_compiler(
            tex_file,
            command_builder=self.command_builder,
            num_passes=self.num_passes,
            timeout_s=self.timeout_s,
            max_output_bytes=self.max_output_bytes,
        )
        result.file_name = file_name

        log_compilation_result(file_name, result, time.time() - start_time)

        if not result.success:
            _log_debug(f"Keeping working directory for inspection: {work_dir}")
            output = "\n".join([*result.errors, result.stdout, result.stderr])
            category, user_message = translate_compiler_error(output)
            if category == SANDBOX_UNAVAILABLE:
                raise SandboxUnavailableError(result.stderr.strip()[:GENERIC_DETAIL_LENGTH], temp_dir=work_dir)
            raise CompilationError(
                category=category,
                user_message=user_message,
                temp_dir=work_dir,
                log_excerpt=result.errors[0] if result.errors else None,
            )

        final_pdf = self.output_dir / file_name
        shutil.copy2(result.pdf_path, final_pdf)
        result.page_count = page_count(final_pdf)
        result.pdf_path = final_pdf

        shutil.rmtree(work_dir, ignore_errors=True)
        _log_info(f"PDF saved to: {final_pdf}")
        return result
