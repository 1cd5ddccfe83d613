"""Unit tests for the sandboxed document compiler.

Compiler passes are simulated with small Python scripts run through
sys.executable, so no LaTeX installation is needed.
"""

import re
import sys
from pathlib import Path

import pytest

from cvsmith.contexts.rendering.compiler import (
    DocumentCompiler,
    build_artifact_names,
    docker_command,
    local_command,
    run_compiler,
    sanitize_filename,
    translate_compiler_error,
)
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

# Writes a PDF next to the .tex file, counts passes, then exits non-zero
PDF_THEN_FAIL = """
import sys
from pathlib import Path
tex = Path(sys.argv[1])
counter = Path(__file__).parent / "passes.txt"
counter.write_text(str(int(counter.read_text()) + 1 if counter.exists() else 1))
tex.with_suffix(".pdf").write_bytes(b"%PDF-1.4 fake")
sys.exit(1)
"""

# Writes a log with an undefined command error and no PDF
UNDEFINED_LOG = """
import sys
from pathlib import Path
tex = Path(sys.argv[1])
tex.with_suffix(".log").write_text("! Undefined control sequence.\\nl.5 \\\\foo\\n", encoding="latin-1")
sys.exit(1)
"""

SLEEPER = """
import time
time.sleep(10)
"""

# Prints far more than the retained output bound
NOISY = """
import sys
sys.stdout.write("x" * 100000 + "END")
sys.stderr.write("warning")
"""


def script_command(tmp_path: Path, source: str):
    script = tmp_path / "fake_compiler.py"
    script.write_text(source)

    def builder(tex_file: Path, work_dir: Path):
        return [sys.executable, str(script), tex_file.name]

    return builder


def make_compiler(tmp_path, source, timeout_s=10.0):
    return DocumentCompiler(
        temp_root=tmp_path / "latex-temp",
        output_dir=tmp_path / "out",
        timeout_s=timeout_s,
        command_builder=script_command(tmp_path, source),
    )


@pytest.mark.unit
def test_pdf_presence_is_success_despite_exit_code(tmp_path):
    """Test that a produced PDF wins over a non-zero exit code."""
    compiler = make_compiler(tmp_path, PDF_THEN_FAIL)

    result = compiler.compile(r"\documentclass{article}", "MomCorp", "Delivery Engineer")

    assert result.success
    assert result.pdf_path.parent == (tmp_path / "out").resolve()
    assert result.pdf_path.exists()
    assert result.pdf_path.name == result.file_name
    assert result.file_name.startswith("MomCorp_Delivery_Engineer_")


@pytest.mark.unit
def test_all_passes_run_and_work_dir_removed(tmp_path):
    """Test two passes per document and cleanup after success."""
    compiler = make_compiler(tmp_path, PDF_THEN_FAIL)

    result = compiler.compile("x", "A", "B")

    assert (tmp_path / "passes.txt").read_text() == "2"
    assert not result.work_dir.exists()


@pytest.mark.unit
def test_denylisted_commands_stripped_before_compiling(tmp_path):
    """Test that the written .tex file no longer carries file primitives."""
    compiler = make_compiler(tmp_path, UNDEFINED_LOG)

    with pytest.raises(CompilationError) as exc_info:
        compiler.compile(r"\input{/etc/passwd}", "A", "B")

    tex_files = list(exc_info.value.temp_dir.glob("*.tex"))
    assert tex_files[0].read_text(encoding="utf-8") == "{/etc/passwd}"


@pytest.mark.unit
def test_failure_is_translated_and_work_dir_kept(tmp_path):
    """Test category, message and kept directory on a failed compile."""
    compiler = make_compiler(tmp_path, UNDEFINED_LOG)

    with pytest.raises(CompilationError) as exc_info:
        compiler.compile("x", "A", "B")

    error = exc_info.value
    assert error.category == UNDEFINED_COMMAND
    assert "Invalid LaTeX command" in error.user_message
    assert error.log_excerpt == "Undefined control sequence."
    assert error.temp_dir.exists()
    assert not list((tmp_path / "out").glob("*.pdf"))


@pytest.mark.unit
def test_timeout_raises(tmp_path):
    """Test that a hung pass is killed and reported as a timeout."""
    compiler = make_compiler(tmp_path, SLEEPER, timeout_s=0.5)

    with pytest.raises(CompilationTimeoutError) as exc_info:
        compiler.compile("x", "A", "B")

    assert "timed out after 0.5 seconds" in exc_info.value.user_message
    assert exc_info.value.temp_dir.exists()


@pytest.mark.unit
def test_missing_compiler_binary(tmp_path):
    """Test that an unreachable toolchain is reported as unavailable."""
    compiler = DocumentCompiler(
        temp_root=tmp_path / "t",
        output_dir=tmp_path / "o",
        timeout_s=5,
        command_builder=lambda tex, work: ["definitely-not-a-latex-binary", tex.name],
    )

    with pytest.raises(SandboxUnavailableError) as exc_info:
        compiler.compile("x", "A", "B")

    assert exc_info.value.category == SANDBOX_UNAVAILABLE


@pytest.mark.unit
def test_concurrent_compilations_use_distinct_directories(tmp_path):
    """Test that repeated compiles never share a working directory or artifact."""
    compiler = make_compiler(tmp_path, PDF_THEN_FAIL)

    names = {compiler.compile("x", "A", "B").file_name for _ in range(3)}

    assert len(names) == 3


@pytest.mark.unit
@pytest.mark.parametrize(
    "output, category",
    [
        ("! Undefined control sequence.", UNDEFINED_COMMAND),
        ("! Missing $ inserted.", MATH_MODE),
        ("! LaTeX Error: File `foo.sty' not found.", MISSING_FILE),
        ("! Emergency stop.", FATAL_STOP),
        ("Error: No such container: cvsmith-latex", SANDBOX_UNAVAILABLE),
        ("something odd happened", UNKNOWN),
    ],
)
def test_translate_compiler_error(output, category):
    """Test mapping of raw compiler output to error categories."""
    assert translate_compiler_error(output)[0] == category


@pytest.mark.unit
def test_unknown_error_message_is_bounded():
    """Test that generic messages carry at most 200 characters of detail."""
    _, message = translate_compiler_error("x" * 500)
    assert "x" * 200 in message
    assert "x" * 201 not in message


@pytest.mark.unit
@pytest.mark.parametrize(
    "name, expected",
    [
        ("Acme Corp, Inc.", "Acme_Corp_Inc_"),
        ("Senior  Engineer", "Senior_Engineer"),
        ("R&D / QA", "R_D_QA"),
        ("a" * 80, "a" * 50),
    ],
)
def test_sanitize_filename(name, expected):
    """Test restriction of artifact name parts."""
    assert sanitize_filename(name) == expected


@pytest.mark.unit
def test_build_artifact_names():
    """Test artifact and working directory naming."""
    file_name, dir_name = build_artifact_names("", "Delivery Boy")

    match = re.fullmatch(r"Company_Delivery_Boy_(\d{8}_\d{6})_([0-9a-f]{8})\.pdf", file_name)
    assert match
    assert dir_name == f"resume_{match.group(1)}_{match.group(2)}"


@pytest.mark.unit
def test_command_builders():
    """Test container and local pass commands."""
    tex = Path("/tmp/latex-temp/resume_1/resume_1.tex")
    work = tex.parent

    docker = docker_command(tex, work)
    assert docker[:2] == ["docker", "exec"]
    assert docker[-1].endswith("/resume_1/resume_1.tex")
    assert "-interaction=nonstopmode" in docker

    local = local_command(tex, work)
    assert local[-1] == "resume_1.tex"
    assert f"-output-directory={work}" in local


@pytest.mark.unit
def test_compiler_output_keeps_only_bounded_tail(tmp_path):
    """Test that only the tail of a noisy pass is read back."""
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    tex_file = work_dir / "resume.tex"
    tex_file.write_text("x")

    result = run_compiler(
        tex_file,
        script_command(tmp_path, NOISY),
        num_passes=1,
        timeout_s=10.0,
        max_output_bytes=1000,
    )

    assert not result.success
    assert result.stdout.startswith("[... output truncated ...]")
    assert result.stdout.endswith("END")
    assert len(result.stdout) < 1100
    assert result.stderr == "warning"
