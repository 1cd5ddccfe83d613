#!/usr/bin/env python3
"""
PDF Compilation CLI

Compiles a rendered LaTeX resume to PDF through the rendering context's
sandboxed compiler, and inspects compiled PDFs.

Commands:
    compile - Compile a single LaTeX file to PDF
    inspect - Report the page count of a compiled PDF

Examples:\n

    compile_pdf.py compile resume.tex -c MomCorp -p Inspector      # Docker sandbox

    compile_pdf.py compile resume.tex -c MomCorp -p Inspector --local

    compile_pdf.py inspect uploads/resumes/MomCorp_Inspector_1700000000000.pdf
"""

import os
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from cvsmith.contexts.rendering import (
    CompilationError,
    DocumentCompiler,
    docker_command,
    local_command,
)
from cvsmith.contexts.rendering.logger import setup_rendering_logger
from cvsmith.utils.pdf_processing import page_count

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))


def display_path(path: Path) -> str:
    """Return path relative to the working directory for cleaner display."""
    try:
        return str(Path(path).resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


app = typer.Typer(
    help="Compile LaTeX resumes to PDF in the sandboxed toolchain",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("compile")
def compile_command(
    tex_file: Annotated[Path, typer.Argument(help="Rendered LaTeX file")],
    company: Annotated[str, typer.Option("--company", "-c", help="Used in the PDF name")] = "",
    position: Annotated[str, typer.Option("--position", "-p", help="Used in the PDF name")] = "",
    output_dir: Annotated[
        Optional[Path], typer.Option("--output-dir", "-o", help="Where to save the PDF")
    ] = None,
    timeout: Annotated[
        Optional[float], typer.Option("--timeout", help="Per-pass time bound in seconds")
    ] = None,
    local: Annotated[
        bool, typer.Option("--local", help="Run the compiler directly instead of in Docker")
    ] = False,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Show compiler warnings")
    ] = False,
):
    """
    Compile a LaTeX resume to PDF.

    File-access commands are stripped before compilation. On failure the
    working directory is kept for inspection.

    Examples:\n

        $ compile_pdf.py compile resume.tex -c MomCorp -p Inspector

        $ compile_pdf.py compile resume.tex --local --timeout 60
    """
    if not tex_file.exists():
        typer.secho(f"Error: File not found: {tex_file}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    company = company or "Resume"
    position = position or tex_file.stem
    log_file = setup_rendering_logger(LOGS_PATH / f"compile_{tex_file.stem}")

    typer.secho(f"\nCompiling: {tex_file}", fg=typer.colors.BLUE, bold=True)
    typer.echo("")

    compiler = DocumentCompiler(
        output_dir=output_dir,
        timeout_s=timeout,
        command_builder=local_command if local else docker_command,
    )
    try:
        result = compiler.compile(tex_file.read_text(encoding="utf-8"), company, position)
    except CompilationError as e:
        typer.secho(f"✗ Compilation failed: {e.user_message}", fg=typer.colors.RED, bold=True)
        if e.log_excerpt:
            typer.secho(f"  - {e.log_excerpt}", fg=typer.colors.RED)
        if e.temp_dir:
            typer.echo(f"  Working directory: {display_path(e.temp_dir)}")
        typer.echo(f"  Log: {display_path(log_file)}")
        typer.echo("")
        raise typer.Exit(code=1)

    typer.secho("✓ Compilation succeeded", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  Warnings: {len(result.warnings)}")
    if verbose and result.warnings:
        for warning in result.warnings[:10]:
            typer.echo(f"  - {warning}")
        if len(result.warnings) > 10:
            typer.echo(f"  ... and {len(result.warnings) - 10} more")
    typer.echo(f"  Pages: {result.page_count}")
    typer.echo(f"  PDF: {display_path(result.pdf_path)}")
    typer.echo(f"  Log: {display_path(log_file)}")
    typer.echo("")


@app.command("inspect")
def inspect_command(
    pdf_file: Annotated[Path, typer.Argument(help="Compiled PDF")],
):
    """Report the page count of a compiled PDF."""
    pages = page_count(pdf_file) if pdf_file.exists() else None
    if pages is None:
        typer.secho(f"Error: Not a readable PDF: {pdf_file}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo(f"{display_path(pdf_file)}: {pages} page(s)")


if __name__ == "__main__":
    app()
