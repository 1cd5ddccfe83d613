#!/usr/bin/env python3
"""
Resume Generation CLI

Runs the generation pipeline for a local profile against one job description,
using in-memory repositories.

Commands:
    generate - Select, rewrite, score, render and compile a targeted resume
    score    - Show the ATS score of the selected content without rewriting it
    analyze  - Analyze a plain-text job posting into structured requirements
    models   - List models served by the local Ollama instance

Examples:\n

    generate_resume.py generate profile.yaml job.yaml                   # Docker sandbox

    generate_resume.py generate profile.yaml job.yaml --local           # Local pdflatex

    generate_resume.py score profile.yaml job.yaml                      # ATS score only

    generate_resume.py analyze posting.txt -c "MomCorp" -p "Inspector"  # Job analysis
"""

import json
import os
import uuid
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from typing_extensions import Annotated

from cvsmith.contexts.evaluation import calculate_ats_score
from cvsmith.contexts.generation import (
    GenerationPipeline,
    GenerationService,
    InMemoryJobRepository,
    InMemoryProfileRepository,
    InMemoryResumeRepository,
    InMemoryTemplateRepository,
    ResumeTemplate,
)
from cvsmith.contexts.generation.logger import setup_generation_logger
from cvsmith.contexts.intake import analyze_job_description, load_job_description
from cvsmith.contexts.optimization import ContentOptimizer, fallback_summary
from cvsmith.contexts.rendering import DocumentCompiler, docker_command, local_command
from cvsmith.contexts.targeting import OptimizedContent, load_profile, select_content
from cvsmith.utils.config import DEFAULT_TEMPLATE_PATH, load_generation_config
from cvsmith.utils.llm import OllamaProvider, TextGenerationService, get_provider

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))

app = typer.Typer(
    help="Generate ATS-optimized resumes from a stored career profile",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def _text_service(provider: Optional[str], model: Optional[str]) -> TextGenerationService:
    return TextGenerationService(get_provider(provider, model))


@app.command("generate")
def generate_command(
    profile_path: Annotated[Path, typer.Argument(help="Profile YAML")],
    job_path: Annotated[Path, typer.Argument(help="Job description (YAML or plain text)")],
    template_path: Annotated[
        Path,
        typer.Option("--template", "-t", help="Document template with {{slot}} placeholders"),
    ] = DEFAULT_TEMPLATE_PATH,
    company: Annotated[
        str, typer.Option("--company", "-c", help="Company (plain-text postings)")
    ] = "",
    position: Annotated[
        str, typer.Option("--position", "-p", help="Position (plain-text postings)")
    ] = "",
    output_dir: Annotated[
        Optional[Path], typer.Option("--output-dir", "-o", help="Where to save the PDF")
    ] = None,
    local: Annotated[
        bool, typer.Option("--local", help="Run the compiler directly instead of in Docker")
    ] = False,
    provider: Annotated[
        Optional[str], typer.Option("--provider", help="ollama, anthropic or openai")
    ] = None,
    model: Annotated[Optional[str], typer.Option("--model", "-m", help="Model name")] = None,
):
    """
    Generate a targeted resume PDF.

    Examples:\n

        $ generate_resume.py generate profile.yaml job.yaml --local

        $ generate_resume.py generate profile.yaml posting.txt -c MomCorp -p Inspector
    """
    try:
        profile = load_profile(profile_path)
        job_description = load_job_description(
            job_path, user_id=profile.user.id, company=company, position=position
        )
    except (FileNotFoundError, ValueError, TypeError) as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    template = ResumeTemplate(
        id=template_path.stem,
        name=template_path.stem,
        source_markup=template_path.read_text(encoding="utf-8"),
    )

    config = load_generation_config()
    pipeline = GenerationPipeline(
        profiles=InMemoryProfileRepository([profile]),
        jobs=InMemoryJobRepository([job_description]),
        templates=InMemoryTemplateRepository([template]),
        resumes=InMemoryResumeRepository(),
        optimizer=ContentOptimizer(_text_service(provider, model), config=config),
        compiler=DocumentCompiler(
            output_dir=output_dir,
            command_builder=local_command if local else docker_command,
            config=config,
        ),
        config=config,
    )
    service = GenerationService(pipeline)

    job = service.request_generation(profile.user.id, job_description.id, template.id)
    log_file = setup_generation_logger(LOGS_PATH / f"generate_{job.resume_id}", resume_id=job.resume_id)

    typer.secho(
        f"\nGenerating: {job_description.position} at {job_description.company}",
        fg=typer.colors.BLUE,
        bold=True,
    )
    service.queue.process_next()
    status = service.job_status(job.resume_id, profile.user.id)

    typer.echo("")
    if status["state"] == "completed":
        result = status["result"]
        typer.secho("✓ Generation succeeded", fg=typer.colors.GREEN, bold=True)
        typer.echo(f"  PDF: {result['filePath']}")
        typer.echo(f"  ATS score: {result['atsScore']['overall']}")
        for suggestion in result["atsScore"]["suggestions"]:
            typer.echo(f"  - {suggestion}")
    else:
        typer.secho(f"✗ Generation failed: {status['failure_reason']}", fg=typer.colors.RED, bold=True)
    typer.echo(f"  Log: {log_file}")
    typer.echo("")

    raise typer.Exit(code=0 if status["state"] == "completed" else 1)


@app.command("score")
def score_command(
    profile_path: Annotated[Path, typer.Argument(help="Profile YAML")],
    job_path: Annotated[Path, typer.Argument(help="Job description YAML")],
):
    """
    Score the content that would be selected, with a deterministic summary.

    No model calls are made, so this shows the baseline before rewriting.
    """
    try:
        profile = load_profile(profile_path)
        job_description = load_job_description(job_path, user_id=profile.user.id)
    except (FileNotFoundError, ValueError, TypeError) as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    analysis = job_description.analysis
    selected = select_content(profile, analysis)
    experiences = [scored.fact for scored in selected.experience]
    skills = [scored.fact for scored in selected.skills]

    content = OptimizedContent(
        personal_info=selected.personal_info,
        summary=fallback_summary(
            [f"{exp.position} at {exp.company}" for exp in experiences],
            [skill.name for skill in skills],
            analysis.position,
        ),
        experience=experiences,
        education=selected.education,
        skills=skills,
        projects=[scored.fact for scored in selected.projects],
    )
    score = calculate_ats_score(content, analysis)
    typer.echo(json.dumps(score.to_dict(), indent=2))


@app.command("analyze")
def analyze_command(
    posting_path: Annotated[Path, typer.Argument(help="Plain-text job posting")],
    company: Annotated[str, typer.Option("--company", "-c")] = "",
    position: Annotated[str, typer.Option("--position", "-p")] = "",
    provider: Annotated[Optional[str], typer.Option("--provider")] = None,
    model: Annotated[Optional[str], typer.Option("--model", "-m")] = None,
):
    """Analyze a job posting and print the stored analysis format."""
    if not posting_path.exists():
        typer.secho(f"Error: Posting not found: {posting_path}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    analysis = analyze_job_description(
        posting_path.read_text(encoding="utf-8"),
        _text_service(provider, model),
        company=company,
        position=position,
    )
    record = {
        "id": uuid.uuid4().hex,
        "company": company,
        "position": position,
        "analysis": analysis.to_dict(),
    }
    typer.echo(json.dumps(record, indent=2))


@app.command("models")
def models_command():
    """List models available from the local Ollama instance."""
    provider = OllamaProvider()
    if not provider.check_connection():
        typer.secho(f"Error: Ollama not reachable at {provider.base_url}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    for name in provider.available_models():
        marker = "*" if name == provider.model else " "
        typer.echo(f"{marker} {name}")


if __name__ == "__main__":
    app()
