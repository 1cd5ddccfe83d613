"""Fixtures wiring the generation pipeline with in-memory repositories and a stub compiler."""

from pathlib import Path
from typing import List, Optional

import pytest

from cvsmith.contexts.generation import (
    GenerationPipeline,
    GenerationService,
    InMemoryJobRepository,
    InMemoryProfileRepository,
    InMemoryResumeRepository,
    InMemoryTemplateRepository,
    QueuePolicy,
    ResumeTemplate,
)
from cvsmith.contexts.optimization.rewriter import ContentOptimizer
from cvsmith.contexts.rendering.compiler import CompilationResult
from cvsmith.contexts.rendering.exceptions import CompilationError
from cvsmith.utils.config import DEFAULT_TEMPLATE_PATH

# No real waiting between attempts
QUICK_RETRY = QueuePolicy(attempts=2, backoff_delay_s=0.0, attempt_timeout_s=30.0)


class StubCompiler:
    """Records rendered documents and writes a placeholder PDF instead of running LaTeX."""

    def __init__(self, output_dir: Path, error: Optional[CompilationError] = None):
        self.output_dir = output_dir
        self.error = error
        self.documents: List[str] = []

    def compile(self, latex_source: str, company: str, position: str) -> CompilationResult:
        self.documents.append(latex_source)
        if self.error is not None:
            raise self.error
        self.output_dir.mkdir(parents=True, exist_ok=True)
        file_name = f"{company}_{position}_{len(self.documents)}.pdf".replace(" ", "_")
        pdf_path = self.output_dir / file_name
        pdf_path.write_bytes(b"%PDF-1.4 placeholder")
        return CompilationResult(success=True, pdf_path=pdf_path, file_name=file_name, page_count=1)


@pytest.fixture
def default_template():
    return ResumeTemplate(
        id="t-classic",
        name="Classic",
        source_markup=DEFAULT_TEMPLATE_PATH.read_text(encoding="utf-8"),
    )


@pytest.fixture
def make_stub_compiler(tmp_path):
    """Factory: make_stub_compiler(error=None) -> StubCompiler writing under tmp_path."""

    def _make(error: Optional[CompilationError] = None):
        return StubCompiler(tmp_path / "resumes", error=error)

    return _make


@pytest.fixture
def stub_compiler(make_stub_compiler):
    return make_stub_compiler()


@pytest.fixture
def build_service(fry_profile, momcorp_job, default_template, stub_compiler, make_service, today):
    """Factory: build_service(responder=None, compiler=None) -> (GenerationService, provider)."""

    def _build(responder=None, compiler=None):
        text_service, provider = make_service(responder)
        pipeline = GenerationPipeline(
            profiles=InMemoryProfileRepository([fry_profile]),
            jobs=InMemoryJobRepository([momcorp_job]),
            templates=InMemoryTemplateRepository([default_template]),
            resumes=InMemoryResumeRepository(),
            optimizer=ContentOptimizer(service=text_service),
            compiler=compiler or stub_compiler,
            today=today,
        )
        queue_service = GenerationService(pipeline, policy=QUICK_RETRY)
        return queue_service, provider

    return _build
