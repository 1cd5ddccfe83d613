"""
Integration tests for the generation pipeline - every stage except the LaTeX toolchain.
"""

from concurrent.futures import TimeoutError as FutureTimeout

import pytest

from cvsmith.contexts.generation import JobStatus, ResumeTemplate
from cvsmith.contexts.generation.exceptions import AttemptAbandonedError
from cvsmith.contexts.intake.job_analysis import JobDescription
from cvsmith.contexts.rendering.exceptions import UNDEFINED_COMMAND, CompilationError
from cvsmith.utils.event_logging import get_recent_events


def failing(prompt):
    raise RuntimeError("model offline")


@pytest.mark.integration
def test_generation_completes(build_service, stub_compiler):
    """Test a full generation from request to persisted result."""
    service, _ = build_service()

    job = service.request_generation("u-fry", "jd-1", "t-classic")
    service.queue.process_next()

    status = service.job_status(job.resume_id, "u-fry")
    assert status["state"] == "completed"
    assert status["progress"] == 100
    assert status["failure_reason"] is None

    result = status["result"]
    assert result["resumeId"] == job.resume_id
    assert result["fileName"].startswith("MomCorp_Delivery_Engineer")
    assert result["pageCount"] == 1
    assert 0 <= result["atsScore"]["overall"] <= 100
    assert result["generatedContent"]["personal_info"]["name"] == "Philip Fry"

    record = service.pipeline.resumes.get(job.resume_id)
    assert record.status == "completed"
    assert record.file_path == result["filePath"]
    assert record.ats_score == result["atsScore"]


@pytest.mark.integration
def test_rendered_document_carries_rewritten_and_escaped_content(build_service, stub_compiler):
    """Test that the compiler receives rewritten bullets with LaTeX-safe text."""
    service, _ = build_service()

    job = service.request_generation("u-fry", "jd-1", "t-classic")
    service.queue.process_next()

    assert service.queue.get(job.resume_id).status is JobStatus.COMPLETED
    latex = stub_compiler.documents[0]
    assert "Philip Fry" in latex
    assert r"\resumeItem{Improved: Delivered 500+ packages across 12 planets with 98\% on-time rate}" in latex
    assert "Planet Express, Inc." in latex
    assert "{{" not in latex.split(r"\begin{document}", 1)[1]


@pytest.mark.integration
def test_progress_is_monotonic(build_service):
    """Test that recorded progress checkpoints never decrease."""
    service, _ = build_service()

    job = service.request_generation("u-fry", "jd-1", "t-classic")
    service.queue.process_next()

    progress = [e["progress"] for e in get_recent_events(n=100, resume_id=job.resume_id, event_type="progress")]
    assert progress == sorted(progress)
    assert progress[0] == 25
    assert progress[-1] == 90


@pytest.mark.integration
def test_ai_failure_still_completes(build_service):
    """Test that a dead model degrades to fallback text instead of failing."""
    service, _ = build_service(responder=failing)

    job = service.request_generation("u-fry", "jd-1", "t-classic")
    service.queue.process_next()

    status = service.job_status(job.resume_id, "u-fry")
    assert status["state"] == "completed"
    content = status["result"]["generatedContent"]
    assert content["summary"].startswith("Experienced professional with expertise in")
    assert content["experience"][0]["achievements"][0] == (
        "Delivered 500+ packages across 12 planets with 98% on-time rate"
    )


@pytest.mark.integration
def test_compile_failure_fails_job_with_user_message(build_service, make_stub_compiler):
    """Test that a compile error fails the job after its attempts, with no artifact."""
    error = CompilationError(
        category=UNDEFINED_COMMAND,
        user_message="LaTeX compilation failed: Invalid LaTeX command detected.",
    )
    compiler = make_stub_compiler(error=error)
    service, _ = build_service(compiler=compiler)

    job = service.request_generation("u-fry", "jd-1", "t-classic")
    service.queue.process_next()

    status = service.job_status(job.resume_id, "u-fry")
    assert status["state"] == "failed"
    assert status["failure_reason"] == "LaTeX compilation failed: Invalid LaTeX command detected."
    assert status["attempts_made"] == 2
    assert len(compiler.documents) == 2

    record = service.pipeline.resumes.get(job.resume_id)
    assert record.status == "failed"
    assert record.file_path == ""

    failures = get_recent_events(resume_id=job.resume_id, event_type="status_change")
    assert [e["new_status"] for e in failures] == ["processing", "failed"]


@pytest.mark.integration
def test_template_deactivated_after_request(build_service):
    """Test that a template switched off before processing fails the job."""
    service, _ = build_service()

    job = service.request_generation("u-fry", "jd-1", "t-classic")
    service.pipeline.templates.add(
        ResumeTemplate(id="t-classic", name="Classic", source_markup="", is_active=False)
    )
    service.queue.process_next()

    status = service.job_status(job.resume_id, "u-fry")
    assert status["state"] == "failed"
    assert status["failure_reason"] == "Template not found or inactive"


@pytest.mark.integration
def test_unanalyzed_job_description_is_analyzed(build_service):
    """Test that a posting without a stored analysis is analyzed before selection."""
    service, provider = build_service()
    service.pipeline.jobs.add(
        JobDescription(
            id="jd-raw",
            user_id="u-fry",
            company="MomCorp",
            position="Senior Courier",
            raw_text="Senior courier with Python and SQL experience",
        )
    )

    job = service.request_generation("u-fry", "jd-raw", "t-classic")
    service.queue.process_next()

    assert service.job_status(job.resume_id, "u-fry")["state"] == "completed"
    assert any("Analyze the following job description" in prompt for prompt in provider.prompts)


@pytest.mark.integration
def test_job_failed_mid_attempt_is_not_saved_as_completed(build_service, stub_compiler):
    """Test that an attempt finishing after its job was failed leaves the failure in place."""
    service, _ = build_service()
    pipeline = service.pipeline
    job = service.request_generation("u-fry", "jd-1", "t-classic")

    compile_document = stub_compiler.compile

    def compile_then_time_out(latex_source, company, position):
        result = compile_document(latex_source, company, position)
        pipeline.mark_failed(job, FutureTimeout())
        return result

    stub_compiler.compile = compile_then_time_out

    with pytest.raises(AttemptAbandonedError):
        pipeline.run(job)

    assert job.status is JobStatus.FAILED
    record = pipeline.resumes.get(job.resume_id)
    assert record.status == "failed"
    assert record.file_path == ""
    assert record.failure_reason == "Resume generation timed out. Please try again."
