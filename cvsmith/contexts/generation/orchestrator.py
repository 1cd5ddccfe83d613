"""
Pipeline Orchestrator

Runs one resume generation end to end, in stage order:

    fetch profile + job (25%) -> select content (35%) -> optimize (50%)
    -> score ATS (65%) -> fetch template (70%) -> render + compile (75-90%)
    -> persist result (100%)

Any exception fails the job (on its final attempt), persists no artifact
reference, and propagates. Retries belong to the queue; every attempt
re-runs the whole pipeline, and nothing shared is written before the final
persist.
"""

import threading
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from omegaconf import DictConfig

from cvsmith.contexts.evaluation.ats_scorer import ATSScore, calculate_ats_score
from cvsmith.contexts.generation.exceptions import (
    AttemptAbandonedError,
    InactiveTemplateError,
    OwnershipError,
    ResourceNotFoundError,
    describe_failure,
)
from cvsmith.contexts.generation.jobs import GenerationJob, JobStatus
from cvsmith.contexts.generation.logger import _log_error, _log_success, _log_warning, log_stage
from cvsmith.contexts.generation.repositories import (
    JobRepository,
    ProfileRepository,
    ResumeRecord,
    ResumeRepository,
    ResumeTemplate,
    TemplateRepository,
)
from cvsmith.contexts.intake.job_analysis import JobAnalysis, JobDescription
from cvsmith.contexts.intake.job_analyzer import analyze_job_description
from cvsmith.contexts.optimization.rewriter import ContentOptimizer
from cvsmith.contexts.rendering.compiler import DocumentCompiler
from cvsmith.contexts.targeting.career_data_structures import OptimizedContent, UserProfile
from cvsmith.contexts.targeting.selection import select_content
from cvsmith.contexts.templating.renderer import ResumeRenderer
from cvsmith.utils.config import load_generation_config
from cvsmith.utils.event_logging import log_pipeline_event

# Progress checkpoints
FETCH_PROGRESS = 25
SELECT_PROGRESS = 35
OPTIMIZE_PROGRESS = 50
SCORE_PROGRESS = 65
TEMPLATE_PROGRESS = 70
COMPILE_PROGRESS = 75
PERSIST_PROGRESS = 90


@dataclass
class GenerationResult:
    """
    Outcome of a completed generation, as written back to the resume record.

    Attributes:
        resume_id: Resume record id
        file_name: Artifact file name
        file_path: Permanent artifact location
        ats_score: ATS score of the final content
        generated_content: Final optimized content
        page_count: Pages in the artifact, if known
    """

    resume_id: str
    file_name: str
    file_path: Path
    ats_score: ATSScore
    generated_content: OptimizedContent
    status: str = JobStatus.COMPLETED.value
    page_count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Persisted result shape (camelCase)."""
        return {
            "resumeId": self.resume_id,
            "fileName": self.file_name,
            "filePath": str(self.file_path),
            "atsScore": self.ats_score.to_dict(),
            "generatedContent": self.generated_content.to_dict(),
            "status": self.status,
            "pageCount": self.page_count,
        }


def _analysis_is_empty(analysis: JobAnalysis) -> bool:
    return not (analysis.requirements or analysis.skills or analysis.keywords)


class GenerationPipeline:
    """
    Sequences the generation stages for one job.

    Attributes:
        profiles, jobs, templates, resumes: Collaborator repositories
        optimizer: AI rewriter (its service also analyzes unanalyzed postings)
        renderer: Template renderer
        compiler: Sandboxed document compiler
        today: Fixed reference date for scoring (None means the current date)
    """

    def __init__(
        self,
        profiles: ProfileRepository,
        jobs: JobRepository,
        templates: TemplateRepository,
        resumes: ResumeRepository,
        optimizer: Optional[ContentOptimizer] = None,
        renderer: Optional[ResumeRenderer] = None,
        compiler: Optional[DocumentCompiler] = None,
        today: Optional[date] = None,
        config: Optional[DictConfig] = None,
    ):
        self.config = config or load_generation_config()
        self.profiles = profiles
        self.jobs = jobs
        self.templates = templates
        self.resumes = resumes
        self.optimizer = optimizer or ContentOptimizer(config=self.config)
        self.renderer = renderer or ResumeRenderer()
        self.compiler = compiler or DocumentCompiler(config=self.config)
        self.today = today
        # Serializes the final save against mark_failed from the queue thread
        self._outcome_lock = threading.Lock()

    # --- Lookups ---

    def load_job_description(self, job_description_id: str, user_id: str) -> JobDescription:
        """
        Job description owned by user_id.

        Raises:
            ResourceNotFoundError: If it does not exist
            OwnershipError: If it belongs to another user
        """
        job_description = self.jobs.get_job_description(job_description_id)
        if job_description is None:
            raise ResourceNotFoundError("Job description", job_description_id)
        if job_description.user_id != user_id:
            raise OwnershipError("Job description", job_description_id, user_id)
        return job_description

    def load_template(self, template_id: str) -> ResumeTemplate:
        """
        Active template.

        Raises:
            ResourceNotFoundError: If it does not exist
            InactiveTemplateError: If it is not active
        """
        template = self.templates.get_template(template_id)
        if template is None:
            raise ResourceNotFoundError("Template", template_id)
        if not template.is_active:
            raise InactiveTemplateError(template_id)
        return template

    def _load_resume(self, resume_id: str) -> ResumeRecord:
        record = self.resumes.get(resume_id)
        if record is None:
            raise ResourceNotFoundError("Resume", resume_id)
        return record

    def _fetch_inputs(self, job: GenerationJob) -> Tuple[UserProfile, JobAnalysis, JobDescription]:
        profile = self.profiles.get_profile(job.user_id)
        if profile is None:
            raise ResourceNotFoundError("User", job.user_id)

        job_description = self.load_job_description(job.job_description_id, job.user_id)
        analysis = job_description.analysis
        if _analysis_is_empty(analysis) and job_description.raw_text:
            analysis = analyze_job_description(
                job_description.raw_text,
                self.optimizer.service,
                company=job_description.company,
                position=job_description.position,
            )
        return profile, analysis, job_description

    # --- Execution ---

    def _checkpoint(
        self,
        job: GenerationJob,
        progress: int,
        stage: str,
        cancel_event: Optional[threading.Event],
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise AttemptAbandonedError(job.resume_id)
        job.advance(progress, stage=stage)
        log_stage(job.resume_id, stage, job.progress)

    def run(
        self,
        job: GenerationJob,
        final_attempt: bool = True,
        cancel_event: Optional[threading.Event] = None,
    ) -> GenerationResult:
        """
        Execute every stage for job.

        Args:
            job: Job to run (pending, or processing when retried)
            final_attempt: Whether a failure here is the job's last word
            cancel_event: Set by the queue when it abandons this attempt

        Returns:
            GenerationResult once the record is persisted as completed

        Raises:
            Exception: Whatever stage failed, after the job is marked failed
        """
        record = self._load_resume(job.resume_id)
        job.start()
        record.status = JobStatus.PROCESSING.value
        self.resumes.save(record)

        try:
            self._checkpoint(job, FETCH_PROGRESS, "fetch profile and job description", cancel_event)
            profile, analysis, job_description = self._fetch_inputs(job)

            self._checkpoint(job, SELECT_PROGRESS, "select content", cancel_event)
            selected = select_content(profile, analysis, today=self.today, config=self.config)

            self._checkpoint(job, OPTIMIZE_PROGRESS, "optimize content", cancel_event)
            optimized = self.optimizer.optimize_content(selected, analysis)

            self._checkpoint(job, SCORE_PROGRESS, "score ATS compatibility", cancel_event)
            ats_score = calculate_ats_score(optimized, analysis, today=self.today, config=self.config)

            self._checkpoint(job, TEMPLATE_PROGRESS, "fetch template", cancel_event)
            template = self.load_template(job.template_id)

            self._checkpoint(job, COMPILE_PROGRESS, "render and compile", cancel_event)
            latex = self.renderer.render(template.source_markup, optimized)
            compiled = self.compiler.compile(
                latex,
                company=analysis.company or job_description.company,
                position=analysis.position or job_description.position,
            )

            self._checkpoint(job, PERSIST_PROGRESS, "persist result", cancel_event)
            result = GenerationResult(
                resume_id=job.resume_id,
                file_name=compiled.file_name,
                file_path=compiled.pdf_path,
                ats_score=ats_score,
                generated_content=optimized,
                page_count=compiled.page_count,
            )
            record.file_name = result.file_name
            record.file_path = str(result.file_path)
            record.ats_score = ats_score.to_dict()
            record.generated_content = optimized.to_dict()
            record.page_count = result.page_count
            record.status = JobStatus.COMPLETED.value
            with self._outcome_lock:
                if job.is_terminal or (cancel_event is not None and cancel_event.is_set()):
                    raise AttemptAbandonedError(job.resume_id)
                self.resumes.save(record)
                job.complete(file_name=result.file_name, overall_ats_score=ats_score.overall)
        except AttemptAbandonedError:
            _log_warning(f"{job.resume_id}: attempt abandoned, stopping")
            raise
        except Exception as e:
            if final_attempt:
                self.mark_failed(job, e)
            else:
                _log_warning(f"{job.resume_id}: attempt {job.attempts_made} failed, will retry: {e}")
                log_pipeline_event(
                    event_type="attempt_failed",
                    resume_id=job.resume_id,
                    source="generation",
                    attempt=job.attempts_made,
                    error=describe_failure(e),
                )
            raise

        _log_success(f"{job.resume_id}: completed ({result.file_name}, ATS {ats_score.overall})")
        return result

    def mark_failed(self, job: GenerationJob, exc: BaseException) -> None:
        """Fail job and its resume record with a categorized reason; no-op if already terminal."""
        reason = describe_failure(exc)
        with self._outcome_lock:
            if not job.fail(reason):
                return

            record = self.resumes.get(job.resume_id)
            if record is not None:
                record.status = JobStatus.FAILED.value
                record.file_name = ""
                record.file_path = ""
                record.failure_reason = reason
                self.resumes.save(record)
        _log_error(f"{job.resume_id}: failed: {reason}")
