"""
Generation request surface.

Validates a request before anything is queued (the job description must
exist and belong to the requester, the template must exist and be active),
creates the pending resume record, and hands the job to the queue. Status
queries are scoped to the job's owner.
"""

from typing import Any, Dict, Optional

from cvsmith.contexts.generation.exceptions import OwnershipError, ResourceNotFoundError
from cvsmith.contexts.generation.job_queue import InMemoryJobQueue, QueuePolicy
from cvsmith.contexts.generation.jobs import GenerationJob, JobStatus
from cvsmith.contexts.generation.logger import _log_info
from cvsmith.contexts.generation.orchestrator import GenerationPipeline


class GenerationService:
    """
    Entry point for requesting resume generation.

    Attributes:
        pipeline: Orchestrator that runs each job
        queue: Job queue; defaults to an in-memory queue driving the pipeline
    """

    def __init__(
        self,
        pipeline: GenerationPipeline,
        queue: Optional[InMemoryJobQueue] = None,
        policy: Optional[QueuePolicy] = None,
    ):
        self.pipeline = pipeline
        self.queue = queue or InMemoryJobQueue(
            handler=pipeline.run,
            policy=policy or QueuePolicy.from_config(pipeline.config),
            on_exhausted=pipeline.mark_failed,
        )

    def request_generation(self, user_id: str, job_description_id: str, template_id: str) -> GenerationJob:
        """
        Validate and queue a generation request.

        Returns:
            The queued job (its resume_id is the status handle)

        Raises:
            ResourceNotFoundError: If the job description or template does not exist
            OwnershipError: If the job description belongs to another user
            InactiveTemplateError: If the template is not active
        """
        self.pipeline.load_job_description(job_description_id, user_id)
        self.pipeline.load_template(template_id)

        record = self.pipeline.resumes.create(user_id, job_description_id, template_id)
        job = GenerationJob(
            resume_id=record.id,
            user_id=user_id,
            job_description_id=job_description_id,
            template_id=template_id,
        )
        self.queue.enqueue(job)
        _log_info(f"{record.id}: queued for user {user_id} (job description {job_description_id})")
        return job

    def request_regeneration(self, user_id: str, resume_id: str) -> GenerationJob:
        """
        Queue a fresh generation with the same inputs as an existing resume.

        A new resume record is created; the original is left untouched.

        Raises:
            ResourceNotFoundError: If the resume does not exist
            OwnershipError: If the resume belongs to another user
        """
        record = self.pipeline.resumes.get(resume_id)
        if record is None:
            raise ResourceNotFoundError("Resume", resume_id)
        if record.user_id != user_id:
            raise OwnershipError("Resume", resume_id, user_id)
        return self.request_generation(user_id, record.job_description_id, record.template_id)

    def job_status(self, handle: str, user_id: str) -> Dict[str, Any]:
        """
        Status of a generation job for its owner.

        Falls back to the persisted resume record once the queue no longer
        retains the job.

        Returns:
            Dict with state, progress, result and failure_reason

        Raises:
            ResourceNotFoundError: If neither the queue nor the store knows the handle
            OwnershipError: If the job belongs to another user
        """
        job = self.queue.get(handle)
        if job is not None:
            if job.user_id != user_id:
                raise OwnershipError("Resume", handle, user_id)
            status = self.queue.get_status(handle)
            if status is not None:
                result = status["result"]
                status["result"] = result.to_dict() if result is not None else None
                return status

        record = self.pipeline.resumes.get(handle)
        if record is None:
            raise ResourceNotFoundError("Resume", handle)
        if record.user_id != user_id:
            raise OwnershipError("Resume", handle, user_id)

        completed = record.status == JobStatus.COMPLETED.value
        return {
            "state": record.status,
            "progress": 100 if completed else 0,
            "result": {
                "resumeId": record.id,
                "fileName": record.file_name,
                "filePath": record.file_path,
                "atsScore": record.ats_score,
                "generatedContent": record.generated_content,
                "status": record.status,
                "pageCount": record.page_count,
            } if completed else None,
            "failure_reason": record.failure_reason or None,
            "attempts_made": None,
        }
