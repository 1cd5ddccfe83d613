"""
Generation Context

Responsibilities:
- Tracks each generation job through pending, processing, completed and failed
- Sequences selection, optimization, scoring, rendering and compilation
- Queues jobs with bounded retries, backoff and a per-attempt time bound
- Validates requests and scopes status queries to the owning user

Owns: Job state machine, pipeline orchestration, queue policy, repositories
Never: Implements stage logic itself
"""

from cvsmith.contexts.generation.exceptions import (
    GenerationError,
    InactiveTemplateError,
    OwnershipError,
    ResourceNotFoundError,
    describe_failure,
)
from cvsmith.contexts.generation.job_queue import InMemoryJobQueue, QueuePolicy
from cvsmith.contexts.generation.jobs import GenerationJob, JobStatus
from cvsmith.contexts.generation.orchestrator import GenerationPipeline, GenerationResult
from cvsmith.contexts.generation.repositories import (
    InMemoryJobRepository,
    InMemoryProfileRepository,
    InMemoryResumeRepository,
    InMemoryTemplateRepository,
    ResumeRecord,
    ResumeTemplate,
)
from cvsmith.contexts.generation.service import GenerationService

__all__ = [
    "GenerationError",
    "GenerationJob",
    "GenerationPipeline",
    "GenerationResult",
    "GenerationService",
    "InMemoryJobQueue",
    "InMemoryJobRepository",
    "InMemoryProfileRepository",
    "InMemoryResumeRepository",
    "InMemoryTemplateRepository",
    "InactiveTemplateError",
    "JobStatus",
    "OwnershipError",
    "QueuePolicy",
    "ResourceNotFoundError",
    "ResumeRecord",
    "ResumeTemplate",
    "describe_failure",
]
