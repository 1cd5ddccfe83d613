"""
Generation job state machine.

    pending --(dequeued)--> processing --(success)--> completed
                                      \\--(failure)--> failed

completed and failed are terminal. Progress is advisory and never decreases.
Every transition is appended to the pipeline event log.
"""

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional

from cvsmith.contexts.generation.exceptions import InvalidJobTransitionError
from cvsmith.utils.event_logging import log_pipeline_event, log_status_change


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


ALLOWED_TRANSITIONS: Dict[JobStatus, FrozenSet[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.PROCESSING, JobStatus.FAILED}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.FAILED: frozenset(),
}


@dataclass
class GenerationJob:
    """
    One queued resume generation.

    Attributes:
        resume_id: Resume record id, also the queue handle
        user_id: Requesting user
        job_description_id: Target job description
        template_id: Document template
        status: Current state
        progress: 0..100, non-decreasing
        failure_reason: Categorized reason once failed
        attempts_made: Attempts started by the queue
    """

    resume_id: str
    user_id: str
    job_description_id: str
    template_id: str
    status: JobStatus = JobStatus.PENDING
    progress: int = 0
    failure_reason: Optional[str] = None
    attempts_made: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self.status]

    def transition(self, new_status: JobStatus, source: str = "generation", **extra_fields) -> None:
        """
        Move to new_status and log the change.

        Raises:
            InvalidJobTransitionError: If the state machine forbids the move
        """
        with self._lock:
            old_status = self.status
            if new_status not in ALLOWED_TRANSITIONS[old_status]:
                raise InvalidJobTransitionError(self.resume_id, old_status.value, new_status.value)
            self.status = new_status
            if new_status is JobStatus.COMPLETED:
                self.progress = 100

        log_status_change(
            resume_id=self.resume_id,
            old_status=old_status.value,
            new_status=new_status.value,
            source=source,
            **extra_fields,
        )

    def start(self) -> None:
        """Mark as processing; repeated attempts on a processing job are no-ops."""
        with self._lock:
            already_processing = self.status is JobStatus.PROCESSING
        if not already_processing:
            self.transition(JobStatus.PROCESSING)

    def complete(self, **extra_fields) -> None:
        self.transition(JobStatus.COMPLETED, **extra_fields)

    def fail(self, reason: str, source: str = "generation") -> bool:
        """
        Mark as failed with a user-facing reason.

        Returns:
            False if the job was already terminal (nothing changed)
        """
        with self._lock:
            if self.is_terminal:
                return False
            self.failure_reason = reason
        self.transition(JobStatus.FAILED, source=source, failure_reason=reason)
        return True

    def advance(self, progress: int, stage: str = "") -> int:
        """Raise progress to at least progress (never lowers it) and log the checkpoint."""
        with self._lock:
            self.progress = max(self.progress, min(max(int(progress), 0), 100))
            current = self.progress
        log_pipeline_event(
            event_type="progress",
            resume_id=self.resume_id,
            source="generation",
            progress=current,
            stage=stage,
        )
        return current
