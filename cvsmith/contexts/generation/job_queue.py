"""
In-process generation job queue.

Jobs are executed with a bounded number of attempts, exponential backoff
between attempts, and a per-attempt time bound. An attempt that overruns its
bound is abandoned: the queue stops waiting, signals the attempt's cancel
event (checked at every pipeline checkpoint) and moves on.

Finished jobs are kept for status queries up to a retention bound per terminal
state, oldest evicted first.
"""

import threading
import time
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Optional

from omegaconf import DictConfig

from cvsmith.contexts.generation.exceptions import describe_failure
from cvsmith.contexts.generation.jobs import GenerationJob
from cvsmith.contexts.generation.logger import _log_debug, _log_error, _log_info, _log_warning
from cvsmith.utils.config import load_generation_config
from cvsmith.utils.event_logging import log_pipeline_event

# handler(job, final_attempt, cancel_event) -> result
JobHandler = Callable[[GenerationJob, bool, threading.Event], Any]
ExhaustedHook = Callable[[GenerationJob, BaseException], None]


@dataclass(frozen=True)
class QueuePolicy:
    """
    Retry and retention policy.

    Attributes:
        attempts: Attempts per job, including the first
        backoff_delay_s: Delay before the second attempt; doubles after each failure
        attempt_timeout_s: Time bound for a single attempt
        keep_completed: Completed jobs retained for status queries
        keep_failed: Failed jobs retained for status queries
    """

    attempts: int = 3
    backoff_delay_s: float = 2.0
    attempt_timeout_s: float = 120.0
    keep_completed: int = 100
    keep_failed: int = 200

    @classmethod
    def from_config(cls, config: Optional[DictConfig] = None) -> "QueuePolicy":
        settings = (config or load_generation_config()).queue
        return cls(
            attempts=int(settings.attempts),
            backoff_delay_s=float(settings.backoff_delay_s),
            attempt_timeout_s=float(settings.attempt_timeout_s),
            keep_completed=int(settings.keep_completed),
            keep_failed=int(settings.keep_failed),
        )

    def backoff(self, attempt: int) -> float:
        """Delay after failed attempt number `attempt` (1-based)."""
        return self.backoff_delay_s * (2 ** (attempt - 1))


@dataclass
class QueueEntry:
    job: GenerationJob
    result: Any = None
    error: Optional[BaseException] = None


class InMemoryJobQueue:
    """
    FIFO job queue executed in-process.

    Attributes:
        handler: Runs one attempt of a job
        policy: Retry, timeout and retention policy
        sleep: Backoff sleep function (replaceable in tests)
        on_exhausted: Called once with the last error when a job runs out of attempts
    """

    def __init__(
        self,
        handler: JobHandler,
        policy: Optional[QueuePolicy] = None,
        sleep: Callable[[float], None] = time.sleep,
        on_exhausted: Optional[ExhaustedHook] = None,
    ):
        self.handler = handler
        self.policy = policy or QueuePolicy.from_config()
        self.sleep = sleep
        self.on_exhausted = on_exhausted

        self._lock = threading.Lock()
        self._entries: Dict[str, QueueEntry] = {}
        self._pending: Deque[str] = deque()
        self._completed: Deque[str] = deque()
        self._failed: Deque[str] = deque()

    def enqueue(self, job: GenerationJob) -> str:
        """Queue job and return its handle (the resume id)."""
        handle = job.resume_id
        with self._lock:
            self._entries[handle] = QueueEntry(job=job)
            self._pending.append(handle)
        log_pipeline_event(event_type="enqueued", resume_id=handle, source="queue")
        _log_debug(f"{handle}: enqueued")
        return handle

    def get(self, handle: str) -> Optional[GenerationJob]:
        with self._lock:
            entry = self._entries.get(handle)
        return entry.job if entry else None

    def get_status(self, handle: str) -> Optional[Dict[str, Any]]:
        """
        Current state of a queued or retained job.

        Returns:
            Dict with state, progress, result, failure_reason and attempts_made,
            or None if the handle is unknown or evicted
        """
        with self._lock:
            entry = self._entries.get(handle)
        if entry is None:
            return None
        job = entry.job
        return {
            "state": job.status.value,
            "progress": job.progress,
            "result": entry.result,
            "failure_reason": job.failure_reason,
            "attempts_made": job.attempts_made,
        }

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "pending": len(self._pending),
                "completed": len(self._completed),
                "failed": len(self._failed),
                "tracked": len(self._entries),
            }

    # --- Execution ---

    def _pop_pending(self) -> Optional[str]:
        with self._lock:
            return self._pending.popleft() if self._pending else None

    def process_next(self) -> Optional[str]:
        """
        Run the oldest pending job through all its attempts.

        Returns:
            Handle of the processed job, or None if nothing was pending
        """
        handle = self._pop_pending()
        if handle is None:
            return None
        self._process(handle)
        return handle

    def drain(self, max_workers: int = 1) -> int:
        """
        Process every job pending at call time, up to max_workers concurrently.

        Returns:
            Number of jobs processed
        """
        handles = []
        while True:
            handle = self._pop_pending()
            if handle is None:
                break
            handles.append(handle)

        with ThreadPoolExecutor(max_workers=max(1, max_workers)) as pool:
            for future in [pool.submit(self._process, handle) for handle in handles]:
                future.result()
        return len(handles)

    def _run_attempt(self, job: GenerationJob, final_attempt: bool) -> Any:
        cancel_event = threading.Event()
        executor = ThreadPoolExecutor(max_workers=1)
        future = executor.submit(self.handler, job, final_attempt, cancel_event)
        try:
            return future.result(timeout=self.policy.attempt_timeout_s)
        except FutureTimeout:
            cancel_event.set()
            _log_warning(
                f"{job.resume_id}: attempt {job.attempts_made} exceeded "
                f"{self.policy.attempt_timeout_s:g}s, abandoning"
            )
            raise
        finally:
            executor.shutdown(wait=False)

    def _process(self, handle: str) -> None:
        with self._lock:
            entry = self._entries.get(handle)
        if entry is None:
            return
        job = entry.job

        last_error: Optional[BaseException] = None
        for attempt in range(1, self.policy.attempts + 1):
            job.attempts_made = attempt
            final_attempt = attempt == self.policy.attempts
            log_pipeline_event(event_type="attempt_started", resume_id=handle, source="queue", attempt=attempt)

            try:
                entry.result = self._run_attempt(job, final_attempt)
            except Exception as e:
                last_error = e
                entry.error = e
                if final_attempt:
                    break
                delay = self.policy.backoff(attempt)
                log_pipeline_event(
                    event_type="retry_scheduled",
                    resume_id=handle,
                    source="queue",
                    attempt=attempt,
                    delay_s=delay,
                    error=describe_failure(e),
                )
                _log_info(f"{handle}: retrying in {delay:g}s (attempt {attempt} of {self.policy.attempts} failed)")
                self.sleep(delay)
                continue

            entry.error = None
            self._retire(handle, self._completed, self.policy.keep_completed)
            return

        _log_error(f"{handle}: exhausted {self.policy.attempts} attempts: {last_error}")
        log_pipeline_event(
            event_type="attempts_exhausted",
            resume_id=handle,
            source="queue",
            attempts=self.policy.attempts,
            error=describe_failure(last_error),
        )
        if self.on_exhausted is not None:
            self.on_exhausted(job, last_error)
        else:
            job.fail(describe_failure(last_error), source="queue")
        self._retire(handle, self._failed, self.policy.keep_failed)

    def _retire(self, handle: str, retained: Deque[str], keep: int) -> None:
        with self._lock:
            retained.append(handle)
            while len(retained) > keep:
                evicted = retained.popleft()
                self._entries.pop(evicted, None)
