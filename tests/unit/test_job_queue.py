"""Unit tests for the in-process job queue."""

import pytest

from cvsmith.contexts.generation.jobs import GenerationJob, JobStatus
from cvsmith.contexts.generation.job_queue import InMemoryJobQueue, QueuePolicy
from cvsmith.utils.event_logging import get_recent_events

FAST_POLICY = QueuePolicy(attempts=3, backoff_delay_s=2.0, attempt_timeout_s=5.0)


def make_job(resume_id="r-1"):
    return GenerationJob(resume_id=resume_id, user_id="u-fry", job_description_id="jd", template_id="t")


def completing_handler(job, final_attempt, cancel_event):
    job.start()
    job.complete()
    return f"done:{job.resume_id}"


class FlakyHandler:
    """Fails a fixed number of times, then completes."""

    def __init__(self, failures):
        self.failures = failures
        self.calls = []

    def __call__(self, job, final_attempt, cancel_event):
        self.calls.append(final_attempt)
        job.start()
        if len(self.calls) <= self.failures:
            raise RuntimeError(f"boom {len(self.calls)}")
        job.complete()
        return "ok"


@pytest.mark.unit
def test_policy_backoff_doubles():
    """Test exponential backoff from the base delay."""
    assert [FAST_POLICY.backoff(n) for n in (1, 2, 3)] == [2.0, 4.0, 8.0]


@pytest.mark.unit
def test_policy_from_config():
    """Test that defaults come from the generation config."""
    assert QueuePolicy.from_config() == QueuePolicy()


@pytest.mark.unit
def test_successful_job():
    """Test a single successful attempt and its status."""
    queue = InMemoryJobQueue(completing_handler, policy=FAST_POLICY, sleep=lambda s: None)
    handle = queue.enqueue(make_job())

    assert queue.get_status(handle)["state"] == "pending"
    assert queue.process_next() == handle

    status = queue.get_status(handle)
    assert status["state"] == "completed"
    assert status["progress"] == 100
    assert status["result"] == "done:r-1"
    assert status["attempts_made"] == 1
    assert queue.process_next() is None


@pytest.mark.unit
def test_retry_then_success():
    """Test backoff sleeps between failed attempts."""
    sleeps = []
    handler = FlakyHandler(failures=2)
    queue = InMemoryJobQueue(handler, policy=FAST_POLICY, sleep=sleeps.append)
    handle = queue.enqueue(make_job())

    queue.process_next()

    assert sleeps == [2.0, 4.0]
    assert handler.calls == [False, False, True]
    assert queue.get_status(handle)["state"] == "completed"
    assert queue.get_status(handle)["attempts_made"] == 3

    retries = get_recent_events(resume_id=handle, event_type="retry_scheduled")
    assert [e["delay_s"] for e in retries] == [2.0, 4.0]


@pytest.mark.unit
def test_exhaustion_calls_hook_once():
    """Test that the exhausted hook receives the last error."""
    seen = []
    queue = InMemoryJobQueue(
        FlakyHandler(failures=5),
        policy=FAST_POLICY,
        sleep=lambda s: None,
        on_exhausted=lambda job, exc: seen.append((job.resume_id, str(exc))),
    )
    queue.enqueue(make_job())

    queue.process_next()

    assert seen == [("r-1", "boom 3")]
    assert queue.stats()["failed"] == 1


@pytest.mark.unit
def test_exhaustion_without_hook_fails_job():
    """Test the default terminal failure with a generic reason."""
    queue = InMemoryJobQueue(FlakyHandler(failures=5), policy=FAST_POLICY, sleep=lambda s: None)
    handle = queue.enqueue(make_job())

    queue.process_next()

    status = queue.get_status(handle)
    assert status["state"] == "failed"
    assert status["failure_reason"] == (
        "Resume generation failed due to an unexpected error. Please try again."
    )


@pytest.mark.unit
def test_attempt_timeout_abandons_and_signals_cancel():
    """Test that an overrunning attempt is abandoned and told to stop."""
    cancel_events = []

    def hanging(job, final_attempt, cancel_event):
        job.start()
        cancel_events.append(cancel_event)
        cancel_event.wait(5)

    policy = QueuePolicy(attempts=1, attempt_timeout_s=0.2)
    queue = InMemoryJobQueue(hanging, policy=policy, sleep=lambda s: None)
    handle = queue.enqueue(make_job())

    queue.process_next()

    status = queue.get_status(handle)
    assert status["state"] == "failed"
    assert status["failure_reason"] == "Resume generation timed out. Please try again."
    assert cancel_events[0].is_set()


@pytest.mark.unit
def test_retention_evicts_oldest():
    """Test that finished jobs beyond the retention bound are forgotten."""
    policy = QueuePolicy(attempts=1, keep_completed=2)
    queue = InMemoryJobQueue(completing_handler, policy=policy, sleep=lambda s: None)
    handles = [queue.enqueue(make_job(f"r-{i}")) for i in range(3)]

    assert queue.drain() == 3

    assert queue.get_status(handles[0]) is None
    assert queue.get(handles[0]) is None
    assert queue.get_status(handles[2])["state"] == "completed"
    assert queue.stats() == {"pending": 0, "completed": 2, "failed": 0, "tracked": 2}


@pytest.mark.unit
def test_drain_runs_jobs_concurrently():
    """Test that drain processes every pending job with several workers."""
    queue = InMemoryJobQueue(completing_handler, policy=FAST_POLICY, sleep=lambda s: None)
    handles = [queue.enqueue(make_job(f"r-{i}")) for i in range(4)]

    assert queue.drain(max_workers=2) == 4
    assert all(queue.get(h).status is JobStatus.COMPLETED for h in handles)
