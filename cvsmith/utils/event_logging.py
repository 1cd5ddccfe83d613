"""
Pipeline event logging utilities for cvsmith.

Provides uniform interfaces for logging generation events to a JSON Lines
event log. This is the cross-context record of job lifecycle changes.

For detailed within-context logging, use cvsmith.utils.logger instead.

Usage:
    from cvsmith.utils.event_logging import log_status_change, log_pipeline_event

    log_status_change(
        resume_id="3f2c9a",
        old_status="pending",
        new_status="processing",
        source="generation",
    )

    log_pipeline_event(
        event_type="compilation_completed",
        resume_id="3f2c9a",
        source="rendering",
        page_count=1,
    )
"""

import json
import os
import threading
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from cvsmith.utils.timestamp import now_exact

load_dotenv()
LOGS_PATH = Path(os.getenv("LOGS_PATH", "outs/logs"))
PIPELINE_EVENTS_FILE = Path(
    os.getenv("PIPELINE_EVENTS_FILE", str(LOGS_PATH / "generation_events.log"))
)

_write_lock = threading.Lock()


def _events_file(events_file: Optional[Path]) -> Path:
    # Resolved at call time so tests and callers can redirect the log
    return Path(events_file) if events_file is not None else PIPELINE_EVENTS_FILE


def log_pipeline_event(
    event_type: str,
    resume_id: str,
    source: str,
    events_file: Optional[Path] = None,
    **extra_fields,
) -> None:
    """
    Append an event to the pipeline event log.

    Events are written in JSON Lines format (one JSON object per line), which
    allows streaming reads and filtering by event_type, resume_id, or source.

    Args:
        event_type: Type of event (e.g., "status_change", "compilation_completed")
        resume_id: Resume record identifier
        source: Event source (e.g., "generation", "rendering", "cli")
        events_file: Override log location (default: PIPELINE_EVENTS_FILE)
        **extra_fields: Additional event-specific fields (must be JSON serializable)
    """
    path = _events_file(events_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    event = {
        "timestamp": now_exact(),
        "event_type": event_type,
        "resume_id": resume_id,
        "source": source,
        **extra_fields,
    }

    with _write_lock, open(path, "a", encoding="utf-8") as f:
        f.write(json.dumps(event, default=str) + "\n")


def log_status_change(
    resume_id: str,
    old_status: str,
    new_status: str,
    source: str,
    events_file: Optional[Path] = None,
    **extra_fields,
) -> None:
    """
    Log a generation job status change.

    Pure logging function: it does not update any job record.
    """
    log_pipeline_event(
        event_type="status_change",
        resume_id=resume_id,
        source=source,
        events_file=events_file,
        old_status=old_status,
        new_status=new_status,
        **extra_fields,
    )


def get_recent_events(
    n: int = 10,
    resume_id: Optional[str] = None,
    event_type: Optional[str] = None,
    events_file: Optional[Path] = None,
) -> list[dict]:
    """
    Get the last n events from the pipeline log, optionally filtered.

    Args:
        n: Number of recent events to return (default: 10)
        resume_id: Only events for this resume (optional)
        event_type: Only events of this type (optional)
        events_file: Override log location (default: PIPELINE_EVENTS_FILE)

    Returns:
        List of event dicts (most recent last)
    """
    path = _events_file(events_file)
    if not path.exists():
        return []

    events = []
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            try:
                events.append(json.loads(line.strip()))
            except json.JSONDecodeError:
                # Skip malformed lines
                continue

    if resume_id:
        events = [e for e in events if e.get("resume_id") == resume_id]

    if event_type:
        events = [e for e in events if e.get("event_type") == event_type]

    return events[-n:] if len(events) > n else events
