#!/usr/bin/env python3
"""
View recent pipeline events from the generation event log.

Provides filtered access to the event log with options to filter by
resume id and event type, and a status timeline per resume.
"""

import json
from typing import Optional

import typer

from cvsmith.utils.event_logging import get_recent_events
from cvsmith.utils.timestamp import format_timestamp

app = typer.Typer(
    add_completion=False,
    help="View recent pipeline events",
)


@app.command()
def main(
    n: int = typer.Option(10, "--num", "-n", help="Number of recent events to show"),
    resume: Optional[str] = typer.Option(
        None, "--resume", "-r", help="Filter to events for this resume id"
    ),
    event_type: Optional[str] = typer.Option(
        None, "--event-type", "-e", help="Filter to events of this type"
    ),
    compact: bool = typer.Option(
        False, "--compact", "-c", help="Print one event per line (no pretty formatting)"
    ),
):
    """
    Show the last n events from the pipeline log.

    Examples:\n

        $ python scripts/tail_log.py                      # Last 10 events

        $ python scripts/tail_log.py -e status_change     # Last 10 status changes

        $ python scripts/tail_log.py -e retry_scheduled   # Recent retries

        $ python scripts/tail_log.py -n 5 -r 3f2a9c...    # Last 5 events for one resume
    """
    events = get_recent_events(n=n, resume_id=resume, event_type=event_type)

    if not events:
        typer.secho("No events found", fg=typer.colors.YELLOW, err=True)
        raise typer.Exit(code=1)

    if not compact:
        filters = []
        if resume:
            filters.append(f"resume={resume}")
        if event_type:
            filters.append(f"type={event_type}")
        suffix = f" [{', '.join(filters)}]" if filters else ""
        typer.secho(f"\nShowing last {len(events)} event(s){suffix}:", fg=typer.colors.BLUE)
        typer.echo("")

    for event in events:
        if compact:
            typer.echo(json.dumps(event))
        else:
            typer.echo(json.dumps(event, indent=2))
            typer.echo("")


@app.command()
def track(
    resume_id: str = typer.Argument(..., help="Resume id to track"),
    relative: bool = typer.Option(
        False, "--relative", help="Show relative timestamps (e.g., '2h ago')"
    ),
):
    """
    Show the status timeline of one generation job, oldest first.

    Examples:\n

        $ python scripts/tail_log.py track 3f2a9c...             # Full history

        $ python scripts/tail_log.py track 3f2a9c... --relative  # Relative timestamps
    """
    events = get_recent_events(n=9999, resume_id=resume_id, event_type="status_change")

    if not events:
        typer.secho(f"No status changes found for {resume_id}", fg=typer.colors.YELLOW)
        return

    center_width = max(30, len(resume_id))
    arrow_indent = center_width // 2

    typer.secho(f"\n{'Status history for'.center(center_width)}", bold=True)
    typer.secho(resume_id.center(center_width), fg=typer.colors.BLUE, bold=True)
    typer.echo("")

    for i, event in enumerate(events):
        typer.echo(event["old_status"].center(center_width))
        typer.echo(
            f"{' ' * arrow_indent}↓ {format_timestamp(event['timestamp'], relative=relative)}"
        )
        if i == len(events) - 1:
            typer.secho(event["new_status"].center(center_width).rstrip(), nl=False)
            typer.secho(" (current)", fg=typer.colors.GREEN)
            if event.get("failure_reason"):
                typer.secho(f"  {event['failure_reason']}", fg=typer.colors.RED)

    typer.echo("")


if __name__ == "__main__":
    app()
