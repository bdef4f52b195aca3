"""Incident status commands."""

import json
from typing import Annotated

import typer

from discussion_lifecycle.cli.common import (
    OutputFormat,
    OutputFormatOption,
    console,
    open_repository,
    print_discussions,
    run_command,
)
from discussion_lifecycle.discussions import IncidentTracker, TransitionResult

app = typer.Typer(help="Incident discussion commands")

DiscussionIdArgument = Annotated[
    str,
    typer.Argument(help="Node id of the incident discussion"),
]


def _print_transition(result: TransitionResult, output_format: OutputFormat) -> None:
    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(result.to_dict()))
        return
    console.print(
        f"[green]#{result.discussion.number}[/green] "
        f"{result.previous.value} -> {result.current.value} "
        f"({', '.join(result.completed) or 'no changes'})"
    )


def _transition(discussion_id: str, output_format: OutputFormat, move: str) -> None:
    def _run() -> None:
        with open_repository() as repo:
            tracker = IncidentTracker(repo)
            incident = repo.get_discussion(discussion_id)
            result: TransitionResult = getattr(tracker, move)(incident)
            _print_transition(result, output_format)

    run_command(_run, error_prefix="Transition failed")


@app.command("list")
def list_incidents(output_format: OutputFormatOption = OutputFormat.TEXT) -> None:
    """List open incident discussions with their status."""

    def _run() -> None:
        with open_repository() as repo:
            tracker = IncidentTracker(repo)
            incidents = tracker.incidents()
            if output_format == OutputFormat.JSON:
                print_discussions(incidents, "Incidents", output_format)
                return
            for incident in incidents:
                status = tracker.status_of(incident).value
                console.print(f"#{incident.number} \\[{status}] {incident.title}")
            console.print(f"{len(incidents)} open incident(s)")

    run_command(_run, error_prefix="Query failed")


@app.command("update")
def mark_update(
    discussion_id: DiscussionIdArgument,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Mark an incident as having a status update."""
    _transition(discussion_id, output_format, "mark_update")


@app.command("resolve")
def mark_resolved(
    discussion_id: DiscussionIdArgument,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Mark an incident resolved and post the summary comment."""
    _transition(discussion_id, output_format, "mark_resolved")


@app.command("close")
def mark_closed(
    discussion_id: DiscussionIdArgument,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Close an incident and post the summary comment."""
    _transition(discussion_id, output_format, "mark_closed")


@app.command("reopen")
def reopen(
    discussion_id: DiscussionIdArgument,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Reopen an incident and reset it to open."""
    _transition(discussion_id, output_format, "reopen")

