"""Common CLI option factories and helpers.

This module centralizes reusable CLI options and provides:
- `run_command`: unified error handling for CLI commands
- `open_repository`: transport + repository wiring from settings
- Output helpers shared by the command modules
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from enum import Enum
from typing import Annotated, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from discussion_lifecycle.config import Settings, get_settings
from discussion_lifecycle.discussions import DiscussionRepository, StepResult
from discussion_lifecycle.github import (
    DiscussionLifecycleError,
    GraphQLTransport,
    PassInterruptedError,
)
from discussion_lifecycle.schemas import Discussion

console = Console()

T = TypeVar("T")


class OutputFormat(str, Enum):
    """Output format for CLI commands."""

    TEXT = "text"
    """Human-readable text output."""

    JSON = "json"
    """Machine-readable JSON output."""


def run_command(func: Callable[[], T], *, error_prefix: str = "Error") -> T:
    """Run a command body, turning engine errors into exit code 1.

    Raises:
        typer.Exit: Re-raised from deliberate exits, or raised with code 1 on error
    """
    try:
        return func()
    except typer.Exit:
        raise
    except (DiscussionLifecycleError, ValueError) as e:
        console.print(f"[red]{error_prefix}:[/red] {e}")
        raise typer.Exit(1) from None


@contextmanager
def open_repository(settings: Settings | None = None) -> Iterator[DiscussionRepository]:
    """Yield a repository bound to a fresh transport for the configured credential."""
    settings = settings or get_settings()
    with GraphQLTransport(settings) as transport:
        yield DiscussionRepository(transport, settings)


def print_discussions(
    discussions: list[Discussion],
    title: str,
    output_format: OutputFormat,
) -> None:
    if output_format == OutputFormat.JSON:
        payload = [
            {
                "number": d.number,
                "title": d.title,
                "url": d.url,
                "category": d.category,
                "updated_at": d.updated_at.isoformat(),
            }
            for d in discussions
        ]
        console.print_json(json.dumps(payload))
        return

    if not discussions:
        console.print(f"[dim]{title}: none[/dim]")
        return

    table = Table(title=title)
    table.add_column("Number", style="cyan")
    table.add_column("Title", max_width=50)
    table.add_column("Category")
    table.add_column("Updated")
    for d in discussions:
        display_title = d.title[:47] + "..." if len(d.title) > 50 else d.title
        table.add_row(str(d.number), display_title, d.category, d.updated_at.strftime("%Y-%m-%d"))
    console.print(table)


def print_results(results: list[StepResult], output_format: OutputFormat) -> None:
    """Print step results and exit with code 1 if any failed."""
    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps([result.to_dict() for result in results]))
    else:
        for result in results:
            if result.success:
                done = ", ".join(result.completed) or "nothing"
                console.print(f"[green]#{result.discussion.number}[/green] {result.action}: {done}")
            else:
                console.print(
                    f"[red]#{result.discussion.number}[/red] {result.action} failed: {result.error}"
                )
        console.print(f"{len(results)} discussion(s) processed")

    if any(not result.success for result in results):
        raise typer.Exit(1)


def print_pass(run: Callable[[], list[StepResult]], output_format: OutputFormat) -> None:
    """Run a lifecycle pass and print its results, also when it was stopped early."""
    try:
        results = run()
    except PassInterruptedError as e:
        if output_format == OutputFormat.TEXT:
            console.print(f"[red]Pass stopped:[/red] {e.cause}")
        results = e.results
    print_results(results, output_format)


# Option types shared by the command modules

OutputFormatOption = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format",
    ),
]

DryRunOption = Annotated[
    bool,
    typer.Option(
        "--dry-run",
        help="List the matching discussions without changing anything.",
    ),
]

DaysOption = Annotated[
    int | None,
    typer.Option(
        "--days",
        "-d",
        min=0,
        help="Threshold in days (defaults to the configured value).",
    ),
]
