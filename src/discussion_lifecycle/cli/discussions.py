"""Dormancy policy commands."""

import typer

from discussion_lifecycle.cli.common import (
    DaysOption,
    DryRunOption,
    OutputFormat,
    OutputFormatOption,
    open_repository,
    print_discussions,
    print_pass,
    run_command,
)
from discussion_lifecycle.discussions import LifecycleActions

app = typer.Typer(help="Discussion dormancy commands")


@app.command("dormant")
def mark_dormant(
    days: DaysOption = None,
    dry_run: DryRunOption = False,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Label dormant discussions inactive and leave an explanatory comment.

    Examples:
        ghdiscussions discussions dormant --dry-run
        ghdiscussions discussions dormant --days 60
    """

    def _run() -> None:
        with open_repository() as repo:
            if dry_run:
                print_discussions(repo.dormant_candidates(days), "Dormant discussions", output_format)
                return
            print_pass(lambda: LifecycleActions(repo).run_dormancy_pass(days), output_format)

    run_command(_run, error_prefix="Dormancy pass failed")


@app.command("close")
def close_inactive(
    days: DaysOption = None,
    dry_run: DryRunOption = False,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Close discussions that stayed inactive through the grace period."""

    def _run() -> None:
        with open_repository() as repo:
            if dry_run:
                print_discussions(repo.closable(days), "Closable discussions", output_format)
                return
            print_pass(lambda: LifecycleActions(repo).run_close_pass(days), output_format)

    run_command(_run, error_prefix="Close pass failed")


@app.command("reactivated")
def clear_reactivated(
    dry_run: DryRunOption = False,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """Remove the inactivity label where someone has responded since."""

    def _run() -> None:
        with open_repository() as repo:
            if dry_run:
                print_discussions(repo.reactivated(), "Reactivated discussions", output_format)
                return
            print_pass(lambda: LifecycleActions(repo).run_reactivation_pass(), output_format)

    run_command(_run, error_prefix="Reactivation pass failed")


@app.command("unanswered")
def list_unanswered(
    days: DaysOption = None,
    output_format: OutputFormatOption = OutputFormat.TEXT,
) -> None:
    """List recent unanswered questions in answerable categories."""

    def _run() -> None:
        with open_repository() as repo:
            print_discussions(
                repo.all_unanswered_questions(days), "Unanswered questions", output_format
            )

    run_command(_run, error_prefix="Query failed")
