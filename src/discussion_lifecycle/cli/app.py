"""Main CLI application for discussion lifecycle automation."""

from typing import Annotated

import typer
from rich.console import Console

from discussion_lifecycle import __version__
from discussion_lifecycle.cli import discussions as discussions_cmd
from discussion_lifecycle.cli import github as github_cmd
from discussion_lifecycle.cli import incident as incident_cmd
from discussion_lifecycle.config import get_settings
from discussion_lifecycle.logging import setup_logging

app = typer.Typer(
    name="ghdiscussions",
    help="Lifecycle automation for GitHub Discussions.",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"ghdiscussions version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable debug logging.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-error output (WARNING level).",
        ),
    ] = False,
) -> None:
    """Label, comment on, and close GitHub Discussions by lifecycle rules."""
    settings = get_settings()

    setup_logging(
        level=settings.log_level,
        verbose=verbose,
        quiet=quiet,
        config=settings.logging,
    )


app.add_typer(discussions_cmd.app, name="discussions")
app.add_typer(incident_cmd.app, name="incident")
app.add_typer(github_cmd.app, name="github")


if __name__ == "__main__":
    app()
