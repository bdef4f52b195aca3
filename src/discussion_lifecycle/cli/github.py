"""GitHub API verification commands."""

import json

import typer
from rich.table import Table

from discussion_lifecycle.cli.common import (
    OutputFormat,
    OutputFormatOption,
    console,
    open_repository,
    run_command,
)
from discussion_lifecycle.config import get_settings
from discussion_lifecycle.github import RateLimitPool, RateLimitStatus

app = typer.Typer(help="GitHub API commands")

VIEWER_QUERY = """
query Viewer {
  viewer { login }
  rateLimit { limit remaining used resetAt }
}
"""

RATE_LIMIT_QUERY = """
query RateLimit {
  rateLimit { limit remaining used resetAt }
}
"""

_STATUS_STYLES = {
    RateLimitStatus.HEALTHY: "[green]healthy[/green]",
    RateLimitStatus.WARNING: "[yellow]warning[/yellow]",
    RateLimitStatus.CRITICAL: "[red]critical[/red]",
    RateLimitStatus.EXHAUSTED: "[bold red]exhausted[/bold red]",
}


def _require_token() -> None:
    if not get_settings().github_token:
        console.print("[red]Error:[/red] GITHUB_TOKEN not set in environment")
        raise typer.Exit(1)


def _format_time_remaining(seconds: int) -> str:
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m {seconds % 60}s"
    return f"{seconds // 3600}h {(seconds % 3600) // 60}m"


@app.command("test")
def test_connection() -> None:
    """Test GraphQL connectivity, token validity and category access.

    Examples:
        ghdiscussions github test
    """
    _require_token()

    def _test() -> None:
        with open_repository() as repo:
            console.print("[bold]Checking token...[/bold]")
            data = repo.transport.execute(VIEWER_QUERY)
            console.print(f"  Authenticated as {data['viewer']['login']}")

            monitor = repo.transport.rate_monitor
            pool = monitor.get_pool_limit(RateLimitPool.GRAPHQL)
            if pool is not None:
                console.print(
                    f"  Rate limit: {pool.remaining}/{pool.limit} "
                    f"(resets at {pool.reset_at.strftime('%H:%M:%S UTC')})"
                )
                if monitor.get_status(RateLimitPool.GRAPHQL) != RateLimitStatus.HEALTHY:
                    console.print("[yellow]Warning:[/yellow] Low rate limit remaining")

            console.print(f"\n[bold]Fetching categories of {repo.repository}...[/bold]")
            categories = repo.categories()
            table = Table(title=f"Discussion categories in {repo.repository}")
            table.add_column("Name", style="cyan")
            table.add_column("Answerable")
            for category in categories:
                table.add_row(category.name, "yes" if category.answerable else "no")
            console.print(table)

            console.print("\n[green]GitHub API connection successful![/green]")

    run_command(_test, error_prefix="GitHub API test failed")


@app.command("rate-limit")
def show_rate_limit(output_format: OutputFormatOption = OutputFormat.TEXT) -> None:
    """Show the GraphQL rate limit of the configured token.

    Examples:
        ghdiscussions github rate-limit
        ghdiscussions github rate-limit --format json
    """
    _require_token()

    def _check() -> None:
        with open_repository() as repo:
            repo.transport.execute(RATE_LIMIT_QUERY)
            monitor = repo.transport.rate_monitor

            if output_format == OutputFormat.JSON:
                console.print_json(json.dumps(monitor.to_dict()))
                return

            table = Table(title="GitHub API Rate Limits")
            table.add_column("Pool", style="bold")
            table.add_column("Status")
            table.add_column("Remaining", justify="right")
            table.add_column("Limit", justify="right")
            table.add_column("Used %", justify="right")
            table.add_column("Resets In", justify="right")

            snapshot = monitor.snapshot
            for pool, limit in (snapshot.pools.items() if snapshot else []):
                table.add_row(
                    pool.value,
                    _STATUS_STYLES[monitor.get_status(pool)],
                    str(limit.remaining),
                    str(limit.limit),
                    f"{limit.usage_percent:.1f}%",
                    _format_time_remaining(monitor.time_until_reset(pool)),
                )
            console.print(table)

    run_command(_check, error_prefix="Rate limit check failed")
