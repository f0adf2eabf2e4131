"""check-gate CLI - Main entry point."""

from __future__ import annotations

import asyncio
from typing import List, Optional

import typer
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from check_gate import __version__
from check_gate.cli.helpers import console, get_registry, load_settings
from check_gate.config import configure_logging
from check_gate.errors import GateError
from check_gate.poller import await_other_checks
from check_gate.reporting import report_failure

app = typer.Typer(
    name="check-gate",
    help="Wait for the other checks on a commit to finish, then pass or fail",
    add_completion=False,
)


@app.command()
def wait(
    token: Optional[str] = typer.Option(
        None, "--token", help="GitHub token (default: GITHUB_TOKEN)"
    ),
    repository: Optional[str] = typer.Option(
        None, "--repo", "-r", help="Repository as owner/name (default: GITHUB_REPOSITORY)"
    ),
    ref: Optional[str] = typer.Option(
        None, "--ref", help="Commit SHA, branch or tag (default: GITHUB_SHA)"
    ),
    check_name: Optional[str] = typer.Option(
        None,
        "--check-name",
        "-n",
        help="This gate's own check name (default: GATE_CHECK_NAME, then GITHUB_JOB)",
    ),
    timeout_minutes: Optional[float] = typer.Option(
        None, "--timeout", "-t", help="Minutes to wait before failing (default: 10)"
    ),
    page_size: Optional[int] = typer.Option(
        None, "--page-size", help="Check runs per API page, 1-100 (default: 100)"
    ),
    poll_interval: Optional[float] = typer.Option(
        None, "--poll-interval", help="Seconds between polls (default: 0.1)"
    ),
    allow: List[str] = typer.Option(
        [],
        "--allow-conclusion",
        "-a",
        help="Conclusion that counts as passing (can be repeated; default: success)",
    ),
    require_other_checks: Optional[bool] = typer.Option(
        None,
        "--require-other-checks/--no-require-other-checks",
        help="Keep waiting until at least one other check is registered",
    ),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level"),
    log_format: Optional[str] = typer.Option(
        None, "--log-format", help="Log format: text, json or actions (default: text)"
    ),
):
    """Block until every other check on the commit has completed.

    Exits 0 when they all passed, 1 when any failed or the deadline passed,
    and 2 on invalid configuration.
    """
    settings = load_settings(
        {
            "github_token": token,
            "github_repository": repository,
            "github_sha": ref,
            "gate_check_name": check_name,
            "gate_timeout_minutes": timeout_minutes,
            "gate_page_size": page_size,
            "gate_poll_interval_seconds": poll_interval,
            "gate_allowed_conclusions": ",".join(allow) if allow else None,
            "gate_require_other_checks": require_other_checks,
            "log_level": log_level,
            "log_format": log_format,
        }
    )
    configure_logging(
        level=settings.log_level,
        format=settings.log_format,
        sanitize_logs=settings.sanitize_logs,
    )

    try:
        ref_context = settings.ref_context()
        allowed_conclusions = settings.allowed_conclusions
    except ValueError as e:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(e))}")
        raise typer.Exit(2)

    registry = get_registry(settings)
    console.print(
        f"[dim]Gating[/dim] {escape(ref_context.repository)}@{escape(ref_context.ref)} "
        f"[dim](own check:[/dim] {escape(ref_context.check_name)}[dim])[/dim]"
    )

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task("Waiting for other checks...", total=None)
            state = asyncio.run(
                await_other_checks(
                    ref_context,
                    registry,
                    deadline_minutes=settings.gate_timeout_minutes,
                    page_size=settings.gate_page_size,
                    poll_interval=settings.gate_poll_interval_seconds,
                    allowed_conclusions=allowed_conclusions,
                    require_other_checks=settings.gate_require_other_checks,
                )
            )
    except GateError as e:
        report_failure(str(e))
        raise typer.Exit(1)
    finally:
        registry.close()

    console.print(
        f"[green]✓ All other checks passed[/green] "
        f"[dim]({state.pages_settled} page(s), {state.fetches} request(s))[/dim]"
    )


@app.command()
def version():
    """Show check-gate version."""
    console.print(f"[bold]check-gate[/bold] v{__version__}")
    console.print("[dim]Wait-for-other-checks gate for CI pipelines[/dim]")


@app.callback()
def main():
    """
    check-gate - wait for the other checks on a commit, then pass or fail.

    Run 'check-gate --help' for available commands.
    """
    pass


if __name__ == "__main__":
    app()
