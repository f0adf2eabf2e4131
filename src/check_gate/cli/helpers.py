"""Shared helpers for CLI modules: settings loading and client factories."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

if TYPE_CHECKING:
    from check_gate.config import Settings
    from check_gate.registry import GitHubCheckRegistry

console = Console(stderr=True)


def load_settings(overrides: Dict[str, Any]) -> Settings:
    """Read settings from the environment and apply CLI overrides.

    Options left unset on the command line (``None``) keep the
    environment's value. Exits with status 2 on invalid configuration.
    """
    from check_gate.config import Settings

    try:
        return Settings(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as e:
        console.print(f"[red]Invalid configuration:[/red] {escape(str(e))}")
        raise typer.Exit(2)


def get_registry(settings: Settings) -> GitHubCheckRegistry:
    """Create the GitHub check registry for the configured token."""
    from check_gate.registry import GitHubCheckRegistry

    if not settings.github_token:
        console.print("[red]GitHub token not configured.[/red]")
        console.print("Set GITHUB_TOKEN or pass --token.")
        raise typer.Exit(2)
    return GitHubCheckRegistry(
        settings.github_token,
        base_url=settings.github_api_url,
        timeout=settings.gate_request_timeout_seconds,
        retries=settings.gate_registry_retries,
    )
