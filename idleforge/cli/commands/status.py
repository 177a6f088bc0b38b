"""``idleforge status STATUS``: send a status value to the endpoint by hand.

This is how an operator clears an Errored app: there is no automatic
transition out of Errored.
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from idleforge.config import ForgeConfig
from idleforge.core.controller import build_status_reporter
from idleforge.models.status import StatusValue

console = Console()


def status_cmd(
    status: StatusValue = typer.Argument(..., help="Pending, Active or Errored."),
) -> None:
    """Emit a status update to the configured endpoint."""
    config = ForgeConfig()
    if not config.status_reporting_enabled:
        console.print("[yellow]No status endpoint configured; nothing sent.[/yellow]")
        return
    asyncio.run(build_status_reporter(config).emit(status))
    console.print(f"Sent [bold]{status.value}[/bold] to {config.status_url}")
