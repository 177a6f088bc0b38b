"""``idleforge watch``: follow the session host's events and run the loop.

Subscribes to the host's event stream and dispatches every lifecycle event
until the stream closes or the user interrupts.
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from idleforge.bridge.session_host import SessionHostError
from idleforge.config import ForgeConfig
from idleforge.core.controller import build_dispatcher, build_session_host

console = Console()


async def _watch(config: ForgeConfig) -> None:
    async with build_session_host(config) as host:
        dispatcher = build_dispatcher(config, session_host=host)
        await dispatcher.run(host.iter_events())


def watch_cmd(
    host_url: str = typer.Option(
        None,
        "--host",
        help="Session host URL (defaults to IDLEFORGE_SESSION_HOST_URL).",
    ),
    project_root: str = typer.Option(
        None,
        "--project",
        "-p",
        help="Project root to build and release.",
    ),
) -> None:
    """Watch session events and build, retry, and release automatically."""
    overrides: dict[str, object] = {}
    if host_url:
        overrides["session_host_url"] = host_url
    if project_root:
        overrides["project_root"] = project_root
    config = ForgeConfig(**overrides)

    console.print(
        f"[bold cyan]Watching[/bold cyan] {config.session_host_url} "
        f"[dim](project: {config.project_root}, build: {config.build_command})[/dim]"
    )
    try:
        asyncio.run(_watch(config))
    except KeyboardInterrupt:
        console.print("[dim]Stopped.[/dim]")
    except SessionHostError as exc:
        console.print(f"[bold red]Event stream error:[/bold red] {exc}")
        raise typer.Exit(code=1)
