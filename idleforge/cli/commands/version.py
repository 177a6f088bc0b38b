"""``idleforge version``: show the manifest's current and next version."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from idleforge.config import ForgeConfig
from idleforge.core.version_bumper import ManifestError, VersionBumper

console = Console()


def version_cmd(
    manifest: Path = typer.Option(
        None,
        "--manifest",
        "-m",
        help="Manifest file (defaults to IDLEFORGE_MANIFEST_PATH under the project root).",
    ),
) -> None:
    """Show the current release version and the one the next release will use."""
    path = manifest or ForgeConfig().manifest_file
    bumper = VersionBumper(path)
    try:
        current = bumper.read_current()
    except ManifestError as exc:
        console.print(f"[bold red]Manifest error:[/bold red] {exc}")
        raise typer.Exit(code=1)

    upcoming = bumper.next(current)
    console.print(f"[bold]Manifest:[/bold] {path}")
    console.print(f"[bold]Current:[/bold]  {current}")
    console.print(f"[bold]Next:[/bold]     {upcoming} [dim](tag {upcoming.tag})[/dim]")
