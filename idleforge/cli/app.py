"""Main Typer application: imports and registers all CLI commands.

Entry point: ``idleforge`` (configured via pyproject.toml console_scripts).

Commands: watch, idle, version, status, config.
"""

from __future__ import annotations

import typer

from idleforge.cli.commands.idle import idle_cmd
from idleforge.cli.commands.status import status_cmd
from idleforge.cli.commands.version import version_cmd
from idleforge.cli.commands.watch import watch_cmd
from idleforge.cli.logging_setup import configure_logging
from idleforge.config import ForgeConfig

app = typer.Typer(
    name="idleforge",
    help="idleforge: rebuild on idle, feed errors back, release on success.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to IDLEFORGE_LOG_LEVEL).",
    ),
) -> None:
    """Configure logging before any command runs."""
    configure_logging(log_level or ForgeConfig().log_level)


# Register subcommands
app.command(name="watch", help="Follow session events and run the build loop.")(watch_cmd)
app.command(name="idle", help="Run one build cycle for a session.")(idle_cmd)
app.command(name="version", help="Show current and next release version.")(version_cmd)
app.command(name="status", help="Send a status value to the endpoint.")(status_cmd)


@app.command(name="config", help="Show the effective configuration.")
def config_cmd() -> None:
    """Print every configuration value as a table."""
    from rich.console import Console
    from rich.table import Table

    console = Console()
    config = ForgeConfig()

    table = Table(title="idleforge configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    for name, value in config.model_dump().items():
        table.add_row(name, str(value))
    table.add_row(
        "status_reporting_enabled",
        "[green]Yes[/green]" if config.status_reporting_enabled else "[yellow]No[/yellow]",
    )
    console.print(table)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
