"""``idleforge idle SESSION_ID``: run one build cycle for a session.

Useful for driving the loop by hand or from another tool's hook: it builds,
then either sends build feedback to the session, marks it Errored, or
releases and marks it Active.  Each run is a new process, so the session's
retry counter is read from and written back to ``retry_state_path`` and the
retry budget holds across runs.
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from idleforge.config import ForgeConfig
from idleforge.core.build_runner import LaunchFailure
from idleforge.core.controller import build_dispatcher, build_session_host
from idleforge.core.retry_state import RetryStateFile
from idleforge.models.events import EventKind, LifecycleEvent
from idleforge.models.release import IdleOutcome

console = Console()

_OUTCOME_STYLE = {
    IdleOutcome.RELEASED: "bold green",
    IdleOutcome.RETRY_REQUESTED: "bold yellow",
    IdleOutcome.ERRORED: "bold red",
}


async def _run_once(config: ForgeConfig, session_id: str) -> IdleOutcome | None:
    state = RetryStateFile(config.retry_state_file)
    async with build_session_host(config) as host:
        dispatcher = build_dispatcher(config, session_host=host)
        recorded = state.get(session_id)
        if recorded is not None:
            dispatcher.controller.restore({session_id: recorded})
        try:
            return await dispatcher.dispatch(
                LifecycleEvent(kind=EventKind.SESSION_IDLE, session_id=session_id)
            )
        finally:
            state.put(session_id, dispatcher.controller.retry_count(session_id))
            await dispatcher.aclose()


def idle_cmd(
    session_id: str = typer.Argument(..., help="The session that went idle."),
    project_root: str = typer.Option(
        None,
        "--project",
        "-p",
        help="Project root to build and release.",
    ),
) -> None:
    """Run a single idle cycle (build, then feedback or release)."""
    config = ForgeConfig(project_root=project_root) if project_root else ForgeConfig()
    try:
        outcome = asyncio.run(_run_once(config, session_id))
    except LaunchFailure as exc:
        console.print(f"[bold red]Build could not start:[/bold red] {exc}")
        raise typer.Exit(code=2)

    if outcome is None:
        raise typer.Exit(code=1)
    style = _OUTCOME_STYLE.get(outcome, "bold")
    console.print(f"Session [cyan]{session_id}[/cyan]: [{style}]{outcome.value}[/{style}]")
    if outcome == IdleOutcome.ERRORED:
        raise typer.Exit(code=1)
