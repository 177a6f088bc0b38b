"""Build runner: invokes the external build command and captures its outcome.

A failing build is a normal result carried in ``BuildAttempt.exit_code``.
Only a command that cannot be started at all raises (``LaunchFailure``).
String commands run through the shell, so ``tsc && vite build`` fails when
either step fails; a program the shell cannot find is exit code 127, an
ordinary failed build.
A build that exceeds the timeout is killed and reported as a failed attempt
so it feeds the retry loop like any other failure.
"""

from __future__ import annotations

import asyncio
import logging
import os
import shlex
import signal
import time
from pathlib import Path

from idleforge.models.build import BuildAttempt

logger = logging.getLogger(__name__)

TIMED_OUT_EXIT_CODE = -1


class LaunchFailure(RuntimeError):
    """Raised when the build command could not be started."""


class BuildRunner:
    """Runs the project's build command in the project root.

    Parameters
    ----------
    command:
        The build command.  A string is run by the shell; an argv list is
        executed directly.
    cwd:
        Working directory for the build (the project root).
    timeout_seconds:
        Upper bound on a single build.  ``None`` disables the bound.
    """

    def __init__(
        self,
        command: str | list[str],
        cwd: Path,
        *,
        timeout_seconds: float | None = 600.0,
    ) -> None:
        if isinstance(command, str):
            if not command.strip():
                raise ValueError("Build command must not be empty")
            self._shell_command: str | None = command
            self._argv: list[str] = []
        else:
            if not command:
                raise ValueError("Build command must not be empty")
            self._shell_command = None
            self._argv = list(command)
        self._cwd = Path(cwd)
        self._timeout = timeout_seconds

    @property
    def uses_shell(self) -> bool:
        return self._shell_command is not None

    @property
    def display(self) -> str:
        """The command as it would be typed at a prompt."""
        if self._shell_command is not None:
            return self._shell_command
        return shlex.join(self._argv)

    async def run(self) -> BuildAttempt:
        """Execute the build once and return its outcome."""
        started = time.monotonic()
        logger.info("Running build: %s (cwd=%s)", self.display, self._cwd)
        try:
            proc = await self._spawn()
        except OSError as exc:
            raise LaunchFailure(f"Could not start build command {self.display!r}: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            self._kill(proc)
            await proc.wait()
            elapsed = time.monotonic() - started
            logger.warning("Build timed out after %.1fs; process killed", elapsed)
            return BuildAttempt(
                exit_code=TIMED_OUT_EXIT_CODE,
                stderr_text=f"Build timed out after {self._timeout} seconds.",
                duration_seconds=elapsed,
                timed_out=True,
            )

        elapsed = time.monotonic() - started
        attempt = BuildAttempt(
            exit_code=proc.returncode if proc.returncode is not None else TIMED_OUT_EXIT_CODE,
            stdout_text=stdout.decode("utf-8", errors="replace"),
            stderr_text=stderr.decode("utf-8", errors="replace"),
            duration_seconds=elapsed,
        )
        if attempt.succeeded:
            logger.info("Build passed in %.1fs", elapsed)
        else:
            logger.info("Build failed with exit code %d in %.1fs", attempt.exit_code, elapsed)
        return attempt

    async def _spawn(self) -> asyncio.subprocess.Process:
        if self._shell_command is not None:
            # Own process group so a timeout also kills the shell's children
            return await asyncio.create_subprocess_shell(
                self._shell_command,
                cwd=str(self._cwd),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                start_new_session=os.name == "posix",
            )
        return await asyncio.create_subprocess_exec(
            *self._argv,
            cwd=str(self._cwd),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )

    def _kill(self, proc: asyncio.subprocess.Process) -> None:
        try:
            if self._shell_command is not None and os.name == "posix":
                os.killpg(proc.pid, signal.SIGKILL)
            else:
                proc.kill()
        except ProcessLookupError:
            pass
