"""Thin async wrapper over the ``git`` command line.

Each method runs one git command in the repository root and raises
``VcsCommandError`` on a non-zero exit, a timeout, or a missing executable.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class VcsCommandError(RuntimeError):
    """Raised when a git command fails or cannot be run."""

    def __init__(self, args: list[str], message: str, *, returncode: int | None = None) -> None:
        super().__init__(f"git {' '.join(args)}: {message}")
        self.git_args = list(args)
        self.returncode = returncode


class GitClient:
    """Runs git commands for the release flow.

    Parameters
    ----------
    repo_root:
        Working tree to operate on.
    timeout_seconds:
        Upper bound for each individual command.
    executable:
        The git binary to invoke.
    """

    def __init__(
        self,
        repo_root: Path,
        *,
        timeout_seconds: float | None = 120.0,
        executable: str = "git",
    ) -> None:
        self._root = Path(repo_root)
        self._timeout = timeout_seconds
        self._executable = executable

    # ------------------------------------------------------------------
    # Release steps
    # ------------------------------------------------------------------

    async def configure_identity(self, name: str, email: str) -> None:
        await self.run("config", "user.name", name)
        await self.run("config", "user.email", email)

    async def stage_all(self) -> None:
        await self.run("add", ".")

    async def commit(self, message: str) -> None:
        await self.run("commit", "-m", message)

    async def tag(self, name: str, message: str) -> None:
        """Create an annotated tag."""
        await self.run("tag", "-a", name, "-m", message)

    async def delete_tag(self, name: str) -> None:
        await self.run("tag", "-d", name)

    async def push(self, remote: str, branch: str) -> None:
        """Push *branch* and all tags to *remote*."""
        await self.run("push", remote, branch, "--tags")

    # ------------------------------------------------------------------
    # Command execution
    # ------------------------------------------------------------------

    async def run(self, *args: str) -> str:
        """Run ``git <args>`` and return its stdout."""
        argv = list(args)
        logger.debug("git %s (cwd=%s)", " ".join(argv), self._root)
        try:
            proc = await asyncio.create_subprocess_exec(
                self._executable,
                *argv,
                cwd=str(self._root),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise VcsCommandError(argv, f"cannot start {self._executable}: {exc}") from exc

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise VcsCommandError(argv, f"timed out after {self._timeout} seconds") from None

        if proc.returncode != 0:
            detail = stderr.decode("utf-8", errors="replace").strip() or stdout.decode(
                "utf-8", errors="replace"
            ).strip()
            raise VcsCommandError(
                argv,
                f"exit code {proc.returncode}: {detail}",
                returncode=proc.returncode,
            )
        return stdout.decode("utf-8", errors="replace")
