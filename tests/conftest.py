"""Shared test fixtures and collaborator doubles for idleforge."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from idleforge.bridge.session_host import SessionHostError
from idleforge.core.release_publisher import ReleasePublisher
from idleforge.core.retry_controller import RetryController
from idleforge.core.vcs import VcsCommandError
from idleforge.core.version_bumper import VersionBumper
from idleforge.models.build import BuildAttempt
from idleforge.models.events import PromptMessage, SessionInfo
from idleforge.models.release import ReleaseResult
from idleforge.models.status import StatusValue


# ---------------------------------------------------------------------------
# Collaborator doubles
# ---------------------------------------------------------------------------


class RecordingReporter:
    """StatusReporter that remembers every emitted status."""

    def __init__(self) -> None:
        self.emitted: list[StatusValue] = []

    async def emit(self, status: StatusValue) -> None:
        self.emitted.append(status)


class FakeSessionHost:
    """SessionHost with canned titles and a prompt log."""

    def __init__(
        self,
        titles: dict[str, str | None] | None = None,
        *,
        fail_lookup: bool = False,
        fail_prompt: bool = False,
    ) -> None:
        self.titles = titles or {}
        self.fail_lookup = fail_lookup
        self.fail_prompt = fail_prompt
        self.prompts: list[tuple[str, PromptMessage]] = []

    async def get_session(self, session_id: str) -> SessionInfo | None:
        if self.fail_lookup:
            raise SessionHostError("host unreachable")
        if session_id not in self.titles:
            return None
        return SessionInfo(id=session_id, title=self.titles[session_id])

    async def prompt(self, session_id: str, message: PromptMessage) -> None:
        if self.fail_prompt:
            raise SessionHostError("host unreachable")
        self.prompts.append((session_id, message))

    async def __aenter__(self) -> FakeSessionHost:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


class ScriptedBuildRunner:
    """BuildRunner that replays a list of exit codes (last one repeats)."""

    def __init__(self, exit_codes: list[int], stderr_text: str = "build broke") -> None:
        self._exit_codes = list(exit_codes)
        self._stderr = stderr_text
        self.calls = 0

    async def run(self) -> BuildAttempt:
        index = min(self.calls, len(self._exit_codes) - 1)
        self.calls += 1
        code = self._exit_codes[index]
        return BuildAttempt(exit_code=code, stderr_text="" if code == 0 else self._stderr)


class FakeGit:
    """GitClient double that records commands and can fail on one of them."""

    def __init__(self, fail_on: str | None = None) -> None:
        self.fail_on = fail_on
        self.calls: list[tuple[str, ...]] = []

    async def _record(self, name: str, *args: str) -> None:
        self.calls.append((name, *args))
        if name == self.fail_on:
            raise VcsCommandError([name, *args], "exit code 1: rejected", returncode=1)

    async def configure_identity(self, name: str, email: str) -> None:
        await self._record("configure_identity", name, email)

    async def stage_all(self) -> None:
        await self._record("stage_all")

    async def commit(self, message: str) -> None:
        await self._record("commit", message)

    async def tag(self, name: str, message: str) -> None:
        await self._record("tag", name, message)

    async def delete_tag(self, name: str) -> None:
        await self._record("delete_tag", name)

    async def push(self, remote: str, branch: str) -> None:
        await self._record("push", remote, branch)

    def names(self) -> list[str]:
        return [call[0] for call in self.calls]


class StubPublisher:
    """ReleasePublisher double returning a fixed result."""

    def __init__(self, result: ReleaseResult | None = None) -> None:
        self.result = result or ReleaseResult(published=True)
        self.published_for: list[str] = []

    async def publish(self, session_id: str) -> ReleaseResult:
        self.published_for.append(session_id)
        return self.result


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def session_host() -> FakeSessionHost:
    return FakeSessionHost()


@pytest.fixture
def session_id() -> str:
    """A deterministic test session ID."""
    return "ses-test-001"


@pytest.fixture
def make_manifest(tmp_path: Path) -> Callable[..., Path]:
    """Factory fixture: write a package.json with the given version."""

    def _factory(version: Any = "1.2.3", **extra: Any) -> Path:
        document: dict[str, Any] = {"name": "demo-app"}
        if version is not None:
            document["version"] = version
        document.update(extra)
        path = tmp_path / "package.json"
        path.write_text(json.dumps(document, indent=2) + "\n", encoding="utf-8")
        return path

    return _factory


@pytest.fixture
def make_controller(
    reporter: RecordingReporter, session_host: FakeSessionHost
) -> Callable[..., tuple[RetryController, ScriptedBuildRunner, StubPublisher]]:
    """Factory fixture: a RetryController wired to doubles."""

    def _factory(
        exit_codes: list[int],
        *,
        stderr_text: str = "build broke",
        release_result: ReleaseResult | None = None,
        retry_budget: int = 3,
    ) -> tuple[RetryController, ScriptedBuildRunner, StubPublisher]:
        runner = ScriptedBuildRunner(exit_codes, stderr_text)
        publisher = StubPublisher(release_result)
        controller = RetryController(
            runner,  # type: ignore[arg-type]
            publisher,  # type: ignore[arg-type]
            reporter,
            session_host,
            retry_budget=retry_budget,
        )
        return controller, runner, publisher

    return _factory


@pytest.fixture
def make_publisher(
    session_host: FakeSessionHost,
) -> Callable[..., tuple[ReleasePublisher, FakeGit]]:
    """Factory fixture: a ReleasePublisher over a manifest path and FakeGit."""

    def _factory(
        manifest: Path, *, fail_on: str | None = None, lock: asyncio.Lock | None = None
    ) -> tuple[ReleasePublisher, FakeGit]:
        git = FakeGit(fail_on=fail_on)
        publisher = ReleasePublisher(
            VersionBumper(manifest),
            git,  # type: ignore[arg-type]
            session_host,
            committer_name="Release Bot",
            committer_email="bot@example.com",
            release_lock=lock,
        )
        return publisher, git

    return _factory
