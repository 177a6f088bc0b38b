"""Tests for BuildRunner: exit codes, stderr capture, launch failure, timeout."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from idleforge.core.build_runner import TIMED_OUT_EXIT_CODE, BuildRunner, LaunchFailure


def _python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


class TestBuildRunner:
    @pytest.mark.asyncio
    async def test_successful_build(self, tmp_path: Path):
        runner = BuildRunner(_python("print('built')"), tmp_path)
        attempt = await runner.run()
        assert attempt.succeeded
        assert "built" in attempt.stdout_text

    @pytest.mark.asyncio
    async def test_failed_build_is_returned_not_raised(self, tmp_path: Path):
        runner = BuildRunner(
            _python("import sys; sys.stderr.write('type error on line 5'); sys.exit(1)"),
            tmp_path,
        )
        attempt = await runner.run()
        assert attempt.exit_code == 1
        assert attempt.stderr_text == "type error on line 5"

    @pytest.mark.asyncio
    async def test_runs_in_project_root(self, tmp_path: Path):
        (tmp_path / "marker.txt").write_text("here", encoding="utf-8")
        runner = BuildRunner(
            _python("import sys, os; sys.exit(0 if os.path.exists('marker.txt') else 3)"),
            tmp_path,
        )
        assert (await runner.run()).succeeded

    @pytest.mark.asyncio
    async def test_missing_executable_is_launch_failure(self, tmp_path: Path):
        runner = BuildRunner(["definitely-not-a-real-build-tool", "--prod"], tmp_path)
        with pytest.raises(LaunchFailure):
            await runner.run()

    @pytest.mark.asyncio
    async def test_timeout_kills_and_reports_failure(self, tmp_path: Path):
        runner = BuildRunner(
            _python("import time; time.sleep(30)"), tmp_path, timeout_seconds=0.3
        )
        attempt = await runner.run()
        assert attempt.timed_out is True
        assert attempt.exit_code == TIMED_OUT_EXIT_CODE
        assert not attempt.succeeded
        assert "timed out" in attempt.stderr_text

    def test_string_command_uses_shell(self, tmp_path: Path):
        runner = BuildRunner("pnpm run build --filter 'web app'", tmp_path)
        assert runner.uses_shell
        assert runner.display == "pnpm run build --filter 'web app'"

    def test_list_command_is_executed_directly(self, tmp_path: Path):
        runner = BuildRunner(["pnpm", "run", "build", "--filter", "web app"], tmp_path)
        assert not runner.uses_shell
        assert runner.display == "pnpm run build --filter 'web app'"

    def test_empty_command_rejected(self, tmp_path: Path):
        with pytest.raises(ValueError):
            BuildRunner("   ", tmp_path)

    def test_empty_list_rejected(self, tmp_path: Path):
        with pytest.raises(ValueError):
            BuildRunner([], tmp_path)


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX shell syntax")
class TestShellCommands:
    @pytest.mark.asyncio
    async def test_compound_command_fails_when_last_step_fails(self, tmp_path: Path):
        attempt = await BuildRunner("true && false", tmp_path).run()
        assert attempt.exit_code != 0
        assert not attempt.succeeded

    @pytest.mark.asyncio
    async def test_compound_command_fails_when_first_step_fails(self, tmp_path: Path):
        attempt = await BuildRunner("false && true", tmp_path).run()
        assert not attempt.succeeded

    @pytest.mark.asyncio
    async def test_compound_command_runs_every_step(self, tmp_path: Path):
        attempt = await BuildRunner("echo one && echo two >&2", tmp_path).run()
        assert attempt.succeeded
        assert "one" in attempt.stdout_text
        assert "two" in attempt.stderr_text

    @pytest.mark.asyncio
    async def test_unknown_program_is_a_failed_build(self, tmp_path: Path):
        attempt = await BuildRunner("definitely-not-a-real-build-tool --prod", tmp_path).run()
        assert attempt.exit_code == 127
        assert attempt.stderr_text

    @pytest.mark.asyncio
    async def test_timeout_kills_shell_children(self, tmp_path: Path):
        runner = BuildRunner("sleep 30 && echo done", tmp_path, timeout_seconds=0.3)
        attempt = await runner.run()
        assert attempt.timed_out is True
        assert "done" not in attempt.stdout_text
