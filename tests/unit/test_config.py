"""Tests for ForgeConfig: defaults and environment overrides."""

from __future__ import annotations

from pathlib import Path

import pytest

from idleforge.config import ForgeConfig


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    """Isolate from the developer's environment and any .env file."""
    for name in (
        "IDLEFORGE_STATUS_URL",
        "TAYLORDB_VM_ORCHESTRATION_STATUS_UPDATE_URL",
        "IDLEFORGE_BUILD_COMMAND",
        "IDLEFORGE_RETRY_BUDGET",
        "IDLEFORGE_STATUS_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


class TestForgeConfig:
    def test_defaults(self):
        config = ForgeConfig()
        assert config.build_command == "pnpm build"
        assert config.retry_budget == 3
        assert config.git_remote == "origin"
        assert config.git_branch == "main"
        assert config.manifest_path == Path("package.json")
        assert config.log_level == "INFO"

    def test_status_reporting_disabled_without_url(self):
        assert ForgeConfig().status_reporting_enabled is False

    def test_env_prefix_override(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("IDLEFORGE_BUILD_COMMAND", "npm run build")
        monkeypatch.setenv("IDLEFORGE_RETRY_BUDGET", "5")
        config = ForgeConfig()
        assert config.build_command == "npm run build"
        assert config.retry_budget == 5

    def test_status_url_from_env(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("IDLEFORGE_STATUS_URL", "https://orch.test/status")
        config = ForgeConfig()
        assert config.status_url == "https://orch.test/status"
        assert config.status_reporting_enabled is True

    def test_legacy_status_url_variable(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv(
            "TAYLORDB_VM_ORCHESTRATION_STATUS_UPDATE_URL", "https://legacy.test/status"
        )
        assert ForgeConfig().status_url == "https://legacy.test/status"

    def test_status_can_be_disabled(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("IDLEFORGE_STATUS_URL", "https://orch.test/status")
        monkeypatch.setenv("IDLEFORGE_STATUS_ENABLED", "false")
        assert ForgeConfig().status_reporting_enabled is False

    def test_manifest_file_resolved_against_project_root(self):
        config = ForgeConfig(project_root=Path("/srv/app"))
        assert config.manifest_file == Path("/srv/app/package.json")

    def test_absolute_manifest_path_kept(self):
        config = ForgeConfig(project_root=Path("/srv/app"), manifest_path=Path("/etc/pkg.json"))
        assert config.manifest_file == Path("/etc/pkg.json")

    def test_negative_retry_budget_rejected(self):
        with pytest.raises(ValueError):
            ForgeConfig(retry_budget=-1)

    def test_retry_state_defaults_outside_project(self):
        config = ForgeConfig(project_root=Path("/srv/app"))
        assert config.retry_state_file.is_absolute()
        assert not config.retry_state_file.is_relative_to(Path("/srv/app"))

    def test_relative_retry_state_resolved_against_project_root(self):
        config = ForgeConfig(project_root=Path("/srv/app"), retry_state_path=Path("state.json"))
        assert config.retry_state_file == Path("/srv/app/state.json")
