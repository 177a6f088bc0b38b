"""Runtime configuration: env-driven, one settings object per process.

Centralized config using pydantic-settings.  Reads from a .env file and
IDLEFORGE_* environment variables.  The status endpoint URL is also accepted
under the legacy TAYLORDB_VM_ORCHESTRATION_STATUS_UPDATE_URL name.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ForgeConfig(BaseSettings):
    """Build/release loop configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export IDLEFORGE_BUILD_COMMAND="npm run build"
        export IDLEFORGE_STATUS_URL=https://orchestrator.internal/apps/42/status
        export IDLEFORGE_LOG_LEVEL=DEBUG

    Or via .env file::

        IDLEFORGE_PROJECT_ROOT=/srv/app
        IDLEFORGE_GIT_BRANCH=main
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="IDLEFORGE_",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"

    # Project layout
    project_root: Path = Path(".")
    manifest_path: Path = Path("package.json")

    # Build loop
    build_command: str = "pnpm build"
    build_timeout_seconds: float = 600.0
    retry_budget: int = Field(default=3, ge=0)
    # Counters kept between one-shot `idleforge idle` runs.  Must stay
    # outside the project tree: releases stage everything with `git add .`
    retry_state_path: Path = Field(
        default_factory=lambda: Path.home() / ".cache" / "idleforge" / "retries.json"
    )

    # Status endpoint
    status_url: str = Field(
        default="",
        validation_alias=AliasChoices(
            "IDLEFORGE_STATUS_URL",
            "TAYLORDB_VM_ORCHESTRATION_STATUS_UPDATE_URL",
            "status_url",
        ),
    )
    status_enabled: bool = True
    status_timeout_seconds: float = 10.0

    # Session host (prompt + event stream)
    session_host_url: str = "http://127.0.0.1:4096"
    session_host_timeout_seconds: float = 30.0

    # Version control
    git_remote: str = "origin"
    git_branch: str = "main"
    committer_name: str = "idleforge"
    committer_email: str = "idleforge@localhost"
    vcs_timeout_seconds: float = 120.0
    serialize_releases: bool = True

    @property
    def manifest_file(self) -> Path:
        """The manifest path resolved against the project root."""
        if self.manifest_path.is_absolute():
            return self.manifest_path
        return self.project_root / self.manifest_path

    @property
    def retry_state_file(self) -> Path:
        """The retry state path; relative paths resolve against the project root."""
        if self.retry_state_path.is_absolute():
            return self.retry_state_path
        return self.project_root / self.retry_state_path

    @property
    def status_reporting_enabled(self) -> bool:
        """Whether status updates should actually be sent."""
        return self.status_enabled and bool(self.status_url.strip())

