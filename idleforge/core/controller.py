"""Component wiring: builds a ready-to-run EventDispatcher from configuration."""

from __future__ import annotations

import asyncio

from idleforge.bridge.session_host import HttpSessionHost, SessionHost
from idleforge.config import ForgeConfig
from idleforge.core.build_runner import BuildRunner
from idleforge.core.dispatcher import EventDispatcher
from idleforge.core.release_publisher import ReleasePublisher
from idleforge.core.retry_controller import RetryController
from idleforge.core.status_reporter import (
    HttpStatusReporter,
    NullStatusReporter,
    StatusReporter,
)
from idleforge.core.vcs import GitClient
from idleforge.core.version_bumper import VersionBumper


def build_status_reporter(config: ForgeConfig) -> StatusReporter:
    """HTTP reporter when an endpoint is configured, else the null reporter."""
    if not config.status_reporting_enabled:
        return NullStatusReporter()
    return HttpStatusReporter(
        config.status_url, timeout_seconds=config.status_timeout_seconds
    )


def build_session_host(config: ForgeConfig) -> HttpSessionHost:
    return HttpSessionHost(
        config.session_host_url, timeout_seconds=config.session_host_timeout_seconds
    )


def build_dispatcher(
    config: ForgeConfig,
    *,
    session_host: SessionHost | None = None,
    reporter: StatusReporter | None = None,
    runner: BuildRunner | None = None,
    git: GitClient | None = None,
) -> EventDispatcher:
    """Assemble the full component graph.

    Any collaborator may be overridden; the rest are built from *config*.
    """
    session_host = session_host or build_session_host(config)
    reporter = reporter or build_status_reporter(config)
    runner = runner or BuildRunner(
        config.build_command,
        config.project_root,
        timeout_seconds=config.build_timeout_seconds,
    )
    git = git or GitClient(config.project_root, timeout_seconds=config.vcs_timeout_seconds)

    publisher = ReleasePublisher(
        VersionBumper(config.manifest_file),
        git,
        session_host,
        remote=config.git_remote,
        branch=config.git_branch,
        committer_name=config.committer_name,
        committer_email=config.committer_email,
        release_lock=asyncio.Lock() if config.serialize_releases else None,
    )
    controller = RetryController(
        runner,
        publisher,
        reporter,
        session_host,
        retry_budget=config.retry_budget,
    )
    return EventDispatcher(controller, reporter)
