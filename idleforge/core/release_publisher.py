"""Release publisher: commit, tag and push a patch release after a good build.

Publishing is best-effort.  Every failure (manifest, session lookup, git) is
caught here, logged, and reported in the returned ``ReleaseResult``; nothing
propagates, so a failed release can never keep the app from going Active.
"""

from __future__ import annotations

import asyncio
import logging

from idleforge.bridge.session_host import SessionHost, SessionHostError
from idleforge.core.vcs import GitClient, VcsCommandError
from idleforge.core.version_bumper import ManifestError, VersionBumper
from idleforge.models.release import ReleaseResult
from idleforge.models.versioning import ReleaseVersion

logger = logging.getLogger(__name__)


def synthesized_commit_message(version: ReleaseVersion) -> str:
    """Default release message used when the session has no title."""
    return f"feat: release version {version.tag}"


def resolve_commit_message(title: str | None, version: ReleaseVersion) -> str:
    """Use the session title when it has content, else the synthesized message."""
    if title and title.strip():
        return title
    return synthesized_commit_message(version)


class ReleasePublisher:
    """Bumps the manifest version and publishes it through git.

    Parameters
    ----------
    bumper:
        Manifest reader/writer.
    git:
        Git command runner for the project's working tree.
    session_host:
        Used to look up the session title for the commit message.
    remote, branch:
        Push target.
    committer_name, committer_email:
        Identity configured for the automated commit.
    release_lock:
        Optional lock shared by all sessions so only one release touches the
        working tree at a time.
    """

    def __init__(
        self,
        bumper: VersionBumper,
        git: GitClient,
        session_host: SessionHost | None = None,
        *,
        remote: str = "origin",
        branch: str = "main",
        committer_name: str = "idleforge",
        committer_email: str = "idleforge@localhost",
        release_lock: asyncio.Lock | None = None,
    ) -> None:
        self._bumper = bumper
        self._git = git
        self._session_host = session_host
        self._remote = remote
        self._branch = branch
        self._committer_name = committer_name
        self._committer_email = committer_email
        self._release_lock = release_lock

    async def publish(self, session_id: str) -> ReleaseResult:
        """Release the next patch version for *session_id*'s work."""
        try:
            if self._release_lock is None:
                return await self._publish(session_id)
            async with self._release_lock:
                return await self._publish(session_id)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error publishing release for session %s", session_id)
            return ReleaseResult.failed(f"unexpected error: {exc}")

    async def _publish(self, session_id: str) -> ReleaseResult:
        try:
            current = self._bumper.read_current()
        except ManifestError as exc:
            logger.error("Release for session %s skipped: %s", session_id, exc)
            return ReleaseResult.failed(str(exc))

        version = self._bumper.next(current)
        message = resolve_commit_message(await self._session_title(session_id), version)

        tagged = pushed = False
        try:
            await self._git.configure_identity(self._committer_name, self._committer_email)
            await self._git.stage_all()
            await self._git.commit(message)
            await self._git.tag(version.tag, message)
            tagged = True
            await self._git.push(self._remote, self._branch)
            pushed = True
            self._bumper.write(version)
        except (VcsCommandError, ManifestError, OSError) as exc:
            logger.error("Failed to publish release %s: %s", version.tag, exc)
            if tagged and not pushed:
                # The manifest still holds the old version, so the next
                # release will want this tag name again.
                await self._drop_tag(version.tag)
            return ReleaseResult.failed(str(exc), version=version, commit_message=message)

        logger.info(
            "Published %s for session %s (%s -> %s)", version.tag, session_id, current, version
        )
        return ReleaseResult(
            published=True,
            version=version,
            tag=version.tag,
            commit_message=message,
        )

    async def _drop_tag(self, tag: str) -> None:
        try:
            await self._git.delete_tag(tag)
        except VcsCommandError as exc:
            logger.warning("Could not remove unpublished tag %s: %s", tag, exc)
        else:
            logger.info("Removed unpublished local tag %s", tag)

    async def _session_title(self, session_id: str) -> str | None:
        if self._session_host is None:
            return None
        try:
            session = await self._session_host.get_session(session_id)
        except SessionHostError as exc:
            logger.warning("Could not fetch session %s title: %s", session_id, exc)
            return None
        return session.title if session is not None else None
