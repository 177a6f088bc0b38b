"""Release and idle-cycle outcome models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from idleforge.models.versioning import ReleaseVersion


class IdleOutcome(str, Enum):
    """What a single idle-triggered build cycle ended in."""

    RELEASED = "released"  # build passed; release attempted, Active emitted
    RETRY_REQUESTED = "retry_requested"  # build failed, follow-up sent
    ERRORED = "errored"  # retry budget exhausted, Errored emitted


class ReleaseResult(BaseModel):
    """Outcome of a best-effort release.

    ``published`` is False when any step failed; ``error`` then carries a
    short description.  Callers log this and carry on.
    """

    model_config = ConfigDict(frozen=True)

    published: bool
    version: ReleaseVersion | None = None
    tag: str | None = None
    commit_message: str = ""
    error: str | None = None

    @classmethod
    def failed(
        cls,
        error: str,
        *,
        version: ReleaseVersion | None = None,
        commit_message: str = "",
    ) -> ReleaseResult:
        return cls(
            published=False,
            version=version,
            tag=version.tag if version else None,
            commit_message=commit_message,
            error=error,
        )
