"""idleforge data models: all Pydantic v2, all frozen (immutable)."""

from idleforge.models.build import BuildAttempt
from idleforge.models.events import (
    EventKind,
    LifecycleEvent,
    PromptMessage,
    SessionInfo,
    TextPart,
)
from idleforge.models.release import IdleOutcome, ReleaseResult
from idleforge.models.status import StatusValue
from idleforge.models.versioning import ReleaseVersion

__all__ = [
    # status
    "StatusValue",
    # build
    "BuildAttempt",
    # versioning
    "ReleaseVersion",
    # release
    "IdleOutcome",
    "ReleaseResult",
    # events
    "EventKind",
    "LifecycleEvent",
    "PromptMessage",
    "SessionInfo",
    "TextPart",
]
