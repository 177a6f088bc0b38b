"""Session lifecycle events and session-host message models."""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class EventKind(str, Enum):
    """Lifecycle event types the dispatcher understands."""

    MESSAGE_RECEIVED = "chat.message"
    SESSION_IDLE = "session.idle"
    SESSION_DELETED = "session.deleted"


class LifecycleEvent(BaseModel):
    """One event from the session host."""

    model_config = ConfigDict(frozen=True)

    kind: EventKind
    session_id: str | None = None
    properties: dict[str, Any] = {}


class SessionInfo(BaseModel):
    """The parts of a host session this controller cares about."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str | None = None


class TextPart(BaseModel):
    """A plain-text message part."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class PromptMessage(BaseModel):
    """A message injected back into a session."""

    model_config = ConfigDict(frozen=True)

    parts: list[TextPart] = Field(default_factory=list)

    @classmethod
    def from_text(cls, text: str) -> PromptMessage:
        return cls(parts=[TextPart(text=text)])
