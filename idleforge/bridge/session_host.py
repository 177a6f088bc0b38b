"""Session host bridge: talks to the editing-session server over HTTP.

Bridge boundary
---------------
The session host owns sessions.  idleforge needs three things from it:

- ``get_session(id)``: the session's title, used as a release message.
- ``prompt(id, message)``: inject corrective feedback into a session.
- ``iter_events()``: the lifecycle event stream (server-sent events).

Orchestration code depends only on the ``SessionHost`` Protocol, so tests
and alternative hosts can substitute their own implementation.
"""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from typing import Any, Protocol, runtime_checkable

import httpx

from idleforge.models.events import EventKind, LifecycleEvent, PromptMessage, SessionInfo

logger = logging.getLogger(__name__)

_EVENT_KINDS: dict[str, EventKind] = {kind.value: kind for kind in EventKind}


class SessionHostError(RuntimeError):
    """Raised when the session host cannot be reached or rejects a request."""


@runtime_checkable
class SessionHost(Protocol):
    """Protocol for session host backends."""

    async def get_session(self, session_id: str) -> SessionInfo | None:
        """Return the session, or ``None`` if the host does not know it."""
        ...

    async def prompt(self, session_id: str, message: PromptMessage) -> None:
        """Deliver *message* to the session."""
        ...


def parse_event(payload: dict[str, Any]) -> LifecycleEvent | None:
    """Convert one decoded event payload into a LifecycleEvent.

    Returns ``None`` for event types the dispatcher does not handle.
    """
    kind = _EVENT_KINDS.get(str(payload.get("type", "")))
    if kind is None:
        return None
    properties = payload.get("properties") or {}
    if not isinstance(properties, dict):
        properties = {}
    session_id = properties.get("sessionID")
    if session_id is None and isinstance(properties.get("info"), dict):
        session_id = properties["info"].get("id")
    return LifecycleEvent(
        kind=kind,
        session_id=str(session_id) if session_id is not None else None,
        properties=properties,
    )


class HttpSessionHost:
    """HTTP client for the session host API.

    Parameters
    ----------
    base_url:
        Root URL of the session host server.
    timeout_seconds:
        Timeout for request/response calls.  The event stream has no read
        timeout.
    transport:
        Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_seconds: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout_seconds,
            transport=transport,
        )

    # ------------------------------------------------------------------
    # SessionHost API
    # ------------------------------------------------------------------

    async def get_session(self, session_id: str) -> SessionInfo | None:
        try:
            response = await self._client.get(f"/session/{session_id}")
        except httpx.HTTPError as exc:
            raise SessionHostError(f"GET session {session_id} failed: {exc}") from exc
        if response.status_code == 404:
            return None
        if response.is_error:
            raise SessionHostError(
                f"GET session {session_id} failed: HTTP {response.status_code}"
            )
        data = response.json()
        title = data.get("title") if isinstance(data, dict) else None
        return SessionInfo(id=session_id, title=title if isinstance(title, str) else None)

    async def prompt(self, session_id: str, message: PromptMessage) -> None:
        try:
            response = await self._client.post(
                f"/session/{session_id}/message",
                json=message.model_dump(mode="json"),
            )
        except httpx.HTTPError as exc:
            raise SessionHostError(f"prompt to {session_id} failed: {exc}") from exc
        if response.is_error:
            raise SessionHostError(
                f"prompt to {session_id} failed: HTTP {response.status_code}"
            )
        logger.debug("Prompted session %s (%d parts)", session_id, len(message.parts))

    # ------------------------------------------------------------------
    # Event stream
    # ------------------------------------------------------------------

    async def iter_events(self) -> AsyncIterator[LifecycleEvent]:
        """Yield lifecycle events from the host's server-sent event stream.

        Each SSE message's ``data:`` lines are joined and decoded as JSON.
        Malformed and unhandled events are skipped.
        """
        timeout = httpx.Timeout(self._client.timeout.connect, read=None)
        try:
            async with self._client.stream("GET", "/event", timeout=timeout) as response:
                if response.is_error:
                    raise SessionHostError(
                        f"event stream rejected: HTTP {response.status_code}"
                    )
                data_lines: list[str] = []
                async for line in response.aiter_lines():
                    if line.startswith("data:"):
                        data_lines.append(line[5:].lstrip())
                        continue
                    if line or not data_lines:
                        continue
                    event = self._decode(data_lines)
                    data_lines = []
                    if event is not None:
                        yield event
                if data_lines:
                    event = self._decode(data_lines)
                    if event is not None:
                        yield event
        except httpx.HTTPError as exc:
            raise SessionHostError(f"event stream failed: {exc}") from exc

    @staticmethod
    def _decode(data_lines: list[str]) -> LifecycleEvent | None:
        raw = "\n".join(data_lines)
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("Skipping non-JSON event data: %.80s", raw)
            return None
        if not isinstance(payload, dict):
            return None
        return parse_event(payload)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> HttpSessionHost:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"HttpSessionHost(base_url={str(self._client.base_url)!r})"
