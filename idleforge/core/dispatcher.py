"""EventDispatcher: routes session lifecycle events to the build loop.

- ``chat.message``: Pending is emitted in the background; dispatch returns
  without waiting on the network.
- ``session.idle``: the session's build cycle runs under a per-session lock,
  so two idle events for one session never overlap.  Different sessions run
  concurrently.
- ``session.deleted``: the session's retry entry and lock are dropped.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, Coroutine
from typing import Any

from idleforge.core.retry_controller import RetryController
from idleforge.core.status_reporter import StatusReporter
from idleforge.models.events import EventKind, LifecycleEvent
from idleforge.models.release import IdleOutcome
from idleforge.models.status import StatusValue

logger = logging.getLogger(__name__)


class EventDispatcher:
    """Routes lifecycle events; holds only locks and in-flight tasks.

    Usage
    -----
    >>> dispatcher = EventDispatcher(controller, reporter)
    >>> await dispatcher.run(host.iter_events())
    """

    def __init__(self, controller: RetryController, reporter: StatusReporter) -> None:
        self._controller = controller
        self._reporter = reporter
        self._session_locks: dict[str, asyncio.Lock] = {}
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def controller(self) -> RetryController:
        return self._controller

    @property
    def pending_tasks(self) -> int:
        """Number of background tasks not yet finished."""
        return len(self._tasks)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    async def dispatch(self, event: LifecycleEvent) -> IdleOutcome | None:
        """Handle one event.

        Returns the idle outcome for ``session.idle`` events, else ``None``.
        """
        if event.kind == EventKind.MESSAGE_RECEIVED:
            self._spawn(self._reporter.emit(StatusValue.PENDING))
            return None

        if event.kind == EventKind.SESSION_IDLE:
            if not event.session_id:
                logger.warning("Ignoring session.idle event without a session id")
                return None
            return await self._handle_idle(event.session_id)

        if event.kind == EventKind.SESSION_DELETED:
            if event.session_id:
                self._dispose(event.session_id)
            return None

        logger.debug("Ignoring event kind %s", event.kind)
        return None

    async def run(self, events: AsyncIterable[LifecycleEvent]) -> None:
        """Consume an event stream until it ends.

        Each event is handled in its own task; per-session locks keep one
        session's idle cycles in arrival order.
        """
        async for event in events:
            self._spawn(self._dispatch_logged(event))
        await self.aclose()

    async def aclose(self) -> None:
        """Wait for every in-flight task to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _handle_idle(self, session_id: str) -> IdleOutcome:
        lock = self._session_locks.setdefault(session_id, asyncio.Lock())
        async with lock:
            outcome = await self._controller.handle_idle(session_id)
        logger.info("Session %s idle cycle finished: %s", session_id, outcome.value)
        return outcome

    async def _dispatch_logged(self, event: LifecycleEvent) -> None:
        try:
            await self.dispatch(event)
        except Exception:  # noqa: BLE001
            logger.exception(
                "Handling %s for session %s failed", event.kind.value, event.session_id
            )

    def _dispose(self, session_id: str) -> None:
        self._controller.forget(session_id)
        lock = self._session_locks.get(session_id)
        if lock is not None and not lock.locked():
            del self._session_locks[session_id]
        logger.debug("Session %s disposed", session_id)

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
