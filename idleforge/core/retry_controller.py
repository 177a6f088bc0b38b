"""Retry controller: bounded build/feedback loop per session.

Each idle event runs one build.  On success the session's retry entry is
dropped, a release is attempted, and Active is emitted whatever the release
outcome.  On failure the session's counter is created (first failure, value
0) or incremented, and then compared against the retry budget:

- counter <= budget: the build errors are sent back into the session and
  the next idle event resumes the loop.
- counter > budget: Errored is emitted and no further feedback is sent.

With the default budget of 3 a session tolerates four failed builds; the
fifth marks it Errored.  Entry creation depends on key presence, never on
the counter's value, so a counter of 0 is never mistaken for "unset".
"""

from __future__ import annotations

import logging

from idleforge.bridge.session_host import SessionHost, SessionHostError
from idleforge.core.build_runner import BuildRunner
from idleforge.core.release_publisher import ReleasePublisher
from idleforge.core.status_reporter import StatusReporter
from idleforge.models.build import BuildAttempt
from idleforge.models.events import PromptMessage
from idleforge.models.release import IdleOutcome
from idleforge.models.status import StatusValue

logger = logging.getLogger(__name__)

DEFAULT_RETRY_BUDGET = 3


def build_feedback_text(attempt: BuildAttempt) -> str:
    """Human-readable instruction embedding the build's diagnostic output."""
    return (
        "While building the project, the following error occurred:\n\n"
        f"{attempt.stderr_text}\n\n"
        "Please fix the error and try again."
    )


class RetryController:
    """Drives builds for idle sessions and decides retry vs. Errored.

    Parameters
    ----------
    runner:
        Executes the build.
    publisher:
        Publishes a release after a passing build.
    reporter:
        Receives Active / Errored transitions.
    session_host:
        Receives corrective follow-up prompts.
    retry_budget:
        Additional attempts allowed after the first failure.
    """

    def __init__(
        self,
        runner: BuildRunner,
        publisher: ReleasePublisher,
        reporter: StatusReporter,
        session_host: SessionHost,
        *,
        retry_budget: int = DEFAULT_RETRY_BUDGET,
    ) -> None:
        if retry_budget < 0:
            raise ValueError("retry_budget must be non-negative")
        self._runner = runner
        self._publisher = publisher
        self._reporter = reporter
        self._session_host = session_host
        self._retry_budget = retry_budget
        # session_id -> retries consumed; present only after a failure
        self._retries: dict[str, int] = {}

    @property
    def retry_budget(self) -> int:
        return self._retry_budget

    # ------------------------------------------------------------------
    # Retry table
    # ------------------------------------------------------------------

    def retry_count(self, session_id: str) -> int | None:
        """Current counter for *session_id*, or ``None`` if it never failed."""
        return self._retries.get(session_id)

    def reset(self, session_id: str) -> None:
        """Forget any failures recorded for *session_id*."""
        self._retries.pop(session_id, None)

    forget = reset

    def restore(self, counts: dict[str, int]) -> None:
        """Seed counters recorded by an earlier process."""
        for session_id, count in counts.items():
            if count < 0:
                raise ValueError(f"retry counter for {session_id} must be non-negative")
            self._retries[session_id] = count

    def snapshot(self) -> dict[str, int]:
        return dict(self._retries)

    def _record_failure(self, session_id: str) -> int:
        if session_id not in self._retries:
            self._retries[session_id] = 0
        else:
            self._retries[session_id] += 1
        return self._retries[session_id]

    # ------------------------------------------------------------------
    # Idle handling
    # ------------------------------------------------------------------

    async def handle_idle(self, session_id: str) -> IdleOutcome:
        """Run one build cycle for *session_id*.

        Raises ``LaunchFailure`` if the build command cannot be started;
        every other failure is absorbed into the returned outcome.
        """
        attempt = await self._runner.run()

        if attempt.succeeded:
            self.reset(session_id)
            result = await self._publisher.publish(session_id)
            if not result.published:
                logger.warning(
                    "Session %s built but was not released: %s", session_id, result.error
                )
            await self._reporter.emit(StatusValue.ACTIVE)
            return IdleOutcome.RELEASED

        counter = self._record_failure(session_id)
        if counter > self._retry_budget:
            logger.warning(
                "Session %s exhausted its retry budget (%d); marking Errored",
                session_id,
                self._retry_budget,
            )
            self.reset(session_id)
            await self._reporter.emit(StatusValue.ERRORED)
            return IdleOutcome.ERRORED

        logger.info(
            "Session %s build failed (exit %d); requesting fix, retry %d/%d",
            session_id,
            attempt.exit_code,
            counter,
            self._retry_budget,
        )
        try:
            await self._session_host.prompt(
                session_id, PromptMessage.from_text(build_feedback_text(attempt))
            )
        except SessionHostError as exc:
            logger.error("Could not deliver build feedback to %s: %s", session_id, exc)
        return IdleOutcome.RETRY_REQUESTED
