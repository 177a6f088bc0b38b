"""Status reporting: best-effort health updates to the orchestration endpoint.

Reporters satisfy the ``StatusReporter`` Protocol: a single ``emit`` coroutine
that never raises.  Reporting is diagnostic only; a failed or skipped update
must never change control flow.

Backends:

1. **HttpStatusReporter**: one ``PUT`` with ``{"status": ...}`` per call.
2. **NullStatusReporter**: logs and does nothing (no endpoint configured).
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import httpx

from idleforge.models.status import StatusValue

logger = logging.getLogger(__name__)


@runtime_checkable
class StatusReporter(Protocol):
    """Protocol for status reporting backends."""

    async def emit(self, status: StatusValue) -> None:
        """Send *status*.  Must not raise."""
        ...


class NullStatusReporter:
    """Reporter used when no status endpoint is configured."""

    async def emit(self, status: StatusValue) -> None:
        logger.info("Status -> %s (reporting disabled)", status.value)


class HttpStatusReporter:
    """PUTs status updates to a fixed URL.

    Fire-and-forget: non-2xx responses, timeouts and network errors are
    logged at WARNING and swallowed.  There are no retries.  With an empty
    *url* every call is a no-op.

    Parameters
    ----------
    url:
        The status endpoint.
    timeout_seconds:
        Per-request timeout.
    transport:
        Optional httpx transport (tests pass ``httpx.MockTransport``).
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._url = url.strip()
        self._timeout = timeout_seconds
        self._transport = transport

    @property
    def url(self) -> str:
        return self._url

    @property
    def is_configured(self) -> bool:
        return bool(self._url)

    async def emit(self, status: StatusValue) -> None:
        logger.info("Status -> %s", status.value)
        if not self._url:
            logger.debug("No status endpoint configured; skipping %s", status.value)
            return

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                response = await client.put(
                    self._url,
                    json={"status": status.value},
                    headers={"Content-Type": "application/json"},
                )
                response.raise_for_status()
        except httpx.TimeoutException:
            logger.warning("Status update %s timed out (%s)", status.value, self._url)
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Status update %s rejected: HTTP %d",
                status.value,
                exc.response.status_code,
            )
        except httpx.HTTPError as exc:
            logger.warning("Status update %s failed: %s", status.value, exc)
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected error sending status %s", status.value)
