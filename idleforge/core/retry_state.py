"""Retry counters persisted between one-shot runs.

``idleforge watch`` keeps the retry table in memory for the life of the
process.  ``idleforge idle`` starts a new process per idle event, so it loads
the session's counter from a small JSON file before the build and writes it
back afterwards.  The file maps session id to counter::

    {"ses_abc": 2}
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class RetryStateFile:
    """JSON-backed store of per-session retry counters.

    Parameters
    ----------
    path:
        Location of the state file.  Parent directories are created on the
        first write.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, int]:
        """Return all recorded counters.

        A missing file is an empty table.  A malformed file is logged and
        treated as empty.
        """
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable retry state %s: %s", self._path, exc)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring retry state %s: root is not an object", self._path)
            return {}
        return {
            str(session_id): count
            for session_id, count in raw.items()
            if isinstance(count, int) and not isinstance(count, bool) and count >= 0
        }

    def get(self, session_id: str) -> int | None:
        return self.load().get(session_id)

    def put(self, session_id: str, count: int | None) -> None:
        """Record *count* for *session_id*; ``None`` removes the entry."""
        counts = self.load()
        if count is None:
            if session_id not in counts:
                return
            del counts[session_id]
        else:
            counts[session_id] = count
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(counts, indent=2, sort_keys=True) + "\n",
            encoding="utf-8",
        )
        logger.debug("Persisted retry state for %s (%s) to %s", session_id, count, self._path)
