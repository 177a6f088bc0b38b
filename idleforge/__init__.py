"""idleforge: build-and-release automation for editing sessions.

Reacts to session lifecycle events:
  - a new message marks the app Pending
  - an idle session triggers a build
  - a failed build is fed back to the session (up to 3 retries after the
    first failure, then the app is marked Errored)
  - a passing build is committed, tagged ``v<next patch>``, pushed, and the
    app is marked Active
"""

__version__ = "0.1.0"
__description__ = "Rebuild on idle, feed build errors back, release on success."

from idleforge.core.dispatcher import EventDispatcher
from idleforge.core.retry_controller import RetryController

__all__ = ["EventDispatcher", "RetryController", "__version__"]
