"""Build attempt model: the outcome of one external build invocation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BuildAttempt(BaseModel):
    """Result of running the build command once.

    A non-zero ``exit_code`` is a normal outcome, not an error.
    """

    model_config = ConfigDict(frozen=True)

    exit_code: int
    stderr_text: str = ""
    stdout_text: str = ""
    duration_seconds: float = 0.0
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0
