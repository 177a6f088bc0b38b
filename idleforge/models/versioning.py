"""Release version model: semantic ``major.minor.patch`` triple."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, NonNegativeInt

_VERSION_RE = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)$")


class ReleaseVersion(BaseModel):
    """A project release version as stored in the manifest.

    Releases only ever move ``patch`` forward by one; ``major`` and
    ``minor`` are left for humans to change.
    """

    model_config = ConfigDict(frozen=True)

    major: NonNegativeInt
    minor: NonNegativeInt
    patch: NonNegativeInt

    @classmethod
    def parse(cls, text: str) -> ReleaseVersion:
        """Parse ``"1.2.3"`` into a ReleaseVersion.

        Raises ``ValueError`` for anything that is not exactly three
        dot-separated non-negative integers.
        """
        match = _VERSION_RE.match(text.strip()) if isinstance(text, str) else None
        if match is None:
            raise ValueError(f"Not a major.minor.patch version: {text!r}")
        major, minor, patch = (int(part) for part in match.groups())
        return cls(major=major, minor=minor, patch=patch)

    def bump_patch(self) -> ReleaseVersion:
        """Return the next patch release."""
        return self.model_copy(update={"patch": self.patch + 1})

    @property
    def tag(self) -> str:
        """The VCS tag name for this version, e.g. ``v1.2.4``."""
        return f"v{self}"

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"
