"""Manifest version bumping: read, increment, and persist the release version.

The manifest is a JSON document (``package.json`` by default) with a
``version`` field of the form ``"major.minor.patch"``.  Writes are
read-modify-write of the whole document so unrelated fields, and their
order, survive untouched.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from idleforge.models.versioning import ReleaseVersion

logger = logging.getLogger(__name__)


class ManifestError(RuntimeError):
    """Raised when the manifest is missing, unreadable, or has no valid version."""


class VersionBumper:
    """Reads and writes the release version stored in a JSON manifest.

    Parameters
    ----------
    manifest_path:
        Path to the manifest file.
    """

    def __init__(self, manifest_path: Path) -> None:
        self._path = Path(manifest_path)

    @property
    def manifest_path(self) -> Path:
        return self._path

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def read_current(self) -> ReleaseVersion:
        """Parse the manifest's ``version`` field.

        Raises
        ------
        ManifestError
            If the file cannot be read or parsed, or the field is missing
            or not in ``major.minor.patch`` integer form.
        """
        document = self._load()
        if "version" not in document:
            raise ManifestError(f"{self._path}: no 'version' field")
        try:
            return ReleaseVersion.parse(document["version"])
        except ValueError as exc:
            raise ManifestError(f"{self._path}: {exc}") from exc

    @staticmethod
    def next(version: ReleaseVersion) -> ReleaseVersion:
        """Return *version* with ``patch`` incremented by one."""
        return version.bump_patch()

    def write(self, version: ReleaseVersion) -> None:
        """Persist *version* into the manifest, preserving all other fields."""
        document = self._load()
        document["version"] = str(version)
        try:
            self._path.write_text(
                json.dumps(document, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
        except OSError as exc:
            raise ManifestError(f"{self._path}: cannot write manifest: {exc}") from exc
        logger.info("Manifest %s now at version %s", self._path, version)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _load(self) -> dict[str, Any]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ManifestError(f"{self._path}: cannot read manifest: {exc}") from exc
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ManifestError(f"{self._path}: invalid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise ManifestError(f"{self._path}: manifest root must be a JSON object")
        return document
