"""Coarse health status values reported to the orchestration endpoint."""

from __future__ import annotations

from enum import Enum


class StatusValue(str, Enum):
    """Health signal for the app under construction.

    No ordering or transition rules; the endpoint keeps the last write.
    """

    PENDING = "Pending"
    ACTIVE = "Active"
    ERRORED = "Errored"
