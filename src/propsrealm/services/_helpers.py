"""Shared service-layer helper functions."""

from __future__ import annotations

from datetime import UTC, datetime


def epoch_ms_to_iso(epoch_ms: int) -> str:
    """Render an epoch-milliseconds timestamp as UTC ISO 8601."""
    return datetime.fromtimestamp(epoch_ms / 1000, tz=UTC).isoformat(timespec="milliseconds")
