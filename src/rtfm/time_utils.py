"""Shared date/time utilities."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_iso(timestamp: float) -> str:
    """Format an epoch timestamp as UTC with an explicit ``Z`` marker.

    Format: ``2026-01-15T12:34:56.789012Z``
    """
    moment = datetime.fromtimestamp(timestamp, timezone.utc)
    return moment.isoformat(timespec="microseconds").replace("+00:00", "Z")


def elapsed_ms(started: float, now: float) -> float:
    """Round a perf-counter interval to tenths of a millisecond."""
    return round((now - started) * 1000, 1)
