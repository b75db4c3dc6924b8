"""Timestamp helpers."""

from __future__ import annotations

from datetime import UTC, datetime


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def utc_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string with a ``Z`` suffix."""

    return utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z")


__all__ = ["utc_now", "utc_timestamp"]
