"""
Time helpers shared by the cache store, reporters and scheduler.
"""

from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def utc_stamp(moment: datetime | None = None) -> str:
    """Compact UTC timestamp for file names, e.g. ``20260224T150000Z``."""
    return (moment or utcnow()).astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
