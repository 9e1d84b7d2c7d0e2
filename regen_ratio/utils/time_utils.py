"""
Time and date helpers for snapshot timestamps and labels.

Conventions:
  - All stored timestamps are timezone-aware UTC.
  - A snapshot saved against a calendar date is stamped at 12:00 UTC on that
    date, so the date survives any local-time rendering.
  - Default labels read ``"Snapshot DD/MM/YYYY"``.
"""

from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Any, Optional

SNAPSHOT_HOUR_UTC = 12
LABEL_DATE_FORMAT = "%d/%m/%Y"


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info.

    Prefer this over ``datetime.utcnow()`` (which returns naive datetimes).
    """
    return datetime.now(tz=timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Best-effort parse of a stored timestamp.

    Accepts ``datetime``, ``date``, and ISO-8601 strings (including a trailing
    ``Z``). Anything else, or an unparseable string, returns ``None``.
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if isinstance(value, date):
        return snapshot_timestamp_for(value)
    if isinstance(value, str) and value.strip():
        try:
            return ensure_utc(datetime.fromisoformat(value.strip()))
        except ValueError:
            return None
    return None


def snapshot_timestamp_for(day: date) -> datetime:
    """Return the canonical timestamp (12:00 UTC) for a snapshot dated ``day``."""
    return datetime.combine(day, time(hour=SNAPSHOT_HOUR_UTC), tzinfo=timezone.utc)


def default_snapshot_label(timestamp: datetime) -> str:
    """Return ``"Snapshot DD/MM/YYYY"`` for ``timestamp``."""
    return f"Snapshot {timestamp.strftime(LABEL_DATE_FORMAT)}"
