# backend/reserve_api/utils/timezone.py
"""
Local-time helpers.

All same-day logic (cutoffs, "today", created_at stamps) runs in one fixed
zone: the merchant's operating region from settings. Callers pass `now`
explicitly where they need deterministic behaviour; None means wall clock.
"""

from datetime import datetime, tzinfo
from typing import Optional

from ..config import settings


def local_tz() -> tzinfo:
    return settings.tz


def local_now(now: Optional[datetime] = None) -> datetime:
    """Current instant in the local zone (or `now` converted to it)."""
    tz = local_tz()
    if now is None:
        return datetime.now(tz)
    if now.tzinfo is None:
        return now.replace(tzinfo=tz)
    return now.astimezone(tz)


def parse_instant(value: str, tz: Optional[tzinfo] = None) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    The supplied offset is kept as-is; a naive value is interpreted in the
    local zone. Raises ValueError on anything unparseable.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("empty timestamp")
    dt = datetime.fromisoformat(value.strip())
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=tz or local_tz())
    return dt


def format_iso8601(dt: datetime) -> str:
    """2025-08-12T12:00:00+0200 (offset without colon)."""
    return dt.strftime("%Y-%m-%dT%H:%M:%S%z")


def format_atom(dt: datetime) -> str:
    """2025-08-12T12:00:00+02:00, the canonical form used for digests."""
    return dt.isoformat(timespec="seconds")
