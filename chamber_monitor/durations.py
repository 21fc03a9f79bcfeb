from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

_MS = timedelta(milliseconds=1)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def span_ms(start: datetime, end: datetime) -> int:
    """end - start in whole milliseconds (may be negative)."""
    return (end - start) // _MS


def format_duration(ms: float) -> str:
    """
    Milliseconds -> "Hh Mm Ss".
    Hours are omitted when zero, minutes when hours and minutes are both zero.
    Negative spans render as "0s".
    """
    if ms < 0:
        ms = 0
    total_seconds = int(ms // 1000)
    seconds = total_seconds % 60
    minutes = (total_seconds // 60) % 60
    hours = total_seconds // 3600

    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0 or hours > 0:
        parts.append(f"{minutes}m")
    parts.append(f"{seconds}s")
    return " ".join(parts)


def format_datetime(ts: Optional[datetime]) -> str:
    # locale-style local time, "NA" when missing
    if ts is None:
        return "NA"
    return ts.astimezone().strftime("%x, %X")
