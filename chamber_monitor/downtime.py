from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from .durations import span_ms
from .models import DEFAULT_DOWNTIME_REASON, DowntimeInterval, OpenDowntime


def open_interval(reason: str, now: datetime) -> OpenDowntime:
    return OpenDowntime(down_at=now, description=reason.strip() or DEFAULT_DOWNTIME_REASON)


def closing_entry(open_downtime: OpenDowntime, now: datetime) -> DowntimeInterval:
    return DowntimeInterval(
        down_at=open_downtime.down_at,
        up_at=now,
        description=open_downtime.description,
    )


def close(
    log: Sequence[DowntimeInterval],
    open_downtime: Optional[OpenDowntime],
    now: datetime,
) -> Tuple[List[DowntimeInterval], None]:
    """
    Move the open interval into the log with up_at=now.
    With nothing open the log comes back unchanged.
    """
    if open_downtime is None:
        return list(log), None
    return [*log, closing_entry(open_downtime, now)], None


def duration_ms(interval: DowntimeInterval) -> int:
    # clamped: clock skew must never yield negative downtime
    return max(0, span_ms(interval.down_at, interval.up_at))


def total_downtime_ms(log: Iterable[DowntimeInterval]) -> int:
    return sum(duration_ms(i) for i in log)
