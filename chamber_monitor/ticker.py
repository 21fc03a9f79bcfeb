from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from .durations import span_ms, utcnow


class ElapsedTicker:
    """
    Read of now - start_time for a running-time display.

    Bound to one start_time at a time: sync() with a new value rebinds it,
    sync(None) cancels it. The periodic schedule belongs to the caller (the
    UI re-runs a fragment every interval_s and calls tick()); the ticker
    holds no handle on machine state and never mutates it.
    """

    def __init__(self, interval_s: float = 1.0, clock: Callable[[], datetime] = utcnow):
        self.interval_s = interval_s
        self._clock = clock
        self._start_time: Optional[datetime] = None

    @property
    def start_time(self) -> Optional[datetime]:
        return self._start_time

    @property
    def active(self) -> bool:
        return self._start_time is not None

    def sync(self, start_time: Optional[datetime]) -> None:
        if start_time is None:
            self.cancel()
            return
        self._start_time = start_time

    def cancel(self) -> None:
        self._start_time = None

    def tick(self) -> Optional[int]:
        """Elapsed ms since start_time, or None once cancelled."""
        if self._start_time is None:
            return None
        return max(0, span_ms(self._start_time, self._clock()))
