from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from chamber_monitor.models import Job, Machine

T0 = datetime(2025, 3, 4, 8, 0, 0, tzinfo=timezone.utc)


def at(minutes: float = 0, seconds: float = 0) -> datetime:
    return T0 + timedelta(minutes=minutes, seconds=seconds)


@pytest.fixture
def idle_machine() -> Machine:
    return Machine(id=1, name="Vallet 1")


@pytest.fixture
def coat_a() -> Job:
    return Job(job_id=1001, wr_number="WR-1", job_name="Coat A", crate_count=5)


@pytest.fixture
def coat_b() -> Job:
    return Job(job_id=1002, wr_number="WR-2", job_name="Coat B", crate_count=3)
