from chamber_monitor import downtime
from chamber_monitor.models import DEFAULT_DOWNTIME_REASON, DowntimeInterval

from conftest import at


def test_open_interval_defaults_blank_reason():
    assert downtime.open_interval("   ", at(0)).description == DEFAULT_DOWNTIME_REASON
    assert downtime.open_interval("Tool change", at(0)).description == "Tool change"


def test_close_appends_interval():
    opened = downtime.open_interval("Jam", at(10))
    log, still_open = downtime.close([], opened, at(15))
    assert still_open is None
    assert log == [DowntimeInterval(down_at=at(10), up_at=at(15), description="Jam")]


def test_close_without_open_interval_is_silent():
    existing = [DowntimeInterval(down_at=at(1), up_at=at(2), description="x")]
    log, still_open = downtime.close(existing, None, at(5))
    assert log == existing
    assert still_open is None


def test_duration_clamped_to_zero():
    skewed = DowntimeInterval(down_at=at(5), up_at=at(4), description="skew")
    assert downtime.duration_ms(skewed) == 0


def test_total_downtime():
    log = [
        DowntimeInterval(down_at=at(0), up_at=at(2), description="a"),
        DowntimeInterval(down_at=at(5), up_at=at(5, 30), description="b"),
    ]
    assert downtime.total_downtime_ms(log) == 150_000
