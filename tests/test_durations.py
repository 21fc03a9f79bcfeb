from datetime import datetime, timezone

import pytest

from chamber_monitor.durations import format_datetime, format_duration, span_ms

from conftest import at


@pytest.mark.parametrize(
    "ms, expected",
    [
        (0, "0s"),
        (999, "0s"),
        (59_000, "59s"),
        (60_000, "1m 0s"),
        (5 * 60_000, "5m 0s"),
        (3_600_000, "1h 0m 0s"),
        (3_600_000 + 5_000, "1h 0m 5s"),
        (2 * 3_600_000 + 3 * 60_000 + 4_000, "2h 3m 4s"),
        (30 * 3_600_000, "30h 0m 0s"),
    ],
)
def test_format_duration(ms, expected):
    assert format_duration(ms) == expected


def test_format_duration_clamps_negative():
    assert format_duration(-12_345) == "0s"


def test_span_ms():
    assert span_ms(at(0), at(1, 30)) == 90_000
    assert span_ms(at(1), at(0)) == -60_000


def test_format_datetime_missing_is_na():
    assert format_datetime(None) == "NA"


def test_format_datetime_renders_local_time():
    ts = datetime(2025, 3, 4, 8, 0, 0, tzinfo=timezone.utc)
    assert format_datetime(ts) == ts.astimezone().strftime("%x, %X")
