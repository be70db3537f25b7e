from datetime import datetime, timedelta, timezone

import pytest

from scheduling.week import week_end, week_start

# Wednesday 2024-03-06 15:30
WEDNESDAY = datetime(2024, 3, 6, 15, 30, 12, 345, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "start_day, expected_start, expected_end",
    [
        (0, datetime(2024, 3, 3), datetime(2024, 3, 10)),  # Sunday
        (1, datetime(2024, 3, 4), datetime(2024, 3, 11)),  # Monday
        (3, datetime(2024, 3, 6), datetime(2024, 3, 13)),  # today
        (4, datetime(2024, 2, 29), datetime(2024, 3, 7)),  # Thursday, leap year
        (6, datetime(2024, 3, 2), datetime(2024, 3, 9)),  # Saturday
    ],
)
def test_week_bounds(start_day, expected_start, expected_end):
    assert week_start(start_day, WEDNESDAY) == expected_start.replace(tzinfo=timezone.utc)
    assert week_end(start_day, WEDNESDAY) == expected_end.replace(tzinfo=timezone.utc)


def test_bounds_are_midnight_and_one_week_apart():
    for day in range(7):
        start = week_start(day, WEDNESDAY)
        end = week_end(day, WEDNESDAY)
        assert (start.hour, start.minute, start.second, start.microsecond) == (0, 0, 0, 0)
        assert end - start == timedelta(days=7)
        assert start <= WEDNESDAY < end


def test_keeps_timezone():
    tz = timezone(timedelta(hours=-5))
    now = datetime(2024, 3, 6, 22, 0, tzinfo=tz)
    assert week_start(0, now).tzinfo is tz


def test_defaults_to_now():
    start = week_start(0)
    assert start.tzinfo is not None
    assert week_end(0) - start == timedelta(days=7)
