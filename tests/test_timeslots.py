from datetime import datetime, time, timedelta, timezone

import pytest

from sitebook.errors import InvalidParameterError
from sitebook.scheduling.timeslots import (
    OperatingWindow,
    TimeInterval,
    is_aligned,
    is_valid_duration,
    normalize_duration,
    overlaps,
    round15,
    rounding_threshold,
    to_local,
    within_operating_window,
)


def at(hour, minute=0, second=0):
    return datetime(2030, 1, 7, hour, minute, second)


def test_back_to_back_does_not_overlap():
    a = TimeInterval(at(9), at(10))
    b = TimeInterval(at(10), at(11))
    assert not overlaps(a, b)
    assert not overlaps(b, a)


@pytest.mark.parametrize("other", [
    (at(9, 30), at(10, 30)),   # partial
    (at(9, 15), at(9, 45)),    # contained
    (at(8), at(11)),           # containing
    (at(9), at(10)),           # identical
])
def test_any_intersection_overlaps(other):
    a = TimeInterval(at(9), at(10))
    b = TimeInterval(*other)
    assert overlaps(a, b)
    assert b.overlaps(a)


def test_interval_must_end_after_start():
    with pytest.raises(InvalidParameterError):
        TimeInterval(at(10), at(10))
    with pytest.raises(InvalidParameterError):
        TimeInterval(at(11), at(10))


@pytest.mark.parametrize("minute,expected", [
    (0, at(9, 0)),
    (7, at(9, 0)),
    (8, at(9, 15)),
    (22, at(9, 15)),
    (23, at(9, 30)),
    (44, at(9, 45)),
    (52, at(9, 45)),
    (53, at(10, 0)),
])
def test_round15(minute, expected):
    assert round15(at(9, minute, 41)) == expected


def test_round15_carries_into_next_day():
    assert round15(datetime(2030, 1, 7, 23, 55)) == datetime(2030, 1, 8, 0, 0)


def test_round15_ties_round_up():
    # with a 30 minute raster, minute 15 sits exactly in the middle
    assert round15(at(9, 15), 30) == at(9, 30)


def test_round15_is_idempotent():
    start = at(0)
    for minutes in range(0, 24 * 60, 7):
        ts = start + timedelta(minutes=minutes, seconds=13)
        once = round15(ts)
        assert round15(once) == once


@pytest.mark.parametrize("granularity", [5, 10, 15, 30, 60])
def test_rounding_threshold_matches_round15(granularity):
    boundary = at(10)
    threshold = rounding_threshold(boundary, granularity)
    ts = at(8)
    while ts < at(12):
        assert (round15(ts, granularity) < boundary) == (ts < threshold)
        ts += timedelta(seconds=30)


def test_within_operating_window():
    window = OperatingWindow(time(6), time(19))
    assert within_operating_window(TimeInterval(at(6), at(7)), window)
    assert within_operating_window(TimeInterval(at(18), at(19)), window)
    assert not within_operating_window(TimeInterval(at(5, 45), at(6, 30)), window)
    assert not within_operating_window(TimeInterval(at(18, 30), at(19, 30)), window)


def test_window_is_checked_against_start_day():
    window = OperatingWindow()
    overnight = TimeInterval(at(18), datetime(2030, 1, 8, 7))
    assert not window.contains(overnight)


def test_window_must_close_after_open():
    with pytest.raises(InvalidParameterError):
        OperatingWindow(time(19), time(6))


def test_durations():
    assert is_valid_duration(15)
    assert is_valid_duration(90)
    assert not is_valid_duration(0)
    assert not is_valid_duration(-15)
    assert not is_valid_duration(20)
    assert not is_valid_duration(True)
    assert normalize_duration(0) == 15
    assert normalize_duration(52) == 45
    assert normalize_duration(53) == 60
    assert normalize_duration(-30) == 15


def test_is_aligned():
    assert is_aligned(at(9, 45))
    assert not is_aligned(at(9, 40))
    assert not is_aligned(at(9, 45, 1))


def test_to_local_drops_tzinfo():
    aware = datetime(2030, 1, 7, 9, tzinfo=timezone.utc)
    local = to_local(aware)
    assert local.tzinfo is None
    assert local == aware.astimezone().replace(tzinfo=None)
    assert to_local(at(9)) == at(9)
