from datetime import date, datetime, time

from sitebook.scheduling.availability import concurrent_duration, iter_concurrent_slots
from sitebook.scheduling.slots import BookableLocation, SimpleSlot
from sitebook.scheduling.timeslots import OperatingWindow, TimeInterval, overlaps

DAY = date(2030, 1, 7)


def at(hour, minute=0):
    return datetime(2030, 1, 7, hour, minute)


def booked(*spans):
    return tuple(TimeInterval(at(*s), at(*e)) for s, e in spans)


def test_skips_booked_hour():
    room = BookableLocation("l", "Room L", booked(((9,), (10,))))
    slots = list(iter_concurrent_slots([room], DAY, 60))

    assert [(s.start, s.end) for s in slots] == [
        (at(6), at(7)),
        (at(7), at(8)),
        (at(8), at(9)),
        (at(10), at(11)),
        (at(11), at(12)),
    ]
    assert all(isinstance(s, SimpleSlot) for s in slots)
    assert slots[0].location_names == ("Room L",)


def test_cursor_advances_in_quarter_hours_after_conflict():
    room = BookableLocation("l", "Room L", booked(((6,), (6, 45))))
    first = next(iter_concurrent_slots([room], DAY, 60))
    assert first.interval == TimeInterval(at(6, 45), at(7, 45))


def test_every_location_must_be_free():
    a = BookableLocation("a", "A", booked(((6,), (7,))))
    b = BookableLocation("b", "B", booked(((7,), (8,))))
    slots = list(iter_concurrent_slots([a, b], DAY, 60, cap=2))

    assert [s.start for s in slots] == [at(8), at(9)]
    assert slots[0].location_ids == ("a", "b")


def test_bookings_are_rounded_before_comparing():
    # 08:53 - 10:07 rounds to 09:00 - 10:00
    room = BookableLocation("l", "L", booked(((8, 53), (10, 7))))
    slots = list(iter_concurrent_slots([room], DAY, 60, cap=4))
    assert [s.start for s in slots] == [at(6), at(7), at(8), at(10)]


def test_tiny_booking_still_blocks_its_quarter():
    room = BookableLocation("l", "L", booked(((6, 1), (6, 4))))
    first = next(iter_concurrent_slots([room], DAY, 15))
    assert first.start == at(6, 15)


def test_stops_at_close():
    window = OperatingWindow(time(6), time(8))
    room = BookableLocation("l", "L")
    slots = list(iter_concurrent_slots([room], DAY, 45, window=window, cap=10))

    assert [(s.start, s.end) for s in slots] == [
        (at(6), at(6, 45)),
        (at(6, 45), at(7, 30)),
    ]


def test_cap_limits_results():
    room = BookableLocation("l", "L")
    assert len(list(iter_concurrent_slots([room], DAY, 15))) == 5
    assert len(list(iter_concurrent_slots([room], DAY, 15, cap=8))) == 8


def test_empty_inputs_yield_nothing():
    room = BookableLocation("l", "L")
    assert list(iter_concurrent_slots([], DAY, 60)) == []
    assert list(iter_concurrent_slots([room], DAY, 0)) == []
    assert list(iter_concurrent_slots([room], DAY, -15)) == []
    assert list(iter_concurrent_slots([room], DAY, 20)) == []


def test_fully_booked_day_yields_nothing():
    room = BookableLocation("l", "L", booked(((6,), (19,))))
    assert list(iter_concurrent_slots([room], DAY, 15)) == []


def test_restartable():
    room = BookableLocation("l", "L", booked(((7,), (8,))))
    assert list(iter_concurrent_slots([room], DAY, 30)) == \
        list(iter_concurrent_slots([room], DAY, 30))


def test_slots_are_ordered_disjoint_and_within_window():
    window = OperatingWindow()
    rooms = [
        BookableLocation("a", "A", booked(((6, 30), (7, 15)), ((12,), (13, 30)))),
        BookableLocation("b", "B", booked(((9, 45), (10, 15)), ((15,), (16,)))),
    ]
    for duration in (15, 30, 45, 60, 90, 120):
        slots = list(iter_concurrent_slots(rooms, DAY, duration, cap=50))
        for earlier, later in zip(slots, slots[1:]):
            assert earlier.start < later.start
        for i, s in enumerate(slots):
            assert window.contains(s.interval)
            for other in slots[i + 1:]:
                assert not overlaps(s.interval, other.interval)


def test_concurrent_duration_takes_longest():
    assert concurrent_duration({"a": 30, "b": 90}, 60) == 90
    assert concurrent_duration({}, 60) == 60
