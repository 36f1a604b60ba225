"""Free slots that are open on several locations at the same time.

The search walks a cursor through the operating window of one day. A
proposed slot ``[cursor, cursor + duration)`` is taken when none of the
selected locations has an overlapping booking. Taken slots are packed, the
cursor jumps to the end of the slot. Otherwise the cursor moves on by one
raster step and tries again.

"""

import logging
from datetime import date, timedelta
from typing import Iterator, Mapping, Sequence

from sitebook.scheduling.slots import BookableLocation, SimpleSlot
from sitebook.scheduling.timeslots import (
    DEFAULT_GRANULARITY,
    OperatingWindow,
    TimeInterval,
    is_valid_duration,
    round15,
)

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENT_CAP = 5


def rounded_bookings(
    location: BookableLocation, granularity: int
) -> list[TimeInterval]:
    """The bookings of a location snapped to the raster.

    A booking shorter than one raster step may collapse to nothing once
    rounded. Such bookings are widened to a single step instead of being
    dropped.
    """
    result = []
    step = timedelta(minutes=granularity)
    for booking in location.bookings:
        start = round15(booking.start, granularity)
        end = round15(booking.end, granularity)
        if end <= start:
            end = start + step
        result.append(TimeInterval(start, end))
    return result


def is_free(proposal: TimeInterval, bookings: Sequence[TimeInterval]) -> bool:
    return not any(proposal.overlaps(booking) for booking in bookings)


def concurrent_duration(durations: Mapping[str, int], default: int) -> int:
    """With per-location durations in concurrent mode, the longest one is
    reserved on every location."""
    return max(durations.values(), default=default)


def iter_concurrent_slots(
    locations: Sequence[BookableLocation],
    day: date,
    duration: int,
    *,
    window: OperatingWindow = OperatingWindow(),
    granularity: int = DEFAULT_GRANULARITY,
    cap: int = DEFAULT_CONCURRENT_CAP,
) -> Iterator[SimpleSlot]:
    """Yields up to ``cap`` slots of ``duration`` minutes which are free on
    all the given locations. Calling it again starts the search over.

    Nothing is yielded without locations or with a duration that is not a
    positive multiple of the granularity.
    """
    if not locations or not is_valid_duration(duration, granularity) or cap < 1:
        return

    booked = {loc.id: rounded_bookings(loc, granularity) for loc in locations}
    ids = tuple(loc.id for loc in locations)
    names = tuple(loc.name for loc in locations)

    length = timedelta(minutes=duration)
    step = timedelta(minutes=granularity)
    cursor, closes = window.bounds(day)

    found = 0
    while found < cap and cursor + length <= closes:
        proposal = TimeInterval(cursor, cursor + length)

        if all(is_free(proposal, booked[loc_id]) for loc_id in ids):
            yield SimpleSlot(proposal, ids, names)
            found += 1
            cursor = proposal.end
        else:
            cursor += step

    logger.debug(
        "found %s concurrent slots of %s minutes on %s for %s",
        found, duration, day, ", ".join(names)
    )
