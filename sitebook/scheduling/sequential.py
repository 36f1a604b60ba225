"""Free slots for locations that are reserved one after another.

Each location in the chain has its own duration. Starting at an anchor, the
first location is proposed for its duration, the second one right after it
and so on. Every step is checked against the bookings of its own location
only. A chain either fits as a whole or the anchor is dropped.

"""

import logging
from datetime import date, timedelta
from typing import Iterator, Sequence

from sitebook.scheduling.availability import is_free, rounded_bookings
from sitebook.scheduling.slots import BookableLocation, Segment, SequentialSlot
from sitebook.scheduling.timeslots import (
    DEFAULT_GRANULARITY,
    OperatingWindow,
    TimeInterval,
    is_valid_duration,
)

logger = logging.getLogger(__name__)

DEFAULT_SEQUENTIAL_CAP = 8

Chain = Sequence[tuple[BookableLocation, int]]


def fit_chain(anchor, chain, booked) -> list[Segment] | None:
    """Lays out the chain from the anchor, None if any step is taken."""
    segments = []
    cursor = anchor
    for location, duration in chain:
        proposal = TimeInterval.from_duration(cursor, duration)
        if not is_free(proposal, booked[location.id]):
            return None
        segments.append(Segment(location.id, location.name, proposal))
        cursor = proposal.end
    return segments


def iter_sequential_slots(
    chain: Chain,
    day: date,
    *,
    window: OperatingWindow = OperatingWindow(),
    granularity: int = DEFAULT_GRANULARITY,
    cap: int = DEFAULT_SEQUENTIAL_CAP,
) -> Iterator[SequentialSlot]:
    if not chain or cap < 1:
        return
    if not all(is_valid_duration(d, granularity) for _, d in chain):
        return

    booked = {}
    for location, _ in chain:
        booked[location.id] = rounded_bookings(location, granularity)

    total = timedelta(minutes=sum(d for _, d in chain))
    step = timedelta(minutes=granularity)
    anchor, closes = window.bounds(day)

    found = 0
    while found < cap and anchor + total <= closes:
        segments = fit_chain(anchor, chain, booked)

        if segments is None:
            anchor += step
            continue

        yield SequentialSlot(
            TimeInterval(anchor, segments[-1].interval.end), tuple(segments)
        )
        found += 1
        anchor = segments[-1].interval.end

    logger.debug(
        "found %s sequential slots on %s for %s",
        found, day, " -> ".join(loc.name for loc, _ in chain)
    )
