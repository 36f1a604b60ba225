"""Ties the calendar cursor, the selection and the slot generators together.

``compute_slots`` is the one function the rest of the code calls to get
availability. It is pure: given locations with their bookings, a day, the
duration(s) and the mode it returns a fresh list of slots.

``SchedulePlanner`` is the stateful side used by interactive clients. It
holds the selection explicitly and recomputes whenever the selection or the
cursor date changes.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Mapping, Protocol, Sequence

from sitebook.scheduling.availability import (
    DEFAULT_CONCURRENT_CAP,
    concurrent_duration,
    iter_concurrent_slots,
)
from sitebook.scheduling.navigation import DateCursor
from sitebook.scheduling.sequential import DEFAULT_SEQUENTIAL_CAP, iter_sequential_slots
from sitebook.scheduling.slots import BookableLocation, Slot
from sitebook.scheduling.timeslots import (
    DEFAULT_GRANULARITY,
    OperatingWindow,
    TimeInterval,
    normalize_duration,
)

logger = logging.getLogger(__name__)

DEFAULT_DURATION = 60


class Mode(str, Enum):
    CONCURRENT = "concurrent"
    SEQUENTIAL = "sequential"


@dataclass(frozen=True)
class SchedulingConfig:
    window: OperatingWindow = OperatingWindow()
    granularity: int = DEFAULT_GRANULARITY
    concurrent_cap: int = DEFAULT_CONCURRENT_CAP
    sequential_cap: int = DEFAULT_SEQUENTIAL_CAP
    default_duration: int = DEFAULT_DURATION

    @classmethod
    def from_settings(cls, settings) -> "SchedulingConfig":
        return cls(
            window=settings.operating_window,
            granularity=settings.granularity_minutes,
            concurrent_cap=settings.concurrent_slot_cap,
            sequential_cap=settings.sequential_slot_cap,
            default_duration=settings.default_duration_minutes,
        )


def compute_slots(
    locations: Sequence[BookableLocation],
    day: date,
    durations: int | Mapping[str, int],
    mode: Mode = Mode.CONCURRENT,
    *,
    config: SchedulingConfig = SchedulingConfig(),
) -> list[Slot]:
    """Returns the open slots for the given locations on ``day``.

    ``durations`` is either one duration for every location or a mapping of
    location id to duration. Locations missing from the mapping use the
    configured default. In concurrent mode the longest duration applies to
    all locations; in sequential mode the locations are chained in the
    given order.
    """
    if isinstance(durations, Mapping):
        per_location = {
            loc.id: durations.get(loc.id, config.default_duration)
            for loc in locations
        }
    else:
        per_location = {loc.id: durations for loc in locations}

    if Mode(mode) == Mode.SEQUENTIAL:
        chain = [(loc, per_location[loc.id]) for loc in locations]
        return list(iter_sequential_slots(
            chain, day,
            window=config.window,
            granularity=config.granularity,
            cap=config.sequential_cap,
        ))

    duration = concurrent_duration(per_location, config.default_duration)
    return list(iter_concurrent_slots(
        locations, day, duration,
        window=config.window,
        granularity=config.granularity,
        cap=config.concurrent_cap,
    ))


class BookingSource(Protocol):
    """Read path into the persistence layer."""

    def fetch_bookings_for_locations(
        self, location_ids: Sequence[str], day: date
    ) -> Mapping[str, Sequence]:
        ...


@dataclass
class Selection:
    location_ids: list[str] = field(default_factory=list)
    location_names: dict[str, str] = field(default_factory=dict)
    durations: dict[str, int] = field(default_factory=dict)
    mode: Mode = Mode.CONCURRENT


def as_interval(booking) -> TimeInterval:
    if isinstance(booking, TimeInterval):
        return booking
    if hasattr(booking, "interval"):
        return booking.interval
    return TimeInterval(booking.start_time, booking.end_time)


class SchedulePlanner:
    """Keeps the user's selection and the last computed slots.

    Nothing here is reactive: the cursor signals a date change and the
    planner recomputes, selection setters recompute explicitly. The result
    list is replaced on every computation, never updated in place.
    """

    def __init__(
        self,
        source: BookingSource,
        cursor: DateCursor | None = None,
        config: SchedulingConfig = SchedulingConfig(),
    ):
        self.source = source
        self.config = config
        self.cursor = cursor or DateCursor()
        self.selection = Selection()
        self.slots: list[Slot] = []
        self.cursor.on_date_changed(self._date_changed)

    def select_locations(self, locations: Sequence[tuple[str, str]]) -> list[Slot]:
        """Selects ``(id, name)`` pairs, in booking order for chains."""
        ids = [loc_id for loc_id, _ in locations]
        self.selection.location_ids = ids
        self.selection.location_names = dict(locations)
        self.selection.durations = {
            loc_id: self.selection.durations.get(loc_id, self.config.default_duration)
            for loc_id in ids
        }
        return self.recompute()

    def set_duration(self, minutes: int, location_id: str | None = None) -> list[Slot]:
        minutes = normalize_duration(minutes, self.config.granularity)
        targets = [location_id] if location_id else self.selection.location_ids
        for loc_id in targets:
            self.selection.durations[loc_id] = minutes
        return self.recompute()

    def set_mode(self, mode: Mode | str) -> list[Slot]:
        self.selection.mode = Mode(mode)
        return self.recompute()

    def recompute(self) -> list[Slot]:
        ids = self.selection.location_ids
        if not ids:
            self.slots = []
            return self.slots

        day = self.cursor.current_date
        bookings = self.source.fetch_bookings_for_locations(ids, day)
        locations = [
            BookableLocation(
                loc_id,
                self.selection.location_names.get(loc_id, loc_id),
                tuple(as_interval(b) for b in bookings.get(loc_id, ())),
            )
            for loc_id in ids
        ]
        self.slots = compute_slots(
            locations, day, dict(self.selection.durations),
            self.selection.mode, config=self.config,
        )
        logger.debug("recomputed %s slots for %s", len(self.slots), day)
        return self.slots

    def _date_changed(self, _day: date):
        self.recompute()
