from dataclasses import dataclass, field
from typing import Literal, Sequence, Union

from sitebook.scheduling.timeslots import TimeInterval


@dataclass(frozen=True)
class BookableLocation:
    """A location together with the intervals already booked on it."""

    id: str
    name: str
    bookings: Sequence[TimeInterval] = field(default_factory=tuple)


@dataclass(frozen=True)
class SimpleSlot:
    """The same interval free on every selected location."""

    interval: TimeInterval
    location_ids: tuple[str, ...]
    location_names: tuple[str, ...]
    kind: Literal["simple"] = "simple"

    @property
    def start(self):
        return self.interval.start

    @property
    def end(self):
        return self.interval.end

    def segments(self) -> list["Segment"]:
        return [
            Segment(location_id, name, self.interval)
            for location_id, name in zip(self.location_ids, self.location_names)
        ]


@dataclass(frozen=True)
class Segment:
    location_id: str
    location_name: str
    interval: TimeInterval


@dataclass(frozen=True)
class SequentialSlot:
    """A chain of back-to-back intervals, one per location."""

    interval: TimeInterval
    sequential_slots: tuple[Segment, ...]
    kind: Literal["sequential"] = "sequential"

    @property
    def start(self):
        return self.interval.start

    @property
    def end(self):
        return self.interval.end

    def segments(self) -> list[Segment]:
        return list(self.sequential_slots)


Slot = Union[SimpleSlot, SequentialSlot]
