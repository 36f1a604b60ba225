"""Time values the scheduler works with.

All bookable time is snapped to a raster (15 minutes by default): slots
start at 06:00, 06:15, 06:30 and so on. Existing bookings are rounded to the
same raster before they are compared, so ragged historical data does not
break the overlap checks.

Intervals are half-open. A booking from 09:00 to 10:00 does not overlap one
from 10:00 to 11:00, which is what allows back-to-back scheduling.

"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

from sitebook.errors import InvalidParameterError

# the granularity must divide an hour without any remaining minutes
VALID_GRANULARITIES = (5, 10, 15, 30, 60)
DEFAULT_GRANULARITY = 15


@dataclass(frozen=True, order=True)
class TimeInterval:
    start: datetime
    end: datetime

    def __post_init__(self):
        if not self.start < self.end:
            raise InvalidParameterError(
                "An interval must end after it starts."
            )

    @classmethod
    def from_duration(cls, start: datetime, minutes: int) -> "TimeInterval":
        return cls(start, start + timedelta(minutes=minutes))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def day(self) -> date:
        return self.start.date()

    def overlaps(self, other: "TimeInterval") -> bool:
        return overlaps(self, other)

    def rounded(self, granularity: int = DEFAULT_GRANULARITY) -> "TimeInterval":
        return TimeInterval(
            round15(self.start, granularity), round15(self.end, granularity)
        )


@dataclass(frozen=True)
class OperatingWindow:
    """The daily opening hours all reservations must fall into."""

    open: time = time(6, 0)
    close: time = time(19, 0)

    def __post_init__(self):
        if not self.open < self.close:
            raise InvalidParameterError(
                "The operating window must close after it opens."
            )

    def bounds(self, day: date) -> tuple[datetime, datetime]:
        return datetime.combine(day, self.open), datetime.combine(day, self.close)

    def contains(self, interval: TimeInterval) -> bool:
        return within_operating_window(interval, self)


def to_local(ts: datetime) -> datetime:
    """Returns a naive local timestamp, converting aware ones first."""
    if ts.tzinfo is not None:
        return ts.astimezone().replace(tzinfo=None)
    return ts


def round15(ts: datetime, granularity: int = DEFAULT_GRANULARITY) -> datetime:
    """Rounds the minutes of the given timestamp to the nearest multiple of
    the granularity. Ties round up, seconds are dropped and an overflow
    carries into the hour (10:53 becomes 11:00).

    """
    base = ts.replace(minute=0, second=0, microsecond=0)
    steps = int(ts.minute / granularity + 0.5)
    return base + timedelta(minutes=steps * granularity)


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    return a.start < b.end and b.start < a.end


def within_operating_window(interval: TimeInterval, window: OperatingWindow) -> bool:
    # the day is taken from the start, overnight intervals never fit
    opens, closes = window.bounds(interval.start.date())
    return interval.start >= opens and interval.end <= closes


def is_aligned(ts: datetime, granularity: int = DEFAULT_GRANULARITY) -> bool:
    return ts.second == 0 and ts.microsecond == 0 and ts.minute % granularity == 0


def is_valid_duration(minutes, granularity: int = DEFAULT_GRANULARITY) -> bool:
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        return False
    return minutes >= granularity and minutes % granularity == 0


def normalize_duration(minutes: int, granularity: int = DEFAULT_GRANULARITY) -> int:
    """Snaps a user supplied duration to the raster, never below one step."""
    steps = int(minutes / granularity + 0.5)
    return max(granularity, steps * granularity)


def rounding_threshold(boundary: datetime, granularity: int = DEFAULT_GRANULARITY) -> datetime:
    """The first timestamp ``round15`` no longer rounds below ``boundary``.

    For an aligned boundary, ``round15(ts) < boundary`` holds exactly when
    ``ts < rounding_threshold(boundary)``. This lets raw stored values be
    compared in SQL as if they had been rounded.
    """
    return boundary - timedelta(minutes=granularity // 2)
