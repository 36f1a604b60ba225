import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Callable

from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)


class View(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class Action(str, Enum):
    PREVIOUS = "PREVIOUS"
    NEXT = "NEXT"
    TODAY = "TODAY"
    DATE = "DATE"
    VIEW = "VIEW"


@dataclass
class CalendarState:
    current_date: date
    current_view: View = View.DAY


def add_months(day: date, months: int) -> date:
    """Shifts by calendar months, clamping to the end of shorter months."""
    return day + relativedelta(months=months)


def shift(day: date, view: View, steps: int) -> date:
    if view == View.DAY:
        return day + timedelta(days=steps)
    if view == View.WEEK:
        return day + timedelta(weeks=steps)
    return add_months(day, steps)


class DateCursor:
    """Tracks the date and view a calendar shows.

    The cursor knows nothing about bookings. Whenever a transition moves the
    date, every listener registered through ``on_date_changed`` is called
    with the new date, and the transition itself returns True. Listeners are
    expected to recompute availability for that date.
    """

    def __init__(
        self,
        current_date: date | None = None,
        current_view: View = View.DAY,
        today: Callable[[], date] = date.today,
    ):
        self._today = today
        self.state = CalendarState(current_date or today(), View(current_view))
        self._listeners: list[Callable[[date], None]] = []

    @property
    def current_date(self) -> date:
        return self.state.current_date

    @property
    def current_view(self) -> View:
        return self.state.current_view

    def on_date_changed(self, callback: Callable[[date], None]):
        self._listeners.append(callback)
        return callback

    def previous(self) -> bool:
        return self._move_to(shift(self.current_date, self.current_view, -1))

    def next(self) -> bool:
        return self._move_to(shift(self.current_date, self.current_view, 1))

    def today(self) -> bool:
        return self._move_to(self._today())

    def set_date(self, value: date) -> bool:
        return self._move_to(value)

    def set_view(self, view: View) -> bool:
        self.state.current_view = View(view)
        return False

    def dispatch(self, action: Action | str, value=None) -> bool:
        action = Action(action)
        if action == Action.PREVIOUS:
            return self.previous()
        if action == Action.NEXT:
            return self.next()
        if action == Action.TODAY:
            return self.today()
        if action == Action.DATE:
            if not isinstance(value, date):
                raise ValueError("DATE needs a date value")
            return self.set_date(value)
        return self.set_view(value)

    def visible_range(self) -> tuple[date, date]:
        """First and last day the current view shows, weeks start Monday."""
        day = self.current_date
        if self.current_view == View.DAY:
            return day, day
        if self.current_view == View.WEEK:
            monday = day - timedelta(days=day.weekday())
            return monday, monday + timedelta(days=6)
        first = day.replace(day=1)
        return first, first + relativedelta(months=1, days=-1)

    def _move_to(self, value: date) -> bool:
        if isinstance(value, datetime):
            value = value.date()
        if value == self.state.current_date:
            return False
        self.state.current_date = value
        logger.debug("calendar moved to %s", value)
        for listener in self._listeners:
            listener(value)
        return True
