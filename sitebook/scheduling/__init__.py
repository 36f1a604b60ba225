from sitebook.scheduling.availability import iter_concurrent_slots
from sitebook.scheduling.navigation import Action, DateCursor, View
from sitebook.scheduling.planner import (
    Mode,
    SchedulePlanner,
    SchedulingConfig,
    compute_slots,
)
from sitebook.scheduling.sequential import iter_sequential_slots
from sitebook.scheduling.slots import (
    BookableLocation,
    Segment,
    SequentialSlot,
    SimpleSlot,
    Slot,
)
from sitebook.scheduling.timeslots import (
    OperatingWindow,
    TimeInterval,
    overlaps,
    round15,
    within_operating_window,
)

__all__ = [
    "Action",
    "BookableLocation",
    "DateCursor",
    "Mode",
    "OperatingWindow",
    "SchedulePlanner",
    "SchedulingConfig",
    "Segment",
    "SequentialSlot",
    "SimpleSlot",
    "Slot",
    "TimeInterval",
    "View",
    "compute_slots",
    "iter_concurrent_slots",
    "iter_sequential_slots",
    "overlaps",
    "round15",
    "within_operating_window",
]
