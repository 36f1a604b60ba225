"""Per-location locks held across a reservation's check-and-write.

The conditional insert in ``sitebook.reservations`` is already atomic on a
single statement level. The lock additionally serializes writers of the same
location inside one process, so multi-segment reservations are checked and
written as one unit.
"""

from contextlib import contextmanager
from threading import Lock


class LocationLocks:
    """Hands out one lock per location id."""

    def __init__(self):
        self._guard = Lock()
        self._locks: dict[str, Lock] = {}

    def get(self, location_id: str) -> Lock:
        with self._guard:
            lock = self._locks.get(location_id)
            if lock is None:
                lock = self._locks[location_id] = Lock()
            return lock

    @contextmanager
    def hold(self, *location_ids: str):
        # sorted to avoid deadlocks between chains sharing locations
        locks = [self.get(loc_id) for loc_id in sorted(set(location_ids))]
        for lock in locks:
            lock.acquire()
        try:
            yield
        finally:
            for lock in reversed(locks):
                lock.release()


location_locks = LocationLocks()
