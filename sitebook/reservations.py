import logging
import uuid
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.orm import Session

from sitebook.errors import (
    InvalidParameterError,
    NotFoundError,
    NotOwnerError,
    OutOfHoursError,
    OverlapError,
)
from sitebook.locking import LocationLocks, location_locks
from sitebook.models import Location, Reservation
from sitebook.scheduling.planner import SchedulingConfig
from sitebook.scheduling.timeslots import (
    TimeInterval,
    is_aligned,
    rounding_threshold,
    to_local,
    within_operating_window,
)

logger = logging.getLogger(__name__)

# Single statement check-and-write: the row is only inserted if no booking
# of the same location overlaps the requested (half-open) interval once that
# booking is rounded to the raster, the same comparison the slot generators
# make. A booking that rounds to nothing blocks the step it starts in.
INSERT_IF_FREE = text("""
    INSERT INTO reservations
        (id, seq, location_id, start_time, end_time, status, booked_by, created_at)
    SELECT
        :reservation_id,
        (SELECT COALESCE(MAX(r.seq), 0) + 1 FROM reservations r
         WHERE r.location_id = :location_id),
        :location_id, :start_time, :end_time, 'booked', :user_id, :created_at
    WHERE NOT EXISTS (
        SELECT 1 FROM reservations r
        WHERE r.location_id = :location_id
          AND r.start_time < :starts_before
          AND (r.end_time >= :ends_from OR r.start_time >= :starts_from)
    )
""").bindparams(
    bindparam("start_time", type_=DateTime),
    bindparam("end_time", type_=DateTime),
    bindparam("starts_before", type_=DateTime),
    bindparam("ends_from", type_=DateTime),
    bindparam("starts_from", type_=DateTime),
    bindparam("created_at", type_=DateTime),
)


def user_id_of(user) -> str:
    return user if isinstance(user, str) else user.id


def overlap_bounds(interval: TimeInterval, granularity: int) -> dict:
    """Parameters of ``INSERT_IF_FREE`` for an aligned interval.

    A stored booking rounded to ``[rs, re)`` conflicts when ``rs < end`` and
    either ``re > start`` or, for a booking collapsed to one step,
    ``rs >= start``.
    """
    step = timedelta(minutes=granularity)
    return {
        "starts_before": rounding_threshold(interval.end, granularity),
        "ends_from": rounding_threshold(interval.start + step, granularity),
        "starts_from": rounding_threshold(interval.start, granularity),
    }


class ReservationService:
    """Authoritative validation and persistence of reservations.

    Availability shown to a user is computed from a snapshot and may be
    stale by the time they confirm. Everything here re-checks against the
    database.
    """

    def __init__(
        self,
        db: Session,
        config: SchedulingConfig = SchedulingConfig(),
        locks: LocationLocks = location_locks,
    ):
        self.db = db
        self.config = config
        self.locks = locks

    def fetch_bookings_for_locations(
        self, location_ids: Sequence[str], day: date
    ) -> dict[str, list[Reservation]]:
        """Reservations touching ``day`` per location, in insertion order."""
        result = {loc_id: [] for loc_id in location_ids}
        if not result:
            return result

        day_start = datetime.combine(day, datetime.min.time())
        day_end = day_start + timedelta(days=1)
        rows = (
            self.db.query(Reservation)
            .filter(Reservation.location_id.in_(list(result)))
            .filter(Reservation.start_time < day_end)
            .filter(Reservation.end_time > day_start)
            .order_by(Reservation.seq)
            .all()
        )
        for row in rows:
            result[row.location_id].append(row)
        return result

    def list_reservations(self, location_id: str, day: date | None = None) -> list[Reservation]:
        self.get_location(location_id)
        if day is not None:
            return self.fetch_bookings_for_locations([location_id], day)[location_id]
        return (
            self.db.query(Reservation)
            .filter(Reservation.location_id == location_id)
            .order_by(Reservation.seq)
            .all()
        )

    def get_location(self, location_id: str) -> Location:
        location = self.db.get(Location, location_id)
        if location is None:
            raise NotFoundError(f"Location {location_id} not found.")
        return location

    def check_interval(self, start: datetime, end: datetime) -> TimeInterval:
        interval = TimeInterval(to_local(start), to_local(end))
        granularity = self.config.granularity

        if not (is_aligned(interval.start, granularity) and is_aligned(interval.end, granularity)):
            raise InvalidParameterError(
                f"Reservations must start and end on {granularity} minute boundaries."
            )

        if not within_operating_window(interval, self.config.window):
            window = self.config.window
            raise OutOfHoursError(
                "Reservations must lie between {:%H:%M} and {:%H:%M}.".format(
                    window.open, window.close
                )
            )
        return interval

    def create_reservation(self, location_id: str, start: datetime, end: datetime, user) -> Reservation:
        return self.reserve_slot([(location_id, start, end)], user)[0]

    def reserve_slot(
        self, segments: Iterable[tuple[str, datetime, datetime]], user
    ) -> list[Reservation]:
        """Books every ``(location_id, start, end)`` segment or none of them."""
        user_id = user_id_of(user)

        checked = []
        for location_id, start, end in segments:
            self.get_location(location_id)
            checked.append((location_id, self.check_interval(start, end)))

        if not checked:
            raise InvalidParameterError("Nothing to reserve.")

        created_ids = []
        with self.locks.hold(*(loc_id for loc_id, _ in checked)):
            try:
                for location_id, interval in checked:
                    reservation_id = str(uuid.uuid4())
                    res = self.db.execute(INSERT_IF_FREE, {
                        "reservation_id": reservation_id,
                        "location_id": location_id,
                        "start_time": interval.start,
                        "end_time": interval.end,
                        "user_id": user_id,
                        "created_at": datetime.now(),
                        **overlap_bounds(interval, self.config.granularity),
                    })
                    if res.rowcount != 1:
                        logger.warning(
                            "rejected reservation of %s from %s to %s by %s: overlap",
                            location_id, interval.start, interval.end, user_id
                        )
                        raise OverlapError(
                            f"Location {location_id} is already booked between "
                            f"{interval.start:%H:%M} and {interval.end:%H:%M}."
                        )
                    created_ids.append(reservation_id)
                self.db.commit()
            except Exception:
                # none of the segments may survive a failed one
                self.db.rollback()
                raise

        created = [self.db.get(Reservation, rid) for rid in created_ids]
        for reservation in created:
            logger.info(
                "reserved %s from %s to %s for %s",
                reservation.location_id, reservation.start_time,
                reservation.end_time, user_id
            )
        return created

    def delete_reservation(self, location_id: str, reservation_id: str, user) -> None:
        user_id = user_id_of(user)
        reservation = (
            self.db.query(Reservation)
            .filter(Reservation.id == reservation_id)
            .filter(Reservation.location_id == location_id)
            .first()
        )
        if reservation is None:
            raise NotFoundError(f"Reservation {reservation_id} not found.")

        if reservation.booked_by != user_id:
            logger.warning(
                "refused deletion of reservation %s by %s", reservation_id, user_id
            )
            raise NotOwnerError()

        self.db.delete(reservation)
        self.db.commit()
        logger.info("deleted reservation %s of %s", reservation_id, location_id)
