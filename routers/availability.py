from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from sitebook.auth import Principal, get_current_user
from sitebook.config import settings
from sitebook.db import get_db
from sitebook.errors import InvalidParameterError
from sitebook.reservations import ReservationService
from sitebook.scheduling import BookableLocation, Mode, SchedulingConfig, compute_slots

router = APIRouter()


class SegmentOut(BaseModel):
    location_id: str
    location_name: str
    start_time: datetime
    end_time: datetime


class SlotOut(BaseModel):
    kind: str
    start_time: datetime
    end_time: datetime
    booked: bool = False
    location_ids: list[str]
    location_names: list[str]
    sequential_slots: list[SegmentOut] = []


def get_config() -> SchedulingConfig:
    return SchedulingConfig.from_settings(settings)


def slot_out(slot) -> SlotOut:
    segments = slot.segments()
    return SlotOut(
        kind=slot.kind,
        start_time=slot.start,
        end_time=slot.end,
        location_ids=[s.location_id for s in segments],
        location_names=[s.location_name for s in segments],
        sequential_slots=[
            SegmentOut(
                location_id=s.location_id,
                location_name=s.location_name,
                start_time=s.interval.start,
                end_time=s.interval.end,
            )
            for s in segments
        ] if slot.kind == "sequential" else [],
    )


@router.get("", response_model=list[SlotOut])
def list_availability(
    location_id: list[str] = Query(default=[]),
    day: date = Query(alias="date"),
    duration: list[int] = Query(default=[]),
    mode: Mode = Query(default=Mode.CONCURRENT),
    db: Session = Depends(get_db),
    config: SchedulingConfig = Depends(get_config),
    user: Principal = Depends(get_current_user),
):
    """
    Open slots on ``date`` for the selected locations:
      - concurrent: the same interval free on every location (longest duration wins)
      - sequential: locations booked back-to-back in the given order

    ``duration`` is either a single value for all locations or one value per
    location, in the order of ``location_id``. Without locations or with
    unusable durations the list is empty.
    """
    if len(set(location_id)) != len(location_id):
        raise InvalidParameterError("Each location may only be selected once.")
    if len(duration) > 1 and len(duration) != len(location_id):
        raise InvalidParameterError("Give one duration, or one per location.")

    if not location_id:
        return []

    service = ReservationService(db, config)
    rows = [service.get_location(loc_id) for loc_id in location_id]
    bookings = service.fetch_bookings_for_locations(location_id, day)

    locations = [
        BookableLocation(row.id, row.name, tuple(r.interval for r in bookings[row.id]))
        for row in rows
    ]
    if not duration:
        durations = config.default_duration
    elif len(duration) == 1:
        durations = duration[0]
    else:
        durations = dict(zip(location_id, duration))

    slots = compute_slots(locations, day, durations, mode, config=config)
    return [slot_out(slot) for slot in slots]
