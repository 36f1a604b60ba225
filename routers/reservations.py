from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from routers.availability import get_config
from routers.sites import ReservationOut
from sitebook.auth import Principal, get_current_user
from sitebook.db import get_db
from sitebook.reservations import ReservationService
from sitebook.scheduling import SchedulingConfig

router = APIRouter()


class CreateReservationBody(BaseModel):
    start_time: datetime
    end_time: datetime


class SegmentBody(BaseModel):
    location_id: str
    start_time: datetime
    end_time: datetime


class ReserveSlotBody(BaseModel):
    segments: list[SegmentBody] = Field(min_length=1)


def get_service(
    db: Session = Depends(get_db), config: SchedulingConfig = Depends(get_config)
) -> ReservationService:
    return ReservationService(db, config)


@router.get("/locations/{location_id}/reservations", response_model=list[ReservationOut])
def list_reservations(
    location_id: str,
    day: date | None = Query(default=None, alias="date"),
    service: ReservationService = Depends(get_service),
    user: Principal = Depends(get_current_user),
):
    return service.list_reservations(location_id, day)


@router.post("/locations/{location_id}/reservations", status_code=201, response_model=ReservationOut)
def create_reservation(
    location_id: str,
    body: CreateReservationBody,
    service: ReservationService = Depends(get_service),
    user: Principal = Depends(get_current_user),
):
    """
    Book a location for the current user. Rejected with 422 outside of the
    operating hours and with 409 when another reservation overlaps.
    """
    return service.create_reservation(location_id, body.start_time, body.end_time, user)


@router.delete("/locations/{location_id}/reservations/{reservation_id}")
def delete_reservation(
    location_id: str,
    reservation_id: str,
    service: ReservationService = Depends(get_service),
    user: Principal = Depends(get_current_user),
):
    # Only the owner can delete a reservation
    service.delete_reservation(location_id, reservation_id, user)
    return {"reservation_id": reservation_id, "status": "DELETED"}


@router.post("/reservations/slot", status_code=201, response_model=list[ReservationOut])
def reserve_slot(
    body: ReserveSlotBody,
    service: ReservationService = Depends(get_service),
    user: Principal = Depends(get_current_user),
):
    """Book all segments of a computed slot, or none if one of them is taken."""
    segments = [(s.location_id, s.start_time, s.end_time) for s in body.segments]
    return service.reserve_slot(segments, user)
