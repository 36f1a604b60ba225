import uuid
from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.orm import Session

from sitebook.auth import Principal, get_current_user, require_admin
from sitebook.db import get_db
from sitebook.errors import InvalidParameterError, NotFoundError
from sitebook.models import Location, Site

router = APIRouter()


class SiteBody(BaseModel):
    site_code: str
    name: str
    parent_name: str | None = None
    site_type: str | None = None
    capacity: int | None = Field(default=None, ge=0)
    street_address: str | None = None
    sub_address: str | None = None
    city: str | None = None
    state: str | None = None
    post_code: str | None = None
    directions: str | None = None
    description: str | None = None
    special_instructions: str | None = None
    rental_requirements: str | None = None
    image_url: str | None = None


class SiteUpdateBody(SiteBody):
    site_code: str | None = None
    name: str | None = None

    @field_validator("site_code", "name")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may be left out but not cleared")
        return v


class LocationBody(BaseModel):
    name: str
    location_type: str
    capacity: int = Field(ge=0)
    description: str | None = None
    special_instructions: str | None = None


class ReservationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    location_id: str
    start_time: datetime
    end_time: datetime
    status: str
    booked_by: str


class LocationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    site_id: str
    name: str
    location_type: str
    capacity: int
    description: str | None = None
    special_instructions: str | None = None
    reservations: list[ReservationOut] = []


class SiteOut(SiteBody):
    model_config = ConfigDict(from_attributes=True)

    id: str


class SiteDetailOut(SiteOut):
    locations: list[LocationOut] = []


def get_site(db: Session, site_id: str) -> Site:
    site = db.get(Site, site_id)
    if site is None:
        raise NotFoundError("Site not found.")
    return site


@router.get("", response_model=list[SiteOut])
def list_sites(db: Session = Depends(get_db), user: Principal = Depends(get_current_user)):
    return db.query(Site).order_by(Site.name).all()


@router.get("/{site_id}", response_model=SiteDetailOut)
def read_site(site_id: str, db: Session = Depends(get_db), user: Principal = Depends(get_current_user)):
    return get_site(db, site_id)


@router.post("", status_code=201, response_model=SiteOut)
def create_site(body: SiteBody, db: Session = Depends(get_db), admin: Principal = Depends(require_admin)):
    if db.query(Site).filter(Site.site_code == body.site_code).first():
        raise InvalidParameterError(f"Site code {body.site_code} is already taken.")
    site = Site(id=str(uuid.uuid4()), **body.model_dump())
    db.add(site)
    db.commit()
    return site


@router.put("/{site_id}", response_model=SiteOut)
def update_site(
    site_id: str,
    body: SiteUpdateBody,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    site = get_site(db, site_id)
    changes = body.model_dump(exclude_unset=True)
    if "site_code" in changes:
        taken = (
            db.query(Site)
            .filter(Site.site_code == changes["site_code"], Site.id != site.id)
            .first()
        )
        if taken:
            raise InvalidParameterError(f"Site code {changes['site_code']} is already taken.")
    for key, value in changes.items():
        setattr(site, key, value)
    db.commit()
    return site


@router.delete("/{site_id}")
def delete_site(site_id: str, db: Session = Depends(get_db), admin: Principal = Depends(require_admin)):
    db.delete(get_site(db, site_id))
    db.commit()
    return {"message": "Site deleted"}


@router.get("/{site_id}/locations", response_model=list[LocationOut])
def list_locations(site_id: str, db: Session = Depends(get_db), user: Principal = Depends(get_current_user)):
    return get_site(db, site_id).locations


@router.post("/{site_id}/locations", status_code=201, response_model=LocationOut)
def create_location(
    site_id: str,
    body: LocationBody,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    site = get_site(db, site_id)
    location = Location(id=str(uuid.uuid4()), site_id=site.id, **body.model_dump())
    db.add(location)
    db.commit()
    return location
