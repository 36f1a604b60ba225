import uuid
from datetime import date

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.orm import Session

from sitebook import courses
from sitebook.auth import Principal, get_current_user, require_admin
from sitebook.db import get_db
from sitebook.errors import InvalidParameterError
from sitebook.models import Course

router = APIRouter()


class CourseBody(BaseModel):
    course_code: str
    title: str
    description: str | None = None
    location: str | None = None
    capacity: int | None = Field(default=None, ge=0)
    status: str | None = None
    duration: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    repeats: bool = False
    until: date | None = None
    time_from: str | None = None
    time_to: str | None = None


class CourseUpdateBody(CourseBody):
    course_code: str | None = None
    title: str | None = None
    repeats: bool | None = None

    @field_validator("course_code", "title", "repeats")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may be left out but not cleared")
        return v


class CourseOut(CourseBody):
    model_config = ConfigDict(from_attributes=True)

    id: str
    total_registered: int = 0


def course_out(db: Session, course: Course) -> CourseOut:
    out = CourseOut.model_validate(course)
    out.total_registered = courses.registered_count(db, course.id)
    return out


@router.get("", response_model=list[CourseOut])
def list_courses(db: Session = Depends(get_db)):
    return [course_out(db, c) for c in db.query(Course).order_by(Course.title).all()]


@router.get("/registered/me", response_model=list[CourseOut])
def my_courses(db: Session = Depends(get_db), user: Principal = Depends(get_current_user)):
    return [course_out(db, c) for c in courses.registered_courses(db, user.id)]


@router.get("/{course_id}", response_model=CourseOut)
def read_course(course_id: str, db: Session = Depends(get_db)):
    return course_out(db, courses.get_course(db, course_id))


@router.post("", status_code=201, response_model=CourseOut)
def create_course(body: CourseBody, db: Session = Depends(get_db), admin: Principal = Depends(require_admin)):
    if db.query(Course).filter(Course.course_code == body.course_code).first():
        raise InvalidParameterError(f"Course code {body.course_code} is already taken.")
    course = Course(id=str(uuid.uuid4()), **body.model_dump())
    db.add(course)
    db.commit()
    return course_out(db, course)


@router.put("/{course_id}", response_model=CourseOut)
def update_course(
    course_id: str,
    body: CourseUpdateBody,
    db: Session = Depends(get_db),
    admin: Principal = Depends(require_admin),
):
    course = courses.get_course(db, course_id)
    changes = body.model_dump(exclude_unset=True)
    if "course_code" in changes:
        taken = (
            db.query(Course)
            .filter(Course.course_code == changes["course_code"], Course.id != course.id)
            .first()
        )
        if taken:
            raise InvalidParameterError(f"Course code {changes['course_code']} is already taken.")
    for key, value in changes.items():
        setattr(course, key, value)
    db.commit()
    return course_out(db, course)


@router.delete("/{course_id}")
def delete_course(course_id: str, db: Session = Depends(get_db), admin: Principal = Depends(require_admin)):
    db.delete(courses.get_course(db, course_id))
    db.commit()
    return {"message": "Course deleted"}


@router.post("/{course_id}/register")
def register_for_course(
    course_id: str,
    db: Session = Depends(get_db),
    user: Principal = Depends(get_current_user),
):
    courses.register(db, course_id, user.id)
    return {"message": "Successfully registered for the course"}
