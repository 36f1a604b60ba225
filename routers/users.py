from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from routers.courses import CourseOut, course_out
from sitebook import courses
from sitebook.auth import Principal, require_admin
from sitebook.db import get_db
from sitebook.errors import NotFoundError
from sitebook.models import User

router = APIRouter()


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str | None = None
    role: str
    created_at: datetime | None = None


class UserDetailOut(BaseModel):
    user: UserOut
    registered_courses: list[CourseOut] = []


@router.get("", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db), admin: Principal = Depends(require_admin)):
    return db.query(User).order_by(User.name).all()


@router.get("/{user_id}", response_model=UserDetailOut)
def read_user(user_id: str, db: Session = Depends(get_db), admin: Principal = Depends(require_admin)):
    """The user together with the courses they are registered for."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found.")
    return UserDetailOut(
        user=UserOut.model_validate(user),
        registered_courses=[course_out(db, c) for c in courses.registered_courses(db, user_id)],
    )
