import logging
import uuid
from datetime import datetime

from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.orm import Session

from sitebook.errors import AlreadyRegisteredError, CourseFullError, NotFoundError
from sitebook.models import Course, CourseRegistration

logger = logging.getLogger(__name__)

# Enrolls the user only while the course has room (capacity 0/NULL is
# unlimited) and the user is not enrolled yet, in one statement.
REGISTER_IF_ROOM = text("""
    INSERT INTO course_registrations (id, course_id, user_id, created_at)
    SELECT :registration_id, c.id, :user_id, :created_at
    FROM courses c
    WHERE c.id = :course_id
      AND NOT EXISTS (
        SELECT 1 FROM course_registrations cr
        WHERE cr.course_id = c.id AND cr.user_id = :user_id
      )
      AND (
        COALESCE(c.capacity, 0) = 0
        OR (SELECT COUNT(*) FROM course_registrations cr
            WHERE cr.course_id = c.id) < c.capacity
      )
""").bindparams(bindparam("created_at", type_=DateTime))


def get_course(db: Session, course_id: str) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise NotFoundError("Course not found.")
    return course


def registered_count(db: Session, course_id: str) -> int:
    return (
        db.query(CourseRegistration)
        .filter(CourseRegistration.course_id == course_id)
        .count()
    )


def register(db: Session, course_id: str, user_id: str) -> CourseRegistration:
    get_course(db, course_id)

    registration_id = str(uuid.uuid4())
    res = db.execute(REGISTER_IF_ROOM, {
        "registration_id": registration_id,
        "course_id": course_id,
        "user_id": user_id,
        "created_at": datetime.now(),
    })

    if res.rowcount != 1:
        db.rollback()
        already = (
            db.query(CourseRegistration)
            .filter_by(course_id=course_id, user_id=user_id)
            .first()
        )
        if already:
            raise AlreadyRegisteredError()
        raise CourseFullError()

    db.commit()
    logger.info("registered %s for course %s", user_id, course_id)
    return db.get(CourseRegistration, registration_id)


def registered_courses(db: Session, user_id: str) -> list[Course]:
    return (
        db.query(Course)
        .join(CourseRegistration, CourseRegistration.course_id == Course.id)
        .filter(CourseRegistration.user_id == user_id)
        .order_by(Course.title)
        .all()
    )
