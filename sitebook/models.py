from datetime import datetime

from sqlalchemy import (
    Boolean, CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String,
    Text, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from sitebook.db import Base
from sitebook.scheduling.timeslots import TimeInterval


class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True)
    role = Column(String, nullable=False, default="student")
    created_at = Column(DateTime, default=datetime.now)

    __table_args__ = (
        CheckConstraint("role in ('admin','instructor','student')", name="user_role_valid"),
    )


class Site(Base):
    __tablename__ = "sites"
    id = Column(String, primary_key=True)
    site_code = Column(String, nullable=False, unique=True)
    parent_name = Column(String)
    name = Column(String, nullable=False)
    site_type = Column(String)
    capacity = Column(Integer)
    street_address = Column(String)
    sub_address = Column(String)
    city = Column(String)
    state = Column(String)
    post_code = Column(String)
    directions = Column(Text)
    description = Column(Text)
    special_instructions = Column(Text)
    rental_requirements = Column(Text)
    image_url = Column(String)
    created_at = Column(DateTime, default=datetime.now)

    locations = relationship(
        "Location", back_populates="site", cascade="all, delete-orphan",
        order_by="Location.name",
    )


class Location(Base):
    __tablename__ = "locations"
    id = Column(String, primary_key=True)
    site_id = Column(String, ForeignKey("sites.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    location_type = Column(String, nullable=False)
    capacity = Column(Integer, nullable=False)
    description = Column(Text)
    special_instructions = Column(Text)
    created_at = Column(DateTime, default=datetime.now)

    site = relationship("Site", back_populates="locations")
    # insertion order, kept for display
    reservations = relationship(
        "Reservation", back_populates="location", cascade="all, delete-orphan",
        order_by="Reservation.seq",
    )


class Reservation(Base):
    __tablename__ = "reservations"
    id = Column(String, primary_key=True)
    seq = Column(Integer, nullable=False, default=0)
    location_id = Column(String, ForeignKey("locations.id", ondelete="CASCADE"), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(String, nullable=False, default="booked")
    booked_by = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    location = relationship("Location", back_populates="reservations")

    __table_args__ = (
        CheckConstraint("end_time > start_time", name="reservation_time_valid"),
        CheckConstraint("status in ('booked')", name="reservation_status_valid"),
    )

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.start_time, self.end_time)


class Course(Base):
    __tablename__ = "courses"
    id = Column(String, primary_key=True)
    course_code = Column(String, nullable=False, unique=True)
    title = Column(String, nullable=False)
    description = Column(Text)
    location = Column(String)
    # 0 or NULL means unlimited
    capacity = Column(Integer)
    status = Column(String)
    duration = Column(String)
    date_from = Column(Date)
    date_to = Column(Date)
    # stored only, occurrences are never expanded
    repeats = Column(Boolean, nullable=False, default=False)
    until = Column(Date)
    time_from = Column(String)
    time_to = Column(String)
    created_at = Column(DateTime, default=datetime.now)

    registrations = relationship(
        "CourseRegistration", back_populates="course", cascade="all, delete-orphan"
    )


class CourseRegistration(Base):
    __tablename__ = "course_registrations"
    id = Column(String, primary_key=True)
    course_id = Column(String, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=datetime.now)

    course = relationship("Course", back_populates="registrations")

    __table_args__ = (
        UniqueConstraint("course_id", "user_id", name="uniq_course_user"),
    )
