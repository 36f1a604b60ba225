import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from sitebook.config import settings

logger = logging.getLogger(__name__)


def make_engine(url: str):
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args)


engine = make_engine(settings.database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    # Import models here to create tables
    from sitebook import models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)


def seed_db(session_factory=SessionLocal):
    """Seeds a demo admin, a site with two rooms and a course if empty."""
    from sitebook.models import Course, Location, Site, User

    db = session_factory()
    try:
        if not db.query(User).first():
            db.add_all([
                User(id="u-admin", name="Demo Admin", email="admin@example.com", role="admin"),
                User(id="u-demo", name="Demo User", email="demo@example.com", role="student"),
            ])
        if not db.query(Site).first():
            site = Site(
                id="site-1",
                site_code="HQ",
                parent_name="Relativity",
                name="Main Training Center",
                site_type="Training",
                capacity=120,
                street_address="1 Main Street",
                city="Springfield",
                state="IL",
                post_code="62701",
            )
            db.add(site)
            db.flush()
            db.add_all([
                Location(id="loc-101", site_id=site.id, name="Room 101",
                         location_type="Room", capacity=20),
                Location(id="loc-range", site_id=site.id, name="Range A",
                         location_type="Range", capacity=8),
            ])
        if not db.query(Course).first():
            db.add(Course(id="c-1", course_code="SAFE-101", title="Safety Basics",
                          location="Room 101", capacity=20, status="Open"))
        db.commit()
        logger.info("database seeded")
    finally:
        db.close()
