# tests/conftest.py
import tempfile
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from sitebook.config import settings

settings.skip_db_init = True

from sitebook.auth import create_access_token  # noqa: E402
from sitebook.db import Base, get_db, make_engine  # noqa: E402
from sitebook.main import app  # noqa: E402
from sitebook.models import Location, Reservation, Site, User  # noqa: E402


@pytest.fixture(scope="function")
def test_db_session():
    # temp DB
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    db_url = f"sqlite:///{tmp.name}"

    # test engine / Session
    engine = make_engine(db_url)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture(scope="function")
def client(test_db_session):
    def override_get_db():
        try:
            yield test_db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _auth_headers(user_id="u-1", role="student", name="User1"):
        token = create_access_token(user_id, role, name)
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers


@pytest.fixture
def admin_headers(auth_headers):
    return auth_headers("u-admin", "admin", "Admin")


# —— Factories ——
@pytest.fixture
def make_user(test_db_session):
    def _make_user(user_id="u-1", name="User1", email="u1@example.com", role="student"):
        u = User(id=user_id, name=name, email=email, role=role)
        test_db_session.add(u)
        test_db_session.commit()
        return u
    return _make_user


@pytest.fixture
def make_site(test_db_session):
    def _make_site(site_id="site-1", site_code="S1", name="Site 1"):
        s = Site(id=site_id, site_code=site_code, name=name)
        test_db_session.add(s)
        test_db_session.commit()
        return s
    return _make_site


@pytest.fixture
def make_location(test_db_session, make_site):
    def _make_location(location_id="loc-1", site_id=None, name="Room 1", capacity=6):
        if site_id is None:
            site = test_db_session.get(Site, "site-1") or make_site()
            site_id = site.id
        loc = Location(id=location_id, site_id=site_id, name=name,
                       location_type="Room", capacity=capacity)
        test_db_session.add(loc)
        test_db_session.commit()
        return loc
    return _make_location


@pytest.fixture
def make_reservation(test_db_session):
    counter = {"seq": 0}

    def _make_reservation(location_id, start, end, booked_by="u-1", reservation_id=None):
        counter["seq"] += 1
        r = Reservation(
            id=reservation_id or f"res-{counter['seq']}",
            seq=counter["seq"],
            location_id=location_id,
            start_time=start,
            end_time=end,
            booked_by=booked_by,
        )
        test_db_session.add(r)
        test_db_session.commit()
        return r
    return _make_reservation
