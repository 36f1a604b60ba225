from sitebook import courses
from sitebook.models import Course


def test_admin_lists_users(client, make_user, admin_headers):
    make_user("u-1", name="Bea", email="bea@example.com")
    make_user("u-2", name="Al", email="al@example.com", role="instructor")

    r = client.get("/users", headers=admin_headers)
    assert r.status_code == 200
    assert [(u["name"], u["role"]) for u in r.json()] == [("Al", "instructor"), ("Bea", "student")]


def test_user_detail_with_courses(client, test_db_session, make_user, admin_headers):
    make_user("u-1")
    test_db_session.add_all([
        Course(id="c-1", course_code="C-1", title="First Aid", capacity=5),
        Course(id="c-2", course_code="C-2", title="Climbing", capacity=5),
    ])
    test_db_session.commit()
    courses.register(test_db_session, "c-1", "u-1")

    r = client.get("/users/u-1", headers=admin_headers)
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "u1@example.com"
    assert [c["id"] for c in r.json()["registered_courses"]] == ["c-1"]
    assert r.json()["registered_courses"][0]["total_registered"] == 1


def test_unknown_user(client, admin_headers):
    r = client.get("/users/nobody", headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["code"] == "not_found"


def test_users_are_admin_only(client, make_user, auth_headers):
    make_user("u-1")
    assert client.get("/users", headers=auth_headers("u-1")).status_code == 403
    assert client.get("/users/u-1", headers=auth_headers("u-1")).status_code == 403
    assert client.get("/users").status_code == 401
