from conftest import auth_headers, make_user

BASE = "/api/v1/users"


def test_profile_update_ignores_protected_fields(client, db, tutor):
    res = client.patch(
        f"{BASE}/me",
        json={
            "bio": "Patient maths tutor",
            "hourly_rate": 800,
            "role": "admin",
            "status": "approved",
            "total_earnings": 999999,
        },
        headers=auth_headers(tutor),
    )
    assert res.status_code == 200
    user = res.json()["user"]
    assert user["bio"] == "Patient maths tutor"
    assert user["hourly_rate"] == 800
    assert user["role"] == "tutor"
    assert user["total_earnings"] == 0


def test_profile_update_needs_a_field(client, student):
    res = client.patch(f"{BASE}/me", json={}, headers=auth_headers(student))
    assert res.status_code == 400


def test_profile_update_rejects_blank_name(client, student):
    res = client.patch(f"{BASE}/me", json={"name": "   "}, headers=auth_headers(student))
    assert res.status_code == 400


def test_public_profile_hides_private_fields(client, tutor):
    res = client.get(f"{BASE}/{tutor.id}")
    assert res.status_code == 200
    user = res.json()["user"]
    assert user["name"] == "Karim Tutor"
    assert "email" not in user
    assert "total_earnings" not in user


def test_public_profile_unknown_user(client):
    res = client.get(f"{BASE}/00000000-0000-0000-0000-000000000000")
    assert res.status_code == 404


def test_tutor_directory_filters(client, db, tutor, other_tutor):
    make_user(db, role="tutor", status="pending", subjects=["Mathematics"])
    make_user(db, role="tutor", status="blocked", subjects=["Mathematics"])

    body = client.get(f"{BASE}/tutors").json()
    assert body["count"] == 2

    maths = client.get(f"{BASE}/tutors", params={"subject": "math"}).json()
    assert [t["id"] for t in maths["tutors"]] == [str(tutor.id)]


def test_tutor_directory_sorted_by_rating(client, db, tutor):
    star = make_user(db, role="tutor", rating=4.9, total_reviews=30, subjects=["Biology"])
    tutors = client.get(f"{BASE}/tutors").json()["tutors"]
    assert tutors[0]["id"] == str(star.id)
    assert {t["id"] for t in tutors} == {str(star.id), str(tutor.id)}
