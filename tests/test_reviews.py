import pytest
from conftest import auth_headers, make_application, make_tuition, make_user

from tuitionhub.models.notification import Notification
from tuitionhub.models.review import Review
from tuitionhub.models.user import User

BASE = "/api/v1/reviews"


def hire(db, student, tutor):
    return make_application(db, make_tuition(db, student), tutor, status="accepted")


def post_review(client, student, tutor, rating=5, comment="Explains algebra very clearly."):
    return client.post(
        BASE,
        json={"tutor_id": str(tutor.id), "rating": rating, "comment": comment},
        headers=auth_headers(student),
    )


# ── Create ────────────────────────────────────────────────────────────────────

def test_review_hired_tutor_updates_rating(client, db, student, tutor):
    hire(db, student, tutor)
    res = post_review(client, student, tutor, rating=4)
    assert res.status_code == 201
    review = res.json()["review"]
    assert review["rating"] == 4
    assert review["student"]["id"] == str(student.id)

    db.expire_all()
    assert tutor.rating == 4.0
    assert tutor.total_reviews == 1
    n = db.query(Notification).filter(Notification.user_id == tutor.id).one()
    assert n.notification_type == "review_received"


def test_rating_is_average_rounded_to_one_decimal(client, db, tutor):
    for rating in (5, 4, 4):
        reviewer = make_user(db, role="student")
        hire(db, reviewer, tutor)
        assert post_review(client, reviewer, tutor, rating=rating).status_code == 201

    db.expire_all()
    assert tutor.rating == 4.3
    assert tutor.total_reviews == 3


def test_second_review_of_same_tutor_conflicts(client, db, student, tutor):
    hire(db, student, tutor)
    assert post_review(client, student, tutor).status_code == 201
    res = post_review(client, student, tutor, rating=1)
    assert res.status_code == 409
    assert res.json()["error"] == "conflict"

    db.expire_all()
    assert db.query(Review).count() == 1
    assert tutor.rating == 5.0


def test_cannot_review_tutor_never_hired(client, db, student, tutor):
    make_application(db, make_tuition(db, student), tutor)
    assert post_review(client, student, tutor).status_code == 403


def test_can_only_review_tutors(client, db, student):
    other_student = make_user(db, role="student")
    res = post_review(client, student, other_student)
    assert res.status_code == 400
    assert res.json()["error"] == "validation_error"


def test_only_students_review(client, db, tutor, other_tutor):
    assert post_review(client, other_tutor, tutor).status_code == 403


@pytest.mark.parametrize("rating, comment", [
    (0, "Explains algebra very clearly."),
    (6, "Explains algebra very clearly."),
    (5, "Too short"),
    (5, "x" * 501),
])
def test_invalid_review_payload(client, db, student, tutor, rating, comment):
    hire(db, student, tutor)
    res = post_review(client, student, tutor, rating=rating, comment=comment)
    assert res.status_code == 400
    assert res.json()["error"] == "validation_error"


# ── Edit / Delete ─────────────────────────────────────────────────────────────

def test_edit_recomputes_rating(client, db, student, tutor):
    hire(db, student, tutor)
    review_id = post_review(client, student, tutor, rating=5).json()["review"]["id"]

    res = client.put(f"{BASE}/{review_id}", json={"rating": 2}, headers=auth_headers(student))
    assert res.status_code == 200
    assert res.json()["review"]["rating"] == 2
    assert res.json()["review"]["comment"] == "Explains algebra very clearly."

    db.expire_all()
    assert tutor.rating == 2.0
    assert tutor.total_reviews == 1


def test_edit_requires_author(client, db, student, tutor):
    hire(db, student, tutor)
    review_id = post_review(client, student, tutor).json()["review"]["id"]
    stranger = make_user(db, role="student")
    res = client.put(f"{BASE}/{review_id}", json={"rating": 1}, headers=auth_headers(stranger))
    assert res.status_code == 403


def test_empty_edit_rejected(client, db, student, tutor):
    hire(db, student, tutor)
    review_id = post_review(client, student, tutor).json()["review"]["id"]
    res = client.put(f"{BASE}/{review_id}", json={}, headers=auth_headers(student))
    assert res.status_code == 400


def test_delete_resets_rating(client, db, student, tutor):
    hire(db, student, tutor)
    review_id = post_review(client, student, tutor).json()["review"]["id"]

    assert client.delete(f"{BASE}/{review_id}", headers=auth_headers(student)).status_code == 200
    db.expire_all()
    assert tutor.rating == 0.0
    assert tutor.total_reviews == 0


def test_admin_can_delete_but_other_students_cannot(client, db, student, tutor, admin):
    hire(db, student, tutor)
    review_id = post_review(client, student, tutor).json()["review"]["id"]
    stranger = make_user(db, role="student")

    assert client.delete(f"{BASE}/{review_id}", headers=auth_headers(stranger)).status_code == 403
    assert client.delete(f"{BASE}/{review_id}", headers=auth_headers(admin)).status_code == 200
    assert client.delete(f"{BASE}/{review_id}", headers=auth_headers(admin)).status_code == 404


def test_deleting_reviewer_account_updates_tutor(client, db, student, tutor, admin):
    hire(db, student, tutor)
    post_review(client, student, tutor)
    student_id = student.id

    assert client.delete(f"/api/v1/admin/users/{student_id}", headers=auth_headers(admin)).status_code == 200
    db.expire_all()
    refreshed = db.query(User).filter(User.id == tutor.id).one()
    assert refreshed.total_reviews == 0
    assert refreshed.rating == 0.0


# ── Reads ─────────────────────────────────────────────────────────────────────

def test_public_tutor_reviews(client, db, student, tutor):
    hire(db, student, tutor)
    post_review(client, student, tutor, rating=3)

    body = client.get(f"{BASE}/tutor/{tutor.id}").json()
    assert body["summary"] == {"rating": 3.0, "total_reviews": 1}
    assert body["pagination"]["total_items"] == 1
    assert body["reviews"][0]["student"]["name"] == student.name


def test_tutor_reviews_for_non_tutor_404(client, student):
    assert client.get(f"{BASE}/tutor/{student.id}").status_code == 404


def test_my_reviews_and_can_review(client, db, student, tutor, other_tutor):
    hire(db, student, tutor)
    headers = auth_headers(student)

    before = client.get(f"{BASE}/can-review/{tutor.id}", headers=headers).json()
    assert before["can_review"] is True
    assert before["has_hired"] is True

    post_review(client, student, tutor)
    after = client.get(f"{BASE}/can-review/{tutor.id}", headers=headers).json()
    assert after["can_review"] is False
    assert after["has_reviewed"] is True
    assert after["review"]["tutor_id"] == str(tutor.id)

    never_hired = client.get(f"{BASE}/can-review/{other_tutor.id}", headers=headers).json()
    assert never_hired["can_review"] is False

    mine = client.get(f"{BASE}/my-reviews", headers=headers).json()["reviews"]
    assert [r["tutor"]["id"] for r in mine] == [str(tutor.id)]
