import pytest
from conftest import auth_headers, make_user

from tuitionhub.models.notification import Notification
from tuitionhub.models.user import User

BASE = "/api/v1/admin/users"


def test_admin_lists_and_filters_users(client, db, admin, student, tutor):
    make_user(db, role="tutor", status="pending")
    res = client.get(BASE, params={"role": "tutor"}, headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json()["pagination"]["total_items"] == 2

    res = client.get(BASE, params={"role": "tutor", "status": "pending"}, headers=auth_headers(admin))
    assert res.json()["pagination"]["total_items"] == 1

    res = client.get(BASE, params={"search": student.email}, headers=auth_headers(admin))
    assert [u["id"] for u in res.json()["users"]] == [str(student.id)]


def test_non_admin_cannot_list(client, student):
    assert client.get(BASE, headers=auth_headers(student)).status_code == 403


def test_approve_pending_tutor(client, db, admin):
    applicant = make_user(db, role="tutor", status="pending")
    res = client.patch(
        f"{BASE}/{applicant.id}/status",
        json={"status": "approved"},
        headers=auth_headers(admin),
    )
    assert res.status_code == 200
    assert res.json()["user"]["status"] == "approved"
    assert res.json()["user"]["approved_at"] is not None

    db.expire_all()
    assert applicant.approved_by_id == admin.id
    n = db.query(Notification).filter(Notification.user_id == applicant.id).one()
    assert n.notification_type == "account_update"


def test_reject_stores_reason(client, db, admin):
    applicant = make_user(db, role="tutor", status="pending")
    res = client.patch(
        f"{BASE}/{applicant.id}/status",
        json={"status": "rejected", "reason": "Documents missing"},
        headers=auth_headers(admin),
    )
    assert res.json()["user"]["rejection_reason"] == "Documents missing"


def test_invalid_status_rejected(client, admin, student):
    res = client.patch(
        f"{BASE}/{student.id}/status",
        json={"status": "vip"},
        headers=auth_headers(admin),
    )
    assert res.status_code == 400


def test_blocking_cuts_off_access(client, admin, student):
    res = client.patch(
        f"{BASE}/{student.id}/status",
        json={"status": "blocked"},
        headers=auth_headers(admin),
    )
    assert res.status_code == 200
    assert client.get("/api/v1/auth/me", headers=auth_headers(student)).status_code == 401


def test_admin_cannot_change_own_status_or_role(client, admin):
    headers = auth_headers(admin)
    assert client.patch(f"{BASE}/{admin.id}/status", json={"status": "blocked"}, headers=headers).status_code == 403
    assert client.patch(f"{BASE}/{admin.id}/role", json={"role": "student"}, headers=headers).status_code == 403


def test_change_role(client, db, admin, student):
    res = client.patch(f"{BASE}/{student.id}/role", json={"role": "tutor"}, headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json()["user"]["role"] == "tutor"


def test_delete_user(client, db, admin, student):
    student_id = student.id
    res = client.delete(f"{BASE}/{student_id}", headers=auth_headers(admin))
    assert res.status_code == 200

    db.expire_all()
    assert db.query(User).filter(User.id == student_id).first() is None


def test_admins_cannot_be_deleted(client, db, admin):
    other_admin = make_user(db, role="admin")
    headers = auth_headers(admin)
    assert client.delete(f"{BASE}/{other_admin.id}", headers=headers).status_code == 403
    assert client.delete(f"{BASE}/{admin.id}", headers=headers).status_code == 403


def test_get_unknown_user(client, admin):
    res = client.get(f"{BASE}/00000000-0000-0000-0000-000000000000", headers=auth_headers(admin))
    assert res.status_code == 404


@pytest.mark.parametrize("path, params", [
    ("/users", {"role": "superuser"}),
    ("/users", {"status": "bogus"}),
    ("/tuitions", {"approval_status": "maybe"}),
    ("/tuitions", {"status": "bogus"}),
    ("/payments", {"status": "bogus"}),
])
def test_unknown_filter_values_are_rejected(client, admin, path, params):
    res = client.get(f"/api/v1/admin{path}", params=params, headers=auth_headers(admin))
    assert res.status_code == 400
    assert res.json()["error"] == "validation_error"


def test_known_payment_status_filter(client, admin):
    res = client.get("/api/v1/admin/payments", params={"status": "refunded"}, headers=auth_headers(admin))
    assert res.status_code == 200
    assert res.json()["payments"] == []
