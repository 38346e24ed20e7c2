import pytest
from conftest import auth_headers, make_application, make_tuition, make_user

from tuitionhub.core.exceptions import Conflict
from tuitionhub.models.application import Application
from tuitionhub.models.tuition import Tuition
from tuitionhub.models.user import User
from tuitionhub.schemas.application import ApplicationCreate
from tuitionhub.services import application_service

BASE = "/api/v1/applications"


def apply_payload(tuition, **overrides):
    payload = {
        "tuition_id": str(tuition.id),
        "qualifications": "BSc in Physics from DU, taught HSC students for 2 years",
        "experience": "2 years",
        "expected_salary": 5000,
        "message": "Available in the evenings",
    }
    payload.update(overrides)
    return payload


# ── Apply ─────────────────────────────────────────────────────────────────────

def test_tutor_applies_to_visible_tuition(client, db, student, tutor):
    tuition = make_tuition(db, student)
    res = client.post(BASE, json=apply_payload(tuition), headers=auth_headers(tutor))
    assert res.status_code == 201
    application = res.json()["application"]
    assert application["status"] == "pending"
    assert application["student_id"] == str(student.id)
    assert application["tutor_id"] == str(tutor.id)


def test_duplicate_apply_conflicts(client, db, student, tutor):
    tuition = make_tuition(db, student)
    headers = auth_headers(tutor)
    assert client.post(BASE, json=apply_payload(tuition), headers=headers).status_code == 201

    res = client.post(BASE, json=apply_payload(tuition, expected_salary=4000), headers=headers)
    assert res.status_code == 409
    assert res.json()["error"] == "conflict"

    db.expire_all()
    assert db.query(Application).filter(Application.tuition_id == tuition.id).count() == 1


def test_interleaved_applies_from_two_sessions_keep_one_row(database, db, student, tutor):
    tuition = make_tuition(db, student)
    data = ApplicationCreate(**apply_payload(tuition))
    first, second = database.session(), database.session()
    try:
        # Both requests have seen the open tuition before either writes
        assert first.get(Tuition, tuition.id).is_visible
        assert second.get(Tuition, tuition.id).is_visible

        application_service.apply(first, first.get(User, tutor.id), data)
        with pytest.raises(Conflict):
            application_service.apply(second, second.get(User, tutor.id), data)
    finally:
        first.close()
        second.close()

    db.expire_all()
    assert db.query(Application).filter(Application.tuition_id == tuition.id).count() == 1


def test_apply_to_unapproved_tuition_refused(client, db, student, tutor):
    tuition = make_tuition(db, student, approval_status="pending")
    res = client.post(BASE, json=apply_payload(tuition), headers=auth_headers(tutor))
    assert res.status_code == 400
    assert res.json()["error"] == "invalid_state"


def test_apply_to_ongoing_tuition_refused(client, db, student, tutor):
    tuition = make_tuition(db, student, status="ongoing")
    res = client.post(BASE, json=apply_payload(tuition), headers=auth_headers(tutor))
    assert res.status_code == 400


def test_only_tutors_apply(client, db, student):
    tuition = make_tuition(db, student)
    res = client.post(BASE, json=apply_payload(tuition), headers=auth_headers(student))
    assert res.status_code == 403


def test_short_qualifications_rejected(client, db, student, tutor):
    tuition = make_tuition(db, student)
    res = client.post(BASE, json=apply_payload(tuition, qualifications="BSc"), headers=auth_headers(tutor))
    assert res.status_code == 400


def test_check_applied(client, db, student, tutor):
    tuition = make_tuition(db, student)
    url = f"{BASE}/check/{tuition.id}"
    assert client.get(url, headers=auth_headers(tutor)).json()["already_applied"] is False
    make_application(db, tuition, tutor)
    body = client.get(url, headers=auth_headers(tutor)).json()
    assert body["already_applied"] is True
    assert body["application"]["tuition_id"] == str(tuition.id)


# ── Tutor Edits ───────────────────────────────────────────────────────────────

def test_edit_pending_application(client, db, student, tutor):
    application = make_application(db, make_tuition(db, student), tutor)
    res = client.put(f"{BASE}/{application.id}", json={"expected_salary": 4500}, headers=auth_headers(tutor))
    assert res.status_code == 200
    assert res.json()["application"]["expected_salary"] == 4500


def test_edit_processed_application_conflicts(client, db, student, tutor):
    application = make_application(db, make_tuition(db, student), tutor, status="rejected")
    res = client.put(f"{BASE}/{application.id}", json={"expected_salary": 4500}, headers=auth_headers(tutor))
    assert res.status_code == 409


def test_other_tutor_cannot_edit(client, db, student, tutor, other_tutor):
    application = make_application(db, make_tuition(db, student), tutor)
    res = client.put(f"{BASE}/{application.id}", json={"expected_salary": 1}, headers=auth_headers(other_tutor))
    assert res.status_code == 403


def test_withdraw(client, db, student, tutor):
    application = make_application(db, make_tuition(db, student), tutor)
    url = f"{BASE}/{application.id}/withdraw"
    res = client.patch(url, headers=auth_headers(tutor))
    assert res.status_code == 200
    assert res.json()["application"]["status"] == "withdrawn"

    res = client.patch(url, headers=auth_headers(tutor))
    assert res.status_code == 400
    assert res.json()["error"] == "invalid_state"


# ── Owner Responses ───────────────────────────────────────────────────────────

def test_owner_rejects_pending_application(client, db, student, tutor):
    application = make_application(db, make_tuition(db, student), tutor)
    res = client.patch(
        f"{BASE}/{application.id}/reject",
        json={"rejection_reason": "Need someone closer"},
        headers=auth_headers(student),
    )
    assert res.status_code == 200
    body = res.json()["application"]
    assert body["status"] == "rejected"
    assert body["rejection_reason"] == "Need someone closer"
    assert body["responded_at"] is not None


def test_reject_twice_is_invalid_state(client, db, student, tutor):
    application = make_application(db, make_tuition(db, student), tutor, status="rejected")
    res = client.patch(f"{BASE}/{application.id}/reject", headers=auth_headers(student))
    assert res.status_code == 400


def test_other_student_cannot_reject(client, db, student, tutor):
    application = make_application(db, make_tuition(db, student), tutor)
    stranger = make_user(db, role="student")
    res = client.patch(f"{BASE}/{application.id}/reject", headers=auth_headers(stranger))
    assert res.status_code == 403


def test_admin_can_reject(client, db, student, tutor, admin):
    application = make_application(db, make_tuition(db, student), tutor)
    res = client.patch(f"{BASE}/{application.id}/reject", headers=auth_headers(admin))
    assert res.status_code == 200


def test_status_update_refuses_accept(client, db, student, tutor):
    application = make_application(db, make_tuition(db, student), tutor)
    res = client.patch(f"{BASE}/{application.id}/status", json={"status": "accepted"}, headers=auth_headers(student))
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "validation_error"
    assert "payment" in body["message"].lower()

    db.refresh(application)
    assert application.status == "pending"


def test_status_update_rejects(client, db, student, tutor):
    application = make_application(db, make_tuition(db, student), tutor)
    res = client.patch(f"{BASE}/{application.id}/status", json={"status": "rejected"}, headers=auth_headers(student))
    assert res.status_code == 200
    assert res.json()["application"]["status"] == "rejected"


# ── Reads ─────────────────────────────────────────────────────────────────────

def test_tuition_applications_owner_only(client, db, student, tutor, other_tutor):
    tuition = make_tuition(db, student)
    make_application(db, tuition, tutor)
    make_application(db, tuition, other_tutor)
    url = f"{BASE}/tuition/{tuition.id}"

    res = client.get(url, headers=auth_headers(student))
    assert res.status_code == 200
    assert len(res.json()["applications"]) == 2

    assert client.get(url, headers=auth_headers(tutor)).status_code == 403


def test_my_applications(client, db, student, tutor):
    make_application(db, make_tuition(db, student), tutor)
    make_application(db, make_tuition(db, student), tutor, status="withdrawn")
    res = client.get(f"{BASE}/my-applications", headers=auth_headers(tutor))
    assert len(res.json()["applications"]) == 2
    res = client.get(f"{BASE}/my-applications", params={"status": "pending"}, headers=auth_headers(tutor))
    assert len(res.json()["applications"]) == 1


def test_my_applications_unknown_status_is_rejected(client, tutor):
    res = client.get(f"{BASE}/my-applications", params={"status": "bogus"}, headers=auth_headers(tutor))
    assert res.status_code == 400
    assert res.json()["error"] == "validation_error"
