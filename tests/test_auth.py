from conftest import PASSWORD, auth_headers, make_user

from tuitionhub.core.security import create_access_token, decode_token, hash_password, verify_password


def register_payload(**overrides):
    payload = {
        "name": "New Student",
        "email": "new.student@example.com",
        "password": "hunter22",
        "role": "student",
        "grade": "Class 9",
    }
    payload.update(overrides)
    return payload


# ── Credentials ───────────────────────────────────────────────────────────────

def test_password_hash_roundtrip():
    hashed = hash_password("hunter22")
    assert hashed != "hunter22"
    assert verify_password("hunter22", hashed)
    assert not verify_password("wrong", hashed)


def test_token_carries_identity_claims(db):
    user = make_user(db, role="tutor")
    payload = decode_token(create_access_token(user.id, user.email, user.role))
    assert payload["sub"] == str(user.id)
    assert payload["email"] == user.email
    assert payload["role"] == "tutor"
    assert payload["type"] == "access"


def test_decode_rejects_garbage():
    assert decode_token("not-a-jwt") is None


# ── Register ──────────────────────────────────────────────────────────────────

def test_register_student_starts_pending(client):
    res = client.post("/api/v1/auth/register", json=register_payload())
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["user"]["status"] == "pending"
    assert body["user"]["role"] == "student"
    assert body["access_token"]
    assert "pending approval" in body["status_warning"]


def test_register_tutor_requires_subjects_and_location(client):
    res = client.post(
        "/api/v1/auth/register",
        json=register_payload(email="t@example.com", role="tutor", subjects=[]),
    )
    assert res.status_code == 400
    assert res.json()["error"] == "validation_error"

    res = client.post(
        "/api/v1/auth/register",
        json=register_payload(email="t@example.com", role="tutor", subjects=["Physics"], location="Dhaka"),
    )
    assert res.status_code == 201
    assert res.json()["user"]["subjects"] == ["Physics"]


def test_register_cannot_self_assign_admin(client):
    res = client.post("/api/v1/auth/register", json=register_payload(role="admin"))
    assert res.status_code == 400


def test_register_duplicate_email_conflicts(client):
    assert client.post("/api/v1/auth/register", json=register_payload()).status_code == 201
    res = client.post("/api/v1/auth/register", json=register_payload(name="Someone Else"))
    assert res.status_code == 409
    assert res.json()["success"] is False


# ── Login ─────────────────────────────────────────────────────────────────────

def test_login_success_updates_last_login(client, db, student):
    res = client.post("/api/v1/auth/login", json={"email": student.email, "password": PASSWORD})
    assert res.status_code == 200
    body = res.json()
    assert body["user"]["id"] == str(student.id)
    assert body["status_warning"] is None
    db.refresh(student)
    assert student.last_login_at is not None


def test_login_wrong_password(client, student):
    res = client.post("/api/v1/auth/login", json={"email": student.email, "password": "nope-nope"})
    assert res.status_code == 401
    assert res.json()["error"] == "unauthenticated"


def test_login_pending_user_gets_warning(client, db):
    user = make_user(db, role="tutor", status="pending")
    res = client.post("/api/v1/auth/login", json={"email": user.email, "password": PASSWORD})
    assert res.status_code == 200
    assert "pending" in res.json()["status_warning"]


def test_login_blocked_user_forbidden(client, db):
    user = make_user(db, role="student", status="blocked")
    res = client.post("/api/v1/auth/login", json={"email": user.email, "password": PASSWORD})
    assert res.status_code == 403


def test_login_role_mismatch(client, student):
    res = client.post(
        "/api/v1/auth/login",
        json={"email": student.email, "password": PASSWORD, "role": "tutor"},
    )
    assert res.status_code == 403
    assert "Role mismatch" in res.json()["message"]


def test_admin_login_never_warned(client, db):
    admin = make_user(db, role="admin", status="pending")
    res = client.post("/api/v1/auth/login", json={"email": admin.email, "password": PASSWORD})
    assert res.status_code == 200
    assert res.json()["status_warning"] is None


# ── Token Use ─────────────────────────────────────────────────────────────────

def test_me_requires_token(client):
    res = client.get("/api/v1/auth/me")
    assert res.status_code == 401


def test_me_returns_private_profile(client, student):
    res = client.get("/api/v1/auth/me", headers=auth_headers(student))
    assert res.status_code == 200
    assert res.json()["user"]["email"] == student.email


def test_token_of_blocked_user_is_rejected(client, db, student):
    headers = auth_headers(student)
    student.status = "blocked"
    db.commit()
    assert client.get("/api/v1/auth/me", headers=headers).status_code == 401


def test_change_password(client, student):
    headers = auth_headers(student)
    res = client.put(
        "/api/v1/auth/change-password",
        json={"current_password": "wrong-one", "new_password": "brandnew1"},
        headers=headers,
    )
    assert res.status_code == 401

    res = client.put(
        "/api/v1/auth/change-password",
        json={"current_password": PASSWORD, "new_password": "brandnew1"},
        headers=headers,
    )
    assert res.status_code == 200
    res = client.post("/api/v1/auth/login", json={"email": student.email, "password": "brandnew1"})
    assert res.status_code == 200
