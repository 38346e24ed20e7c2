# tests/conftest.py
# Shared fixtures: one SQLite database per test, app factory wired to it,
# fake payment gateway, and user/tuition builders.

import os

# Settings are read at import time -- configure before importing tuitionhub
os.environ["DATABASE_URL"] = "sqlite:///./tuitionhub-import.db"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["REDIS_URL"] = ""
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["APP_ENV"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"

import itertools  # noqa: E402
from typing import Optional  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

import tuitionhub.db.base  # noqa: F401,E402
from tuitionhub.core.security import create_access_token, hash_password  # noqa: E402
from tuitionhub.db.base_class import Base  # noqa: E402
from tuitionhub.db.session import Database  # noqa: E402
from tuitionhub.main import create_app  # noqa: E402
from tuitionhub.models.application import Application  # noqa: E402
from tuitionhub.models.tuition import Tuition  # noqa: E402
from tuitionhub.models.user import User  # noqa: E402
from tuitionhub.services.payment_gateway import PaymentConfirmation, get_payment_gateway  # noqa: E402

PASSWORD = "secret123"

_seq = itertools.count(1)


# ── Fake Payment Gateway ──────────────────────────────────────────────────────

class FakeGateway:
    """
    Stands in for RazorpayGateway.
    Confirmation reports the amount and application_id of the order it was
    created with; signature "bad" -> declined; unknown order -> declined.
    reported_amount lets a test simulate a processor-side mismatch.
    """
    key_id = "rzp_test_fake"
    currency = "BDT"

    def __init__(self):
        self.orders = []
        self.confirm_calls = []
        self.reported_amount: Optional[int] = None

    def create_order(self, amount, receipt, notes=None):
        order = {"id": f"order_{len(self.orders) + 1}", "amount": amount, "currency": self.currency}
        self.orders.append(dict(order, notes=notes or {}))
        return order

    def confirm_payment(self, order_id, payment_id, signature):
        self.confirm_calls.append((order_id, payment_id, signature))
        if signature == "bad":
            return PaymentConfirmation(success=False, failure_reason="Invalid payment signature")
        order = next((o for o in self.orders if o["id"] == order_id), None)
        if order is None:
            return PaymentConfirmation(success=False, failure_reason="Payment does not belong to this order")
        return PaymentConfirmation(
            success=True,
            transaction_id=payment_id,
            method="card",
            amount=self.reported_amount if self.reported_amount is not None else order["amount"],
            application_id=order["notes"].get("application_id"),
        )


# ── App / DB ──────────────────────────────────────────────────────────────────

@pytest.fixture
def database(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(database.engine)
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def app(database, gateway):
    application = create_app(database=database)
    application.dependency_overrides[get_payment_gateway] = lambda: gateway
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


# ── Builders ──────────────────────────────────────────────────────────────────

def make_user(db, role="student", status="approved", **fields) -> User:
    n = next(_seq)
    user = User(
        email=fields.pop("email", f"{role}{n}@example.com"),
        hashed_password=hash_password(fields.pop("password", PASSWORD)),
        name=fields.pop("name", f"{role.title()} {n}"),
        role=role,
        status=status,
        **fields,
    )
    db.add(user)
    db.commit()
    return user


def make_tuition(db, student, approval_status="approved", status="open", **fields) -> Tuition:
    data = dict(
        title="Math tutor needed",
        subject="Mathematics",
        grade="Class 8",
        location="Dhanmondi, Dhaka",
        salary=5000,
        days_per_week=3,
        tutoring_type="home",
        requirements="Experienced tutor for algebra and geometry",
    )
    data.update(fields)
    tuition = Tuition(
        student_id=student.id,
        approval_status=approval_status,
        status=status,
        **data,
    )
    db.add(tuition)
    db.commit()
    return tuition


def make_application(db, tuition, tutor, status="pending", **fields) -> Application:
    application = Application(
        tuition_id=tuition.id,
        tutor_id=tutor.id,
        student_id=tuition.student_id,
        qualifications=fields.pop("qualifications", "BSc in Mathematics, 3 years of tutoring"),
        experience=fields.pop("experience", "3 years"),
        expected_salary=fields.pop("expected_salary", tuition.salary),
        status=status,
        **fields,
    )
    db.add(application)
    db.commit()
    return application


def auth_headers(user) -> dict:
    token = create_access_token(user.id, user.email, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student(db):
    return make_user(db, role="student", name="Rahim Student")


@pytest.fixture
def tutor(db):
    return make_user(db, role="tutor", name="Karim Tutor", subjects=["Mathematics"], location="Dhaka")


@pytest.fixture
def other_tutor(db):
    return make_user(db, role="tutor", name="Salma Tutor", subjects=["Physics"], location="Dhaka")


@pytest.fixture
def admin(db):
    return make_user(db, role="admin", name="Site Admin")
