from types import SimpleNamespace
from uuid import uuid4

import pytest

from tuitionhub.core.exceptions import Forbidden
from tuitionhub.core.permissions import (
    APPLICATION_TUTOR,
    PAYMENT_PARTY_OR_ADMIN,
    TUITION_OWNER_OR_ADMIN,
    all_of,
    any_of,
    authorize,
    has_role,
    is_owner,
    is_self,
)


def person(role):
    return SimpleNamespace(id=uuid4(), role=role)


def test_has_role_ignores_resource():
    check = has_role("student", "admin")
    assert check(person("student"), None)
    assert check(person("admin"), object())
    assert not check(person("tutor"), None)
    assert not check(None, None)


def test_is_owner_compares_configured_field():
    student = person("student")
    tuition = SimpleNamespace(student_id=student.id)
    assert is_owner("student_id")(student, tuition)
    assert not is_owner("student_id")(person("student"), tuition)
    assert not is_owner("tutor_id")(student, tuition)
    assert not is_owner("student_id")(student, None)


def test_is_self():
    user = person("tutor")
    assert is_self()(user, user)
    assert not is_self()(user, person("tutor"))


def test_any_of_and_all_of_compose():
    owner = person("student")
    resource = SimpleNamespace(student_id=owner.id)
    both = all_of(has_role("student"), is_owner("student_id"))
    assert both(owner, resource)
    assert not both(person("student"), resource)

    either = any_of(is_owner("student_id"), has_role("admin"))
    assert either(person("admin"), resource)
    assert either(owner, resource)
    assert not either(person("tutor"), resource)


def test_tuition_owner_or_admin():
    owner = person("student")
    tuition = SimpleNamespace(student_id=owner.id)
    assert TUITION_OWNER_OR_ADMIN(owner, tuition)
    assert TUITION_OWNER_OR_ADMIN(person("admin"), tuition)
    assert not TUITION_OWNER_OR_ADMIN(person("student"), tuition)


def test_payment_parties():
    student, tutor = person("student"), person("tutor")
    payment = SimpleNamespace(student_id=student.id, tutor_id=tutor.id)
    assert PAYMENT_PARTY_OR_ADMIN(student, payment)
    assert PAYMENT_PARTY_OR_ADMIN(tutor, payment)
    assert PAYMENT_PARTY_OR_ADMIN(person("admin"), payment)
    assert not PAYMENT_PARTY_OR_ADMIN(person("tutor"), payment)


def test_application_tutor():
    tutor = person("tutor")
    application = SimpleNamespace(tutor_id=tutor.id, student_id=uuid4())
    assert APPLICATION_TUTOR(tutor, application)
    assert not APPLICATION_TUTOR(person("tutor"), application)


def test_authorize_raises_forbidden_with_message():
    with pytest.raises(Forbidden) as exc:
        authorize(person("tutor"), None, has_role("admin"), "Admins only")
    assert exc.value.message == "Admins only"
    assert exc.value.status_code == 403

    # No exception when the predicate holds
    authorize(person("admin"), None, has_role("admin"))


def test_application_tutor_requires_tutor_role():
    former_tutor = person("student")
    application = SimpleNamespace(tutor_id=former_tutor.id)
    assert not APPLICATION_TUTOR(former_tutor, application)
