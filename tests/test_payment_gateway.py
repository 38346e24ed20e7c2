import hashlib
import hmac

import pytest

from tuitionhub.core.exceptions import PaymentFailed
from tuitionhub.services.payment_gateway import RazorpayGateway

SECRET = "rzp_secret"


def sign(order_id, payment_id, secret=SECRET):
    return hmac.new(secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256).hexdigest()


class StubOrders:
    def __init__(self, fail=False, order=None):
        self.fail = fail
        self.order = order or {}
        self.created = []

    def create(self, data):
        if self.fail:
            raise RuntimeError("gateway timeout")
        self.created.append(data)
        return {"id": "order_abc", "amount": data["amount"], "currency": data["currency"]}

    def fetch(self, order_id):
        return self.order


class StubPayments:
    def __init__(self, payment):
        self.payment = payment

    def fetch(self, payment_id):
        return self.payment


class StubClient:
    def __init__(self, payment=None, fail_orders=False, order=None):
        self.order = StubOrders(fail=fail_orders, order=order)
        self.payment = StubPayments(payment or {})


def gateway_with(**client_kwargs):
    gateway = RazorpayGateway("rzp_key", SECRET, currency="BDT")
    gateway._client = StubClient(**client_kwargs)
    return gateway


# ── Orders ────────────────────────────────────────────────────────────────────

def test_create_order_sends_subunits():
    gateway = gateway_with()
    order = gateway.create_order(5000, receipt="app_1", notes={"tuition_id": "t1"})
    assert order == {"id": "order_abc", "amount": 5000, "currency": "BDT"}
    assert gateway.client.order.created[0]["amount"] == 500000


def test_create_order_failure_raises_payment_failed():
    gateway = gateway_with(fail_orders=True)
    with pytest.raises(PaymentFailed):
        gateway.create_order(5000, receipt="app_1")


# ── Confirmation ──────────────────────────────────────────────────────────────

def test_verify_signature():
    gateway = gateway_with()
    assert gateway.verify_signature("order_1", "pay_1", sign("order_1", "pay_1"))
    assert not gateway.verify_signature("order_1", "pay_1", sign("order_1", "pay_2"))
    assert not gateway.verify_signature("order_1", "pay_1", "")


def test_verify_signature_without_secret():
    gateway = RazorpayGateway("rzp_key", "")
    assert not gateway.verify_signature("order_1", "pay_1", sign("order_1", "pay_1", secret=""))


CAPTURED = {"id": "pay_1", "order_id": "order_1", "status": "captured", "method": "upi", "amount": 500000}


def test_confirm_captured_payment():
    gateway = gateway_with(
        payment=CAPTURED,
        order={"id": "order_1", "amount": 500000, "notes": {"application_id": "app-42"}},
    )
    result = gateway.confirm_payment("order_1", "pay_1", sign("order_1", "pay_1"))
    assert result.success
    assert result.transaction_id == "pay_1"
    assert result.method == "upi"
    assert result.amount == 5000
    assert result.application_id == "app-42"


def test_confirm_rejects_payment_short_of_order():
    gateway = gateway_with(
        payment=CAPTURED,
        order={"id": "order_1", "amount": 900000, "notes": {"application_id": "app-42"}},
    )
    result = gateway.confirm_payment("order_1", "pay_1", sign("order_1", "pay_1"))
    assert not result.success
    assert "does not match the order" in result.failure_reason


def test_confirm_bad_signature_never_fetches():
    gateway = gateway_with()
    result = gateway.confirm_payment("order_1", "pay_1", "forged")
    assert not result.success
    assert result.failure_reason == "Invalid payment signature"


@pytest.mark.parametrize("payment, reason", [
    ({"id": "pay_1", "order_id": "order_other", "status": "captured"}, "does not belong"),
    ({"id": "pay_1", "order_id": "order_1", "status": "authorized"}, "not captured"),
])
def test_confirm_rejects_unusable_payment(payment, reason):
    gateway = gateway_with(payment=payment)
    result = gateway.confirm_payment("order_1", "pay_1", sign("order_1", "pay_1"))
    assert not result.success
    assert reason in result.failure_reason
