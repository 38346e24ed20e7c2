# tuitionhub/services/payment_gateway.py
# Razorpay wrapper used by the acceptance flow
#
# Checkout flow:
#   1. Student asks for an order       -> create_order() -> razorpay order id
#   2. Frontend opens hosted checkout with that order id
#   3. Checkout returns (order_id, payment_id, signature) to the frontend
#   4. Frontend posts them to /payments/confirm -> confirm_payment()
#      verifies the signature and the capture, then reads the order
#      back for its amount and application_id note
#
# Amounts are whole currency units here; Razorpay wants the smallest unit.
# Endpoints receive the gateway via Depends(get_payment_gateway) so tests
# can override it with a fake.

import hashlib
import hmac
import logging
from dataclasses import dataclass
from typing import Dict, Optional

from tuitionhub.core.config import settings
from tuitionhub.core.exceptions import PaymentFailed

logger = logging.getLogger("tuitionhub.payments")

# Razorpay amounts are in paise/poisha
SUBUNITS_PER_UNIT = 100

# Razorpay payment states that mean the money is ours
CAPTURED_STATES = {"captured"}


@dataclass
class PaymentConfirmation:
    """Outcome of verifying one checkout with the processor."""
    success: bool
    transaction_id: Optional[str] = None
    method: Optional[str] = None
    amount: Optional[int] = None          # Whole units as reported by the processor
    application_id: Optional[str] = None  # From the order notes written by create_order
    failure_reason: Optional[str] = None


class RazorpayGateway:
    """Thin client around the razorpay SDK."""

    def __init__(self, key_id: str, key_secret: str, currency: str = "BDT"):
        self.key_id = key_id
        self.key_secret = key_secret
        self.currency = currency
        self._client = None

    @property
    def client(self):
        if self._client is None:
            import razorpay
            self._client = razorpay.Client(auth=(self.key_id, self.key_secret))
        return self._client

    # ── Orders ────────────────────────────────────────────────────────────────

    def create_order(
        self,
        amount: int,
        receipt: str,
        notes: Optional[Dict[str, str]] = None,
    ) -> dict:
        """
        Create a Razorpay order for `amount` whole units.

        Returns:
            {"id": order id, "amount": whole units, "currency": code}
        """
        try:
            order = self.client.order.create({
                "amount": amount * SUBUNITS_PER_UNIT,
                "currency": self.currency,
                "receipt": receipt[:40],  # Razorpay limit
                "notes": notes or {},
            })
        except Exception as e:
            logger.error(f"Razorpay order creation failed for receipt {receipt}: {e}")
            raise PaymentFailed("Could not create payment order. Please try again.")

        logger.info(f"Razorpay order {order['id']} created for {amount} {self.currency}")
        return {
            "id": order["id"],
            "amount": amount,
            "currency": order.get("currency", self.currency),
        }

    # ── Confirmation ──────────────────────────────────────────────────────────

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        """
        Checkout signature is HMAC-SHA256("<order_id>|<payment_id>", key_secret).
        """
        if not self.key_secret:
            return False
        expected = hmac.new(
            self.key_secret.encode("utf-8"),
            f"{order_id}|{payment_id}".encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()
        return hmac.compare_digest(expected, signature or "")

    def confirm_payment(
        self,
        order_id: str,
        payment_id: str,
        signature: str,
    ) -> PaymentConfirmation:
        """
        Verify a completed checkout. Never raises -- a failed confirmation is
        returned with success=False and a reason.
        """
        if not self.verify_signature(order_id, payment_id, signature):
            logger.warning(f"Invalid checkout signature for order {order_id}")
            return PaymentConfirmation(success=False, failure_reason="Invalid payment signature")

        try:
            payment = self.client.payment.fetch(payment_id)
        except Exception as e:
            logger.error(f"Razorpay payment fetch failed for {payment_id}: {e}")
            return PaymentConfirmation(success=False, failure_reason="Payment could not be verified")

        if payment.get("order_id") != order_id:
            return PaymentConfirmation(success=False, failure_reason="Payment does not belong to this order")

        if payment.get("status") not in CAPTURED_STATES:
            return PaymentConfirmation(
                success=False,
                failure_reason=f"Payment not captured (status: {payment.get('status')})",
            )

        try:
            order = self.client.order.fetch(order_id)
        except Exception as e:
            logger.error(f"Razorpay order fetch failed for {order_id}: {e}")
            return PaymentConfirmation(success=False, failure_reason="Payment could not be verified")

        paid = int(payment.get("amount", 0))
        if int(order.get("amount", 0)) != paid:
            logger.warning(f"Order {order_id} amount {order.get('amount')} differs from paid {paid}")
            return PaymentConfirmation(success=False, failure_reason="Paid amount does not match the order")

        return PaymentConfirmation(
            success=True,
            transaction_id=payment["id"],
            method=payment.get("method") or "razorpay",
            amount=paid // SUBUNITS_PER_UNIT,
            application_id=(order.get("notes") or {}).get("application_id"),
        )


# ── FastAPI Dependency ────────────────────────────────────────────────────────

def get_payment_gateway() -> RazorpayGateway:
    return RazorpayGateway(
        key_id=settings.razorpay_key_id,
        key_secret=settings.razorpay_key_secret,
        currency=settings.payment_currency,
    )
