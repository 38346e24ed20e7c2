# tuitionhub/services/acceptance.py
# Payment-gated acceptance of a tutor application, and its refund reversal
#
# The only place where:
#   tuition      open -> ongoing   (and back to open on refund)
#   application  pending -> accepted
#   total_earnings changes
#
# Acceptance runs in ONE transaction, in this order:
#   1. claim the tuition       UPDATE ... WHERE status='open'  (rowcount == 1)
#   2. insert the payment      UNIQUE transaction_id, one completed row per application
#   3. accept the application  UPDATE ... WHERE status='pending' (rowcount == 1)
#   4. reject pending siblings with SELECTION_REJECTION_REASON
#   5. credit the tutor        SET total_earnings = total_earnings + :x
# Step 1 is what decides between two concurrent accepts on one tuition.
# Notifications go out only after the commit.

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tuitionhub.core.exceptions import (
    Conflict,
    InvalidState,
    NotFound,
    PaymentFailed,
    ValidationFailed,
)
from tuitionhub.core.permissions import PAYMENT_PARTY_OR_ADMIN, authorize, is_admin, is_owner
from tuitionhub.models.application import SELECTION_REJECTION_REASON, Application
from tuitionhub.models.payment import Payment, split_amount
from tuitionhub.models.tuition import Tuition
from tuitionhub.models.user import User
from tuitionhub.services.application_service import get_application_or_404
from tuitionhub.services.notification_service import notify
from tuitionhub.services.payment_gateway import RazorpayGateway

logger = logging.getLogger("tuitionhub.acceptance")

is_tuition_owner = is_owner("student_id")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _load_for_payment(db: Session, student: User, application_id: UUID) -> Tuple[Application, Tuition]:
    """Shared preconditions for order creation and confirmation."""
    application = get_application_or_404(db, application_id)
    tuition = application.tuition
    authorize(student, tuition, is_tuition_owner, "Only the tuition owner can pay for an application")

    if application.status != "pending":
        raise InvalidState(f"Application is already {application.status}")
    if not tuition.is_visible:
        raise InvalidState("This tuition is no longer open")
    return application, tuition


# ── Checkout ──────────────────────────────────────────────────────────────────

def create_order(
    db: Session,
    student: User,
    gateway: RazorpayGateway,
    application_id: UUID,
    amount: Optional[int] = None,
) -> dict:
    """Open a processor order for a pending application. Amount defaults to the salary."""
    application, tuition = _load_for_payment(db, student, application_id)

    amount = amount if amount is not None else tuition.salary
    if amount <= 0:
        raise ValidationFailed("Payment amount must be positive")

    order = gateway.create_order(
        amount=amount,
        receipt=f"app_{application.id.hex}",
        notes={
            "application_id": str(application.id),
            "tuition_id": str(tuition.id),
            "tutor_id": str(application.tutor_id),
        },
    )
    return {
        "order_id": order["id"],
        "amount": order["amount"],
        "currency": order["currency"],
        "key_id": gateway.key_id,
    }


def accept_with_payment(
    db: Session,
    student: User,
    gateway: RazorpayGateway,
    application_id: UUID,
    amount: int,
    order_id: str,
    payment_id: str,
    signature: str,
) -> Tuple[Payment, Application, Tuition]:
    """
    Confirm the charge with the processor, then accept the application.
    The order must have been opened for this application and the paid amount
    must equal `amount`. If confirmation fails nothing is written.
    """
    application, tuition = _load_for_payment(db, student, application_id)

    confirmation = gateway.confirm_payment(order_id, payment_id, signature)
    if not confirmation.success:
        logger.warning(
            f"Payment confirmation failed for application {application.id}: "
            f"{confirmation.failure_reason}"
        )
        raise PaymentFailed(confirmation.failure_reason or "Payment was not completed")
    if confirmation.application_id != str(application.id):
        logger.warning(
            f"Order {order_id} was opened for application {confirmation.application_id}, "
            f"not {application.id}"
        )
        raise PaymentFailed("Payment was made for a different application")
    if confirmation.amount != amount:
        logger.warning(
            f"Amount mismatch for application {application.id}: "
            f"requested {amount}, processor reported {confirmation.amount}"
        )
        raise PaymentFailed("Paid amount does not match the requested amount")

    platform_fee, tutor_receives = split_amount(amount)
    tutor_id = application.tutor_id
    now = _now()

    try:
        # 1. Claim the tuition
        claimed = db.execute(
            update(Tuition)
            .where(
                Tuition.id == tuition.id,
                Tuition.status == "open",
                Tuition.approval_status == "approved",
            )
            .values(status="ongoing", approved_tutor_id=tutor_id, closed_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount != 1:
            raise InvalidState("This tuition is no longer open")

        # 2. Record the payment
        payment = Payment(
            tuition_id=tuition.id,
            application_id=application.id,
            student_id=student.id,
            tutor_id=tutor_id,
            amount=amount,
            platform_fee=platform_fee,
            tutor_receives=tutor_receives,
            currency=gateway.currency,
            payment_method=confirmation.method or "razorpay",
            transaction_id=confirmation.transaction_id,
            gateway_order_id=order_id,
            status="completed",
            description=f"Tuition payment: {tuition.title}",
            completed_at=now,
        )
        db.add(payment)
        db.flush()

        # 3. Accept the chosen application
        accepted = db.execute(
            update(Application)
            .where(Application.id == application.id, Application.status == "pending")
            .values(status="accepted", responded_at=now, rejection_reason=None, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if accepted.rowcount != 1:
            raise InvalidState("Application is no longer pending")

        # 4. Reject everyone else still waiting
        sibling_ids: List[UUID] = [
            row.id for row in db.query(Application.id).filter(
                Application.tuition_id == tuition.id,
                Application.id != application.id,
                Application.status == "pending",
            )
        ]
        if sibling_ids:
            db.execute(
                update(Application)
                .where(Application.id.in_(sibling_ids), Application.status == "pending")
                .values(
                    status="rejected",
                    rejection_reason=SELECTION_REJECTION_REASON,
                    responded_at=now,
                    updated_at=now,
                )
                .execution_options(synchronize_session=False)
            )

        # 5. Credit the tutor
        db.execute(
            update(User)
            .where(User.id == tutor_id)
            .values(total_earnings=User.total_earnings + tutor_receives)
            .execution_options(synchronize_session=False)
        )

        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("This payment has already been recorded")
    except Exception:
        db.rollback()
        raise

    db.refresh(application)
    db.refresh(tuition)
    logger.info(
        f"Application {application.id} accepted for tuition {tuition.id}: "
        f"payment {payment.transaction_id} amount={amount} fee={platform_fee}"
    )

    _notify_accepted(db, payment, application, tuition, sibling_ids)
    return payment, application, tuition


def _notify_accepted(
    db: Session,
    payment: Payment,
    application: Application,
    tuition: Tuition,
    sibling_ids: List[UUID],
) -> None:
    extra = {
        "tuition_id": str(tuition.id),
        "application_id": str(application.id),
        "payment_id": str(payment.id),
    }
    notify(
        db,
        user_id=application.tutor_id,
        notification_type="application_accepted",
        title="Application accepted",
        message=f'You have been selected for "{tuition.title}".',
        link="/my-applications",
        priority="high",
        extra_data=extra,
    )
    notify(
        db,
        user_id=application.tutor_id,
        notification_type="payment_received",
        title="Payment received",
        message=f"{payment.tutor_receives} {payment.currency} has been credited to your earnings.",
        link="/my-revenue",
        extra_data=extra,
    )
    notify(
        db,
        user_id=payment.student_id,
        notification_type="payment_made",
        title="Payment successful",
        message=f'You paid {payment.amount} {payment.currency} for "{tuition.title}".',
        link="/my-payments",
        extra_data=extra,
    )

    if sibling_ids:
        tutor_ids = [
            row.tutor_id for row in
            db.query(Application.tutor_id).filter(Application.id.in_(sibling_ids))
        ]
        for sibling_tutor_id in tutor_ids:
            notify(
                db,
                user_id=sibling_tutor_id,
                notification_type="application_rejected",
                title="Application not selected",
                message=f'Another tutor has been selected for "{tuition.title}".',
                link="/my-applications",
                extra_data={"tuition_id": str(tuition.id)},
            )


# ── Refund Reversal ───────────────────────────────────────────────────────────

def refund_payment(
    db: Session,
    admin: User,
    payment_id: UUID,
    reason: Optional[str] = None,
) -> Tuple[Payment, Optional[Tuition]]:
    """
    Undo an acceptance: payment -> refunded, application and auto-rejected
    siblings -> pending, tuition -> open, tutor earnings decremented.
    The processor-side refund is issued from the Razorpay dashboard.
    """
    authorize(admin, None, is_admin, "Only admins can refund payments")
    payment = get_payment_or_404(db, payment_id)
    now = _now()

    try:
        refunded = db.execute(
            update(Payment)
            .where(Payment.id == payment.id, Payment.status == "completed")
            .values(
                status="refunded",
                refund_reason=(reason or "").strip() or None,
                refunded_at=now,
                refunded_by_id=admin.id,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        if refunded.rowcount != 1:
            raise InvalidState(f"Only completed payments can be refunded (status: {payment.status})")

        if payment.application_id is not None:
            db.execute(
                update(Application)
                .where(Application.id == payment.application_id, Application.status == "accepted")
                .values(status="pending", responded_at=None, updated_at=now)
                .execution_options(synchronize_session=False)
            )

        if payment.tuition_id is not None:
            db.execute(
                update(Application)
                .where(
                    Application.tuition_id == payment.tuition_id,
                    Application.status == "rejected",
                    Application.rejection_reason == SELECTION_REJECTION_REASON,
                )
                .values(status="pending", rejection_reason=None, responded_at=None, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            db.execute(
                update(Tuition)
                .where(Tuition.id == payment.tuition_id)
                .values(status="open", approved_tutor_id=None, closed_at=None, updated_at=now)
                .execution_options(synchronize_session=False)
            )

        if payment.tutor_id is not None:
            db.execute(
                update(User)
                .where(User.id == payment.tutor_id)
                .values(total_earnings=User.total_earnings - payment.tutor_receives)
                .execution_options(synchronize_session=False)
            )

        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(payment)
    tuition = None
    if payment.tuition_id is not None:
        tuition = db.query(Tuition).filter(Tuition.id == payment.tuition_id).first()
        db.refresh(tuition)

    logger.info(f"Payment {payment.id} refunded by admin {admin.id}")

    extra = {"payment_id": str(payment.id)}
    for user_id in (payment.student_id, payment.tutor_id):
        if user_id is not None:
            notify(
                db,
                user_id=user_id,
                notification_type="payment_refunded",
                title="Payment refunded",
                message=f"Payment of {payment.amount} {payment.currency} has been refunded.",
                priority="high",
                extra_data=extra,
            )
    return payment, tuition


# ── Reads ─────────────────────────────────────────────────────────────────────

def get_payment_or_404(db: Session, payment_id: UUID) -> Payment:
    payment = db.query(Payment).filter(Payment.id == payment_id).first()
    if not payment:
        raise NotFound("Payment not found")
    return payment


def get_payment(db: Session, caller: User, payment_id: UUID) -> Payment:
    payment = get_payment_or_404(db, payment_id)
    authorize(caller, payment, PAYMENT_PARTY_OR_ADMIN, "You are not authorized to view this payment")
    return payment


def list_for_student(db: Session, student: User) -> List[Payment]:
    return (
        db.query(Payment)
        .filter(Payment.student_id == student.id)
        .order_by(Payment.created_at.desc())
        .all()
    )


def list_for_tutor(db: Session, tutor: User) -> List[Payment]:
    return (
        db.query(Payment)
        .filter(Payment.tutor_id == tutor.id, Payment.status == "completed")
        .order_by(Payment.created_at.desc())
        .all()
    )


def list_all(db: Session, status: Optional[str] = None) -> List[Payment]:
    query = db.query(Payment)
    if status:
        query = query.filter(Payment.status == status)
    return query.order_by(Payment.created_at.desc()).all()
