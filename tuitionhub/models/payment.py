# tuitionhub/models/payment.py
# One completed monetary transaction for an accepted application
#
# Written by the acceptance coordinator once the payment processor confirms.
# completed rows are immutable except for the admin refund transition.

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
    text,
)
from sqlalchemy.orm import relationship

from tuitionhub.db.base_class import Base

PAYMENT_STATUSES = ("pending", "completed", "failed", "refunded")

# Fixed share withheld by the platform before crediting the tutor
PLATFORM_FEE_RATE = 0.10


def split_amount(amount: int) -> tuple:
    """
    Return (platform_fee, tutor_receives) for a payment amount.
    platform_fee + tutor_receives == amount always holds.
    """
    platform_fee = round(amount * PLATFORM_FEE_RATE)
    return platform_fee, amount - platform_fee


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        Index("ix_payments_student_status", "student_id", "status"),
        Index("ix_payments_tutor_status", "tutor_id", "status"),
        # A refunded payment leaves the application free to be paid for again
        Index(
            "uq_payments_application_completed",
            "application_id",
            unique=True,
            postgresql_where=text("status = 'completed'"),
            sqlite_where=text("status = 'completed'"),
        ),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # ── Links ─────────────────────────────────────────────────────────────────
    # Nullable so the audit row survives deletion of a reopened tuition
    tuition_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("tuitions.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    application_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("applications.id", ondelete="SET NULL"),
        nullable=True,
    )
    student_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    tutor_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # ── Amount (whole currency units) ─────────────────────────────────────────
    amount = Column(Integer, nullable=False)
    platform_fee = Column(Integer, nullable=False)
    tutor_receives = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="BDT")

    # ── Processor ─────────────────────────────────────────────────────────────
    payment_method = Column(String(50), nullable=False, default="razorpay")
    transaction_id = Column(String(255), unique=True, nullable=False, index=True)
    gateway_order_id = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)

    # ── Status ────────────────────────────────────────────────────────────────
    status = Column(
        Enum(*PAYMENT_STATUSES, name="payment_status_enum"),
        nullable=False,
        default="pending",
        index=True,
    )
    completed_at = Column(DateTime(timezone=True), nullable=True)

    # ── Refund ────────────────────────────────────────────────────────────────
    refund_reason = Column(Text, nullable=True)
    refunded_at = Column(DateTime(timezone=True), nullable=True)
    refunded_by_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # ── Relationships ─────────────────────────────────────────────────────────
    tuition = relationship("Tuition")
    application = relationship("Application")
    student = relationship("User", foreign_keys=[student_id])
    tutor = relationship("User", foreign_keys=[tutor_id])

    def __repr__(self) -> str:
        return f"<Payment id={self.id} amount={self.amount} status={self.status}>"
