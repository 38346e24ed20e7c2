# tuitionhub/models/application.py
# A tutor's bid against one tuition
#
# Status lifecycle: pending -> accepted | rejected | withdrawn
# accepted is only reachable through services/acceptance.py (payment-gated).
# A refund may send accepted/auto-rejected applications back to pending.
#
# UNIQUE (tuition_id, tutor_id) is the only guard against duplicate applies.

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
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from tuitionhub.db.base_class import Base

APPLICATION_STATUSES = ("pending", "accepted", "rejected", "withdrawn")

# Reason stamped on sibling applications when one tutor is selected
SELECTION_REJECTION_REASON = "Another tutor has been selected"


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("tuition_id", "tutor_id", name="uq_applications_tuition_tutor"),
        Index("ix_applications_tutor_status", "tutor_id", "status"),
        Index("ix_applications_student_status", "student_id", "status"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # ── Parties ───────────────────────────────────────────────────────────────
    tuition_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("tuitions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tutor_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    # Denormalised tuition owner so student-side queries skip a join
    student_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # ── Bid ───────────────────────────────────────────────────────────────────
    qualifications = Column(Text, nullable=False)
    experience = Column(String(255), nullable=False)
    expected_salary = Column(Integer, nullable=False)
    message = Column(Text, nullable=True)

    # ── Status ────────────────────────────────────────────────────────────────
    status = Column(
        Enum(*APPLICATION_STATUSES, name="application_status_enum"),
        nullable=False,
        default="pending",
        index=True,
    )
    rejection_reason = Column(Text, nullable=True)
    responded_at = Column(DateTime(timezone=True), nullable=True)

    # ── Timestamps ────────────────────────────────────────────────────────────
    applied_at = Column(
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
    tuition = relationship("Tuition", back_populates="applications")
    tutor = relationship("User", back_populates="applications", foreign_keys=[tutor_id])
    student = relationship("User", foreign_keys=[student_id])

    def __repr__(self) -> str:
        return (
            f"<Application tuition={self.tuition_id} "
            f"tutor={self.tutor_id} status={self.status}>"
        )
