# tuitionhub/models/tuition.py
# A tutoring request posted by one student
#
# Two independent axes:
#   approval_status  pending -> approved | rejected     (admin moderation)
#   status           open -> ongoing -> completed       (fulfilment)
#                    open | ongoing -> closed
#
# Publicly visible only when approval_status == "approved" AND status == "open".
# open -> ongoing happens only inside services/acceptance.py.

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
)
from sqlalchemy.orm import relationship

from tuitionhub.db.base_class import Base

APPROVAL_STATUSES = ("pending", "approved", "rejected")
TUITION_STATUSES = ("open", "ongoing", "completed", "closed")
TUTORING_TYPES = ("home", "online", "both")
MEDIUMS = ("bangla", "english", "english_version", "both")
GENDER_PREFERENCES = ("male", "female", "any")


class Tuition(Base):
    __tablename__ = "tuitions"
    __table_args__ = (
        Index("ix_tuitions_visibility", "approval_status", "status", "created_at"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # ── Owner ─────────────────────────────────────────────────────────────────
    student_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # ── Request Details ───────────────────────────────────────────────────────
    title = Column(String(255), nullable=False)
    subject = Column(String(100), nullable=False, index=True)
    grade = Column(String(50), nullable=False)               # Class / level
    location = Column(String(255), nullable=False)
    salary = Column(Integer, nullable=False)                 # Monthly, whole currency units
    days_per_week = Column(Integer, nullable=False)          # 1 - 7
    class_duration = Column(String(50), nullable=True)
    tutoring_type = Column(
        Enum(*TUTORING_TYPES, name="tutoring_type_enum"),
        nullable=False,
    )
    preferred_medium = Column(
        Enum(*MEDIUMS, name="medium_enum"),
        nullable=False,
        default="both",
    )
    student_gender = Column(
        Enum(*GENDER_PREFERENCES, name="student_gender_enum"),
        nullable=False,
        default="any",
    )
    tutor_gender_preference = Column(
        Enum(*GENDER_PREFERENCES, name="tutor_gender_enum"),
        nullable=False,
        default="any",
    )
    requirements = Column(Text, nullable=False)
    description = Column(Text, nullable=True)

    # ── Moderation ────────────────────────────────────────────────────────────
    approval_status = Column(
        Enum(*APPROVAL_STATUSES, name="tuition_approval_status_enum"),
        nullable=False,
        default="pending",
        index=True,
    )
    approved_by_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejected_by_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)

    # ── Lifecycle ─────────────────────────────────────────────────────────────
    status = Column(
        Enum(*TUITION_STATUSES, name="tuition_status_enum"),
        nullable=False,
        default="open",
        index=True,
    )
    approved_tutor_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    closed_at = Column(DateTime(timezone=True), nullable=True)
    view_count = Column(Integer, nullable=False, default=0)

    # ── Timestamps ────────────────────────────────────────────────────────────
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
    student = relationship("User", back_populates="tuitions", foreign_keys=[student_id])
    approved_tutor = relationship("User", foreign_keys=[approved_tutor_id])
    applications = relationship(
        "Application", back_populates="tuition", cascade="all, delete-orphan"
    )

    @property
    def is_visible(self) -> bool:
        return self.approval_status == "approved" and self.status == "open"

    def __repr__(self) -> str:
        return (
            f"<Tuition id={self.id} subject={self.subject} "
            f"approval={self.approval_status} status={self.status}>"
        )
