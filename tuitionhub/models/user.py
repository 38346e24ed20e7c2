# tuitionhub/models/user.py
# Single user table for all roles: student | tutor | admin
# Tutor profile attributes and the earnings accumulator live on the same row

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship

from tuitionhub.db.base_class import Base

USER_ROLES = ("student", "tutor", "admin")

# approved and active both mean "in good standing"
USER_STATUSES = ("pending", "approved", "active", "rejected", "suspended", "blocked")


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # ── Identity ──────────────────────────────────────────────────────────────
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    avatar_url = Column(Text, nullable=True)
    address = Column(String(255), nullable=True)
    location = Column(String(255), nullable=True)

    # ── Role ──────────────────────────────────────────────────────────────────
    role = Column(
        Enum(*USER_ROLES, name="user_role_enum"),
        nullable=False,
        default="student",
        index=True,
    )

    # ── Account Status ────────────────────────────────────────────────────────
    # Set by admin only. blocked -> can never log in
    status = Column(
        Enum(*USER_STATUSES, name="user_status_enum"),
        nullable=False,
        default="pending",
        index=True,
    )
    approved_by_id = Column(
        Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    approved_at = Column(DateTime(timezone=True), nullable=True)
    rejection_reason = Column(Text, nullable=True)

    # ── Student Fields ────────────────────────────────────────────────────────
    grade = Column(String(50), nullable=True)
    institution = Column(String(255), nullable=True)

    # ── Tutor Fields ──────────────────────────────────────────────────────────
    subjects = Column(JSON, nullable=True)                  # ["Math", "Physics"]
    experience_years = Column(Integer, nullable=False, default=0)
    bio = Column(String(500), nullable=True)
    hourly_rate = Column(Integer, nullable=False, default=0)
    rating = Column(Float, nullable=False, default=0.0)     # 0 - 5, average of reviews to 1 decimal
    total_reviews = Column(Integer, nullable=False, default=0)

    # Earnings accumulator -- only changed with atomic SQL increments
    # by the acceptance coordinator and its refund reversal
    total_earnings = Column(Integer, nullable=False, default=0)

    # ── Timestamps ────────────────────────────────────────────────────────────
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
    last_login_at = Column(DateTime(timezone=True), nullable=True)

    # ── Relationships ─────────────────────────────────────────────────────────
    tuitions = relationship(
        "Tuition",
        back_populates="student",
        foreign_keys="Tuition.student_id",
        cascade="all, delete-orphan",
    )
    applications = relationship(
        "Application",
        back_populates="tutor",
        foreign_keys="Application.tutor_id",
        cascade="all, delete-orphan",
    )
    notifications = relationship(
        "Notification", back_populates="user", cascade="all, delete-orphan"
    )
    reviews_received = relationship(
        "Review",
        back_populates="tutor",
        foreign_keys="Review.tutor_id",
        cascade="all, delete-orphan",
    )
    reviews_given = relationship(
        "Review",
        back_populates="student",
        foreign_keys="Review.student_id",
        cascade="all, delete-orphan",
    )

    @property
    def is_blocked(self) -> bool:
        return self.status == "blocked"

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email} role={self.role} status={self.status}>"
