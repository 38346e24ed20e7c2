# tuitionhub/models/review.py
# A student's rating of a tutor they hired
#
# One review per (tutor, student) pair, enforced by UNIQUE on insert.
# users.rating / users.total_reviews are recomputed from this table in the
# same transaction as every insert, edit and delete (services/review_service.py).

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import relationship

from tuitionhub.db.base_class import Base

MIN_RATING = 1
MAX_RATING = 5


class Review(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("tutor_id", "student_id", name="uq_reviews_tutor_student"),
        CheckConstraint(f"rating BETWEEN {MIN_RATING} AND {MAX_RATING}", name="ck_reviews_rating_range"),
        Index("ix_reviews_tutor_created", "tutor_id", "created_at"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    tutor_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    student_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    helpful = Column(Integer, nullable=False, default=0)

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

    # ── Relationships ─────────────────────────────────────────────────────────
    tutor = relationship("User", back_populates="reviews_received", foreign_keys=[tutor_id])
    student = relationship("User", back_populates="reviews_given", foreign_keys=[student_id])

    def __repr__(self) -> str:
        return f"<Review tutor={self.tutor_id} student={self.student_id} rating={self.rating}>"
