# tuitionhub/services/review_service.py
# Tutor reviews and the rating aggregate on users
#
# Rules:
#   - only students review, and only tutors they hired (an accepted application)
#   - one review per (tutor, student), refused by the UNIQUE constraint on insert
#   - the author edits or deletes; admins may delete
#
# users.rating (1 decimal) and users.total_reviews are recomputed with one
# UPDATE ... SET col = (SELECT ...) in the same transaction as the review
# write, after locking the tutor row so concurrent writes serialize.

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tuitionhub.core.exceptions import Conflict, Forbidden, NotFound, ValidationFailed
from tuitionhub.core.permissions import any_of, authorize, is_admin, is_owner
from tuitionhub.db.pagination import paginate
from tuitionhub.models.application import Application
from tuitionhub.models.review import Review
from tuitionhub.models.user import User
from tuitionhub.schemas.review import ReviewCreate, ReviewUpdate
from tuitionhub.services.notification_service import notify

logger = logging.getLogger("tuitionhub.reviews")

is_review_author = is_owner("student_id")
REVIEW_AUTHOR_OR_ADMIN = any_of(is_review_author, is_admin)


def get_review_or_404(db: Session, review_id: UUID) -> Review:
    review = db.query(Review).filter(Review.id == review_id).first()
    if not review:
        raise NotFound("Review not found")
    return review


def get_tutor_or_404(db: Session, tutor_id: UUID) -> User:
    tutor = db.query(User).filter(User.id == tutor_id, User.role == "tutor").first()
    if not tutor:
        raise NotFound("Tutor not found")
    return tutor


def has_hired(db: Session, student_id: UUID, tutor_id: UUID) -> bool:
    return db.query(
        db.query(Application).filter(
            Application.student_id == student_id,
            Application.tutor_id == tutor_id,
            Application.status == "accepted",
        ).exists()
    ).scalar()


def refresh_tutor_rating(db: Session, tutor_id: UUID) -> None:
    """Recompute rating and total_reviews from the reviews table. Does not commit."""
    db.execute(select(User.id).where(User.id == tutor_id).with_for_update())

    scope = Review.tutor_id == tutor_id
    average = select(func.coalesce(func.round(func.avg(Review.rating), 1), 0)).where(scope)
    count = select(func.count(Review.id)).where(scope)
    db.execute(
        update(User)
        .where(User.id == tutor_id)
        .values(rating=average.scalar_subquery(), total_reviews=count.scalar_subquery())
        .execution_options(synchronize_session=False)
    )


def _commit_with_rating(db: Session, tutor_id: UUID) -> None:
    try:
        db.flush()
        refresh_tutor_rating(db, tutor_id)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("You have already reviewed this tutor")
    except Exception:
        db.rollback()
        raise


# ── Student Actions ───────────────────────────────────────────────────────────

def create_review(db: Session, student: User, data: ReviewCreate) -> Review:
    tutor = db.query(User).filter(User.id == data.tutor_id).first()
    if not tutor:
        raise NotFound("Tutor not found")
    if tutor.id == student.id:
        raise ValidationFailed("You cannot review yourself")
    if tutor.role != "tutor":
        raise ValidationFailed("You can only review tutors")
    if not has_hired(db, student.id, tutor.id):
        raise Forbidden("You can only review tutors you have hired")

    review = Review(tutor_id=tutor.id, student_id=student.id, rating=data.rating, comment=data.comment)
    db.add(review)
    _commit_with_rating(db, tutor.id)
    db.refresh(tutor)

    logger.info(f"Student {student.id} reviewed tutor {tutor.id} ({data.rating}/5)")
    notify(
        db,
        user_id=tutor.id,
        notification_type="review_received",
        title="New review",
        message=f"{student.name} rated you {data.rating}/5.",
        link="/my-reviews",
        extra_data={"review_id": str(review.id)},
    )
    return review


def update_review(db: Session, student: User, review_id: UUID, data: ReviewUpdate) -> Review:
    review = get_review_or_404(db, review_id)
    authorize(student, review, is_review_author, "You can only update your own reviews")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationFailed("No fields to update")
    for field, value in changes.items():
        setattr(review, field, value)

    _commit_with_rating(db, review.tutor_id)
    db.refresh(review)

    if "rating" in changes:
        notify(
            db,
            user_id=review.tutor_id,
            notification_type="review_received",
            title="Review updated",
            message=f"{student.name} changed their rating to {review.rating}/5.",
            link="/my-reviews",
            extra_data={"review_id": str(review.id)},
        )
    return review


def delete_review(db: Session, caller: User, review_id: UUID) -> None:
    review = get_review_or_404(db, review_id)
    authorize(caller, review, REVIEW_AUTHOR_OR_ADMIN, "You can only delete your own reviews")

    tutor_id = review.tutor_id
    db.delete(review)
    _commit_with_rating(db, tutor_id)
    logger.info(f"Review {review_id} deleted by {caller.id}")


# ── Reads ─────────────────────────────────────────────────────────────────────

def list_for_tutor(db: Session, tutor_id: UUID, page: int, limit: int) -> Tuple[User, List[Review], int]:
    tutor = get_tutor_or_404(db, tutor_id)
    query = db.query(Review).filter(Review.tutor_id == tutor.id).order_by(Review.created_at.desc())
    reviews, total = paginate(query, page, limit)
    return tutor, reviews, total


def list_for_student(db: Session, student: User) -> List[Review]:
    return (
        db.query(Review)
        .filter(Review.student_id == student.id)
        .order_by(Review.created_at.desc())
        .all()
    )


def review_status(db: Session, student: User, tutor_id: UUID) -> Tuple[Optional[Review], bool]:
    """(existing review or None, whether the student has hired this tutor)."""
    review = db.query(Review).filter(
        Review.tutor_id == tutor_id,
        Review.student_id == student.id,
    ).first()
    return review, has_hired(db, student.id, tutor_id)
