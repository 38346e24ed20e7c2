# tuitionhub/api/v1/endpoints/reviews.py
# Tutor review endpoints
#
# GET    /reviews/tutor/{tutor_id}      -- public, paginated, with rating summary
# GET    /reviews/my-reviews            -- student's own reviews
# GET    /reviews/can-review/{tutor_id} -- hired + not yet reviewed?
# POST   /reviews                       -- student reviews a hired tutor
# PUT    /reviews/{id}                  -- author edits
# DELETE /reviews/{id}                  -- author or admin

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import tuitionhub.db.base  # noqa: F401
from tuitionhub.core.config import settings
from tuitionhub.core.dependencies import require_login, require_student
from tuitionhub.db.session import get_db
from tuitionhub.models.user import User
from tuitionhub.schemas.common import MessageResponse, Pagination
from tuitionhub.schemas.review import (
    CanReviewResponse,
    ReviewCreate,
    ReviewEnvelope,
    ReviewListEnvelope,
    ReviewResponse,
    ReviewUpdate,
    TutorRatingSummary,
    TutorReviewsEnvelope,
)
from tuitionhub.services import review_service

router = APIRouter()


@router.get("/tutor/{tutor_id}", response_model=TutorReviewsEnvelope, summary="Reviews of a tutor")
def tutor_reviews(
    tutor_id: UUID,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
):
    tutor, reviews, total = review_service.list_for_tutor(db, tutor_id, page, limit)
    return TutorReviewsEnvelope(
        reviews=[ReviewResponse.model_validate(r) for r in reviews],
        pagination=Pagination.build(page, limit, total),
        summary=TutorRatingSummary(rating=tutor.rating, total_reviews=tutor.total_reviews),
    )


@router.get("/my-reviews", response_model=ReviewListEnvelope, summary="Own reviews")
def my_reviews(
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    reviews = review_service.list_for_student(db, current_user)
    return ReviewListEnvelope(reviews=[ReviewResponse.model_validate(r) for r in reviews])


@router.get("/can-review/{tutor_id}", response_model=CanReviewResponse, summary="Check review eligibility")
def can_review(
    tutor_id: UUID,
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    review, hired = review_service.review_status(db, current_user, tutor_id)
    return CanReviewResponse(
        can_review=hired and review is None,
        has_reviewed=review is not None,
        has_hired=hired,
        review=ReviewResponse.model_validate(review) if review else None,
    )


@router.post("", response_model=ReviewEnvelope, status_code=201, summary="Review a tutor")
def create_review(
    payload: ReviewCreate,
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    review = review_service.create_review(db, current_user, payload)
    return ReviewEnvelope(
        message="Review submitted successfully",
        review=ReviewResponse.model_validate(review),
    )


@router.put("/{review_id}", response_model=ReviewEnvelope, summary="Edit own review")
def update_review(
    review_id: UUID,
    payload: ReviewUpdate,
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    review = review_service.update_review(db, current_user, review_id, payload)
    return ReviewEnvelope(
        message="Review updated successfully",
        review=ReviewResponse.model_validate(review),
    )


@router.delete("/{review_id}", response_model=MessageResponse, summary="Delete a review")
def delete_review(
    review_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    review_service.delete_review(db, current_user, review_id)
    return MessageResponse(message="Review deleted successfully")
