# tuitionhub/schemas/review.py
# Pydantic request/response models for tutor review endpoints

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from tuitionhub.models.review import MAX_RATING, MIN_RATING
from tuitionhub.schemas.common import Pagination
from tuitionhub.schemas.tuition import PartySummary

COMMENT_MIN_LENGTH = 10
COMMENT_MAX_LENGTH = 500


def _check_rating(v: int) -> int:
    if not MIN_RATING <= v <= MAX_RATING:
        raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    return v


def _check_comment(v: str) -> str:
    v = v.strip()
    if len(v) < COMMENT_MIN_LENGTH:
        raise ValueError(f"Review must be at least {COMMENT_MIN_LENGTH} characters")
    if len(v) > COMMENT_MAX_LENGTH:
        raise ValueError(f"Review cannot exceed {COMMENT_MAX_LENGTH} characters")
    return v


# ── Requests (input) ──────────────────────────────────────────────────────────

class ReviewCreate(BaseModel):
    """Student reviews a tutor they hired."""
    tutor_id: UUID
    rating: int
    comment: str

    @field_validator("rating")
    @classmethod
    def rating_in_range(cls, v: int) -> int:
        return _check_rating(v)

    @field_validator("comment")
    @classmethod
    def comment_length(cls, v: str) -> str:
        return _check_comment(v)


class ReviewUpdate(BaseModel):
    rating: Optional[int] = None
    comment: Optional[str] = None

    model_config = {"extra": "ignore"}

    @field_validator("rating")
    @classmethod
    def rating_in_range(cls, v: Optional[int]) -> Optional[int]:
        return _check_rating(v) if v is not None else v

    @field_validator("comment")
    @classmethod
    def comment_length(cls, v: Optional[str]) -> Optional[str]:
        return _check_comment(v) if v is not None else v


# ── Responses (output) ────────────────────────────────────────────────────────

class ReviewResponse(BaseModel):
    id: UUID
    tutor_id: UUID
    student_id: UUID
    rating: int
    comment: str
    helpful: int
    created_at: datetime
    updated_at: datetime

    student: Optional[PartySummary] = None
    tutor: Optional[PartySummary] = None

    model_config = {"from_attributes": True}


class ReviewEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    review: ReviewResponse


class ReviewListEnvelope(BaseModel):
    success: bool = True
    reviews: List[ReviewResponse]
    pagination: Optional[Pagination] = None


class TutorRatingSummary(BaseModel):
    rating: float
    total_reviews: int


class TutorReviewsEnvelope(ReviewListEnvelope):
    summary: TutorRatingSummary


class CanReviewResponse(BaseModel):
    success: bool = True
    can_review: bool
    has_reviewed: bool
    has_hired: bool
    review: Optional[ReviewResponse] = None
