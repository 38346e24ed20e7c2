# tuitionhub/schemas/tuition.py
# Pydantic request/response models for tuition endpoints

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from tuitionhub.models.tuition import GENDER_PREFERENCES, MEDIUMS, TUTORING_TYPES
from tuitionhub.schemas.common import Pagination


def _one_of(value: Optional[str], allowed: tuple, label: str) -> Optional[str]:
    if value is not None and value not in allowed:
        raise ValueError(f"Invalid {label}. Must be one of: {', '.join(allowed)}")
    return value


# ── Requests (input) ──────────────────────────────────────────────────────────

class TuitionCreate(BaseModel):
    """Student posts this to request a tutor."""
    title: str
    subject: str
    grade: str
    location: str
    salary: int
    days_per_week: int
    class_duration: Optional[str] = None
    tutoring_type: str
    preferred_medium: str = "both"
    student_gender: str = "any"
    tutor_gender_preference: str = "any"
    requirements: str
    description: Optional[str] = None

    @field_validator("title", "subject", "grade", "location", "requirements")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field cannot be empty")
        return v

    @field_validator("salary")
    @classmethod
    def salary_not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Salary cannot be negative")
        return v

    @field_validator("days_per_week")
    @classmethod
    def days_in_week(cls, v: int) -> int:
        if not 1 <= v <= 7:
            raise ValueError("Days per week must be between 1 and 7")
        return v

    @field_validator("tutoring_type")
    @classmethod
    def valid_tutoring_type(cls, v: str) -> str:
        return _one_of(v, TUTORING_TYPES, "tutoring type")

    @field_validator("preferred_medium")
    @classmethod
    def valid_medium(cls, v: str) -> str:
        return _one_of(v, MEDIUMS, "medium")

    @field_validator("student_gender", "tutor_gender_preference")
    @classmethod
    def valid_gender(cls, v: str) -> str:
        return _one_of(v, GENDER_PREFERENCES, "gender preference")


class TuitionUpdate(BaseModel):
    """
    Owner edit. Only posting details -- moderation and lifecycle fields
    (approval_status, status, approved_tutor) are not accepted.
    """
    title: Optional[str] = None
    subject: Optional[str] = None
    grade: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[int] = None
    days_per_week: Optional[int] = None
    class_duration: Optional[str] = None
    tutoring_type: Optional[str] = None
    preferred_medium: Optional[str] = None
    student_gender: Optional[str] = None
    tutor_gender_preference: Optional[str] = None
    requirements: Optional[str] = None
    description: Optional[str] = None

    model_config = {"extra": "ignore"}

    @field_validator("title", "subject", "grade", "location", "requirements")
    @classmethod
    def not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Field cannot be empty")
        return v

    @field_validator("salary")
    @classmethod
    def salary_not_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("Salary cannot be negative")
        return v

    @field_validator("days_per_week")
    @classmethod
    def days_in_week(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not 1 <= v <= 7:
            raise ValueError("Days per week must be between 1 and 7")
        return v

    @field_validator("tutoring_type")
    @classmethod
    def valid_tutoring_type(cls, v: Optional[str]) -> Optional[str]:
        return _one_of(v, TUTORING_TYPES, "tutoring type")

    @field_validator("preferred_medium")
    @classmethod
    def valid_medium(cls, v: Optional[str]) -> Optional[str]:
        return _one_of(v, MEDIUMS, "medium")

    @field_validator("student_gender", "tutor_gender_preference")
    @classmethod
    def valid_gender(cls, v: Optional[str]) -> Optional[str]:
        return _one_of(v, GENDER_PREFERENCES, "gender preference")


class TuitionReject(BaseModel):
    """Admin must give a reason when rejecting."""
    reason: str = ""


class TuitionStatusUpdate(BaseModel):
    """Owner/admin lifecycle change: closed | completed."""
    status: str


# ── Responses (output) ────────────────────────────────────────────────────────

class PartySummary(BaseModel):
    id: UUID
    name: str
    avatar_url: Optional[str] = None

    model_config = {"from_attributes": True}


class TuitionResponse(BaseModel):
    id: UUID
    title: str
    subject: str
    grade: str
    location: str
    salary: int
    days_per_week: int
    class_duration: Optional[str] = None
    tutoring_type: str
    preferred_medium: str
    student_gender: str
    tutor_gender_preference: str
    requirements: str
    description: Optional[str] = None

    student_id: UUID
    student: Optional[PartySummary] = None

    approval_status: str
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None

    status: str
    approved_tutor_id: Optional[UUID] = None
    approved_tutor: Optional[PartySummary] = None
    closed_at: Optional[datetime] = None
    view_count: int

    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TuitionEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    tuition: TuitionResponse


class TuitionListEnvelope(BaseModel):
    success: bool = True
    tuitions: List[TuitionResponse]
    pagination: Optional[Pagination] = None
