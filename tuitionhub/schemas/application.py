# tuitionhub/schemas/application.py
# Pydantic request/response models for tutor application endpoints

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from tuitionhub.schemas.tuition import PartySummary


# ── Requests (input) ──────────────────────────────────────────────────────────

class ApplicationCreate(BaseModel):
    """Tutor applies to an approved, open tuition."""
    tuition_id: UUID
    qualifications: str
    experience: str
    expected_salary: int
    message: Optional[str] = None

    @field_validator("qualifications")
    @classmethod
    def qualifications_length(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 20:
            raise ValueError("Qualifications must be at least 20 characters")
        return v

    @field_validator("experience")
    @classmethod
    def experience_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Experience is required")
        return v

    @field_validator("expected_salary")
    @classmethod
    def salary_not_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("Expected salary cannot be negative")
        return v


class ApplicationUpdate(BaseModel):
    """Tutor edits a still-pending application."""
    qualifications: Optional[str] = None
    experience: Optional[str] = None
    expected_salary: Optional[int] = None
    message: Optional[str] = None

    model_config = {"extra": "ignore"}

    @field_validator("qualifications")
    @classmethod
    def qualifications_length(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            v = v.strip()
            if len(v) < 20:
                raise ValueError("Qualifications must be at least 20 characters")
        return v

    @field_validator("expected_salary")
    @classmethod
    def salary_not_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("Expected salary cannot be negative")
        return v


class ApplicationReject(BaseModel):
    rejection_reason: Optional[str] = None


class ApplicationStatusUpdate(BaseModel):
    """Student/admin response. Only 'rejected' is accepted here."""
    status: str
    rejection_reason: Optional[str] = None


# ── Responses (output) ────────────────────────────────────────────────────────

class TuitionSummary(BaseModel):
    id: UUID
    title: str
    subject: str
    grade: str
    location: str
    salary: int
    status: str
    approval_status: str

    model_config = {"from_attributes": True}


class ApplicationResponse(BaseModel):
    id: UUID
    tuition_id: UUID
    tutor_id: UUID
    student_id: UUID
    qualifications: str
    experience: str
    expected_salary: int
    message: Optional[str] = None
    status: str
    rejection_reason: Optional[str] = None
    applied_at: datetime
    responded_at: Optional[datetime] = None

    tutor: Optional[PartySummary] = None
    tuition: Optional[TuitionSummary] = None

    model_config = {"from_attributes": True}


class ApplicationEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    application: ApplicationResponse


class ApplicationListEnvelope(BaseModel):
    success: bool = True
    applications: List[ApplicationResponse]


class AppliedCheckResponse(BaseModel):
    success: bool = True
    already_applied: bool
    application: Optional[ApplicationResponse] = None
