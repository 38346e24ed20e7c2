# tuitionhub/schemas/user.py
# Pydantic request/response models for user profile and admin user endpoints.
#
# Two distinct response shapes:
#   UserPrivate -- full view (only returned to the user themselves / admin)
#   UserPublic  -- sanitised view (returned to anyone for GET /users/{user_id})

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from tuitionhub.models.user import USER_ROLES, USER_STATUSES
from tuitionhub.schemas.common import Pagination


# ── Responses ─────────────────────────────────────────────────────────────────

class UserPublic(BaseModel):
    """
    Sanitised view. Never includes email, phone, address or earnings.
    Tutor fields are None for students and vice versa.
    """
    id: UUID
    name: str
    avatar_url: Optional[str] = None
    role: str
    location: Optional[str] = None

    # Student
    grade: Optional[str] = None
    institution: Optional[str] = None

    # Tutor
    subjects: Optional[List[str]] = None
    experience_years: int = 0
    bio: Optional[str] = None
    hourly_rate: int = 0
    rating: float = 0.0
    total_reviews: int = 0

    model_config = {"from_attributes": True}


class UserPrivate(UserPublic):
    """Full profile -- only for the user themselves, or an admin."""
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    status: str
    total_earnings: int = 0
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    created_at: datetime
    last_login_at: Optional[datetime] = None


class UserEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    user: UserPrivate


class PublicUserEnvelope(BaseModel):
    success: bool = True
    user: UserPublic


class UserListEnvelope(BaseModel):
    success: bool = True
    users: List[UserPrivate]
    pagination: Pagination


class TutorListEnvelope(BaseModel):
    success: bool = True
    count: int
    tutors: List[UserPublic]


# ── Requests ──────────────────────────────────────────────────────────────────

class UpdateProfileRequest(BaseModel):
    """
    PATCH /users/me -- self-editable fields only.
    role, status, email, earnings and rating are never accepted here.
    """
    name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    address: Optional[str] = None
    location: Optional[str] = None
    grade: Optional[str] = None
    institution: Optional[str] = None
    subjects: Optional[List[str]] = None
    experience_years: Optional[int] = None
    bio: Optional[str] = None
    hourly_rate: Optional[int] = None

    model_config = {"extra": "ignore"}

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Name cannot be empty")
        return v

    @field_validator("bio")
    @classmethod
    def bio_length(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) > 500:
            raise ValueError("Bio cannot exceed 500 characters")
        return v

    @field_validator("experience_years", "hourly_rate")
    @classmethod
    def not_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("Value cannot be negative")
        return v


class UserRoleUpdate(BaseModel):
    role: str

    @field_validator("role")
    @classmethod
    def valid_role(cls, v: str) -> str:
        if v not in USER_ROLES:
            raise ValueError(f"Invalid role. Must be one of: {', '.join(USER_ROLES)}")
        return v


class UserStatusUpdate(BaseModel):
    status: str
    reason: Optional[str] = None  # Stored as rejection_reason when rejecting

    @field_validator("status")
    @classmethod
    def valid_status(cls, v: str) -> str:
        if v not in USER_STATUSES:
            raise ValueError(f"Invalid status. Must be one of: {', '.join(USER_STATUSES)}")
        return v
