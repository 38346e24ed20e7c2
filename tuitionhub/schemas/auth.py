# tuitionhub/schemas/auth.py
# Pydantic request/response models for authentication endpoints

from typing import List, Optional

from pydantic import BaseModel, EmailStr, field_validator, model_validator

from tuitionhub.schemas.user import UserPrivate


# ── Register ──────────────────────────────────────────────────────────────────

class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    role: str = "student"  # student | tutor
    phone: Optional[str] = None
    address: Optional[str] = None

    # Student fields
    grade: Optional[str] = None
    institution: Optional[str] = None

    # Tutor fields
    subjects: Optional[List[str]] = None
    location: Optional[str] = None
    experience_years: int = 0
    bio: Optional[str] = None
    hourly_rate: int = 0

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    @field_validator("role")
    @classmethod
    def valid_role(cls, v: str) -> str:
        if v not in ("student", "tutor"):
            raise ValueError("Role must be 'student' or 'tutor'")
        return v

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v

    @model_validator(mode="after")
    def tutor_fields_required(self) -> "RegisterRequest":
        if self.role == "tutor":
            subjects = [s.strip() for s in (self.subjects or []) if s and s.strip()]
            if not subjects:
                raise ValueError("At least one subject is required for tutors")
            if not (self.location or "").strip():
                raise ValueError("Location is required for tutors")
            self.subjects = subjects
        return self


# ── Login ─────────────────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    role: Optional[str] = None  # Role picked on the login form; checked when given


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str

    @field_validator("new_password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        if len(v) < 6:
            raise ValueError("Password must be at least 6 characters")
        return v


# ── Token Responses ───────────────────────────────────────────────────────────

class AuthResponse(BaseModel):
    success: bool = True
    message: str
    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until access token expiry

    # User embedded so frontend doesn't need a second request
    user: UserPrivate

    # Set for non-admin accounts that are not in good standing yet
    status_warning: Optional[str] = None
