# tuitionhub/api/v1/endpoints/auth.py
# Authentication endpoints
#
# POST /auth/register         -- email + password signup (student | tutor)
# POST /auth/login            -- returns a bearer access token
# GET  /auth/me               -- current user's private profile
# PUT  /auth/change-password  -- verify current password, set a new one

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import tuitionhub.db.base  # noqa: F401 -- registers all models so relationships resolve
from tuitionhub.core.config import settings
from tuitionhub.core.dependencies import require_login
from tuitionhub.core.security import create_access_token
from tuitionhub.db.session import get_db
from tuitionhub.models.user import User
from tuitionhub.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
)
from tuitionhub.schemas.common import MessageResponse
from tuitionhub.schemas.user import UserEnvelope, UserPrivate
from tuitionhub.services import user_service

router = APIRouter()


# Helper
def _build_auth_response(user: User, message: str, warning=None) -> AuthResponse:
    return AuthResponse(
        message=message,
        access_token=create_access_token(user.id, user.email, user.role),
        expires_in=settings.access_token_expire_minutes * 60,
        user=UserPrivate.model_validate(user),
        status_warning=warning,
    )


# Register
@router.post("/register", response_model=AuthResponse, status_code=201, summary="Create an account")
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    user = user_service.register(db, payload)
    return _build_auth_response(
        user,
        "Registration successful! Your account is pending approval.",
        user_service.PENDING_NOTICE,
    )


# Login
@router.post("/login", response_model=AuthResponse, summary="Log in with email and password")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = user_service.authenticate(db, payload.email, payload.password, payload.role)
    return _build_auth_response(user, "Login successful", user_service.status_warning(user))


# Me
@router.get("/me", response_model=UserEnvelope, summary="Current user")
def me(current_user: User = Depends(require_login)):
    return UserEnvelope(user=UserPrivate.model_validate(current_user))


# Change password
@router.put("/change-password", response_model=MessageResponse, summary="Change password")
def change_password(
    payload: ChangePasswordRequest,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    user_service.change_password(db, current_user, payload.current_password, payload.new_password)
    return MessageResponse(message="Password changed successfully.")
