# tuitionhub/api/v1/endpoints/users.py
# User profile endpoints
#
# GET   /users/me          -- own full profile
# PATCH /users/me          -- update self-editable fields
# GET   /users/tutors      -- browse tutors in good standing
# GET   /users/{user_id}   -- public profile of any user

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import tuitionhub.db.base  # noqa: F401
from tuitionhub.core.dependencies import require_login
from tuitionhub.db.session import get_db
from tuitionhub.models.user import User
from tuitionhub.schemas.user import (
    PublicUserEnvelope,
    TutorListEnvelope,
    UpdateProfileRequest,
    UserEnvelope,
    UserPrivate,
    UserPublic,
)
from tuitionhub.services import user_service

router = APIRouter()


@router.get("/me", response_model=UserEnvelope, summary="Get own profile")
def get_my_profile(current_user: User = Depends(require_login)):
    return UserEnvelope(user=UserPrivate.model_validate(current_user))


@router.patch("/me", response_model=UserEnvelope, summary="Update own profile")
def update_my_profile(
    payload: UpdateProfileRequest,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    user = user_service.update_profile(db, current_user, payload)
    return UserEnvelope(message="Profile updated successfully", user=UserPrivate.model_validate(user))


@router.get("/tutors", response_model=TutorListEnvelope, summary="Browse tutors")
def list_tutors(
    search: Optional[str] = Query(None),
    subject: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    min_rating: Optional[float] = Query(None, ge=0, le=5),
    min_experience: Optional[int] = Query(None, ge=0),
    db: Session = Depends(get_db),
):
    tutors = user_service.list_tutors(
        db,
        search=search,
        subject=subject,
        location=location,
        min_rating=min_rating,
        min_experience=min_experience,
    )
    return TutorListEnvelope(
        count=len(tutors),
        tutors=[UserPublic.model_validate(t) for t in tutors],
    )


@router.get("/{user_id}", response_model=PublicUserEnvelope, summary="Get public profile")
def get_public_profile(user_id: UUID, db: Session = Depends(get_db)):
    user = user_service.get_user_or_404(db, user_id)
    return PublicUserEnvelope(user=UserPublic.model_validate(user))
