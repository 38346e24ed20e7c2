# tuitionhub/api/v1/endpoints/tuitions.py
# Tuition posting endpoints
#
# GET    /tuitions                 -- public listing (approved + open), filters
# GET    /tuitions/latest          -- six newest visible postings
# GET    /tuitions/my-tuitions     -- student's own postings, any state
# GET    /tuitions/{id}            -- detail (counts a view)
# POST   /tuitions                 -- student posts a request
# PUT    /tuitions/{id}            -- owner/admin edit
# PATCH  /tuitions/{id}/status     -- owner/admin lifecycle change
# DELETE /tuitions/{id}            -- owner/admin delete while open

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import tuitionhub.db.base  # noqa: F401
from tuitionhub.core.config import settings
from tuitionhub.core.dependencies import get_optional_user, require_login, require_student
from tuitionhub.db.session import get_db
from tuitionhub.models.user import User
from tuitionhub.schemas.common import MediumFilter, MessageResponse, Pagination, TutoringTypeFilter
from tuitionhub.schemas.tuition import (
    TuitionCreate,
    TuitionEnvelope,
    TuitionListEnvelope,
    TuitionResponse,
    TuitionStatusUpdate,
    TuitionUpdate,
)
from tuitionhub.services import tuition_service

router = APIRouter()


# ── Public Reads ──────────────────────────────────────────────────────────────

@router.get("", response_model=TuitionListEnvelope, summary="Browse open tuitions")
def list_tuitions(
    search: Optional[str] = Query(None, description="Matches title, subject or location"),
    subject: Optional[str] = Query(None),
    tutoring_type: Optional[TutoringTypeFilter] = Query(None),
    preferred_medium: Optional[MediumFilter] = Query(None),
    min_salary: Optional[int] = Query(None, ge=0),
    max_salary: Optional[int] = Query(None, ge=0),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    db: Session = Depends(get_db),
):
    tuitions, total = tuition_service.list_public(
        db,
        page=page,
        limit=limit,
        search=search,
        subject=subject,
        tutoring_type=tutoring_type,
        preferred_medium=preferred_medium,
        min_salary=min_salary,
        max_salary=max_salary,
    )
    return TuitionListEnvelope(
        tuitions=[TuitionResponse.model_validate(t) for t in tuitions],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/latest", response_model=TuitionListEnvelope, summary="Newest open tuitions")
def latest_tuitions(db: Session = Depends(get_db)):
    tuitions = tuition_service.list_latest(db)
    return TuitionListEnvelope(tuitions=[TuitionResponse.model_validate(t) for t in tuitions])


@router.get("/my-tuitions", response_model=TuitionListEnvelope, summary="Own tuition postings")
def my_tuitions(
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    tuitions = tuition_service.list_for_student(db, current_user)
    return TuitionListEnvelope(tuitions=[TuitionResponse.model_validate(t) for t in tuitions])


@router.get("/{tuition_id}", response_model=TuitionEnvelope, summary="Tuition detail")
def get_tuition(
    tuition_id: UUID,
    viewer: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    tuition = tuition_service.get_detail(db, tuition_id, viewer)
    return TuitionEnvelope(tuition=TuitionResponse.model_validate(tuition))


# ── Owner Actions ─────────────────────────────────────────────────────────────

@router.post("", response_model=TuitionEnvelope, status_code=201, summary="Post a tuition request")
def create_tuition(
    payload: TuitionCreate,
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    tuition = tuition_service.create_tuition(db, current_user, payload)
    return TuitionEnvelope(
        message="Tuition posted successfully. It will be visible once approved.",
        tuition=TuitionResponse.model_validate(tuition),
    )


@router.put("/{tuition_id}", response_model=TuitionEnvelope, summary="Edit a tuition")
def update_tuition(
    tuition_id: UUID,
    payload: TuitionUpdate,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    tuition = tuition_service.update_tuition(db, current_user, tuition_id, payload)
    return TuitionEnvelope(
        message="Tuition updated successfully",
        tuition=TuitionResponse.model_validate(tuition),
    )


@router.patch("/{tuition_id}/status", response_model=TuitionEnvelope, summary="Close or complete a tuition")
def update_tuition_status(
    tuition_id: UUID,
    payload: TuitionStatusUpdate,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    tuition = tuition_service.set_status(db, current_user, tuition_id, payload.status)
    return TuitionEnvelope(
        message=f"Tuition marked as {tuition.status}",
        tuition=TuitionResponse.model_validate(tuition),
    )


@router.delete("/{tuition_id}", response_model=MessageResponse, summary="Delete a tuition")
def delete_tuition(
    tuition_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    tuition_service.delete_tuition(db, current_user, tuition_id)
    return MessageResponse(message="Tuition deleted successfully")
