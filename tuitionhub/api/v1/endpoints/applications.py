# tuitionhub/api/v1/endpoints/applications.py
# Tutor application endpoints
#
# POST  /applications                       -- tutor applies
# GET   /applications/check/{tuition_id}    -- has the tutor applied already?
# GET   /applications/my-applications       -- tutor's own applications
# GET   /applications/tuition/{tuition_id}  -- applications on a posting (owner/admin)
# PUT   /applications/{id}                  -- tutor edits a pending application
# PATCH /applications/{id}/withdraw         -- tutor withdraws
# PATCH /applications/{id}/reject           -- owner/admin rejects
# PATCH /applications/{id}/status           -- generic; only "rejected" accepted
#
# Acceptance is not here: it happens by paying, see payments.py.

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import tuitionhub.db.base  # noqa: F401
from tuitionhub.core.dependencies import require_login, require_tutor
from tuitionhub.db.session import get_db
from tuitionhub.models.user import User
from tuitionhub.schemas.application import (
    ApplicationCreate,
    ApplicationEnvelope,
    ApplicationListEnvelope,
    ApplicationReject,
    ApplicationResponse,
    ApplicationStatusUpdate,
    ApplicationUpdate,
    AppliedCheckResponse,
)
from tuitionhub.schemas.common import ApplicationStatusFilter
from tuitionhub.services import application_service

router = APIRouter()


def _envelope(application, message: Optional[str] = None) -> ApplicationEnvelope:
    return ApplicationEnvelope(
        message=message,
        application=ApplicationResponse.model_validate(application),
    )


# ── Tutor ─────────────────────────────────────────────────────────────────────

@router.post("", response_model=ApplicationEnvelope, status_code=201, summary="Apply to a tuition")
def apply(
    payload: ApplicationCreate,
    current_user: User = Depends(require_tutor),
    db: Session = Depends(get_db),
):
    application = application_service.apply(db, current_user, payload)
    return _envelope(application, "Application submitted successfully")


@router.get("/check/{tuition_id}", response_model=AppliedCheckResponse, summary="Check if already applied")
def check_applied(
    tuition_id: UUID,
    current_user: User = Depends(require_tutor),
    db: Session = Depends(get_db),
):
    application = application_service.check_applied(db, current_user, tuition_id)
    return AppliedCheckResponse(
        already_applied=application is not None,
        application=ApplicationResponse.model_validate(application) if application else None,
    )


@router.get("/my-applications", response_model=ApplicationListEnvelope, summary="Own applications")
def my_applications(
    status: Optional[ApplicationStatusFilter] = Query(None),
    current_user: User = Depends(require_tutor),
    db: Session = Depends(get_db),
):
    applications = application_service.list_for_tutor(db, current_user, status)
    return ApplicationListEnvelope(
        applications=[ApplicationResponse.model_validate(a) for a in applications]
    )


@router.put("/{application_id}", response_model=ApplicationEnvelope, summary="Edit a pending application")
def update_application(
    application_id: UUID,
    payload: ApplicationUpdate,
    current_user: User = Depends(require_tutor),
    db: Session = Depends(get_db),
):
    application = application_service.update_application(db, current_user, application_id, payload)
    return _envelope(application, "Application updated successfully")


@router.patch("/{application_id}/withdraw", response_model=ApplicationEnvelope, summary="Withdraw an application")
def withdraw(
    application_id: UUID,
    current_user: User = Depends(require_tutor),
    db: Session = Depends(get_db),
):
    application = application_service.withdraw(db, current_user, application_id)
    return _envelope(application, "Application withdrawn successfully")


# ── Tuition Owner / Admin ─────────────────────────────────────────────────────

@router.get("/tuition/{tuition_id}", response_model=ApplicationListEnvelope, summary="Applications for a tuition")
def tuition_applications(
    tuition_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    applications = application_service.list_for_tuition(db, current_user, tuition_id)
    return ApplicationListEnvelope(
        applications=[ApplicationResponse.model_validate(a) for a in applications]
    )


@router.patch("/{application_id}/reject", response_model=ApplicationEnvelope, summary="Reject an application")
def reject(
    application_id: UUID,
    payload: Optional[ApplicationReject] = None,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    reason = payload.rejection_reason if payload else None
    application = application_service.reject(db, current_user, application_id, reason)
    return _envelope(application, "Application rejected")


@router.patch("/{application_id}/status", response_model=ApplicationEnvelope, summary="Update application status")
def update_status(
    application_id: UUID,
    payload: ApplicationStatusUpdate,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    application = application_service.update_status(
        db, current_user, application_id, payload.status, payload.rejection_reason
    )
    return _envelope(application, f"Application {application.status}")
