# tuitionhub/services/application_service.py
# Tutor application state machine
#
#   pending -> accepted    ONLY in services/acceptance.py (payment-gated)
#   pending -> rejected    tuition owner or admin
#   pending -> withdrawn   applying tutor
#
# Duplicate applies are refused by the UNIQUE (tuition_id, tutor_id)
# constraint on insert, never by a read-then-insert check.

import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tuitionhub.core.exceptions import Conflict, InvalidState, NotFound, ValidationFailed
from tuitionhub.core.permissions import (
    APPLICATION_TUTOR,
    TUITION_OWNER_OR_ADMIN,
    authorize,
)
from tuitionhub.models.application import Application
from tuitionhub.models.user import User
from tuitionhub.schemas.application import ApplicationCreate, ApplicationUpdate
from tuitionhub.services.notification_service import notify
from tuitionhub.services.tuition_service import get_tuition_or_404

logger = logging.getLogger("tuitionhub.applications")


def get_application_or_404(db: Session, application_id: UUID) -> Application:
    application = db.query(Application).filter(Application.id == application_id).first()
    if not application:
        raise NotFound("Application not found")
    return application


# ── Tutor Actions ─────────────────────────────────────────────────────────────

def apply(db: Session, tutor: User, data: ApplicationCreate) -> Application:
    tuition = get_tuition_or_404(db, data.tuition_id)
    if not tuition.is_visible:
        raise InvalidState("This tuition is not accepting applications")

    application = Application(
        tuition_id=tuition.id,
        tutor_id=tutor.id,
        student_id=tuition.student_id,
        qualifications=data.qualifications,
        experience=data.experience,
        expected_salary=data.expected_salary,
        message=data.message,
        status="pending",
    )
    db.add(application)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("You have already applied to this tuition")

    logger.info(f"Tutor {tutor.id} applied to tuition {tuition.id}")
    notify(
        db,
        user_id=tuition.student_id,
        notification_type="application_received",
        title="New application",
        message=f'{tutor.name} applied to your tuition "{tuition.title}".',
        link=f"/tuitions/{tuition.id}/applications",
        extra_data={"tuition_id": str(tuition.id), "application_id": str(application.id)},
    )
    return application


def check_applied(db: Session, tutor: User, tuition_id: UUID) -> Optional[Application]:
    return db.query(Application).filter(
        Application.tuition_id == tuition_id,
        Application.tutor_id == tutor.id,
    ).first()


def update_application(
    db: Session, tutor: User, application_id: UUID, data: ApplicationUpdate
) -> Application:
    application = get_application_or_404(db, application_id)
    authorize(tutor, application, APPLICATION_TUTOR, "You can only edit your own applications")

    if application.status != "pending":
        raise Conflict("Cannot update an application that has already been processed")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationFailed("No fields to update")
    for field, value in changes.items():
        setattr(application, field, value)

    db.commit()
    return application


def withdraw(db: Session, tutor: User, application_id: UUID) -> Application:
    application = get_application_or_404(db, application_id)
    authorize(tutor, application, APPLICATION_TUTOR, "You can only withdraw your own applications")

    if application.status != "pending":
        raise InvalidState(f"Cannot withdraw an application that is {application.status}")

    application.status = "withdrawn"
    db.commit()
    logger.info(f"Application {application.id} withdrawn by tutor {tutor.id}")
    return application


# ── Owner Actions ─────────────────────────────────────────────────────────────

def reject(
    db: Session,
    caller: User,
    application_id: UUID,
    reason: Optional[str] = None,
) -> Application:
    application = get_application_or_404(db, application_id)
    authorize(
        caller, application, TUITION_OWNER_OR_ADMIN,
        "You are not authorized to update this application",
    )

    if application.status != "pending":
        raise InvalidState(f"Cannot reject an application that is {application.status}")

    application.status = "rejected"
    application.responded_at = datetime.now(timezone.utc)
    application.rejection_reason = (reason or "").strip() or None
    db.commit()

    tuition = application.tuition
    notify(
        db,
        user_id=application.tutor_id,
        notification_type="application_rejected",
        title="Application not selected",
        message=f'Your application for "{tuition.title}" was not selected.',
        link="/my-applications",
        extra_data={"tuition_id": str(tuition.id), "application_id": str(application.id)},
    )
    return application


def update_status(
    db: Session,
    caller: User,
    application_id: UUID,
    new_status: str,
    rejection_reason: Optional[str] = None,
) -> Application:
    """Generic status endpoint. Acceptance must go through the payment flow."""
    if new_status == "accepted":
        raise ValidationFailed(
            "Applications are accepted by completing payment. Use /payments/create-order and /payments/confirm."
        )
    if new_status != "rejected":
        raise ValidationFailed("Invalid status. Only 'rejected' is allowed here")
    return reject(db, caller, application_id, rejection_reason)


# ── Reads ─────────────────────────────────────────────────────────────────────

def list_for_tuition(db: Session, caller: User, tuition_id: UUID) -> List[Application]:
    tuition = get_tuition_or_404(db, tuition_id)
    authorize(
        caller, tuition, TUITION_OWNER_OR_ADMIN,
        "You are not authorized to view applications for this tuition",
    )
    return (
        db.query(Application)
        .filter(Application.tuition_id == tuition.id)
        .order_by(Application.applied_at.desc())
        .all()
    )


def list_for_tutor(db: Session, tutor: User, status: Optional[str] = None) -> List[Application]:
    query = db.query(Application).filter(Application.tutor_id == tutor.id)
    if status:
        query = query.filter(Application.status == status)
    return query.order_by(Application.applied_at.desc()).all()
