# tuitionhub/services/tuition_service.py
# Tuition posting state machine and reads
#
# Moderation axis (admin):   pending -> approved | rejected
#                            owner edit -> pending again (re-review)
# Lifecycle axis:            open -> closed
#                            ongoing -> closed | completed
#                            open -> ongoing   ONLY in services/acceptance.py
#                            ongoing -> open   ONLY via refund reversal
#
# Services commit their own work so notifications can follow the commit.

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import or_, update
from sqlalchemy.orm import Session

from tuitionhub.core.exceptions import InvalidState, NotFound, ValidationFailed
from tuitionhub.core.permissions import TUITION_OWNER_OR_ADMIN, authorize, is_admin
from tuitionhub.db.pagination import paginate
from tuitionhub.models.payment import Payment
from tuitionhub.models.tuition import TUITION_STATUSES, Tuition
from tuitionhub.models.user import User
from tuitionhub.schemas.tuition import TuitionCreate, TuitionUpdate
from tuitionhub.services.notification_service import notify

logger = logging.getLogger("tuitionhub.tuitions")

# Transitions allowed through the owner/admin lifecycle endpoint
LIFECYCLE_TRANSITIONS = {
    ("open", "closed"),
    ("ongoing", "closed"),
    ("ongoing", "completed"),
}

# Postings in these states are locked to edits
LOCKED_STATUSES = ("ongoing", "completed")

LATEST_LIMIT = 6


def _now() -> datetime:
    return datetime.now(timezone.utc)


def get_tuition_or_404(db: Session, tuition_id: UUID) -> Tuition:
    tuition = db.query(Tuition).filter(Tuition.id == tuition_id).first()
    if not tuition:
        raise NotFound("Tuition not found")
    return tuition


# ── Create / Edit / Delete ────────────────────────────────────────────────────

def create_tuition(db: Session, student: User, data: TuitionCreate) -> Tuition:
    """New postings start pending review and open."""
    tuition = Tuition(
        student_id=student.id,
        approval_status="pending",
        status="open",
        view_count=0,
        **data.model_dump(),
    )
    db.add(tuition)
    db.commit()
    logger.info(f"Tuition {tuition.id} posted by student {student.id}")
    return tuition


def update_tuition(
    db: Session, caller: User, tuition_id: UUID, data: TuitionUpdate
) -> Tuition:
    tuition = get_tuition_or_404(db, tuition_id)
    authorize(caller, tuition, TUITION_OWNER_OR_ADMIN, "You are not authorized to update this tuition")

    if tuition.status in LOCKED_STATUSES:
        raise InvalidState(f"Cannot edit a tuition that is {tuition.status}")

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationFailed("No fields to update")

    for field, value in changes.items():
        setattr(tuition, field, value)

    # Student edits go back to the moderation queue
    if tuition.student_id == caller.id:
        tuition.approval_status = "pending"

    db.commit()
    return tuition


def delete_tuition(db: Session, caller: User, tuition_id: UUID) -> None:
    """
    Only open postings can be deleted. Applications go with the posting;
    payment rows stay as an audit trail with their links cleared.
    """
    tuition = get_tuition_or_404(db, tuition_id)
    authorize(caller, tuition, TUITION_OWNER_OR_ADMIN, "You are not authorized to delete this tuition")

    if tuition.status != "open":
        raise InvalidState(f"Cannot delete a tuition that is {tuition.status}")

    db.query(Payment).filter(Payment.tuition_id == tuition.id).update(
        {Payment.tuition_id: None, Payment.application_id: None},
        synchronize_session=False,
    )
    db.delete(tuition)
    db.commit()
    logger.info(f"Tuition {tuition_id} deleted by {caller.role} {caller.id}")


# ── Moderation ────────────────────────────────────────────────────────────────

def approve_tuition(db: Session, admin: User, tuition_id: UUID) -> Tuition:
    authorize(admin, None, is_admin, "Only admins can approve tuitions")
    tuition = get_tuition_or_404(db, tuition_id)

    if tuition.status != "open":
        raise InvalidState(f"Cannot moderate a tuition that is {tuition.status}")

    tuition.approval_status = "approved"
    tuition.approved_by_id = admin.id
    tuition.approved_at = _now()
    tuition.rejected_by_id = None
    tuition.rejected_at = None
    tuition.rejection_reason = None
    db.commit()

    logger.info(f"Tuition {tuition.id} approved by admin {admin.id}")
    notify(
        db,
        user_id=tuition.student_id,
        notification_type="tuition_approved",
        title="Tuition approved",
        message=f'Your tuition "{tuition.title}" is now visible to tutors.',
        link=f"/tuitions/{tuition.id}",
        extra_data={"tuition_id": str(tuition.id)},
    )
    return tuition


def reject_tuition(db: Session, admin: User, tuition_id: UUID, reason: str) -> Tuition:
    authorize(admin, None, is_admin, "Only admins can reject tuitions")
    reason = (reason or "").strip()
    if not reason:
        raise ValidationFailed("Rejection reason is required")

    tuition = get_tuition_or_404(db, tuition_id)
    if tuition.status != "open":
        raise InvalidState(f"Cannot moderate a tuition that is {tuition.status}")

    tuition.approval_status = "rejected"
    tuition.rejected_by_id = admin.id
    tuition.rejected_at = _now()
    tuition.rejection_reason = reason
    db.commit()

    logger.info(f"Tuition {tuition.id} rejected by admin {admin.id}")
    notify(
        db,
        user_id=tuition.student_id,
        notification_type="tuition_rejected",
        title="Tuition rejected",
        message=f'Your tuition "{tuition.title}" was rejected: {reason}',
        link=f"/tuitions/{tuition.id}",
        priority="high",
        extra_data={"tuition_id": str(tuition.id)},
    )
    return tuition


# ── Lifecycle ─────────────────────────────────────────────────────────────────

def set_status(db: Session, caller: User, tuition_id: UUID, new_status: str) -> Tuition:
    """Owner/admin lifecycle change. Never moves a posting to ongoing or open."""
    if new_status not in TUITION_STATUSES:
        raise ValidationFailed(
            f"Invalid status. Must be one of: {', '.join(TUITION_STATUSES)}"
        )

    tuition = get_tuition_or_404(db, tuition_id)
    authorize(caller, tuition, TUITION_OWNER_OR_ADMIN, "You are not authorized to update this tuition")

    if new_status == "ongoing":
        raise InvalidState("A tuition becomes ongoing only when a tutor is accepted with payment")
    if new_status == "open":
        raise InvalidState("A tuition is reopened only by refunding its payment")

    current = tuition.status
    if (current, new_status) not in LIFECYCLE_TRANSITIONS:
        raise InvalidState(f"Cannot change tuition status from {current} to {new_status}")

    # Conditional on the status we just read, so a concurrent accept wins cleanly
    result = db.execute(
        update(Tuition)
        .where(Tuition.id == tuition.id, Tuition.status == current)
        .values(status=new_status, closed_at=_now(), updated_at=_now())
    )
    if result.rowcount != 1:
        db.rollback()
        raise InvalidState("Tuition status changed concurrently, please retry")

    db.commit()
    db.refresh(tuition)
    logger.info(f"Tuition {tuition.id} moved {current} -> {new_status}")
    return tuition


# ── Reads ─────────────────────────────────────────────────────────────────────

def _visible(query):
    return query.filter(Tuition.approval_status == "approved", Tuition.status == "open")


def list_public(
    db: Session,
    page: int,
    limit: int,
    search: Optional[str] = None,
    subject: Optional[str] = None,
    tutoring_type: Optional[str] = None,
    preferred_medium: Optional[str] = None,
    min_salary: Optional[int] = None,
    max_salary: Optional[int] = None,
) -> Tuple[List[Tuition], int]:
    query = _visible(db.query(Tuition))

    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(
            Tuition.title.ilike(pattern),
            Tuition.subject.ilike(pattern),
            Tuition.location.ilike(pattern),
        ))
    if subject:
        query = query.filter(Tuition.subject.ilike(f"%{subject.strip()}%"))
    if tutoring_type:
        query = query.filter(Tuition.tutoring_type == tutoring_type)
    if preferred_medium:
        query = query.filter(Tuition.preferred_medium == preferred_medium)
    if min_salary is not None:
        query = query.filter(Tuition.salary >= min_salary)
    if max_salary is not None:
        query = query.filter(Tuition.salary <= max_salary)

    return paginate(query.order_by(Tuition.created_at.desc()), page, limit)


def list_latest(db: Session, limit: int = LATEST_LIMIT) -> List[Tuition]:
    return (
        _visible(db.query(Tuition))
        .order_by(Tuition.created_at.desc())
        .limit(limit)
        .all()
    )


def get_detail(db: Session, tuition_id: UUID, viewer: Optional[User]) -> Tuition:
    """
    Visible postings are public and count a view. Anything else is shown only
    to the owner, the selected tutor or an admin; others get NotFound.
    """
    tuition = get_tuition_or_404(db, tuition_id)

    if not tuition.is_visible:
        allowed = viewer is not None and (
            TUITION_OWNER_OR_ADMIN(viewer, tuition)
            or tuition.approved_tutor_id == viewer.id
        )
        if not allowed:
            raise NotFound("Tuition not found")
        return tuition

    db.execute(
        update(Tuition)
        .where(Tuition.id == tuition.id)
        .values(view_count=Tuition.view_count + 1)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(tuition)
    return tuition


def list_for_student(db: Session, student: User) -> List[Tuition]:
    return (
        db.query(Tuition)
        .filter(Tuition.student_id == student.id)
        .order_by(Tuition.created_at.desc())
        .all()
    )


def admin_list(
    db: Session,
    page: int,
    limit: int,
    approval_status: Optional[str] = None,
    status: Optional[str] = None,
) -> Tuple[List[Tuition], int]:
    query = db.query(Tuition)
    if approval_status:
        query = query.filter(Tuition.approval_status == approval_status)
    if status:
        query = query.filter(Tuition.status == status)
    return paginate(query.order_by(Tuition.created_at.desc()), page, limit)
