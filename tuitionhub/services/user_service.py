# tuitionhub/services/user_service.py
# Account registration, login, profile edits and admin user management
#
# Account status rules:
#   blocked                        -> never authenticates
#   pending | rejected | suspended -> may log in, response carries a warning
#   approved | active              -> good standing
# Admins bypass the warning.

import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tuitionhub.core.exceptions import Conflict, Forbidden, NotFound, Unauthenticated, ValidationFailed
from tuitionhub.core.permissions import authorize, is_admin, is_self
from tuitionhub.core.security import hash_password, verify_password
from tuitionhub.db.pagination import paginate
from tuitionhub.models.user import User
from tuitionhub.schemas.auth import RegisterRequest
from tuitionhub.schemas.user import UpdateProfileRequest
from tuitionhub.services.notification_service import notify
from tuitionhub.services.review_service import refresh_tutor_rating

logger = logging.getLogger("tuitionhub.users")

PENDING_NOTICE = "Your account is pending approval from admin. You can login but some features may be limited."

STATUS_WARNINGS = {
    "pending": "Your account is pending approval. Some features may be limited.",
    "rejected": "Your account has been rejected. Please contact support.",
    "suspended": "Your account has been suspended. Please contact support.",
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def get_user_or_404(db: Session, user_id: UUID) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")
    return user


def status_warning(user: User) -> Optional[str]:
    if user.role == "admin":
        return None
    return STATUS_WARNINGS.get(user.status)


# ── Auth ──────────────────────────────────────────────────────────────────────

def register(db: Session, data: RegisterRequest) -> User:
    """New accounts start pending admin approval."""
    user = User(
        email=data.email.lower(),
        hashed_password=hash_password(data.password),
        name=data.name,
        role=data.role,
        status="pending",
        phone=data.phone,
        address=data.address,
        location=data.location,
    )
    if data.role == "student":
        user.grade = data.grade
        user.institution = data.institution
    else:
        user.subjects = data.subjects
        user.experience_years = data.experience_years
        user.bio = data.bio
        user.hourly_rate = data.hourly_rate

    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("User already exists with this email")

    logger.info(f"User registered: {user.id} role={user.role}")
    return user


def authenticate(db: Session, email: str, password: str, role: Optional[str] = None) -> User:
    user = db.query(User).filter(User.email == email.lower()).first()
    if not user or not verify_password(password, user.hashed_password):
        raise Unauthenticated("Invalid email or password")

    if role and role != user.role:
        raise Forbidden(
            f"Role mismatch! You are registered as a {user.role.upper()}, "
            f"not a {role.upper()}. Please select the correct role."
        )
    if user.is_blocked:
        logger.warning(f"Blocked user {user.id} attempted to log in")
        raise Forbidden("Your account has been blocked. Please contact support.")

    user.last_login_at = _now()
    db.commit()
    return user


def change_password(db: Session, user: User, current_password: str, new_password: str) -> None:
    if not verify_password(current_password, user.hashed_password):
        raise Unauthenticated("Current password is incorrect")
    user.hashed_password = hash_password(new_password)
    db.commit()


# ── Profile ───────────────────────────────────────────────────────────────────

def update_profile(db: Session, user: User, data: UpdateProfileRequest) -> User:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if not changes:
        raise ValidationFailed("No fields to update")
    for field, value in changes.items():
        setattr(user, field, value)
    db.commit()
    return user


def list_tutors(
    db: Session,
    search: Optional[str] = None,
    subject: Optional[str] = None,
    location: Optional[str] = None,
    min_rating: Optional[float] = None,
    min_experience: Optional[int] = None,
) -> List[User]:
    """Tutors in good standing, best rated first."""
    query = db.query(User).filter(
        User.role == "tutor",
        User.status.in_(("approved", "active")),
    )
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(User.name.ilike(pattern), User.bio.ilike(pattern)))
    if location:
        query = query.filter(User.location.ilike(f"%{location.strip()}%"))
    if min_rating is not None:
        query = query.filter(User.rating >= min_rating)
    if min_experience is not None:
        query = query.filter(User.experience_years >= min_experience)

    tutors = query.order_by(User.rating.desc(), User.total_reviews.desc()).all()

    # subjects is a JSON list; filtered here to stay portable across dialects
    if subject:
        wanted = subject.strip().lower()
        tutors = [
            t for t in tutors
            if any(wanted in (s or "").lower() for s in (t.subjects or []))
        ]
    return tutors


# ── Admin ─────────────────────────────────────────────────────────────────────

def admin_list(
    db: Session,
    page: int,
    limit: int,
    role: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> Tuple[List[User], int]:
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    if status:
        query = query.filter(User.status == status)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
    return paginate(query.order_by(User.created_at.desc()), page, limit)


def change_role(db: Session, admin: User, user_id: UUID, role: str) -> User:
    authorize(admin, None, is_admin, "Admin access required.")
    user = get_user_or_404(db, user_id)
    if is_self()(admin, user):
        raise Forbidden("You cannot change your own role")

    previous = user.role
    user.role = role
    db.commit()

    logger.info(f"Admin {admin.id} changed role of {user.id}: {previous} -> {role}")
    notify(
        db,
        user_id=user.id,
        notification_type="account_update",
        title="Account role updated",
        message=f"Your account role is now {role}.",
        extra_data={"role": role},
    )
    return user


def change_status(
    db: Session,
    admin: User,
    user_id: UUID,
    status: str,
    reason: Optional[str] = None,
) -> User:
    authorize(admin, None, is_admin, "Admin access required.")
    user = get_user_or_404(db, user_id)
    if is_self()(admin, user):
        raise Forbidden("You cannot change your own status")

    user.status = status
    if status in ("approved", "active"):
        user.approved_by_id = admin.id
        user.approved_at = _now()
        user.rejection_reason = None
    elif status == "rejected":
        user.rejection_reason = (reason or "").strip() or None
    db.commit()

    logger.info(f"Admin {admin.id} set status of {user.id} to {status}")
    message = f"Your account status is now {status}."
    if user.rejection_reason and status == "rejected":
        message += f" Reason: {user.rejection_reason}"
    notify(
        db,
        user_id=user.id,
        notification_type="account_update",
        title="Account status updated",
        message=message,
        priority="high" if status in ("blocked", "suspended", "rejected") else "medium",
        extra_data={"status": status},
    )
    return user


def delete_user(db: Session, admin: User, user_id: UUID) -> None:
    """Hard delete. Admin accounts (including the caller's own) cannot be deleted."""
    authorize(admin, None, is_admin, "Admin access required.")
    user = get_user_or_404(db, user_id)
    if is_self()(admin, user):
        raise Forbidden("You cannot delete your own account")
    if user.role == "admin":
        raise Forbidden("Cannot delete admin users")

    # The student's reviews go with them; those tutors' aggregates follow
    reviewed_tutor_ids = [r.tutor_id for r in user.reviews_given]
    db.delete(user)
    db.flush()
    for tutor_id in reviewed_tutor_ids:
        refresh_tutor_rating(db, tutor_id)
    db.commit()
    logger.info(f"Admin {admin.id} deleted user {user_id}")
