# tuitionhub/api/v1/endpoints/student.py
# Student dashboard

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

import tuitionhub.db.base  # noqa: F401
from tuitionhub.core.dependencies import require_student
from tuitionhub.db.session import get_db
from tuitionhub.models.application import Application
from tuitionhub.models.notification import Notification
from tuitionhub.models.payment import Payment
from tuitionhub.models.tuition import Tuition
from tuitionhub.models.user import User
from tuitionhub.schemas.notification import NotificationResponse
from tuitionhub.schemas.student import DashboardResponse, DashboardStats

router = APIRouter()

RECENT_ACTIVITY_LIMIT = 5


@router.get("/dashboard", response_model=DashboardResponse, summary="Student dashboard")
def dashboard(
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    active_tuitions = db.query(Tuition).filter(
        Tuition.student_id == current_user.id,
        Tuition.status.in_(("open", "ongoing")),
    ).count()

    pending_applications = db.query(Application).filter(
        Application.student_id == current_user.id,
        Application.status == "pending",
    ).count()

    total_spent = db.query(func.coalesce(func.sum(Payment.amount), 0)).filter(
        Payment.student_id == current_user.id,
        Payment.status == "completed",
    ).scalar()

    recent = (
        db.query(Notification)
        .filter(Notification.user_id == current_user.id)
        .order_by(Notification.created_at.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
        .all()
    )

    return DashboardResponse(
        stats=DashboardStats(
            active_tuitions=active_tuitions,
            pending_applications=pending_applications,
            total_spent=int(total_spent or 0),
        ),
        recent_activities=[NotificationResponse.from_model(n) for n in recent],
    )
