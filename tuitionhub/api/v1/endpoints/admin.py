# tuitionhub/api/v1/endpoints/admin.py
# Admin portal endpoints -- all require role=admin

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

import tuitionhub.db.base  # noqa: F401
from tuitionhub.core.config import settings
from tuitionhub.core.dependencies import require_admin
from tuitionhub.db.session import get_db
from tuitionhub.models.user import User
from tuitionhub.schemas.common import (
    ApprovalStatusFilter,
    MessageResponse,
    Pagination,
    PaymentStatusFilter,
    TuitionStatusFilter,
    UserRoleFilter,
    UserStatusFilter,
)
from tuitionhub.schemas.payment import (
    PaymentListEnvelope,
    PaymentResponse,
    RefundEnvelope,
    RefundRequest,
)
from tuitionhub.schemas.tuition import (
    TuitionEnvelope,
    TuitionListEnvelope,
    TuitionReject,
    TuitionResponse,
)
from tuitionhub.schemas.user import (
    UserEnvelope,
    UserListEnvelope,
    UserPrivate,
    UserRoleUpdate,
    UserStatusUpdate,
)
from tuitionhub.services import acceptance, tuition_service, user_service

router = APIRouter()


# ── Users ─────────────────────────────────────────────────────────────────────

@router.get("/users", response_model=UserListEnvelope, summary="List users")
def list_users(
    role: Optional[UserRoleFilter] = Query(None),
    status: Optional[UserStatusFilter] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    users, total = user_service.admin_list(
        db, page=page, limit=limit, role=role, status=status, search=search
    )
    return UserListEnvelope(
        users=[UserPrivate.model_validate(u) for u in users],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/users/{user_id}", response_model=UserEnvelope, summary="Get a user")
def get_user(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = user_service.get_user_or_404(db, user_id)
    return UserEnvelope(user=UserPrivate.model_validate(user))


@router.patch("/users/{user_id}/role", response_model=UserEnvelope, summary="Change a user's role")
def update_user_role(
    user_id: UUID,
    payload: UserRoleUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = user_service.change_role(db, current_user, user_id, payload.role)
    return UserEnvelope(
        message=f"User role updated to {user.role}",
        user=UserPrivate.model_validate(user),
    )


@router.patch("/users/{user_id}/status", response_model=UserEnvelope, summary="Change a user's status")
def update_user_status(
    user_id: UUID,
    payload: UserStatusUpdate,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user = user_service.change_status(db, current_user, user_id, payload.status, payload.reason)
    return UserEnvelope(
        message=f"User status updated to {user.status}",
        user=UserPrivate.model_validate(user),
    )


@router.delete("/users/{user_id}", response_model=MessageResponse, summary="Delete a user")
def delete_user(
    user_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    user_service.delete_user(db, current_user, user_id)
    return MessageResponse(message="User deleted successfully")


# ── Tuition Moderation ────────────────────────────────────────────────────────

@router.get("/tuitions", response_model=TuitionListEnvelope, summary="List all tuitions")
def list_tuitions(
    approval_status: Optional[ApprovalStatusFilter] = Query(None),
    status: Optional[TuitionStatusFilter] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    tuitions, total = tuition_service.admin_list(
        db, page=page, limit=limit, approval_status=approval_status, status=status
    )
    return TuitionListEnvelope(
        tuitions=[TuitionResponse.model_validate(t) for t in tuitions],
        pagination=Pagination.build(page, limit, total),
    )


@router.patch("/tuitions/{tuition_id}/approve", response_model=TuitionEnvelope, summary="Approve a tuition")
def approve_tuition(
    tuition_id: UUID,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    tuition = tuition_service.approve_tuition(db, current_user, tuition_id)
    return TuitionEnvelope(
        message="Tuition approved successfully",
        tuition=TuitionResponse.model_validate(tuition),
    )


@router.patch("/tuitions/{tuition_id}/reject", response_model=TuitionEnvelope, summary="Reject a tuition")
def reject_tuition(
    tuition_id: UUID,
    payload: TuitionReject,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    tuition = tuition_service.reject_tuition(db, current_user, tuition_id, payload.reason)
    return TuitionEnvelope(
        message="Tuition rejected",
        tuition=TuitionResponse.model_validate(tuition),
    )


# ── Payments ──────────────────────────────────────────────────────────────────

@router.get("/payments", response_model=PaymentListEnvelope, summary="List payments")
def list_payments(
    status: Optional[PaymentStatusFilter] = Query(None),
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    payments = acceptance.list_all(db, status)
    return PaymentListEnvelope(payments=[PaymentResponse.model_validate(p) for p in payments])


@router.patch("/payments/{payment_id}/refund", response_model=RefundEnvelope, summary="Refund a payment")
def refund_payment(
    payment_id: UUID,
    payload: RefundRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    payment, tuition = acceptance.refund_payment(db, current_user, payment_id, payload.reason)
    return RefundEnvelope(
        message="Payment refunded and tuition reopened",
        payment=PaymentResponse.model_validate(payment),
        tuition=TuitionResponse.model_validate(tuition) if tuition else None,
    )
