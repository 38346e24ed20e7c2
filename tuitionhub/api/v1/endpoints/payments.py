# tuitionhub/api/v1/endpoints/payments.py
# Payment-gated acceptance endpoints
#
# POST /payments/create-order  -- student opens a Razorpay order for an application
# POST /payments/confirm       -- student confirms checkout -> application accepted
# GET  /payments/my-payments   -- student's payments + total spent
# GET  /payments/my-revenue    -- tutor's completed payments + revenue
# GET  /payments/{id}          -- payment detail (student, tutor or admin)
#
# Refunds are admin-only: PATCH /admin/payments/{id}/refund

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

import tuitionhub.db.base  # noqa: F401
from tuitionhub.core.dependencies import require_login, require_student, require_tutor
from tuitionhub.db.session import get_db
from tuitionhub.models.user import User
from tuitionhub.schemas.application import ApplicationResponse
from tuitionhub.schemas.payment import (
    AcceptanceEnvelope,
    ConfirmPaymentRequest,
    CreateOrderRequest,
    OrderResponse,
    PaymentEnvelope,
    PaymentResponse,
    StudentPaymentsEnvelope,
    TutorRevenueEnvelope,
)
from tuitionhub.schemas.tuition import TuitionResponse
from tuitionhub.services import acceptance
from tuitionhub.services.payment_gateway import RazorpayGateway, get_payment_gateway

router = APIRouter()


@router.post("/create-order", response_model=OrderResponse, summary="Create a payment order")
def create_order(
    payload: CreateOrderRequest,
    current_user: User = Depends(require_student),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
    db: Session = Depends(get_db),
):
    order = acceptance.create_order(
        db, current_user, gateway, payload.application_id, payload.amount
    )
    return OrderResponse(**order)


@router.post("/confirm", response_model=AcceptanceEnvelope, summary="Confirm payment and accept the tutor")
def confirm_payment(
    payload: ConfirmPaymentRequest,
    current_user: User = Depends(require_student),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
    db: Session = Depends(get_db),
):
    payment, application, tuition = acceptance.accept_with_payment(
        db,
        current_user,
        gateway,
        application_id=payload.application_id,
        amount=payload.amount,
        order_id=payload.order_id,
        payment_id=payload.payment_id,
        signature=payload.signature,
    )
    return AcceptanceEnvelope(
        message="Payment successful! Tutor has been approved.",
        payment=PaymentResponse.model_validate(payment),
        application=ApplicationResponse.model_validate(application),
        tuition=TuitionResponse.model_validate(tuition),
    )


@router.get("/my-payments", response_model=StudentPaymentsEnvelope, summary="Own payments")
def my_payments(
    current_user: User = Depends(require_student),
    db: Session = Depends(get_db),
):
    payments = acceptance.list_for_student(db, current_user)
    completed = [p for p in payments if p.status == "completed"]
    return StudentPaymentsEnvelope(
        payments=[PaymentResponse.model_validate(p) for p in payments],
        total_spent=sum(p.amount for p in completed),
        total_transactions=len(completed),
    )


@router.get("/my-revenue", response_model=TutorRevenueEnvelope, summary="Own revenue")
def my_revenue(
    current_user: User = Depends(require_tutor),
    db: Session = Depends(get_db),
):
    payments = acceptance.list_for_tutor(db, current_user)
    return TutorRevenueEnvelope(
        payments=[PaymentResponse.model_validate(p) for p in payments],
        total_revenue=sum(p.tutor_receives for p in payments),
        platform_fees=sum(p.platform_fee for p in payments),
        gross_amount=sum(p.amount for p in payments),
        total_transactions=len(payments),
    )


@router.get("/{payment_id}", response_model=PaymentEnvelope, summary="Payment detail")
def get_payment(
    payment_id: UUID,
    current_user: User = Depends(require_login),
    db: Session = Depends(get_db),
):
    payment = acceptance.get_payment(db, current_user, payment_id)
    return PaymentEnvelope(payment=PaymentResponse.model_validate(payment))
