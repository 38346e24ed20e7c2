# tuitionhub/schemas/payment.py
# Pydantic request/response models for the payment-gated acceptance flow

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, field_validator

from tuitionhub.schemas.application import ApplicationResponse
from tuitionhub.schemas.tuition import TuitionResponse


def _positive(v: Optional[int]) -> Optional[int]:
    if v is not None and v <= 0:
        raise ValueError("Amount must be positive")
    return v


# ── Requests ──────────────────────────────────────────────────────────────────

class CreateOrderRequest(BaseModel):
    application_id: UUID
    amount: Optional[int] = None  # Defaults to the tuition salary

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, v: Optional[int]) -> Optional[int]:
        return _positive(v)


class ConfirmPaymentRequest(BaseModel):
    """
    Sent by the frontend after the hosted checkout returns.
    order_id / payment_id / signature come straight from the processor.
    """
    application_id: UUID
    amount: int
    order_id: str
    payment_id: str
    signature: str

    @field_validator("amount")
    @classmethod
    def amount_positive(cls, v: int) -> int:
        return _positive(v)


class RefundRequest(BaseModel):
    reason: Optional[str] = None


# ── Responses ─────────────────────────────────────────────────────────────────

class OrderResponse(BaseModel):
    success: bool = True
    order_id: str
    amount: int
    currency: str
    key_id: str


class PaymentResponse(BaseModel):
    id: UUID
    tuition_id: Optional[UUID] = None
    application_id: Optional[UUID] = None
    student_id: Optional[UUID] = None
    tutor_id: Optional[UUID] = None
    amount: int
    platform_fee: int
    tutor_receives: int
    currency: str
    payment_method: str
    transaction_id: str
    status: str
    description: Optional[str] = None
    completed_at: Optional[datetime] = None
    refund_reason: Optional[str] = None
    refunded_at: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class PaymentEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    payment: PaymentResponse


class AcceptanceEnvelope(BaseModel):
    """Result of a confirmed payment: the accepted application and locked tuition."""
    success: bool = True
    message: str
    payment: PaymentResponse
    application: ApplicationResponse
    tuition: TuitionResponse


class RefundEnvelope(BaseModel):
    success: bool = True
    message: str
    payment: PaymentResponse
    tuition: Optional[TuitionResponse] = None


class StudentPaymentsEnvelope(BaseModel):
    success: bool = True
    payments: List[PaymentResponse]
    total_spent: int
    total_transactions: int


class TutorRevenueEnvelope(BaseModel):
    success: bool = True
    payments: List[PaymentResponse]
    total_revenue: int
    platform_fees: int
    gross_amount: int
    total_transactions: int


class PaymentListEnvelope(BaseModel):
    success: bool = True
    payments: List[PaymentResponse]
