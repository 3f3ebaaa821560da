"""Payment and invoice schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.payments_service.models.enums import PaymentStatus


class PaymentCreate(BaseModel):
    user_id: uuid.UUID
    enrollment_id: uuid.UUID
    amount: float = Field(..., gt=0)
    method: str = Field(..., min_length=1)


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatus
    notes: Optional[str] = None
    payment_period: Optional[str] = Field(None, pattern=r"^[0-9]{4}-[0-9]{2}$")


class PaymentComplete(BaseModel):
    transaction_id: str = Field(..., min_length=1)
    payment_date: Optional[datetime] = None
    receipt_number: Optional[str] = None


class MarkAsPaidRequest(BaseModel):
    method: str = Field("cash", min_length=1)
    notes: Optional[str] = None


class RefundRequest(BaseModel):
    refund_amount: float = Field(..., gt=0)
    refund_reason: str = Field(..., min_length=3)


class PaymentUpdate(BaseModel):
    """Admin edits; status changes follow the normal transition rules."""

    status: Optional[PaymentStatus] = None
    notes: Optional[str] = None
    receipt_number: Optional[str] = None
    payment_period: Optional[str] = Field(None, pattern=r"^[0-9]{4}-[0-9]{2}$")


class InvoiceCreate(BaseModel):
    user_id: uuid.UUID
    enrollment_id: uuid.UUID
    amount: float = Field(..., gt=0)
    method: str = "pending"


class BulkInvoiceCreate(BaseModel):
    enrollment_id: uuid.UUID
    amount: float = Field(..., gt=0)
    user_ids: list[uuid.UUID] = Field(..., min_length=1)
    skip_existing_pending: Optional[bool] = None


class PaymentResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    enrollment_id: uuid.UUID
    amount: float
    status: PaymentStatus
    method: str
    transaction_id: Optional[str] = None
    gateway_order_id: Optional[str] = None
    notes: Optional[str] = None
    payment_date: Optional[datetime] = None
    receipt_number: Optional[str] = None
    payment_period: Optional[str] = None
    refunded: bool = False
    refund_amount: Optional[float] = None
    refund_reason: Optional[str] = None
    refund_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentDetailResponse(PaymentResponse):
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    sport_name: Optional[str] = None
    batch_name: Optional[str] = None


class PaymentStatsResponse(BaseModel):
    total_revenue: float
    completed_payments: int
    pending_payments: int
    attempted_payments: int
    failed_payments: int
    refunded_payments: int
    revenue_by_method: dict[str, float]
    revenue_by_sport: dict[str, float]
    revenue_by_batch: dict[str, float]


class RevenueResponse(BaseModel):
    total_revenue: float


class CheckoutOrderResponse(BaseModel):
    payment_id: uuid.UUID
    order_id: str
    amount: int = Field(..., description="Amount in paise")
    currency: str
    key_id: str


class CheckoutVerifyRequest(BaseModel):
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str
