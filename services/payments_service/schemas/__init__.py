"""Payments Service schemas package."""

from services.payments_service.schemas.payment import (  # noqa: F401
    BulkInvoiceCreate,
    CheckoutOrderResponse,
    CheckoutVerifyRequest,
    InvoiceCreate,
    MarkAsPaidRequest,
    PaymentComplete,
    PaymentCreate,
    PaymentDetailResponse,
    PaymentResponse,
    PaymentStatsResponse,
    PaymentStatusUpdate,
    PaymentUpdate,
    RefundRequest,
    RevenueResponse,
)

__all__ = [
    "BulkInvoiceCreate",
    "CheckoutOrderResponse",
    "CheckoutVerifyRequest",
    "InvoiceCreate",
    "MarkAsPaidRequest",
    "PaymentComplete",
    "PaymentCreate",
    "PaymentDetailResponse",
    "PaymentResponse",
    "PaymentStatsResponse",
    "PaymentStatusUpdate",
    "PaymentUpdate",
    "RefundRequest",
    "RevenueResponse",
]
