"""Payment, invoice and checkout endpoints."""

import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_caller
from libs.auth.models import CallerIdentity
from libs.db.session import get_async_db
from services.payments_service.models import PaymentStatus
from services.payments_service.razorpay_client import (
    RazorpayClient,
    get_razorpay_client,
)
from services.payments_service.schemas import (
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
from services.payments_service.services import payment_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["payments"])


@router.post("", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    body: PaymentCreate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await payment_ops.create_payment(
        db,
        caller,
        user_id=body.user_id,
        enrollment_id=body.enrollment_id,
        amount=body.amount,
        method=body.method,
    )


@router.get("", response_model=list[PaymentDetailResponse])
async def list_payments(
    payment_status: Optional[PaymentStatus] = Query(None, alias="status"),
    user_id: Optional[uuid.UUID] = None,
    enrollment_id: Optional[uuid.UUID] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    """List all payments (admin)."""
    return await payment_ops.list_payments(
        db,
        caller,
        status=payment_status,
        user_id=user_id,
        enrollment_id=enrollment_id,
        start=start,
        end=end,
    )


@router.get("/me", response_model=list[PaymentResponse])
async def list_my_payments(
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await payment_ops.list_payments_for_user(db, caller)


@router.get("/users/{user_id}", response_model=list[PaymentResponse])
async def list_user_payments(
    user_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await payment_ops.list_payments_for_user(db, caller, user_id=user_id)


@router.get("/stats", response_model=PaymentStatsResponse)
async def get_payment_stats(
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await payment_ops.get_payment_stats(db, caller)


@router.get("/revenue/last-month", response_model=RevenueResponse)
async def get_revenue_last_month(
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    total = await payment_ops.get_total_revenue_last_month(db, caller)
    return {"total_revenue": total}


# ---------------------------------------------------------------------------
# Invoices
# ---------------------------------------------------------------------------


@router.post(
    "/invoices", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED
)
async def generate_invoice(
    body: InvoiceCreate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await payment_ops.generate_invoice(
        db,
        caller,
        user_id=body.user_id,
        enrollment_id=body.enrollment_id,
        amount=body.amount,
        method=body.method,
    )


@router.post(
    "/invoices/bulk",
    response_model=list[PaymentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def generate_bulk_invoices(
    body: BulkInvoiceCreate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await payment_ops.generate_bulk_invoices(
        db,
        caller,
        enrollment_id=body.enrollment_id,
        amount=body.amount,
        user_ids=body.user_ids,
        skip_existing_pending=body.skip_existing_pending,
    )


# ---------------------------------------------------------------------------
# Single payment
# ---------------------------------------------------------------------------


@router.get("/{payment_id}", response_model=PaymentDetailResponse)
async def get_payment(
    payment_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await payment_ops.get_payment_details(db, caller, payment_id=payment_id)


@router.patch("/{payment_id}", response_model=PaymentResponse)
async def update_payment(
    payment_id: uuid.UUID,
    body: PaymentUpdate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await payment_ops.update_payment(
        db, caller, payment_id=payment_id, data=body
    )


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_payment(
    payment_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    await payment_ops.delete_payment(db, caller, payment_id=payment_id)


@router.put("/{payment_id}/status", response_model=PaymentResponse)
async def update_payment_status(
    payment_id: uuid.UUID,
    body: PaymentStatusUpdate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await payment_ops.update_payment_status(
        db,
        caller,
        payment_id=payment_id,
        status=body.status,
        notes=body.notes,
        payment_period=body.payment_period,
    )


@router.post("/{payment_id}/complete", response_model=PaymentResponse)
async def complete_payment(
    payment_id: uuid.UUID,
    body: PaymentComplete,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await payment_ops.set_payment_completed(
        db,
        caller,
        payment_id=payment_id,
        transaction_id=body.transaction_id,
        payment_date=body.payment_date,
        receipt_number=body.receipt_number,
    )


@router.post("/{payment_id}/mark-paid", response_model=PaymentResponse)
async def mark_as_paid(
    payment_id: uuid.UUID,
    body: MarkAsPaidRequest,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    """Record a cash payment taken at the academy."""
    return await payment_ops.mark_as_paid(
        db, caller, payment_id=payment_id, method=body.method, notes=body.notes
    )


@router.post("/{payment_id}/refund", response_model=PaymentResponse)
async def refund_payment(
    payment_id: uuid.UUID,
    body: RefundRequest,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await payment_ops.process_refund(
        db,
        caller,
        payment_id=payment_id,
        refund_amount=body.refund_amount,
        refund_reason=body.refund_reason,
    )


# ---------------------------------------------------------------------------
# Razorpay checkout
# ---------------------------------------------------------------------------


@router.post("/{payment_id}/checkout", response_model=CheckoutOrderResponse)
async def create_checkout_order(
    payment_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
    client: RazorpayClient = Depends(get_razorpay_client),
):
    return await payment_ops.create_checkout_order(
        db, caller, payment_id=payment_id, client=client
    )


@router.post("/{payment_id}/checkout/verify", response_model=PaymentResponse)
async def verify_checkout(
    payment_id: uuid.UUID,
    body: CheckoutVerifyRequest,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
    client: RazorpayClient = Depends(get_razorpay_client),
):
    return await payment_ops.verify_checkout(
        db,
        caller,
        payment_id=payment_id,
        razorpay_order_id=body.razorpay_order_id,
        razorpay_payment_id=body.razorpay_payment_id,
        razorpay_signature=body.razorpay_signature,
        client=client,
    )
