"""Enrollment endpoints."""

import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from libs.auth.dependencies import get_caller
from libs.auth.models import CallerIdentity
from libs.db.session import get_async_db
from services.academy_service.models import EnrollmentStatus
from services.academy_service.schemas import (
    EnrollmentApply,
    EnrollmentPaymentStatusUpdate,
    EnrollmentResponse,
    EnrollmentStatusUpdate,
    MyEnrollmentResponse,
)
from services.academy_service.services import enrollment_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/enrollments", tags=["enrollments"])


@router.post(
    "", response_model=EnrollmentResponse, status_code=status.HTTP_201_CREATED
)
async def apply_for_batch(
    body: EnrollmentApply,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    """Apply for a seat in a batch."""
    return await enrollment_ops.apply_for_batch(db, caller, batch_id=body.batch_id)


@router.get("/me", response_model=list[MyEnrollmentResponse])
async def list_my_enrollments(
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await enrollment_ops.get_user_enrollments(db, caller)


@router.get("", response_model=list[EnrollmentResponse])
async def list_enrollments(
    user_id: Optional[uuid.UUID] = None,
    batch_id: Optional[uuid.UUID] = None,
    enrollment_status: Optional[EnrollmentStatus] = Query(None, alias="status"),
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await enrollment_ops.list_enrollments(
        db, caller, user_id=user_id, batch_id=batch_id, status=enrollment_status
    )


@router.get("/{enrollment_id}", response_model=EnrollmentResponse)
async def get_enrollment(
    enrollment_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await enrollment_ops.get_enrollment(db, caller, enrollment_id=enrollment_id)


@router.put("/{enrollment_id}/status", response_model=EnrollmentResponse)
async def update_enrollment_status(
    enrollment_id: uuid.UUID,
    body: EnrollmentStatusUpdate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await enrollment_ops.update_enrollment_status(
        db, caller, enrollment_id=enrollment_id, status=body.status
    )


@router.put("/{enrollment_id}/payment-status", response_model=EnrollmentResponse)
async def update_enrollment_payment_status(
    enrollment_id: uuid.UUID,
    body: EnrollmentPaymentStatusUpdate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await enrollment_ops.update_enrollment_payment_status(
        db, caller, enrollment_id=enrollment_id, payment_status=body.payment_status
    )
