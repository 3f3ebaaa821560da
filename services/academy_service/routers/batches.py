"""Batch endpoints."""

import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_caller
from libs.auth.models import CallerIdentity
from libs.db.session import get_async_db
from services.academy_service.schemas import (
    AssignCoachRequest,
    BatchCreate,
    BatchDetailResponse,
    BatchResponse,
    BatchStudentResponse,
    BatchUpdate,
    CountResponse,
)
from services.academy_service.services import batch_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/batches", tags=["batches"])


@router.get("", response_model=list[BatchDetailResponse])
async def list_batches(
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    """All batches (admin)."""
    return await batch_ops.get_all_batches(db, caller)


@router.get("/mine", response_model=list[BatchDetailResponse])
async def list_my_batches(
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    """Batches coached by the caller."""
    return await batch_ops.get_coach_batches(db, caller)


@router.get("/count", response_model=CountResponse)
async def count_batches(
    is_active: Optional[bool] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    count = await batch_ops.count_batches(
        db, caller, is_active=is_active, start=start, end=end
    )
    return CountResponse(count=count)


@router.get("/{batch_id}", response_model=BatchResponse)
async def get_batch(batch_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)):
    return await batch_ops.get_batch(db, batch_id)


@router.get("/{batch_id}/students", response_model=list[BatchStudentResponse])
async def get_batch_students(
    batch_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await batch_ops.get_batch_students(db, caller, batch_id=batch_id)


@router.post("", response_model=BatchResponse, status_code=status.HTTP_201_CREATED)
async def create_batch(
    body: BatchCreate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await batch_ops.create_batch(db, caller, body)


@router.patch("/{batch_id}", response_model=BatchResponse)
async def update_batch(
    batch_id: uuid.UUID,
    body: BatchUpdate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await batch_ops.update_batch(db, caller, batch_id=batch_id, data=body)


@router.put("/{batch_id}/coach", response_model=BatchResponse)
async def assign_coach(
    batch_id: uuid.UUID,
    body: AssignCoachRequest,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await batch_ops.assign_coach(
        db, caller, batch_id=batch_id, coach_id=body.coach_id
    )


@router.delete("/{batch_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_batch(
    batch_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    await batch_ops.delete_batch(db, caller, batch_id=batch_id)
