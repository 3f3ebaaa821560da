"""Attendance endpoints."""

import uuid
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_caller
from libs.auth.models import CallerIdentity
from libs.db.session import get_async_db
from services.attendance_service.schemas import (
    AttendanceDetailResponse,
    AttendanceResponse,
    AttendanceStatsResponse,
    CodeCheckIn,
    CoachScanRequest,
    CoachScanResponse,
    ManualAttendanceRequest,
    SessionCodeCreate,
    SessionCodeResponse,
)
from services.attendance_service.services import attendance_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["attendance"])


# ---------------------------------------------------------------------------
# Session codes
# ---------------------------------------------------------------------------


@router.post(
    "/sessions",
    response_model=SessionCodeResponse,
    status_code=status.HTTP_201_CREATED,
)
async def generate_session_code(
    body: SessionCodeCreate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    """Open a check-in code for one of the coach's batches."""
    return await attendance_ops.generate_session_code(
        db, caller, batch_id=body.batch_id, on=body.date
    )


@router.post("/sessions/{session_id}/close", response_model=SessionCodeResponse)
async def close_session(
    session_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await attendance_ops.close_session(db, caller, session_id=session_id)


# ---------------------------------------------------------------------------
# Marking
# ---------------------------------------------------------------------------


@router.post(
    "/check-in",
    response_model=AttendanceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def check_in_with_code(
    body: CodeCheckIn,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await attendance_ops.mark_attendance_by_code(db, caller, code=body.code)


@router.post(
    "/scan", response_model=CoachScanResponse, status_code=status.HTTP_201_CREATED
)
async def mark_by_coach_scan(
    body: CoachScanRequest,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await attendance_ops.mark_attendance_by_coach_scan(
        db, caller, student_qr=body.student_qr
    )


@router.put("/manual", response_model=AttendanceResponse)
async def mark_manually(
    body: ManualAttendanceRequest,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await attendance_ops.mark_attendance_manually(
        db,
        caller,
        student_id=body.student_id,
        batch_id=body.batch_id,
        on=body.date,
        is_present=body.is_present,
        notes=body.notes,
    )


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


@router.get("/batches/{batch_id}", response_model=list[AttendanceDetailResponse])
async def get_batch_attendance(
    batch_id: uuid.UUID,
    on: Optional[date] = None,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await attendance_ops.get_batch_attendance(
        db, caller, batch_id=batch_id, on=on
    )


@router.get("/students/{user_id}", response_model=list[AttendanceDetailResponse])
async def get_student_attendance(
    user_id: uuid.UUID,
    batch_id: Optional[uuid.UUID] = None,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await attendance_ops.get_student_attendance(
        db, caller, user_id=user_id, batch_id=batch_id
    )


@router.get("/stats", response_model=AttendanceStatsResponse)
async def get_attendance_stats(
    batch_id: Optional[uuid.UUID] = None,
    user_id: Optional[uuid.UUID] = None,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await attendance_ops.get_attendance_stats(
        db, caller, batch_id=batch_id, user_id=user_id
    )


@router.get("", response_model=list[AttendanceDetailResponse])
async def list_attendance(
    batch_id: Optional[uuid.UUID] = None,
    user_id: Optional[uuid.UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    is_present: Optional[bool] = None,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    """All attendance records (admin)."""
    return await attendance_ops.list_attendance(
        db,
        caller,
        batch_id=batch_id,
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
        is_present=is_present,
    )
