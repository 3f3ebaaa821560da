"""Attendance schemas."""

import datetime as dt
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.attendance_service.models.enums import AttendanceMethod


class SessionCodeCreate(BaseModel):
    batch_id: uuid.UUID
    date: Optional[dt.date] = Field(
        None, description="Defaults to today in the academy timezone"
    )


class SessionCodeResponse(BaseModel):
    id: uuid.UUID
    batch_id: uuid.UUID
    coach_id: uuid.UUID
    date: dt.date
    code: str
    is_active: bool
    expires_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class CodeCheckIn(BaseModel):
    code: str = Field(..., min_length=4)


class CoachScanRequest(BaseModel):
    student_qr: str = Field(..., min_length=3)


class ManualAttendanceRequest(BaseModel):
    student_id: uuid.UUID
    batch_id: uuid.UUID
    date: dt.date
    is_present: bool
    notes: Optional[str] = None


class AttendanceResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    batch_id: uuid.UUID
    date: dt.date
    is_present: bool
    method: AttendanceMethod
    notes: Optional[str] = None
    marked_at: dt.datetime

    model_config = ConfigDict(from_attributes=True)


class AttendanceDetailResponse(AttendanceResponse):
    student_name: Optional[str] = None
    batch_name: Optional[str] = None


class CoachScanResponse(BaseModel):
    attendance: AttendanceResponse
    student_name: str
    student_user_id: uuid.UUID
    total_points: int
    batch_name: str
    sport_name: Optional[str] = None


class AttendanceStatsResponse(BaseModel):
    total_sessions: int
    present_sessions: int
    absent_sessions: int
    attendance_rate: float
