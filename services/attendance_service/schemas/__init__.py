"""Attendance Service schemas package."""

from services.attendance_service.schemas.attendance import (  # noqa: F401
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

__all__ = [
    "AttendanceDetailResponse",
    "AttendanceResponse",
    "AttendanceStatsResponse",
    "CodeCheckIn",
    "CoachScanRequest",
    "CoachScanResponse",
    "ManualAttendanceRequest",
    "SessionCodeCreate",
    "SessionCodeResponse",
]
