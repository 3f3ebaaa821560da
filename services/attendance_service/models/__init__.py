"""Attendance Service models package."""

from services.attendance_service.models.core import (  # noqa: F401
    AttendanceRecord,
    AttendanceSession,
)
from services.attendance_service.models.enums import (  # noqa: F401
    AttendanceMethod,
    enum_values,
)

# Registers the batches and users tables referenced by foreign keys
import services.academy_service.models  # noqa: F401, E402

__all__ = [
    "AttendanceMethod",
    "AttendanceRecord",
    "AttendanceSession",
    "enum_values",
]
