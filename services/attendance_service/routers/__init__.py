"""Attendance service routers."""

from services.attendance_service.routers.attendance import router as attendance_router

__all__ = ["attendance_router"]
