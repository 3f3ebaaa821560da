"""Academy Service schemas package.

When adding a new schema, add its import and __all__ entry.
"""

from services.academy_service.schemas.enrollment import (  # noqa: F401
    BatchStudentResponse,
    EnrollmentApply,
    EnrollmentPaymentStatusUpdate,
    EnrollmentResponse,
    EnrollmentStatusUpdate,
    MyEnrollmentResponse,
)
from services.academy_service.schemas.sport import (  # noqa: F401
    AssignCoachRequest,
    BatchCreate,
    BatchDetailResponse,
    BatchResponse,
    BatchSchedule,
    BatchUpdate,
    CountResponse,
    SportCreate,
    SportDetailResponse,
    SportResponse,
    SportUpdate,
    StudentSummary,
)

__all__ = [
    "AssignCoachRequest",
    "BatchCreate",
    "BatchDetailResponse",
    "BatchResponse",
    "BatchSchedule",
    "BatchStudentResponse",
    "BatchUpdate",
    "CountResponse",
    "EnrollmentApply",
    "EnrollmentPaymentStatusUpdate",
    "EnrollmentResponse",
    "EnrollmentStatusUpdate",
    "MyEnrollmentResponse",
    "SportCreate",
    "SportDetailResponse",
    "SportResponse",
    "SportUpdate",
    "StudentSummary",
]
