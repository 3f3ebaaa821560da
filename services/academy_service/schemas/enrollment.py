"""Enrollment schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict
from services.academy_service.models.enums import EnrollmentStatus, PaymentStatus
from services.academy_service.schemas.sport import (
    BatchResponse,
    SportResponse,
    StudentSummary,
)


class EnrollmentApply(BaseModel):
    batch_id: uuid.UUID


class EnrollmentStatusUpdate(BaseModel):
    status: EnrollmentStatus


class EnrollmentPaymentStatusUpdate(BaseModel):
    payment_status: PaymentStatus


class EnrollmentResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    batch_id: uuid.UUID
    sport_id: uuid.UUID
    status: EnrollmentStatus
    payment_status: PaymentStatus
    enrolled_at: datetime
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MyEnrollmentResponse(EnrollmentResponse):
    batch: Optional[BatchResponse] = None
    sport: Optional[SportResponse] = None
    coach_name: Optional[str] = None
    attendance_percent: int = 0


class BatchStudentResponse(EnrollmentResponse):
    student: Optional[StudentSummary] = None
