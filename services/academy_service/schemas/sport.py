"""Sport and batch schemas."""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.academy_service.models.enums import BatchLevel


class SportBase(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = ""
    max_students_per_batch: int = Field(..., ge=1)
    price_per_month: float = Field(..., ge=0)
    equipment: list[str] = Field(default_factory=list)
    age_groups: list[str] = Field(default_factory=list)
    image_url: Optional[str] = None


class SportCreate(SportBase):
    is_active: bool = True


class SportUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    is_active: Optional[bool] = None
    max_students_per_batch: Optional[int] = Field(None, ge=1)
    price_per_month: Optional[float] = Field(None, ge=0)
    equipment: Optional[list[str]] = None
    age_groups: Optional[list[str]] = None
    image_url: Optional[str] = None


class SportResponse(SportBase):
    id: uuid.UUID
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BatchSchedule(BaseModel):
    days: list[str] = Field(..., min_length=1)
    start_time: str = Field(..., pattern=r"^[0-9]{2}:[0-9]{2}$")
    end_time: str = Field(..., pattern=r"^[0-9]{2}:[0-9]{2}$")


class BatchCreate(BaseModel):
    name: str = Field(..., min_length=1)
    sport_id: uuid.UUID
    coach_id: Optional[uuid.UUID] = None
    schedule: BatchSchedule
    max_students: int = Field(..., ge=1)
    age_group: str
    level: BatchLevel
    venue: str
    start_date: date


class BatchUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    schedule: Optional[BatchSchedule] = None
    max_students: Optional[int] = Field(None, ge=1)
    age_group: Optional[str] = None
    level: Optional[BatchLevel] = None
    venue: Optional[str] = None
    is_active: Optional[bool] = None
    start_date: Optional[date] = None


class AssignCoachRequest(BaseModel):
    coach_id: uuid.UUID


class BatchResponse(BaseModel):
    id: uuid.UUID
    name: str
    sport_id: uuid.UUID
    coach_id: Optional[uuid.UUID] = None
    schedule: BatchSchedule
    max_students: int
    current_students: int
    age_group: str
    level: BatchLevel
    venue: str
    is_active: bool
    start_date: date
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SportDetailResponse(SportResponse):
    batches: list[BatchResponse] = Field(default_factory=list)


class StudentSummary(BaseModel):
    user_id: uuid.UUID
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None


class BatchDetailResponse(BatchResponse):
    sport: Optional[SportResponse] = None
    coach_name: Optional[str] = None
    enrollment_count: int = 0
    students: list[StudentSummary] = Field(default_factory=list)


class CountResponse(BaseModel):
    count: int
