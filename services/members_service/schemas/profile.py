"""Profile schemas."""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from services.members_service.models.enums import Role, SubscriptionStatus


class ProfileBase(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    photo_url: Optional[str] = None


class ProfileCreate(ProfileBase):
    role: Role = Role.STUDENT


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    photo_url: Optional[str] = None


class ProfileResponse(ProfileBase):
    id: uuid.UUID
    user_id: uuid.UUID
    # Empty until an OTP-created account finishes setup
    first_name: str
    last_name: str
    email: Optional[str] = None
    role: Role
    session_id: str
    is_active: bool
    subscription_status: SubscriptionStatus
    total_points: int
    level: int
    joined_at: datetime
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProfileSetupStatus(BaseModel):
    needs_profile_setup: bool


class PhoneCheckRequest(BaseModel):
    phone: str


class PhoneCheckResponse(BaseModel):
    exists: bool
