"""Admin user-management schemas."""

import uuid
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from services.members_service.models.enums import Role, SubscriptionStatus
from services.members_service.schemas.profile import ProfileBase, ProfileResponse


class AdminUserCreate(ProfileBase):
    role: Role
    is_active: bool = True
    subscription_status: SubscriptionStatus = SubscriptionStatus.PENDING
    level: int = Field(1, ge=1)


class AdminUserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    date_of_birth: Optional[date] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    emergency_contact: Optional[str] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None
    subscription_status: Optional[SubscriptionStatus] = None
    level: Optional[int] = Field(None, ge=1)


class RoleUpdateRequest(BaseModel):
    role: Role


class SubscriptionUpdateRequest(BaseModel):
    subscription_status: SubscriptionStatus


class BulkUserRequest(BaseModel):
    user_ids: list[uuid.UUID] = Field(..., min_length=1)


class BulkUserResponse(BaseModel):
    updated: int


class AdminUserResponse(ProfileResponse):
    user_email: Optional[str] = None
    deleted: bool = False


class UserCountResponse(BaseModel):
    count: int


class AuditLogResponse(BaseModel):
    id: uuid.UUID
    admin_user_id: uuid.UUID
    action: str
    details: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
