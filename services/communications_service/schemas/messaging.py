"""Channel, message and platform settings schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.communications_service.models.enums import ChannelType, MessageType


class ChannelCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: ChannelType = ChannelType.GROUP
    members: list[uuid.UUID] = []


class ChannelMemberAdd(BaseModel):
    user_id: uuid.UUID


class ChannelResponse(BaseModel):
    id: uuid.UUID
    name: str
    type: ChannelType
    members: list[uuid.UUID]
    created_by: uuid.UUID
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1)
    type: MessageType = MessageType.TEXT


class MessageResponse(BaseModel):
    id: uuid.UUID
    channel_id: uuid.UUID
    sender_id: uuid.UUID
    content: str
    type: MessageType
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PlatformSettingsResponse(BaseModel):
    maintenance_mode: bool = False
    announcement: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MaintenanceModeUpdate(BaseModel):
    enabled: bool


class AnnouncementUpdate(BaseModel):
    announcement: Optional[str] = None
