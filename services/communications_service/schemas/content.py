"""Carousel slide and content block schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.communications_service.models.enums import ContentFormat


class SlideCreate(BaseModel):
    title: str = Field(..., min_length=1)
    subtitle: Optional[str] = None
    image_url: Optional[str] = None
    position: int = Field(0, ge=0)
    is_active: bool = True


class SlideUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    subtitle: Optional[str] = None
    image_url: Optional[str] = None
    position: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None


class SlideResponse(BaseModel):
    id: uuid.UUID
    title: str
    subtitle: Optional[str] = None
    image_url: Optional[str] = None
    position: int
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ContentBlockCreate(BaseModel):
    key: str = Field(..., min_length=1, pattern=r"^[a-z0-9_.-]+$")
    value: str
    format: ContentFormat = ContentFormat.TEXT
    is_active: bool = True


class ContentBlockUpdate(BaseModel):
    value: Optional[str] = None
    format: Optional[ContentFormat] = None
    is_active: Optional[bool] = None


class ContentBlockResponse(BaseModel):
    id: uuid.UUID
    key: str
    value: str
    format: ContentFormat
    is_active: bool
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
