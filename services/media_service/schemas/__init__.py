"""Media Service schemas."""

from typing import Optional

from pydantic import BaseModel, Field


class UploadUrlRequest(BaseModel):
    filename: str = Field(..., min_length=1, max_length=255)


class UploadUrlResponse(BaseModel):
    path: str
    upload_url: str
    token: Optional[str] = None
    public_url: str


class ResolvedUrlResponse(BaseModel):
    path: str
    url: str
