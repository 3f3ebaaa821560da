"""OTP sign-in and password reset schemas."""

import uuid

from pydantic import BaseModel, EmailStr, Field
from services.communications_service.models.enums import OtpMethod


class OtpRequest(BaseModel):
    contact: str = Field(..., min_length=3)
    method: OtpMethod = OtpMethod.PHONE


class OtpVerify(BaseModel):
    contact: str = Field(..., min_length=3)
    code: str = Field(..., pattern=r"^[0-9]{6}$")
    method: OtpMethod = OtpMethod.PHONE


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: uuid.UUID
    is_new_user: bool


class PasswordResetRequest(BaseModel):
    email: EmailStr
    reset_url_base: str = Field(..., min_length=1)


class PasswordResetConfirm(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8)


class StatusMessage(BaseModel):
    message: str
