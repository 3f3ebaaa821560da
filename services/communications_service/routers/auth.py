"""OTP sign-in and password reset endpoints.

Unauthenticated and rate limited per client IP.
"""

from fastapi import APIRouter, Depends, Request
from libs.auth.identity import IdentityAdminClient, get_identity_client
from libs.common.notifications import NotificationClient, get_notification_client
from libs.common.rate_limit import auth_limit
from libs.db.session import get_async_db
from services.communications_service.schemas import (
    OtpRequest,
    OtpVerify,
    PasswordResetConfirm,
    PasswordResetRequest,
    StatusMessage,
    TokenResponse,
)
from services.communications_service.services import otp_ops, password_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/otp/request", response_model=StatusMessage)
@auth_limit
async def request_otp(
    request: Request,
    body: OtpRequest,
    db: AsyncSession = Depends(get_async_db),
    notifier: NotificationClient = Depends(get_notification_client),
):
    await otp_ops.request_otp(
        db, contact=body.contact, method=body.method, notifier=notifier
    )
    return {"message": "OTP sent"}


@router.post("/otp/verify", response_model=TokenResponse)
@auth_limit
async def verify_otp(
    request: Request,
    body: OtpVerify,
    db: AsyncSession = Depends(get_async_db),
):
    return await otp_ops.verify_otp(
        db, contact=body.contact, code=body.code, method=body.method
    )


@router.post("/password/reset-request", response_model=StatusMessage)
@auth_limit
async def request_password_reset(
    request: Request,
    body: PasswordResetRequest,
    db: AsyncSession = Depends(get_async_db),
    notifier: NotificationClient = Depends(get_notification_client),
):
    await password_ops.request_password_reset(
        db,
        email=body.email,
        reset_url_base=body.reset_url_base,
        notifier=notifier,
    )
    return {"message": "If the email is registered, a reset link has been sent"}


@router.post("/password/reset", response_model=StatusMessage)
@auth_limit
async def reset_password(
    request: Request,
    body: PasswordResetConfirm,
    db: AsyncSession = Depends(get_async_db),
    identity: IdentityAdminClient = Depends(get_identity_client),
):
    await password_ops.reset_password(
        db, token=body.token, new_password=body.new_password, identity=identity
    )
    return {"message": "Password updated"}
