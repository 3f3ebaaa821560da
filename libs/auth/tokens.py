"""Access-token issuing for users who sign in with an OTP."""

import uuid
from datetime import timedelta
from typing import Optional

from jose import jwt

from libs.common.config import get_settings
from libs.common.datetime_utils import utc_now


def create_access_token(
    user_id: uuid.UUID,
    *,
    email: Optional[str] = None,
    phone: Optional[str] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    settings = get_settings()
    now = utc_now()
    ttl = expires_minutes or settings.ACCESS_TOKEN_TTL_MINUTES
    claims = {
        "sub": str(user_id),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=ttl)).timestamp()),
    }
    if email:
        claims["email"] = email
    if phone:
        claims["phone"] = phone
    return jwt.encode(
        claims, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM
    )
