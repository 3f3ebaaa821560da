import uuid
from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from libs.auth.models import AuthUser, CallerIdentity
from libs.common.config import get_settings
from libs.common.errors import Unauthenticated
from libs.db.session import get_async_db

# auto_error=False so a missing header maps to our 401 instead of FastAPI's 403
security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    token: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
) -> AuthUser:
    """
    Validate the bearer JWT and return its claims.

    The claims are also kept on ``request.state.user`` so the rate limiter
    can key authenticated requests by user.
    """
    if token is None:
        raise Unauthenticated()

    settings = get_settings()
    try:
        payload = jwt.decode(
            token.credentials,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            options={"verify_aud": False},
        )
        user = AuthUser(**payload)
    except (JWTError, ValidationError):
        raise Unauthenticated("Could not validate credentials")
    request.state.user = user
    return user


async def resolve_caller(db: AsyncSession, user_id: str) -> CallerIdentity:
    """Build the CallerIdentity for a token subject."""
    # Imported here: members_service models depend on libs.auth.models
    from services.members_service.models import Profile, User

    try:
        uid = uuid.UUID(user_id)
    except ValueError:
        raise Unauthenticated("Could not validate credentials")

    user = await db.get(User, uid)
    if user is None or user.deleted:
        raise Unauthenticated("Account not found")

    result = await db.execute(select(Profile).where(Profile.user_id == uid))
    profile = result.scalar_one_or_none()
    if profile is None:
        return CallerIdentity(user_id=uid)
    return CallerIdentity(user_id=uid, role=profile.role, profile_id=profile.id)


async def get_caller(
    current_user: Annotated[AuthUser, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_async_db)],
) -> CallerIdentity:
    """
    FastAPI dependency resolving the bearer token to a CallerIdentity.
    """
    return await resolve_caller(db, current_user.user_id)
