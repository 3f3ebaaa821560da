"""Password reset by emailed link."""

import secrets
from datetime import timedelta

from libs.auth.identity import IdentityAdminClient
from libs.common.config import get_settings
from libs.common.datetime_utils import as_utc, utc_now
from libs.common.errors import Conflict, NotFound
from libs.common.logging import get_logger
from libs.common.notifications import NotificationClient
from services.communications_service.models import PasswordReset
from services.members_service.models import User
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def _user_by_email(db: AsyncSession, email: str):
    result = await db.execute(
        select(User).where(User.email == email, User.deleted.is_(False))
    )
    return result.scalars().first()


async def request_password_reset(
    db: AsyncSession,
    *,
    email: str,
    reset_url_base: str,
    notifier: NotificationClient,
) -> None:
    """Email a reset link. Silent when the address is unknown."""
    if await _user_by_email(db, email) is None:
        logger.info("Password reset requested for unknown address")
        return

    settings = get_settings()
    reset = PasswordReset(
        email=email,
        token=secrets.token_hex(32),
        expires_at=utc_now() + timedelta(minutes=settings.PASSWORD_RESET_TTL_MINUTES),
        used=False,
    )
    db.add(reset)
    await db.flush()

    separator = "&" if "?" in reset_url_base else "?"
    try:
        await notifier.send_password_reset(
            email, f"{reset_url_base}{separator}token={reset.token}"
        )
    except Exception:
        await db.rollback()
        raise
    await db.commit()


async def reset_password(
    db: AsyncSession,
    *,
    token: str,
    new_password: str,
    identity: IdentityAdminClient,
) -> None:
    result = await db.execute(
        select(PasswordReset).where(PasswordReset.token == token)
    )
    reset = result.scalar_one_or_none()
    if reset is None or reset.used or as_utc(reset.expires_at) <= utc_now():
        raise Conflict("Invalid or expired reset token")

    user = await _user_by_email(db, reset.email)
    if user is None:
        raise NotFound("User not found")

    consumed = await db.execute(
        update(PasswordReset)
        .where(PasswordReset.id == reset.id, PasswordReset.used.is_(False))
        .values(used=True)
        .execution_options(synchronize_session=False)
    )
    if consumed.rowcount != 1:
        await db.rollback()
        raise Conflict("Invalid or expired reset token")

    try:
        await identity.update_password(user.id, new_password)
    except Exception:
        await db.rollback()
        raise
    await db.commit()
    logger.info("Password reset completed for user %s", user.id)
