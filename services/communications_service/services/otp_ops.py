"""Passwordless sign-in with one-time codes."""

import hmac
import secrets
from datetime import timedelta

from libs.auth.tokens import create_access_token
from libs.common.config import get_settings
from libs.common.datetime_utils import as_utc, utc_now
from libs.common.errors import Conflict, Forbidden
from libs.common.logging import get_logger
from libs.common.notifications import NotificationClient
from services.communications_service.models import Otp, OtpMethod
from services.members_service.models import Profile, Role, SubscriptionStatus, User
from services.members_service.services.profile_ops import new_session_id
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def new_otp_code() -> str:
    return f"{secrets.randbelow(10**6):06d}"


async def request_otp(
    db: AsyncSession,
    *,
    contact: str,
    method: OtpMethod,
    notifier: NotificationClient,
) -> None:
    """Store a fresh code and deliver it; nothing is kept if delivery fails."""
    settings = get_settings()
    otp = Otp(
        contact=contact,
        method=method,
        code=new_otp_code(),
        expires_at=utc_now() + timedelta(minutes=settings.OTP_TTL_MINUTES),
        used=False,
    )
    db.add(otp)
    await db.flush()

    try:
        await notifier.send_otp(contact, method.value, otp.code)
    except Exception:
        await db.rollback()
        raise

    await db.commit()
    logger.info("OTP issued via %s", method.value)


async def _find_or_create_user(
    db: AsyncSession, contact: str, method: OtpMethod
) -> tuple[User, bool]:
    column = User.phone if method == OtpMethod.PHONE else User.email
    result = await db.execute(select(User).where(column == contact))
    user = result.scalars().first()
    if user is not None:
        if user.deleted:
            raise Forbidden("Account is deactivated")
        return user, False

    user = User(
        phone=contact if method == OtpMethod.PHONE else None,
        email=contact if method == OtpMethod.EMAIL else None,
    )
    db.add(user)
    await db.flush()
    db.add(
        Profile(
            user_id=user.id,
            first_name="",
            last_name="",
            phone=user.phone,
            email=user.email,
            role=Role.STUDENT,
            session_id=new_session_id(user.id),
            is_active=True,
            subscription_status=SubscriptionStatus.PENDING,
            total_points=0,
            level=1,
        )
    )
    if method == OtpMethod.EMAIL:
        user.email_verified_at = utc_now()
    logger.info("Created user %s on first sign-in", user.id)
    return user, True


async def verify_otp(
    db: AsyncSession, *, contact: str, code: str, method: OtpMethod
) -> dict:
    """Check the newest code for ``contact`` and sign the user in."""
    result = await db.execute(
        select(Otp)
        .where(Otp.contact == contact, Otp.method == method)
        .order_by(Otp.created_at.desc())
        .limit(1)
    )
    otp = result.scalar_one_or_none()

    if (
        otp is None
        or otp.used
        or not hmac.compare_digest(otp.code.encode(), code.encode())
        or as_utc(otp.expires_at) <= utc_now()
    ):
        raise Conflict("Invalid or expired OTP")

    consumed = await db.execute(
        update(Otp)
        .where(Otp.id == otp.id, Otp.used.is_(False))
        .values(used=True)
        .execution_options(synchronize_session=False)
    )
    if consumed.rowcount != 1:
        await db.rollback()
        raise Conflict("Invalid or expired OTP")

    user, is_new = await _find_or_create_user(db, contact, method)
    await db.commit()

    token = create_access_token(user.id, email=user.email, phone=user.phone)
    return {
        "access_token": token,
        "token_type": "bearer",
        "user_id": user.id,
        "is_new_user": is_new,
    }
