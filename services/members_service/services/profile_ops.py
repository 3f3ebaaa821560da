"""Profile onboarding and self-service."""

import secrets
import uuid
from typing import Optional

from libs.auth.models import CallerIdentity
from libs.auth.policy import Requirement, authorize
from libs.common.errors import Conflict, Forbidden, NotFound
from libs.common.logging import get_logger
from services.members_service.models import Profile, Role, SubscriptionStatus, User
from services.members_service.schemas import ProfileCreate, ProfileUpdate
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# Roles a user may pick for themselves during onboarding
SELF_SERVICE_ROLES = {Role.STUDENT, Role.COACH}


def new_session_id(user_id: uuid.UUID) -> str:
    """QR payload identifying a student at the attendance desk."""
    return f"{user_id}_{secrets.token_hex(8)}"


def initial_subscription_status(role: Role) -> SubscriptionStatus:
    if role == Role.STUDENT:
        return SubscriptionStatus.PENDING
    return SubscriptionStatus.ACTIVE


async def get_profile_by_user_id(
    db: AsyncSession, user_id: uuid.UUID
) -> Optional[Profile]:
    result = await db.execute(select(Profile).where(Profile.user_id == user_id))
    return result.scalar_one_or_none()


async def require_profile_for_user(db: AsyncSession, user_id: uuid.UUID) -> Profile:
    profile = await get_profile_by_user_id(db, user_id)
    if profile is None:
        raise NotFound("Profile not found")
    return profile


# ---------------------------------------------------------------------------
# Onboarding
# ---------------------------------------------------------------------------


async def create_profile(
    db: AsyncSession, caller: CallerIdentity, data: ProfileCreate
) -> Profile:
    authorize(caller, Requirement.ANY_AUTHENTICATED)
    if data.role not in SELF_SERVICE_ROLES:
        raise Forbidden("Cannot self-assign this role")

    if await get_profile_by_user_id(db, caller.user_id) is not None:
        raise Conflict("Profile already exists")

    user = await db.get(User, caller.user_id)
    profile = Profile(
        user_id=caller.user_id,
        **data.model_dump(exclude={"role", "email"}),
        email=data.email or (user.email if user else None),
        role=data.role,
        session_id=new_session_id(caller.user_id),
        is_active=True,
        subscription_status=initial_subscription_status(data.role),
        total_points=0,
        level=1,
    )
    db.add(profile)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Profile already exists")
    await db.refresh(profile)

    logger.info(
        "Created %s profile %s for user %s",
        data.role.value,
        profile.id,
        caller.user_id,
    )
    return profile


async def get_current_profile(
    db: AsyncSession, caller: CallerIdentity
) -> Optional[Profile]:
    authorize(caller, Requirement.ANY_AUTHENTICATED)
    return await get_profile_by_user_id(db, caller.user_id)


async def needs_profile_setup(db: AsyncSession, caller: CallerIdentity) -> bool:
    return await get_current_profile(db, caller) is None


async def update_profile(
    db: AsyncSession, caller: CallerIdentity, data: ProfileUpdate
) -> Profile:
    """Update the caller's own personal fields."""
    authorize(caller, Requirement.ANY_AUTHENTICATED)
    profile = await require_profile_for_user(db, caller.user_id)

    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(profile, field, value)

    await db.commit()
    await db.refresh(profile)
    return profile


async def check_phone_duplicate(
    db: AsyncSession, caller: CallerIdentity, *, phone: str
) -> bool:
    authorize(caller, Requirement.ANY_AUTHENTICATED)
    if not phone:
        return False
    result = await db.execute(select(Profile.id).where(Profile.phone == phone).limit(1))
    return result.first() is not None
