"""Admin user management.

Every mutating operation here is audited in the same transaction.
"""

import uuid
from datetime import datetime
from typing import Optional

from libs.auth.models import CallerIdentity
from libs.auth.policy import Requirement, authorize
from libs.common.errors import NotFound
from libs.common.logging import get_logger
from services.members_service.models import Profile, Role, SubscriptionStatus, User
from services.members_service.schemas import AdminUserCreate, AdminUserUpdate
from services.members_service.services.audit_ops import record_admin_action
from services.members_service.services.profile_ops import new_session_id
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def _admin_user_view(profile: Profile, user: User) -> dict:
    data = {
        column.key: getattr(profile, column.key)
        for column in Profile.__table__.columns
    }
    data["user_email"] = user.email
    data["deleted"] = user.deleted
    return data


async def _get_profile(db: AsyncSession, profile_id: uuid.UUID) -> Profile:
    profile = await db.get(Profile, profile_id)
    if profile is None:
        raise NotFound("Profile not found")
    return profile


async def _get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def list_users(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    role: Optional[Role] = None,
    include_deleted: bool = False,
) -> list[dict]:
    authorize(caller, Requirement.ADMIN)
    query = select(Profile, User).join(User, User.id == Profile.user_id)
    if role is not None:
        query = query.where(Profile.role == role)
    if not include_deleted:
        query = query.where(User.deleted.is_(False))
    result = await db.execute(query.order_by(Profile.created_at.desc()))
    return [_admin_user_view(profile, user) for profile, user in result.all()]


async def count_users(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    role: Optional[Role] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> int:
    authorize(caller, Requirement.ADMIN)
    query = select(func.count(Profile.id))
    if role is not None:
        query = query.where(Profile.role == role)
    if start is not None and end is not None:
        query = query.where(Profile.created_at >= start, Profile.created_at <= end)
    return (await db.execute(query)).scalar_one()


# ---------------------------------------------------------------------------
# Create / update
# ---------------------------------------------------------------------------


async def create_user(
    db: AsyncSession, caller: CallerIdentity, data: AdminUserCreate
) -> dict:
    authorize(caller, Requirement.ADMIN)

    user = User(
        email=data.email,
        phone=data.phone,
        name=f"{data.first_name} {data.last_name}",
    )
    db.add(user)
    await db.flush()

    profile = Profile(
        user_id=user.id,
        **data.model_dump(),
        session_id=new_session_id(user.id),
        total_points=0,
    )
    db.add(profile)
    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="create_user",
        details=f"user={user.id} role={data.role.value}",
    )
    await db.commit()
    await db.refresh(profile)

    logger.info("Admin %s created user %s", caller.user_id, user.id)
    return _admin_user_view(profile, user)


async def update_user(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    profile_id: uuid.UUID,
    data: AdminUserUpdate,
) -> dict:
    authorize(caller, Requirement.ADMIN)
    profile = await _get_profile(db, profile_id)
    user = await _get_user(db, profile.user_id)

    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(profile, field, value)

    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="update_user",
        details=f"profile={profile_id} fields={','.join(sorted(changes))}",
    )
    await db.commit()
    await db.refresh(profile)
    return _admin_user_view(profile, user)


async def update_user_role(
    db: AsyncSession, caller: CallerIdentity, *, profile_id: uuid.UUID, role: Role
) -> Profile:
    authorize(caller, Requirement.ADMIN)
    profile = await _get_profile(db, profile_id)
    previous = profile.role
    profile.role = role

    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="update_user_role",
        details=f"profile={profile_id} {previous.value}->{role.value}",
    )
    await db.commit()
    await db.refresh(profile)
    return profile


async def update_subscription_status(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    profile_id: uuid.UUID,
    subscription_status: SubscriptionStatus,
) -> Profile:
    authorize(caller, Requirement.ADMIN)
    profile = await _get_profile(db, profile_id)
    previous = profile.subscription_status
    profile.subscription_status = subscription_status

    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="update_subscription_status",
        details=(
            f"profile={profile_id} "
            f"{previous.value}->{subscription_status.value}"
        ),
    )
    await db.commit()
    await db.refresh(profile)
    return profile


# ---------------------------------------------------------------------------
# Soft delete and activation
# ---------------------------------------------------------------------------


async def delete_user(
    db: AsyncSession, caller: CallerIdentity, *, user_id: uuid.UUID
) -> None:
    """Soft-delete: flag the user and deactivate the profile."""
    authorize(caller, Requirement.ADMIN)
    user = await _get_user(db, user_id)
    user.deleted = True

    profile = await db.scalar(select(Profile).where(Profile.user_id == user_id))
    if profile is not None:
        profile.is_active = False

    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="delete_user",
        details=f"user={user_id}",
    )
    await db.commit()
    logger.info("Admin %s deleted user %s", caller.user_id, user_id)


async def restore_user(
    db: AsyncSession, caller: CallerIdentity, *, user_id: uuid.UUID
) -> None:
    authorize(caller, Requirement.ADMIN)
    user = await _get_user(db, user_id)
    user.deleted = False

    profile = await db.scalar(select(Profile).where(Profile.user_id == user_id))
    if profile is not None:
        profile.is_active = True

    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="restore_user",
        details=f"user={user_id}",
    )
    await db.commit()
    logger.info("Admin %s restored user %s", caller.user_id, user_id)


async def _set_active(
    db: AsyncSession,
    caller: CallerIdentity,
    user_ids: list[uuid.UUID],
    is_active: bool,
) -> int:
    authorize(caller, Requirement.ADMIN)
    result = await db.execute(select(Profile).where(Profile.user_id.in_(user_ids)))
    profiles = list(result.scalars().all())
    for profile in profiles:
        profile.is_active = is_active

    action = "bulk_activate_users" if is_active else "bulk_deactivate_users"
    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action=action,
        details=f"count={len(profiles)}",
    )
    await db.commit()
    return len(profiles)


async def bulk_activate_users(
    db: AsyncSession, caller: CallerIdentity, *, user_ids: list[uuid.UUID]
) -> int:
    return await _set_active(db, caller, user_ids, True)


async def bulk_deactivate_users(
    db: AsyncSession, caller: CallerIdentity, *, user_ids: list[uuid.UUID]
) -> int:
    return await _set_active(db, caller, user_ids, False)
