"""Points ledger, levels and leaderboard."""

import uuid

from libs.auth.models import CallerIdentity
from libs.auth.policy import Requirement, authorize
from libs.common.config import get_settings
from libs.common.errors import NotFound
from libs.common.logging import get_logger
from services.members_service.models import PointsHistory, Profile, Role
from services.members_service.services.audit_ops import record_admin_action
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def level_for_points(total_points: int) -> int:
    return max(total_points, 0) // get_settings().POINTS_PER_LEVEL + 1


async def add_points(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    points: int,
    reason: str,
) -> Profile:
    """Credit (or debit) points and recompute the level.

    Runs inside the caller's transaction; does not commit.
    """
    result = await db.execute(
        update(Profile)
        .where(Profile.user_id == user_id)
        .values(total_points=Profile.total_points + points)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFound("Profile not found")

    profile = await db.scalar(
        select(Profile)
        .where(Profile.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    profile.level = level_for_points(profile.total_points)

    db.add(PointsHistory(user_id=user_id, points=points, reason=reason))
    await db.flush()

    logger.info(
        "Points %+d for user %s (%s): total=%d level=%d",
        points,
        user_id,
        reason,
        profile.total_points,
        profile.level,
    )
    return profile


async def adjust_points(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    user_id: uuid.UUID,
    points: int,
    reason: str,
) -> Profile:
    authorize(caller, Requirement.ADMIN)
    profile = await add_points(db, user_id=user_id, points=points, reason=reason)
    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="adjust_points",
        details=f"user={user_id} points={points:+d} reason={reason}",
    )
    await db.commit()
    await db.refresh(profile)
    return profile


async def get_points_history(
    db: AsyncSession, caller: CallerIdentity, *, user_id: uuid.UUID
) -> list[PointsHistory]:
    authorize(caller, Requirement.SELF_OR_ADMIN, owner_id=user_id)
    result = await db.execute(
        select(PointsHistory)
        .where(PointsHistory.user_id == user_id)
        .order_by(PointsHistory.created_at.desc())
    )
    return list(result.scalars().all())


async def get_leaderboard(db: AsyncSession, caller: CallerIdentity) -> list[dict]:
    """Top students by points, ranked from 1."""
    authorize(caller, Requirement.ANY_AUTHENTICATED)
    result = await db.execute(
        select(Profile)
        .where(Profile.role == Role.STUDENT, Profile.is_active.is_(True))
        .order_by(Profile.total_points.desc(), Profile.joined_at.asc())
        .limit(get_settings().LEADERBOARD_SIZE)
    )
    return [
        {
            "rank": rank,
            "user_id": p.user_id,
            "first_name": p.first_name,
            "last_name": p.last_name,
            "total_points": p.total_points,
            "level": p.level,
        }
        for rank, p in enumerate(result.scalars().all(), start=1)
    ]
