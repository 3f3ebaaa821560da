"""Rewards catalog and grant history."""

import uuid
from typing import Optional

from libs.auth.models import CallerIdentity
from libs.auth.policy import Requirement, authorize
from libs.common.errors import Conflict, NotFound
from libs.common.logging import get_logger
from services.members_service.models import Reward, RewardHistory, User
from services.members_service.schemas import RewardCreate, RewardUpdate
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def _get_reward(db: AsyncSession, reward_id: uuid.UUID) -> Reward:
    reward = await db.get(Reward, reward_id)
    if reward is None:
        raise NotFound("Reward not found")
    return reward


async def list_rewards(
    db: AsyncSession, caller: CallerIdentity, *, include_inactive: bool = False
) -> list[Reward]:
    authorize(caller, Requirement.ANY_AUTHENTICATED)
    query = select(Reward).order_by(Reward.points.asc())
    # Only admins see retired rewards
    if not (include_inactive and caller.is_admin):
        query = query.where(Reward.is_active.is_(True))
    return list((await db.execute(query)).scalars().all())


async def create_reward(
    db: AsyncSession, caller: CallerIdentity, data: RewardCreate
) -> Reward:
    authorize(caller, Requirement.ADMIN)
    reward = Reward(**data.model_dump())
    db.add(reward)
    await db.commit()
    await db.refresh(reward)
    logger.info("Created reward %s (%s)", reward.id, reward.name)
    return reward


async def update_reward(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    reward_id: uuid.UUID,
    data: RewardUpdate,
) -> Reward:
    authorize(caller, Requirement.ADMIN)
    reward = await _get_reward(db, reward_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(reward, field, value)
    await db.commit()
    await db.refresh(reward)
    return reward


async def delete_reward(
    db: AsyncSession, caller: CallerIdentity, *, reward_id: uuid.UUID
) -> None:
    authorize(caller, Requirement.ADMIN)
    reward = await _get_reward(db, reward_id)
    granted = await db.scalar(
        select(RewardHistory.id).where(RewardHistory.reward_id == reward_id).limit(1)
    )
    if granted is not None:
        raise Conflict("Reward has been granted; deactivate it instead")
    await db.delete(reward)
    await db.commit()


async def grant_reward(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    reward_id: uuid.UUID,
    user_id: uuid.UUID,
    notes: Optional[str] = None,
) -> RewardHistory:
    authorize(caller, Requirement.ADMIN)
    reward = await _get_reward(db, reward_id)
    if not reward.is_active:
        raise Conflict("Reward is not active")
    if await db.get(User, user_id) is None:
        raise NotFound("User not found")

    entry = RewardHistory(user_id=user_id, reward_id=reward_id, notes=notes)
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    logger.info("Granted reward %s to user %s", reward.name, user_id)
    return entry


async def get_reward_history(db: AsyncSession, caller: CallerIdentity) -> list[dict]:
    authorize(caller, Requirement.ADMIN)
    result = await db.execute(
        select(RewardHistory, Reward.name)
        .join(Reward, Reward.id == RewardHistory.reward_id)
        .order_by(RewardHistory.created_at.desc())
    )
    return [
        {
            "id": entry.id,
            "user_id": entry.user_id,
            "reward_id": entry.reward_id,
            "reward_name": name,
            "notes": entry.notes,
            "created_at": entry.created_at,
        }
        for entry, name in result.all()
    ]
