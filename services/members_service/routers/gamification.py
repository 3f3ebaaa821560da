"""Points, leaderboard and rewards endpoints."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_caller
from libs.auth.models import CallerIdentity
from libs.db.session import get_async_db
from services.members_service.schemas import (
    LeaderboardEntry,
    PointsAdjustRequest,
    PointsBalanceResponse,
    PointsHistoryResponse,
    RewardCreate,
    RewardGrantRequest,
    RewardHistoryResponse,
    RewardResponse,
    RewardUpdate,
)
from services.members_service.services import points_ops, rewards_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(tags=["gamification"])


# ---------------------------------------------------------------------------
# Points
# ---------------------------------------------------------------------------


@router.get("/leaderboard", response_model=list[LeaderboardEntry])
async def get_leaderboard(
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await points_ops.get_leaderboard(db, caller)


@router.get("/points/{user_id}/history", response_model=list[PointsHistoryResponse])
async def get_points_history(
    user_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await points_ops.get_points_history(db, caller, user_id=user_id)


@router.post("/points/{user_id}", response_model=PointsBalanceResponse)
async def adjust_points(
    user_id: uuid.UUID,
    body: PointsAdjustRequest,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    """Admin award or deduction."""
    profile = await points_ops.adjust_points(
        db, caller, user_id=user_id, points=body.points, reason=body.reason
    )
    return PointsBalanceResponse(
        user_id=profile.user_id,
        total_points=profile.total_points,
        level=profile.level,
    )


# ---------------------------------------------------------------------------
# Rewards
# ---------------------------------------------------------------------------


@router.get("/rewards", response_model=list[RewardResponse])
async def list_rewards(
    include_inactive: bool = False,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await rewards_ops.list_rewards(
        db, caller, include_inactive=include_inactive
    )


@router.post(
    "/rewards", response_model=RewardResponse, status_code=status.HTTP_201_CREATED
)
async def create_reward(
    body: RewardCreate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await rewards_ops.create_reward(db, caller, body)


@router.get("/rewards/history", response_model=list[RewardHistoryResponse])
async def get_reward_history(
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await rewards_ops.get_reward_history(db, caller)


@router.patch("/rewards/{reward_id}", response_model=RewardResponse)
async def update_reward(
    reward_id: uuid.UUID,
    body: RewardUpdate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await rewards_ops.update_reward(
        db, caller, reward_id=reward_id, data=body
    )


@router.delete("/rewards/{reward_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reward(
    reward_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    await rewards_ops.delete_reward(db, caller, reward_id=reward_id)


@router.post(
    "/rewards/{reward_id}/grant",
    response_model=RewardHistoryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def grant_reward(
    reward_id: uuid.UUID,
    body: RewardGrantRequest,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    entry = await rewards_ops.grant_reward(
        db, caller, reward_id=reward_id, user_id=body.user_id, notes=body.notes
    )
    return RewardHistoryResponse(
        id=entry.id,
        user_id=entry.user_id,
        reward_id=entry.reward_id,
        notes=entry.notes,
        created_at=entry.created_at,
    )
