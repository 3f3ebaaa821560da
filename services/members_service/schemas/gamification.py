"""Points, leaderboard and rewards schemas."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from services.members_service.models.enums import RewardType


class PointsAdjustRequest(BaseModel):
    points: int = Field(..., description="Positive to award, negative to deduct")
    reason: str = Field(..., min_length=3)


class PointsHistoryResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    points: int
    reason: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PointsBalanceResponse(BaseModel):
    user_id: uuid.UUID
    total_points: int
    level: int


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: uuid.UUID
    first_name: str
    last_name: str
    total_points: int
    level: int


class RewardCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: RewardType
    points: int = Field(..., ge=0)
    description: str = ""
    is_active: bool = True


class RewardUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    type: Optional[RewardType] = None
    points: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class RewardResponse(BaseModel):
    id: uuid.UUID
    name: str
    type: RewardType
    points: int
    description: str
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RewardGrantRequest(BaseModel):
    user_id: uuid.UUID
    notes: Optional[str] = None


class RewardHistoryResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    reward_id: uuid.UUID
    reward_name: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
