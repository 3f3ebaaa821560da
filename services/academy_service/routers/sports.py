"""Sports catalog endpoints."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_caller
from libs.auth.models import CallerIdentity
from libs.db.session import get_async_db
from services.academy_service.schemas import (
    SportCreate,
    SportDetailResponse,
    SportResponse,
    SportUpdate,
)
from services.academy_service.services import sport_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/sports", tags=["sports"])


@router.get("", response_model=list[SportResponse])
async def list_active_sports(db: AsyncSession = Depends(get_async_db)):
    """Public list of sports currently offered."""
    return await sport_ops.get_active_sports(db)


@router.get("/all", response_model=list[SportResponse])
async def list_all_sports(
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await sport_ops.get_all_sports(db, caller)


@router.get("/{sport_id}", response_model=SportDetailResponse)
async def get_sport_details(
    sport_id: uuid.UUID, db: AsyncSession = Depends(get_async_db)
):
    return await sport_ops.get_sport_details(db, sport_id)


@router.post("", response_model=SportResponse, status_code=status.HTTP_201_CREATED)
async def create_sport(
    body: SportCreate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await sport_ops.create_sport(db, caller, body)


@router.patch("/{sport_id}", response_model=SportResponse)
async def update_sport(
    sport_id: uuid.UUID,
    body: SportUpdate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await sport_ops.update_sport(db, caller, sport_id=sport_id, data=body)


@router.delete("/{sport_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sport(
    sport_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    await sport_ops.delete_sport(db, caller, sport_id=sport_id)
