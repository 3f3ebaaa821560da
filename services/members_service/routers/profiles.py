"""Self-service profile endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_caller
from libs.auth.models import CallerIdentity
from libs.db.session import get_async_db
from services.members_service.schemas import (
    PhoneCheckRequest,
    PhoneCheckResponse,
    ProfileCreate,
    ProfileResponse,
    ProfileSetupStatus,
    ProfileUpdate,
)
from services.members_service.services import profile_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.post("", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(
    body: ProfileCreate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    """Complete onboarding by creating the caller's profile."""
    return await profile_ops.create_profile(db, caller, body)


@router.get("/me", response_model=Optional[ProfileResponse])
async def get_my_profile(
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await profile_ops.get_current_profile(db, caller)


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    body: ProfileUpdate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await profile_ops.update_profile(db, caller, body)


@router.get("/me/setup-status", response_model=ProfileSetupStatus)
async def get_setup_status(
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    needs_setup = await profile_ops.needs_profile_setup(db, caller)
    return ProfileSetupStatus(needs_profile_setup=needs_setup)


@router.post("/phone-check", response_model=PhoneCheckResponse)
async def check_phone(
    body: PhoneCheckRequest,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    """Whether a phone number is already attached to some profile."""
    exists = await profile_ops.check_phone_duplicate(db, caller, phone=body.phone)
    return PhoneCheckResponse(exists=exists)
