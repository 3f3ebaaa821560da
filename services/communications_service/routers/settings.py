"""Platform settings endpoints."""

from fastapi import APIRouter, Depends
from libs.auth.dependencies import get_caller
from libs.auth.models import CallerIdentity
from libs.db.session import get_async_db
from services.communications_service.schemas import (
    AnnouncementUpdate,
    MaintenanceModeUpdate,
    PlatformSettingsResponse,
)
from services.communications_service.services import settings_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=PlatformSettingsResponse)
async def get_platform_settings(db: AsyncSession = Depends(get_async_db)):
    """Public: the apps poll this before showing the login screen."""
    return await settings_ops.get_platform_settings(db)


@router.put("/maintenance", response_model=PlatformSettingsResponse)
async def set_maintenance_mode(
    body: MaintenanceModeUpdate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await settings_ops.set_maintenance_mode(db, caller, enabled=body.enabled)


@router.put("/announcement", response_model=PlatformSettingsResponse)
async def set_announcement(
    body: AnnouncementUpdate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await settings_ops.set_announcement(
        db, caller, announcement=body.announcement
    )
