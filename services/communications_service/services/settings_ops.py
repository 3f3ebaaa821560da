"""Platform-wide settings (maintenance mode, announcement banner)."""

from typing import Optional

from libs.auth.models import CallerIdentity
from libs.auth.policy import Requirement, authorize
from libs.common.logging import get_logger
from services.communications_service.models import PlatformSettings
from services.members_service.services.audit_ops import record_admin_action
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

SETTINGS_ROW_ID = 1


async def get_platform_settings(db: AsyncSession) -> PlatformSettings:
    """Public; returns defaults when nothing has been saved yet."""
    row = await db.get(PlatformSettings, SETTINGS_ROW_ID)
    if row is None:
        return PlatformSettings(
            id=SETTINGS_ROW_ID, maintenance_mode=False, announcement=None
        )
    return row


async def _upsert(db: AsyncSession, **values) -> PlatformSettings:
    row = await db.get(PlatformSettings, SETTINGS_ROW_ID)
    if row is None:
        row = PlatformSettings(id=SETTINGS_ROW_ID, maintenance_mode=False)
        db.add(row)
    for field, value in values.items():
        setattr(row, field, value)
    return row


async def set_maintenance_mode(
    db: AsyncSession, caller: CallerIdentity, *, enabled: bool
) -> PlatformSettings:
    authorize(caller, Requirement.ADMIN)
    row = await _upsert(db, maintenance_mode=enabled)
    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="set_maintenance_mode",
        details=f"enabled={enabled}",
    )
    await db.commit()
    await db.refresh(row)
    logger.warning("Maintenance mode %s", "enabled" if enabled else "disabled")
    return row


async def set_announcement(
    db: AsyncSession, caller: CallerIdentity, *, announcement: Optional[str]
) -> PlatformSettings:
    authorize(caller, Requirement.ADMIN)
    row = await _upsert(db, announcement=announcement or None)
    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="set_announcement",
        details=announcement or "(cleared)",
    )
    await db.commit()
    await db.refresh(row)
    return row
