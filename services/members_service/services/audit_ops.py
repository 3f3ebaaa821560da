"""Admin audit trail."""

import uuid
from typing import Optional

from libs.auth.models import CallerIdentity
from libs.auth.policy import Requirement, authorize
from libs.common.config import get_settings
from libs.common.logging import get_logger
from services.members_service.models import AuditLog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


def record_admin_action(
    db: AsyncSession,
    *,
    admin_user_id: uuid.UUID,
    action: str,
    details: Optional[str] = None,
) -> AuditLog:
    """Stage an audit row in the caller's transaction (no commit)."""
    entry = AuditLog(admin_user_id=admin_user_id, action=action, details=details)
    db.add(entry)
    logger.info("Audit: %s by %s (%s)", action, admin_user_id, details or "-")
    return entry


async def get_audit_logs(
    db: AsyncSession, caller: CallerIdentity, *, limit: Optional[int] = None
) -> list[AuditLog]:
    authorize(caller, Requirement.ADMIN)
    limit = limit or get_settings().AUDIT_LOG_LIMIT
    result = await db.execute(
        select(AuditLog).order_by(AuditLog.created_at.desc()).limit(limit)
    )
    return list(result.scalars().all())
