"""Home screen slides and keyed app copy.

Public reads only ever see active rows; admins manage everything.
"""

import uuid
from typing import Optional

from libs.auth.models import CallerIdentity
from libs.auth.policy import Requirement, authorize
from libs.common.errors import Conflict, NotFound
from libs.common.logging import get_logger
from services.communications_service.models import ContentBlock, Slide
from services.communications_service.schemas import (
    ContentBlockCreate,
    ContentBlockUpdate,
    SlideCreate,
    SlideUpdate,
)
from services.members_service.services.audit_ops import record_admin_action
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Slides
# ---------------------------------------------------------------------------


async def list_slides(db: AsyncSession, *, include_inactive: bool = False):
    query = select(Slide).order_by(Slide.position, Slide.created_at)
    if not include_inactive:
        query = query.where(Slide.is_active.is_(True))
    result = await db.execute(query)
    return result.scalars().all()


async def list_all_slides(db: AsyncSession, caller: CallerIdentity):
    authorize(caller, Requirement.ADMIN)
    return await list_slides(db, include_inactive=True)


async def _get_slide_or_404(db: AsyncSession, slide_id: uuid.UUID) -> Slide:
    slide = await db.get(Slide, slide_id)
    if slide is None:
        raise NotFound("Slide not found")
    return slide


async def create_slide(
    db: AsyncSession, caller: CallerIdentity, data: SlideCreate
) -> Slide:
    authorize(caller, Requirement.ADMIN)
    slide = Slide(**data.model_dump())
    db.add(slide)
    await db.flush()
    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="create_slide",
        details=f"{slide.id} {slide.title}",
    )
    await db.commit()
    await db.refresh(slide)
    return slide


async def update_slide(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    slide_id: uuid.UUID,
    data: SlideUpdate,
) -> Slide:
    authorize(caller, Requirement.ADMIN)
    slide = await _get_slide_or_404(db, slide_id)
    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(slide, field, value)
    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="update_slide",
        details=f"{slide_id} {sorted(changes)}",
    )
    await db.commit()
    await db.refresh(slide)
    return slide


async def delete_slide(
    db: AsyncSession, caller: CallerIdentity, *, slide_id: uuid.UUID
) -> None:
    authorize(caller, Requirement.ADMIN)
    slide = await _get_slide_or_404(db, slide_id)
    await db.delete(slide)
    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="delete_slide",
        details=str(slide_id),
    )
    await db.commit()


# ---------------------------------------------------------------------------
# Content blocks
# ---------------------------------------------------------------------------


async def list_content(db: AsyncSession, *, include_inactive: bool = False):
    query = select(ContentBlock).order_by(ContentBlock.key)
    if not include_inactive:
        query = query.where(ContentBlock.is_active.is_(True))
    result = await db.execute(query)
    return result.scalars().all()


async def list_all_content(db: AsyncSession, caller: CallerIdentity):
    authorize(caller, Requirement.ADMIN)
    return await list_content(db, include_inactive=True)


async def get_content_by_key(db: AsyncSession, key: str) -> ContentBlock:
    """Public lookup; inactive blocks are reported as missing."""
    block: Optional[ContentBlock] = await db.scalar(
        select(ContentBlock).where(
            ContentBlock.key == key, ContentBlock.is_active.is_(True)
        )
    )
    if block is None:
        raise NotFound("Content not found")
    return block


async def _get_block_or_404(db: AsyncSession, block_id: uuid.UUID) -> ContentBlock:
    block = await db.get(ContentBlock, block_id)
    if block is None:
        raise NotFound("Content not found")
    return block


async def create_content(
    db: AsyncSession, caller: CallerIdentity, data: ContentBlockCreate
) -> ContentBlock:
    authorize(caller, Requirement.ADMIN)
    block = ContentBlock(**data.model_dump())
    db.add(block)
    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="create_content",
        details=data.key,
    )
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict(f"Content key '{data.key}' already exists")
    await db.refresh(block)
    logger.info("Created content block %s", data.key)
    return block


async def update_content(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    block_id: uuid.UUID,
    data: ContentBlockUpdate,
) -> ContentBlock:
    authorize(caller, Requirement.ADMIN)
    block = await _get_block_or_404(db, block_id)
    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(block, field, value)
    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="update_content",
        details=f"{block.key} {sorted(changes)}",
    )
    await db.commit()
    await db.refresh(block)
    return block


async def delete_content(
    db: AsyncSession, caller: CallerIdentity, *, block_id: uuid.UUID
) -> None:
    authorize(caller, Requirement.ADMIN)
    block = await _get_block_or_404(db, block_id)
    key = block.key
    await db.delete(block)
    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="delete_content",
        details=key,
    )
    await db.commit()
