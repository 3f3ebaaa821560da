"""Channels and in-app messages."""

import uuid

from libs.auth.models import CallerIdentity
from libs.auth.policy import Requirement, authorize
from libs.common.errors import Forbidden, NotFound
from libs.common.logging import get_logger
from services.communications_service.models import (
    Channel,
    ChannelType,
    Message,
    MessageType,
)
from services.members_service.models import User
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def get_channel_or_404(db: AsyncSession, channel_id: uuid.UUID) -> Channel:
    channel = await db.get(Channel, channel_id)
    if channel is None:
        raise NotFound("Channel not found")
    return channel


async def _require_users(db: AsyncSession, user_ids: set[uuid.UUID]) -> None:
    if not user_ids:
        return
    result = await db.execute(select(User.id).where(User.id.in_(user_ids)))
    missing = user_ids - set(result.scalars().all())
    if missing:
        raise NotFound(f"User {next(iter(missing))} not found")


def _require_member(caller: CallerIdentity, channel: Channel) -> None:
    if not channel.has_member(caller.user_id):
        raise Forbidden("Not a member of this channel")


async def create_channel(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    name: str,
    type: ChannelType,
    members: list[uuid.UUID],
) -> Channel:
    if type == ChannelType.BROADCAST:
        authorize(caller, Requirement.COACH_OR_ADMIN)
    else:
        authorize(caller, Requirement.ANY_AUTHENTICATED)

    member_ids = set(members) | {caller.user_id}
    await _require_users(db, member_ids)

    channel = Channel(
        name=name,
        type=type,
        members=sorted(str(uid) for uid in member_ids),
        created_by=caller.user_id,
    )
    db.add(channel)
    await db.commit()
    await db.refresh(channel)
    logger.info("Created %s channel %s", type.value, channel.id)
    return channel


async def add_to_channel(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    channel_id: uuid.UUID,
    user_id: uuid.UUID,
) -> Channel:
    channel = await get_channel_or_404(db, channel_id)
    if not caller.is_admin:
        _require_member(caller, channel)
    await _require_users(db, {user_id})

    if not channel.has_member(user_id):
        # Reassign so the JSON column is flagged dirty
        channel.members = [*channel.members, str(user_id)]
        await db.commit()
        await db.refresh(channel)
    return channel


async def send_message(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    channel_id: uuid.UUID,
    content: str,
    type: MessageType = MessageType.TEXT,
) -> Message:
    channel = await get_channel_or_404(db, channel_id)
    if channel.type == ChannelType.BROADCAST:
        authorize(caller, Requirement.COACH_OR_ADMIN)
    else:
        _require_member(caller, channel)

    message = Message(
        channel_id=channel_id, sender_id=caller.user_id, content=content, type=type
    )
    db.add(message)
    await db.commit()
    await db.refresh(message)
    return message


async def list_messages(
    db: AsyncSession, caller: CallerIdentity, *, channel_id: uuid.UUID
) -> list[Message]:
    authorize(caller, Requirement.ANY_AUTHENTICATED)
    channel = await get_channel_or_404(db, channel_id)
    if channel.type != ChannelType.BROADCAST:
        _require_member(caller, channel)

    result = await db.execute(
        select(Message)
        .where(Message.channel_id == channel_id)
        .order_by(Message.created_at)
    )
    return list(result.scalars().all())


async def list_channels(db: AsyncSession, caller: CallerIdentity) -> list[Channel]:
    """Channels the caller belongs to, plus every broadcast channel."""
    authorize(caller, Requirement.ANY_AUTHENTICATED)
    result = await db.execute(select(Channel).order_by(Channel.created_at.desc()))
    # JSON membership filtering differs per backend; channel counts are small
    return [
        channel
        for channel in result.scalars().all()
        if channel.type == ChannelType.BROADCAST or channel.has_member(caller.user_id)
    ]
