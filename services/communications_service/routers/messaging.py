"""Channel and message endpoints."""

import uuid

from fastapi import APIRouter, Depends, status
from libs.auth.dependencies import get_caller
from libs.auth.models import CallerIdentity
from libs.db.session import get_async_db
from services.communications_service.schemas import (
    ChannelCreate,
    ChannelMemberAdd,
    ChannelResponse,
    MessageCreate,
    MessageResponse,
)
from services.communications_service.services import messaging_ops
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/channels", tags=["messaging"])


@router.get("", response_model=list[ChannelResponse])
async def list_channels(
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await messaging_ops.list_channels(db, caller)


@router.post("", response_model=ChannelResponse, status_code=status.HTTP_201_CREATED)
async def create_channel(
    body: ChannelCreate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await messaging_ops.create_channel(
        db, caller, name=body.name, type=body.type, members=body.members
    )


@router.post("/{channel_id}/members", response_model=ChannelResponse)
async def add_to_channel(
    channel_id: uuid.UUID,
    body: ChannelMemberAdd,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await messaging_ops.add_to_channel(
        db, caller, channel_id=channel_id, user_id=body.user_id
    )


@router.get("/{channel_id}/messages", response_model=list[MessageResponse])
async def list_messages(
    channel_id: uuid.UUID,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await messaging_ops.list_messages(db, caller, channel_id=channel_id)


@router.post(
    "/{channel_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    channel_id: uuid.UUID,
    body: MessageCreate,
    caller: CallerIdentity = Depends(get_caller),
    db: AsyncSession = Depends(get_async_db),
):
    return await messaging_ops.send_message(
        db, caller, channel_id=channel_id, content=body.content, type=body.type
    )
