"""Unit tests for channels, messages and platform settings."""

import uuid

import pytest
from libs.common.errors import Forbidden, NotFound
from services.communications_service.models import ChannelType
from services.communications_service.services.messaging_ops import (
    add_to_channel,
    create_channel,
    list_channels,
    list_messages,
    send_message,
)
from services.communications_service.services.settings_ops import (
    get_platform_settings,
    set_announcement,
    set_maintenance_mode,
)
from tests.conftest import create_member

# ---------------------------------------------------------------------------
# Channels
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_group_channel_membership(db_session, student):
    _, _, friend = await create_member(db_session)
    _, _, outsider = await create_member(db_session)

    channel = await create_channel(
        db_session,
        student,
        name="Under-12s",
        type=ChannelType.GROUP,
        members=[friend.user_id],
    )
    assert channel.has_member(student.user_id)
    assert channel.has_member(friend.user_id)

    await send_message(db_session, friend, channel_id=channel.id, content="Hi all")
    messages = await list_messages(db_session, student, channel_id=channel.id)
    assert [m.content for m in messages] == ["Hi all"]

    with pytest.raises(Forbidden):
        await send_message(db_session, outsider, channel_id=channel.id, content="?")
    with pytest.raises(Forbidden):
        await list_messages(db_session, outsider, channel_id=channel.id)
    assert await list_channels(db_session, outsider) == []

    await add_to_channel(
        db_session, student, channel_id=channel.id, user_id=outsider.user_id
    )
    assert [c.id for c in await list_channels(db_session, outsider)] == [channel.id]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_channel_members_must_exist(db_session, student):
    with pytest.raises(NotFound):
        await create_channel(
            db_session,
            student,
            name="Ghosts",
            type=ChannelType.DIRECT,
            members=[uuid.uuid4()],
        )


@pytest.mark.asyncio
@pytest.mark.unit
async def test_broadcasts_are_staff_only_and_visible_to_all(
    db_session, coach, student
):
    with pytest.raises(Forbidden):
        await create_channel(
            db_session,
            student,
            name="News",
            type=ChannelType.BROADCAST,
            members=[],
        )

    channel = await create_channel(
        db_session, coach, name="News", type=ChannelType.BROADCAST, members=[]
    )
    await send_message(
        db_session, coach, channel_id=channel.id, content="Ground closed Sunday"
    )

    assert [c.id for c in await list_channels(db_session, student)] == [channel.id]
    messages = await list_messages(db_session, student, channel_id=channel.id)
    assert messages[0].content == "Ground closed Sunday"
    with pytest.raises(Forbidden):
        await send_message(db_session, student, channel_id=channel.id, content="ok")


# ---------------------------------------------------------------------------
# Platform settings
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_platform_settings_defaults_and_updates(db_session, admin, student):
    defaults = await get_platform_settings(db_session)
    assert defaults.maintenance_mode is False
    assert defaults.announcement is None

    with pytest.raises(Forbidden):
        await set_maintenance_mode(db_session, student, enabled=True)

    await set_maintenance_mode(db_session, admin, enabled=True)
    await set_announcement(db_session, admin, announcement="Holiday on Friday")

    current = await get_platform_settings(db_session)
    assert current.maintenance_mode is True
    assert current.announcement == "Holiday on Friday"

    cleared = await set_announcement(db_session, admin, announcement="")
    assert cleared.announcement is None
