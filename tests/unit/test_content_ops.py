"""Unit tests for slides and content blocks."""

import uuid

import pytest
from libs.common.errors import Conflict, Forbidden, NotFound
from services.communications_service.models import ContentFormat
from services.communications_service.schemas import (
    ContentBlockCreate,
    ContentBlockUpdate,
    SlideCreate,
    SlideUpdate,
)
from services.communications_service.services.content_ops import (
    create_content,
    create_slide,
    delete_content,
    delete_slide,
    get_content_by_key,
    list_all_slides,
    list_content,
    list_slides,
    update_content,
    update_slide,
)
from services.members_service.models import AuditLog
from sqlalchemy import select

# ---------------------------------------------------------------------------
# Slides
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_public_slides_are_active_and_ordered(db_session, admin):
    await create_slide(db_session, admin, SlideCreate(title="Summer camp", position=2))
    await create_slide(db_session, admin, SlideCreate(title="Welcome", position=0))
    hidden = await create_slide(
        db_session, admin, SlideCreate(title="Old offer", position=1)
    )
    await update_slide(
        db_session, admin, slide_id=hidden.id, data=SlideUpdate(is_active=False)
    )

    assert [s.title for s in await list_slides(db_session)] == [
        "Welcome",
        "Summer camp",
    ]
    assert len(await list_all_slides(db_session, admin)) == 3


@pytest.mark.asyncio
@pytest.mark.unit
async def test_slide_writes_are_admin_only_and_audited(db_session, admin, coach):
    with pytest.raises(Forbidden):
        await create_slide(db_session, coach, SlideCreate(title="Nope"))
    with pytest.raises(Forbidden):
        await list_all_slides(db_session, coach)

    slide = await create_slide(db_session, admin, SlideCreate(title="Trials"))
    slide_id = slide.id
    await delete_slide(db_session, admin, slide_id=slide_id)
    assert await list_slides(db_session) == []

    with pytest.raises(NotFound):
        await delete_slide(db_session, admin, slide_id=slide_id)

    actions = await db_session.scalars(select(AuditLog.action))
    assert sorted(actions) == ["create_slide", "delete_slide"]


# ---------------------------------------------------------------------------
# Content blocks
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_content_lookup_by_key(db_session, admin):
    block = await create_content(
        db_session,
        admin,
        ContentBlockCreate(key="about", value="# PlayGram", format="markdown"),
    )
    assert block.format == ContentFormat.MARKDOWN

    found = await get_content_by_key(db_session, "about")
    assert found.value == "# PlayGram"

    await update_content(
        db_session,
        admin,
        block_id=block.id,
        data=ContentBlockUpdate(is_active=False),
    )
    with pytest.raises(NotFound):
        await get_content_by_key(db_session, "about")
    assert await list_content(db_session) == []
    assert len(await list_content(db_session, include_inactive=True)) == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_duplicate_content_key_is_conflict(db_session, admin, student):
    await create_content(db_session, admin, ContentBlockCreate(key="terms", value="v1"))
    with pytest.raises(Conflict):
        await create_content(
            db_session, admin, ContentBlockCreate(key="terms", value="v2")
        )
    with pytest.raises(Forbidden):
        await create_content(
            db_session, student, ContentBlockCreate(key="faq", value="?")
        )

    [block] = await list_content(db_session)
    assert block.value == "v1"


@pytest.mark.asyncio
@pytest.mark.unit
async def test_delete_missing_content_is_not_found(db_session, admin):
    with pytest.raises(NotFound):
        await delete_content(db_session, admin, block_id=uuid.uuid4())

    block = await create_content(
        db_session, admin, ContentBlockCreate(key="faq", value="Ask us")
    )
    await delete_content(db_session, admin, block_id=block.id)
    assert await list_content(db_session, include_inactive=True) == []
