"""Unit tests for the points ledger and leaderboard."""

import uuid

import pytest
from libs.auth.models import Role
from libs.common.errors import Forbidden, NotFound
from services.members_service.models import AuditLog, Profile
from services.members_service.services.points_ops import (
    add_points,
    adjust_points,
    get_leaderboard,
    get_points_history,
    level_for_points,
)
from sqlalchemy import select
from tests.conftest import create_member


@pytest.mark.unit
@pytest.mark.parametrize(
    "total,level",
    [(0, 1), (99, 1), (100, 2), (250, 3), (-20, 1)],
)
def test_level_for_points(total, level):
    assert level_for_points(total) == level


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_points_updates_total_level_and_history(db_session, student):
    await add_points(db_session, user_id=student.user_id, points=95, reason="Bonus")
    profile = await add_points(
        db_session, user_id=student.user_id, points=10, reason="Attendance"
    )
    await db_session.commit()

    assert profile.total_points == 105
    assert profile.level == 2
    history = await get_points_history(db_session, student, user_id=student.user_id)
    assert sorted(h.points for h in history) == [10, 95]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_add_points_without_profile(db_session):
    with pytest.raises(NotFound):
        await add_points(db_session, user_id=uuid.uuid4(), points=10, reason="x")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_adjust_points_is_admin_only_and_audited(db_session, admin, student):
    with pytest.raises(Forbidden):
        await adjust_points(
            db_session, student, user_id=student.user_id, points=50, reason="Cheat"
        )

    profile = await adjust_points(
        db_session, admin, user_id=student.user_id, points=-5, reason="Late"
    )

    assert profile.total_points == -5
    assert profile.level == 1
    audit = await db_session.scalar(
        select(AuditLog).where(AuditLog.action == "adjust_points")
    )
    assert "points=-5" in audit.details


@pytest.mark.asyncio
@pytest.mark.unit
async def test_leaderboard_ranks_active_students(db_session, admin):
    _, _, low = await create_member(db_session, total_points=20)
    _, _, high = await create_member(db_session, total_points=300)
    await create_member(db_session, total_points=900, is_active=False)
    await create_member(db_session, Role.COACH, total_points=1000)

    board = await get_leaderboard(db_session, admin)

    assert [row["user_id"] for row in board] == [high.user_id, low.user_id]
    assert [row["rank"] for row in board] == [1, 2]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_points_history_is_private(db_session, student):
    _, _, other = await create_member(db_session)

    with pytest.raises(Forbidden):
        await get_points_history(db_session, other, user_id=student.user_id)

    profile = await db_session.scalar(
        select(Profile).where(Profile.user_id == student.user_id)
    )
    assert profile.total_points == 0
