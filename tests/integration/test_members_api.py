"""Profiles, points and rewards over HTTP."""

import pytest
from tests.conftest import bearer, create_member

MEMBERS = "/api/v1/members"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_profile_me_and_update(client, student):
    me = await client.get(f"{MEMBERS}/profiles/me", headers=bearer(student))
    assert me.status_code == 200
    assert me.json()["role"] == "student"

    updated = await client.patch(
        f"{MEMBERS}/profiles/me",
        json={"first_name": "Meera"},
        headers=bearer(student),
    )
    assert updated.status_code == 200
    assert updated.json()["first_name"] == "Meera"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_points_adjustment_feeds_leaderboard(client, db_session, admin, student):
    await create_member(db_session, total_points=40)

    adjusted = await client.post(
        f"{MEMBERS}/points/{student.user_id}",
        json={"points": 120, "reason": "Tournament win"},
        headers=bearer(admin),
    )
    assert adjusted.status_code == 200
    assert adjusted.json() == {
        "user_id": str(student.user_id),
        "total_points": 120,
        "level": 2,
    }

    board = await client.get(f"{MEMBERS}/leaderboard", headers=bearer(student))
    assert board.status_code == 200
    assert board.json()[0]["user_id"] == str(student.user_id)
    assert [row["rank"] for row in board.json()] == [1, 2]

    denied = await client.post(
        f"{MEMBERS}/points/{student.user_id}",
        json={"points": 500, "reason": "Self award"},
        headers=bearer(student),
    )
    assert denied.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_reward_catalog_and_grant(client, admin, student):
    created = await client.post(
        f"{MEMBERS}/rewards",
        json={"name": "Team Jersey", "type": "milestone", "points": 500},
        headers=bearer(admin),
    )
    assert created.status_code == 201
    reward_id = created.json()["id"]

    granted = await client.post(
        f"{MEMBERS}/rewards/{reward_id}/grant",
        json={"user_id": str(student.user_id), "notes": "Season MVP"},
        headers=bearer(admin),
    )
    assert granted.status_code == 201

    history = await client.get(f"{MEMBERS}/rewards/history", headers=bearer(admin))
    assert [h["reward_name"] for h in history.json()] == ["Team Jersey"]

    blocked = await client.delete(
        f"{MEMBERS}/rewards/{reward_id}", headers=bearer(admin)
    )
    assert blocked.status_code == 409

    retired = await client.patch(
        f"{MEMBERS}/rewards/{reward_id}",
        json={"is_active": False},
        headers=bearer(admin),
    )
    assert retired.json()["is_active"] is False
    visible = await client.get(f"{MEMBERS}/rewards", headers=bearer(student))
    assert visible.json() == []
