"""Sports, batches and enrollments over HTTP."""

import pytest
from tests.conftest import bearer, create_member
from tests.factories import BatchFactory, SportFactory

ACADEMY = "/api/v1/academy"


async def _batch(db, **overrides):
    sport = SportFactory.create()
    db.add(sport)
    batch = BatchFactory.create(sport_id=sport.id, **overrides)
    db.add(batch)
    await db.commit()
    return batch


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_creates_sport_and_batch(client, admin, coach):
    sport = await client.post(
        f"{ACADEMY}/sports",
        json={
            "name": "Cricket",
            "max_students_per_batch": 15,
            "price_per_month": 2000,
        },
        headers=bearer(admin),
    )
    assert sport.status_code == 201
    sport_id = sport.json()["id"]

    batch = await client.post(
        f"{ACADEMY}/batches",
        json={
            "name": "Weekend Nets",
            "sport_id": sport_id,
            "coach_id": str(coach.user_id),
            "schedule": {
                "days": ["saturday", "sunday"],
                "start_time": "06:30",
                "end_time": "08:00",
            },
            "max_students": 12,
            "age_group": "13-16",
            "level": "intermediate",
            "venue": "North Ground",
            "start_date": "2026-04-01",
        },
        headers=bearer(admin),
    )
    assert batch.status_code == 201
    assert batch.json()["current_students"] == 0

    public = await client.get(f"{ACADEMY}/sports")
    assert [s["name"] for s in public.json()] == ["Cricket"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_student_cannot_create_sport(client, student):
    response = await client.post(
        f"{ACADEMY}/sports",
        json={"name": "Chess", "max_students_per_batch": 8, "price_per_month": 500},
        headers=bearer(student),
    )
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.integration
async def test_apply_flow(client, db_session, student):
    batch = await _batch(db_session, max_students=1)
    batch_id = str(batch.id)

    applied = await client.post(
        f"{ACADEMY}/enrollments", json={"batch_id": batch_id}, headers=bearer(student)
    )
    assert applied.status_code == 201
    assert applied.json()["status"] == "active"
    assert applied.json()["payment_status"] == "pending"

    again = await client.post(
        f"{ACADEMY}/enrollments", json={"batch_id": batch_id}, headers=bearer(student)
    )
    assert again.status_code == 409
    assert again.json()["error"] == "AlreadyEnrolled"

    _, _, late = await create_member(db_session)
    full = await client.post(
        f"{ACADEMY}/enrollments", json={"batch_id": batch_id}, headers=bearer(late)
    )
    assert full.status_code == 409
    assert full.json()["error"] == "BatchFull"

    mine = await client.get(f"{ACADEMY}/enrollments/me", headers=bearer(student))
    assert mine.status_code == 200
    assert mine.json()[0]["batch"]["id"] == batch_id


@pytest.mark.asyncio
@pytest.mark.integration
async def test_enrollment_status_endpoint(client, db_session, admin, student):
    batch = await _batch(db_session)
    applied = await client.post(
        f"{ACADEMY}/enrollments",
        json={"batch_id": str(batch.id)},
        headers=bearer(student),
    )
    enrollment_id = applied.json()["id"]

    done = await client.put(
        f"{ACADEMY}/enrollments/{enrollment_id}/status",
        json={"status": "completed"},
        headers=bearer(admin),
    )
    assert done.status_code == 200

    back = await client.put(
        f"{ACADEMY}/enrollments/{enrollment_id}/status",
        json={"status": "active"},
        headers=bearer(admin),
    )
    assert back.status_code == 409
    assert back.json()["error"] == "InvalidTransition"
