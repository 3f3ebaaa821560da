"""Unit tests for attendance session codes and marking."""

from datetime import date, timedelta

import pytest
from libs.common.datetime_utils import local_today, utc_now
from libs.common.errors import Conflict, Forbidden, NotFound
from services.attendance_service.models import AttendanceMethod
from services.attendance_service.services.attendance_ops import (
    CODE_ALPHABET,
    CODE_LENGTH,
    close_session,
    generate_session_code,
    get_attendance_stats,
    mark_attendance_by_coach_scan,
    mark_attendance_by_code,
    mark_attendance_manually,
)
from services.members_service.models import PointsHistory, Profile
from sqlalchemy import func, select
from tests.conftest import create_member
from tests.factories import (
    AttendanceSessionFactory,
    BatchFactory,
    EnrollmentFactory,
    SportFactory,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def _coached_batch(db, coach, *enrolled):
    sport = SportFactory.create()
    db.add(sport)
    batch = BatchFactory.create(sport_id=sport.id, coach_id=coach.user_id)
    db.add(batch)
    for caller in enrolled:
        db.add(
            EnrollmentFactory.create(
                user_id=caller.user_id, batch_id=batch.id, sport_id=sport.id
            )
        )
    await db.commit()
    return batch


async def _points(db, user_id) -> int:
    return await db.scalar(
        select(Profile.total_points).where(Profile.user_id == user_id)
    )


# ---------------------------------------------------------------------------
# Session codes
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_coach_generates_code_for_own_batch(db_session, coach):
    batch = await _coached_batch(db_session, coach)

    session = await generate_session_code(db_session, coach, batch_id=batch.id)

    assert len(session.code) == CODE_LENGTH
    assert set(session.code) <= set(CODE_ALPHABET)
    assert session.is_active is True
    assert session.date == local_today()


@pytest.mark.asyncio
@pytest.mark.unit
async def test_other_coach_and_admin_cannot_generate_code(db_session, coach, admin):
    batch = await _coached_batch(db_session, coach)
    _, _, other_coach = await create_member(db_session, coach.role)

    with pytest.raises(Forbidden):
        await generate_session_code(db_session, other_coach, batch_id=batch.id)
    with pytest.raises(Forbidden):
        await generate_session_code(db_session, admin, batch_id=batch.id)


# ---------------------------------------------------------------------------
# Check-in by code
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_check_in_by_code_awards_points_once(db_session, coach, student):
    batch = await _coached_batch(db_session, coach, student)
    session = await generate_session_code(db_session, coach, batch_id=batch.id)

    record = await mark_attendance_by_code(
        db_session, student, code=f"  {session.code.lower()} "
    )

    assert record.is_present is True
    assert record.method == AttendanceMethod.QR
    assert record.date == session.date
    assert await _points(db_session, student.user_id) == 10

    with pytest.raises(Conflict):
        await mark_attendance_by_code(db_session, student, code=session.code)
    assert await _points(db_session, student.user_id) == 10
    history = await db_session.scalar(
        select(func.count(PointsHistory.id)).where(
            PointsHistory.user_id == student.user_id
        )
    )
    assert history == 1


@pytest.mark.asyncio
@pytest.mark.unit
async def test_unknown_code_is_not_found(db_session, student):
    with pytest.raises(NotFound):
        await mark_attendance_by_code(db_session, student, code="NOPE2345")


@pytest.mark.asyncio
@pytest.mark.unit
async def test_expired_or_closed_code_is_rejected(db_session, coach, student):
    batch = await _coached_batch(db_session, coach, student)
    expired = AttendanceSessionFactory.create(
        batch_id=batch.id,
        coach_id=coach.user_id,
        code="EXPRD234",
        expires_at=utc_now() - timedelta(minutes=1),
    )
    db_session.add(expired)
    await db_session.commit()

    with pytest.raises(Conflict):
        await mark_attendance_by_code(db_session, student, code="EXPRD234")

    session = await generate_session_code(db_session, coach, batch_id=batch.id)
    await close_session(db_session, coach, session_id=session.id)
    with pytest.raises(Conflict):
        await mark_attendance_by_code(db_session, student, code=session.code)

    assert await _points(db_session, student.user_id) == 0


@pytest.mark.asyncio
@pytest.mark.unit
async def test_code_requires_enrollment_and_student_role(db_session, coach, student):
    batch = await _coached_batch(db_session, coach)
    session = await generate_session_code(db_session, coach, batch_id=batch.id)

    with pytest.raises(Forbidden):
        await mark_attendance_by_code(db_session, student, code=session.code)
    with pytest.raises(Forbidden):
        await mark_attendance_by_code(db_session, coach, code=session.code)


# ---------------------------------------------------------------------------
# Coach scan
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_coach_scans_student_qr(db_session, coach):
    _, profile, student = await create_member(db_session, first_name="Asha")
    await _coached_batch(db_session, coach, student)

    result = await mark_attendance_by_coach_scan(
        db_session, coach, student_qr=profile.session_id
    )

    assert result["student_user_id"] == student.user_id
    assert result["student_name"].startswith("Asha")
    assert result["total_points"] == 10
    assert result["sport_name"] == "Football"
    assert result["attendance"].date == local_today()


@pytest.mark.asyncio
@pytest.mark.unit
async def test_scan_of_student_outside_coach_batches(db_session, coach):
    _, profile, _ = await create_member(db_session)

    with pytest.raises(Forbidden):
        await mark_attendance_by_coach_scan(
            db_session, coach, student_qr=profile.session_id
        )
    with pytest.raises(NotFound):
        await mark_attendance_by_coach_scan(db_session, coach, student_qr="unknown")


# ---------------------------------------------------------------------------
# Manual marking
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_manual_corrections_keep_one_award_per_present_record(
    db_session, coach, student
):
    batch = await _coached_batch(db_session, coach, student)
    day = date(2026, 3, 2)

    async def mark(is_present):
        return await mark_attendance_manually(
            db_session,
            coach,
            student_id=student.user_id,
            batch_id=batch.id,
            on=day,
            is_present=is_present,
            notes="Roll call",
        )

    absent = await mark(False)
    assert absent.is_present is False
    assert await _points(db_session, student.user_id) == 0

    present = await mark(True)
    assert present.id == absent.id
    assert present.method == AttendanceMethod.MANUAL
    assert await _points(db_session, student.user_id) == 10

    await mark(True)
    assert await _points(db_session, student.user_id) == 10

    corrected = await mark(False)
    assert corrected.id == absent.id
    assert await _points(db_session, student.user_id) == 0

    await mark(True)
    assert await _points(db_session, student.user_id) == 10
    ledger = await db_session.execute(
        select(PointsHistory.points).where(PointsHistory.user_id == student.user_id)
    )
    assert sorted(ledger.scalars().all()) == [-10, 10, 10]


@pytest.mark.asyncio
@pytest.mark.unit
async def test_manual_marking_requires_enrollment(db_session, coach, student):
    batch = await _coached_batch(db_session, coach)

    with pytest.raises(NotFound):
        await mark_attendance_manually(
            db_session,
            coach,
            student_id=student.user_id,
            batch_id=batch.id,
            on=local_today(),
            is_present=True,
        )


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.unit
async def test_student_stats_are_scoped_to_self(db_session, coach, student):
    batch = await _coached_batch(db_session, coach, student)
    for offset, present in ((0, True), (1, False), (2, True), (3, True)):
        await mark_attendance_manually(
            db_session,
            coach,
            student_id=student.user_id,
            batch_id=batch.id,
            on=date(2026, 3, 2) + timedelta(days=offset),
            is_present=present,
        )

    stats = await get_attendance_stats(db_session, student)

    assert stats == {
        "total_sessions": 4,
        "present_sessions": 3,
        "absent_sessions": 1,
        "attendance_rate": 75.0,
    }
    _, _, other = await create_member(db_session)
    with pytest.raises(Forbidden):
        await get_attendance_stats(db_session, other, user_id=student.user_id)
