"""Attendance session codes and attendance marking.

One record per (student, batch, date). Marking a student present awards
ATTENDANCE_POINTS in the same transaction as the record write.
"""

import secrets
import uuid
from datetime import date, timedelta
from typing import Optional

from libs.auth.models import CallerIdentity
from libs.auth.policy import Requirement, authorize
from libs.common.config import get_settings
from libs.common.datetime_utils import as_utc, local_today, utc_now
from libs.common.errors import Conflict, Forbidden, NotFound
from libs.common.logging import get_logger
from services.academy_service.models import Batch, Enrollment, EnrollmentStatus, Sport
from services.academy_service.services.batch_ops import (
    authorize_batch_owner,
    get_batch_or_404,
)
from services.attendance_service.models import (
    AttendanceMethod,
    AttendanceRecord,
    AttendanceSession,
)
from services.members_service.models import Profile
from services.members_service.services.points_ops import add_points
from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

# No 0/O or 1/I so codes read back unambiguously
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 8
ATTENDANCE_REASON = "Attendance"
ATTENDANCE_CORRECTION_REASON = "Attendance corrected to absent"


def new_session_code() -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


def authorize_batch_coach(caller: CallerIdentity, batch: Batch) -> None:
    """Only the coach assigned to the batch."""
    authorize(caller, Requirement.COACH, owner_id=batch.coach_id)
    if batch.coach_id is None:
        raise Forbidden("Not the coach of this batch")


async def _has_active_enrollment(
    db: AsyncSession, user_id: uuid.UUID, batch_id: uuid.UUID
) -> bool:
    found = await db.scalar(
        select(Enrollment.id).where(
            Enrollment.user_id == user_id,
            Enrollment.batch_id == batch_id,
            Enrollment.status == EnrollmentStatus.ACTIVE,
        )
    )
    return found is not None


async def _get_record(
    db: AsyncSession, user_id: uuid.UUID, batch_id: uuid.UUID, on: date
) -> Optional[AttendanceRecord]:
    result = await db.execute(
        select(AttendanceRecord).where(
            AttendanceRecord.user_id == user_id,
            AttendanceRecord.batch_id == batch_id,
            AttendanceRecord.date == on,
        )
    )
    return result.scalar_one_or_none()


async def _record_present(
    db: AsyncSession,
    *,
    user_id: uuid.UUID,
    batch_id: uuid.UUID,
    on: date,
    method: AttendanceMethod,
) -> AttendanceRecord:
    """Insert a present record and award points, then commit."""
    if await _get_record(db, user_id, batch_id, on) is not None:
        raise Conflict("Attendance already marked for this date")

    record = AttendanceRecord(
        user_id=user_id,
        batch_id=batch_id,
        date=on,
        is_present=True,
        method=method,
        marked_at=utc_now(),
    )
    db.add(record)
    try:
        await db.flush()
        await add_points(
            db,
            user_id=user_id,
            points=get_settings().ATTENDANCE_POINTS,
            reason=ATTENDANCE_REASON,
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Attendance already marked for this date")

    await db.refresh(record)
    logger.info(
        "Marked user %s present in batch %s on %s (%s)",
        user_id,
        batch_id,
        on,
        method.value,
    )
    return record


# ---------------------------------------------------------------------------
# Session codes
# ---------------------------------------------------------------------------


async def generate_session_code(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    batch_id: uuid.UUID,
    on: Optional[date] = None,
) -> AttendanceSession:
    batch = await get_batch_or_404(db, batch_id)
    authorize_batch_coach(caller, batch)

    ttl = timedelta(minutes=get_settings().ATTENDANCE_CODE_TTL_MINUTES)
    session = AttendanceSession(
        batch_id=batch_id,
        coach_id=caller.user_id,
        date=on or local_today(),
        code=new_session_code(),
        is_active=True,
        expires_at=utc_now() + ttl,
    )
    db.add(session)
    await db.commit()
    await db.refresh(session)
    logger.info("Opened attendance session %s for batch %s", session.id, batch_id)
    return session


async def close_session(
    db: AsyncSession, caller: CallerIdentity, *, session_id: uuid.UUID
) -> AttendanceSession:
    session = await db.get(AttendanceSession, session_id)
    if session is None:
        raise NotFound("Attendance session not found")
    batch = await get_batch_or_404(db, session.batch_id)
    authorize_batch_owner(caller, batch)

    session.is_active = False
    await db.commit()
    await db.refresh(session)
    logger.info("Closed attendance session %s", session_id)
    return session


# ---------------------------------------------------------------------------
# Marking
# ---------------------------------------------------------------------------


async def mark_attendance_by_code(
    db: AsyncSession, caller: CallerIdentity, *, code: str
) -> AttendanceRecord:
    """Student check-in with the code their coach is showing."""
    authorize(caller, Requirement.STUDENT)

    result = await db.execute(
        select(AttendanceSession).where(AttendanceSession.code == code.strip().upper())
    )
    session = result.scalar_one_or_none()
    if session is None:
        raise NotFound("Invalid attendance code")
    if not session.is_active or as_utc(session.expires_at) <= utc_now():
        raise Conflict("Invalid or expired code")

    if not await _has_active_enrollment(db, caller.user_id, session.batch_id):
        raise Forbidden("Not enrolled in this batch")

    return await _record_present(
        db,
        user_id=caller.user_id,
        batch_id=session.batch_id,
        on=session.date,
        method=AttendanceMethod.QR,
    )


async def mark_attendance_by_coach_scan(
    db: AsyncSession, caller: CallerIdentity, *, student_qr: str
) -> dict:
    """Coach scans the student's QR code (their profile session id)."""
    authorize(caller, Requirement.COACH)

    result = await db.execute(select(Profile).where(Profile.session_id == student_qr))
    student = result.scalar_one_or_none()
    if student is None:
        raise NotFound("Student not found")

    result = await db.execute(
        select(Batch)
        .join(Enrollment, Enrollment.batch_id == Batch.id)
        .where(
            Batch.coach_id == caller.user_id,
            Batch.is_active.is_(True),
            Enrollment.user_id == student.user_id,
            Enrollment.status == EnrollmentStatus.ACTIVE,
        )
        .order_by(Batch.name)
        .limit(1)
    )
    batch = result.scalar_one_or_none()
    if batch is None:
        raise Forbidden("Student not enrolled in any of your active batches")

    batch_name = batch.name
    sport = await db.get(Sport, batch.sport_id)
    sport_name = sport.name if sport else None

    record = await _record_present(
        db,
        user_id=student.user_id,
        batch_id=batch.id,
        on=local_today(),
        method=AttendanceMethod.QR,
    )
    await db.refresh(student)
    return {
        "attendance": record,
        "student_name": student.full_name,
        "student_user_id": student.user_id,
        "total_points": student.total_points,
        "batch_name": batch_name,
        "sport_name": sport_name,
    }


async def mark_attendance_manually(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    student_id: uuid.UUID,
    batch_id: uuid.UUID,
    on: date,
    is_present: bool,
    notes: Optional[str] = None,
) -> AttendanceRecord:
    """Create or correct a record.

    Points follow the present flag: awarded when a record becomes present and
    taken back when a present record is corrected to absent.
    """
    batch = await get_batch_or_404(db, batch_id)
    authorize_batch_coach(caller, batch)

    enrolled = await db.scalar(
        select(Enrollment.id).where(
            Enrollment.user_id == student_id, Enrollment.batch_id == batch_id
        )
    )
    if enrolled is None:
        raise NotFound("Student not enrolled in this batch")

    record = await _get_record(db, student_id, batch_id, on)
    was_present = record.is_present if record is not None else False
    if record is None:
        record = AttendanceRecord(user_id=student_id, batch_id=batch_id, date=on)
        db.add(record)

    record.is_present = is_present
    record.method = AttendanceMethod.MANUAL
    record.notes = notes
    record.marked_at = utc_now()

    try:
        await db.flush()
        points = get_settings().ATTENDANCE_POINTS
        if is_present and not was_present:
            await add_points(
                db, user_id=student_id, points=points, reason=ATTENDANCE_REASON
            )
        elif was_present and not is_present:
            await add_points(
                db,
                user_id=student_id,
                points=-points,
                reason=ATTENDANCE_CORRECTION_REASON,
            )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Attendance was marked concurrently; retry")

    await db.refresh(record)
    logger.info(
        "Manual attendance for %s in batch %s on %s: present=%s",
        student_id,
        batch_id,
        on,
        is_present,
    )
    return record


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def _detail(record: AttendanceRecord, profile: Optional[Profile], batch_name) -> dict:
    data = {c.key: getattr(record, c.key) for c in AttendanceRecord.__table__.columns}
    data["student_name"] = profile.full_name if profile else None
    data["batch_name"] = batch_name
    return data


def _detail_query():
    return (
        select(AttendanceRecord, Profile, Batch.name)
        .join(Batch, Batch.id == AttendanceRecord.batch_id)
        .outerjoin(Profile, Profile.user_id == AttendanceRecord.user_id)
    )


async def get_batch_attendance(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    batch_id: uuid.UUID,
    on: Optional[date] = None,
) -> list[dict]:
    batch = await get_batch_or_404(db, batch_id)
    authorize_batch_owner(caller, batch)

    query = _detail_query().where(AttendanceRecord.batch_id == batch_id)
    if on is not None:
        query = query.where(AttendanceRecord.date == on)
    result = await db.execute(query.order_by(AttendanceRecord.date.desc()))
    return [_detail(r, p, name) for r, p, name in result.all()]


async def _coach_batch_ids(db: AsyncSession, coach_id: uuid.UUID) -> list[uuid.UUID]:
    result = await db.execute(select(Batch.id).where(Batch.coach_id == coach_id))
    return list(result.scalars().all())


async def get_student_attendance(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    user_id: uuid.UUID,
    batch_id: Optional[uuid.UUID] = None,
) -> list[dict]:
    """Self, admin, or a coach (restricted to their own batches)."""
    authorize(caller, Requirement.ANY_AUTHENTICATED)
    query = _detail_query().where(AttendanceRecord.user_id == user_id)

    if caller.user_id != user_id and not caller.is_admin:
        authorize(caller, Requirement.COACH)
        owned = await _coach_batch_ids(db, caller.user_id)
        if batch_id is not None and batch_id not in owned:
            raise Forbidden("Not the coach of this batch")
        query = query.where(AttendanceRecord.batch_id.in_(owned))

    if batch_id is not None:
        query = query.where(AttendanceRecord.batch_id == batch_id)
    result = await db.execute(query.order_by(AttendanceRecord.date.desc()))
    return [_detail(r, p, name) for r, p, name in result.all()]


async def get_attendance_stats(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    batch_id: Optional[uuid.UUID] = None,
    user_id: Optional[uuid.UUID] = None,
) -> dict:
    authorize(caller, Requirement.ANY_AUTHENTICATED)
    query = select(
        func.count(AttendanceRecord.id),
        func.coalesce(
            func.sum(case((AttendanceRecord.is_present.is_(True), 1), else_=0)), 0
        ),
    )

    if caller.is_admin:
        pass
    elif caller.is_coach:
        owned = await _coach_batch_ids(db, caller.user_id)
        if batch_id is not None and batch_id not in owned:
            raise Forbidden("Not the coach of this batch")
        query = query.where(AttendanceRecord.batch_id.in_(owned))
    else:
        # Students (and profile-less callers) only see their own numbers
        if user_id is not None and user_id != caller.user_id:
            raise Forbidden("Not authorized to access this resource")
        user_id = caller.user_id

    if batch_id is not None:
        query = query.where(AttendanceRecord.batch_id == batch_id)
    if user_id is not None:
        query = query.where(AttendanceRecord.user_id == user_id)

    total, present = (await db.execute(query)).one()
    rate = round(present / total * 100, 2) if total else 0.0
    return {
        "total_sessions": total,
        "present_sessions": present,
        "absent_sessions": total - present,
        "attendance_rate": rate,
    }


async def list_attendance(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    batch_id: Optional[uuid.UUID] = None,
    user_id: Optional[uuid.UUID] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    is_present: Optional[bool] = None,
) -> list[dict]:
    authorize(caller, Requirement.ADMIN)
    query = _detail_query()
    if batch_id is not None:
        query = query.where(AttendanceRecord.batch_id == batch_id)
    if user_id is not None:
        query = query.where(AttendanceRecord.user_id == user_id)
    if start_date is not None:
        query = query.where(AttendanceRecord.date >= start_date)
    if end_date is not None:
        query = query.where(AttendanceRecord.date <= end_date)
    if is_present is not None:
        query = query.where(AttendanceRecord.is_present.is_(is_present))
    result = await db.execute(query.order_by(AttendanceRecord.date.desc()))
    return [_detail(r, p, name) for r, p, name in result.all()]
