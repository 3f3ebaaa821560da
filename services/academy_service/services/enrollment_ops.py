"""Enrollment state machine.

Status:          active <-> inactive, active|inactive -> completed (terminal)
Payment status:  pending -> paid | overdue, overdue -> paid (terminal)

Every transition that touches seats runs the seat UPDATE and the enrollment
write in one transaction; a failure rolls both back.
"""

import uuid
from typing import Optional

from libs.auth.models import CallerIdentity
from libs.auth.policy import Requirement, authorize, require_profile
from libs.common.errors import (
    AlreadyEnrolled,
    BatchFull,
    Conflict,
    InvalidTransition,
    NotFound,
)
from libs.common.logging import get_logger
from services.academy_service.models import (
    Batch,
    Enrollment,
    EnrollmentStatus,
    PaymentStatus,
    Sport,
)
from services.academy_service.services.batch_ops import (
    claim_seat,
    get_batch_or_404,
    release_seat,
)
from services.attendance_service.models import AttendanceRecord
from services.members_service.models import Profile
from sqlalchemy import case, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

ENROLLMENT_TRANSITIONS: dict[EnrollmentStatus, set[EnrollmentStatus]] = {
    EnrollmentStatus.ACTIVE: {EnrollmentStatus.INACTIVE, EnrollmentStatus.COMPLETED},
    EnrollmentStatus.INACTIVE: {EnrollmentStatus.ACTIVE, EnrollmentStatus.COMPLETED},
    EnrollmentStatus.COMPLETED: set(),
}

PAYMENT_STATUS_TRANSITIONS: dict[PaymentStatus, set[PaymentStatus]] = {
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.OVERDUE},
    PaymentStatus.OVERDUE: {PaymentStatus.PAID},
    PaymentStatus.PAID: set(),
}


async def get_enrollment_or_404(
    db: AsyncSession, enrollment_id: uuid.UUID
) -> Enrollment:
    enrollment = await db.get(Enrollment, enrollment_id)
    if enrollment is None:
        raise NotFound("Enrollment not found")
    return enrollment


# ---------------------------------------------------------------------------
# Apply
# ---------------------------------------------------------------------------


async def apply_for_batch(
    db: AsyncSession, caller: CallerIdentity, *, batch_id: uuid.UUID
) -> Enrollment:
    """Enroll the caller in a batch, claiming one seat atomically."""
    authorize(caller, Requirement.ANY_AUTHENTICATED)
    require_profile(caller)

    batch = await get_batch_or_404(db, batch_id)
    if not batch.is_active:
        raise Conflict("Batch is not accepting enrollments")

    existing = await db.scalar(
        select(Enrollment.id).where(
            Enrollment.user_id == caller.user_id, Enrollment.batch_id == batch_id
        )
    )
    if existing is not None:
        raise AlreadyEnrolled()

    sport_id = batch.sport_id
    if not await claim_seat(db, batch_id):
        await db.rollback()
        logger.warning("Batch %s full; rejected user %s", batch_id, caller.user_id)
        raise BatchFull()

    enrollment = Enrollment(
        user_id=caller.user_id,
        batch_id=batch_id,
        sport_id=sport_id,
        status=EnrollmentStatus.ACTIVE,
        payment_status=PaymentStatus.PENDING,
    )
    db.add(enrollment)
    try:
        await db.commit()
    except IntegrityError:
        # A concurrent apply by the same user won the unique constraint;
        # rolling back also returns the seat claimed above.
        await db.rollback()
        raise AlreadyEnrolled()

    await db.refresh(enrollment)
    logger.info("User %s enrolled in batch %s", caller.user_id, batch_id)
    return enrollment


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


async def update_enrollment_status(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    enrollment_id: uuid.UUID,
    status: EnrollmentStatus,
) -> Enrollment:
    authorize(caller, Requirement.ADMIN)
    enrollment = await get_enrollment_or_404(db, enrollment_id)
    current = enrollment.status

    if status not in ENROLLMENT_TRANSITIONS[current]:
        raise InvalidTransition("enrollment", current.value, status.value)

    if current == EnrollmentStatus.ACTIVE:
        await release_seat(db, enrollment.batch_id)
    elif status == EnrollmentStatus.ACTIVE:
        if not await claim_seat(db, enrollment.batch_id):
            await db.rollback()
            raise BatchFull()

    result = await db.execute(
        update(Enrollment)
        .where(Enrollment.id == enrollment_id, Enrollment.status == current)
        .values(status=status)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise Conflict("Enrollment was modified concurrently")

    await db.commit()
    await db.refresh(enrollment)
    logger.info(
        "Enrollment %s: %s -> %s", enrollment_id, current.value, status.value
    )
    return enrollment


async def update_enrollment_payment_status(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    enrollment_id: uuid.UUID,
    payment_status: PaymentStatus,
) -> Enrollment:
    authorize(caller, Requirement.ADMIN)
    enrollment = await get_enrollment_or_404(db, enrollment_id)
    current = enrollment.payment_status

    if payment_status not in PAYMENT_STATUS_TRANSITIONS[current]:
        raise InvalidTransition(
            "enrollment payment", current.value, payment_status.value
        )

    enrollment.payment_status = payment_status
    await db.commit()
    await db.refresh(enrollment)
    logger.info(
        "Enrollment %s payment: %s -> %s",
        enrollment_id,
        current.value,
        payment_status.value,
    )
    return enrollment


async def mark_enrollment_paid(db: AsyncSession, enrollment_id: uuid.UUID) -> None:
    """Secondary effect of a completed payment; caller owns the transaction."""
    await db.execute(
        update(Enrollment)
        .where(Enrollment.id == enrollment_id)
        .values(payment_status=PaymentStatus.PAID)
    )


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def _attendance_percent(
    db: AsyncSession, user_id: uuid.UUID, batch_id: uuid.UUID
) -> int:
    total, present = (
        await db.execute(
            select(
                func.count(AttendanceRecord.id),
                func.coalesce(
                    func.sum(case((AttendanceRecord.is_present.is_(True), 1), else_=0)),
                    0,
                ),
            ).where(
                AttendanceRecord.user_id == user_id,
                AttendanceRecord.batch_id == batch_id,
            )
        )
    ).one()
    if not total:
        return 0
    return round(present / total * 100)


async def get_user_enrollments(
    db: AsyncSession, caller: CallerIdentity
) -> list[dict]:
    """The caller's enrollments with batch, sport, coach and attendance."""
    authorize(caller, Requirement.ANY_AUTHENTICATED)
    result = await db.execute(
        select(Enrollment, Batch, Sport)
        .join(Batch, Batch.id == Enrollment.batch_id)
        .join(Sport, Sport.id == Enrollment.sport_id)
        .where(Enrollment.user_id == caller.user_id)
        .order_by(Enrollment.enrolled_at.desc())
    )
    rows = result.all()

    coach_ids = {batch.coach_id for _, batch, _ in rows if batch.coach_id}
    coach_names = {}
    if coach_ids:
        coaches = await db.execute(
            select(Profile).where(Profile.user_id.in_(coach_ids))
        )
        coach_names = {p.user_id: p.full_name for p in coaches.scalars().all()}

    enriched = []
    for enrollment, batch, sport in rows:
        data = {c.key: getattr(enrollment, c.key) for c in Enrollment.__table__.columns}
        data["batch"] = batch
        data["sport"] = sport
        data["coach_name"] = coach_names.get(batch.coach_id)
        data["attendance_percent"] = await _attendance_percent(
            db, enrollment.user_id, enrollment.batch_id
        )
        enriched.append(data)
    return enriched


async def get_enrollment(
    db: AsyncSession, caller: CallerIdentity, *, enrollment_id: uuid.UUID
) -> Enrollment:
    enrollment = await get_enrollment_or_404(db, enrollment_id)
    authorize(caller, Requirement.SELF_OR_ADMIN, owner_id=enrollment.user_id)
    return enrollment


async def list_enrollments(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    user_id: Optional[uuid.UUID] = None,
    batch_id: Optional[uuid.UUID] = None,
    status: Optional[EnrollmentStatus] = None,
) -> list[Enrollment]:
    authorize(caller, Requirement.ADMIN)
    query = select(Enrollment)
    if user_id is not None:
        query = query.where(Enrollment.user_id == user_id)
    if batch_id is not None:
        query = query.where(Enrollment.batch_id == batch_id)
    if status is not None:
        query = query.where(Enrollment.status == status)
    result = await db.execute(query.order_by(Enrollment.enrolled_at.desc()))
    return list(result.scalars().all())
