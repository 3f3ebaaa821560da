"""Batch management.

Seat accounting lives in ``claim_seat``/``release_seat``: both are single
conditional UPDATEs so ``0 <= current_students <= max_students`` holds no
matter how many callers race.
"""

import uuid
from datetime import datetime
from typing import Optional

from libs.auth.models import CallerIdentity
from libs.auth.policy import Requirement, authorize
from libs.common.errors import Conflict, NotFound
from libs.common.logging import get_logger
from services.academy_service.models import (
    Batch,
    Enrollment,
    EnrollmentStatus,
    Sport,
)
from services.academy_service.schemas import BatchCreate, BatchUpdate
from services.members_service.models import Profile, Role, User
from services.members_service.services.audit_ops import record_admin_action
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Seat accounting
# ---------------------------------------------------------------------------


async def claim_seat(db: AsyncSession, batch_id: uuid.UUID) -> bool:
    """Take one seat if any is left. Returns False when the batch is full."""
    result = await db.execute(
        update(Batch)
        .where(Batch.id == batch_id, Batch.current_students < Batch.max_students)
        .values(current_students=Batch.current_students + 1)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def release_seat(db: AsyncSession, batch_id: uuid.UUID) -> None:
    await db.execute(
        update(Batch)
        .where(Batch.id == batch_id, Batch.current_students > 0)
        .values(current_students=Batch.current_students - 1)
        .execution_options(synchronize_session=False)
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


async def get_batch_or_404(db: AsyncSession, batch_id: uuid.UUID) -> Batch:
    batch = await db.get(Batch, batch_id)
    if batch is None:
        raise NotFound("Batch not found")
    return batch


def authorize_batch_owner(caller: CallerIdentity, batch: Batch) -> None:
    """Owning coach or any admin; unassigned batches are admin-only."""
    if batch.coach_id is None:
        authorize(caller, Requirement.ADMIN)
    else:
        authorize(caller, Requirement.COACH_OR_ADMIN, owner_id=batch.coach_id)


def _batch_view(batch: Batch) -> dict:
    return {c.key: getattr(batch, c.key) for c in Batch.__table__.columns}


async def _coach_names(db: AsyncSession, coach_ids: set) -> dict:
    coach_ids = {cid for cid in coach_ids if cid}
    if not coach_ids:
        return {}
    result = await db.execute(select(Profile).where(Profile.user_id.in_(coach_ids)))
    return {p.user_id: p.full_name for p in result.scalars().all()}


async def _students_by_batch(db: AsyncSession, batch_ids: list) -> dict:
    """Enrolled students (any status) per batch, with profile contact info."""
    if not batch_ids:
        return {}
    result = await db.execute(
        select(Enrollment, Profile, User)
        .join(User, User.id == Enrollment.user_id)
        .outerjoin(Profile, Profile.user_id == Enrollment.user_id)
        .where(Enrollment.batch_id.in_(batch_ids))
        .order_by(Enrollment.enrolled_at)
    )
    students: dict = {batch_id: [] for batch_id in batch_ids}
    for enrollment, profile, user in result.all():
        students[enrollment.batch_id].append((enrollment, profile, user))
    return students


def _student_summary(profile: Optional[Profile], user: User) -> dict:
    return {
        "user_id": user.id,
        "first_name": profile.first_name if profile else None,
        "last_name": profile.last_name if profile else None,
        "email": user.email,
        "phone": profile.phone if profile else user.phone,
    }


async def _enrich(db: AsyncSession, batches: list[Batch]) -> list[dict]:
    coach_names = await _coach_names(db, {b.coach_id for b in batches})
    students = await _students_by_batch(db, [b.id for b in batches])
    sport_ids = {b.sport_id for b in batches}
    sports = {}
    if sport_ids:
        result = await db.execute(select(Sport).where(Sport.id.in_(sport_ids)))
        sports = {s.id: s for s in result.scalars().all()}

    enriched = []
    for batch in batches:
        rows = students.get(batch.id, [])
        data = _batch_view(batch)
        data["sport"] = sports.get(batch.sport_id)
        data["coach_name"] = coach_names.get(batch.coach_id)
        data["enrollment_count"] = len(rows)
        data["students"] = [_student_summary(p, u) for _, p, u in rows]
        enriched.append(data)
    return enriched


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


async def get_all_batches(db: AsyncSession, caller: CallerIdentity) -> list[dict]:
    authorize(caller, Requirement.ADMIN)
    result = await db.execute(select(Batch).order_by(Batch.created_at.desc()))
    return await _enrich(db, list(result.scalars().all()))


async def get_coach_batches(db: AsyncSession, caller: CallerIdentity) -> list[dict]:
    """The calling coach's own batches with their enrolled students."""
    authorize(caller, Requirement.COACH)
    result = await db.execute(
        select(Batch).where(Batch.coach_id == caller.user_id).order_by(Batch.name)
    )
    return await _enrich(db, list(result.scalars().all()))


async def get_batch(db: AsyncSession, batch_id: uuid.UUID) -> Batch:
    return await get_batch_or_404(db, batch_id)


async def get_batch_students(
    db: AsyncSession, caller: CallerIdentity, *, batch_id: uuid.UUID
) -> list[dict]:
    batch = await get_batch_or_404(db, batch_id)
    authorize_batch_owner(caller, batch)

    students = await _students_by_batch(db, [batch_id])
    return [
        {
            **{c.key: getattr(e, c.key) for c in Enrollment.__table__.columns},
            "student": _student_summary(profile, user),
        }
        for e, profile, user in students[batch_id]
    ]


async def count_batches(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    is_active: Optional[bool] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> int:
    authorize(caller, Requirement.ADMIN)
    query = select(func.count(Batch.id))
    if is_active is not None:
        query = query.where(Batch.is_active.is_(is_active))
    if start is not None and end is not None:
        query = query.where(Batch.created_at >= start, Batch.created_at <= end)
    return (await db.execute(query)).scalar_one()


# ---------------------------------------------------------------------------
# Admin mutations
# ---------------------------------------------------------------------------


async def _require_coach_profile(db: AsyncSession, coach_id: uuid.UUID) -> Profile:
    result = await db.execute(select(Profile).where(Profile.user_id == coach_id))
    profile = result.scalar_one_or_none()
    if profile is None or profile.role != Role.COACH:
        raise NotFound("Invalid coach")
    return profile


async def create_batch(
    db: AsyncSession, caller: CallerIdentity, data: BatchCreate
) -> Batch:
    authorize(caller, Requirement.ADMIN)
    if await db.get(Sport, data.sport_id) is None:
        raise NotFound("Sport not found")
    if data.coach_id is not None:
        await _require_coach_profile(db, data.coach_id)

    batch = Batch(
        **data.model_dump(exclude={"schedule"}),
        schedule=data.schedule.model_dump(),
        current_students=0,
        is_active=True,
    )
    db.add(batch)
    await db.commit()
    await db.refresh(batch)
    logger.info("Created batch %s (%s)", batch.id, batch.name)
    return batch


async def update_batch(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    batch_id: uuid.UUID,
    data: BatchUpdate,
) -> Batch:
    authorize(caller, Requirement.ADMIN)
    batch = await get_batch_or_404(db, batch_id)
    changes = data.model_dump(exclude_unset=True)

    new_max = changes.pop("max_students", None)
    if new_max is not None:
        # Guarded in SQL so a seat claimed concurrently cannot end up over
        # the new capacity.
        result = await db.execute(
            update(Batch)
            .where(Batch.id == batch_id, Batch.current_students <= new_max)
            .values(max_students=new_max)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await db.rollback()
            enrolled = await db.scalar(
                select(Batch.current_students).where(Batch.id == batch_id)
            )
            raise Conflict(
                f"max_students cannot drop below {enrolled} enrolled students"
            )

    for field, value in changes.items():
        setattr(batch, field, value)

    await db.commit()
    await db.refresh(batch)
    return batch


async def assign_coach(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    batch_id: uuid.UUID,
    coach_id: uuid.UUID,
) -> Batch:
    authorize(caller, Requirement.ADMIN)
    batch = await get_batch_or_404(db, batch_id)
    await _require_coach_profile(db, coach_id)
    batch.coach_id = coach_id
    await db.commit()
    await db.refresh(batch)
    logger.info("Assigned coach %s to batch %s", coach_id, batch_id)
    return batch


async def delete_batch(
    db: AsyncSession, caller: CallerIdentity, *, batch_id: uuid.UUID
) -> None:
    authorize(caller, Requirement.ADMIN)
    batch = await get_batch_or_404(db, batch_id)

    statuses = (
        await db.execute(
            select(Enrollment.status).where(Enrollment.batch_id == batch_id)
        )
    ).scalars().all()
    if EnrollmentStatus.ACTIVE in statuses:
        raise Conflict("Batch has active enrollments")
    if statuses:
        raise Conflict("Batch has enrollment history; deactivate it instead")

    await db.delete(batch)
    record_admin_action(
        db,
        admin_user_id=caller.user_id,
        action="delete_batch",
        details=f"batch={batch_id} name={batch.name}",
    )
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise Conflict("Batch is still referenced")
    logger.info("Deleted batch %s", batch_id)
