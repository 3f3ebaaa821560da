"""Sports catalog."""

import uuid

from libs.auth.models import CallerIdentity
from libs.auth.policy import Requirement, authorize
from libs.common.errors import Conflict, NotFound
from libs.common.logging import get_logger
from services.academy_service.models import Batch, Sport
from services.academy_service.schemas import SportCreate, SportUpdate
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


async def get_sport_or_404(db: AsyncSession, sport_id: uuid.UUID) -> Sport:
    sport = await db.get(Sport, sport_id)
    if sport is None:
        raise NotFound("Sport not found")
    return sport


async def get_active_sports(db: AsyncSession) -> list[Sport]:
    """Public catalog."""
    result = await db.execute(
        select(Sport).where(Sport.is_active.is_(True)).order_by(Sport.name)
    )
    return list(result.scalars().all())


async def get_all_sports(db: AsyncSession, caller: CallerIdentity) -> list[Sport]:
    authorize(caller, Requirement.ADMIN)
    result = await db.execute(select(Sport).order_by(Sport.name))
    return list(result.scalars().all())


async def get_sport_details(db: AsyncSession, sport_id: uuid.UUID) -> dict:
    """Sport plus its active batches."""
    sport = await get_sport_or_404(db, sport_id)
    result = await db.execute(
        select(Batch)
        .where(Batch.sport_id == sport_id, Batch.is_active.is_(True))
        .order_by(Batch.start_date)
    )
    data = {c.key: getattr(sport, c.key) for c in Sport.__table__.columns}
    data["batches"] = list(result.scalars().all())
    return data


async def create_sport(
    db: AsyncSession, caller: CallerIdentity, data: SportCreate
) -> Sport:
    authorize(caller, Requirement.ADMIN)
    sport = Sport(**data.model_dump())
    db.add(sport)
    await db.commit()
    await db.refresh(sport)
    logger.info("Created sport %s (%s)", sport.id, sport.name)
    return sport


async def update_sport(
    db: AsyncSession,
    caller: CallerIdentity,
    *,
    sport_id: uuid.UUID,
    data: SportUpdate,
) -> Sport:
    authorize(caller, Requirement.ADMIN)
    sport = await get_sport_or_404(db, sport_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(sport, field, value)
    await db.commit()
    await db.refresh(sport)
    return sport


async def delete_sport(
    db: AsyncSession, caller: CallerIdentity, *, sport_id: uuid.UUID
) -> None:
    authorize(caller, Requirement.ADMIN)
    sport = await get_sport_or_404(db, sport_id)
    in_use = await db.scalar(
        select(Batch.id).where(Batch.sport_id == sport_id).limit(1)
    )
    if in_use is not None:
        raise Conflict("Sport has batches; delete or move them first")
    await db.delete(sport)
    await db.commit()
    logger.info("Deleted sport %s", sport_id)
