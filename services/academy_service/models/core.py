import uuid
from datetime import date, datetime
from typing import Optional

from libs.common.datetime_utils import utc_now
from libs.db.base import Base
from services.academy_service.models.enums import BatchLevel, enum_values
from sqlalchemy import JSON, Boolean, CheckConstraint, Date, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy import Float, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

# ============================================================================
# SPORTS & BATCHES
# ============================================================================


class Sport(Base):
    __tablename__ = "sports"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    max_students_per_batch: Mapped[int] = mapped_column(Integer, nullable=False)
    # Rupees
    price_per_month: Mapped[float] = mapped_column(Float, nullable=False)
    equipment: Mapped[list[str]] = mapped_column(JSON, default=list)
    age_groups: Mapped[list[str]] = mapped_column(JSON, default=list)
    image_url: Mapped[Optional[str]] = mapped_column(String, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    batches: Mapped[list["Batch"]] = relationship(back_populates="sport")

    def __repr__(self):
        return f"<Sport {self.name}>"


class Batch(Base):
    __tablename__ = "batches"
    __table_args__ = (
        CheckConstraint(
            "current_students >= 0 AND current_students <= max_students",
            name="ck_batches_capacity",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String, nullable=False)
    sport_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("sports.id"), index=True, nullable=False
    )
    # User id of the assigned coach
    coach_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("users.id"), index=True, nullable=True
    )
    # {"days": [...], "start_time": "HH:MM", "end_time": "HH:MM"}
    schedule: Mapped[dict] = mapped_column(JSON, nullable=False)
    max_students: Mapped[int] = mapped_column(Integer, nullable=False)
    current_students: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    age_group: Mapped[str] = mapped_column(String, nullable=False)
    level: Mapped[BatchLevel] = mapped_column(
        SAEnum(
            BatchLevel,
            name="batch_level_enum",
            values_callable=enum_values,
            validate_strings=True,
        ),
        nullable=False,
    )
    venue: Mapped[str] = mapped_column(String, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now
    )

    sport: Mapped["Sport"] = relationship(back_populates="batches")

    @property
    def seats_left(self) -> int:
        return self.max_students - self.current_students

    def __repr__(self):
        return f"<Batch {self.name} {self.current_students}/{self.max_students}>"
