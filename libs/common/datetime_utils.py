"""Datetime utilities for timezone-aware UTC timestamps.

Usage:
    from libs.common.datetime_utils import utc_now

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now
    )
"""

from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

from libs.common.config import get_settings


def utc_now() -> datetime:
    """Return timezone-aware UTC datetime.

    Always use this for timestamps in the database.
    """
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime read back from the database to aware UTC.

    Some backends (SQLite) drop tzinfo on the way back; values are always
    written as UTC so a naive value is UTC.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_today() -> date:
    """Today's date in the academy's configured timezone."""
    return datetime.now(ZoneInfo(get_settings().TIMEZONE)).date()


def epoch_ms(value: Optional[datetime] = None) -> int:
    """Milliseconds since epoch, used in human-facing receipt numbers."""
    value = value or utc_now()
    return int(value.timestamp() * 1000)
