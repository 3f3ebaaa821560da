"""Enum definitions for members service models."""

import enum

from libs.auth.models import Role  # noqa: F401


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    PENDING = "pending"
    EXPIRED = "expired"


class RewardType(str, enum.Enum):
    MILESTONE = "milestone"
    SCRATCH_CARD = "scratch_card"
