"""Members Service models package.

Re-exports all models and enums so that:
  - ``from services.members_service.models import Profile`` works
  - Alembic env.py sees every table on import

When adding a new model, add both its import and its __all__ entry.
"""

from services.members_service.models.audit import AuditLog  # noqa: F401
from services.members_service.models.core import Profile, User  # noqa: F401
from services.members_service.models.enums import (  # noqa: F401
    RewardType,
    Role,
    SubscriptionStatus,
    enum_values,
)
from services.members_service.models.gamification import (  # noqa: F401
    PointsHistory,
    Reward,
    RewardHistory,
)

__all__ = [
    "AuditLog",
    "PointsHistory",
    "Profile",
    "Reward",
    "RewardHistory",
    "RewardType",
    "Role",
    "SubscriptionStatus",
    "User",
    "enum_values",
]
