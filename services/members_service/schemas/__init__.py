"""Members Service schemas package.

When adding a new schema, add its import and __all__ entry.
"""

from services.members_service.schemas.admin import (  # noqa: F401
    AdminUserCreate,
    AdminUserResponse,
    AdminUserUpdate,
    AuditLogResponse,
    BulkUserRequest,
    BulkUserResponse,
    RoleUpdateRequest,
    SubscriptionUpdateRequest,
    UserCountResponse,
)
from services.members_service.schemas.gamification import (  # noqa: F401
    LeaderboardEntry,
    PointsAdjustRequest,
    PointsBalanceResponse,
    PointsHistoryResponse,
    RewardCreate,
    RewardGrantRequest,
    RewardHistoryResponse,
    RewardResponse,
    RewardUpdate,
)
from services.members_service.schemas.profile import (  # noqa: F401
    PhoneCheckRequest,
    PhoneCheckResponse,
    ProfileCreate,
    ProfileResponse,
    ProfileSetupStatus,
    ProfileUpdate,
)

__all__ = [
    "AdminUserCreate",
    "AdminUserResponse",
    "AdminUserUpdate",
    "AuditLogResponse",
    "BulkUserRequest",
    "BulkUserResponse",
    "LeaderboardEntry",
    "PhoneCheckRequest",
    "PhoneCheckResponse",
    "PointsAdjustRequest",
    "PointsBalanceResponse",
    "PointsHistoryResponse",
    "ProfileCreate",
    "ProfileResponse",
    "ProfileSetupStatus",
    "ProfileUpdate",
    "RewardCreate",
    "RewardGrantRequest",
    "RewardHistoryResponse",
    "RewardResponse",
    "RewardUpdate",
    "RoleUpdateRequest",
    "SubscriptionUpdateRequest",
    "UserCountResponse",
]
