"""Members service routers."""

from services.members_service.routers.admin import router as admin_router
from services.members_service.routers.gamification import (
    router as gamification_router,
)
from services.members_service.routers.profiles import router as profiles_router

__all__ = [
    "admin_router",
    "gamification_router",
    "profiles_router",
]
