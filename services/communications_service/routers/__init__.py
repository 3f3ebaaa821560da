"""Communications Service routers."""

from services.communications_service.routers.auth import router as auth_router
from services.communications_service.routers.content import (
    router as content_router,
)
from services.communications_service.routers.messaging import (
    router as messaging_router,
)
from services.communications_service.routers.settings import (
    router as settings_router,
)

__all__ = [
    "auth_router",
    "content_router",
    "messaging_router",
    "settings_router",
]
