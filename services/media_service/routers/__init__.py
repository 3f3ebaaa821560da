"""Media Service routers."""

from services.media_service.routers.media import router as media_router

__all__ = ["media_router"]
