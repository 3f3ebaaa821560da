"""Academy service routers."""

from services.academy_service.routers.batches import router as batches_router
from services.academy_service.routers.enrollments import router as enrollments_router
from services.academy_service.routers.sports import router as sports_router

__all__ = [
    "batches_router",
    "enrollments_router",
    "sports_router",
]
