"""FastAPI application entrypoint for the PlayGram API gateway.

Every service router is mounted in-process under ``/api/v1/<service>``; the
per-service apps stay runnable on their own for local work.
"""

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.academy_service.routers import (
    batches_router,
    enrollments_router,
    sports_router,
)
from services.attendance_service.routers import attendance_router
from services.communications_service.routers import (
    auth_router,
    content_router,
    messaging_router,
    settings_router,
)
from services.gateway_service.app.routers import dashboard_router
from services.media_service.routers import media_router
from services.members_service.routers import (
    admin_router,
    gamification_router,
    profiles_router,
)
from services.payments_service.routers import payments_router
from services.store_service.routers import orders_router, products_router

load_dotenv()

API_PREFIX = "/api/v1"

SERVICE_ROUTERS = {
    "members": [profiles_router, gamification_router, admin_router],
    "academy": [sports_router, batches_router, enrollments_router],
    "attendance": [attendance_router],
    "payments": [payments_router],
    "store": [products_router, orders_router],
    "communications": [
        auth_router,
        messaging_router,
        settings_router,
        content_router,
    ],
    "media": [media_router],
}


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = get_settings()

    app = FastAPI(
        title="PlayGram API",
        version="0.1.0",
        description="Sports academy management: members, batches, attendance, "
        "payments and store.",
    )

    # Add rate limiter state to app
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability (structured logging + request tracing)
    add_observability_middleware(app)

    # Add global exception handlers for consistent error responses
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Simple readiness endpoint."""
        return {"status": "ok"}

    for service, routers in SERVICE_ROUTERS.items():
        for router in routers:
            app.include_router(router, prefix=f"{API_PREFIX}/{service}")
    app.include_router(dashboard_router, prefix=API_PREFIX)

    return app


app = create_app()
