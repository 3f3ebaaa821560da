"""FastAPI application for the Communications Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from libs.common.rate_limit import limiter, rate_limit_exceeded_handler
from services.communications_service.routers import (
    auth_router,
    content_router,
    messaging_router,
    settings_router,
)
from slowapi.errors import RateLimitExceeded


def create_app() -> FastAPI:
    """Create and configure the Communications Service FastAPI app."""
    app = FastAPI(
        title="PlayGram Communications Service",
        version="0.1.0",
        description="OTP sign-in, password reset, messaging, settings and app content.",
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "communications"}

    app.include_router(auth_router, prefix="/communications")
    app.include_router(messaging_router, prefix="/communications")
    app.include_router(settings_router, prefix="/communications")
    app.include_router(content_router, prefix="/communications")

    return app


app = create_app()
