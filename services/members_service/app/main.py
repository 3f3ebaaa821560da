"""FastAPI application for the Members Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.members_service.routers import (
    admin_router,
    gamification_router,
    profiles_router,
)


def create_app() -> FastAPI:
    """Create and configure the Members Service FastAPI app."""
    app = FastAPI(
        title="PlayGram Members Service",
        version="0.1.0",
        description="Profiles, user administration, points and rewards.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "members"}

    app.include_router(profiles_router, prefix="/members")
    app.include_router(gamification_router, prefix="/members")
    app.include_router(admin_router, prefix="/members")

    return app


app = create_app()
