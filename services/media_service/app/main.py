"""FastAPI application for the Media Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.media_service.routers import media_router


def create_app() -> FastAPI:
    """Create and configure the Media Service FastAPI app."""
    app = FastAPI(
        title="PlayGram Media Service",
        version="0.1.0",
        description="Signed upload URLs for profile photos and product images.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "media"}

    app.include_router(media_router, prefix="/media")

    return app


app = create_app()
