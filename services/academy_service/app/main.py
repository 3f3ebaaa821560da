"""FastAPI application for the Academy Service."""

from fastapi import FastAPI
from libs.common.error_handler import add_exception_handlers
from libs.common.middleware import add_observability_middleware
from services.academy_service.routers import (
    batches_router,
    enrollments_router,
    sports_router,
)


def create_app() -> FastAPI:
    """Create and configure the Academy Service FastAPI app."""
    app = FastAPI(
        title="PlayGram Academy Service",
        version="0.1.0",
        description="Sports, batches and enrollments.",
    )
    add_observability_middleware(app)
    add_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "academy"}

    # Domain routers (all prefixed /academy)
    app.include_router(sports_router, prefix="/academy")
    app.include_router(batches_router, prefix="/academy")
    app.include_router(enrollments_router, prefix="/academy")

    return app


app = create_app()
