"""Store Service routers."""

from services.store_service.routers.orders import router as orders_router
from services.store_service.routers.products import router as products_router

__all__ = ["orders_router", "products_router"]
