"""Store Service schemas package."""

from services.store_service.schemas.store import (  # noqa: F401
    OrderCreate,
    OrderResponse,
    OrderStatusUpdate,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
)

__all__ = [
    "OrderCreate",
    "OrderResponse",
    "OrderStatusUpdate",
    "ProductCreate",
    "ProductResponse",
    "ProductUpdate",
]
