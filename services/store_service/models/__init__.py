"""Store Service models package."""

from services.store_service.models.core import Order, Product  # noqa: F401
from services.store_service.models.enums import OrderStatus  # noqa: F401

# Registers the users and payments tables referenced by foreign keys
import services.payments_service.models  # noqa: F401, E402

__all__ = [
    "Order",
    "OrderStatus",
    "Product",
]
