"""Payments Service models package."""

from services.payments_service.models.core import Payment  # noqa: F401
from services.payments_service.models.enums import (  # noqa: F401
    PaymentStatus,
    enum_values,
)

# Registers the enrollments and users tables referenced by foreign keys
import services.academy_service.models  # noqa: F401, E402

__all__ = [
    "Payment",
    "PaymentStatus",
    "enum_values",
]
