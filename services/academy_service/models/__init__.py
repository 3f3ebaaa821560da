"""Academy Service models package.

Re-exports all models and enums so that:
  - ``from services.academy_service.models import Batch`` works
  - Alembic env.py sees every table on import

When adding a new model, add both its import and its __all__ entry.
"""

from services.academy_service.models.core import Batch, Sport  # noqa: F401
from services.academy_service.models.enrollment import Enrollment  # noqa: F401
from services.academy_service.models.enums import (  # noqa: F401
    BatchLevel,
    EnrollmentStatus,
    PaymentStatus,
    enum_values,
)

# Registers the users table that coach_id and user_id point at
import services.members_service.models  # noqa: F401, E402

__all__ = [
    "Batch",
    "BatchLevel",
    "Enrollment",
    "EnrollmentStatus",
    "PaymentStatus",
    "Sport",
    "enum_values",
]
