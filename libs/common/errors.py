"""Closed error taxonomy shared by every service.

Each error is an HTTPException so routers can let it propagate untouched,
and ops modules can be exercised directly in tests with ``pytest.raises``.
"""

from typing import Optional

from fastapi import HTTPException, status


class ServiceError(HTTPException):
    """Base class for every error a service operation raises on purpose."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Request could not be processed"

    def __init__(self, detail: Optional[str] = None, headers: Optional[dict] = None):
        super().__init__(
            status_code=self.status_code,
            detail=detail or self.default_detail,
            headers=headers,
        )

    @property
    def error_name(self) -> str:
        return type(self).__name__


class Unauthenticated(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Not authenticated"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail, headers={"WWW-Authenticate": "Bearer"})


class Forbidden(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not authorized"


class NotFound(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found"


class Conflict(ServiceError):
    """Capacity, duplicate and invalid-transition violations."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Request conflicts with the current state"


class BatchFull(Conflict):
    default_detail = "Batch is full"


class AlreadyEnrolled(Conflict):
    default_detail = "Already enrolled in this batch"


class InsufficientStock(Conflict):
    default_detail = "Insufficient stock"


class InvalidTransition(Conflict):
    def __init__(self, entity: str, current: str, target: str):
        self.entity = entity
        self.current = current
        self.target = target
        super().__init__(f"Cannot move {entity} from '{current}' to '{target}'")


class UpstreamFailure(ServiceError):
    """A third-party call (notification, gateway, storage) failed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Upstream service unavailable"
