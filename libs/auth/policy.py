"""Authorization policy shared by every service operation.

Operations call ``authorize`` once, up front, before touching any state:

    caller = authorize(caller, Requirement.COACH, owner_id=batch.coach_id)

A denial raises and has no side effects.
"""

import enum
import uuid
from typing import Optional

from libs.auth.models import CallerIdentity, Role
from libs.common.errors import Forbidden, NotFound, Unauthenticated
from libs.common.logging import get_logger

logger = get_logger(__name__)


class Requirement(str, enum.Enum):
    ANY_AUTHENTICATED = "any_authenticated"
    ADMIN = "admin"
    COACH = "coach"
    STUDENT = "student"
    SELF_OR_ADMIN = "self_or_admin"
    COACH_OR_ADMIN = "coach_or_admin"


def _deny(caller: CallerIdentity, requirement: Requirement, detail: str):
    logger.warning(
        "Denied %s for user %s (role=%s)",
        requirement.value,
        caller.user_id,
        caller.role.value if caller.role else None,
    )
    raise Forbidden(detail)


def authorize(
    caller: Optional[CallerIdentity],
    requirement: Requirement,
    *,
    owner_id: Optional[uuid.UUID] = None,
) -> CallerIdentity:
    """Check ``caller`` against ``requirement`` and return it on success.

    ``owner_id`` is the user id that owns the target resource: the batch
    coach for COACH/COACH_OR_ADMIN, the record's user for SELF_OR_ADMIN.
    """
    if caller is None:
        raise Unauthenticated()

    if requirement == Requirement.ANY_AUTHENTICATED:
        return caller

    if requirement == Requirement.ADMIN:
        if caller.role != Role.ADMIN:
            _deny(caller, requirement, "Admin access required")
        return caller

    if requirement == Requirement.STUDENT:
        if caller.role != Role.STUDENT:
            _deny(caller, requirement, "Student access required")
        return caller

    if requirement == Requirement.COACH:
        if caller.role != Role.COACH:
            _deny(caller, requirement, "Coach access required")
        if owner_id is not None and owner_id != caller.user_id:
            _deny(caller, requirement, "Not the coach of this batch")
        return caller

    if requirement == Requirement.SELF_OR_ADMIN:
        if caller.role == Role.ADMIN:
            return caller
        if owner_id is None or owner_id != caller.user_id:
            _deny(caller, requirement, "Not authorized to access this resource")
        return caller

    if requirement == Requirement.COACH_OR_ADMIN:
        if caller.role == Role.ADMIN:
            return caller
        if caller.role != Role.COACH:
            _deny(caller, requirement, "Coach or admin access required")
        if owner_id is not None and owner_id != caller.user_id:
            _deny(caller, requirement, "Not the coach of this batch")
        return caller

    raise ValueError(f"Unknown requirement: {requirement}")


def require_profile(caller: CallerIdentity) -> uuid.UUID:
    """Return the caller's profile id or raise NotFound."""
    if caller.profile_id is None:
        raise NotFound("Profile not found")
    return caller.profile_id
