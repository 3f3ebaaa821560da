import enum
import uuid
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class Role(str, enum.Enum):
    STUDENT = "student"
    COACH = "coach"
    ADMIN = "admin"


class AuthUser(BaseModel):
    """
    Claims of a verified access token.
    """

    user_id: str = Field(..., alias="sub")
    email: Optional[EmailStr] = None
    phone: Optional[str] = None


class CallerIdentity(BaseModel):
    """
    The resolved caller passed explicitly into every operation.

    ``role`` and ``profile_id`` are None until the user has completed
    profile setup.
    """

    model_config = ConfigDict(frozen=True)

    user_id: uuid.UUID
    role: Optional[Role] = None
    profile_id: Optional[uuid.UUID] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    @property
    def is_coach(self) -> bool:
        return self.role == Role.COACH

    @property
    def is_student(self) -> bool:
        return self.role == Role.STUDENT
