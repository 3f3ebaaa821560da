"""Communications Service schemas package."""

from services.communications_service.schemas.auth import (  # noqa: F401
    OtpRequest,
    OtpVerify,
    PasswordResetConfirm,
    PasswordResetRequest,
    StatusMessage,
    TokenResponse,
)
from services.communications_service.schemas.content import (  # noqa: F401
    ContentBlockCreate,
    ContentBlockResponse,
    ContentBlockUpdate,
    SlideCreate,
    SlideResponse,
    SlideUpdate,
)
from services.communications_service.schemas.messaging import (  # noqa: F401
    AnnouncementUpdate,
    ChannelCreate,
    ChannelMemberAdd,
    ChannelResponse,
    MaintenanceModeUpdate,
    MessageCreate,
    MessageResponse,
    PlatformSettingsResponse,
)

__all__ = [
    "AnnouncementUpdate",
    "ChannelCreate",
    "ChannelMemberAdd",
    "ChannelResponse",
    "ContentBlockCreate",
    "ContentBlockResponse",
    "ContentBlockUpdate",
    "MaintenanceModeUpdate",
    "MessageCreate",
    "MessageResponse",
    "OtpRequest",
    "OtpVerify",
    "PasswordResetConfirm",
    "PasswordResetRequest",
    "PlatformSettingsResponse",
    "SlideCreate",
    "SlideResponse",
    "SlideUpdate",
    "StatusMessage",
    "TokenResponse",
]
