"""Communications Service models package."""

from services.communications_service.models.core import (  # noqa: F401
    Channel,
    ContentBlock,
    Message,
    Otp,
    PasswordReset,
    PlatformSettings,
    Slide,
)
from services.communications_service.models.enums import (  # noqa: F401
    ChannelType,
    ContentFormat,
    MessageType,
    OtpMethod,
)

# Registers the users table referenced by foreign keys
import services.members_service.models  # noqa: F401, E402

__all__ = [
    "Channel",
    "ChannelType",
    "ContentBlock",
    "ContentFormat",
    "Message",
    "MessageType",
    "Otp",
    "OtpMethod",
    "PasswordReset",
    "PlatformSettings",
    "Slide",
]
