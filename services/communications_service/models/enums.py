"""Enum definitions for communications service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class OtpMethod(str, enum.Enum):
    PHONE = "phone"
    EMAIL = "email"


class ChannelType(str, enum.Enum):
    DIRECT = "direct"
    GROUP = "group"
    BROADCAST = "broadcast"


class MessageType(str, enum.Enum):
    TEXT = "text"
    NOTIFICATION = "notification"


class ContentFormat(str, enum.Enum):
    TEXT = "text"
    HTML = "html"
    MARKDOWN = "markdown"
