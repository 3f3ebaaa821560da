"""Enum definitions for attendance service models."""

import enum


def enum_values(enum_cls):
    """Return persistent DB values for SAEnum mappings."""
    return [member.value for member in enum_cls]


class AttendanceMethod(str, enum.Enum):
    QR = "qr"
    MANUAL = "manual"
