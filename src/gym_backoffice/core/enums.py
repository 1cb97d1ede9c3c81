from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Presence state of a client's attendance record for one day."""

    IN = "IN"
    OUT = "OUT"


class IdentifierKind(str, Enum):
    """Namespaces of dense human-facing numbers."""

    CLIENT = "client"
    MEMBERSHIP_PLAN = "membership-plan"
