"""
Broadcast Error Base

Common base for every error the broadcast components surface to callers.

Each component defines its own exception (DeviceError, PublishError,
RecorderError, ScheduleError) next to its interface. They all carry:
- kind: an Enum member so callers can branch without string matching
- cause: short human-readable remediation class for the user
"""

from enum import Enum
from typing import Optional


class ErrorCause(Enum):
    """What the user has to fix - each needs a different remediation."""

    HARDWARE = "hardware/permissions"
    NETWORK = "network/server"
    UNSUPPORTED = "unsupported format"
    SCHEDULING = "scheduling"


class BroadcastError(Exception):
    """
    Base exception for broadcast session errors.

    Attributes:
        kind: Error kind enum (component specific)
        cause: ErrorCause for user-facing messages
    """

    cause: ErrorCause = ErrorCause.HARDWARE

    def __init__(self, message: str, kind: Optional[Enum] = None):
        super().__init__(message)
        self.message = message
        self.kind = kind

    @property
    def user_message(self) -> str:
        """Short message suitable for a UI banner"""
        return f"{self.message} ({self.cause.value})"
