"""
Notifier Interface

Abstract interface for delivering the scheduled message through a
system notification channel, plus the schedule exceptions.
"""

from abc import ABC, abstractmethod

from core.errors import BroadcastError, ErrorCause
from scheduling.constants import TIME_IN_PAST_MESSAGE, ScheduleErrorKind


class NotifierInterface(ABC):
    """
    Abstract base class for system notification channels.

    The ScheduleTimer asks for permission first; when it is refused or
    delivery fails, the message goes to the in-app alert instead.
    """

    @abstractmethod
    async def request_permission(self) -> bool:
        """
        Ask (once) for permission to show notifications.

        Returns:
            True if notifications may be shown
        """

    @abstractmethod
    async def notify(self, title: str, body: str) -> None:
        """
        Deliver a notification.

        Raises:
            NotificationError: If delivery failed
        """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the channel exists on this host"""

    def get_info(self) -> dict:
        return {"backend": type(self).__name__, "available": self.is_available()}


class NotificationError(Exception):
    """Raised when a notification could not be delivered"""


class ScheduleError(BroadcastError):
    """
    Exception raised when a schedule cannot be armed.

    Example:
        ScheduleError()  # time-in-past with the default message
    """

    cause = ErrorCause.SCHEDULING

    def __init__(
        self,
        message: str = TIME_IN_PAST_MESSAGE,
        kind: ScheduleErrorKind = ScheduleErrorKind.TIME_IN_PAST,
    ):
        super().__init__(message, kind)
