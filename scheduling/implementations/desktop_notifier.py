"""
Desktop Notifier

System notifications through plyer (libnotify/D-Bus on Linux, native
toasts on macOS and Windows).

plyer calls are blocking, so delivery runs in the default executor.
"""

import asyncio
import logging
import os
import sys
from typing import Optional

from plyer import notification

from config.settings import DESKTOP_NOTIFICATION_TIMEOUT
from scheduling.interfaces.notifier_interface import NotificationError, NotifierInterface

APP_NAME = "StreamMova"

SESSION_VARIABLES = ("DISPLAY", "WAYLAND_DISPLAY", "DBUS_SESSION_BUS_ADDRESS")


class DesktopNotifier(NotifierInterface):
    """
    Desktop notification channel.

    On Linux, permission is granted only inside a graphical session
    (DISPLAY / WAYLAND_DISPLAY / DBUS_SESSION_BUS_ADDRESS).

    Usage:
        notifier = DesktopNotifier()
        if await notifier.request_permission():
            await notifier.notify("StreamMova Scheduled Stream", "It's time to start!")
    """

    def __init__(self, timeout: int = DESKTOP_NOTIFICATION_TIMEOUT):
        """
        Args:
            timeout: Seconds the notification stays on screen
        """
        self.logger = logging.getLogger(__name__)
        self.timeout = timeout
        self._permission: Optional[bool] = None

    def is_available(self) -> bool:
        if not sys.platform.startswith("linux"):
            return True
        return any(os.environ.get(name) for name in SESSION_VARIABLES)

    async def request_permission(self) -> bool:
        if self._permission is None:
            self._permission = self.is_available()
            self.logger.info(
                f"Desktop notifications {'granted' if self._permission else 'denied'}"
            )
        return self._permission

    def _show(self, title: str, body: str) -> None:
        try:
            notification.notify(
                title=title,
                message=body,
                app_name=APP_NAME,
                timeout=self.timeout,
            )
        except Exception as e:
            # NotImplementedError when plyer has no backend for this host
            raise NotificationError(f"Desktop notification failed: {e}") from e

    async def notify(self, title: str, body: str) -> None:
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._show, title, body)
        self.logger.info(f"Notification shown: {title} - {body}")
