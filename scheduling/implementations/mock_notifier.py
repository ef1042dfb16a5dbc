"""
Mock Notifier

Records notifications instead of showing them.
"""

import asyncio
import logging
from typing import List, Tuple

from scheduling.interfaces.notifier_interface import NotificationError, NotifierInterface


class MockNotifier(NotifierInterface):
    """
    Mock notification channel for testing.

    Usage:
        notifier = MockNotifier(granted=False)   # forces the alert fallback
        notifier = MockNotifier(fail_delivery=True)
    """

    def __init__(
        self,
        granted: bool = True,
        fail_delivery: bool = False,
        permission_delay: float = 0.0,
    ):
        self.logger = logging.getLogger(__name__)
        self.granted = granted
        self.fail_delivery = fail_delivery
        self.permission_delay = permission_delay

        # For assertions
        self.notifications: List[Tuple[str, str]] = []
        self.permission_requests = 0

        self.logger.info(f"Mock Notifier initialized (granted: {granted})")

    def is_available(self) -> bool:
        return True

    async def request_permission(self) -> bool:
        self.permission_requests += 1
        if self.permission_delay:
            await asyncio.sleep(self.permission_delay)
        return self.granted

    async def notify(self, title: str, body: str) -> None:
        if self.fail_delivery:
            self.logger.error("[MOCK] Simulated notification failure")
            raise NotificationError("Simulated notification failure")
        self.notifications.append((title, body))
        self.logger.info(f"[MOCK] Notification: {title} - {body}")

    def clear_history(self) -> None:
        self.notifications.clear()
        self.permission_requests = 0
