"""
Scheduling Factory

Selects the notification channel for scheduled messages.
"""

import logging
from typing import Literal

from scheduling.implementations.mock_notifier import MockNotifier
from scheduling.implementations.desktop_notifier import DesktopNotifier
from scheduling.implementations.tts_notifier import TTSNotifier
from scheduling.interfaces.notifier_interface import NotifierInterface

NotifierMode = Literal["auto", "desktop", "tts", "mock"]


class SchedulingFactory:
    """
    Factory for notification channels.

    Usage:
        # Auto-detect: desktop notification, then speech, then none
        notifier = SchedulingFactory.create_notifier()

        # Force mock mode (useful for testing)
        notifier = SchedulingFactory.create_notifier(mode="mock")
    """

    _logger = logging.getLogger(__name__)

    @classmethod
    def create_notifier(cls, mode: NotifierMode = "auto") -> NotifierInterface:
        """
        Create a notifier.

        In auto mode, when no channel is usable a MockNotifier that refuses
        permission is returned, so every message goes to the in-app alert.

        Raises:
            RuntimeError: If a forced channel is not available
        """
        if mode == "mock":
            cls._logger.info("Creating Mock Notifier")
            return MockNotifier()

        if mode == "desktop":
            notifier = DesktopNotifier()
            if not notifier.is_available():
                raise RuntimeError("No graphical session for desktop notifications")
            return notifier

        if mode == "tts":
            return TTSNotifier()

        desktop = DesktopNotifier()
        if desktop.is_available():
            cls._logger.info("Creating Desktop Notifier (auto-detected)")
            return desktop

        tts = TTSNotifier()
        if tts.is_available():
            cls._logger.info("Creating TTS Notifier (auto-detected)")
            return tts

        cls._logger.warning("No notification channel available, scheduled messages use alerts only")
        return MockNotifier(granted=False)
