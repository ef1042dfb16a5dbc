"""
Scheduling Implementations Package

Exposes concrete notification channels.
"""

from scheduling.implementations.desktop_notifier import DesktopNotifier
from scheduling.implementations.mock_notifier import MockNotifier
from scheduling.implementations.tts_notifier import TTSNotifier

# Public API
__all__ = [
    "DesktopNotifier",
    "MockNotifier",
    "TTSNotifier",
]
