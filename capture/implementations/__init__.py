"""
Capture Implementations Package

Exposes concrete implementations of the device interface.
"""

from capture.implementations.aiortc_device import AiortcDevice
from capture.implementations.mock_device import MockDevice

# Public API
__all__ = [
    "AiortcDevice",
    "MockDevice",
]
