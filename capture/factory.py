"""
Capture Factory

Single place that decides between the aiortc device backend and the mock.
"""

import logging
from typing import Literal

from capture.implementations.aiortc_device import AiortcDevice
from capture.implementations.mock_device import MockDevice
from capture.interfaces.device_interface import DeviceInterface

DeviceMode = Literal["auto", "real", "mock"]


class CaptureFactory:
    """
    Factory for creating capture device backends.

    Usage:
        # Auto-detect (uses a real camera if present, mock otherwise)
        device = CaptureFactory.create_device()

        # Force mock mode (tests, CI)
        device = CaptureFactory.create_device(mode="mock")
    """

    _logger = logging.getLogger(__name__)

    @classmethod
    def create_device(cls, mode: DeviceMode = "auto") -> DeviceInterface:
        """
        Create a capture device backend.

        Args:
            mode: "auto" (detect), "real" (force aiortc), "mock" (force mock)

        Raises:
            RuntimeError: If mode="real" but no camera is available
        """
        if mode == "mock":
            cls._logger.info("Creating Mock Device")
            return MockDevice()

        device = AiortcDevice()

        if mode == "real":
            if not device.is_available():
                raise RuntimeError(
                    f"Real capture requested but {device.camera_device} not available"
                )
            cls._logger.info("Creating aiortc Device (forced)")
            return device

        if device.is_available():
            cls._logger.info("Creating aiortc Device (auto-detected)")
            return device

        cls._logger.warning(
            f"Camera {device.camera_device} not available, using Mock Device"
        )
        return MockDevice()
