"""
Device Interface

Abstract interface for camera/microphone backends.
Defines the contract that any capture device backend must follow.

DeviceCaptureManager depends on this abstraction, not on aiortc/FFmpeg
directly, so tests can run with MockDevice and no hardware.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

from capture.constants import DEVICE_ERROR_MESSAGES, DeviceErrorKind
from capture.models.capture_source import CaptureConstraints
from core.errors import BroadcastError, ErrorCause


class DeviceInterface(ABC):
    """
    Abstract base class for capture device backends.

    A backend only acquires and releases tracks. Ownership, the camera-on
    flag and stale-handle detection belong to DeviceCaptureManager.
    """

    @abstractmethod
    async def acquire(self, constraints: CaptureConstraints) -> List[Any]:
        """
        Acquire live tracks matching the constraints.

        Suspends while the device is opened (permission prompt, driver
        negotiation). Never blocks the event loop.

        Args:
            constraints: Requested resolution/frame-rate/audio policy

        Returns:
            List of media tracks (each has .kind and .stop())

        Raises:
            DeviceError: With the kind matching the failure
        """

    @abstractmethod
    def release(self, tracks: List[Any]) -> None:
        """
        Stop every track and release the device.

        Must tolerate tracks that are already stopped. Never raises.
        """

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if the capture backend can be used on this host.

        Returns:
            True if the backend (and a device) seem present
        """

    @abstractmethod
    def get_device_info(self) -> dict:
        """
        Describe the configured devices.

        Returns:
            Dictionary with backend name and device paths
        """


class DeviceError(BroadcastError):
    """
    Exception raised when the camera/microphone cannot be opened.

    Examples:
    - Permission refused (DENIED)
    - Camera unplugged (NOT_FOUND)
    - Camera used by another process (BUSY)
    - Unsupported resolution (OVERCONSTRAINED)
    """

    cause = ErrorCause.HARDWARE

    def __init__(
        self,
        message: Optional[str] = None,
        kind: DeviceErrorKind = DeviceErrorKind.UNKNOWN,
    ):
        super().__init__(message or DEVICE_ERROR_MESSAGES[kind], kind)
