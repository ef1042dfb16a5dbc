"""
Capture Module

Camera/microphone acquisition for the broadcast session.

Provides automatic detection and graceful fallback between the aiortc
device backend and a mock backend for testing.

Public API:
    - CaptureFactory: Factory for creating device backends
    - DeviceCaptureManager: Owner of the capture source lifetime
    - CaptureSource / CaptureConstraints: Borrowed handle and its request
    - DeviceError / DeviceErrorKind: Typed open failures
    - DeviceState: Camera on/off flag

Usage:
    from capture import CaptureFactory, DeviceCaptureManager

    manager = DeviceCaptureManager(CaptureFactory.create_device())
    source = await manager.open()
    manager.close(source)
"""

from capture.constants import DeviceErrorKind, DeviceState
from capture.controllers.device_capture_manager import DeviceCaptureManager
from capture.factory import CaptureFactory
from capture.interfaces.device_interface import DeviceError, DeviceInterface
from capture.models.capture_source import CaptureConstraints, CaptureSource

__all__ = [
    "CaptureConstraints",
    "CaptureFactory",
    "CaptureSource",
    "DeviceCaptureManager",
    "DeviceError",
    "DeviceErrorKind",
    "DeviceInterface",
    "DeviceState",
]
