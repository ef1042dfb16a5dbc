"""
Capture Controllers Package

Lifecycle owner of the capture source.
"""

from capture.controllers.device_capture_manager import DeviceCaptureManager

# Public API
__all__ = [
    "DeviceCaptureManager",
]
