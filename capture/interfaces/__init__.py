"""
Capture Interfaces Package

Exposes the abstract device interface and its exception.
"""

from capture.interfaces.device_interface import DeviceError, DeviceInterface

# Public API
__all__ = [
    "DeviceError",
    "DeviceInterface",
]
