"""
Capture Constants

Enums and device-specific constants for camera/microphone capture.

Note: Requested resolution, frame rate and device paths live in
config/settings.py. This file only holds enums and platform mappings.
"""

import errno
from enum import Enum


class DeviceState(Enum):
    """Camera flag observed by the orchestrator."""

    OFF = "off"
    ON = "on"


class DeviceErrorKind(Enum):
    """
    Why the camera/microphone could not be opened.

    Each kind needs a different user remediation.
    """

    DENIED = "denied"  # Permission refused
    NOT_FOUND = "not-found"  # No such device
    BUSY = "busy"  # Already used by another process
    OVERCONSTRAINED = "overconstrained"  # Resolution/rate not supported
    UNKNOWN = "unknown"


# errno values FFmpeg/V4L2 report for a device held by another process
BUSY_ERRNOS = {errno.EBUSY, errno.EAGAIN}

# errno values reported when a format/size cannot be negotiated
OVERCONSTRAINED_ERRNOS = {errno.EINVAL, errno.ERANGE}

# FFmpeg input format per platform.system()
VIDEO_INPUT_FORMATS = {
    "Linux": "v4l2",
    "Darwin": "avfoundation",
    "Windows": "dshow",
}

# Human readable messages per kind
DEVICE_ERROR_MESSAGES = {
    DeviceErrorKind.DENIED: "Camera or microphone permission was denied",
    DeviceErrorKind.NOT_FOUND: "No camera or microphone was found",
    DeviceErrorKind.BUSY: "Camera is already in use by another application",
    DeviceErrorKind.OVERCONSTRAINED: "Camera does not support the requested resolution or frame rate",
    DeviceErrorKind.UNKNOWN: "Unable to access camera or microphone",
}
