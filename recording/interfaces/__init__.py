"""
Recording Interfaces Package

Exposes the encoder interface and RecorderError.
"""

from recording.interfaces.encoder_interface import MediaEncoderInterface, RecorderError

# Public API
__all__ = [
    "MediaEncoderInterface",
    "RecorderError",
]
